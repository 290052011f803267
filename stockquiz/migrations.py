from alembic.config import Config
from alembic import command
import os

from stockquiz.config import DATABASE_URL

ALEMBIC_INI = os.path.join(os.path.dirname(__file__), '..', 'alembic.ini')


def _config(database_url: str | None = None) -> Config:
    cfg = Config(ALEMBIC_INI)
    cfg.set_main_option('script_location', os.path.join(os.path.dirname(__file__), '..', 'alembic'))
    cfg.set_main_option('sqlalchemy.url', database_url or DATABASE_URL)
    return cfg


def upgrade_head(database_url: str | None = None):
    # programmatically run `alembic upgrade head`
    command.upgrade(_config(database_url), 'head')


def downgrade_base(database_url: str | None = None):
    command.downgrade(_config(database_url), 'base')
