"""record when a completed session was applied to the portfolio
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0002_add_session_settlement'
down_revision = '0001_initial'
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table("quizsession") as batch_op:
        batch_op.add_column(sa.Column("asset_delta", sa.Integer(), nullable=True))
        batch_op.add_column(sa.Column("settled_at", sa.DateTime(timezone=True), nullable=True))


def downgrade():
    with op.batch_alter_table("quizsession") as batch_op:
        batch_op.drop_column("settled_at")
        batch_op.drop_column("asset_delta")
