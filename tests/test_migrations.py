import sqlalchemy as sa

from stockquiz.migrations import downgrade_base, upgrade_head


def test_upgrade_and_downgrade(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    upgrade_head(url)

    engine = sa.create_engine(url)
    inspector = sa.inspect(engine)
    tables = set(inspector.get_table_names())
    assert {'student', 'question', 'quizschedule', 'quizsession', 'portfolio'} <= tables
    session_columns = {c['name'] for c in inspector.get_columns('quizsession')}
    assert {'completed_at', 'asset_delta', 'settled_at'} <= session_columns
    assert 'total_return_rate' not in {c['name'] for c in inspector.get_columns('portfolio')}

    downgrade_base(url)
    assert 'portfolio' not in sa.inspect(engine).get_table_names()
    engine.dispose()
