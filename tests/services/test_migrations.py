# tests/services/test_migrations.py
"""Tests for the Alembic migration scripts."""

from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker

from codeshare.scripts.migrate import main, run_upgrade_head
from codeshare.services.store import SqlSnapshotStore


def test_upgrade_creates_snapshot_table(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'board.db'}"

    run_upgrade_head(url)

    engine = create_engine(url)
    try:
        assert "board_snapshot" in inspect(engine).get_table_names()
        store = SqlSnapshotStore(sessionmaker(bind=engine))
        assert store.save(store.load()).version == 1
    finally:
        engine.dispose()


def test_downgrade_drops_snapshot_table(tmp_path, capsys) -> None:
    url = f"sqlite:///{tmp_path / 'board.db'}"
    run_upgrade_head(url)

    main(["--downgrade", "--url", url])

    engine = create_engine(url)
    try:
        assert "board_snapshot" not in inspect(engine).get_table_names()
    finally:
        engine.dispose()
    assert "downgraded" in capsys.readouterr().out
