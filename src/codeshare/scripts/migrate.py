# src/codeshare/scripts/migrate.py
"""Apply or roll back the board schema with Alembic."""
from __future__ import annotations

import argparse
import os

from alembic import command
from alembic.config import Config

from codeshare.core.settings import settings

MIGRATIONS_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations")
)


def alembic_config(url: str | None = None) -> Config:
    """Return an Alembic config pointed at the project's migrations folder."""
    cfg = Config(os.path.join(MIGRATIONS_DIR, "alembic.ini"))
    cfg.set_main_option("script_location", MIGRATIONS_DIR)
    cfg.set_main_option("sqlalchemy.url", url or settings.database_url_sync)
    return cfg


def run_upgrade_head(url: str | None = None) -> None:
    command.upgrade(alembic_config(url), "head")


def run_downgrade_base(url: str | None = None) -> None:
    command.downgrade(alembic_config(url), "base")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Migrate the configured board database")
    parser.add_argument(
        "--downgrade",
        action="store_true",
        help="Drop the board tables instead of upgrading to head.",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Override database URL (defaults to DATABASE_URL)",
    )
    args = parser.parse_args(argv)

    if args.downgrade:
        run_downgrade_base(args.url)
        print("[migrate] downgraded to base")
    else:
        run_upgrade_head(args.url)
        print("[migrate] upgraded to head")


if __name__ == "__main__":
    main()
