"""
Programmatic Alembic runner; no alembic.ini needed.

The script location is this package's migrations directory and the database
URL comes from src.db.config.

Usage examples:
    python -m src.db.run_migrations upgrade head
    python -m src.db.run_migrations downgrade -1
    python -m src.db.run_migrations current
"""

import sys
from pathlib import Path
from typing import Callable, Dict, List, Sequence

from alembic import command
from alembic.config import Config

from src.db.config import get_settings

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


# PUBLIC_INTERFACE
def build_config() -> Config:
    """Alembic config pointing at this package's migrations and the configured database."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    cfg.set_main_option("sqlalchemy.url", get_settings().sync_database_url)
    return cfg


def _show(cfg: Config, *args: str) -> None:
    if not args:
        print("Usage: show <revision>")
        sys.exit(2)
    command.show(cfg, args[0])


# command name -> runner taking the config plus the remaining CLI arguments
COMMANDS: Dict[str, Callable[..., None]] = {
    "upgrade": lambda cfg, *rest: command.upgrade(cfg, *(rest or ("head",))),
    "downgrade": lambda cfg, *rest: command.downgrade(cfg, *(rest or ("-1",))),
    "history": command.history,
    "current": command.current,
    "heads": command.heads,
    "show": _show,
}


# PUBLIC_INTERFACE
def main(argv: Sequence[str] | None = None) -> None:
    """Run one Alembic command, e.g. main(["upgrade", "head"])."""
    args: List[str] = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("No Alembic arguments provided. Example: upgrade head")
        sys.exit(1)

    name, rest = args[0], args[1:]
    runner = COMMANDS.get(name)
    if runner is None:
        print(f"Unsupported Alembic command: {name}")
        sys.exit(2)
    runner(build_config(), *rest)


if __name__ == "__main__":
    main()
