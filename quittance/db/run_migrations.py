"""
Programmatic Alembic migration runner.

Allows running migrations without an alembic.ini by configuring the script location
to this package's migrations directory.

Usage examples:
    python -m quittance.db.run_migrations upgrade head
    python -m quittance.db.run_migrations downgrade -1
    python -m quittance.db.run_migrations history
"""

import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from alembic import command
from alembic.config import Config

from quittance.db.config import get_settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

# command name -> (alembic function, default positional args)
_COMMANDS: Dict[str, tuple[Callable[..., object], List[str]]] = {
    "upgrade": (command.upgrade, ["head"]),
    "downgrade": (command.downgrade, ["-1"]),
    "history": (command.history, []),
    "current": (command.current, []),
    "heads": (command.heads, []),
    "revision": (command.revision, []),
}


# PUBLIC_INTERFACE
def build_config(database_url: Optional[str] = None) -> Config:
    """Alembic Config pointing at the packaged migrations and the configured database."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    url = database_url or get_settings().sync_database_url
    # ConfigParser interpolation treats "%" specially
    cfg.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    return cfg


# PUBLIC_INTERFACE
def main(argv: List[str] | None = None, database_url: Optional[str] = None) -> None:
    """Run an Alembic command (default arguments apply when none are given)."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("No Alembic arguments provided. Example: upgrade head")
        sys.exit(1)

    cmd, other = args[0], args[1:]
    if cmd not in _COMMANDS:
        print(f"Unsupported Alembic command: {cmd}")
        sys.exit(2)

    func, defaults = _COMMANDS[cmd]
    logger.info("Alembic %s %s", cmd, " ".join(other or defaults))
    func(build_config(database_url), *(other or defaults))


if __name__ == "__main__":
    main()
