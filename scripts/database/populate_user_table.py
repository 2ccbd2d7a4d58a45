#!/usr/bin/env python3
"""
Populate User Table

Creates stub users (user ID and name) in the wiki user table from the user
columns of other tables. Useful to fill the user table after importing
content from another wiki. Under the actor scheme, actors are then linked to
the stub users created for them.

Usage:
    populate-user-table
    populate-user-table --tables "revision|logging"
    populate-user-table --db otherwiki --batch-size 500
    populate-user-table --identity-scheme actor
"""

import argparse
import functools
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

# Allow running as a plain script from a checkout
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from services.user_table_population_service import UserTablePopulationService
from user_table.config import AUTO_SCHEME, IdentityScheme, PopulateConfig
from user_table.exceptions import ConfigurationError, UsageError
from user_table.registry import ACTOR_TABLE, VALID_TABLES, parse_table_list

script_name = os.path.basename(__file__).replace(".py", "")
logger = logging.getLogger(__name__)


def configure_logging(log_dir: Optional[str] = None) -> None:
    """Log to stdout and to logs/<script>.log."""
    log_dir = log_dir or os.getenv("POPULATE_LOG_DIR", "logs")
    os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(os.path.join(log_dir, f"{script_name}.log")),
            logging.StreamHandler(sys.stdout),
        ],
    )


def handle_keyboard_interrupt(exit_message="Script interrupted by user"):
    """Decorator to handle KeyboardInterrupt and exit with status 130."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                logger.info(f"\n{exit_message}; rerun to resume")
                return 130
        return wrapper
    return decorator


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    legacy_tables = ", ".join(name for name in VALID_TABLES if name != ACTOR_TABLE)
    parser = argparse.ArgumentParser(
        description="Populates the user table creating stub users (user ID and name) from other tables."
    )
    parser.add_argument(
        "--db",
        help="Database name, if we don't want to write to the database in DATABASE_URL",
    )
    parser.add_argument(
        "--tables",
        help=f"Tables to grab users from (pipe separated list): {legacy_tables}. "
             f"Not allowed when the actor table is being used",
    )
    parser.add_argument(
        "--batch-size",
        type=positive_int,
        help="Rows fetched per page (default: POPULATE_BATCH_SIZE or 200)",
    )
    parser.add_argument(
        "--identity-scheme",
        choices=[AUTO_SCHEME] + [scheme.value for scheme in IdentityScheme],
        help="Whether the wiki stores users on each row (legacy) or in the actor table "
             "(default: WIKI_IDENTITY_SCHEME or auto-detect)",
    )
    return parser


@handle_keyboard_interrupt()
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        config = PopulateConfig.from_env(
            database_name=args.db,
            batch_size=args.batch_size,
            identity_scheme=args.identity_scheme,
        )
    except ConfigurationError as e:
        logger.error(f"❌ {e}")
        return 1

    try:
        service = UserTablePopulationService(config)
    except ConnectionError as e:
        logger.error(f"❌ {e}")
        return 1

    try:
        service.run(parse_table_list(args.tables))
    except (UsageError, ConfigurationError) as e:
        logger.error(f"❌ {e}")
        return 1
    finally:
        service.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
