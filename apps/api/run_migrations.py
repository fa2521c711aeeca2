#!/usr/bin/env python3
"""Container entrypoint step: bring the training schema up to date.

Waits for the database, then runs `alembic upgrade head`. Exits non-zero
if either step fails so the API never starts against a stale schema
(the adaptive engine writes to training_adjustment on first feedback).
"""

import logging
import os
import sys
import time
from dotenv import load_dotenv

load_dotenv()

WAIT_SECONDS = 30

logger = logging.getLogger("run_migrations")


def wait_for_database(max_wait: int = WAIT_SECONDS) -> bool:
    from core.database import check_db_connection

    for attempt in range(1, max_wait + 1):
        if check_db_connection():
            return True
        logger.info(f"Database unavailable, waiting ({attempt}/{max_wait})")
        time.sleep(1)
    return False


def alembic_upgrade_head() -> None:
    from alembic import command
    from alembic.config import Config

    here = os.path.dirname(os.path.abspath(__file__))
    cfg = Config(os.path.join(here, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(here, "alembic"))
    command.upgrade(cfg, "head")


def main() -> int:
    from core.logging import setup_logging

    setup_logging()

    if not wait_for_database():
        logger.error(f"Database not reachable after {WAIT_SECONDS}s")
        return 1

    try:
        alembic_upgrade_head()
    except Exception:
        logger.exception("Alembic upgrade failed")
        return 1

    logger.info("Training schema is at head")
    return 0


if __name__ == '__main__':
    sys.exit(main())
