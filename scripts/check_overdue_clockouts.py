"""Cron entry point: e-mail clock-out links for sessions left open past OVERDUE_HOURS.

Example crontab line (every 15 minutes)::

    */15 * * * * cd /srv/staffdesk && python scripts/check_overdue_clockouts.py
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.staffdesk.staffdesk.container import build_container


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    results = container.reminder_service.check_overdue()

    failed = [r for r in results if not r.success]
    print(f"OK: processed={len(results)} sent={len(results) - len(failed)} failed={len(failed)}")
    for r in failed:
        print(f"  log {r.id}: {r.error}")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
