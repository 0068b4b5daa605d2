"""
Storage hygiene sweep: mark lapsed referral rewards and claim tokens as expired.

Safe to run at any interval (e.g. nightly cron); correctness never depends on it.
"""
import asyncio
import argparse
import os
import sys
from datetime import datetime

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from app.core.config import settings
from app.core.logging_config import setup_logging
from app.db.session import AsyncSessionLocal
from app.services.maintenance_service import expire_stale


async def main():
    parser = argparse.ArgumentParser(description="Expire lapsed referral rewards and claim tokens.")
    parser.add_argument(
        "--as-of", type=datetime.fromisoformat, default=None,
        help="UTC timestamp to evaluate expiry against (ISO format). Defaults to now.",
    )
    args = parser.parse_args()

    setup_logging(settings.LOG_LEVEL)
    async with AsyncSessionLocal() as db_session:
        await expire_stale(db_session, now=args.as_of)

if __name__ == "__main__":
    asyncio.run(main())
