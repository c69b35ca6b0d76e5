#!/usr/bin/env python3
"""
Reset script: remove all participants, teams and held locks.

Intended for resetting a staging or demo event between runs. Indexes are
kept, so the application can be started again right away.

Usage:
    python scripts/reset_data.py [--dry-run] [--yes]
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from motor.motor_asyncio import AsyncIOMotorClient

from teamsync.core.config import settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

COLLECTIONS = ["participants", "teams", "distributed_locks"]


async def reset_data(dry_run: bool = False) -> bool:
    client = AsyncIOMotorClient(settings.MONGODB_URL)
    db = client[settings.DATABASE_NAME]

    try:
        for name in COLLECTIONS:
            if dry_run:
                count = await db[name].count_documents({})
                logger.info(f"Would delete {count} documents from {name}")
                continue
            result = await db[name].delete_many({})
            logger.info(f"✓ Deleted {result.deleted_count} documents from {name}")
    except Exception as e:
        logger.error(f"Reset failed: {e}")
        return False
    finally:
        client.close()

    if dry_run:
        logger.info("This was a DRY RUN - no changes were made")
    else:
        logger.info("✓ All event data cleared")
    return True


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Delete all participants and teams")
    parser.add_argument("--dry-run", action="store_true", help="Only count the documents that would be deleted")
    parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    args = parser.parse_args()

    if not args.dry_run and not args.yes:
        response = input(f"Delete all data in database '{settings.DATABASE_NAME}'? (yes/no): ")
        if response.lower() != "yes":
            logger.info("Reset cancelled")
            sys.exit(0)

    success = asyncio.run(reset_data(dry_run=args.dry_run))
    sys.exit(0 if success else 1)
