import logging

import pymongo

from teamsync.db.mongodb import get_database

logger = logging.getLogger(__name__)


async def create_indexes(db):
    """Creates indexes for all collections to ensure performance."""
    logger.info("Creating database indexes...")

    # Participants
    await db["participants"].create_index("email", unique=True)
    await db["participants"].create_index("team_id")
    await db["participants"].create_index("role_preference")
    await db["participants"].create_index("technical_skills")
    await db["participants"].create_index("availability.status")
    # Discovery lists boosted participants first, newest first
    await db["participants"].create_index(
        [
            ("availability.status", pymongo.ASCENDING),
            ("visibility_boost.is_boost", pymongo.DESCENDING),
            ("created_at", pymongo.DESCENDING),
        ]
    )
    # Solo boost sweep
    await db["participants"].create_index(
        [
            ("availability.status", pymongo.ASCENDING),
            ("team_id", pymongo.ASCENDING),
            ("created_at", pymongo.ASCENDING),
        ]
    )

    # Teams
    await db["teams"].create_index("leader_id")
    await db["teams"].create_index("members.participant_id")
    await db["teams"].create_index([("created_at", pymongo.DESCENDING)])
    await db["teams"].create_index([("balance_score", pymongo.DESCENDING)])
    # Invite expiry sweep and pending lookups
    await db["teams"].create_index(
        [("pending_invites.status", pymongo.ASCENDING), ("pending_invites.expires_at", pymongo.ASCENDING)]
    )
    await db["teams"].create_index("pending_invites.participant_id")
    await db["teams"].create_index("join_requests.participant_id")

    # Distributed locks expire on their own once the holder is gone
    await db["distributed_locks"].create_index("expires_at", expireAfterSeconds=0)

    logger.info("Database indexes created successfully.")


async def init_db():
    db = await get_database()
    await create_indexes(db)
