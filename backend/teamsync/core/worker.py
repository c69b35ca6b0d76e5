import asyncio
import logging
from typing import Optional

from teamsync.core.config import settings
from teamsync.core.housekeeping import AutomationSweeper, automation_loop
from teamsync.db.mongodb import get_database
from teamsync.repositories.distributed_locks import DistributedLocksRepository
from teamsync.repositories.participants import ParticipantRepository
from teamsync.repositories.teams import TeamRepository

logger = logging.getLogger(__name__)


class AutomationManager:
    def __init__(self, enabled: bool = True, interval_minutes: int = 60):
        self.enabled = enabled
        self.interval_minutes = interval_minutes
        self.task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()

    async def start(self):
        """Starts the periodic automation sweep in the background."""
        if not self.enabled:
            logger.info("Automation disabled, sweeper not started")
            return
        if self.running:
            return

        db = await get_database()
        sweeper = AutomationSweeper(
            ParticipantRepository(db),
            TeamRepository(db),
            formation_deadline=settings.TEAM_FORMATION_DEADLINE,
            event_end=settings.HACKATHON_END_DATE,
            locks=DistributedLocksRepository(db),
        )
        logger.info(f"Starting automation sweeper (every {self.interval_minutes} minutes)...")
        self.task = asyncio.create_task(automation_loop(sweeper, self.interval_minutes))

    async def stop(self):
        """Stops the sweeper task."""
        if self.task is None:
            return
        logger.info("Stopping automation sweeper...")
        self.task.cancel()
        try:
            await self.task
        except asyncio.CancelledError:
            pass
        self.task = None


# Global instance
automation_manager = AutomationManager(
    enabled=settings.AUTOMATION_ENABLED,
    interval_minutes=settings.AUTOMATION_INTERVAL_MINUTES,
)
