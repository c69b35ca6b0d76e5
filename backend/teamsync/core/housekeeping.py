"""
Automation Sweeper

Periodic maintenance over participants and teams. Each task only flips
one-directional fields (boosted, expired, locked, not available), so running
a task twice, or concurrently with user requests, leaves the same state as
running it once.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Dict, Optional

from teamsync.core import Clock, ensure_utc, utc_now
from teamsync.core.config import settings
from teamsync.core.metrics import automation_documents_updated_total, automation_task_runs_total
from teamsync.repositories.distributed_locks import DistributedLocksRepository
from teamsync.repositories.participants import ParticipantRepository
from teamsync.repositories.teams import TeamRepository

logger = logging.getLogger(__name__)


class AutomationSweeper:
    def __init__(
        self,
        participants: ParticipantRepository,
        teams: TeamRepository,
        clock: Clock = utc_now,
        formation_deadline: Optional[datetime] = None,
        event_end: Optional[datetime] = None,
        solo_boost_days: int = settings.SOLO_BOOST_DAYS,
        locks: Optional[DistributedLocksRepository] = None,
    ):
        self.participants = participants
        self.teams = teams
        self.clock = clock
        self.formation_deadline = ensure_utc(formation_deadline)
        self.event_end = ensure_utc(event_end)
        self.solo_boost_days = solo_boost_days
        self.locks = locks

    async def boost_solo_participants(self) -> int:
        """Boost available, teamless participants who have been solo for a while."""
        now = self.clock()
        cutoff = now - timedelta(days=self.solo_boost_days)
        boosted = await self.participants.boost_solo(created_before=cutoff, now=now)
        if boosted:
            logger.info(f"Boosted visibility of {boosted} solo participants")
        return boosted

    async def expire_old_invites(self) -> int:
        """Flip every overdue Pending invite to Expired."""
        touched = await self.teams.expire_invites(self.clock())
        if touched:
            logger.info(f"Expired overdue invites on {touched} teams")
        return touched

    async def lock_profiles_after_deadline(self) -> int:
        """Lock all profiles once the team formation deadline has passed."""
        if self.formation_deadline is None:
            return 0
        if self.clock() <= self.formation_deadline:
            return 0
        locked = await self.participants.lock_all_profiles()
        if locked:
            logger.info(f"Locked {locked} profiles after the team formation deadline")
        return locked

    async def disable_availability_after_event(self) -> int:
        """Mark every Available participant Not Available once the event is over."""
        if self.event_end is None:
            return 0
        now = self.clock()
        if now <= self.event_end:
            return 0
        disabled = await self.participants.disable_available(now)
        if disabled:
            logger.info(f"Disabled availability of {disabled} participants after the event")
        return disabled

    async def cleanup_expired_locks(self) -> int:
        """Drop team locks left behind by crashed holders."""
        return await self.locks.cleanup_expired_locks()

    def _tasks(self) -> Dict[str, Callable[[], Awaitable[int]]]:
        tasks: Dict[str, Callable[[], Awaitable[int]]] = {
            "boost_solo_participants": self.boost_solo_participants,
            "expire_old_invites": self.expire_old_invites,
            "lock_profiles_after_deadline": self.lock_profiles_after_deadline,
            "disable_availability_after_event": self.disable_availability_after_event,
        }
        if self.locks is not None:
            tasks["cleanup_expired_locks"] = self.cleanup_expired_locks
        return tasks

    async def run_all(self) -> Dict[str, Optional[int]]:
        """
        Run every task once.

        A failing task is logged and skipped for this cycle; the remaining
        tasks still run. Returns the number of documents each task changed
        (None for a task that failed).
        """
        logger.info("Running automation tasks...")
        results: Dict[str, Optional[int]] = {}
        for name, task in self._tasks().items():
            try:
                changed = await task()
            except Exception as e:
                logger.error(f"Automation task {name} failed: {e}")
                automation_task_runs_total.labels(task=name, status="failed").inc()
                results[name] = None
                continue
            automation_task_runs_total.labels(task=name, status="success").inc()
            automation_documents_updated_total.labels(task=name).inc(changed)
            results[name] = changed
        logger.info("Automation tasks completed")
        return results


async def automation_loop(sweeper: AutomationSweeper, interval_minutes: int = settings.AUTOMATION_INTERVAL_MINUTES):
    """
    Runs the automation tasks every ``interval_minutes`` until cancelled.
    """
    while True:
        await sweeper.run_all()
        await asyncio.sleep(interval_minutes * 60)
