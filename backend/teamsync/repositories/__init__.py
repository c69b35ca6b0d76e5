"""
Repository Pattern for Database Access

Provides a clean abstraction layer over MongoDB collections,
centralizing database operations and reducing code duplication.
"""

from teamsync.repositories.base import BaseRepository
from teamsync.repositories.distributed_locks import DistributedLocksRepository
from teamsync.repositories.participants import ParticipantRepository
from teamsync.repositories.teams import TeamRepository

__all__ = [
    "BaseRepository",
    "DistributedLocksRepository",
    "ParticipantRepository",
    "TeamRepository",
]
