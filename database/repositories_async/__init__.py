"""Async PostgreSQL repositories using asyncpg connection pooling"""

from database.repositories_async.base import BaseRepository
from database.repositories_async.ballots import BallotRepository
from database.repositories_async.cycles import CycleRepository
from database.repositories_async.directory import DirectoryRepository
from database.repositories_async.invites import InviteRepository

__all__ = [
    "BaseRepository",
    "BallotRepository",
    "CycleRepository",
    "DirectoryRepository",
    "InviteRepository",
]
