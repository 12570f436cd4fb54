"""
Background synchronizers keeping the subject cache current.
"""

from schemaregistry.sync.base import BaseSynchronizer
from schemaregistry.sync.changelog import ChangeLogSynchronizer, SyncState
from schemaregistry.sync.polling import PollingSynchronizer

__all__ = [
    "BaseSynchronizer",
    "ChangeLogSynchronizer",
    "PollingSynchronizer",
    "SyncState",
]
