"""
Feed engine services.

This module provides feed synchronization, fact submission, voting and the
theme preference.
"""

from .feed_service import FeedService
from .feed_state import FeedState
from .feed_sync import FeedSynchronizer, build_read_request
from .notifications import CollectingNotifier, LoggingNotifier, Notification, Notifier
from .submission import FactSubmissionPipeline, SubmissionResult, SubmissionStage
from .theme import JsonFileStore, KeyValueStore, MemoryStore, ThemePreference
from .votes import VoteMutator

__all__ = [
    "CollectingNotifier",
    "FactSubmissionPipeline",
    "FeedService",
    "FeedState",
    "FeedSynchronizer",
    "JsonFileStore",
    "KeyValueStore",
    "LoggingNotifier",
    "MemoryStore",
    "Notification",
    "Notifier",
    "SubmissionResult",
    "SubmissionStage",
    "ThemePreference",
    "VoteMutator",
    "build_read_request",
]
