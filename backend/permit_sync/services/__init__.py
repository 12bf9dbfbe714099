"""Service modules - Business logic layer"""
from .peach_service import PeachService
from .peach_sync_service import PeachSyncService

__all__ = [
    "PeachService",
    "PeachSyncService",
]
