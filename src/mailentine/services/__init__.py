"""
Services Layer.

Business logic orchestration:
- Daily notification pipeline
"""

from mailentine.services.notifier import (
    NotificationResult,
    NotificationService,
    NotificationStatus,
)


__all__ = [
    "NotificationResult",
    "NotificationService",
    "NotificationStatus",
]
