"""
JSON Storage Package.

Schedule documents and their repositories.
"""

from mailentine.infrastructure.storage.models import (
    LookupResult,
    ScheduledMessage,
    ScheduleDocument,
)
from mailentine.infrastructure.storage.repositories import (
    JsonDocumentStore,
    MessageRepository,
    StateRepository,
)


__all__ = [
    # Models
    "LookupResult",
    "ScheduledMessage",
    "ScheduleDocument",
    # Repositories
    "JsonDocumentStore",
    "MessageRepository",
    "StateRepository",
]
