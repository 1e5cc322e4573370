"""Message queue subsystem: deferred delivery of notification messages.

Public API:
- MessageStore: Persisted mapping of pending messages
- QueuePersistence: JSON snapshot load/save
- Scheduler: Reconciliation loop that arms timers and delivers due messages
- TimerSet: In-memory countdown timers keyed by message key

Types:
- QueuedMessage: A single pending message
- MessageLimits: Field length limits
- MessageValidationError: Raised for rejected batches
- Notifier: Async delivery capability
"""

from pushbridge.queue.persistence import QueuePersistence
from pushbridge.queue.scheduler import Scheduler
from pushbridge.queue.store import MessageStore
from pushbridge.queue.timers import TimerSet
from pushbridge.queue.types import (
    MessageLimits,
    MessageValidationError,
    Notifier,
    QueuedMessage,
    validate_batch,
)

__all__ = [
    "MessageLimits",
    "MessageStore",
    "MessageValidationError",
    "Notifier",
    "QueuePersistence",
    "QueuedMessage",
    "Scheduler",
    "TimerSet",
    "validate_batch",
]
