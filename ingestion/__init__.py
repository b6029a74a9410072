from .schemas import QueuedEvent, normalize_event, validate_event
from .service import IngestionService, SubmitResult, SubmitStatus

__all__ = [
    "QueuedEvent",
    "normalize_event",
    "validate_event",
    "IngestionService",
    "SubmitResult",
    "SubmitStatus",
]
