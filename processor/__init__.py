from .consumer import ConsumerState, EventConsumer
from .dead_letter import DeadLetterQueue
from .records import EventRecord, InvalidTimestampError, build_record, parse_timestamp

__all__ = [
    "ConsumerState",
    "EventConsumer",
    "DeadLetterQueue",
    "EventRecord",
    "InvalidTimestampError",
    "build_record",
    "parse_timestamp",
]
