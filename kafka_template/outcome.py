"""Result of an asynchronous send: delivery metadata or a failure cause."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class RecordMetadata:
    """Where the broker stored a message."""

    destination: str
    partition: int
    offset: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "destination": self.destination,
            "partition": self.partition,
            "offset": self.offset,
        }


@dataclass(frozen=True)
class SendOutcome:
    """Settled send. Exactly one of metadata or cause is set."""

    metadata: Optional[RecordMetadata] = None
    cause: Optional[BaseException] = None

    def __post_init__(self) -> None:
        if (self.metadata is None) == (self.cause is None):
            raise ValueError("SendOutcome needs exactly one of metadata or cause")

    @classmethod
    def succeeded(cls, metadata: RecordMetadata) -> "SendOutcome":
        return cls(metadata=metadata)

    @classmethod
    def failed(cls, cause: BaseException) -> "SendOutcome":
        return cls(cause=cause)

    @property
    def success(self) -> bool:
        return self.metadata is not None
