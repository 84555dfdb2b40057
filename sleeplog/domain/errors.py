"""Error kinds returned by the sleep log core.

Domain failures are values, not exceptions: validation and service calls
return either their result or a SleepServiceError. The HTTP boundary maps
each kind to a response category.
"""

from dataclasses import dataclass
from enum import StrEnum


class ErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    DUPLICATE_RESOURCE = "duplicate_resource"
    INTEGRITY_FAILURE = "integrity_failure"


@dataclass(frozen=True)
class SleepServiceError:
    kind: ErrorKind
    message: str

    @classmethod
    def not_found(cls, message: str) -> "SleepServiceError":
        return cls(ErrorKind.NOT_FOUND, message)

    @classmethod
    def invalid_input(cls, message: str) -> "SleepServiceError":
        return cls(ErrorKind.INVALID_INPUT, message)

    @classmethod
    def duplicate(cls, message: str) -> "SleepServiceError":
        return cls(ErrorKind.DUPLICATE_RESOURCE, message)

    @classmethod
    def integrity_failure(cls, message: str) -> "SleepServiceError":
        return cls(ErrorKind.INTEGRITY_FAILURE, message)
