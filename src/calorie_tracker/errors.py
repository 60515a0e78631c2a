"""Domain exceptions shared by services and the API layer."""

from dataclasses import dataclass, field
from enum import IntEnum


class DomainExceptionCode(IntEnum):
    """Machine-readable error codes carried by domain exceptions."""

    NOT_FOUND = 1
    BAD_REQUEST = 2
    INTERNAL_SERVER_ERROR = 3
    FORBIDDEN = 4
    VALIDATION_ERROR = 5
    UNAUTHORIZED = 6


@dataclass(frozen=True)
class Extension:
    """Structured detail attached to a domain exception."""

    message: str
    key: str


@dataclass(eq=False)
class DomainException(Exception):  # noqa: N818
    """Error raised by services, mapped to a status code by the API layer."""

    code: DomainExceptionCode
    message: str
    extensions: list[Extension] = field(default_factory=list)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class BadRequestError(DomainException):
    """Malformed domain request."""

    def __init__(self, message: str, extensions: list[Extension] | None = None):
        super().__init__(DomainExceptionCode.BAD_REQUEST, message, extensions or [])


class NotFoundError(DomainException):
    """Referenced entity does not exist."""

    def __init__(self, message: str, extensions: list[Extension] | None = None):
        super().__init__(DomainExceptionCode.NOT_FOUND, message, extensions or [])


class ForbiddenError(DomainException):
    """Acting user does not own the entity."""

    def __init__(self, message: str, extensions: list[Extension] | None = None):
        super().__init__(DomainExceptionCode.FORBIDDEN, message, extensions or [])


class InternalServerError(DomainException):
    """Upstream failure, such as a failed completion call."""

    def __init__(self, message: str, extensions: list[Extension] | None = None):
        super().__init__(
            DomainExceptionCode.INTERNAL_SERVER_ERROR, message, extensions or []
        )
