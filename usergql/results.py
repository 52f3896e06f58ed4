"""Result types returned by every façade operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, Tuple, TypeVar, Union

T = TypeVar("T")

INVALID_RESPONSE_MESSAGE = "Invalid response structure"


class ErrorKind(str, Enum):
    """Classifies why a façade operation failed."""

    SERVER = "server"
    MALFORMED_RESPONSE = "malformed_response"
    TRANSPORT = "transport"


@dataclass(frozen=True)
class FacadeError:
    """Describes a failed operation without raising.

    ``errors`` carries the server's error collection for :attr:`ErrorKind.SERVER`
    and ``cause`` the caught exception for :attr:`ErrorKind.TRANSPORT`.
    """

    kind: ErrorKind
    message: str
    errors: Tuple[Any, ...] = ()
    cause: Optional[BaseException] = field(default=None, compare=False)

    @classmethod
    def server(cls, errors: Any) -> "FacadeError":
        # A single error object or message stays one entry.
        if isinstance(errors, (list, tuple)):
            collected = tuple(errors)
        else:
            collected = (errors,)
        first = collected[0] if collected else None
        if isinstance(first, dict) and isinstance(first.get("message"), str):
            message = first["message"]
        else:
            message = "The GraphQL service reported an error"
        return cls(kind=ErrorKind.SERVER, message=message, errors=collected)

    @classmethod
    def malformed(cls, detail: str | None = None) -> "FacadeError":
        message = INVALID_RESPONSE_MESSAGE
        if detail:
            message = f"{message}: {detail}"
        return cls(kind=ErrorKind.MALFORMED_RESPONSE, message=message)

    @classmethod
    def transport(cls, exc: BaseException) -> "FacadeError":
        return cls(kind=ErrorKind.TRANSPORT, message=str(exc) or type(exc).__name__, cause=exc)

    def __str__(self) -> str:
        return self.message


class OperationError(ValueError):
    """Raised by :meth:`Err.unwrap` and by generated code in raising mode."""

    def __init__(self, error: FacadeError) -> None:
        super().__init__(f"{error.kind.value}: {error.message}")
        self.error = error


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome holding the operation's value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value

    def as_pair(self) -> Tuple[T, None]:
        return self.value, None


@dataclass(frozen=True)
class Err:
    """Failed outcome holding a :class:`FacadeError`."""

    error: FacadeError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        raise OperationError(self.error) from self.error.cause

    def as_pair(self) -> Tuple[None, FacadeError]:
        return None, self.error


Result = Union[Ok[T], Err]


__all__ = [
    "INVALID_RESPONSE_MESSAGE",
    "Err",
    "ErrorKind",
    "FacadeError",
    "Ok",
    "OperationError",
    "Result",
]
