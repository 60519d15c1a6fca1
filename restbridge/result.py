"""
Operation Result.

Every dispatched operation returns a Result instead of raising:

    Ok(payload)                                  - success
    Err(kind, message, http_status, raw_body)    - failure

Two marker payloads describe successful outcomes that carry no body:

    NOT_FOUND - a by-id read answered 404 (an expected "absent" outcome)
    DELETED   - a 2xx response with an empty body (typically delete)

Usage:
    result = await dispatcher.execute(operation, active, {"id": 1}, None)

    if result.is_ok:
        if result.payload is NOT_FOUND:
            print("not found")
        else:
            print(result.payload)
    else:
        print(result.message, result.http_status)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from .errors import (
    HttpError,
    InvalidPath,
    RestBridgeError,
    TransportError,
    UnknownAuthKind,
    UnknownOperation,
    UnknownProfile,
    ValidationError,
)


class _Marker:
    """Named sentinel payload."""

    __slots__ = ("_name",)

    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name


NOT_FOUND = _Marker("NOT_FOUND")
DELETED = _Marker("DELETED")


class ErrorKind(Enum):
    """Closed set of failure categories carried by Err."""

    VALIDATION = "validation"
    UNKNOWN_PROFILE = "unknown_profile"
    UNKNOWN_OPERATION = "unknown_operation"
    UNKNOWN_AUTH_KIND = "unknown_auth_kind"
    INVALID_PATH = "invalid_path"
    TRANSPORT = "transport"
    HTTP = "http"


@dataclass(frozen=True, slots=True)
class Ok:
    """Successful outcome."""

    payload: Any = None

    @property
    def is_ok(self) -> bool:
        return True

    @property
    def is_not_found(self) -> bool:
        return self.payload is NOT_FOUND

    @property
    def is_deleted(self) -> bool:
        return self.payload is DELETED


@dataclass(frozen=True, slots=True)
class Err:
    """Failed outcome."""

    kind: ErrorKind
    message: str
    http_status: int | None = None
    raw_body: Any = None
    fields: tuple[str, ...] = ()

    @property
    def is_ok(self) -> bool:
        return False

    @classmethod
    def from_exception(cls, error: RestBridgeError) -> Err:
        """Map an adapter exception onto its Err shape."""
        if isinstance(error, HttpError):
            return cls(
                kind=ErrorKind.HTTP,
                message=error.message,
                http_status=error.status_code,
                raw_body=error.raw_body,
            )
        if isinstance(error, ValidationError):
            return cls(
                kind=ErrorKind.VALIDATION,
                message=error.message,
                fields=tuple(error.fields),
            )
        return cls(kind=_KIND_BY_TYPE.get(type(error), ErrorKind.TRANSPORT), message=error.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.http_status is not None:
            data["status_code"] = self.http_status
        if self.raw_body is not None:
            data["raw_body"] = self.raw_body
        if self.fields:
            data["fields"] = list(self.fields)
        return data


_KIND_BY_TYPE: dict[type, ErrorKind] = {
    UnknownProfile: ErrorKind.UNKNOWN_PROFILE,
    UnknownOperation: ErrorKind.UNKNOWN_OPERATION,
    UnknownAuthKind: ErrorKind.UNKNOWN_AUTH_KIND,
    InvalidPath: ErrorKind.INVALID_PATH,
    TransportError: ErrorKind.TRANSPORT,
}


Result = Union[Ok, Err]
