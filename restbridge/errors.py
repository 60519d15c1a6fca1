"""
Exceptions for restbridge.

Every failure the adapter core can produce belongs to one closed taxonomy
rooted at RestBridgeError. The exceptions are raised inside the core and
converted to Result.Err at the dispatcher and catalog boundary, so callers
of an operation never see them directly.

Taxonomy:
    ValidationError   - malformed or missing caller input (never reaches the network)
    UnknownProfile    - ApiProfile lookup miss
    UnknownOperation  - catalog lookup miss
    UnknownAuthKind   - no AuthTemplate for the auth kind
    InvalidPath       - unresolvable path placeholder
    TransportError    - no HTTP response obtained
    HttpError         - non-2xx HTTP response
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class RestBridgeError(Exception):
    """Base exception for adapter errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True, slots=True)
class FieldIssue:
    """A single problem with one input field."""

    field: str
    problem: str  # "missing" or "expected <type>, got <type>"

    def __str__(self) -> str:
        return f"{self.field}: {self.problem}"


class ValidationError(RestBridgeError):
    """
    Raised when caller input does not match a ResourceSchema.

    Carries every issue found, not just the first one.
    """

    def __init__(self, resource_name: str, issues: list[FieldIssue]):
        self.resource_name = resource_name
        self.issues = list(issues)
        detail = "; ".join(str(issue) for issue in self.issues)
        super().__init__(f"Invalid input for {resource_name}: {detail}")

    @property
    def fields(self) -> list[str]:
        """Names of all offending fields, in report order."""
        return [issue.field for issue in self.issues]


class UnknownProfile(RestBridgeError):
    """Raised when an ApiProfile name is not registered."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        self.available = available or []
        message = f"Unknown API profile '{name}'"
        if self.available:
            message += f". Available APIs: {', '.join(self.available)}"
        super().__init__(message)


class UnknownOperation(RestBridgeError):
    """Raised when a tool name does not resolve to an Operation."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown operation '{name}'")


class UnknownAuthKind(RestBridgeError):
    """Raised when no AuthTemplate exists for an auth kind."""

    def __init__(self, auth_kind: str):
        self.auth_kind = auth_kind
        super().__init__(f"No auth template for auth kind '{auth_kind}'")


class InvalidPath(RestBridgeError):
    """Raised when a path template placeholder has no value."""

    def __init__(self, path_template: str, missing: list[str]):
        self.path_template = path_template
        self.missing = missing
        super().__init__(
            f"Missing path parameter(s) {', '.join(missing)} for {path_template}"
        )


class TransportError(RestBridgeError):
    """Raised when no HTTP response could be obtained."""


class HttpError(RestBridgeError):
    """Raised for a non-2xx HTTP response."""

    def __init__(self, status_code: int, raw_body: Any = None):
        self.status_code = status_code
        self.raw_body = raw_body
        super().__init__(f"HTTP error! status: {status_code}")
