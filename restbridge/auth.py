"""
Auth templates.

Maps an auth kind to the HTTP header that carries its credential:

    bearer -> Authorization: Bearer <credential>
    apikey -> X-API-Key: <credential>
    basic  -> Authorization: Basic <credential>
    none   -> no header at all

The registry is pure lookup/formatting and safe to share between
concurrent requests.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum

from .errors import UnknownAuthKind


class AuthKind(str, Enum):
    """Authentication treatments a backend API can require."""

    NONE = "none"
    BEARER = "bearer"
    APIKEY = "apikey"
    BASIC = "basic"

    @classmethod
    def parse(cls, value: str | AuthKind) -> AuthKind:
        """Parse a string (case-insensitive) into an AuthKind."""
        if isinstance(value, AuthKind):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise UnknownAuthKind(value) from None


@dataclass(frozen=True, slots=True)
class AuthTemplate:
    """Header formatting rule for one auth kind."""

    auth_kind: AuthKind
    header_name: str
    value_prefix: str
    description: str = ""

    def format(self, credential: str) -> str:
        return f"{self.value_prefix}{credential}"


DEFAULT_AUTH_TEMPLATES: tuple[AuthTemplate, ...] = (
    AuthTemplate(
        auth_kind=AuthKind.BEARER,
        header_name="Authorization",
        value_prefix="Bearer ",
        description="JWT or Bearer token authentication",
    ),
    AuthTemplate(
        auth_kind=AuthKind.APIKEY,
        header_name="X-API-Key",
        value_prefix="",
        description="API key authentication",
    ),
    AuthTemplate(
        auth_kind=AuthKind.BASIC,
        header_name="Authorization",
        value_prefix="Basic ",
        description="Basic authentication (base64 encoded username:password)",
    ),
)


class AuthTemplateRegistry:
    """
    Registry of auth templates, one per auth kind.

    Example:
        registry = AuthTemplateRegistry()
        registry.format(AuthKind.BEARER, "abc")       # "Bearer abc"
        registry.header_for(AuthKind.APIKEY, "k")     # ("X-API-Key", "k")
        registry.format(AuthKind.NONE, "ignored")     # None
    """

    def __init__(self, templates: tuple[AuthTemplate, ...] = DEFAULT_AUTH_TEMPLATES):
        self._templates: dict[AuthKind, AuthTemplate] = {}
        for template in templates:
            if template.auth_kind is AuthKind.NONE:
                raise ValueError("auth kind 'none' cannot have a template")
            if template.auth_kind in self._templates:
                raise ValueError(f"Duplicate auth template for '{template.auth_kind.value}'")
            self._templates[template.auth_kind] = template

    def resolve(self, auth_kind: AuthKind | str) -> AuthTemplate:
        """
        Get the template for an auth kind.

        Raises:
            UnknownAuthKind: For 'none' or an unregistered kind
        """
        kind = AuthKind.parse(auth_kind)
        template = self._templates.get(kind)
        if template is None:
            raise UnknownAuthKind(kind.value)
        return template

    def format(self, auth_kind: AuthKind | str, credential: str) -> str | None:
        """Header value for the credential, or None for 'none'."""
        header = self.header_for(auth_kind, credential)
        return header[1] if header else None

    def header_for(
        self, auth_kind: AuthKind | str, credential: str
    ) -> tuple[str, str] | None:
        """(header name, header value) for the credential, or None for 'none'."""
        kind = AuthKind.parse(auth_kind)
        if kind is AuthKind.NONE:
            return None
        template = self.resolve(kind)
        return template.header_name, template.format(credential)

    def list(self) -> list[AuthTemplate]:
        return list(self._templates.values())

    def __contains__(self, auth_kind: object) -> bool:
        return auth_kind in self._templates


def encode_basic_credential(username: str, password: str) -> str:
    """Encode username/password as the credential for Basic auth."""
    return base64.b64encode(f"{username}:{password}".encode()).decode()
