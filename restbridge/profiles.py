"""
API Profiles.

An ApiProfile is a named backend target: base URL, auth kind and some
descriptive metadata. Profiles are registered once at startup from static
configuration and are never mutated afterwards. Per-caller switching and
reconfiguration happens in restbridge.session, on top of this registry.

Usage:
    registry = ApiProfileRegistry.default()

    profile = registry.get("FakeRESTApi")
    for profile in registry.list():
        print(profile.name, profile.base_url)
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .auth import AuthKind
from .errors import UnknownProfile

logger = logging.getLogger(__name__)


class UsageExamples(BaseModel):
    """Discovery hints shown by get_api_info."""

    model_config = ConfigDict(frozen=True)

    quick_start: list[str] = Field(default_factory=list)
    common_operations: list[str] = Field(default_factory=list)


class ApiProfile(BaseModel):
    """
    Static description of one backend API.

    Attributes:
        name: Unique registry key (e.g. "FakeRESTApi")
        display_name: Human-readable name
        base_url: Absolute URL; a trailing slash is tolerated
        auth_kind: How credentials are sent
        description: What the API offers
        usage: Optional usage examples for discovery
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique profile name")
    display_name: str = Field(..., description="Human-readable name")
    base_url: str = Field(..., description="Absolute base URL")
    auth_kind: AuthKind = Field(default=AuthKind.NONE, description="Auth treatment")
    description: str = Field(default="", description="Profile description")
    usage: UsageExamples = Field(default_factory=UsageExamples)

    @field_validator("base_url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an absolute http(s) URL: {value!r}")
        return value

    def to_dict(self) -> dict[str, Any]:
        """Discovery view (no usage examples)."""
        return {
            "name": self.name,
            "displayName": self.display_name,
            "baseUrl": self.base_url,
            "authType": self.auth_kind.value,
            "description": self.description,
        }


DEFAULT_PROFILES: tuple[ApiProfile, ...] = (
    ApiProfile(
        name="FakeRESTApi",
        display_name="Fake REST API",
        base_url="https://fakerestapi.azurewebsites.net",
        auth_kind=AuthKind.NONE,
        description=(
            "A simple fake REST API for testing and development with Activities, "
            "Authors, Books, Cover Photos, and Users endpoints."
        ),
        usage=UsageExamples(
            quick_start=[
                "switch_api: FakeRESTApi",
                "get_api_info",
                "get_activities (or get_books, get_authors, etc.)",
                'create_activity with title: "My New Task"',
            ],
            common_operations=[
                "List all activities: get_activities",
                "Get specific book: get_book_by_id with id: 1",
                "Create new author: create_author with required fields",
                "Update activity: update_activity with id and new data",
                "Delete user: delete_user with id",
            ],
        ),
    ),
    ApiProfile(
        name="ChargeNET",
        display_name="ChargeNET Gen.2 API",
        base_url="https://api.chargenet.com",
        auth_kind=AuthKind.BEARER,
        description=(
            "ChargeNET Generation 2 web-application API for electric vehicle "
            "charging management and operations."
        ),
        usage=UsageExamples(
            quick_start=[
                "switch_api: ChargeNET",
                "configure_api with base_url and auth_header",
                "get_api_info",
            ],
            common_operations=[
                "Authentication: post_account_login",
                "User management: get/post/put/delete user operations",
                "Charging sessions: start/stop charging operations",
            ],
        ),
    ),
)


class ApiProfileRegistry:
    """
    Registry of API profiles, keyed by name, in insertion order.

    Populated at startup and read-only afterwards. The first registered
    profile is the default unless one is named explicitly.
    """

    def __init__(
        self,
        profiles: tuple[ApiProfile, ...] | list[ApiProfile] = (),
        *,
        default: str | None = None,
    ) -> None:
        self._profiles: dict[str, ApiProfile] = {}
        for profile in profiles:
            self.register(profile)
        self._default_name = default
        if default is not None and default not in self._profiles:
            raise UnknownProfile(default, self.names())

    @classmethod
    def default(cls, default: str | None = None) -> ApiProfileRegistry:
        """Registry preloaded with the built-in profiles."""
        return cls(DEFAULT_PROFILES, default=default)

    def register(self, profile: ApiProfile) -> None:
        """
        Register a profile.

        Raises:
            ValueError: If the name is already registered
        """
        if profile.name in self._profiles:
            raise ValueError(f"API profile '{profile.name}' already registered")
        self._profiles[profile.name] = profile
        logger.info(f"[profiles] Registered API profile: {profile.name} ({profile.base_url})")

    def get(self, name: str) -> ApiProfile:
        """
        Get a profile by name.

        Raises:
            UnknownProfile: If not registered
        """
        profile = self._profiles.get(name)
        if profile is None:
            raise UnknownProfile(name, self.names())
        return profile

    def list(self) -> list[ApiProfile]:
        return list(self._profiles.values())

    def names(self) -> list[str]:
        return list(self._profiles.keys())

    @property
    def default_profile(self) -> ApiProfile:
        """The profile new sessions start on."""
        if self._default_name is not None:
            return self._profiles[self._default_name]
        if not self._profiles:
            raise UnknownProfile("<default>")
        return next(iter(self._profiles.values()))

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, name: object) -> bool:
        return name in self._profiles

    def __repr__(self) -> str:
        return f"<ApiProfileRegistry profiles={self.names()}>"
