"""
Session-scoped API configuration.

The registry in restbridge.profiles is static and shared. What a caller is
*currently* pointed at lives here, in an ApiSession owned by that caller:

    registry (static, shared)
        └── ApiSession (one per caller)
                └── ActiveProfile (immutable snapshot handed to each dispatch)

Switching or reconfiguring one session never affects another, because
each session only ever replaces its own ActiveProfile.

Usage:
    store = SessionStore(registry)
    session = store.create()

    session.activate("ChargeNET")
    session.overlay(credential="token-123")

    result = await dispatcher.execute(op, session.active, {}, None)
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from .auth import AuthKind
from .profiles import ApiProfile, ApiProfileRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ActiveProfile:
    """
    The effective configuration of one session.

    Starts as a copy of an ApiProfile and may be overlaid with a different
    base URL, auth kind or credential. The backing ApiProfile is kept for
    display and is never modified.
    """

    profile: ApiProfile
    base_url: str
    auth_kind: AuthKind
    credential: str | None = None

    @classmethod
    def from_profile(cls, profile: ApiProfile, credential: str | None = None) -> ActiveProfile:
        return cls(
            profile=profile,
            base_url=profile.base_url,
            auth_kind=profile.auth_kind,
            credential=credential,
        )

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def is_overlaid(self) -> bool:
        """True if base URL or auth kind differ from the registry profile."""
        return (
            self.base_url != self.profile.base_url
            or self.auth_kind is not self.profile.auth_kind
        )

    def to_dict(self) -> dict[str, Any]:
        """Discovery view; the credential itself is never exposed."""
        return {
            "name": self.profile.name,
            "displayName": self.profile.display_name,
            "baseUrl": self.base_url,
            "authType": self.auth_kind.value,
            "authConfigured": self.credential is not None,
            "description": self.profile.description,
        }


class ApiSession:
    """
    One caller's view of the profile registry.

    Attributes:
        session_id: Stable identifier of the owning caller
        active: Current ActiveProfile (replaced, never mutated)
    """

    def __init__(
        self,
        registry: ApiProfileRegistry,
        *,
        session_id: str | None = None,
        credentials: dict[str, str] | None = None,
    ) -> None:
        """
        Args:
            registry: Shared profile registry
            session_id: Identifier (generated if omitted)
            credentials: Initial credential per profile name, applied
                whenever that profile is activated
        """
        self._registry = registry
        self.session_id = session_id or uuid.uuid4().hex
        self._credentials = dict(credentials or {})
        default = registry.default_profile
        self.active = ActiveProfile.from_profile(default, self._credentials.get(default.name))

    @property
    def registry(self) -> ApiProfileRegistry:
        return self._registry

    def activate(self, name: str) -> ActiveProfile:
        """
        Point this session at another registered profile.

        Any previous overlay is discarded.

        Raises:
            UnknownProfile: If the profile is not registered
        """
        profile = self._registry.get(name)
        self.active = ActiveProfile.from_profile(profile, self._credentials.get(profile.name))
        logger.info(f"[session:{self.session_id[:8]}] Switched to API profile {name}")
        return self.active

    def overlay(
        self,
        *,
        base_url: str | None = None,
        auth_kind: AuthKind | str | None = None,
        credential: str | None = None,
    ) -> ActiveProfile:
        """
        Override parts of the active configuration for this session only.

        Arguments left as None keep their current value.

        Raises:
            UnknownAuthKind: If auth_kind cannot be parsed
        """
        changes: dict[str, Any] = {}
        if base_url is not None:
            changes["base_url"] = base_url
        if auth_kind is not None:
            changes["auth_kind"] = AuthKind.parse(auth_kind)
        if credential is not None:
            changes["credential"] = credential
            self._credentials[self.active.profile.name] = credential

        if changes:
            self.active = replace(self.active, **changes)
            logger.info(
                f"[session:{self.session_id[:8]}] Reconfigured {self.active.name}: "
                f"{sorted(changes)}"
            )
        return self.active

    def __repr__(self) -> str:
        return f"<ApiSession id={self.session_id[:8]} active={self.active.name}>"


class SessionStore:
    """
    In-memory map of session id -> ApiSession.

    The store itself is shared; each ApiSession it holds is owned by a
    single caller. Ids come from the MCP transport, never from request
    bodies. Sessions idle for longer than idle_ttl seconds are evicted,
    and once max_sessions is reached the least recently used one makes
    room for a new one.
    """

    def __init__(
        self,
        registry: ApiProfileRegistry,
        *,
        credentials: dict[str, str] | None = None,
        max_sessions: int = 1000,
        idle_ttl: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        if idle_ttl <= 0:
            raise ValueError("idle_ttl must be positive")
        self._registry = registry
        self._credentials = dict(credentials or {})
        self._max_sessions = max_sessions
        self._idle_ttl = idle_ttl
        self._clock = clock
        # Least recently used first
        self._sessions: OrderedDict[str, ApiSession] = OrderedDict()
        self._last_used: dict[str, float] = {}

    def create(self, session_id: str | None = None) -> ApiSession:
        self.evict_expired()
        while len(self._sessions) >= self._max_sessions:
            oldest = next(iter(self._sessions))
            self.drop(oldest)
            logger.info(f"[session_store] Evicted least recently used session {oldest[:8]}")

        session = ApiSession(
            self._registry,
            session_id=session_id,
            credentials=self._credentials,
        )
        self._sessions[session.session_id] = session
        self._last_used[session.session_id] = self._clock()
        logger.debug(f"[session_store] Created session {session.session_id[:8]}")
        return session

    def get(self, session_id: str) -> ApiSession | None:
        self.evict_expired()
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
            self._last_used[session_id] = self._clock()
        return session

    def drop(self, session_id: str) -> bool:
        self._last_used.pop(session_id, None)
        return self._sessions.pop(session_id, None) is not None

    def evict_expired(self) -> list[str]:
        """Drop sessions idle for longer than idle_ttl; returns their ids."""
        cutoff = self._clock() - self._idle_ttl
        expired: list[str] = []
        for session_id in self._sessions:
            if self._last_used[session_id] > cutoff:
                break
            expired.append(session_id)
        for session_id in expired:
            self.drop(session_id)
        if expired:
            logger.info(f"[session_store] Evicted {len(expired)} idle session(s)")
        return expired

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
