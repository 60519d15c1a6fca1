"""
Tests for session-scoped API configuration.

Tests cover:
- ActiveProfile defaults and overlay
- Switching profiles
- Isolation between concurrent sessions
- SessionStore lifecycle and eviction
"""

import pytest

from restbridge.auth import AuthKind
from restbridge.errors import UnknownAuthKind, UnknownProfile
from restbridge.session import ActiveProfile, ApiSession, SessionStore


class TestActiveProfile:
    """Tests for ActiveProfile."""

    def test_from_profile(self, profile_registry):
        profile = profile_registry.get("ChargeNET")
        active = ActiveProfile.from_profile(profile, "tok")

        assert active.base_url == profile.base_url
        assert active.auth_kind is AuthKind.BEARER
        assert active.credential == "tok"
        assert not active.is_overlaid

    def test_to_dict_hides_credential(self, profile_registry):
        active = ActiveProfile.from_profile(profile_registry.get("ChargeNET"), "secret")
        data = active.to_dict()

        assert data["authConfigured"] is True
        assert "secret" not in str(data)


class TestApiSession:
    """Tests for ApiSession."""

    def test_starts_on_default_profile(self, profile_registry):
        session = ApiSession(profile_registry)

        assert session.active.name == "FakeRESTApi"
        assert session.active.credential is None
        assert session.session_id

    def test_activate(self, session):
        active = session.activate("ChargeNET")

        assert active.name == "ChargeNET"
        assert session.active is active
        assert active.base_url == "https://api.chargenet.com"

    def test_activate_unknown_keeps_current(self, session):
        with pytest.raises(UnknownProfile):
            session.activate("Nope")

        assert session.active.name == "FakeRESTApi"

    def test_overlay_changes_only_given_fields(self, session):
        session.activate("ChargeNET")
        active = session.overlay(base_url="http://localhost:9000")

        assert active.base_url == "http://localhost:9000"
        assert active.auth_kind is AuthKind.BEARER
        assert active.credential is None
        assert active.is_overlaid

    def test_overlay_parses_auth_kind(self, session):
        assert session.overlay(auth_kind="APIKEY").auth_kind is AuthKind.APIKEY

    def test_overlay_unknown_auth_kind(self, session):
        before = session.active

        with pytest.raises(UnknownAuthKind):
            session.overlay(auth_kind="digest")

        assert session.active is before

    def test_overlay_never_mutates_registry(self, session, profile_registry):
        session.overlay(base_url="http://elsewhere")

        assert profile_registry.get("FakeRESTApi").base_url == (
            "https://fakerestapi.azurewebsites.net"
        )

    def test_activate_discards_overlay_but_keeps_credential(self, session):
        session.activate("ChargeNET")
        session.overlay(base_url="http://localhost:9000", credential="tok")

        session.activate("FakeRESTApi")
        active = session.activate("ChargeNET")

        assert active.base_url == "https://api.chargenet.com"
        assert active.credential == "tok"

    def test_initial_credentials(self, profile_registry):
        session = ApiSession(profile_registry, credentials={"ChargeNET": "seed"})

        assert session.activate("ChargeNET").credential == "seed"


class TestSessionIsolation:
    """Switching or configuring one session never leaks into another."""

    def test_switch_is_per_session(self, session_store):
        a = session_store.create()
        b = session_store.create()

        a.activate("ChargeNET")

        assert a.active.name == "ChargeNET"
        assert b.active.name == "FakeRESTApi"

    def test_overlay_is_per_session(self, session_store):
        a = session_store.create()
        b = session_store.create()

        a.activate("ChargeNET")
        a.overlay(credential="a-token")
        b.activate("ChargeNET")

        assert a.active.credential == "a-token"
        assert b.active.credential is None


class TestSessionStore:
    """Tests for SessionStore."""

    def test_create_and_get(self, session_store):
        session = session_store.create()

        assert session_store.get(session.session_id) is session
        assert session.session_id in session_store
        assert len(session_store) == 1

    def test_create_with_id(self, session_store):
        session = session_store.create("fixed-id")

        assert session.session_id == "fixed-id"
        assert session_store.get("fixed-id") is session
        assert session_store.get("other-id") is None
        assert len(session_store) == 1

    def test_drop(self, session_store):
        session = session_store.create()

        assert session_store.drop(session.session_id) is True
        assert session_store.drop(session.session_id) is False
        assert session_store.get(session.session_id) is None

    def test_seeded_credentials(self, profile_registry):
        store = SessionStore(profile_registry, credentials={"ChargeNET": "seed"})
        session = store.create()

        assert session.activate("ChargeNET").credential == "seed"


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestSessionEviction:
    """Idle and size-based eviction keep the store bounded."""

    def test_idle_sessions_evicted(self, profile_registry):
        clock = FakeClock()
        store = SessionStore(profile_registry, idle_ttl=60, clock=clock)
        stale = store.create()
        clock.now = 30
        fresh = store.create()

        clock.now = 61

        assert store.get(stale.session_id) is None
        assert store.get(fresh.session_id) is fresh
        assert len(store) == 1

    def test_get_refreshes_idle_clock(self, profile_registry):
        clock = FakeClock()
        store = SessionStore(profile_registry, idle_ttl=60, clock=clock)
        session = store.create()

        clock.now = 50
        store.get(session.session_id)
        clock.now = 100

        assert store.get(session.session_id) is session

    def test_evict_expired_returns_ids(self, profile_registry):
        clock = FakeClock()
        store = SessionStore(profile_registry, idle_ttl=10, clock=clock)
        a = store.create()
        b = store.create()
        clock.now = 11

        assert store.evict_expired() == [a.session_id, b.session_id]
        assert len(store) == 0

    def test_max_sessions_drops_least_recently_used(self, profile_registry):
        store = SessionStore(profile_registry, max_sessions=2)
        a = store.create()
        b = store.create()
        store.get(a.session_id)

        c = store.create()

        assert a.session_id in store
        assert b.session_id not in store
        assert c.session_id in store

    def test_many_creates_stay_bounded(self, profile_registry):
        store = SessionStore(profile_registry, max_sessions=5)

        for _ in range(500):
            store.create()

        assert len(store) == 5

    def test_invalid_limits(self, profile_registry):
        with pytest.raises(ValueError):
            SessionStore(profile_registry, max_sessions=0)

        with pytest.raises(ValueError):
            SessionStore(profile_registry, idle_ttl=0)
