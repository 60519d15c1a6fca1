"""
Application settings.

Security:
    Per-profile credentials use SecretStr to prevent accidental logging.
    Access a value with `.get_secret_value()`.

Environment:
    RESTBRIDGE_SERVICE_NAME        service name (default "restbridge")
    RESTBRIDGE_ENVIRONMENT         deployment environment
    RESTBRIDGE_DEBUG               "true" enables debug mode
    RESTBRIDGE_LOG_LEVEL           logging level (default INFO)
    RESTBRIDGE_DEFAULT_API         profile new sessions start on
    RESTBRIDGE_REQUEST_TIMEOUT     outbound request timeout in seconds
    RESTBRIDGE_SESSION_TTL         idle seconds before a session is evicted
    RESTBRIDGE_MAX_SESSIONS        sessions kept before the least recently used goes
    RESTBRIDGE_HOST / _PORT        bind address for uvicorn
    RESTBRIDGE_CREDENTIAL_<NAME>   credential seeded into sessions for profile <NAME>
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field, SecretStr, field_validator

_CREDENTIAL_PREFIX = "RESTBRIDGE_CREDENTIAL_"


class AppSettings(BaseModel):
    """
    Application settings model.

    Used for type-safe settings access.
    """

    # Service identity
    service_name: str = "restbridge"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API selection
    default_api: str | None = Field(default=None, description="Profile new sessions start on")
    request_timeout: float = Field(default=30.0, gt=0, description="Outbound timeout (seconds)")

    # Sessions
    session_ttl: float = Field(default=3600.0, gt=0, description="Idle eviction (seconds)")
    max_sessions: int = Field(default=1000, ge=1)

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)

    # Credentials per profile name (SecretStr prevents accidental logging)
    credentials: dict[str, SecretStr] = Field(default_factory=dict)

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    def credential_values(self) -> dict[str, str]:
        """Plain credential strings, keyed by profile name."""
        return {name: secret.get_secret_value() for name, secret in self.credentials.items()}


def _credentials_from_env(environ: Mapping[str, str], profile_names: list[str]) -> dict[str, str]:
    """
    Map RESTBRIDGE_CREDENTIAL_<NAME> variables onto profile names.

    The suffix is matched case-insensitively against the known profile
    names; unmatched variables are ignored.
    """
    by_upper = {name.upper(): name for name in profile_names}
    credentials: dict[str, str] = {}
    for key, value in environ.items():
        if not key.startswith(_CREDENTIAL_PREFIX) or not value:
            continue
        name = by_upper.get(key[len(_CREDENTIAL_PREFIX):].upper())
        if name is not None:
            credentials[name] = value
    return credentials


def load_settings(
    profile_names: list[str],
    environ: Mapping[str, str] | None = None,
) -> AppSettings:
    """
    Build settings from the environment.

    Raises:
        pydantic.ValidationError: If a value is out of range (e.g. timeout <= 0)
    """
    env = os.environ if environ is None else environ
    return AppSettings(
        service_name=env.get("RESTBRIDGE_SERVICE_NAME", "restbridge"),
        environment=env.get("RESTBRIDGE_ENVIRONMENT", "development"),
        debug=env.get("RESTBRIDGE_DEBUG", "false").lower() == "true",
        log_level=env.get("RESTBRIDGE_LOG_LEVEL", "INFO"),
        default_api=env.get("RESTBRIDGE_DEFAULT_API") or None,
        request_timeout=env.get("RESTBRIDGE_REQUEST_TIMEOUT", "30"),
        session_ttl=env.get("RESTBRIDGE_SESSION_TTL", "3600"),
        max_sessions=env.get("RESTBRIDGE_MAX_SESSIONS", "1000"),
        host=env.get("RESTBRIDGE_HOST", "0.0.0.0"),
        port=env.get("RESTBRIDGE_PORT", "8000"),
        credentials=_credentials_from_env(env, profile_names),
    )
