"""
Application configuration loaded from the process environment.

The GitHub OAuth app credentials are read once at startup into an immutable
Settings object, which is then passed explicitly to the components that need
it. Missing credentials stop the application before it starts serving.
"""

import os
import secrets
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, validator


DEFAULT_PORT = 8080
DEFAULT_CALLBACK_URL = "http://localhost:8080/callback"
DEFAULT_SCOPE = "user:email"

# Preferred variable first, fallback second
CLIENT_ID_VARS = ("GITHUB_CLIENT_ID", "CLIENT_ID")
CLIENT_SECRET_VARS = ("GITHUB_CLIENT_SECRET", "CLIENT_SECRET")


class ConfigurationError(Exception):
    """Raised when the environment does not describe a runnable application."""


class Settings(BaseModel):
    """
    Runtime settings for the GitHub login demo.

    client_id and client_secret identify the GitHub OAuth app. The remaining
    fields carry defaults matching a local development setup.
    """
    client_id: str = Field(..., min_length=1, description="GitHub OAuth app client id")
    client_secret: str = Field(..., min_length=1, description="GitHub OAuth app client secret")
    callback_url: str = Field(default=DEFAULT_CALLBACK_URL, description="OAuth redirect target")
    scope: str = Field(default=DEFAULT_SCOPE, min_length=1, description="Requested GitHub scope")
    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(default=DEFAULT_PORT, description="TCP port to bind, 0 for ephemeral")
    session_secret: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32),
        min_length=1,
        description="Key used to sign the session cookie"
    )
    http_timeout: Optional[float] = Field(
        default=None,
        description="Timeout in seconds for calls to GitHub (httpx default when unset)"
    )

    @validator('port')
    def validate_port(cls, v):
        """Port must fit in an unsigned 16-bit integer."""
        if not 0 <= v <= 65535:
            raise ValueError("port must be between 0 and 65535")
        return v

    @validator('callback_url')
    def validate_callback_url(cls, v):
        """Callback must be an absolute http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("callback_url must be an absolute http(s) URL")
        return v

    class Config:
        """Pydantic model configuration."""
        frozen = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            Settings: Validated, immutable settings

        Raises:
            ConfigurationError: If the credentials are missing or a value is invalid
        """
        env = os.environ if environ is None else environ

        client_id = _first_set(env, CLIENT_ID_VARS)
        client_secret = _first_set(env, CLIENT_SECRET_VARS)

        missing = []
        if not client_id:
            missing.append(CLIENT_ID_VARS[0])
        if not client_secret:
            missing.append(CLIENT_SECRET_VARS[0])
        if missing:
            raise ConfigurationError(
                f"Missing required environment variable(s): {', '.join(missing)}"
            )

        values: Dict[str, object] = {
            "client_id": client_id,
            "client_secret": client_secret,
        }

        optional_vars = {
            "callback_url": "OAUTH_CALLBACK_URL",
            "scope": "OAUTH_SCOPE",
            "host": "HOST",
            "session_secret": "SESSION_SECRET",
        }
        for field_name, var_name in optional_vars.items():
            if env.get(var_name):
                values[field_name] = env[var_name]

        if env.get("PORT"):
            values["port"] = _parse_number(env["PORT"], "PORT", int)
        if env.get("HTTP_TIMEOUT"):
            values["http_timeout"] = _parse_number(env["HTTP_TIMEOUT"], "HTTP_TIMEOUT", float)

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


def _first_set(env: Mapping[str, str], names) -> Optional[str]:
    """Return the first non-blank value among the given variable names."""
    for name in names:
        value = env.get(name, "").strip()
        if value:
            return value
    return None


def _parse_number(raw: str, name: str, kind):
    try:
        return kind(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
