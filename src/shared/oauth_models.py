"""
Pydantic models for the GitHub authorization-code flow.

Covers the token response returned by GitHub, the error body it sends when a
code is rejected, and the per-session authentication state.
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class AuthState(str, Enum):
    """Where a browser session is in the login flow."""
    UNAUTHENTICATED = "unauthenticated"
    REDIRECTING = "redirecting"
    CALLBACK_RECEIVED = "callback_received"
    AUTHENTICATED = "authenticated"


class GitHubToken(BaseModel):
    """
    Access token returned by GitHub's token endpoint.

    GitHub answers with a lowercase "bearer" token type and a comma-separated
    list of granted scopes.
    """
    access_token: str = Field(..., min_length=1, description="GitHub access token")
    token_type: str = Field(default="bearer", description="Token type")
    scope: str = Field(default="", description="Granted scopes, comma separated")

    class Config:
        """Pydantic model configuration."""
        frozen = True


class OAuthError(BaseModel):
    """
    OAuth error body as defined in RFC 6749.

    GitHub reports rejected codes with HTTP 200 and this body.
    """
    error: str = Field(..., description="Error code")
    error_description: Optional[str] = Field(
        default=None,
        description="Human-readable error description"
    )
    error_uri: Optional[str] = Field(
        default=None,
        description="URI with error information"
    )
