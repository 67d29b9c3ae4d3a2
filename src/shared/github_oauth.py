"""
GitHub OAuth2 authorization-code client.

Builds the authorize redirect URL and exchanges a returned authorization code
for an access token over httpx. Token refresh, revocation and storage are left
to the caller.
"""

from typing import Optional
from urllib.parse import urlencode, quote

import httpx
from pydantic import ValidationError

from .oauth_models import GitHubToken, OAuthError
from .logging_utils import OAuthLogger, ComponentType


GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"


class GitHubOAuthError(Exception):
    """
    Token exchange failure.

    status_code is the HTTP status the web app should answer with: 401 when
    GitHub rejected the code, 502 when GitHub could not be reached or answered
    with something unusable.
    """

    def __init__(self, error_code: str, description: str, status_code: int = 502):
        self.error_code = error_code
        self.description = description
        self.status_code = status_code
        super().__init__(description)


class GitHubOAuthClient:
    """
    Authorization-code flow client for a GitHub OAuth app.

    Args:
        client_id: OAuth app client id
        client_secret: OAuth app client secret
        timeout: Seconds before a call to GitHub gives up (httpx default when None)
        transport: Optional httpx transport, used to stand in for GitHub in tests
    """

    def __init__(self,
                 client_id: str,
                 client_secret: str,
                 timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 logger: Optional[OAuthLogger] = None):
        self.client_id = client_id
        self._client_secret = client_secret
        self._timeout = httpx.Timeout(timeout) if timeout is not None else httpx.USE_CLIENT_DEFAULT
        self._transport = transport
        self.logger = logger or OAuthLogger(ComponentType.WEB_APP.value)

    def authorization_url(self, redirect_uri: str, scope: str, state: str) -> str:
        """
        Build the URL the browser is sent to for authorization.

        The scope is left unescaped (``scope=user:email``) the way GitHub
        documents it.
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "scope": scope,
            "state": state,
        }
        return f"{GITHUB_AUTHORIZE_URL}?{urlencode(params, quote_via=quote, safe=':')}"

    async def exchange_code(self, code: str, redirect_uri: str) -> GitHubToken:
        """
        Exchange an authorization code for an access token.

        Args:
            code: Code received on the callback
            redirect_uri: The redirect URI used for the authorization request

        Returns:
            GitHubToken: The issued token

        Raises:
            GitHubOAuthError: If GitHub rejects the code or cannot be reached
        """
        token_request_data = {
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "code": code,
            "redirect_uri": redirect_uri,
        }

        self.logger.log_oauth_message(
            ComponentType.WEB_APP.value, ComponentType.GITHUB.value,
            "Token Exchange Request",
            {
                "code": code,
                "redirect_uri": redirect_uri,
                "client_id": self.client_id,
                "client_secret": self._client_secret,
                "endpoint": GITHUB_TOKEN_URL
            }
        )

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    GITHUB_TOKEN_URL,
                    data=token_request_data,
                    headers={"Accept": "application/json"},
                    timeout=self._timeout
                )
        except httpx.HTTPError as e:
            self.logger.log_error(
                "network_error",
                f"Failed to reach GitHub: {e}",
                {"endpoint": GITHUB_TOKEN_URL}
            )
            raise GitHubOAuthError("network_error", f"Failed to reach GitHub: {e}") from e

        if response.status_code != 200:
            self.logger.log_oauth_message(
                ComponentType.GITHUB.value, ComponentType.WEB_APP.value,
                "Token Exchange Failed",
                {"status_code": response.status_code},
                success=False
            )
            raise GitHubOAuthError(
                "token_exchange_failed",
                f"Token exchange failed with status {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise GitHubOAuthError("invalid_response", "GitHub returned a non-JSON token response") from e

        if not isinstance(payload, dict):
            raise GitHubOAuthError("invalid_response", "GitHub returned an unexpected token response")

        if "error" in payload:
            try:
                error = OAuthError(**payload)
            except ValidationError as e:
                raise GitHubOAuthError("invalid_response", "GitHub returned a malformed error response") from e
            self.logger.log_oauth_message(
                ComponentType.GITHUB.value, ComponentType.WEB_APP.value,
                "Token Exchange Rejected",
                {
                    "error": error.error,
                    "error_description": error.error_description
                },
                success=False
            )
            raise GitHubOAuthError(
                error.error,
                error.error_description or "Authorization code was rejected",
                status_code=401
            )

        try:
            token = GitHubToken(**payload)
        except ValidationError as e:
            raise GitHubOAuthError("invalid_response", "GitHub token response is missing access_token") from e

        self.logger.log_token_operation(
            "EXCHANGE",
            {
                "access_token": token.access_token,
                "token_type": token.token_type,
                "scope": token.scope
            }
        )

        return token
