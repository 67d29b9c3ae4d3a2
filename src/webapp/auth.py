"""
OAuth2 auth gate for protected routes.

OAuth2AuthHandler is used as a FastAPI dependency. A session without a GitHub
token is sent to GitHub's authorize page; the /callback route hands the
returned code back to the handler, which exchanges it and marks the session
authenticated before sending the browser back to the page it asked for.
"""

from typing import Optional

from fastapi import HTTPException, Request
from fastapi.responses import RedirectResponse

from ..shared.github_oauth import GitHubOAuthClient, GitHubOAuthError, GITHUB_AUTHORIZE_URL
from ..shared.logging_utils import OAuthLogger, ComponentType
from ..shared.oauth_models import AuthState, GitHubToken
from ..shared.security import TokenGenerator, states_match


DEFAULT_RETURN_PATH = "/protected"


class AuthenticationRequired(Exception):
    """Raised by the gate; the app answers with a 302 to ``location``."""

    def __init__(self, location: str):
        self.location = location
        super().__init__(location)


class OAuth2AuthHandler:
    """
    Authorization-code flow gate backed by GitHub.

    Args:
        oauth_client: Client used to build the authorize URL and exchange codes
        callback_url: Absolute URL GitHub redirects back to
        scope: Scope requested from GitHub
    """

    def __init__(self,
                 oauth_client: GitHubOAuthClient,
                 callback_url: str,
                 scope: str = "user:email",
                 logger: Optional[OAuthLogger] = None):
        self.oauth_client = oauth_client
        self.callback_url = callback_url
        self.scope = scope
        self.logger = logger or OAuthLogger(ComponentType.WEB_APP.value)

    async def __call__(self, request: Request) -> GitHubToken:
        """
        Let authenticated sessions through, redirect everyone else to GitHub.

        Raises:
            AuthenticationRequired: When the session holds no token
        """
        session = request.session
        access_token = session.get("access_token")

        if access_token and session.get("auth_state") == AuthState.AUTHENTICATED.value:
            return GitHubToken(
                access_token=access_token,
                token_type=session.get("token_type", "bearer"),
                scope=session.get("scope", "")
            )

        raise AuthenticationRequired(self.begin_authorization(request))

    def begin_authorization(self, request: Request) -> str:
        """Store a fresh state in the session and return the GitHub authorize URL."""
        state = TokenGenerator.generate_state()

        request.session["oauth_state"] = state
        request.session["return_to"] = request.url.path
        request.session["auth_state"] = AuthState.REDIRECTING.value

        authorization_url = self.oauth_client.authorization_url(
            redirect_uri=self.callback_url,
            scope=self.scope,
            state=state
        )

        self.logger.log_oauth_message(
            ComponentType.WEB_APP.value, ComponentType.USER_BROWSER.value,
            "Authorization Redirect",
            {
                "requested_path": request.url.path,
                "client_id": self.oauth_client.client_id,
                "redirect_uri": self.callback_url,
                "scope": self.scope,
                "state": state,
                "endpoint": GITHUB_AUTHORIZE_URL
            }
        )

        return authorization_url

    async def handle_callback(self,
                              request: Request,
                              code: Optional[str] = None,
                              state: Optional[str] = None,
                              error: Optional[str] = None,
                              error_description: Optional[str] = None) -> RedirectResponse:
        """
        Complete the flow started by :meth:`begin_authorization`.

        The pending state is consumed whatever the outcome, so a callback URL
        cannot be replayed. A failed callback leaves an already authenticated
        session logged in.

        Raises:
            HTTPException: 403 when the user denied access, 400 on a missing
                code or state mismatch, 401/502 when the code exchange fails
        """
        session = request.session

        self.logger.log_oauth_message(
            ComponentType.GITHUB.value, ComponentType.WEB_APP.value,
            "Authorization Callback Received",
            {
                "code": code,
                "state": state,
                "error": error,
                "error_description": error_description
            }
        )

        expected_state = session.pop("oauth_state", None)
        return_to = session.pop("return_to", DEFAULT_RETURN_PATH)
        if not return_to.startswith("/") or return_to.startswith("//"):
            return_to = DEFAULT_RETURN_PATH

        if error:
            self._reset_pending_login(session)
            self.logger.log_error(
                error,
                error_description or "Authorization was not granted",
                {"state": state}
            )
            raise HTTPException(status_code=403, detail=error_description or error)

        if not states_match(expected_state, state):
            self._reset_pending_login(session)
            self.logger.log_oauth_message(
                ComponentType.WEB_APP.value, ComponentType.WEB_APP.value,
                "State Validation Failed",
                {
                    "received_state": state,
                    "expected_state": expected_state,
                    "security_risk": "Possible CSRF attack"
                },
                success=False
            )
            raise HTTPException(status_code=400, detail="State parameter validation failed")

        if not code:
            self._reset_pending_login(session)
            raise HTTPException(status_code=400, detail="Missing authorization code")

        session["auth_state"] = AuthState.CALLBACK_RECEIVED.value

        try:
            token = await self.oauth_client.exchange_code(code, self.callback_url)
        except GitHubOAuthError as e:
            self._reset_pending_login(session)
            raise HTTPException(status_code=e.status_code, detail=e.description) from e

        session["access_token"] = token.access_token
        session["token_type"] = token.token_type
        session["scope"] = token.scope
        session["auth_state"] = AuthState.AUTHENTICATED.value

        self.logger.log_oauth_message(
            ComponentType.WEB_APP.value, ComponentType.USER_BROWSER.value,
            "Login Complete",
            {
                "scope": token.scope,
                "return_to": return_to
            }
        )

        return RedirectResponse(return_to, status_code=302)

    def _reset_pending_login(self, session: dict) -> None:
        """
        Drop a login that failed on the callback.

        A session that is already authenticated keeps its token; only a login
        in progress goes back to UNAUTHENTICATED.
        """
        if session.get("auth_state") == AuthState.AUTHENTICATED.value:
            return

        for key in ("access_token", "token_type", "scope"):
            session.pop(key, None)
        session["auth_state"] = AuthState.UNAUTHENTICATED.value
