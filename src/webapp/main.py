"""
GitHub Login Demo Application

This FastAPI application shows the client side of GitHub's OAuth2
authorization-code flow: a public index page rendered from a template, and a
protected page that sends the browser to GitHub for login first.

Run it with ``python -m src.webapp.server`` after exporting
GITHUB_CLIENT_ID and GITHUB_CLIENT_SECRET.
"""

from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from ..shared.config import Settings
from ..shared.github_oauth import GitHubOAuthClient
from ..shared.logging_utils import OAuthLogger, ComponentType
from ..shared.security import SecurityHeaders
from .auth import AuthenticationRequired, OAuth2AuthHandler
from .routes import router

templates_dir = Path(__file__).parent / "templates"


def create_app(settings: Settings,
               oauth_client: Optional[GitHubOAuthClient] = None) -> FastAPI:
    """
    Build the web application.

    Args:
        settings: Loaded application settings
        oauth_client: GitHub client to use (built from settings when omitted)

    Returns:
        FastAPI: Application with every route registered
    """
    logger = OAuthLogger(ComponentType.WEB_APP.value)

    app = FastAPI(
        title="GitHub Login Demo",
        description="Web app protecting a page with GitHub OAuth2 login",
        version="1.0.0"
    )

    # Session cookie carries the OAuth state and the issued token
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for header_name, header_value in SecurityHeaders.get_security_headers().items():
            response.headers[header_name] = header_value
        return response

    @app.exception_handler(AuthenticationRequired)
    async def redirect_to_provider(request: Request, exc: AuthenticationRequired):
        return RedirectResponse(exc.location, status_code=302)

    if oauth_client is None:
        oauth_client = GitHubOAuthClient(
            settings.client_id,
            settings.client_secret,
            timeout=settings.http_timeout,
            logger=logger
        )

    app.state.settings = settings
    app.state.templates = Jinja2Templates(directory=str(templates_dir))
    app.state.auth_handler = OAuth2AuthHandler(
        oauth_client,
        callback_url=settings.callback_url,
        scope=settings.scope,
        logger=logger
    )

    app.include_router(router)

    return app
