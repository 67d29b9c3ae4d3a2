"""
Web app routes.

The index page is public, /protected sits behind the GitHub auth gate, and
/callback is where GitHub sends the browser back with an authorization code.
Shared objects (settings, templates, auth handler) live on ``app.state``.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse

from ..shared.oauth_models import GitHubToken

router = APIRouter()

INDEX_TEMPLATE = "views/index.hbs"


async def require_github_login(request: Request) -> GitHubToken:
    """Dependency running the app's OAuth2 auth gate."""
    return await request.app.state.auth_handler(request)


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Render the index page with the OAuth app's client id."""
    settings = request.app.state.settings
    templates = request.app.state.templates

    context = {"client_id": settings.client_id}
    return templates.TemplateResponse(request, INDEX_TEMPLATE, context, media_type="text/html")


@router.get("/protected", response_class=PlainTextResponse)
async def protected(token: GitHubToken = Depends(require_github_login)):
    return PlainTextResponse("Hello protected!")


@router.get("/callback", responses={
    400: {"description": "Missing code or state mismatch"},
    401: {"description": "GitHub rejected the authorization code"},
    403: {"description": "The user denied access"},
    502: {"description": "GitHub unreachable or answered with an unusable response"}
})
async def oauth_callback(request: Request,
                         code: Optional[str] = None,
                         state: Optional[str] = None,
                         error: Optional[str] = None,
                         error_description: Optional[str] = None):
    """OAuth2 redirect target; not meant to be opened directly."""
    return await request.app.state.auth_handler.handle_callback(
        request,
        code=code,
        state=state,
        error=error,
        error_description=error_description
    )


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "github-login-demo"}
