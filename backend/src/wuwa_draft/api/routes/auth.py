"""Discord login endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import RedirectResponse

from wuwa_draft.config import settings
from wuwa_draft.exceptions import DiscordAuthError
from wuwa_draft.services.user_session_store import SESSION_COOKIE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/discord")
async def discord_login(request: Request):
    """Redirect to Discord's OAuth consent page."""
    return RedirectResponse(request.app.state.oauth_client.authorize_url())


@router.get("/discord/callback")
async def discord_callback(request: Request, code: str | None = None):
    """Finish the Discord login and open a user session."""
    if not code:
        return RedirectResponse(f"{settings.client_url}?error=no_code")

    try:
        user = await request.app.state.oauth_client.fetch_user(code)
    except DiscordAuthError:
        return RedirectResponse(f"{settings.client_url}?error=auth_failed")

    user_sessions = request.app.state.user_sessions
    token = user_sessions.create(user)
    logger.info(f"Discord login: {user.username} ({user.discord_id})")

    response = RedirectResponse(f"{settings.client_url}?auth=success")
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=user_sessions.ttl_seconds,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    return response


@router.get("/me")
async def get_me(request: Request):
    """Current user, from the session cookie."""
    user = request.app.state.user_sessions.get(request.cookies.get(SESSION_COOKIE))
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return {"user": user.to_dict()}


@router.post("/logout")
async def logout(request: Request, response: Response):
    """Drop the user session."""
    request.app.state.user_sessions.remove(request.cookies.get(SESSION_COOKIE))
    response.delete_cookie(SESSION_COOKIE)
    return {"success": True}
