"""Shared fixtures: app services wired against temporary storage."""

import httpx
import pytest

from wuwa_draft.api.websockets.draft_ws import DraftChannel
from wuwa_draft.main import app
from wuwa_draft.models.room import DiscordUser
from wuwa_draft.repositories.box_repository import BoxRepository
from wuwa_draft.services.connection_manager import ConnectionManager
from wuwa_draft.services.discord_oauth import DiscordOAuthClient
from wuwa_draft.services.draft_engine import DraftEngine
from wuwa_draft.services.room_manager import RoomManager
from wuwa_draft.services.user_session_store import UserSessionStore

ALICE = DiscordUser(discord_id="111", username="alice", avatar=None)
BOB = DiscordUser(discord_id="222", username="bob", avatar=None)
CAROL = DiscordUser(discord_id="333", username="carol", avatar=None)


def discord_handler(request: httpx.Request) -> httpx.Response:
    """Fake Discord API: the code "good-code" succeeds, anything else fails."""
    if request.url.path == "/api/oauth2/token":
        if b"code=good-code" in request.content:
            return httpx.Response(200, json={"access_token": "token-abc"})
        return httpx.Response(400, json={"error": "invalid_grant"})
    if request.url.path == "/api/users/@me":
        if request.headers.get("Authorization") != "Bearer token-abc":
            return httpx.Response(401, json={"message": "401: Unauthorized"})
        return httpx.Response(200, json={"id": "999", "username": "rover", "avatar": "abc123"})
    return httpx.Response(404)


@pytest.fixture
def app_state(tmp_path):
    """Fresh services on app.state (mimics lifespan startup)."""
    room = RoomManager()
    engine = DraftEngine(room)
    connections = ConnectionManager()
    boxes = BoxRepository(tmp_path / "boxes.duckdb")
    user_sessions = UserSessionStore()

    app.state.room = room
    app.state.engine = engine
    app.state.connections = connections
    app.state.boxes = boxes
    app.state.user_sessions = user_sessions
    app.state.oauth_client = DiscordOAuthClient(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://test/auth/discord/callback",
        transport=httpx.MockTransport(discord_handler),
    )
    app.state.channel = DraftChannel(
        room=room,
        engine=engine,
        connections=connections,
        boxes=boxes,
        user_sessions=user_sessions,
    )
    return app.state
