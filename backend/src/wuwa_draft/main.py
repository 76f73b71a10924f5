"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from wuwa_draft.config import settings
from wuwa_draft.api.routes.auth import router as auth_router
from wuwa_draft.api.routes.boxes import router as boxes_router
from wuwa_draft.api.routes.draft import router as draft_router
from wuwa_draft.api.websockets.draft_ws import DraftChannel, draft_websocket
from wuwa_draft.repositories.box_repository import BoxRepository
from wuwa_draft.services.connection_manager import ConnectionManager
from wuwa_draft.services.discord_oauth import DiscordOAuthClient
from wuwa_draft.services.draft_engine import DraftEngine
from wuwa_draft.services.room_manager import RoomManager
from wuwa_draft.services.user_session_store import UserSessionStore


# Database path - use settings, relative paths resolve from repo root
def get_database_path() -> Path:
    """Get the box database path from settings."""
    db_path = Path(settings.database_path)
    if db_path.is_absolute():
        return db_path
    repo_root = Path(__file__).parent.parent.parent.parent
    return repo_root / db_path


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup: wire services unless already set (tests pre-seed app.state)
    if not hasattr(app.state, "boxes"):
        app.state.boxes = BoxRepository(get_database_path())
    if not hasattr(app.state, "room"):
        app.state.room = RoomManager()
    if not hasattr(app.state, "engine"):
        app.state.engine = DraftEngine(app.state.room)
    if not hasattr(app.state, "connections"):
        app.state.connections = ConnectionManager()
    if not hasattr(app.state, "user_sessions"):
        app.state.user_sessions = UserSessionStore(ttl_seconds=settings.session_ttl_seconds)
    if not hasattr(app.state, "oauth_client"):
        app.state.oauth_client = DiscordOAuthClient(
            client_id=settings.discord_client_id,
            client_secret=settings.discord_client_secret,
            redirect_uri=settings.discord_callback_url,
        )
    if not hasattr(app.state, "channel"):
        app.state.channel = DraftChannel(
            room=app.state.room,
            engine=app.state.engine,
            connections=app.state.connections,
            boxes=app.state.boxes,
            user_sessions=app.state.user_sessions,
        )
    yield
    # Shutdown: close the Discord HTTP client
    await app.state.oauth_client.close()


app = FastAPI(
    title="WuWa Draft",
    description="Wuthering Waves PvP draft server - live ban/pick sessions",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "wuwa-draft"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "WuWa Draft API",
        "version": "0.1.0",
        "docs": "/docs",
        "websocket": "/ws/draft",
    }


# Register routers
app.include_router(auth_router)
app.include_router(boxes_router)
app.include_router(draft_router)


# WebSocket endpoint for the draft room
@app.websocket("/ws/draft")
async def websocket_draft(websocket: WebSocket):
    """WebSocket endpoint for live draft play and spectating."""
    await draft_websocket(websocket, app.state.channel)
