"""Business logic services."""

from wuwa_draft.services.draft_engine import DraftEngine, compute_transition
from wuwa_draft.services.room_manager import RoomManager
from wuwa_draft.services.connection_manager import Connection, ConnectionManager
from wuwa_draft.services.user_session_store import UserSessionStore
from wuwa_draft.services.discord_oauth import DiscordOAuthClient

__all__ = [
    "DraftEngine",
    "compute_transition",
    "RoomManager",
    "Connection",
    "ConnectionManager",
    "UserSessionStore",
    "DiscordOAuthClient",
]
