"""Data models for the draft server."""

from wuwa_draft.models.draft import (
    BanRecord,
    DraftPhase,
    DraftSession,
    PickRecord,
    PlayerCount,
)
from wuwa_draft.models.draft_config import DraftConfig
from wuwa_draft.models.room import DiscordUser, Seat

__all__ = [
    "BanRecord",
    "DraftPhase",
    "DraftSession",
    "PickRecord",
    "PlayerCount",
    "DraftConfig",
    "DiscordUser",
    "Seat",
]
