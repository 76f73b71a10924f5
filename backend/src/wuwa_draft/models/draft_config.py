"""Draft configuration model."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DraftConfig(BaseModel):
    """Quotas and display settings for a draft.

    Timer fields are shown by clients only; the server does not enforce them.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    game_mode: str = "whiwa"
    bans_phase1: int = Field(default=1, ge=0)
    bans_phase2: int = Field(default=1, ge=0)
    balance_bans: int = Field(default=0, ge=0)  # Extra phase 1 bans for one player
    balance_bans_player: Literal[1, 2] = 1
    pick_quota_phase1: int = Field(default=3, ge=0)
    pick_quota_phase2: int = Field(default=3, ge=0)
    draft_timer_minutes: int = Field(default=5, ge=0)
    draft_timer_seconds: int = Field(default=0, ge=0, le=59)
    prep_timer_minutes: int = Field(default=7, ge=0)

    def merged(self, changes: dict) -> "DraftConfig":
        """Return a validated copy with ``changes`` applied on top."""
        return DraftConfig.model_validate({**self.model_dump(), **changes})

    def phase1_ban_quota(self, player: int) -> int:
        """Phase 1 bans owed by ``player``, balance bans included."""
        if player == self.balance_bans_player:
            return self.bans_phase1 + self.balance_bans
        return self.bans_phase1
