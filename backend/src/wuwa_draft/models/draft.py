"""Draft session state models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal

from wuwa_draft.models.draft_config import DraftConfig


class DraftPhase(str, Enum):
    """Phases of a draft, in the only order they can occur."""

    BAN_1 = "ban1"
    PICK_1 = "pick1"
    BAN_2 = "ban2"
    PICK_2 = "pick2"
    COMPLETE = "complete"

    @property
    def is_ban_phase(self) -> bool:
        return self in (DraftPhase.BAN_1, DraftPhase.BAN_2)

    @property
    def is_pick_phase(self) -> bool:
        return self in (DraftPhase.PICK_1, DraftPhase.PICK_2)


@dataclass
class BanRecord:
    """A single ban."""

    item_id: str
    phase: Literal["phase1", "phase2"]
    banned_by: int  # 1 or 2


@dataclass
class PickRecord:
    """A single pick."""

    item_id: str
    picked_by: int  # 1 or 2
    order: int  # 1-based, across both pick phases


@dataclass
class PlayerCount:
    """Per-player counter for one phase."""

    player1: int = 0
    player2: int = 0

    def get(self, player: int) -> int:
        return self.player1 if player == 1 else self.player2

    def increment(self, player: int) -> None:
        if player == 1:
            self.player1 += 1
        else:
            self.player2 += 1

    @property
    def total(self) -> int:
        return self.player1 + self.player2

    def to_dict(self) -> dict:
        return {"player1": self.player1, "player2": self.player2}


@dataclass
class DraftSession:
    """Complete state of an in-progress draft."""

    config: DraftConfig
    phase: DraftPhase = DraftPhase.BAN_1
    current_player: int | None = 1  # None once complete
    bans: list[BanRecord] = field(default_factory=list)
    picks: list[PickRecord] = field(default_factory=list)
    player1_picks: list[str] = field(default_factory=list)
    player2_picks: list[str] = field(default_factory=list)
    phase1_ban_count: PlayerCount = field(default_factory=PlayerCount)
    phase2_ban_count: PlayerCount = field(default_factory=PlayerCount)
    pick1_count: PlayerCount = field(default_factory=PlayerCount)
    pick2_count: PlayerCount = field(default_factory=PlayerCount)
    balance_bans_used: int = 0
    started_at: datetime = field(default_factory=datetime.now)

    def is_banned(self, item_id: str) -> bool:
        return any(b.item_id == item_id for b in self.bans)

    def is_picked(self, item_id: str) -> bool:
        return any(p.item_id == item_id for p in self.picks)

    def picks_for(self, player: int) -> list[str]:
        """Derived pick list of ``player``."""
        return self.player1_picks if player == 1 else self.player2_picks

    def ban_count_for(self, phase: DraftPhase) -> PlayerCount:
        return self.phase1_ban_count if phase == DraftPhase.BAN_1 else self.phase2_ban_count

    def pick_count_for(self, phase: DraftPhase) -> PlayerCount:
        return self.pick1_count if phase == DraftPhase.PICK_1 else self.pick2_count

    def to_dict(self) -> dict:
        """Serialize to the full snapshot broadcast to clients."""
        return {
            "phase": self.phase.value,
            "current_player": self.current_player,
            "bans": [
                {"item_id": b.item_id, "phase": b.phase, "banned_by": b.banned_by}
                for b in self.bans
            ],
            "picks": [
                {"item_id": p.item_id, "picked_by": p.picked_by, "order": p.order}
                for p in self.picks
            ],
            "player1_picks": list(self.player1_picks),
            "player2_picks": list(self.player2_picks),
            "phase1_ban_count": self.phase1_ban_count.to_dict(),
            "phase2_ban_count": self.phase2_ban_count.to_dict(),
            "pick1_count": self.pick1_count.to_dict(),
            "pick2_count": self.pick2_count.to_dict(),
            "balance_bans_used": self.balance_bans_used,
            "started_at": self.started_at.isoformat(),
        }
