"""Draft turn and phase state machine.

The engine owns the single live ``DraftSession`` of a room. Every operation
validates against the session under one lock, mutates it, then recomputes
the phase and the player on the clock with ``compute_transition``.
"""

import copy
import logging
import threading

from wuwa_draft.exceptions import (
    ItemAlreadyBanned,
    ItemAlreadyPicked,
    NoActiveSession,
    NotAPlayer,
    NotYourTurn,
    PreconditionError,
    WrongPhaseKind,
)
from wuwa_draft.models.draft import BanRecord, DraftPhase, DraftSession, PickRecord
from wuwa_draft.models.draft_config import DraftConfig
from wuwa_draft.services.room_manager import RoomManager
from wuwa_draft.utils.draft_order import other_player, snake_turn

logger = logging.getLogger(__name__)

PHASE_ORDER = [
    DraftPhase.BAN_1,
    DraftPhase.PICK_1,
    DraftPhase.BAN_2,
    DraftPhase.PICK_2,
    DraftPhase.COMPLETE,
]

# Player who acts first when a phase opens
FIRST_PLAYER = {
    DraftPhase.BAN_1: 1,
    DraftPhase.PICK_1: 1,
    DraftPhase.BAN_2: 1,
    DraftPhase.PICK_2: 2,
}


def next_phase(phase: DraftPhase) -> DraftPhase:
    """Phase that follows ``phase``; COMPLETE is terminal."""
    if phase == DraftPhase.COMPLETE:
        return phase
    return PHASE_ORDER[PHASE_ORDER.index(phase) + 1]


def ban_quota(config: DraftConfig, phase: DraftPhase, player: int) -> int:
    """Bans ``player`` owes in a ban phase. Balance bans apply to phase 1 only."""
    if phase == DraftPhase.BAN_1:
        return config.phase1_ban_quota(player)
    return config.bans_phase2


def pick_quota(config: DraftConfig, phase: DraftPhase) -> int:
    """Picks each player owes in a pick phase."""
    if phase == DraftPhase.PICK_1:
        return config.pick_quota_phase1
    return config.pick_quota_phase2


def phase_entry(phase: DraftPhase, config: DraftConfig) -> tuple[DraftPhase, int | None]:
    """Open ``phase`` and return ``(phase, first player)``.

    Phases whose quotas are zero for both players are skipped. In a ban phase
    where the default first player owes nothing, the other player opens.
    """
    while phase != DraftPhase.COMPLETE:
        first = FIRST_PLAYER[phase]
        if phase.is_ban_phase:
            if ban_quota(config, phase, first) > 0:
                return phase, first
            if ban_quota(config, phase, other_player(first)) > 0:
                return phase, other_player(first)
        elif pick_quota(config, phase) > 0:
            return phase, first
        phase = next_phase(phase)
    return DraftPhase.COMPLETE, None


def compute_transition(session: DraftSession) -> tuple[DraftPhase, int | None]:
    """Next ``(phase, current_player)`` after an action in ``session.phase``.

    Pure: reads the session and its config snapshot, mutates nothing.
    """
    phase = session.phase
    config = session.config

    if phase == DraftPhase.COMPLETE:
        return DraftPhase.COMPLETE, None

    if phase.is_ban_phase:
        counts = session.ban_count_for(phase)

        def done(player: int) -> bool:
            return counts.get(player) >= ban_quota(config, phase, player)

        if done(1) and done(2):
            return phase_entry(next_phase(phase), config)

        # Alternate, but bypass a player who has finished their bans
        candidate = other_player(session.current_player)
        if done(candidate):
            candidate = other_player(candidate)
        return phase, candidate

    counts = session.pick_count_for(phase)
    quota = pick_quota(config, phase)
    if counts.player1 >= quota and counts.player2 >= quota:
        return phase_entry(next_phase(phase), config)
    return phase, snake_turn(counts.total, FIRST_PLAYER[phase])


class DraftEngine:
    """Validates and applies bans and picks for one room's draft."""

    def __init__(self, room: RoomManager):
        """Initialize the engine.

        Args:
            room: Seating and configuration for the room this engine drafts in
        """
        self.room = room
        self._session: DraftSession | None = None
        self._lock = threading.Lock()

    def start_draft(self) -> DraftSession:
        """Start a fresh draft, replacing any existing one.

        Raises:
            PreconditionError: If both player seats are not occupied
        """
        with self._lock:
            if not self.room.is_full():
                raise PreconditionError()

            config = self.room.config
            phase, player = phase_entry(DraftPhase.BAN_1, config)
            self._session = DraftSession(config=config, phase=phase, current_player=player)
            logger.info(f"Draft started (phase={phase.value}, player={player})")
            return copy.deepcopy(self._session)

    def reset_draft(self) -> None:
        """Discard the current draft, if any."""
        with self._lock:
            self._session = None
        logger.info("Draft reset")

    def get_session_snapshot(self) -> DraftSession | None:
        """Copy of the current session, or None when no draft exists."""
        with self._lock:
            if self._session is None:
                return None
            return copy.deepcopy(self._session)

    def ban(self, discord_id: str, item_id: str) -> DraftSession:
        """Ban ``item_id`` on behalf of the player seated as ``discord_id``."""
        with self._lock:
            session, player = self._check_turn(discord_id)
            if not session.phase.is_ban_phase:
                raise WrongPhaseKind("This is not a ban phase")
            if session.is_banned(item_id):
                raise ItemAlreadyBanned()
            if session.is_picked(item_id):
                raise ItemAlreadyPicked()

            phase = session.phase
            session.bans.append(BanRecord(
                item_id=item_id,
                phase="phase1" if phase == DraftPhase.BAN_1 else "phase2",
                banned_by=player,
            ))
            counts = session.ban_count_for(phase)
            counts.increment(player)
            if (
                phase == DraftPhase.BAN_1
                and player == session.config.balance_bans_player
                and counts.get(player) > session.config.bans_phase1
            ):
                session.balance_bans_used += 1

            self._advance(session)
            logger.info(f"Player {player} banned {item_id}")
            return copy.deepcopy(session)

    def pick(self, discord_id: str, item_id: str) -> DraftSession:
        """Pick ``item_id`` on behalf of the player seated as ``discord_id``."""
        with self._lock:
            session, player = self._check_turn(discord_id)
            if not session.phase.is_pick_phase:
                raise WrongPhaseKind("This is not a pick phase")
            if session.is_banned(item_id):
                raise ItemAlreadyBanned()
            if session.is_picked(item_id):
                raise ItemAlreadyPicked()

            session.picks.append(PickRecord(
                item_id=item_id,
                picked_by=player,
                order=len(session.picks) + 1,
            ))
            session.picks_for(player).append(item_id)
            session.pick_count_for(session.phase).increment(player)

            self._advance(session)
            logger.info(f"Player {player} picked {item_id}")
            return copy.deepcopy(session)

    def _check_turn(self, discord_id: str) -> tuple[DraftSession, int]:
        """Checks shared by ban and pick. Caller must hold the lock."""
        player = self.room.get_player_number(discord_id)
        if player is None:
            raise NotAPlayer()

        session = self._session
        if session is None:
            raise NoActiveSession()

        if session.phase == DraftPhase.COMPLETE:
            raise WrongPhaseKind("The draft is complete")

        if session.current_player != player:
            raise NotYourTurn()

        return session, player

    def _advance(self, session: DraftSession) -> None:
        phase, player = compute_transition(session)
        if phase != session.phase:
            logger.info(f"Draft phase {session.phase.value} -> {phase.value}")
        session.phase = phase
        session.current_player = player
