"""Player seats and draft configuration for the draft room."""

import logging
import threading

from pydantic import ValidationError

from wuwa_draft.exceptions import InvalidConfig, InvalidSlot, NotAPlayer, SlotTaken
from wuwa_draft.models.draft_config import DraftConfig
from wuwa_draft.models.room import DiscordUser, Seat

logger = logging.getLogger(__name__)

SLOTS = ("player1", "player2")


class RoomManager:
    """In-memory seating for the two players of a draft room.

    Anyone connected who does not hold a seat is a spectator.
    """

    def __init__(self, config: DraftConfig | None = None):
        self.seats: dict[str, Seat | None] = {slot: None for slot in SLOTS}
        self.config = config or DraftConfig()
        self._lock = threading.Lock()

    @property
    def player1(self) -> Seat | None:
        return self.seats["player1"]

    @property
    def player2(self) -> Seat | None:
        return self.seats["player2"]

    def join(self, user: DiscordUser, slot: str, connection_id: str | None = None) -> None:
        """Seat ``user`` in ``slot``.

        Rejoining your own seat refreshes its connection.

        Raises:
            InvalidSlot: If ``slot`` is not player1 or player2
            SlotTaken: If another user holds the seat, or ``user`` holds the other seat
        """
        if slot not in SLOTS:
            raise InvalidSlot(f"Unknown slot: {slot}")

        with self._lock:
            seat = self.seats[slot]
            if seat and seat.discord_id != user.discord_id:
                raise SlotTaken(f"Slot {slot} is already taken")
            for other_slot, other_seat in self.seats.items():
                if other_slot != slot and other_seat and other_seat.discord_id == user.discord_id:
                    raise SlotTaken(f"{user.username} already holds {other_slot}")
            self.seats[slot] = Seat(user=user, connection_id=connection_id)
        logger.info(f"{user.username} joined as {slot}")

    def leave(self, user: DiscordUser) -> bool:
        """Free the first seat held by ``user``. Returns True if one was freed."""
        with self._lock:
            for slot, seat in self.seats.items():
                if seat and seat.discord_id == user.discord_id:
                    self.seats[slot] = None
                    logger.info(f"{user.username} left {slot}")
                    return True
        return False

    def release_connection(self, connection_id: str) -> bool:
        """Free the seat bound to a closed connection. Returns True if one was freed."""
        with self._lock:
            for slot, seat in self.seats.items():
                if seat and seat.connection_id == connection_id:
                    self.seats[slot] = None
                    logger.info(f"{seat.user.username} disconnected from {slot}")
                    return True
        return False

    def get_player_number(self, discord_id: str) -> int | None:
        """1 or 2 for a seated player, None for anyone else."""
        if self.player1 and self.player1.discord_id == discord_id:
            return 1
        if self.player2 and self.player2.discord_id == discord_id:
            return 2
        return None

    def is_full(self) -> bool:
        return self.player1 is not None and self.player2 is not None

    def update_config(self, user: DiscordUser, changes: dict) -> DraftConfig:
        """Apply a partial config update from a seated player.

        Changes take effect at the next draft start.

        Raises:
            NotAPlayer: If ``user`` holds no seat
            InvalidConfig: If the merged config does not validate
        """
        if self.get_player_number(user.discord_id) is None:
            raise NotAPlayer("Only players can change the configuration")

        with self._lock:
            try:
                self.config = self.config.merged(changes)
            except ValidationError as e:
                raise InvalidConfig(f"Invalid draft configuration: {e.error_count()} error(s)") from e
        logger.info(f"{user.username} updated draft config")
        return self.config

    def to_dict(self) -> dict:
        """Serialize seats for room:updated payloads."""
        return {
            "player1": self.player1.to_dict() if self.player1 else None,
            "player2": self.player2.to_dict() if self.player2 else None,
        }
