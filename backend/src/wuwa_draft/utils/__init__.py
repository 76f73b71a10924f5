"""Utility modules."""

from wuwa_draft.utils.draft_order import other_player, snake_order, snake_turn

__all__ = [
    "other_player",
    "snake_order",
    "snake_turn",
]
