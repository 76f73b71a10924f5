"""Snake draft turn order.

Turns go to ``first_player`` once, then alternate in pairs:
``first, other, other, first, first, other, ...``. With a quota of q picks
per player, the 2q turns split evenly and the last turn is a singleton.
"""


def other_player(player: int) -> int:
    """Return the opponent of ``player`` (1 <-> 2)."""
    return 2 if player == 1 else 1


def snake_turn(index: int, first_player: int = 1) -> int:
    """Player on the clock for the ``index``-th turn (0-based) of a pick phase."""
    if index < 0:
        raise ValueError(f"Turn index must be non-negative, got {index}")
    if index == 0:
        return first_player
    # Turns 1-2 go to the other player, 3-4 back to the first, and so on
    pair = (index - 1) // 2
    return other_player(first_player) if pair % 2 == 0 else first_player


def snake_order(quota_per_player: int, first_player: int = 1) -> list[int]:
    """Full turn order for a pick phase with ``quota_per_player`` picks each."""
    return [snake_turn(i, first_player) for i in range(2 * quota_per_player)]
