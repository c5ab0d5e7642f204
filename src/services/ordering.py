"""Pure ordering and capacity rules for columns and cards.

Services read the current values under a row lock, call these helpers to
compute the next state, then persist it.
"""
import enum
from typing import Iterable, List, Optional


class Placement(str, enum.Enum):
    TOP = "top"
    BOTTOM = "bottom"


FIRST_SLOT = 1


def next_order(existing_orders: Iterable[Optional[int]]) -> int:
    """Order for a column appended to the right end of a board.

    Freed order values are never reused.
    """
    orders = [order for order in existing_orders if order is not None]
    return max(orders) + 1 if orders else FIRST_SLOT


def next_position(existing_positions: Iterable[Optional[int]], placement: Placement = Placement.BOTTOM) -> int:
    """Position for a card entering a column at the top or the bottom.

    Top placement takes one less than the current minimum, so positions may
    become zero or negative; no existing card is renumbered.
    """
    positions = [position for position in existing_positions if position is not None]
    if not positions:
        return FIRST_SLOT
    if Placement(placement) is Placement.TOP:
        return min(positions) - 1
    return max(positions) + 1


def has_capacity(card_count: int, wip_limit: int) -> bool:
    """True if one more card may enter a column.

    A column whose limit was lowered below its occupancy stays over the
    limit; it simply accepts nothing new.
    """
    return card_count < wip_limit


def default_columns(unlimited: int, doing_limit: int) -> List[dict]:
    """Columns every new board starts with, left to right"""
    return [
        {"name": "To Do", "order": 1, "wip_limit": unlimited},
        {"name": "Doing", "order": 2, "wip_limit": doing_limit},
        {"name": "Done", "order": 3, "wip_limit": unlimited},
    ]
