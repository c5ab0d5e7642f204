import pytest

from src.services.ordering import (
    Placement,
    default_columns,
    has_capacity,
    next_order,
    next_position,
)


class TestNextOrder:
    def test_first_column_gets_order_one(self):
        assert next_order([]) == 1

    def test_appends_after_highest_order(self):
        assert next_order([1, 2, 3]) == 4

    def test_freed_order_is_not_reused(self):
        # Column with order 2 was deleted
        assert next_order([1, 3]) == 4


class TestNextPosition:
    def test_empty_column_starts_at_one(self):
        assert next_position([], Placement.TOP) == 1
        assert next_position([], Placement.BOTTOM) == 1

    def test_bottom_goes_after_highest(self):
        assert next_position([3, 1, 2], Placement.BOTTOM) == 4

    def test_top_goes_before_lowest(self):
        position = next_position([4, 7], Placement.TOP)
        assert position == 3
        assert position < min([4, 7])

    def test_top_can_go_below_zero(self):
        assert next_position([0, 5], Placement.TOP) == -1

    def test_placement_accepts_plain_strings(self):
        assert next_position([1, 2], "top") == 0
        assert next_position([1, 2], "bottom") == 3

    def test_new_position_never_collides(self):
        positions = [-2, 0, 9]
        for placement in Placement:
            assert next_position(positions, placement) not in positions


class TestHasCapacity:
    @pytest.mark.parametrize("count,limit,expected", [
        (0, 3, True),
        (2, 3, True),
        (3, 3, False),
        (0, 0, False),
        # Limit lowered below occupancy
        (5, 3, False),
    ])
    def test_capacity(self, count, limit, expected):
        assert has_capacity(count, limit) is expected


def test_default_columns_layout():
    columns = default_columns(999, 3)

    assert [c["name"] for c in columns] == ["To Do", "Doing", "Done"]
    assert [c["order"] for c in columns] == [1, 2, 3]
    assert [c["wip_limit"] for c in columns] == [999, 3, 999]
