import pytest

from models import Player, Selection
from positions import (
    ALL_SLOTS,
    RESERVE_SLOTS,
    STARTER_SLOTS,
    canonical_slot_name,
    class_allows_position,
    eligible_positions,
    is_eligible,
    selections_by_slot,
    slot_for_label,
    sort_by_salary,
)


def test_twelve_slots_with_three_reserves():
    assert len(ALL_SLOTS) == 12
    assert len(STARTER_SLOTS) == 9
    assert [s.reserve for s in RESERVE_SLOTS] == [True, True, True]
    assert len({s.id for s in ALL_SLOTS}) == 12


@pytest.mark.parametrize(
    "slot, expected",
    [
        ("Guard 1", {"G", "G/F"}),
        ("Forward 2", {"F", "G/F"}),
        ("Centre", {"C", "F/C"}),
        ("Guard/Forward", {"G", "F", "G/F", "F/C"}),
        ("Forward/Centre", {"G/F", "F", "C", "F/C"}),
        ("Flex 1", {"G", "F", "C", "G/F", "F/C"}),
        ("Res Guard", {"G", "G/F"}),
    ],
)
def test_slot_eligibility(slot, expected):
    assert eligible_positions(slot) == expected


def test_forward_slot_rejects_bigs():
    assert not class_allows_position("F", "F/C")
    assert class_allows_position("F", "G/F")


def test_centre_center_spelling():
    assert slot_for_label("Center").id == "centre"
    assert slot_for_label("res forward/centre").id == "forwardCentreRes"
    assert canonical_slot_name("Forward/Center") == "Forward/Centre"
    assert is_eligible("Center", "C")


def test_unknown_slot():
    assert slot_for_label("Sixth Man") is None
    assert not is_eligible("Sixth Man", "G")
    assert eligible_positions("Sixth Man") == set()
    assert canonical_slot_name("Sixth Man") == "Sixth Man"


def test_sort_by_salary_puts_sentinels_last():
    roster = [
        Player(player_id="a", salary_25_26="RFA"),
        Player(player_id="b", salary_25_26=5.0),
        Player(player_id="c", salary_25_26=30.0),
    ]
    assert [p.player_id for p in sort_by_salary(roster, "25-26")] == ["c", "b", "a"]


def test_selections_by_slot_first_row_wins():
    rows = [
        Selection(week=1, position="Guard 1", player_id="first"),
        Selection(week=1, position="Guard 1", player_id="second"),
        Selection(week=1, position="Bench", player_id="nowhere"),
        Selection(week=1, position="Res Forward/Center", player_id="big"),
    ]
    by_slot = selections_by_slot(rows)
    assert by_slot["guard1"].player_id == "first"
    assert by_slot["forwardCentreRes"].player_id == "big"
    assert len(by_slot) == 2
