# positions.py
#
# Weekly lineup slots and which player positions may fill them.

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

from config import CURRENT_SEASON  # type: ignore[import]
from models import Player, Selection  # type: ignore[import]

# Position codes that appear in the Players tab.
KNOWN_POSITIONS = ("G", "F", "C", "G/F", "F/C")

ANY = "ANY"


@dataclass(frozen=True)
class SlotSpec:
    id: str
    name: str        # label as stored in the Selections tab
    position: str    # slot class: G, F, C, G/F, F/C or ANY
    reserve: bool = False


STARTER_SLOTS: List[SlotSpec] = [
    SlotSpec("guard1", "Guard 1", "G"),
    SlotSpec("guard2", "Guard 2", "G"),
    SlotSpec("forward1", "Forward 1", "F"),
    SlotSpec("forward2", "Forward 2", "F"),
    SlotSpec("centre", "Centre", "C"),
    SlotSpec("guardForward", "Guard/Forward", "G/F"),
    SlotSpec("forwardCentre", "Forward/Centre", "F/C"),
    SlotSpec("flex1", "Flex 1", ANY),
    SlotSpec("flex2", "Flex 2", ANY),
]

RESERVE_SLOTS: List[SlotSpec] = [
    SlotSpec("guardRes", "Res Guard", "G", reserve=True),
    SlotSpec("forwardCentreRes", "Res Forward/Center", "F/C", reserve=True),
    SlotSpec("flexRes", "Res Flex", ANY, reserve=True),
]

ALL_SLOTS: List[SlotSpec] = STARTER_SLOTS + RESERVE_SLOTS
SLOTS_BY_ID: Dict[str, SlotSpec] = {s.id: s for s in ALL_SLOTS}


def spelling_variants(slot_name: str) -> Set[str]:
    """
    Labels that mean the same slot. The UI says "Centre" but older rows in
    the sheet say "Center" (and the reserve slot is stored the other way round).
    """
    name = slot_name.strip()
    variants = {name}
    if "Centre" in name:
        variants.add(name.replace("Centre", "Center"))
    if "Center" in name:
        variants.add(name.replace("Center", "Centre"))
    return variants


_SLOT_BY_LABEL: Dict[str, SlotSpec] = {}
for _slot in ALL_SLOTS:
    for _label in spelling_variants(_slot.name):
        _SLOT_BY_LABEL[_label.lower()] = _slot


def slot_for_label(label: str) -> Optional[SlotSpec]:
    """Find the slot for a stored label, tolerating case and spelling."""
    return _SLOT_BY_LABEL.get((label or "").strip().lower())


def canonical_slot_name(label: str) -> str:
    slot = slot_for_label(label)
    return slot.name if slot else label


def class_allows_position(slot_class: str, position: str) -> bool:
    """
    Return True if a player listed at `position` can fill a slot of the given
    class.

      - G slots take anyone with a G in their position (G, G/F)
      - F slots take F and G/F but not bigs (F/C)
      - C slots take only C and F/C
      - G/F and F/C slots take either half
      - ANY (flex) takes everybody
    """
    pos = (position or "").strip().upper()
    cls = (slot_class or "").upper()

    if cls == "G":
        return "G" in pos
    if cls == "F":
        return "F" in pos and "C" not in pos
    if cls == "C":
        return pos in ("C", "F/C")
    if cls == "G/F":
        return "G" in pos or "F" in pos
    if cls == "F/C":
        return "F" in pos or "C" in pos
    if cls == ANY:
        return True
    return False


def is_eligible(slot_name: str, position: str) -> bool:
    slot = slot_for_label(slot_name)
    if slot is None:
        return False
    return class_allows_position(slot.position, position)


def eligible_positions(slot_name: str) -> Set[str]:
    """Known position codes that can fill the named slot (empty if unknown)."""
    return {p for p in KNOWN_POSITIONS if is_eligible(slot_name, p)}


def _salary_key(season: str):
    def key(p: Player) -> float:
        return p.numeric_salary(season)
    return key


def sort_by_salary(players: Iterable[Player], season: str = CURRENT_SEASON) -> List[Player]:
    """Highest paid first; sentinel salaries sort as 0."""
    return sorted(players, key=_salary_key(season), reverse=True)


def selections_by_slot(selections: Iterable[Selection]) -> Dict[str, Selection]:
    """
    Index a team's selections by slot id. First row wins if a slot was stored
    twice; rows with unrecognised labels are dropped.
    """
    out: Dict[str, Selection] = {}
    for sel in selections:
        slot = slot_for_label(sel.position)
        if slot is not None and slot.id not in out:
            out[slot.id] = sel
    return out
