# salary_cap.py
#
# Salary cap accounting for a dynasty roster.
#   - Active players count in full
#   - Injury list players count at half
#   - Development players don't count
# All figures are $ millions. Negative space/headroom is a real answer (the
# team is over) and is returned as-is.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from config import (  # type: ignore[import]
    BONUS_SEASON,
    CAP_SEASONS,
    DEFAULT_HARD_CAP,
    DEFAULT_MIN_SALARY,
    DEFAULT_SALARY_CAP,
    DYNASTY_CUP_BONUSES,
    HARD_CAP,
    INJURY_CAP_WEIGHT,
    MIN_ACTIVE_ROSTER,
    MIN_SALARY,
    SALARY_CAP,
)
from models import DEVELOPMENT, INJURY, Player  # type: ignore[import]


@dataclass
class Roster:
    active: List[Player] = field(default_factory=list)
    development: List[Player] = field(default_factory=list)
    injury: List[Player] = field(default_factory=list)

    @classmethod
    def from_players(cls, players: Iterable[Player]) -> "Roster":
        roster = cls()
        for p in players:
            if p.roster_status == DEVELOPMENT:
                roster.development.append(p)
            elif p.roster_status == INJURY:
                roster.injury.append(p)
            else:
                roster.active.append(p)
        return roster


@dataclass
class SeasonCap:
    season: str
    allocation: float
    cap_space: float
    hard_cap_limit: float

    @property
    def over_cap(self) -> bool:
        return self.cap_space < 0

    @property
    def over_hard_cap(self) -> bool:
        return self.hard_cap_limit < 0


def season_cap_limit(season: str) -> float:
    return SALARY_CAP.get(season, DEFAULT_SALARY_CAP)


def season_hard_cap(season: str) -> float:
    return HARD_CAP.get(season, DEFAULT_HARD_CAP)


def season_min_salary(season: str) -> float:
    return MIN_SALARY.get(season, DEFAULT_MIN_SALARY)


def special_bonus(team_id: Optional[str], season: str) -> float:
    """Dynasty Cup bonus room; only applies to the first modeled season."""
    if season != BONUS_SEASON or not team_id:
        return 0.0
    return DYNASTY_CUP_BONUSES.get(team_id, 0.0)


def cap_allocation(roster: Roster, season: str) -> float:
    total = 0.0
    for p in roster.active:
        total += p.numeric_salary(season)
    for p in roster.injury:
        total += p.numeric_salary(season) * INJURY_CAP_WEIGHT
    return total


def cap_space(roster: Roster, team_id: Optional[str], season: str) -> float:
    limit = season_cap_limit(season) + special_bonus(team_id, season)
    return limit - cap_allocation(roster, season)


def min_salary_shortfall(roster: Roster, season: str) -> float:
    """Phantom minimum-salary charge for each active spot under the 16-man floor."""
    missing = max(0, MIN_ACTIVE_ROSTER - len(roster.active))
    return missing * season_min_salary(season)


def hard_cap_limit(roster: Roster, season: str) -> float:
    return season_hard_cap(season) - cap_allocation(roster, season) - min_salary_shortfall(roster, season)


def season_cap(roster: Roster, team_id: Optional[str], season: str) -> SeasonCap:
    return SeasonCap(
        season=season,
        allocation=cap_allocation(roster, season),
        cap_space=cap_space(roster, team_id, season),
        hard_cap_limit=hard_cap_limit(roster, season),
    )


def cap_table(
    roster: Roster, team_id: Optional[str], seasons: Optional[Iterable[str]] = None
) -> List[SeasonCap]:
    return [season_cap(roster, team_id, s) for s in (seasons or CAP_SEASONS)]


def format_currency(value: float) -> str:
    """12.0 -> "$12.00m", -3.5 -> "$-3.50m"."""
    return f"${value:.2f}m"


def cap_table_to_dict(rows: List[SeasonCap]) -> List[Dict[str, object]]:
    return [
        {
            "season": r.season,
            "capAllocation": r.allocation,
            "capSpace": r.cap_space,
            "hardCapLimit": r.hard_cap_limit,
            "overCap": r.over_cap,
            "overHardCap": r.over_hard_cap,
            "display": {
                "capAllocation": format_currency(r.allocation),
                "capSpace": format_currency(r.cap_space),
                "hardCapLimit": format_currency(r.hard_cap_limit),
            },
        }
        for r in rows
    ]
