# row_mapper.py
#
# Explicit column schemas for every spreadsheet tab.
# Rows come back from the sheet as plain lists of strings; each Schema below
# lists the columns in sheet order so a moved column shows up as a schema
# change rather than a silently wrong index.

from __future__ import annotations

import dataclasses
import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Type

from models import (  # type: ignore[import]
    ACTIVE,
    DEVELOPMENT,
    INJURY,
    DraftPicks,
    Game,
    Matchup,
    Player,
    Selection,
    Standing,
    Team,
    WeekDate,
)

SALARY_SENTINELS = ("EXT/UFA", "RFA", "UFA", "TO")

_LEADING_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")
_SALARY_DECORATION = re.compile(r"[$mM,\s]")


# ---------------------------------------------------------------------------
# Cell parsers. Each raises ValueError when the cell can't be used, and the
# schema falls back to the column default.
# ---------------------------------------------------------------------------

def parse_str(raw: str) -> str:
    return raw


def parse_trimmed(raw: str) -> str:
    return raw.strip()


def _leading_number(raw: str) -> float:
    # Sheets happily hands back "45.6%" or "12 pts"; take the leading number.
    m = _LEADING_NUMBER.match(raw.strip())
    if not m:
        raise ValueError(f"not a number: {raw!r}")
    value = float(m.group(0))
    if not math.isfinite(value):
        raise ValueError(f"not a finite number: {raw!r}")
    return value


def parse_int(raw: str) -> int:
    return int(_leading_number(raw))


def parse_float(raw: str) -> float:
    return _leading_number(raw)


def parse_salary(raw: str):
    """
    Salary cell -> float, sentinel string, or "".

    "" means "no data" and is deliberately different from a 0.0 salary.
    """
    text = str(raw)
    if text == "":
        return ""
    if any(s in text for s in SALARY_SENTINELS):
        return text
    # Annotated cells like "12.5 (PO)" or "12.5*" keep their leading figure.
    cleaned = _SALARY_DECORATION.sub("", text)
    try:
        value = _leading_number(cleaned)
    except ValueError:
        return ""
    if value < 0:
        return ""
    return value


def parse_roster_status(raw: str) -> str:
    value = str(raw or "").strip().upper()
    if value in ("DEV", "DEVELOPMENTAL", "DEVELOPMENT"):
        return DEVELOPMENT
    if value in ("IR", "INJ", "INJURY"):
        return INJURY
    return ACTIVE


def normalize_status_filter(raw: Optional[str]) -> Optional[str]:
    """
    Query-string roster status -> canonical status, or None to skip filtering.

    Unlike parse_roster_status, unknown values don't collapse to ACTIVE.
    """
    if not raw:
        return None
    value = raw.strip().upper()
    if value in ("DEV", "DEVELOPMENTAL", "DEVELOPMENT"):
        return DEVELOPMENT
    if value in ("IR", "INJ", "INJURY"):
        return INJURY
    if value == ACTIVE:
        return ACTIVE
    return None


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def column_letter(index: int) -> str:
    """0 -> A, 25 -> Z, 26 -> AA, 53 -> BB."""
    letters = ""
    n = index + 1
    while n:
        n, rem = divmod(n - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def camel_name(name: str) -> str:
    """
    Attribute name -> JSON key, matching the keys the web client expects:
    team_id -> teamId, salary_25_26 -> salary25_26, team1_3pm -> team13pm.
    """
    parts = name.split("_")
    out = parts[0]
    for prev, part in zip(parts, parts[1:]):
        if part.isdigit() and prev.isdigit():
            out += "_" + part
        elif part[:1].isdigit():
            out += part
        else:
            out += part[:1].upper() + part[1:]
    return out


def record_to_dict(record: Any, exclude: Iterable[str] = ()) -> Dict[str, Any]:
    skip = set(exclude)
    return {
        camel_name(f.name): getattr(record, f.name)
        for f in dataclasses.fields(record)
        if f.name not in skip
    }


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Column:
    name: str
    parse: Callable[[str], Any] = parse_str
    default: Any = ""
    # e.g. "player_{}" -> rows with a blank id become player_0, player_1...
    indexed_default: Optional[str] = None


class Schema:
    def __init__(self, record_cls: Type, columns: Sequence[Column]):
        self.record_cls = record_cls
        self.columns: Tuple[Column, ...] = tuple(columns)
        self._index = {c.name: i for i, c in enumerate(self.columns)}
        field_names = {f.name for f in dataclasses.fields(record_cls)}
        unknown = [c.name for c in self.columns if c.name not in field_names]
        if unknown:
            raise ValueError(f"{record_cls.__name__} has no fields {unknown}")

    @property
    def width(self) -> int:
        return len(self.columns)

    @property
    def cells(self) -> str:
        """Column span for an A1 range, e.g. "A:AB"."""
        return f"A:{column_letter(self.width - 1)}"

    def index(self, name: str) -> int:
        return self._index[name]

    def cell(self, row: Sequence[Any], name: str) -> str:
        i = self._index[name]
        if i >= len(row) or row[i] is None:
            return ""
        return str(row[i])

    def to_domain(self, row: Sequence[Any], row_index: int = 0):
        values: Dict[str, Any] = {}
        for i, col in enumerate(self.columns):
            raw = "" if i >= len(row) or row[i] is None else str(row[i])
            if raw == "":
                if col.indexed_default is not None:
                    values[col.name] = col.indexed_default.format(row_index)
                else:
                    values[col.name] = col.default
                continue
            try:
                values[col.name] = col.parse(raw)
            except ValueError:
                values[col.name] = col.default
        return self.record_cls(**values)

    def to_row(self, record: Any) -> List[str]:
        return [format_cell(getattr(record, c.name)) for c in self.columns]

    def records_from_rows(self, rows: Optional[Sequence[Sequence[Any]]]) -> list:
        """Header row is skipped; no data rows means an empty list."""
        if not rows or len(rows) < 2:
            return []
        return [self.to_domain(row, i) for i, row in enumerate(rows[1:])]


def _str(name: str) -> Column:
    return Column(name)


def _int(name: str) -> Column:
    return Column(name, parse_int, 0)


def _float(name: str) -> Column:
    return Column(name, parse_float, 0.0)


def _salary(name: str) -> Column:
    return Column(name, parse_salary, "")


TEAM_SCHEMA = Schema(Team, [
    Column("team_id", indexed_default="team_{}"),
    _str("team_name"),
    _str("email"),
    _str("password"),
    Column("main_logo", parse_trimmed),
    Column("word_logo", parse_trimmed),
    _str("established"),
    _str("conference"),
    _str("manager"),
    _str("record"),
    _str("playoffs"),
    _str("conference_titles"),
    _str("championships"),
])

PLAYER_SCHEMA = Schema(Player, [
    Column("player_id", indexed_default="player_{}"),
    _str("name"),
    _str("team_id"),
    _str("dynasty_team"),
    Column("roster_status", parse_roster_status, ACTIVE),
    _str("nba_team"),
    _str("position"),
    _str("birth_date"),
    _int("age"),
    _str("drafted"),
    _str("signed_via"),
    _str("year"),
    _str("contract_length"),
    _str("contract_notes"),
    _str("extension"),
    _str("awards"),
    _str("player_history_log"),
    _str("rank_type"),
    _str("two_year_rank"),
    _str("career_rank"),
    _str("rank_21_22"),
    _str("rank_22_23"),
    _str("rank_23_24"),
    _str("rank_24_25"),
    _str("rank_25_26"),
    _str("rank_26_27"),
    _str("rank_27_28"),
    _str("rank_28_29"),
    _str("career_earnings"),
    _salary("salary_21_22"),
    _salary("salary_22_23"),
    _salary("salary_23_24"),
    _salary("salary_24_25"),
    _salary("salary_25_26"),
    _str("option_25_26"),
    _salary("salary_26_27"),
    _str("option_26_27"),
    _salary("salary_27_28"),
    _str("option_27_28"),
    _salary("salary_28_29"),
    _str("option_28_29"),
    _salary("salary_29_30"),
    _str("option_29_30"),
    _salary("salary_30_31"),
    _str("option_30_31"),
    _salary("salary_31_32"),
    _str("option_31_32"),
    _salary("salary_32_33"),
    _str("option_32_33"),
    _salary("salary_33_34"),
    _str("option_33_34"),
    _salary("salary_34_35"),
    _str("option_34_35"),
    _str("photo"),
])


def _side(prefix: str) -> List[Column]:
    return [
        _float(f"{prefix}_score"),
        _int(f"{prefix}_gp"),
        _int(f"{prefix}_pts"),
        _int(f"{prefix}_3pm"),
        _int(f"{prefix}_ast"),
        _int(f"{prefix}_stl"),
        _int(f"{prefix}_blk"),
        _int(f"{prefix}_orb"),
        _int(f"{prefix}_drb"),
        _int(f"{prefix}_fgm"),
        _int(f"{prefix}_fga"),
        _float(f"{prefix}_fg_percent"),
        _int(f"{prefix}_ftm"),
        _int(f"{prefix}_fta"),
        _float(f"{prefix}_ft_percent"),
    ]


MATCHUP_SCHEMA = Schema(Matchup, [
    _int("week"),
    Column("matchup_id", indexed_default="matchup_{}"),
    _str("team1_id"),
    _str("team1_name"),
    _str("team2_id"),
    _str("team2_name"),
    *_side("team1"),
    *_side("team2"),
])

WEEK_DATE_SCHEMA = Schema(WeekDate, [
    _int("week"),
    _str("start_date"),
    _str("finish_date"),
])

GAME_SCHEMA = Schema(Game, [
    _int("week"),
    _str("nba_team"),
    _str("date"),
    _str("opponent"),
    _str("home_away"),
])

# Columns A:L are written on submission; M:AB are filled in by the stats feed.
SELECTION_SCHEMA = Schema(Selection, [
    _int("week"),
    _str("matchup_id"),
    _str("team_id"),
    _str("team_name"),
    _str("opponent_team_name"),
    _str("position"),
    _str("player_id"),
    _str("player_name"),
    _str("nba_team"),
    _str("game_date"),
    _str("nba_opposition"),
    _str("submitted_date_time"),
    _str("date_code"),
    _str("time"),
    _float("min"),
    _float("pts"),
    _float("three_pm"),
    _float("ast"),
    _float("stl"),
    _float("blk"),
    _float("orb"),
    _float("drb"),
    _float("fgm"),
    _float("fga"),
    _float("fg_percent"),
    _float("ftm"),
    _float("fta"),
    _float("ft_percent"),
])
SUBMITTED_COLUMNS = SELECTION_SCHEMA.index("submitted_date_time") + 1

# Written when the Selections tab has lost its header row.
SELECTION_HEADER = [
    "week", "matchup_id", "team_id", "team_name", "opp_team_name", "positions",
    "player_id", "player_name", "nba_team", "game_date", "nba_opposition",
    "submitted_date_time", "date_code", "TIME", "MIN", "PTS", "3PM", "AST",
    "STL", "BLK", "ORB", "DRB", "FGM", "FGA", "FG%", "FTM", "FTA", "FT%",
]

STANDING_SCHEMA = Schema(Standing, [
    _str("team_id"),
    _str("team_name"),
    _str("conference"),
    _int("position"),
    _int("wins"),
    _int("losses"),
    _int("ties"),
    _str("record"),
    _float("points_for"),
    _float("points_against"),
    _float("percentage"),
])

DRAFT_PICKS_SCHEMA = Schema(DraftPicks, [
    _str("team_id"),
    _str("picks_2026"),
    _str("picks_2027"),
    _str("picks_2028"),
    _str("picks_2029"),
    _str("picks_2030"),
    _str("picks_2031"),
    _str("notes"),
])
