# league_data.py
#
# Read-side adapters: pull a tab from the league spreadsheet and map it into
# domain records. Every loader returns an empty list when the tab is missing
# or only has a header row.

from __future__ import annotations

from typing import List, Optional, Tuple

import config  # type: ignore[import]
from models import DraftPicks, Game, Matchup, Player, Standing, Team, WeekDate  # type: ignore[import]
from row_mapper import (  # type: ignore[import]
    DRAFT_PICKS_SCHEMA,
    GAME_SCHEMA,
    MATCHUP_SCHEMA,
    PLAYER_SCHEMA,
    STANDING_SCHEMA,
    TEAM_SCHEMA,
    WEEK_DATE_SCHEMA,
    Schema,
    normalize_status_filter,
)
from sheets_store import SheetStore, a1  # type: ignore[import]


def _load(store: SheetStore, tab: str, schema: Schema) -> list:
    return schema.records_from_rows(store.get(a1(tab, schema.cells)))


def load_teams(store: SheetStore) -> List[Team]:
    return _load(store, config.TEAMS_TAB, TEAM_SCHEMA)


def find_team_by_email(store: SheetStore, email: str) -> Optional[Team]:
    wanted = email.strip().lower()
    for team in load_teams(store):
        if team.email.strip().lower() == wanted:
            return team
    return None


def load_players(
    store: SheetStore, team_id: Optional[str] = None, status: Optional[str] = None
) -> List[Player]:
    """
    Players, optionally limited to one dynasty team and/or roster status.
    An unrecognised status filter is ignored rather than matching nothing.
    """
    players: List[Player] = _load(store, config.PLAYERS_TAB, PLAYER_SCHEMA)
    if team_id:
        players = [p for p in players if p.team_id == team_id]
    wanted = normalize_status_filter(status)
    if wanted:
        players = [p for p in players if p.roster_status == wanted]
    return players


def load_matchups(store: SheetStore) -> List[Matchup]:
    return _load(store, config.MATCHUPS_TAB, MATCHUP_SCHEMA)


def find_matchup(matchups: List[Matchup], team_id: str, week: int) -> Optional[Matchup]:
    for m in matchups:
        if m.week == week and m.involves(team_id):
            return m
    return None


def load_week_dates(store: SheetStore) -> List[WeekDate]:
    return _load(store, config.WEEK_DATES_TAB, WEEK_DATE_SCHEMA)


def load_schedule(store: SheetStore, week: Optional[int] = None) -> List[Game]:
    games: List[Game] = _load(store, config.SCHEDULE_TAB, GAME_SCHEMA)
    if week is not None:
        games = [g for g in games if g.week == week]
    return games


def load_standings(store: SheetStore) -> List[Standing]:
    """Standings rows with a team and a listed place (1..7) only."""
    standings: List[Standing] = _load(store, config.STANDINGS_TAB, STANDING_SCHEMA)
    return [
        s
        for s in standings
        if s.team_id and 0 < s.position <= config.STANDINGS_MAX_POSITION
    ]


def load_draft_picks(store: SheetStore) -> List[DraftPicks]:
    return _load(store, config.DRAFT_PICKS_TAB, DRAFT_PICKS_SCHEMA)


def load_todays_date(store: SheetStore) -> Optional[Tuple[str, str]]:
    """(date, time) from the TodaysDate tab, or None if the cells are empty."""
    rows = store.get(a1(config.TODAYS_DATE_TAB, "A2:B2"))
    if not rows:
        return None
    row = rows[0]
    date_cell = row[0] if len(row) > 0 else ""
    time_cell = row[1] if len(row) > 1 else ""
    return date_cell, time_cell
