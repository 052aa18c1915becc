from typing import Dict, List

import pytest

from models import DraftPicks, Game, Matchup, Player, Selection, Standing, Team, WeekDate
from row_mapper import (
    DRAFT_PICKS_SCHEMA,
    GAME_SCHEMA,
    MATCHUP_SCHEMA,
    PLAYER_SCHEMA,
    SELECTION_HEADER,
    SELECTION_SCHEMA,
    STANDING_SCHEMA,
    SUBMITTED_COLUMNS,
    TEAM_SCHEMA,
    WEEK_DATE_SCHEMA,
)
from sheets_store import SheetStore, SheetStoreError

SLOT_NAMES = [
    "Guard 1", "Guard 2", "Forward 1", "Forward 2", "Centre", "Guard/Forward",
    "Forward/Centre", "Flex 1", "Flex 2", "Res Guard", "Res Forward/Center", "Res Flex",
]

SUBMITTED_AT = "2025-10-20T08:00:00.000Z"


def _split_range(range_: str):
    tab, _, cells = range_.rpartition("!")
    if tab.startswith("'") and tab.endswith("'"):
        tab = tab[1:-1].replace("''", "'")
    return tab, cells


class FakeSheetStore(SheetStore):
    """In-memory spreadsheet keyed by tab name. Records every call."""

    def __init__(self, tabs: Dict[str, List[List[str]]] = None):
        self.tabs = {name: [list(r) for r in rows] for name, rows in (tabs or {}).items()}
        self.calls = []

    def get(self, range_):
        self.calls.append(("get", range_))
        tab, cells = _split_range(range_)
        rows = self.tabs.get(tab)
        if rows is None:
            return []
        if cells == "A2:B2":
            return [[str(c) for c in r[:2]] for r in rows[1:2]]
        return [[str(c) for c in r] for r in rows]

    def clear(self, range_):
        self.calls.append(("clear", range_))
        tab, _ = _split_range(range_)
        self.tabs[tab] = []

    def update(self, range_, rows):
        self.calls.append(("update", range_))
        tab, _ = _split_range(range_)
        self.tabs[tab] = [[str(c) for c in r] for r in rows]

    @property
    def writes(self):
        return [c for c in self.calls if c[0] in ("clear", "update")]


class BrokenSheetStore(SheetStore):
    def get(self, range_):
        raise SheetStoreError("quota exceeded for service-account@example.iam")

    def clear(self, range_):
        raise SheetStoreError("quota exceeded")

    def update(self, range_, rows):
        raise SheetStoreError("quota exceeded")


def tab(schema, records):
    return [[c.name for c in schema.columns]] + [schema.to_row(r) for r in records]


def selection_rows(week, team_id, team_name, matchup_id="M1", opponent="Bravo", prefix="P"):
    rows = []
    for i, slot in enumerate(SLOT_NAMES):
        sel = Selection(
            week=week,
            matchup_id=matchup_id,
            team_id=team_id,
            team_name=team_name,
            opponent_team_name=opponent,
            position=slot,
            player_id=f"{prefix}{i}",
            player_name=f"Player {prefix}{i}",
            nba_team="BOS",
            game_date="2025-10-21",
            nba_opposition="Tue @ NYK",
            submitted_date_time=SUBMITTED_AT,
        )
        rows.append(SELECTION_SCHEMA.to_row(sel)[:SUBMITTED_COLUMNS])
    return rows


def lineup_payload(week=3, team_id="T001", team_name="Alpha", prefix="N"):
    return {
        "week": week,
        "teamId": team_id,
        "teamName": team_name,
        "matchupId": "M1",
        "opponentTeamName": "Bravo",
        "selections": [
            {
                "position": slot,
                "playerId": f"{prefix}{i}",
                "playerName": f"New {prefix}{i}",
                "nbaTeam": "LAL",
                "gameDate": "2025-10-22",
                "nbaOpposition": "GSW",
                "selectedGame": "Wed vs GSW",
            }
            for i, slot in enumerate(SLOT_NAMES)
        ],
    }


@pytest.fixture
def players():
    return [
        Player(player_id="P1", name="Guard Active", team_id="T001", roster_status="ACTIVE",
               nba_team="BOS", position="G", salary_25_26=10.0, photo="https://img/p1.png"),
        Player(player_id="P2", name="Centre Injured", team_id="T001", roster_status="INJURY",
               nba_team="LAL", position="C", salary_25_26=4.0),
        Player(player_id="P3", name="Forward Dev", team_id="T001", roster_status="DEVELOPMENT",
               nba_team="NYK", position="F", salary_25_26=20.0),
        Player(player_id="P10", name="Bravo Wing", team_id="T002", roster_status="ACTIVE",
               nba_team="MIA", position="G/F", salary_25_26="RFA"),
    ]


@pytest.fixture
def league_tabs(players):
    return {
        "Teams": tab(TEAM_SCHEMA, [
            Team(team_id="T001", team_name="Alpha", email="alpha@example.com", password="alpha-pass"),
            Team(team_id="T002", team_name="Bravo", email="bravo@example.com", password="bravo-pass"),
            Team(team_id="T014", team_name="Commish", email="commish@example.com", password="boss"),
        ]),
        "Players": tab(PLAYER_SCHEMA, players),
        "Matchups": tab(MATCHUP_SCHEMA, [
            Matchup(week=3, matchup_id="M1", team1_id="T001", team1_name="Alpha",
                    team2_id="T002", team2_name="Bravo", team1_score=101.5, team2_score=99.0),
        ]),
        "WeekDates": tab(WEEK_DATE_SCHEMA, [
            WeekDate(week=1, start_date="06/10/2025", finish_date="12/10/2025"),
            WeekDate(week=2, start_date="13/10/2025", finish_date="19/10/2025"),
            WeekDate(week=3, start_date="20/10/2025", finish_date="26/10/2025"),
            WeekDate(week=4, start_date="27/10/2025", finish_date="02/11/2025"),
        ]),
        "Schedule": tab(GAME_SCHEMA, [
            Game(week=3, nba_team="BOS", date="2025-10-21", opponent="NYK", home_away="@"),
            Game(week=3, nba_team="BOS", date="2025-10-23", opponent="MIA", home_away="vs"),
            Game(week=3, nba_team="NYK", date="2025-10-22", opponent="BOS", home_away="vs"),
            Game(week=4, nba_team="BOS", date="2025-10-28", opponent="LAL", home_away="vs"),
        ]),
        "Standings": tab(STANDING_SCHEMA, [
            Standing(team_id="T001", team_name="Alpha", position=1, wins=2),
            Standing(team_id="T002", team_name="Bravo", position=2, wins=1),
            Standing(team_id="T009", team_name="Outside", position=8),
            Standing(team_id="", team_name="Spacer", position=3),
        ]),
        "Draft Picks": tab(DRAFT_PICKS_SCHEMA, [
            DraftPicks(team_id="T001", picks_2026="1st, 2nd", notes="Owes 2027 2nd"),
        ]),
        "TodaysDate": [["Date", "Time"], ["21/10/2025", "09:30"]],
    }


@pytest.fixture
def store(league_tabs):
    return FakeSheetStore(league_tabs)


@pytest.fixture
def seeded_store(store):
    """League plus both teams' week 3 lineups and Alpha's week 2 lineup."""
    store.tabs["Selections"] = (
        [list(SELECTION_HEADER)]
        + selection_rows(2, "T001", "Alpha", matchup_id="M0", prefix="W")
        + selection_rows(3, "T001", "Alpha", prefix="A")
        + selection_rows(3, "T002", "Bravo", opponent="Alpha", prefix="B")
    )
    return store


@pytest.fixture
def client(seeded_store):
    from fastapi.testclient import TestClient

    import app as app_module

    app_module.app.dependency_overrides[app_module.get_store] = lambda: seeded_store
    # Read back raw submissions in tests rather than the stats copy.
    app_module.app.dependency_overrides[app_module.get_selection_service] = (
        lambda: app_module.SelectionService(seeded_store, read_tab="Selections")
    )
    with TestClient(app_module.app) as c:
        yield c
    app_module.app.dependency_overrides.clear()
