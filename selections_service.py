"""
selections_service.py
---------------------

Weekly lineup submissions and commissioner edits against the Selections tab.

Both writes are a read-modify-write of the *whole* tab: read every row, change
the ones we own, clear the range, and write everything back. Nothing
coordinates two writers, so if two teams submit at the same moment and both
reads land before either write, the later write drops the earlier team's
rows. The league accepts this (submissions are rare and the UI lets you
re-submit); see DESIGN.md before putting this behind real concurrency.

Service functions take and return plain dicts with the web client's camelCase
keys so this module stays decoupled from FastAPI / pydantic types.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

import config  # type: ignore[import]
from models import Matchup, Selection  # type: ignore[import]
from positions import ALL_SLOTS, selections_by_slot  # type: ignore[import]
from row_mapper import (  # type: ignore[import]
    PLAYER_SCHEMA,
    SELECTION_HEADER,
    SELECTION_SCHEMA,
    SUBMITTED_COLUMNS,
)
from sheets_store import SheetStore, a1  # type: ignore[import]

logger = logging.getLogger(__name__)

# changes key -> Selections column an edit may overwrite
EDITABLE_FIELDS = {
    "playerId": "player_id",
    "playerName": "player_name",
    "nbaTeam": "nba_team",
    "gameDate": "game_date",
}


class SelectionError(Exception):
    pass


class SelectionValidationError(SelectionError):
    pass


class SelectionNotFoundError(SelectionError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


def utc_timestamp() -> str:
    """ISO-8601 UTC with milliseconds, e.g. 2025-10-21T09:15:02.123Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _missing(payload: Dict[str, Any], names: Sequence[str]) -> List[str]:
    return [n for n in names if payload.get(n) in (None, "", 0)]


def _week_key(value: Any) -> str:
    return str(value).strip()


def _parse_week(value: Any) -> int:
    try:
        return int(str(value).strip())
    except ValueError:
        raise SelectionValidationError(f"Invalid week: {value!r}") from None


class SelectionService:
    def __init__(
        self,
        store: SheetStore,
        write_tab: str = config.SELECTIONS_TAB,
        read_tab: Optional[str] = None,
        players_tab: str = config.PLAYERS_TAB,
        clock: Callable[[], str] = utc_timestamp,
    ):
        self.store = store
        self.write_tab = write_tab
        self.read_tab = read_tab or config.SELECTIONS_READ_TAB
        self.players_tab = players_tab
        self.clock = clock

    @property
    def write_range(self) -> str:
        return a1(self.write_tab, SELECTION_SCHEMA.cells)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _replace_table(self, header: List[str], rows: List[List[str]]) -> None:
        all_rows = [header] + rows
        self.store.clear(self.write_range)
        self.store.update(self.write_range, all_rows)

    def _read_table(self):
        rows = self.store.get(self.write_range)
        header = list(rows[0]) if rows else list(SELECTION_HEADER)
        return header, [list(r) for r in rows[1:]]

    def submit(self, payload: Dict[str, Any]) -> int:
        """
        Replace a team's lineup for a week.

        Every existing row for (week, teamId) is dropped and one new row per
        submitted slot is appended; all other teams' rows are written back
        untouched. Returns the number of rows written for the team.

        Only presence of the required fields is checked here. Slot count,
        slot names and using a player twice are left to the client, so the
        commissioner can push through an unusual lineup.
        """
        missing = _missing(payload, ("week", "teamId", "teamName"))
        if payload.get("selections") is None:
            missing.append("selections")
        if missing:
            raise SelectionValidationError(f"Missing required fields: {', '.join(missing)}")

        selections = payload["selections"]
        if not isinstance(selections, list):
            raise SelectionValidationError("selections must be a list")

        week = _parse_week(payload["week"])
        team_id = str(payload["teamId"])
        logger.info(
            "Submitting week %s lineup for %s (%d selections)", week, team_id, len(selections)
        )

        header, data_rows = self._read_table()
        week_key = _week_key(week)
        team_idx = SELECTION_SCHEMA.index("team_id")
        week_idx = SELECTION_SCHEMA.index("week")
        kept = [
            row
            for row in data_rows
            if not (
                _week_key(row[week_idx] if len(row) > week_idx else "") == week_key
                and (row[team_idx] if len(row) > team_idx else "") == team_id
            )
        ]

        submitted_at = self.clock()
        new_rows = []
        for sel in selections:
            sel = sel or {}
            record = Selection(
                week=week,
                matchup_id=str(payload.get("matchupId") or ""),
                team_id=team_id,
                team_name=str(payload["teamName"]),
                opponent_team_name=str(payload.get("opponentTeamName") or ""),
                position=str(sel.get("position") or ""),
                player_id=str(sel.get("playerId") or ""),
                player_name=str(sel.get("playerName") or ""),
                nba_team=str(sel.get("nbaTeam") or ""),
                game_date=str(sel.get("gameDate") or ""),
                nba_opposition=str(sel.get("selectedGame") or sel.get("nbaOpposition") or ""),
                submitted_date_time=submitted_at,
            )
            new_rows.append(SELECTION_SCHEMA.to_row(record)[:SUBMITTED_COLUMNS])

        self._replace_table(header, kept + new_rows)
        logger.info(
            "Selections tab rewritten: %d kept rows, %d new rows", len(kept), len(new_rows)
        )
        return len(new_rows)

    def edit(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Commissioner fix-up of a single stored selection.

        The row is found by exact (week, matchupId, teamName, position); only
        the first match is changed. Only the fields present in `changes` are
        overwritten, and the submission timestamp is refreshed.
        """
        missing = _missing(payload, ("week", "matchupId", "teamName", "position"))
        if missing:
            raise SelectionValidationError(
                "Missing required fields: week, matchupId, teamName, position"
            )

        changes = payload.get("changes") or {}
        if not isinstance(changes, dict):
            raise SelectionValidationError("changes must be an object")
        known = {k: v for k, v in changes.items() if v is not None and (
            k in EDITABLE_FIELDS or k in ("selectedGame", "nbaOpposition")
        )}
        if not known:
            raise SelectionValidationError("No changes provided")

        key = {
            "week": _week_key(payload["week"]),
            "matchup_id": str(payload["matchupId"]).strip(),
            "team_name": str(payload["teamName"]).strip(),
            "position": str(payload["position"]).strip(),
        }
        details = {
            "week": payload["week"],
            "matchupId": payload["matchupId"],
            "teamName": payload["teamName"],
            "position": payload["position"],
        }

        rows = self.store.get(self.write_range)
        if not rows:
            raise SelectionNotFoundError("No selections found", details)
        header = list(rows[0])
        data_rows = [list(r) for r in rows[1:]]

        match_at = None
        for i, row in enumerate(data_rows):
            if all(SELECTION_SCHEMA.cell(row, col).strip() == want for col, want in key.items()):
                match_at = i
                break
        if match_at is None:
            raise SelectionNotFoundError("No matching selection found", details)

        row = data_rows[match_at]
        if len(row) < SUBMITTED_COLUMNS:
            row.extend([""] * (SUBMITTED_COLUMNS - len(row)))

        for change_key, column in EDITABLE_FIELDS.items():
            if change_key in known:
                row[SELECTION_SCHEMA.index(column)] = str(known[change_key])
        # selected_game and nba_opposition share a column; selectedGame wins.
        opposition = known.get("selectedGame", known.get("nbaOpposition"))
        if opposition is not None:
            row[SELECTION_SCHEMA.index("nba_opposition")] = str(opposition)
        row[SELECTION_SCHEMA.index("submitted_date_time")] = self.clock()

        self._replace_table(header, data_rows)
        logger.info("Commissioner edit applied to %s", details)
        return dict(details, changes=known)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_selections(
        self,
        week: Optional[str] = None,
        team_id: Optional[str] = None,
        matchup_id: Optional[str] = None,
    ) -> List[Selection]:
        rows = self.store.get(a1(self.read_tab, SELECTION_SCHEMA.cells))
        data_rows = rows[1:]

        if week:
            data_rows = [r for r in data_rows if SELECTION_SCHEMA.cell(r, "week") == str(week)]
        if team_id:
            data_rows = [r for r in data_rows if SELECTION_SCHEMA.cell(r, "team_id") == team_id]
        if matchup_id:
            data_rows = [r for r in data_rows if SELECTION_SCHEMA.cell(r, "matchup_id") == matchup_id]

        selections = [SELECTION_SCHEMA.to_domain(r, i) for i, r in enumerate(data_rows)]
        if selections:
            self._attach_photos(selections)
        return selections

    def _attach_photos(self, selections: List[Selection]) -> None:
        """Best effort: a failed Players lookup leaves photo_url unset."""
        try:
            player_rows = self.store.get(a1(self.players_tab, PLAYER_SCHEMA.cells))
        except Exception:
            logger.warning("Photo enrichment failed, returning selections without photos", exc_info=True)
            return

        photos: Dict[str, str] = {}
        for prow in player_rows[1:]:
            name = PLAYER_SCHEMA.cell(prow, "name").strip()
            if name:
                photos[name.lower()] = PLAYER_SCHEMA.cell(prow, "photo").strip()
        for sel in selections:
            sel.photo_url = photos.get((sel.player_name or "").lower(), "")

    def box_score(self, matchup: Matchup) -> Dict[str, Any]:
        """
        Both sides of a matchup laid out slot by slot (None for an empty slot),
        alongside the aggregate totals the stats feed wrote to Matchups.
        """
        selections = self.list_selections(matchup_id=matchup.matchup_id)
        sides = []
        for team_id, team_name in (
            (matchup.team1_id, matchup.team1_name),
            (matchup.team2_id, matchup.team2_name),
        ):
            by_slot = selections_by_slot(s for s in selections if s.team_id == team_id)
            sides.append(
                {
                    "teamId": team_id,
                    "teamName": team_name,
                    "slots": [
                        {"slotId": spec.id, "name": spec.name, "reserve": spec.reserve,
                         "selection": by_slot.get(spec.id)}
                        for spec in ALL_SLOTS
                    ],
                }
            )
        return {"matchup": matchup, "teams": sides}
