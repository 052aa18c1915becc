# lineup_builder.py
#
# Draft state for a team's weekly lineup: which player and which game fill
# each of the 12 fixed slots before the lineup is submitted.

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from config import CURRENT_SEASON  # type: ignore[import]
from models import ACTIVE, DEVELOPMENT, Game, LineupSlot, Player, Selection  # type: ignore[import]
from positions import (  # type: ignore[import]
    ALL_SLOTS,
    class_allows_position,
    slot_for_label,
    sort_by_salary,
)
from week_resolver import parse_sheet_date  # type: ignore[import]

# Injured players can't be picked.
SELECTABLE_STATUSES = {ACTIVE, DEVELOPMENT}


class LineupIncompleteError(ValueError):
    pass


def split_game_id(game_id: str):
    """ "LAL-2025-10-21" -> ("LAL", "2025-10-21"). Team codes never contain '-'. """
    nba_team, _, game_date = (game_id or "").partition("-")
    return nba_team, game_date


def format_game_display(game: Game) -> str:
    """Short label for a game, e.g. "Tue @ BOS"."""
    day = parse_sheet_date(game.date)
    if day is None:
        return f"Invalid date: {game.date}"
    return f"{day.strftime('%a')} {game.home_away} {game.opponent}"


class LineupBuilder:
    def __init__(
        self,
        players: Iterable[Player],
        games: Iterable[Game] = (),
        season: str = CURRENT_SEASON,
    ):
        self.players: List[Player] = list(players)
        self.games: List[Game] = list(games)
        self.season = season
        self._players_by_id: Dict[str, Player] = {p.player_id: p for p in self.players}
        self.slots: Dict[str, LineupSlot] = {
            s.id: LineupSlot(id=s.id, name=s.name, position=s.position) for s in ALL_SLOTS
        }

    @classmethod
    def from_selections(
        cls,
        players: Iterable[Player],
        games: Iterable[Game],
        selections: Iterable[Selection],
        season: str = CURRENT_SEASON,
    ) -> "LineupBuilder":
        """
        Rebuild the draft from a team's previously submitted rows. Rows for
        unknown slots, or for players no longer on the roster, are skipped.
        """
        builder = cls(players, games, season)
        for sel in selections:
            spec = slot_for_label(sel.position)
            if spec is None or builder.player(sel.player_id) is None:
                continue
            slot = builder.slots[spec.id]
            slot.player_id = sel.player_id or None
            match = builder._find_game(sel.nba_team, sel.game_date)
            slot.game_id = match.game_id if match else None
        return builder

    def _find_game(self, nba_team: str, game_date: str) -> Optional[Game]:
        for g in self.games:
            if g.nba_team == nba_team and g.date == game_date:
                return g
        return None

    def player(self, player_id: Optional[str]) -> Optional[Player]:
        if not player_id:
            return None
        return self._players_by_id.get(player_id)

    def assign_player(self, slot_id: str, player_id: str) -> bool:
        """
        Put a player in a slot. The slot's game is cleared because it was
        chosen from the previous player's NBA schedule. Unknown players are
        ignored.
        """
        slot = self.slots.get(slot_id)
        if slot is None or player_id not in self._players_by_id:
            return False
        slot.player_id = player_id
        slot.game_id = None
        return True

    def assign_game(self, slot_id: str, game_id: str) -> bool:
        slot = self.slots.get(slot_id)
        if slot is None:
            return False
        slot.game_id = game_id
        return True

    def clear_slot(self, slot_id: str) -> None:
        slot = self.slots.get(slot_id)
        if slot is not None:
            slot.player_id = None
            slot.game_id = None

    def available_players(self, position: str, excluding_slot_id: str) -> List[Player]:
        """
        Players who could go in a slot of class `position`: healthy, eligible,
        and not already used in another slot. The player currently in
        `excluding_slot_id` stays available so the dropdown can show them.
        """
        taken = {
            s.player_id
            for s in self.slots.values()
            if s.id != excluding_slot_id and s.player_id
        }
        pool = [
            p
            for p in self.players
            if p.roster_status in SELECTABLE_STATUSES
            and p.player_id not in taken
            and class_allows_position(position, p.position)
        ]
        return sort_by_salary(pool, self.season)

    def game_options(self, slot_id: str) -> List[Game]:
        """This week's games for the NBA team of the player in the slot."""
        slot = self.slots.get(slot_id)
        player = self.player(slot.player_id) if slot else None
        if player is None:
            return []
        return [g for g in self.games if g.nba_team == player.nba_team]

    def is_ready_to_submit(self) -> bool:
        return all(s.player_id and s.game_id for s in self.slots.values())

    def to_submission(self) -> List[Dict[str, str]]:
        """
        Build the `selections` payload for POST /selections/submit, one entry
        per slot in fixed slot order.
        """
        if not self.is_ready_to_submit():
            missing = [s.name for s in self.slots.values() if not (s.player_id and s.game_id)]
            raise LineupIncompleteError(f"Lineup incomplete: {', '.join(missing)}")

        entries: List[Dict[str, str]] = []
        for spec in ALL_SLOTS:
            slot = self.slots[spec.id]
            player = self.player(slot.player_id)
            nba_team, game_date = split_game_id(slot.game_id or "")
            game = self._find_game(nba_team, game_date)
            entries.append(
                {
                    "position": spec.name,
                    "playerId": player.player_id if player else "",
                    "playerName": player.name if player else "",
                    "nbaTeam": player.nba_team if player else "",
                    "gameDate": game_date,
                    "nbaOpposition": game.opponent if game else "",
                    "selectedGame": format_game_display(game) if game else "",
                }
            )
        return entries
