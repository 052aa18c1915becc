# models.py

from dataclasses import dataclass
from typing import Optional, Union

# Salary cells hold either a figure in $m, a contract-status marker
# ("RFA", "UFA", "EXT/UFA", "TO") or "" when the sheet has no data.
SalaryValue = Union[float, str]

ACTIVE = "ACTIVE"
DEVELOPMENT = "DEVELOPMENT"
INJURY = "INJURY"


@dataclass
class Team:
    team_id: str
    team_name: str = ""
    email: str = ""
    password: str = ""
    main_logo: str = ""
    word_logo: str = ""
    established: str = ""
    conference: str = ""
    manager: str = ""
    record: str = ""
    playoffs: str = ""
    conference_titles: str = ""
    championships: str = ""


@dataclass
class Player:
    player_id: str
    name: str = ""
    team_id: str = ""
    dynasty_team: str = ""
    roster_status: str = ACTIVE
    nba_team: str = ""
    position: str = ""          # G, F, C, G/F, F/C
    birth_date: str = ""
    age: int = 0
    drafted: str = ""
    signed_via: str = ""
    year: str = ""
    contract_length: str = ""
    contract_notes: str = ""
    extension: str = ""
    awards: str = ""
    player_history_log: str = ""
    rank_type: str = ""
    two_year_rank: str = ""
    career_rank: str = ""
    rank_21_22: str = ""
    rank_22_23: str = ""
    rank_23_24: str = ""
    rank_24_25: str = ""
    rank_25_26: str = ""
    rank_26_27: str = ""
    rank_27_28: str = ""
    rank_28_29: str = ""
    career_earnings: str = ""
    salary_21_22: SalaryValue = ""
    salary_22_23: SalaryValue = ""
    salary_23_24: SalaryValue = ""
    salary_24_25: SalaryValue = ""
    salary_25_26: SalaryValue = ""
    option_25_26: str = ""
    salary_26_27: SalaryValue = ""
    option_26_27: str = ""
    salary_27_28: SalaryValue = ""
    option_27_28: str = ""
    salary_28_29: SalaryValue = ""
    option_28_29: str = ""
    salary_29_30: SalaryValue = ""
    option_29_30: str = ""
    salary_30_31: SalaryValue = ""
    option_30_31: str = ""
    salary_31_32: SalaryValue = ""
    option_31_32: str = ""
    salary_32_33: SalaryValue = ""
    option_32_33: str = ""
    salary_33_34: SalaryValue = ""
    option_33_34: str = ""
    salary_34_35: SalaryValue = ""
    option_34_35: str = ""
    photo: str = ""

    def salary_for(self, season: str) -> SalaryValue:
        """Raw salary cell for a season key like "25-26" ("" if unknown)."""
        return getattr(self, "salary_" + season.replace("-", "_"), "")

    def numeric_salary(self, season: str) -> float:
        """Salary as a number; sentinel strings and blanks count as 0."""
        value = self.salary_for(season)
        if isinstance(value, (int, float)):
            return float(value)
        return 0.0


@dataclass
class Matchup:
    week: int
    matchup_id: str
    team1_id: str = ""
    team1_name: str = ""
    team2_id: str = ""
    team2_name: str = ""
    team1_score: float = 0.0
    team1_gp: int = 0
    team1_pts: int = 0
    team1_3pm: int = 0
    team1_ast: int = 0
    team1_stl: int = 0
    team1_blk: int = 0
    team1_orb: int = 0
    team1_drb: int = 0
    team1_fgm: int = 0
    team1_fga: int = 0
    team1_fg_percent: float = 0.0
    team1_ftm: int = 0
    team1_fta: int = 0
    team1_ft_percent: float = 0.0
    team2_score: float = 0.0
    team2_gp: int = 0
    team2_pts: int = 0
    team2_3pm: int = 0
    team2_ast: int = 0
    team2_stl: int = 0
    team2_blk: int = 0
    team2_orb: int = 0
    team2_drb: int = 0
    team2_fgm: int = 0
    team2_fga: int = 0
    team2_fg_percent: float = 0.0
    team2_ftm: int = 0
    team2_fta: int = 0
    team2_ft_percent: float = 0.0

    def involves(self, team_id: str) -> bool:
        return team_id in (self.team1_id, self.team2_id)

    def opponent_name(self, team_id: str) -> str:
        return self.team2_name if self.team1_id == team_id else self.team1_name


@dataclass
class WeekDate:
    week: int
    start_date: str = ""
    finish_date: str = ""


@dataclass
class Game:
    week: int
    nba_team: str = ""
    date: str = ""
    opponent: str = ""
    home_away: str = ""

    @property
    def game_id(self) -> str:
        return f"{self.nba_team}-{self.date}"


@dataclass
class Selection:
    week: int
    matchup_id: str = ""
    team_id: str = ""
    team_name: str = ""
    opponent_team_name: str = ""
    position: str = ""
    player_id: str = ""
    player_name: str = ""
    nba_team: str = ""
    game_date: str = ""
    nba_opposition: str = ""
    submitted_date_time: str = ""
    date_code: str = ""
    time: str = ""
    min: float = 0.0
    pts: float = 0.0
    three_pm: float = 0.0
    ast: float = 0.0
    stl: float = 0.0
    blk: float = 0.0
    orb: float = 0.0
    drb: float = 0.0
    fgm: float = 0.0
    fga: float = 0.0
    fg_percent: float = 0.0
    ftm: float = 0.0
    fta: float = 0.0
    ft_percent: float = 0.0
    photo_url: Optional[str] = None

    @property
    def selected_game(self) -> str:
        # Same sheet column as nba_opposition; kept for older clients.
        return self.nba_opposition


@dataclass
class Standing:
    team_id: str
    team_name: str = ""
    conference: str = ""
    position: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0
    record: str = ""
    points_for: float = 0.0
    points_against: float = 0.0
    percentage: float = 0.0


@dataclass
class DraftPicks:
    team_id: str
    picks_2026: str = ""
    picks_2027: str = ""
    picks_2028: str = ""
    picks_2029: str = ""
    picks_2030: str = ""
    picks_2031: str = ""
    notes: str = ""


@dataclass
class LineupSlot:
    id: str
    name: str                      # label stored in the Selections tab
    position: str                  # G, F, C, G/F, F/C or ANY
    player_id: Optional[str] = None
    game_id: Optional[str] = None  # "<nbaTeam>-<date>"


@dataclass
class SessionInfo:
    team_id: str
    team_name: str
    role: str                      # "commissioner" or "team"
    iat: int = 0
    exp: int = 0

    @property
    def is_commissioner(self) -> bool:
        return self.role == "commissioner"
