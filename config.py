# config.py
from typing import Dict
import os

# ====== Google Sheets ======
GOOGLE_SHEETS_ID: str = os.environ.get("GOOGLE_SHEETS_ID", "")
GOOGLE_CLIENT_EMAIL: str = os.environ.get("GOOGLE_CLIENT_EMAIL", "")
GOOGLE_PRIVATE_KEY: str = os.environ.get("GOOGLE_PRIVATE_KEY", "")
GOOGLE_PRIVATE_KEY_BASE64: str = os.environ.get("GOOGLE_PRIVATE_KEY_BASE64", "")

GOOGLE_SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets.readonly",
    "https://www.googleapis.com/auth/spreadsheets",
]

# Tab names in the league spreadsheet.
TEAMS_TAB = "Teams"
PLAYERS_TAB = "Players"
MATCHUPS_TAB = "Matchups"
SCHEDULE_TAB = "Schedule"
STANDINGS_TAB = "Standings"
WEEK_DATES_TAB = "WeekDates"
DRAFT_PICKS_TAB = "Draft Picks"
TODAYS_DATE_TAB = "TodaysDate"
SELECTIONS_TAB = "Selections"

# The stats feed copies Selections into PlayerGameStats and fills in the box
# score columns, so reads default to that tab. Point this at "Selections" to
# read back raw submissions.
SELECTIONS_READ_TAB: str = os.environ.get("DL_SELECTIONS_READ_TAB", "PlayerGameStats")


# ====== Auth ======
AUTH_SECRET: str = os.environ.get("AUTH_SECRET", "dev-session-secret-change-me")
COMMISSIONER_TEAM_ID: str = os.environ.get("DL_COMMISSIONER_TEAM_ID", "T014")

ACCESS_COOKIE = "dl_access"
REFRESH_COOKIE = "dl_refresh"
ACCESS_TTL_SECONDS = 60 * 60
REFRESH_TTL_SECONDS = 60 * 60 * 24 * 7
REMEMBER_REFRESH_TTL_SECONDS = 60 * 60 * 24 * 60

# Set to "1" when serving over https.
COOKIE_SECURE: bool = os.environ.get("DL_COOKIE_SECURE", "0") == "1"

LOG_LEVEL: str = os.environ.get("DL_LOG_LEVEL", "INFO")


# ====== Salary cap (all figures in $ millions) ======
CURRENT_SEASON: str = "25-26"
CAP_SEASONS = ["25-26", "26-27", "27-28", "28-29", "29-30", "30-31"]

SALARY_CAP: Dict[str, float] = {"25-26": 247.2}
DEFAULT_SALARY_CAP: float = 276.87

HARD_CAP: Dict[str, float] = {"25-26": 296.8}
DEFAULT_HARD_CAP: float = 332.25

MIN_SALARY: Dict[str, float] = {"25-26": 2.48}
DEFAULT_MIN_SALARY: float = 2.77

MIN_ACTIVE_ROSTER: int = 16
INJURY_CAP_WEIGHT: float = 0.5

# Dynasty Cup bonus cap room, only paid out against the 25-26 cap.
BONUS_SEASON: str = "25-26"
DYNASTY_CUP_BONUSES: Dict[str, float] = {
    "T001": 12.36,  # Armstrong's Army
    "T002": 3.71,   # Bort Chasing Boards
    "T003": 3.71,   # Easy Money Magnets
    "T004": 12.36,  # Forever Young, Forever Wemby
    "T011": 7.42,   # Squib Nation
    "T012": 3.71,   # Tragic Bonsons
    "T013": 3.71,   # Willsy's Gentlemen
    "T014": 7.42,   # Winchelsea Hardons
}

# Standings only lists the top of each conference.
STANDINGS_MAX_POSITION: int = 7
