# app.py
#
# FastAPI service for the dynasty league.
# Exposes:
#   POST /auth/login, GET /auth/me, POST|GET /auth/logout
#   GET  /teams, /players, /matchups, /matchups/{matchup_id}, /weekdates,
#        /schedule, /standings, /draft-picks, /teams/{team_id}/cap
#   GET  /current-time, /current-week
#   GET  /selections, /selections/options
#   POST /selections/submit, /selections/edit (commissioner only)
#   GET  /health, /health/google, /image
#
# Start with:
#   uvicorn app:app --reload

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

import requests  # type: ignore[import]
from fastapi import Depends, FastAPI, HTTPException, Request, Response  # type: ignore[import]
from fastapi.exceptions import RequestValidationError  # type: ignore[import]
from fastapi.middleware.cors import CORSMiddleware  # type: ignore[import]
from fastapi.responses import JSONResponse  # type: ignore[import]
from pydantic import BaseModel, ConfigDict  # type: ignore[import]
from pydantic.alias_generators import to_camel  # type: ignore[import]
from starlette.exceptions import HTTPException as StarletteHTTPException  # type: ignore[import]

import config  # type: ignore[import]
from auth_security import (  # type: ignore[import]
    create_session_token,
    parse_session_token,
    role_for_team,
    verify_password,
)
from league_data import (  # type: ignore[import]
    find_matchup,
    find_team_by_email,
    load_draft_picks,
    load_matchups,
    load_players,
    load_schedule,
    load_standings,
    load_teams,
    load_todays_date,
    load_week_dates,
)
from lineup_builder import LineupBuilder, format_game_display  # type: ignore[import]
from models import Game, Player, Selection, SessionInfo  # type: ignore[import]
from positions import ALL_SLOTS  # type: ignore[import]
from row_mapper import record_to_dict  # type: ignore[import]
from salary_cap import Roster, cap_table, cap_table_to_dict  # type: ignore[import]
from selections_service import (  # type: ignore[import]
    SelectionNotFoundError,
    SelectionService,
    SelectionValidationError,
)
from sheets_store import GoogleSheetStore, SheetStore, SheetStoreError, a1  # type: ignore[import]
from week_resolver import active_week, parse_sheet_date, selection_week  # type: ignore[import]

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic request models
# ---------------------------------------------------------------------------

class CamelModel(BaseModel):
    # Clients send ids like matchupId / teamId as either strings or numbers.
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True
    )


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    remember: bool = False


class SlotSelection(CamelModel):
    position: Optional[str] = None
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    nba_team: Optional[str] = None
    game_date: Optional[str] = None
    nba_opposition: Optional[str] = None
    selected_game: Optional[str] = None


class SubmitSelectionsRequest(CamelModel):
    """
    Request body for POST /selections/submit.

    Fields are optional at the model level so a missing one comes back as a
    400 naming the field rather than a generic validation error.
    """
    week: Optional[Union[int, str]] = None
    team_id: Optional[str] = None
    team_name: Optional[str] = None
    matchup_id: Optional[str] = None
    opponent_team_name: Optional[str] = None
    selections: Optional[List[SlotSelection]] = None


class EditSelectionRequest(CamelModel):
    week: Optional[Union[int, str]] = None
    matchup_id: Optional[str] = None
    team_name: Optional[str] = None
    position: Optional[str] = None
    changes: Optional[Dict[str, Any]] = None


# ---------------------------------------------------------------------------
# Helper functions to map domain records -> JSON
# ---------------------------------------------------------------------------

def _team_to_dict(team) -> Dict[str, Any]:
    # Passwords stay in the sheet.
    return record_to_dict(team, exclude=("password",))


def _selection_to_dict(sel: Selection) -> Dict[str, Any]:
    out = record_to_dict(sel, exclude=("photo_url",))
    out["selectedGame"] = sel.selected_game
    if sel.photo_url is not None:
        out["photoUrl"] = sel.photo_url
    return out


def _player_option(p: Player) -> Dict[str, Any]:
    return {
        "playerId": p.player_id,
        "name": p.name,
        "position": p.position,
        "nbaTeam": p.nba_team,
        "rosterStatus": p.roster_status,
        "salary": p.salary_for(config.CURRENT_SEASON),
        "photo": p.photo,
    }


def _game_option(g: Game) -> Dict[str, Any]:
    return {
        "gameId": g.game_id,
        "nbaTeam": g.nba_team,
        "date": g.date,
        "opponent": g.opponent,
        "homeAway": g.home_away,
        "display": format_game_display(g),
    }


def _parse_week_param(week: Optional[str]) -> Optional[int]:
    if week is None or week == "":
        return None
    try:
        return int(week)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid week: {week}")


# ---------------------------------------------------------------------------
# FastAPI app + dependencies
# ---------------------------------------------------------------------------

app = FastAPI(title="Dynasty League API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_store: Optional[SheetStore] = None


def get_store() -> SheetStore:
    """One spreadsheet client per process, opened on first use."""
    global _store
    if _store is None:
        _store = GoogleSheetStore.from_env()
    return _store


def get_selection_service(store: SheetStore = Depends(get_store)) -> SelectionService:
    return SelectionService(store)


def get_session(request: Request) -> SessionInfo:
    session = parse_session_token(request.cookies.get(config.ACCESS_COOKIE))
    if session is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return session


def require_commissioner(session: SessionInfo = Depends(get_session)) -> SessionInfo:
    if session.team_id != config.COMMISSIONER_TEAM_ID:
        raise HTTPException(status_code=403, detail="Forbidden: Commissioner access required")
    return session


def _set_cookie(response: Response, key: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key=key,
        value=value,
        max_age=max_age,
        httponly=True,
        samesite="lax",
        secure=config.COOKIE_SECURE,
        path="/",
    )


# ---------------------------------------------------------------------------
# Error rendering: every error body is {"error": ...}
# ---------------------------------------------------------------------------

@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException):
    if isinstance(exc.detail, dict):
        body = dict(exc.detail)
    else:
        body = {"error": exc.detail}
    return JSONResponse(body, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse({"error": "Invalid request body"}, status_code=400)


@app.exception_handler(SelectionValidationError)
async def _selection_invalid(request: Request, exc: SelectionValidationError):
    return JSONResponse({"error": str(exc)}, status_code=400)


@app.exception_handler(SelectionNotFoundError)
async def _selection_not_found(request: Request, exc: SelectionNotFoundError):
    return JSONResponse({"error": str(exc), "details": exc.details}, status_code=404)


@app.exception_handler(SheetStoreError)
async def _store_error(request: Request, exc: SheetStoreError):
    logger.error("Spreadsheet call failed for %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"error": "Failed to reach the league spreadsheet"}, status_code=500)


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception):
    logger.error("Unhandled error for %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


# ---------------------------------------------------------------------------
# Auth endpoints
# ---------------------------------------------------------------------------

@app.post("/auth/login")
def login(req: LoginRequest, response: Response, store: SheetStore = Depends(get_store)):
    email = (req.email or "").strip()
    password = (req.password or "").strip()
    if not email or not password:
        raise HTTPException(status_code=400, detail="Missing credentials")

    team = find_team_by_email(store, email)
    if team is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not verify_password(password, team.password):
        logger.warning("Password mismatch for %s", team.team_id)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    role = role_for_team(team.team_id)
    refresh_ttl = (
        config.REMEMBER_REFRESH_TTL_SECONDS if req.remember else config.REFRESH_TTL_SECONDS
    )
    access = create_session_token(team.team_id, team.team_name, role, config.ACCESS_TTL_SECONDS)
    refresh = create_session_token(team.team_id, team.team_name, role, refresh_ttl)
    _set_cookie(response, config.ACCESS_COOKIE, access, config.ACCESS_TTL_SECONDS)
    _set_cookie(response, config.REFRESH_COOKIE, refresh, refresh_ttl)

    logger.info("Login for %s (%s)", team.team_id, role)
    return {"teamId": team.team_id, "teamName": team.team_name, "role": role}


@app.get("/auth/me")
def me(request: Request, response: Response):
    """
    Current session. An expired access cookie is re-issued from the refresh
    cookie when that is still valid.
    """
    access = parse_session_token(request.cookies.get(config.ACCESS_COOKIE))
    if access is not None:
        return {"teamId": access.team_id, "teamName": access.team_name, "role": access.role}

    refresh = parse_session_token(request.cookies.get(config.REFRESH_COOKIE))
    if refresh is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    token = create_session_token(
        refresh.team_id, refresh.team_name, refresh.role, config.ACCESS_TTL_SECONDS
    )
    _set_cookie(response, config.ACCESS_COOKIE, token, config.ACCESS_TTL_SECONDS)
    return {"teamId": refresh.team_id, "teamName": refresh.team_name, "role": refresh.role}


@app.api_route("/auth/logout", methods=["GET", "POST"])
def logout(response: Response):
    for key in (config.ACCESS_COOKIE, config.REFRESH_COOKIE):
        response.delete_cookie(key, path="/", httponly=True, samesite="lax", secure=config.COOKIE_SECURE)
    return {"ok": True}


# ---------------------------------------------------------------------------
# League data
# ---------------------------------------------------------------------------

@app.get("/teams")
def list_teams(store: SheetStore = Depends(get_store)):
    return [_team_to_dict(t) for t in load_teams(store)]


@app.get("/players")
def list_players(
    teamId: Optional[str] = None,
    status: Optional[str] = None,
    store: SheetStore = Depends(get_store),
):
    return [record_to_dict(p) for p in load_players(store, team_id=teamId, status=status)]


@app.get("/teams/{team_id}/cap")
def get_team_cap(team_id: str, store: SheetStore = Depends(get_store)):
    """
    Cap allocation, cap space and hard cap room for each modeled season.
    Negative numbers mean the team is over.
    """
    if not any(t.team_id == team_id for t in load_teams(store)):
        raise HTTPException(status_code=404, detail="Team not found")

    roster = Roster.from_players(load_players(store, team_id=team_id))
    return {
        "teamId": team_id,
        "activeCount": len(roster.active),
        "developmentCount": len(roster.development),
        "injuryCount": len(roster.injury),
        "seasons": cap_table_to_dict(cap_table(roster, team_id)),
    }


@app.get("/matchups")
def list_matchups(store: SheetStore = Depends(get_store)):
    return [record_to_dict(m) for m in load_matchups(store)]


@app.get("/matchups/{matchup_id}")
def get_matchup(
    matchup_id: str,
    store: SheetStore = Depends(get_store),
    service: SelectionService = Depends(get_selection_service),
):
    """Live box score: both lineups slot by slot plus the aggregate totals."""
    matchup = next((m for m in load_matchups(store) if m.matchup_id == matchup_id), None)
    if matchup is None:
        raise HTTPException(status_code=404, detail="Matchup not found")

    box = service.box_score(matchup)
    teams = []
    for side in box["teams"]:
        slots = []
        for slot in side["slots"]:
            sel = slot["selection"]
            slots.append(dict(slot, selection=_selection_to_dict(sel) if sel else None))
        teams.append(dict(side, slots=slots))
    return {"matchup": record_to_dict(box["matchup"]), "teams": teams}


@app.get("/weekdates")
def list_week_dates(store: SheetStore = Depends(get_store)):
    return [record_to_dict(w) for w in load_week_dates(store)]


@app.get("/schedule")
def list_schedule(week: Optional[str] = None, store: SheetStore = Depends(get_store)):
    games = load_schedule(store, _parse_week_param(week))
    return [record_to_dict(g) for g in games]


@app.get("/standings")
def list_standings(store: SheetStore = Depends(get_store)):
    return [record_to_dict(s) for s in load_standings(store)]


@app.get("/draft-picks")
def get_draft_picks(teamId: Optional[str] = None, store: SheetStore = Depends(get_store)):
    if not teamId:
        raise HTTPException(status_code=400, detail="Team ID is required")

    picks = load_draft_picks(store)
    if not picks:
        return []
    for row in picks:
        if row.team_id == teamId:
            return record_to_dict(row)
    raise HTTPException(status_code=404, detail="Team not found")


@app.get("/current-time")
def current_time(store: SheetStore = Depends(get_store)):
    cells = load_todays_date(store)
    if cells is None:
        raise HTTPException(status_code=404, detail="No data found")
    todays_date, time_now = cells
    return {"date": todays_date, "time": time_now}


def _league_today(store: SheetStore) -> date:
    cells = load_todays_date(store)
    parsed = parse_sheet_date(cells[0]) if cells else None
    if parsed is None:
        logger.warning("TodaysDate cell missing or unreadable; using the server date")
        return date.today()
    return parsed


@app.get("/current-week")
def current_week(store: SheetStore = Depends(get_store)):
    """
    `week` is the week in progress; `selectionWeek` is the week lineups are
    currently being picked for.
    """
    today = _league_today(store)
    weeks = load_week_dates(store)
    return {
        "today": today.isoformat(),
        "week": active_week(today, weeks),
        "selectionWeek": selection_week(today, weeks),
    }


# ---------------------------------------------------------------------------
# Selections
# ---------------------------------------------------------------------------

@app.get("/selections")
def list_selections(
    week: Optional[str] = None,
    teamId: Optional[str] = None,
    matchupId: Optional[str] = None,
    service: SelectionService = Depends(get_selection_service),
):
    selections = service.list_selections(week=week, team_id=teamId, matchup_id=matchupId)
    return [_selection_to_dict(s) for s in selections]


@app.get("/selections/options")
def selection_options(
    teamId: str,
    week: Optional[str] = None,
    store: SheetStore = Depends(get_store),
    service: SelectionService = Depends(get_selection_service),
):
    """
    Everything the weekly selection screen needs for one team: the draft
    rebuilt from any earlier submission, and for each slot the eligible
    players (highest paid first) and the games on offer.
    """
    week_num = _parse_week_param(week)
    if week_num is None:
        week_num = selection_week(_league_today(store), load_week_dates(store))

    players = load_players(store, team_id=teamId)
    games = load_schedule(store, week_num)
    previous = service.list_selections(week=str(week_num), team_id=teamId)
    builder = LineupBuilder.from_selections(players, games, previous)

    matchup = find_matchup(load_matchups(store), teamId, week_num)
    slots = []
    for spec in ALL_SLOTS:
        slot = builder.slots[spec.id]
        slots.append(
            {
                "id": slot.id,
                "name": slot.name,
                "position": slot.position,
                "reserve": spec.reserve,
                "playerId": slot.player_id,
                "gameId": slot.game_id,
                "players": [_player_option(p) for p in builder.available_players(slot.position, slot.id)],
                "games": [_game_option(g) for g in builder.game_options(slot.id)],
            }
        )
    return {
        "week": week_num,
        "teamId": teamId,
        "matchupId": matchup.matchup_id if matchup else "",
        "opponentTeamName": matchup.opponent_name(teamId) if matchup else "",
        "readyToSubmit": builder.is_ready_to_submit(),
        "slots": slots,
    }


@app.post("/selections")
@app.post("/selections/submit")
def submit_selections(
    req: SubmitSelectionsRequest,
    service: SelectionService = Depends(get_selection_service),
):
    payload = req.model_dump(by_alias=True)
    count = service.submit(payload)
    return {"success": True, "message": "Selections submitted successfully", "count": count}


@app.post("/selections/edit")
def edit_selection(
    req: EditSelectionRequest,
    session: SessionInfo = Depends(require_commissioner),
    service: SelectionService = Depends(get_selection_service),
):
    """Commissioner-only correction of one stored selection row."""
    updated = service.edit(req.model_dump(by_alias=True))
    logger.info("Selection edited by %s", session.team_id)
    return {"success": True, "message": "Selection updated successfully", "updated": updated}


# ---------------------------------------------------------------------------
# Misc
# ---------------------------------------------------------------------------

@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/health/google")
def health_google():
    """Report which Google settings are present and try a one-row read."""
    result: Dict[str, Any] = {
        "env": {
            "hasSheetsId": bool(config.GOOGLE_SHEETS_ID),
            "hasClientEmail": bool(config.GOOGLE_CLIENT_EMAIL),
            "hasPrivateKey": bool(config.GOOGLE_PRIVATE_KEY or config.GOOGLE_PRIVATE_KEY_BASE64),
            "usingBase64": bool(config.GOOGLE_PRIVATE_KEY_BASE64),
        }
    }
    try:
        store = get_store()
        result["googleAuth"] = "ok"
        rows = store.get(a1(config.TEAMS_TAB, "A1:F1"))
        result["sheetsAccess"] = "ok"
        result["sampleHeaders"] = rows[0] if rows else []
    except SheetStoreError:
        # Upstream detail goes to the log only.
        logger.exception("Google health check failed")
        if "googleAuth" in result:
            message = "Could not read the league spreadsheet"
        else:
            message = "Could not open the league spreadsheet"
        result["error"] = {"message": message}
        return JSONResponse(result, status_code=500)
    return result


@app.get("/image")
def image_proxy(url: Optional[str] = None):
    """Proxy player photos / logos so the browser doesn't hit third-party hosts."""
    if not url:
        return Response("Missing url", status_code=400)
    if not url.startswith(("http://", "https://")):
        return Response("Unsupported url", status_code=400)

    try:
        upstream = requests.get(
            url, headers={"User-Agent": "DynastyLeagueApp/1.0"}, timeout=10
        )
    except requests.RequestException:
        logger.warning("Image fetch failed for %s", url, exc_info=True)
        return Response("Error fetching image", status_code=500)

    if not upstream.ok:
        return Response("Failed to fetch image", status_code=upstream.status_code)
    return Response(
        upstream.content,
        media_type=upstream.headers.get("content-type", "image/png"),
        headers={"Cache-Control": "public, max-age=3600"},
    )
