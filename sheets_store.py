# sheets_store.py
#
# Range-addressed access to the league spreadsheet.
# The rest of the app only sees rows of cell strings; column position is the
# schema (see row_mapper.py).

from __future__ import annotations

import base64
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import gspread  # type: ignore[import]
from google.auth.exceptions import GoogleAuthError  # type: ignore[import]
from google.oauth2.service_account import Credentials  # type: ignore[import]

import config  # type: ignore[import]

logger = logging.getLogger(__name__)

Rows = List[List[str]]

TOKEN_URI = "https://oauth2.googleapis.com/token"


class SheetStoreError(RuntimeError):
    """The spreadsheet backend failed (auth, quota, network...)."""


def a1(tab: str, cells: str) -> str:
    """
    Build an A1 range like ``Teams!A:Z``.

    Tab names containing spaces or quotes must be quoted for the Sheets API.
    """
    if any(ch in tab for ch in " '!"):
        escaped = tab.replace("'", "''")
        return f"'{escaped}'!{cells}"
    return f"{tab}!{cells}"


class SheetStore(ABC):
    """
    Interface used by the services. Implementations return every cell as a
    string and never raise for a missing tab (they return no rows instead).
    """

    @abstractmethod
    def get(self, range_: str) -> Rows:
        ...

    @abstractmethod
    def clear(self, range_: str) -> None:
        ...

    @abstractmethod
    def update(self, range_: str, rows: Sequence[Sequence[object]]) -> None:
        ...


def _strip_wrapping_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def load_private_key(raw: str = "", raw_base64: str = "") -> Optional[str]:
    """
    Resolve the service account private key from the environment.

    The base64 variant wins when present. Escaped newlines, CRLF line endings
    and accidental wrapping quotes are all normalised away.
    """
    if raw_base64.strip():
        try:
            decoded = base64.b64decode(raw_base64.strip()).decode("utf-8")
        except (ValueError, UnicodeDecodeError):
            logger.warning("GOOGLE_PRIVATE_KEY_BASE64 is not valid base64; trying GOOGLE_PRIVATE_KEY")
        else:
            decoded = _strip_wrapping_quotes(decoded)
            return decoded.replace("\r\n", "\n").replace("\r", "\n")

    if not raw:
        return None
    key = raw.replace("\\n", "\n").replace("\r\n", "\n").replace("\r", "\n")
    return _strip_wrapping_quotes(key)


def _is_missing_range(exc: gspread.exceptions.APIError) -> bool:
    return "Unable to parse range" in str(exc)


class GoogleSheetStore(SheetStore):
    """SheetStore backed by the Google Sheets API via gspread."""

    def __init__(self, spreadsheet_id: str, client_email: str, private_key: str):
        if not spreadsheet_id:
            raise SheetStoreError("Missing GOOGLE_SHEETS_ID")
        if not client_email or not private_key:
            raise SheetStoreError("Missing GOOGLE_CLIENT_EMAIL or GOOGLE_PRIVATE_KEY(_BASE64)")

        info = {
            "type": "service_account",
            "client_email": client_email,
            "private_key": private_key,
            "token_uri": TOKEN_URI,
        }
        try:
            creds = Credentials.from_service_account_info(info, scopes=config.GOOGLE_SCOPES)
            gc = gspread.authorize(creds)
            self._sheet = gc.open_by_key(spreadsheet_id)
        except (GoogleAuthError, gspread.exceptions.GSpreadException, ValueError) as exc:
            raise SheetStoreError(f"Could not open spreadsheet: {exc}") from exc

    @classmethod
    def from_env(cls) -> "GoogleSheetStore":
        key = load_private_key(config.GOOGLE_PRIVATE_KEY, config.GOOGLE_PRIVATE_KEY_BASE64)
        return cls(config.GOOGLE_SHEETS_ID, config.GOOGLE_CLIENT_EMAIL, key or "")

    def get(self, range_: str) -> Rows:
        try:
            resp = self._sheet.values_get(range_)
        except gspread.exceptions.APIError as exc:
            if _is_missing_range(exc):
                logger.info("Range %s does not exist; treating as empty", range_)
                return []
            raise SheetStoreError(f"Read of {range_} failed") from exc
        except GoogleAuthError as exc:
            raise SheetStoreError(f"Read of {range_} failed") from exc

        values = resp.get("values") or []
        return [[str(cell) for cell in row] for row in values]

    def clear(self, range_: str) -> None:
        try:
            self._sheet.values_clear(range_)
        except (gspread.exceptions.APIError, GoogleAuthError) as exc:
            raise SheetStoreError(f"Clear of {range_} failed") from exc

    def update(self, range_: str, rows: Sequence[Sequence[object]]) -> None:
        body = {"values": [list(r) for r in rows]}
        try:
            self._sheet.values_update(
                range_,
                params={"valueInputOption": "RAW"},
                body=body,
            )
        except (gspread.exceptions.APIError, GoogleAuthError) as exc:
            raise SheetStoreError(f"Update of {range_} failed") from exc
