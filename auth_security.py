from __future__ import annotations

import base64
import hashlib
import hmac
import json
from typing import Optional
from datetime import datetime, timezone

import config  # type: ignore[import]
from models import SessionInfo  # type: ignore[import]

ROLE_COMMISSIONER = "commissioner"
ROLE_TEAM = "team"

_HEADER = {"alg": "HS256", "typ": "JWT"}


def _secret() -> bytes:
    return config.AUTH_SECRET.encode("utf-8")


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _sign(unsigned: str) -> str:
    return _b64url(hmac.new(_secret(), unsigned.encode("utf-8"), hashlib.sha256).digest())


def _now() -> int:
    return int(datetime.now(tz=timezone.utc).timestamp())


def role_for_team(team_id: str) -> str:
    return ROLE_COMMISSIONER if team_id == config.COMMISSIONER_TEAM_ID else ROLE_TEAM


def create_session_token(team_id: str, team_name: str, role: str, ttl_seconds: int) -> str:
    """
    Create a signed session token for a team manager.

    Format: base64url(header).base64url(payload).base64url(signature)
    signature = HMAC-SHA256(AUTH_SECRET, "header.payload")
    """
    iat = _now()
    payload = {
        "teamId": team_id,
        "teamName": team_name,
        "role": role,
        "iat": iat,
        "exp": iat + ttl_seconds,
    }
    unsigned = ".".join(
        _b64url(json.dumps(part, separators=(",", ":")).encode("utf-8"))
        for part in (_HEADER, payload)
    )
    return f"{unsigned}.{_sign(unsigned)}"


def parse_session_token(token: Optional[str]) -> Optional[SessionInfo]:
    """
    Validate a session token and return the session if valid, else None.
    """
    if not token:
        return None
    try:
        header_b64, payload_b64, sig = token.split(".")
    except ValueError:
        return None

    expected_sig = _sign(f"{header_b64}.{payload_b64}")
    if not hmac.compare_digest(expected_sig, sig):
        return None

    try:
        payload = json.loads(_b64url_decode(payload_b64))
        session = SessionInfo(
            team_id=str(payload["teamId"]),
            team_name=str(payload.get("teamName", "")),
            role=str(payload.get("role", ROLE_TEAM)),
            iat=int(payload.get("iat", 0)),
            exp=int(payload["exp"]),
        )
    except (ValueError, KeyError, TypeError):
        return None

    # Expiry check
    if session.exp <= _now():
        return None

    return session


def hash_password(password: str, salt: bytes) -> str:
    """PBKDF2-HMAC-SHA256, stored as "salt_hex:hash_hex"."""
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 100_000)
    return salt.hex() + ":" + dk.hex()


def verify_password(password: str, stored: str) -> bool:
    """
    Check a login password against the Teams tab.

    The sheet has historically held plain-text passwords; a value that looks
    like "salt_hex:hash_hex" is treated as a PBKDF2 hash instead, so the
    league can migrate row by row.
    """
    stored = (stored or "").strip()
    if not stored:
        return False

    salt_hex, sep, hash_hex = stored.partition(":")
    if sep:
        try:
            salt = bytes.fromhex(salt_hex)
            expected = bytes.fromhex(hash_hex)
        except ValueError:
            salt = expected = b""
        if salt and expected:
            dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 100_000)
            return hmac.compare_digest(dk, expected)

    return hmac.compare_digest(password.encode("utf-8"), stored.encode("utf-8"))
