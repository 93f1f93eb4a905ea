"""Backend session tokens.

After identity sync the API mints its own short-lived JWT so later requests
never touch the identity provider. The token carries the local user id as
``sub`` plus display hints for logs.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from config import settings
from services.access import Principal


SESSION_TOKEN_TYPE = "vw_session"


def _session_ttl(expires_hours: Optional[int]) -> timedelta:
    hours = int(expires_hours or settings.JWT_EXPIRATION_HOURS or 24)
    return timedelta(hours=max(hours, 1))


def create_session_token(
    user_id: str,
    email: Optional[str] = None,
    name: Optional[str] = None,
    expires_hours: Optional[int] = None,
) -> Dict[str, Any]:
    """Sign a session for ``user_id``; returns the token and its unix expiry."""
    issued_at = datetime.now(timezone.utc)
    expires_at = issued_at + _session_ttl(expires_hours)
    claims: Dict[str, Any] = {
        "sub": user_id,
        "type": SESSION_TOKEN_TYPE,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    claims.update({key: value for key, value in (("email", email), ("name", name)) if value})

    return {
        "token": jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM),
        "expires_at": int(expires_at.timestamp()),
    }


def decode_session_token(token: str) -> Dict[str, Any]:
    """Verify signature, expiry and token type; raises ValueError otherwise."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise ValueError("Invalid or expired session token.") from exc

    if str(payload.get("type", "")).strip() != SESSION_TOKEN_TYPE:
        raise ValueError("Invalid session token type.")
    if not str(payload.get("sub", "")).strip():
        raise ValueError("Session token missing subject.")
    return payload


def principal_from_session_token(token: str) -> Principal:
    payload = decode_session_token(token)
    return Principal(
        user_id=str(payload["sub"]).strip(),
        email=str(payload.get("email") or "") or None,
        name=str(payload.get("name") or "") or None,
    )
