"""Identity provider adapter.

The hosted auth service signs a short-lived identity token for the signed-in
browser session. The backend only verifies it and maps the claims onto a
local ``User`` row; everything else about sign-in lives with the provider.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from config import settings


@dataclass
class IdentityClaims:
    external_auth_id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image: Optional[str] = None


def _clean(value: Any) -> Optional[str]:
    text = str(value or "").strip()
    return text or None


def verify_identity_token(token: str) -> IdentityClaims:
    """Verify an identity-provider token and return normalized claims."""
    secret = (settings.IDENTITY_PROVIDER_SECRET or "").strip()
    if not secret:
        raise ValueError("Identity provider is not configured.")

    try:
        payload: Dict[str, Any] = jwt.decode(
            token,
            secret,
            algorithms=[settings.IDENTITY_PROVIDER_ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError as exc:
        raise ValueError("Invalid or expired identity token.") from exc

    subject = _clean(payload.get("sub"))
    if not subject:
        raise ValueError("Identity token missing subject.")
    email = _clean(payload.get("email"))
    if not email:
        raise ValueError("Identity token missing email.")

    return IdentityClaims(
        external_auth_id=subject,
        email=email.lower(),
        first_name=_clean(payload.get("given_name") or payload.get("first_name")),
        last_name=_clean(payload.get("family_name") or payload.get("last_name")),
        image=_clean(payload.get("picture") or payload.get("image_url")),
    )
