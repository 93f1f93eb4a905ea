"""Request principal dependencies.

Routes depend on ``get_auth_context`` when a session is mandatory and on
``get_optional_auth_context`` when anonymous callers get a degraded answer.
"""

from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from services.access import Principal
from services.session_token import principal_from_session_token


auth_scheme = HTTPBearer(auto_error=False)


AuthContext = Principal


def _context_from_credentials(credentials: Optional[HTTPAuthorizationCredentials]) -> AuthContext:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Missing Bearer session token.")
    try:
        return principal_from_session_token(credentials.credentials)
    except ValueError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc


async def get_auth_context(
    credentials: HTTPAuthorizationCredentials = Depends(auth_scheme),
) -> AuthContext:
    """Resolve the signed-in principal or reject with 401."""
    return _context_from_credentials(credentials)


async def get_optional_auth_context(
    credentials: HTTPAuthorizationCredentials = Depends(auth_scheme),
) -> Optional[AuthContext]:
    """Resolve the principal when present; anonymous or invalid sessions yield None."""
    if not credentials:
        return None
    try:
        return _context_from_credentials(credentials)
    except HTTPException:
        return None
