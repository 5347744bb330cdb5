"""
PlaceBook Backend: Authentication Gate
======================================

What:  FastAPI dependency protecting the place-mutating endpoints.
How:   Reads ``Authorization: Bearer <token>``, verifies it through
       AuthService and returns an `AuthContext` that the route passes on
       to the service layer.
When:  POST /api/places, PATCH and DELETE /api/places/{placeId}.

OPTIONS never reaches this gate: CORSMiddleware answers preflight requests
before routing, and a bare OPTIONS matches no route, so main.py answers it
with 200 and the path's Allow header.

Every failure (no header, other scheme, empty token, bad signature,
expired) is the same 403 "Authentication failed."
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from placebook.exceptions import AuthenticationError
from placebook.services.auth_service import auth_service

# auto_error=False: missing credentials are reported through our own
# AuthenticationError so the body stays {"message": ...}
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Identity of the authenticated caller."""
    user_id: str


async def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthContext:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(context={"reason": "missing_token"})

    user_id = auth_service.decode_access_token(credentials.credentials)
    return AuthContext(user_id=user_id)
