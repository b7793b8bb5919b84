"""Authentication module: FastAPI dependencies resolving the caller.

Public interface:
    ``require_auth``  — returns AuthContext or raises 401.
    ``require_admin`` — returns AuthContext, raises 403 if not a system admin.
    ``client_ip``     — best-effort client address for the audit log.

The session token is read from ``Authorization: Bearer`` first and from the
session cookie second.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import settings
from .token_factory import TokenPayload, decode_token
from ..database import get_db
from ..exceptions import AuthenticationError, ForbiddenError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Resolved caller identity.

    ``grants`` maps category_id to access level and is loaded once per
    request. permission_service reads it; nothing else should.
    """

    user_id: str
    role: str
    email: str = ""
    name: str = ""
    grants: dict = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return self.role == "system_admin"


def _token_from_request(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.session_cookie_name) or None


def require_auth(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> AuthContext:
    """Require a valid session token and return the caller's AuthContext."""
    token = _token_from_request(request, credentials)
    if token is None:
        raise AuthenticationError("Missing authentication token")

    payload = decode_token(token, settings.jwt_secret_key, settings.jwt_algorithm)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    return _load_auth_context(payload, db)


def require_admin(
    auth: AuthContext = Depends(require_auth),
) -> AuthContext:
    """Require the authenticated user to be a system admin. Raises 403 otherwise."""
    if not auth.is_admin:
        raise ForbiddenError("Admin access required")
    return auth


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _load_auth_context(payload: TokenPayload, db: Session) -> AuthContext:
    """Load the user and its grants given a decoded token payload.

    The role is taken from the database, not the token, so demoting or
    deleting a user takes effect on their next request.
    """
    from ..repositories import UserRepository, AccessGrantRepository

    user = UserRepository(db).get_by_id_optional(payload.sub)
    if user is None:
        raise AuthenticationError("User not found")

    return AuthContext(
        user_id=user.id,
        role=user.role,
        email=user.email,
        name=user.name,
        grants=AccessGrantRepository(db).levels_for_user(user.id),
    )
