"""Session endpoints.

    POST /api/auth/login   — authenticate, receive a token and the session cookie
    POST /api/auth/logout  — clear the session cookie
    GET  /api/auth/me      — current user and the categories it can see
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from ..core.auth import AuthContext, client_ip, require_auth
from ..core.config import settings
from ..core.token_factory import create_token
from ..database import get_db
from ..exceptions import AuthenticationError
from ..schemas.user import CategoryAccess, LoginRequest, LoginResponse, MeResponse, UserResponse
from ..services import audit_service, auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Authenticate and receive a session token",
)
def login(body: LoginRequest, request: Request, response: Response, db: Session = Depends(get_db)):
    try:
        user = auth_service.authenticate(db, body.email, body.password)
    except AuthenticationError:
        audit_service.log(
            db, None, "login_failed", "user",
            details={"email": body.email.strip().lower()},
            ip_address=client_ip(request),
        )
        raise

    token = create_token(
        subject=user.id,
        role=user.role,
        secret=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_hours=settings.token_expire_hours,
    )
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.token_expire_hours * 3600,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    audit_service.log(db, user.id, "login", "user", resource_id=user.id, ip_address=client_ip(request))
    return LoginResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/logout", status_code=204, summary="Clear the session cookie")
def logout(response: Response):
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return None


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Current user and accessible categories",
)
def get_me(auth: AuthContext = Depends(require_auth), db: Session = Depends(get_db)):
    user = auth_service.get_user_by_id(db, auth.user_id)
    if user is None:
        raise AuthenticationError("User not found")
    access = [
        CategoryAccess(category_id=c.id, category_name=c.name, access_level=level)
        for c, level in auth_service.list_category_access(db, user)
    ]
    return MeResponse(user=UserResponse.model_validate(user), access=access)
