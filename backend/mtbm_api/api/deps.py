"""API Dependencies - Common dependencies for routes

Process-wide objects (settings, database, mail/token/media services) are
created once by the application factory and kept on ``app.state``; these
dependencies hand them to routes and can be overridden in tests.
"""
from typing import Optional
from fastapi import Depends, Header, Request
from pymongo.database import Database

from ..config.settings import Settings
from ..domain.models import ActorContext, User
from ..domain.enums import UserRole
from ..domain.errors import AuthenticationError, AuthorizationError
from ..services.auth_service import AuthService
from ..services.mail_service import MailService
from ..services.media_service import MediaService
from ..utils.jwt import TokenService


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_mail_service(request: Request) -> MailService:
    return request.app.state.mail_service


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_media_service(request: Request) -> MediaService:
    return request.app.state.media_service


def get_auth_service(
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
    token_service: TokenService = Depends(get_token_service),
    mail_service: MailService = Depends(get_mail_service),
) -> AuthService:
    return AuthService(db, settings, token_service, mail_service)


def get_current_user_dep(
    authorization: Optional[str] = Header(None),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Resolve the caller from ``Authorization: Bearer <token>``

    Raises:
        AuthenticationError: Header missing or malformed, token invalid or
            expired, or the account no longer exists
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("No token provided")

    token = authorization[7:].strip()
    if not token:
        raise AuthenticationError("No token provided")

    return auth_service.authenticate_token(token)


def get_actor_dep(user: User = Depends(get_current_user_dep)) -> ActorContext:
    return ActorContext.from_user(user)


def require_admin_dep(user: User = Depends(get_current_user_dep)) -> User:
    """
    Raises:
        AuthorizationError: Caller is not an admin
    """
    if user.role != UserRole.ADMIN:
        raise AuthorizationError("Admin access required", details={"role": user.role})
    return user

