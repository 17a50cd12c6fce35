"""Shared API dependencies for authentication and service wiring."""

from datetime import UTC, datetime, timedelta
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from kemotown.core.settings import settings
from kemotown.db.session import get_db
from kemotown.models import User
from kemotown.plugins import PluginRegistry, build_default_registry
from kemotown.services import ActivityService, InboxService

bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]

ACCESS_TOKEN_TTL = timedelta(days=30)


def create_access_token(user_id: str, expires_in: timedelta = ACCESS_TOKEN_TTL) -> str:
    """Create a JWT access token whose subject is ``user_id``."""
    to_encode: dict[str, object] = {
        "sub": user_id,
        "exp": datetime.now(UTC) + expires_in,
    }
    encoded_jwt: str = jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_optional_user(credentials: CredentialsDep, db: SessionDep) -> User | None:
    """Return the authenticated user, or None for anonymous requests.

    Raises:
        HTTPException: If a token is supplied but invalid or its user is gone
    """
    if credentials is None:
        return None
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as err:
        raise _unauthorized() from err

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise _unauthorized()

    user = db.get(User, subject)
    if user is None:
        raise _unauthorized("User not found")
    return user


def get_current_user(user: Annotated[User | None, Depends(get_optional_user)]) -> User:
    """Require an authenticated user."""
    if user is None:
        raise _unauthorized("Not authenticated")
    return user


def get_plugin_registry(db: SessionDep) -> PluginRegistry:
    """Return the plugin registry for this request."""
    return build_default_registry(db)


def get_activity_service(
    db: SessionDep,
    registry: Annotated[PluginRegistry, Depends(get_plugin_registry)],
) -> ActivityService:
    return ActivityService(db, registry=registry)


def get_inbox_service(db: SessionDep) -> InboxService:
    return InboxService(db)


OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]
ActivityServiceDep = Annotated[ActivityService, Depends(get_activity_service)]
InboxServiceDep = Annotated[InboxService, Depends(get_inbox_service)]
