"""FastAPI dependency injection for database sessions, auth, and the export service."""

from collections.abc import AsyncGenerator, Callable
from typing import TYPE_CHECKING, Annotated, Any

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from haven_api.core.config import Settings, get_settings
from haven_api.core.database import get_session_factory
from haven_api.core.security import decode_access_token
from haven_api.models.user import User

if TYPE_CHECKING:
    from haven_api.services.export_service import ExportService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login")


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Yield an async database session with per-request lifecycle."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> User:
    """Decode the bearer token and return the active user it names.

    Raises:
        HTTPException: 401 if the token is invalid or the user is unknown/inactive.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token, settings.jwt_secret_key, settings.jwt_algorithm)
    except jwt.InvalidTokenError as exc:
        raise credentials_exception from exc
    email: str = payload["sub"]

    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None or not user.active:
        raise credentials_exception
    return user


def require_role(*roles: str) -> Callable[..., Any]:
    """Factory that creates a dependency requiring specific user roles.

    Args:
        *roles: Allowed role names (e.g., "admin", "pastor").

    Returns:
        A FastAPI dependency function that validates the user's role.
    """

    async def role_checker(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{current_user.role}' does not have access to this resource",
            )
        return current_user

    return role_checker


def get_export_service(request: Request) -> "ExportService":
    """Return the export service created by the application lifespan."""
    service = getattr(request.app.state, "export_service", None)
    if service is None:
        msg = "Export service not initialized"
        raise RuntimeError(msg)
    return service
