from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import get_db
from storefront.core.errors import PermissionDenied, Unauthenticated
from storefront.services.auth_service.models import User
from storefront.services.auth_service.repository import UserRepository

from .jwt_handler import token_subject

# Defines the expected header format (Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


async def authenticate_token(db: AsyncSession, token: Optional[str]) -> User:
    """Resolve a bearer token to an active user. Shared by HTTP and gRPC."""
    if not token:
        raise Unauthenticated()

    user_id = token_subject(token)
    if user_id is None:
        raise Unauthenticated("Invalid token")

    user = await UserRepository.get_by_id(db, user_id)
    if user is None or not user.is_active:
        raise Unauthenticated("Invalid token")
    return user


def ensure_admin(user: User) -> User:
    if not user.is_admin:
        raise PermissionDenied()
    return user


async def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Dependency to validate the JWT and return the resolved user."""
    try:
        user = await authenticate_token(db, token)
    except Unauthenticated as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Store in request state for downstream use (like rate limiting)
    request.state.user_id = str(user.id)
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Dependency for back-office routes: the resolved user must carry is_admin."""
    try:
        return ensure_admin(user)
    except PermissionDenied as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=exc.message)
