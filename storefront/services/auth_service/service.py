import structlog
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.errors import Conflict, PermissionDenied, Unauthenticated
from storefront.core.security.jwt_handler import ACCESS_TOKEN_EXPIRE_MINUTES, create_access_token

from .models import User
from .repository import UserRepository
from .schemas import TokenResponse, UserCreate, UserLogin

logger = structlog.get_logger(__name__)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return _pwd_context.verify(plain, hashed)


class AuthService:

    @staticmethod
    async def register(db: AsyncSession, data: UserCreate) -> User:
        email = data.email.lower()
        if await UserRepository.get_by_email(db, email):
            raise Conflict("Email already registered")

        user = await UserRepository.create_with_profile(
            db, User(email=email, hashed_password=hash_password(data.password))
        )
        logger.info("user registered", user_id=user.id)
        return user

    @staticmethod
    async def authenticate(db: AsyncSession, email: str, password: str) -> User:
        user = await UserRepository.get_by_email(db, email.lower())
        if user is None or not verify_password(password, user.hashed_password):
            logger.warning("login rejected", reason="bad_credentials")
            raise Unauthenticated("Incorrect email or password")
        if not user.is_active:
            logger.warning("login rejected", reason="inactive", user_id=user.id)
            raise PermissionDenied("Account is disabled")
        return user

    @staticmethod
    async def login(db: AsyncSession, data: UserLogin) -> TokenResponse:
        user = await AuthService.authenticate(db, data.email, data.password)
        logger.info("user logged in", user_id=user.id)
        return TokenResponse(
            access_token=create_access_token(user.id),
            expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )
