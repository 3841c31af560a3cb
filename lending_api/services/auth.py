import logging
from datetime import timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import sessionmaker
from lending_api.config import settings
from lending_api.database import get_session_factory, session_scope
from lending_api.errors import ForbiddenError
from lending_api.models.user import User
from lending_api.utils.timezone import now_local

logger = logging.getLogger(__name__)

# HTTP Bearer token - auto_error=False so we can handle errors ourselves
security = HTTPBearer(auto_error=False)

# Password hashing context - using bcrypt with automatic salt generation
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as e:
        # Stored value is not a recognizable bcrypt hash
        logger.error(f"Password verification error: {e}. Hash format may be invalid.")
        return False

def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token.

    Without an explicit ``expires_delta`` the token only expires when
    ``jwt_access_token_expire_minutes`` is configured.
    """
    to_encode = data.copy()
    if expires_delta is None and settings.jwt_access_token_expire_minutes:
        expires_delta = timedelta(minutes=settings.jwt_access_token_expire_minutes)
    if expires_delta is not None:
        to_encode.update({"exp": now_local() + expires_delta})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

def create_user_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.user_id), "role": user.role})

def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session_factory: sessionmaker = Depends(get_session_factory)
) -> User:
    """Get current authenticated user from JWT token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials. Please provide a valid Authorization header with Bearer token.",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        auth_header = request.headers.get("Authorization")
        if auth_header:
            logger.warning(f"Authorization header present but invalid format: {auth_header[:50]}")
        else:
            logger.warning("Authorization header missing")
        raise credentials_exception

    try:
        token = credentials.credentials
        if not token:
            raise credentials_exception

        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        user_id_str: str = payload.get("sub")
        if user_id_str is None:
            raise credentials_exception
        user_id = int(user_id_str)
    except JWTError as e:
        logger.warning(f"JWT validation error: {str(e)}")
        raise credentials_exception
    except (ValueError, TypeError) as e:
        logger.warning(f"Token parsing error: {str(e)}")
        raise credentials_exception

    # Short-lived session: the lending service opens its own units of work
    # and must not wait on a lock held by this lookup.
    with session_scope(session_factory) as db:
        user = db.get(User, user_id)
    if user is None:
        raise credentials_exception
    return user

def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Admin-only endpoints (AddBook, active loans list)."""
    if not current_user.is_admin:
        logger.warning(f"User {current_user.user_id} denied admin access")
        raise ForbiddenError("Admin privileges required")
    return current_user

def ensure_self_or_admin(current_user: User, user_id: int):
    """Members may only act on their own loans; admins act for anyone."""
    if current_user.user_id != user_id and not current_user.is_admin:
        logger.warning(f"User {current_user.user_id} denied access to loans of user {user_id}")
        raise ForbiddenError("You can only access your own loans")
