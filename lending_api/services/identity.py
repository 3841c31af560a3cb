import logging
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from lending_api.errors import AuthError, ConflictError, ValidationError
from lending_api.models.user import User, UserRole
from lending_api.services.auth import get_password_hash, verify_password

logger = logging.getLogger(__name__)

# One message for unknown user and wrong password
INVALID_CREDENTIALS = "Invalid username or password"


class IdentityStore:
    """User accounts and credential checks.

    Writes are flushed, not committed: the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def find_by_username(self, username: str) -> Optional[User]:
        return self.db.scalars(select(User).where(User.username == username)).first()

    def register(self, username: str, password: str, role: UserRole = UserRole.MEMBER) -> User:
        if not username or not username.strip() or not password:
            raise ValidationError("Username and password are required")

        if self.find_by_username(username) is not None:
            raise ConflictError("Username already exists")

        user = User(
            username=username,
            password_hash=get_password_hash(password),
            role=UserRole(role).value,
        )
        self.db.add(user)
        try:
            self.db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name
            self.db.rollback()
            raise ConflictError("Username already exists")

        logger.info(f"Registered user {user.user_id} ({user.username}, {user.role})")
        return user

    def authenticate(self, username: str, password: str) -> User:
        user = self.find_by_username(username) if username else None
        if user is None or not password or not verify_password(password, user.password_hash):
            logger.warning("Failed login attempt")
            raise AuthError(INVALID_CREDENTIALS)
        return user
