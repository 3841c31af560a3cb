import enum
from sqlalchemy import Column, String, DateTime, Integer, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from lending_api.database import Base

class UserRole(str, enum.Enum):
    MEMBER = "member"
    ADMIN = "admin"

class User(Base):
    __tablename__ = "user"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(150), unique=True, nullable=False, index=True)  # case-sensitive
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default=UserRole.MEMBER.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    loans = relationship("LoanTransaction", back_populates="user")

    __table_args__ = (
        CheckConstraint("role IN ('member', 'admin')", name="chk_user_role"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def to_dict(self):
        return {
            "id": str(self.user_id),
            "username": self.username,
            "role": self.role,
        }
