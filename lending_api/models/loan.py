import enum
from sqlalchemy import Column, String, Integer, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.orm import relationship
from lending_api.database import Base, UTCDateTime
from lending_api.utils.timezone import to_local

class LoanStatus(str, enum.Enum):
    BORROWED = "borrowed"
    RETURNED = "returned"

class LoanTransaction(Base):
    __tablename__ = "loan_transaction"

    transaction_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.user_id", ondelete="RESTRICT"), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("book.book_id", ondelete="RESTRICT"), nullable=False, index=True)
    borrowed_at = Column(UTCDateTime, nullable=False, index=True)
    due_date = Column(UTCDateTime, nullable=False)
    returned_at = Column(UTCDateTime, nullable=True)
    status = Column(String(20), default=LoanStatus.BORROWED.value, nullable=False, index=True)
    idempotency_key = Column(String(100), nullable=True)

    # Relationships (always needed for display, so loaded with the row)
    user = relationship("User", back_populates="loans", lazy="joined")
    book = relationship("Book", back_populates="loans", lazy="joined")

    __table_args__ = (
        CheckConstraint("status IN ('borrowed', 'returned')", name="chk_loan_status"),
        CheckConstraint(
            "(status = 'borrowed' AND returned_at IS NULL) OR "
            "(status = 'returned' AND returned_at IS NOT NULL)",
            name="chk_loan_returned_at",
        ),
        CheckConstraint("due_date >= borrowed_at", name="chk_loan_due_date"),
        UniqueConstraint("user_id", "idempotency_key", name="uq_loan_idempotency_key"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == LoanStatus.BORROWED.value

    def to_dict(self):
        return {
            "id": str(self.transaction_id),
            "user_id": str(self.user_id),
            "book_id": str(self.book_id),
            "borrowed_at": to_local(self.borrowed_at),
            "due_date": to_local(self.due_date),
            "returned_at": to_local(self.returned_at),
            "status": self.status,
            "book": self.book.to_summary() if self.book else None,
            "user": {"id": str(self.user.user_id), "username": self.user.username} if self.user else None,
        }
