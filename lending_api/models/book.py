from sqlalchemy import Column, String, DateTime, Integer, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from lending_api.database import Base

class Book(Base):
    __tablename__ = "book"

    book_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)  # available copies, not total stock
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    loans = relationship("LoanTransaction", back_populates="book")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="chk_book_quantity"),
    )

    def to_summary(self):
        return {
            "id": str(self.book_id),
            "title": self.title,
            "author": self.author,
        }

    def to_dict(self):
        return {
            **self.to_summary(),
            "quantity": self.quantity,
        }
