import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session
from lending_api.errors import InvalidStateError, NotFoundError
from lending_api.models.book import Book
from lending_api.models.loan import LoanTransaction, LoanStatus
from lending_api.models.user import User

logger = logging.getLogger(__name__)


class LendingLedger:
    """Append-mostly log of loan transactions.

    Entries are created as borrowed, flipped to returned once, and never
    deleted.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, transaction_id: int) -> Optional[LoanTransaction]:
        return self.db.get(LoanTransaction, transaction_id, populate_existing=True)

    def require(self, transaction_id: int) -> LoanTransaction:
        transaction = self.get(transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction not found")
        return transaction

    def find_by_key(self, user_id: int, idempotency_key: str) -> Optional[LoanTransaction]:
        return self.db.scalars(
            select(LoanTransaction).where(
                LoanTransaction.user_id == user_id,
                LoanTransaction.idempotency_key == idempotency_key
            )
        ).first()

    def append(
        self,
        user_id: int,
        book_id: int,
        borrowed_at: datetime,
        due_date: datetime,
        idempotency_key: Optional[str] = None
    ) -> LoanTransaction:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        book = self.db.get(Book, book_id)
        if book is None:
            raise NotFoundError("Book not found")

        transaction = LoanTransaction(
            user=user,
            book=book,
            borrowed_at=borrowed_at,
            due_date=due_date,
            status=LoanStatus.BORROWED.value,
            idempotency_key=idempotency_key,
        )
        self.db.add(transaction)
        self.db.flush()
        return transaction

    def mark_returned(self, transaction_id: int, returned_at: datetime) -> LoanTransaction:
        result = self.db.execute(
            update(LoanTransaction)
            .where(
                LoanTransaction.transaction_id == transaction_id,
                LoanTransaction.status == LoanStatus.BORROWED.value
            )
            .values(status=LoanStatus.RETURNED.value, returned_at=returned_at)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.require(transaction_id)
            raise InvalidStateError("Book already returned")
        return self.require(transaction_id)

    def list_by_user(self, user_id: int) -> List[LoanTransaction]:
        return list(self.db.scalars(
            select(LoanTransaction)
            .where(LoanTransaction.user_id == user_id)
            .order_by(LoanTransaction.borrowed_at.desc(), LoanTransaction.transaction_id.desc())
        ))

    def list_active(self) -> List[LoanTransaction]:
        return list(self.db.scalars(
            select(LoanTransaction)
            .where(LoanTransaction.status == LoanStatus.BORROWED.value)
            .order_by(LoanTransaction.borrowed_at.desc(), LoanTransaction.transaction_id.desc())
        ))

    def count_active_for_book(self, book_id: int) -> int:
        return self.db.execute(
            select(func.count())
            .select_from(LoanTransaction)
            .where(
                LoanTransaction.book_id == book_id,
                LoanTransaction.status == LoanStatus.BORROWED.value
            )
        ).scalar_one()
