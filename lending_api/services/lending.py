"""Borrow and return as atomic units of work.

Each operation holds the per-book lock for its book and runs inside one
database transaction, so the quantity change and the ledger write commit
together or not at all.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional
from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from lending_api.config import settings
from lending_api.database import get_session_factory, session_scope
from lending_api.errors import ConflictError, InsufficientStockError, NotFoundError, OutOfStockError
from lending_api.models.loan import LoanTransaction
from lending_api.services.catalog import CatalogStore
from lending_api.services.identity import IdentityStore
from lending_api.services.ledger import LendingLedger
from lending_api.utils.locks import KeyedLock
from lending_api.utils.timezone import now_local

logger = logging.getLogger(__name__)

# Shared by every service instance in the process
book_locks = KeyedLock()


class LendingService:

    def __init__(
        self,
        session_factory: sessionmaker,
        loan_period: Optional[timedelta] = None,
        clock: Callable[[], datetime] = now_local,
        locks: Optional[KeyedLock] = None
    ):
        self.session_factory = session_factory
        self.loan_period = loan_period if loan_period is not None else timedelta(days=settings.loan_period_days)
        self.clock = clock
        self.locks = locks if locks is not None else book_locks

    def borrow(self, user_id: int, book_id: int, idempotency_key: Optional[str] = None) -> LoanTransaction:
        """Take one copy of ``book_id`` for ``user_id``.

        Raises NotFoundError for an unknown user or book, OutOfStockError when
        no copy is available. A repeated ``idempotency_key`` returns the
        transaction it created the first time.
        """
        try:
            with self.locks.hold(book_id):
                transaction = self._borrow_locked(user_id, book_id, idempotency_key)
        except IntegrityError:
            if not idempotency_key:
                raise
            # Another request committed the same key first (different book
            # lock, or another process): settle against what it stored.
            with session_scope(self.session_factory) as db:
                existing = LendingLedger(db).find_by_key(user_id, idempotency_key)
            if existing is None:
                raise
            return self._replay(existing, book_id, idempotency_key)

        logger.info(
            f"User {user_id} borrowed book {book_id} "
            f"(transaction {transaction.transaction_id}, due {transaction.due_date.isoformat()})"
        )
        return transaction

    def _borrow_locked(self, user_id: int, book_id: int, idempotency_key: Optional[str]) -> LoanTransaction:
        with session_scope(self.session_factory) as db:
            ledger = LendingLedger(db)

            if idempotency_key:
                existing = ledger.find_by_key(user_id, idempotency_key)
                if existing is not None:
                    return self._replay(existing, book_id, idempotency_key)

            if IdentityStore(db).get_user(user_id) is None:
                raise NotFoundError("User not found")

            try:
                CatalogStore(db).adjust_quantity(book_id, -1)
            except InsufficientStockError as e:
                logger.warning(f"Borrow rejected for user {user_id}: {e}")
                raise OutOfStockError("Book is out of stock") from e

            borrowed_at = self.clock()
            return ledger.append(
                user_id=user_id,
                book_id=book_id,
                borrowed_at=borrowed_at,
                due_date=borrowed_at + self.loan_period,
                idempotency_key=idempotency_key,
            )

    def _replay(self, existing: LoanTransaction, book_id: int, idempotency_key: str) -> LoanTransaction:
        if existing.book_id != book_id:
            raise ConflictError("Idempotency key already used for a different book")
        logger.info(f"Replayed borrow {existing.transaction_id} for key {idempotency_key}")
        return existing

    def return_book(self, transaction_id: int) -> LoanTransaction:
        """Close an active loan and put the copy back on the shelf.

        Raises NotFoundError for an unknown transaction and InvalidStateError
        when it was already returned.
        """
        with session_scope(self.session_factory) as db:
            book_id = LendingLedger(db).require(transaction_id).book_id

        with self.locks.hold(book_id):
            with session_scope(self.session_factory) as db:
                ledger = LendingLedger(db)
                ledger.mark_returned(transaction_id, self.clock())
                CatalogStore(db).adjust_quantity(book_id, 1)
                transaction = ledger.require(transaction_id)

            logger.info(f"Transaction {transaction_id} returned, book {book_id} back in stock")
            return transaction


def get_lending_service(session_factory: sessionmaker = Depends(get_session_factory)) -> LendingService:
    return LendingService(session_factory)
