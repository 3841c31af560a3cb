from typing import List, Optional
from fastapi import Depends
from sqlalchemy.orm import sessionmaker
from lending_api.database import get_session_factory, session_scope
from lending_api.models.book import Book
from lending_api.models.loan import LoanTransaction
from lending_api.services.catalog import CatalogStore
from lending_api.services.ledger import LendingLedger


class LibraryQueries:
    """Read-only projections. Each call reads inside a single transaction."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def list_books(self, search: Optional[str] = None) -> List[Book]:
        with session_scope(self.session_factory) as db:
            return CatalogStore(db).list_books(search)

    def get_book(self, book_id: int) -> Book:
        with session_scope(self.session_factory) as db:
            return CatalogStore(db).require_book(book_id)

    def get_transaction(self, transaction_id: int) -> LoanTransaction:
        with session_scope(self.session_factory) as db:
            return LendingLedger(db).require(transaction_id)

    def history_by_user(self, user_id: int) -> List[LoanTransaction]:
        """All transactions of a user, any status, most recent first."""
        with session_scope(self.session_factory) as db:
            return LendingLedger(db).list_by_user(user_id)

    def active_loans(self) -> List[LoanTransaction]:
        """Every borrowed transaction with its book and borrower loaded."""
        with session_scope(self.session_factory) as db:
            return LendingLedger(db).list_active()


def get_library_queries(session_factory: sessionmaker = Depends(get_session_factory)) -> LibraryQueries:
    return LibraryQueries(session_factory)
