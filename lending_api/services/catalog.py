import logging
from typing import List, Optional
from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session
from lending_api.errors import InsufficientStockError, NotFoundError, ValidationError
from lending_api.models.book import Book

logger = logging.getLogger(__name__)


class CatalogStore:
    """Book records and their available-copy counts."""

    def __init__(self, db: Session):
        self.db = db

    def add_book(self, title: str, author: str, quantity: int) -> Book:
        if not title or not title.strip() or not author or not author.strip():
            raise ValidationError("Title and author are required")
        if quantity is None or quantity < 1:
            raise ValidationError("Quantity must be a valid number greater than 0")

        book = Book(title=title.strip(), author=author.strip(), quantity=quantity)
        self.db.add(book)
        self.db.flush()
        logger.info(f"Added book {book.book_id} '{book.title}' with {book.quantity} copies")
        return book

    def get_book(self, book_id: int) -> Optional[Book]:
        return self.db.get(Book, book_id)

    def require_book(self, book_id: int) -> Book:
        book = self.get_book(book_id)
        if book is None:
            raise NotFoundError("Book not found")
        return book

    def list_books(self, search: Optional[str] = None) -> List[Book]:
        query = select(Book)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    Book.title.ilike(search_term),
                    Book.author.ilike(search_term)
                )
            )
        return list(self.db.scalars(query.order_by(Book.book_id)))

    def adjust_quantity(self, book_id: int, delta: int) -> Book:
        """Apply ``delta`` to the available count as one conditional UPDATE.

        The row only changes when the result stays non-negative, so the check
        and the write cannot be separated by a concurrent writer.
        """
        result = self.db.execute(
            update(Book)
            .where(Book.book_id == book_id, Book.quantity + delta >= 0)
            .values(quantity=Book.quantity + delta)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            book = self.require_book(book_id)
            raise InsufficientStockError(
                f"Cannot adjust quantity of book {book_id} by {delta}: only {book.quantity} available"
            )
        return self.db.get(Book, book_id, populate_existing=True)
