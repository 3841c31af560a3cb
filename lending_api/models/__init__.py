from .user import User, UserRole
from .book import Book
from .loan import LoanTransaction, LoanStatus

__all__ = [
    "User",
    "UserRole",
    "Book",
    "LoanTransaction",
    "LoanStatus",
]
