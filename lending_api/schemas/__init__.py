from .auth import UserCreate, UserLogin, UserResponse, RegisterResponse, Token
from .book import BookBase, BookCreate, BookSummary, BookResponse
from .transaction import (
    BorrowRequest, ReturnRequest,
    BorrowerSummary, TransactionResponse, TransactionEnvelope
)

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "RegisterResponse", "Token",
    "BookBase", "BookCreate", "BookSummary", "BookResponse",
    "BorrowRequest", "ReturnRequest",
    "BorrowerSummary", "TransactionResponse", "TransactionEnvelope",
]
