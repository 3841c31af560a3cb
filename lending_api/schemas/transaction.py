from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from lending_api.models.loan import LoanStatus
from lending_api.schemas.book import BookSummary

class BorrowRequest(BaseModel):
    user_id: int
    book_id: int
    idempotency_key: Optional[str] = Field(
        None, min_length=1, max_length=100,
        description="Client-generated key; a replayed borrow returns the original transaction"
    )

class ReturnRequest(BaseModel):
    transaction_id: int

class BorrowerSummary(BaseModel):
    id: str
    username: str

class TransactionResponse(BaseModel):
    id: str
    user_id: str
    book_id: str
    borrowed_at: datetime
    due_date: datetime
    returned_at: Optional[datetime] = None
    status: LoanStatus
    book: Optional[BookSummary] = None
    user: Optional[BorrowerSummary] = None

class TransactionEnvelope(BaseModel):
    message: str
    transaction: TransactionResponse
