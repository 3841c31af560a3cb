from fastapi import APIRouter, Depends, status
from typing import List
from lending_api.models.user import User
from lending_api.schemas.transaction import (
    BorrowRequest, ReturnRequest, TransactionResponse, TransactionEnvelope
)
from lending_api.services.auth import ensure_self_or_admin, get_current_user
from lending_api.services.lending import LendingService, get_lending_service
from lending_api.services.queries import LibraryQueries, get_library_queries

router = APIRouter(tags=["Loans"])

@router.post("/borrow", response_model=TransactionEnvelope, status_code=status.HTTP_201_CREATED)
def borrow_book(
    request: BorrowRequest,
    current_user: User = Depends(get_current_user),
    service: LendingService = Depends(get_lending_service)
):
    """Borrow one copy of a book. Members borrow for themselves, admins for anyone."""
    ensure_self_or_admin(current_user, request.user_id)

    transaction = service.borrow(request.user_id, request.book_id, request.idempotency_key)
    return TransactionEnvelope(
        message="Book borrowed successfully",
        transaction=TransactionResponse(**transaction.to_dict())
    )

@router.post("/return", response_model=TransactionEnvelope)
def return_book(
    request: ReturnRequest,
    current_user: User = Depends(get_current_user),
    queries: LibraryQueries = Depends(get_library_queries),
    service: LendingService = Depends(get_lending_service)
):
    """Return a borrowed book."""
    transaction = queries.get_transaction(request.transaction_id)
    ensure_self_or_admin(current_user, transaction.user_id)

    transaction = service.return_book(request.transaction_id)
    return TransactionEnvelope(
        message="Book returned successfully",
        transaction=TransactionResponse(**transaction.to_dict())
    )

@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    current_user: User = Depends(get_current_user),
    queries: LibraryQueries = Depends(get_library_queries)
):
    """Get specific transaction details."""
    transaction = queries.get_transaction(transaction_id)
    ensure_self_or_admin(current_user, transaction.user_id)
    return TransactionResponse(**transaction.to_dict())

@router.get("/history/{user_id}", response_model=List[TransactionResponse])
def get_history(
    user_id: int,
    current_user: User = Depends(get_current_user),
    queries: LibraryQueries = Depends(get_library_queries)
):
    """Get loan history (borrowed and returned) for a user, most recent first."""
    ensure_self_or_admin(current_user, user_id)
    return [TransactionResponse(**t.to_dict()) for t in queries.history_by_user(user_id)]
