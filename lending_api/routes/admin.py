from fastapi import APIRouter, Depends
from typing import List
from lending_api.models.user import User
from lending_api.schemas.transaction import TransactionResponse
from lending_api.services.auth import require_admin
from lending_api.services.queries import LibraryQueries, get_library_queries

router = APIRouter(prefix="/admin", tags=["Admin"])

@router.get("/borrowed-books", response_model=List[TransactionResponse])
def get_borrowed_books(
    current_user: User = Depends(require_admin),
    queries: LibraryQueries = Depends(get_library_queries)
):
    """All active loans with book title and borrower username."""
    return [TransactionResponse(**t.to_dict()) for t in queries.active_loans()]
