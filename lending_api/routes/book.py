from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from lending_api.database import get_db
from lending_api.models.user import User
from lending_api.schemas.book import BookCreate, BookResponse
from lending_api.services.auth import require_admin
from lending_api.services.catalog import CatalogStore
from lending_api.services.queries import LibraryQueries, get_library_queries

router = APIRouter(prefix="/books", tags=["Books"])

@router.get("", response_model=List[BookResponse])
def get_books(
    search: Optional[str] = Query(None, description="Search by title or author"),
    queries: LibraryQueries = Depends(get_library_queries)
):
    """Get the catalog in insertion order, optionally filtered."""
    return [BookResponse(**book.to_dict()) for book in queries.list_books(search)]

@router.get("/{book_id}", response_model=BookResponse)
def get_book(book_id: int, queries: LibraryQueries = Depends(get_library_queries)):
    """Get book details by ID."""
    return BookResponse(**queries.get_book(book_id).to_dict())

@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
def add_book(
    book_data: BookCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Add a book with its available copies (admin only)."""
    book = CatalogStore(db).add_book(book_data.title, book_data.author, book_data.quantity)
    db.commit()
    return BookResponse(**book.to_dict())
