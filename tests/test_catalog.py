import pytest

from lending_api.database import session_scope
from lending_api.errors import InsufficientStockError, NotFoundError, ValidationError
from lending_api.services.catalog import CatalogStore


def test_add_and_list_books_in_insertion_order(session_factory, make_book):
    make_book("Dune", "Herbert", 2)
    make_book("Anathem", "Stephenson", 1)
    make_book("Cryptonomicon", "Stephenson", 3)

    with session_scope(session_factory) as db:
        books = CatalogStore(db).list_books()

    assert [b.title for b in books] == ["Dune", "Anathem", "Cryptonomicon"]
    assert books[0].quantity == 2


def test_list_books_search(session_factory, make_book):
    make_book("Dune", "Herbert", 2)
    make_book("Anathem", "Stephenson", 1)

    with session_scope(session_factory) as db:
        books = CatalogStore(db).list_books(search="stephen")

    assert [b.title for b in books] == ["Anathem"]


@pytest.mark.parametrize("title,author,quantity", [
    ("Dune", "Herbert", 0),
    ("Dune", "Herbert", -3),
    ("", "Herbert", 1),
    ("Dune", "  ", 1),
])
def test_add_book_validation(session_factory, title, author, quantity):
    with pytest.raises(ValidationError):
        with session_scope(session_factory) as db:
            CatalogStore(db).add_book(title, author, quantity)

    with session_scope(session_factory) as db:
        assert CatalogStore(db).list_books() == []


def test_adjust_quantity(session_factory, make_book):
    book_id = make_book(quantity=1)

    with session_scope(session_factory) as db:
        catalog = CatalogStore(db)
        assert catalog.adjust_quantity(book_id, -1).quantity == 0
        with pytest.raises(InsufficientStockError):
            catalog.adjust_quantity(book_id, -1)
        assert catalog.adjust_quantity(book_id, 1).quantity == 1


def test_adjust_quantity_unknown_book(session_factory):
    with session_scope(session_factory) as db:
        with pytest.raises(NotFoundError):
            CatalogStore(db).adjust_quantity(999, -1)
