import os

# Settings are read at import time
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from lending_api.database import Base, create_db_engine, create_session_factory, get_session_factory, session_scope
from lending_api.main import app
from lending_api.models import UserRole
from lending_api.services.catalog import CatalogStore
from lending_api.services.identity import IdentityStore
from lending_api.services.lending import LendingService
from lending_api.services.queries import LibraryQueries
from lending_api.utils.locks import KeyedLock


@pytest.fixture
def engine(tmp_path):
    # A file database so worker threads get their own connections
    engine = create_db_engine(f"sqlite:///{tmp_path / 'library_test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def service(session_factory):
    return LendingService(session_factory, locks=KeyedLock())


@pytest.fixture
def queries(session_factory):
    return LibraryQueries(session_factory)


@pytest.fixture
def make_user(session_factory):
    def _make_user(username, password="secret", role=UserRole.MEMBER):
        with session_scope(session_factory) as db:
            return IdentityStore(db).register(username, password, role).user_id
    return _make_user


@pytest.fixture
def make_book(session_factory):
    def _make_book(title="Dune", author="Herbert", quantity=2):
        with session_scope(session_factory) as db:
            return CatalogStore(db).add_book(title, author, quantity).book_id
    return _make_book


@pytest.fixture
def client(session_factory):
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
