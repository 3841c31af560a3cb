import pytest

from lending_api.database import session_scope
from lending_api.errors import AuthError, ConflictError, ValidationError
from lending_api.models import UserRole
from lending_api.services.identity import IdentityStore


def test_register_hashes_password(session_factory):
    with session_scope(session_factory) as db:
        user = IdentityStore(db).register("alice", "pw1", UserRole.MEMBER)

    assert user.user_id is not None
    assert user.role == "member"
    assert user.password_hash != "pw1"
    assert user.password_hash.startswith("$2")


def test_register_duplicate_username(session_factory):
    with session_scope(session_factory) as db:
        IdentityStore(db).register("alice", "pw1", UserRole.MEMBER)

    with pytest.raises(ConflictError, match="Username already exists"):
        with session_scope(session_factory) as db:
            IdentityStore(db).register("alice", "pw2", UserRole.MEMBER)


def test_usernames_are_case_sensitive(session_factory):
    with session_scope(session_factory) as db:
        store = IdentityStore(db)
        store.register("alice", "pw1")
        other = store.register("Alice", "pw2")

    assert other.username == "Alice"


@pytest.mark.parametrize("username,password", [("", "pw"), ("   ", "pw"), ("bob", "")])
def test_register_requires_username_and_password(session_factory, username, password):
    with pytest.raises(ValidationError):
        with session_scope(session_factory) as db:
            IdentityStore(db).register(username, password)


def test_authenticate(session_factory, make_user):
    user_id = make_user("alice", "pw1", UserRole.ADMIN)

    with session_scope(session_factory) as db:
        user = IdentityStore(db).authenticate("alice", "pw1")

    assert user.user_id == user_id
    assert user.is_admin


def test_authenticate_does_not_reveal_which_factor_failed(session_factory, make_user):
    make_user("alice", "pw1")

    with session_scope(session_factory) as db:
        store = IdentityStore(db)
        with pytest.raises(AuthError) as wrong_password:
            store.authenticate("alice", "nope")
        with pytest.raises(AuthError) as unknown_user:
            store.authenticate("mallory", "pw1")

    assert wrong_password.value.message == unknown_user.value.message
