import pytest

from superchat.storage import Database, StorageError

PASSWORD = "password"


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "users.sqlite"))
    yield database
    database.close()


def _register(db, name="alice", password=PASSWORD):
    return db.register_user(
        name, f"{name}@example.com", "1990-01-01", f"{name.title()} Example", password
    )


def test_ids_are_sequential(db):
    first = _register(db, "alice")
    second = _register(db, "bob")
    assert first == 1
    assert second == first + 1


def test_authenticate_success_and_lookups(db):
    uid = _register(db)
    db.authenticate(uid, PASSWORD)
    assert db.lookup_by_username("alice") == uid
    assert db.lookup_username_by_id(uid) == "alice"


def test_wrong_password(db):
    uid = _register(db)
    with pytest.raises(StorageError, match="invalid password"):
        db.authenticate(uid, "secret")


def test_unknown_user_authenticate(db):
    with pytest.raises(StorageError, match="user not found"):
        db.authenticate(42, PASSWORD)


def test_unknown_lookups(db):
    with pytest.raises(StorageError, match="user not found"):
        db.lookup_by_username("nobody")
    with pytest.raises(StorageError, match="user not found"):
        db.lookup_username_by_id(99)


def test_duplicate_username_rejected(db):
    _register(db, "alice")
    with pytest.raises(StorageError, match="UNIQUE"):
        db.register_user("alice", "other@example.com", "2000-02-02", "Other", PASSWORD)


def test_duplicate_email_rejected(db):
    _register(db, "alice")
    with pytest.raises(StorageError, match="UNIQUE"):
        db.register_user("carol", "alice@example.com", "2000-02-02", "Carol", PASSWORD)


def test_overlong_password_rejected(db):
    with pytest.raises(StorageError):
        db.register_user("dave", "dave@example.com", "2000-02-02", "Dave", "p" * 80)


def test_data_persists_across_reopen(tmp_path):
    path = str(tmp_path / "users.sqlite")
    with Database(path) as first:
        uid = _register(first)
    with Database(path) as second:
        assert second.lookup_username_by_id(uid) == "alice"
        second.authenticate(uid, PASSWORD)
        assert _register(second, "bob") == uid + 1