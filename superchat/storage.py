"""SQLite-backed user accounts with bcrypt password hashes."""

from __future__ import annotations

import sqlite3

import bcrypt

__all__ = ["StorageError", "Database", "DEFAULT_COST"]

DEFAULT_COST = 10
_MAX_PASSWORD_BYTES = 72
_ENCODING = "utf-8"

_CREATE_USERS = """
CREATE TABLE IF NOT EXISTS users (
  id         INTEGER PRIMARY KEY AUTOINCREMENT,
  username   TEXT    UNIQUE NOT NULL,
  email      TEXT    UNIQUE NOT NULL,
  dob        TEXT    NOT NULL,
  full_name  TEXT    NOT NULL,
  hash       TEXT    NOT NULL
)
"""


class StorageError(Exception):
    """Raised when a user operation fails."""


class Database:
    """User store kept in a single SQLite file."""

    def __init__(self, path: str) -> None:
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        try:
            with self._conn:
                self._conn.execute(_CREATE_USERS)
        except sqlite3.Error as exc:
            self._conn.close()
            raise StorageError(str(exc)) from exc

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def register_user(
        self, username: str, email: str, dob: str, full_name: str, password: str
    ) -> int:
        """Insert a new user and return the new user id."""
        encoded = password.encode(_ENCODING)
        if len(encoded) > _MAX_PASSWORD_BYTES:
            raise StorageError("bcrypt: password length exceeds 72 bytes")
        hashed = bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=DEFAULT_COST))
        try:
            with self._conn:
                cursor = self._conn.execute(
                    "INSERT INTO users(username,email,dob,full_name,hash) "
                    "VALUES(?,?,?,?,?)",
                    (username, email, dob, full_name, hashed.decode("ascii")),
                )
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        return cursor.lastrowid

    def authenticate(self, user_id: int, password: str) -> None:
        """Check a user id and password; raise StorageError on mismatch."""
        row = self._conn.execute(
            "SELECT hash FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        if row is None:
            raise StorageError("user not found")
        try:
            ok = bcrypt.checkpw(password.encode(_ENCODING), row[0].encode("ascii"))
        except ValueError:
            ok = False
        if not ok:
            raise StorageError("invalid password")

    def lookup_by_username(self, username: str) -> int:
        """Return the id of the user with this username."""
        row = self._conn.execute(
            "SELECT id FROM users WHERE username = ?", (username,)
        ).fetchone()
        if row is None:
            raise StorageError("user not found")
        return row[0]

    def lookup_username_by_id(self, user_id: int) -> str:
        """Return the username of the user with this id."""
        row = self._conn.execute(
            "SELECT username FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        if row is None:
            raise StorageError("user not found")
        return row[0]

    def close(self) -> None:
        """Close the underlying connection."""
        self._conn.close()