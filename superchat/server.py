"""Line-oriented TCP chat server backed by the user database."""

from __future__ import annotations

import argparse
import asyncio
import logging
import re
from collections.abc import AsyncIterator
from dataclasses import dataclass

from superchat.encryption import encrypt
from superchat.storage import Database, StorageError

__all__ = ["ChatServer", "main"]

log = logging.getLogger(__name__)

_WELCOME = (
    "🌟 Welcome to Super‑Chat! 🌟",
    "Commands:",
    "  REGISTER username email dob(YYYY-MM-DD) fullname password",
    "  LOGIN userID password",
    "  SEND username message…",
    "  QUIT",
)

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass(eq=False)
class _Session:
    """One connected peer and the user it has logged in as."""

    writer: asyncio.StreamWriter
    user_id: int | None = None

    def send(self, line: str) -> None:
        if not self.writer.is_closing():
            self.writer.write(line.encode("utf-8") + b"\n")


def _parse_user_id(text: str) -> int:
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError(text)
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(text)
    return value


async def _read_lines(reader: asyncio.StreamReader) -> AsyncIterator[str]:
    """Yield lines without their terminators until EOF or an oversized line."""
    while True:
        try:
            raw = await reader.readline()
        except (ValueError, ConnectionError):
            return
        if not raw:
            return
        if raw.endswith(b"\n"):
            raw = raw[:-1]
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        yield raw.decode("utf-8", errors="replace")


async def _drain(writer: asyncio.StreamWriter) -> None:
    try:
        await writer.drain()
    except ConnectionError:
        pass


class ChatServer:
    """Accepts clients, authenticates them and relays encrypted messages."""

    def __init__(self, db: Database) -> None:
        self._db = db
        self._clients: dict[int, _Session] = {}

    async def handle_connection(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        """Serve one client until it quits or disconnects."""
        session = _Session(writer)
        try:
            for line in _WELCOME:
                session.send(line)
            await _drain(writer)
            async for line in _read_lines(reader):
                keep_going = self._dispatch(session, line)
                await _drain(writer)
                if not keep_going:
                    break
        finally:
            self._forget(session)
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def serve(self, host: str | None, port: int) -> None:
        """Listen on host and port and serve clients forever."""
        server = await asyncio.start_server(self.handle_connection, host or None, port)
        log.info("Listening on %s:%d …", host or "", port)
        async with server:
            await server.serve_forever()

    def _forget(self, session: _Session) -> None:
        for user_id in [uid for uid, s in self._clients.items() if s is session]:
            del self._clients[user_id]

    def _dispatch(self, session: _Session, line: str) -> bool:
        command, _, arg = line.partition(" ")
        command = command.upper()
        if command == "REGISTER":
            self._register(session, arg)
        elif command == "LOGIN":
            self._login(session, arg)
        elif command == "SEND":
            self._send(session, arg)
        elif command == "QUIT":
            session.send("BYE")
            return False
        else:
            session.send("Unknown command")
        return True

    def _register(self, session: _Session, arg: str) -> None:
        fields = arg.split(" ", 4)
        if len(fields) < 5:
            session.send("Usage: REGISTER username email dob fullname password")
            return
        try:
            user_id = self._db.register_user(*fields)
        except StorageError as exc:
            session.send(f"ERROR: {exc}")
        else:
            session.send(f"REGISTERED userID={user_id}")

    def _login(self, session: _Session, arg: str) -> None:
        fields = arg.split(" ", 1)
        if len(fields) < 2:
            session.send("Usage: LOGIN userID password")
            return
        try:
            user_id = _parse_user_id(fields[0])
        except ValueError:
            session.send("ERROR: invalid userID")
            return
        try:
            self._db.authenticate(user_id, fields[1])
        except StorageError as exc:
            session.send(f"ERROR: {exc}")
            return
        session.user_id = user_id
        self._clients[user_id] = session
        session.send("LOGIN OK")

    def _send(self, session: _Session, arg: str) -> None:
        if not session.user_id:
            session.send("ERROR: please LOGIN first")
            return
        fields = arg.split(" ", 1)
        if len(fields) < 2:
            session.send("Usage: SEND username message")
            return
        recipient, text = fields
        try:
            to_id = self._db.lookup_by_username(recipient)
        except StorageError:
            session.send("ERROR: user not found")
            return
        dest = self._clients.get(to_id)
        try:
            sender = self._db.lookup_username_by_id(session.user_id)
        except StorageError:
            sender = ""
        sealed = encrypt(f"[{sender}] {text}")
        if dest is not None:
            dest.send("CHAT:" + sealed)
        session.send("SENT")


def main(argv: list[str] | None = None) -> int:
    """Run the chat server."""
    parser = argparse.ArgumentParser(prog="superchat-server")
    parser.add_argument("--db", default="users.sqlite", help="SQLite user database")
    parser.add_argument("--host", default="", help="interface to listen on")
    parser.add_argument("--port", type=int, default=9000, help="TCP port")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    try:
        db = Database(args.db)
    except StorageError as exc:
        log.error("%s", exc)
        return 1
    with db:
        try:
            asyncio.run(ChatServer(db).serve(args.host, args.port))
        except KeyboardInterrupt:
            return 0
        except OSError as exc:
            log.error("%s", exc)
            return 1
    return 0