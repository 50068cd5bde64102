"""Terminal chat client with local per-partner history."""

from __future__ import annotations

import argparse
import socket
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, TextIO

from superchat.encryption import DecryptionError, decrypt

__all__ = [
    "History",
    "ServerEvent",
    "parse_server_line",
    "login_command",
    "register_command",
    "send_command",
    "ChatClient",
    "main",
]

_NO_HISTORY = "No local history."

_BANNER = "✨  WELCOME TO SUPER‑CHAT ✨"
_HELP = """Commands:
  /login <userID> <password>
  /register <username> <email> <YYYY-MM-DD> <full name> <password>
  /partner <username>   choose who to chat with
  /history              show local history with the partner
  /quit
Any other line is sent to the current partner."""


class History:
    """Plain-text message history, one file per partner."""

    def __init__(self, directory: str | Path = "history") -> None:
        self.directory = Path(directory)

    def path(self, user: str) -> Path:
        """Return the history file for a partner."""
        return self.directory / f"{user}.txt"

    def store(self, user: str, message: str) -> None:
        """Append a message; failures are silently ignored."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with self.path(user).open("a", encoding="utf-8") as fh:
                fh.write(message + "\n")
        except OSError:
            pass

    def load(self, user: str) -> str:
        """Return the stored history, or an empty string."""
        try:
            return self.path(user).read_text(encoding="utf-8")
        except OSError:
            return ""

    def summary(self, user: str) -> str:
        """Return the history, or a placeholder when there is none."""
        return self.load(user) or _NO_HISTORY


@dataclass(frozen=True)
class ServerEvent:
    """A server line the client reacts to, with the text to show."""

    REGISTERED: ClassVar[str] = "registered"
    LOGIN_OK: ClassVar[str] = "login_ok"
    SENT: ClassVar[str] = "sent"
    ERROR: ClassVar[str] = "error"
    CHAT: ClassVar[str] = "chat"

    kind: str
    text: str

    @property
    def switch_to_chat(self) -> bool:
        return self.kind == self.LOGIN_OK


def parse_server_line(line: str) -> ServerEvent | None:
    """Interpret one server line; lines the client ignores give None."""
    if line.startswith("REGISTERED"):
        return ServerEvent(ServerEvent.REGISTERED, line)
    if line == "LOGIN OK":
        return ServerEvent(ServerEvent.LOGIN_OK, "Login successful!")
    if line == "SENT":
        return ServerEvent(ServerEvent.SENT, "Sent!")
    if line.startswith("ERROR"):
        return ServerEvent(ServerEvent.ERROR, line)
    if line.startswith("CHAT:"):
        try:
            text = decrypt(line[len("CHAT:"):])
        except DecryptionError:
            text = "[decrypt error]"
        return ServerEvent(ServerEvent.CHAT, text)
    return None


def login_command(user_id: str, password: str) -> str:
    """Build a LOGIN request line."""
    if not user_id or not password:
        raise ValueError("ID & Password required")
    return f"LOGIN {user_id} {password}\n"


def register_command(
    username: str, email: str, dob: str, full_name: str, password: str
) -> str:
    """Build a REGISTER request line."""
    if not all((username, email, dob, full_name, password)):
        raise ValueError("All fields required")
    return f"REGISTER {username} {email} {dob} {full_name} {password}\n"


def send_command(partner: str, text: str) -> str:
    """Build a SEND request line for the current partner."""
    if not partner:
        raise ValueError("no chat partner selected")
    return f"SEND {partner} {text}\n"


class ChatClient:
    """Pumps server lines to the terminal and user input to the server."""

    def __init__(self, connection: TextIO, history: History, output: TextIO) -> None:
        self._connection = connection
        self.history = history
        self._output = output
        self._lock = threading.Lock()
        self.partner = ""

    def _emit(self, text: str) -> None:
        with self._lock:
            print(text, file=self._output, flush=True)

    def handle_line(self, line: str) -> ServerEvent | None:
        """Show a server line and record chat messages in local history."""
        event = parse_server_line(line)
        if event is None:
            return None
        self._emit(event.text)
        if event.kind == ServerEvent.CHAT:
            self.history.store(self.partner, event.text)
        elif event.switch_to_chat:
            self._emit("Choose a partner with /partner <username>.")
        return event

    def run(self) -> None:
        """Read server lines until the connection closes."""
        while True:
            try:
                raw = self._connection.readline()
            except (OSError, ValueError):
                break
            if not raw:
                break
            if raw.endswith("\n"):
                raw = raw[:-1]
            if raw.endswith("\r"):
                raw = raw[:-1]
            self.handle_line(raw)
        self._emit("Connection closed.")

    def _write(self, request: str) -> None:
        self._connection.write(request)
        self._connection.flush()

    def _select_partner(self, name: str) -> None:
        if not name:
            return
        self.partner = name
        self._emit(f"--- Chat with: {name} ---")
        stored = self.history.load(name)
        if stored:
            self._emit(stored.rstrip("\n"))

    def _handle_input(self, text: str) -> bool:
        """Act on one line typed by the user; False means quit."""
        stripped = text.strip()
        if not stripped.startswith("/"):
            if not self.partner:
                self._emit("Choose a partner first with /partner <username>.")
                return True
            self._write(send_command(self.partner, text))
            return True
        name, _, rest = stripped[1:].partition(" ")
        name = name.lower()
        try:
            if name in ("quit", "q"):
                return False
            if name == "login":
                user_id, password = (rest.split(" ", 1) + ["", ""])[:2]
                self._write(login_command(user_id, password))
            elif name == "register":
                fields = (rest.split(" ", 4) + [""] * 5)[:5]
                self._write(register_command(*fields))
            elif name == "partner":
                self._select_partner(rest.strip())
            elif name == "history":
                self._emit(self.history.summary(self.partner))
            else:
                self._emit(_HELP)
        except ValueError as exc:
            self._emit(str(exc))
        return True


def main(argv: list[str] | None = None) -> int:
    """Connect to a chat server and run the interactive client."""
    parser = argparse.ArgumentParser(prog="superchat")
    parser.add_argument("--host", default="localhost")
    parser.add_argument("--port", type=int, default=9000)
    parser.add_argument("--history-dir", default="history")
    args = parser.parse_args(argv)
    try:
        sock = socket.create_connection((args.host, args.port))
    except OSError as exc:
        print(f"cannot connect: {exc}", file=sys.stderr)
        return 1
    with sock, sock.makefile("rw", encoding="utf-8", newline="") as conn:
        client = ChatClient(conn, History(args.history_dir), sys.stdout)
        client._emit(_BANNER)
        client._emit(_HELP)
        threading.Thread(target=client.run, daemon=True).start()
        try:
            for line in sys.stdin:
                if not client._handle_input(line.rstrip("\n")):
                    break
        except (KeyboardInterrupt, OSError):
            pass
    return 0