# superchat

A small chat system made of two parts:

- a TCP server (`superchat.server`) that keeps user accounts in a SQLite
  file and relays messages between logged-in users, encrypted with
  AES-GCM;
- a line-based terminal client (`superchat.client`) that talks to the
  server, shows incoming messages and keeps a plain-text history of each
  conversation on disk.

## Installation

```
pip install .
```

## Running the server

```
superchat-server [--db users.sqlite] [--host HOST] [--port 9000]
```

By default the server listens on port 9000 on all interfaces and stores
accounts in `users.sqlite` in the current directory. It runs until
interrupted.

## Running the client

```
superchat-client [--host localhost] [--port 9000] [--history-dir history]
```

The client connects to the server, prints a banner and a list of commands,
and then reads lines from standard input:

| Input | Effect |
|-------|--------|
| `/login <userID> <password>` | log in with the numeric id given at registration |
| `/register <username> <email> <YYYY-MM-DD> <full name> <password>` | create an account |
| `/partner <username>` | choose who to chat with and print the stored history with them |
| `/history` | print the stored history with the current partner |
| `/quit` or `/q` | leave the client |

Any other line is sent to the current partner. Server replies are printed
as they arrive: `Login successful!`, `Sent!`, `REGISTERED userID=<n>` and
`ERROR: …` lines. Incoming chat messages are decrypted, printed, and
appended to `<history-dir>/<partner>.txt` for the partner currently
selected.

## Protocol

Each command is one line of text; the command word is not case-sensitive.
On connect the server sends a short welcome and the list of commands.

| Command | Meaning |
|---------|---------|
| `REGISTER username email dob fullname password` | create an account; the reply is `REGISTERED userID=<n>` |
| `LOGIN userID password` | log in; the reply is `LOGIN OK` |
| `SEND username message…` | deliver a message to a user; the reply is `SENT` |
| `QUIT` | close the session; the reply is `BYE` |

Errors come back as lines that start with `ERROR:` (for example
`ERROR: please LOGIN first`, `ERROR: user not found`,
`ERROR: invalid password`); malformed commands get a `Usage: …` line and
unknown ones get `Unknown command`.

A message sent with `SEND` is prefixed with the sender's username as
`[sender] text`, encrypted, and pushed to the recipient as
`CHAT:<base64 ciphertext>` if the recipient is logged in at that moment.
The sender receives `SENT` either way; the server does not keep messages
for users who are offline.

## Encryption

`superchat.encryption.encrypt` seals text or bytes with AES-GCM under a
random 12-byte nonce and returns base64 of nonce, ciphertext and tag;
`decrypt` reverses it and raises `DecryptionError` for bad base64, data
that is too short, or a failed authentication check.

A built-in demonstration key is used unless the `SUPERCHAT_KEY`
environment variable is set; its value must be 16, 24 or 32 bytes long.
Server and clients must use the same key.

## Library use

```python
from superchat.encryption import encrypt, decrypt
from superchat.storage import Database, StorageError

token = encrypt(b"hello")
assert decrypt(token) == "hello"

password = "password"
with Database("users.sqlite") as db:
    user_id = db.register_user("alice", "alice@example.com", "1990-01-01", "Alice", password)
    db.authenticate(user_id, password)          # raises StorageError on mismatch
    assert db.lookup_by_username("alice") == user_id
    assert db.lookup_username_by_id(user_id) == "alice"
```

Passwords are stored as bcrypt hashes; passwords longer than 72 bytes are
rejected with `StorageError`.

`superchat.api.ChatAPI` keeps encrypted messages in memory and offers two
handlers that take a request method (and body) and return an
`HttpResponse` with `status`, `body` and `headers`:

```python
from superchat.api import ChatAPI

api = ChatAPI()
api.send_message_handler("POST", b'{"content": "hi"}')   # status 200
resp = api.get_messages_handler("GET")
assert resp.body == b'["hi"]'
```

## What is not included

- `ChatAPI` is not served over HTTP by any command in this package; the
  handlers have to be mounted in a web framework of your choice.
- The client is a plain line-based terminal program, not a full-screen
  interface.
- Messages are not stored on the server, and there is no delivery to users
  who are offline.

## Running the tests

```
pip install .[test]
pytest
```