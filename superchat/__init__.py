"""Line-based chat server and terminal client with AES-GCM message delivery,
SQLite user accounts and an in-memory message API."""

__version__ = "0.1.0"
__all__ = ["api", "client", "encryption", "server", "storage"]