"""Client for the Tarantool binary protocol over blocking sockets and asyncio."""

__version__ = "0.1.0"

__all__ = ["codes", "actions", "wire", "sync_client", "codec", "async_client"]