"""Asynchronous client that multiplexes requests over one connection."""

from __future__ import annotations

import asyncio
import contextlib
import itertools

from .actions import Action, Auth
from .codec import Handshake, Normal, TarantoolCodec
from .wire import TarantoolError

_CHUNK = 65536


def _split_address(address: str) -> tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"invalid address {address!r}, expected host:port")
    return host.strip("[]"), int(port)


async def _fill(reader: asyncio.StreamReader, buffer: bytearray) -> None:
    chunk = await reader.read(_CHUNK)
    if not chunk:
        raise ConnectionError("connection closed by server")
    buffer.extend(chunk)


class AsyncClient:
    """An authenticated connection on which many requests may be in flight."""

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        codec: TarantoolCodec,
        buffer: bytearray,
    ):
        self._reader = reader
        self._writer = writer
        self._codec = codec
        self._buffer = buffer
        self._ids = itertools.count(1)
        self._pending: dict[int, asyncio.Future[Normal]] = {}
        self._error: BaseException | None = None
        self._task = asyncio.get_running_loop().create_task(self._read_loop())

    @classmethod
    async def auth(cls, address: str, user: str, password: str) -> AsyncClient:
        """Connect to ``host:port``, complete the handshake and authenticate."""
        host, port = _split_address(address)
        reader, writer = await asyncio.open_connection(host, port)
        codec = TarantoolCodec(password=password)
        buffer = bytearray()
        try:
            decoded = codec.decode(buffer)
            while decoded is None:
                await _fill(reader, buffer)
                decoded = codec.decode(buffer)
            request_id, handshake = decoded
            if not isinstance(handshake, Handshake):
                raise TarantoolError("initial message is not a greeting")
            writer.write(
                codec.encode(request_id, Auth(username=user, scramble=handshake.scramble))
            )
            await writer.drain()
            while not codec.auth_received:
                if codec.decode(buffer) is None and not codec.auth_received:
                    await _fill(reader, buffer)
            if codec.auth_error is not None:
                raise TarantoolError(codec.auth_error)
        except BaseException:
            writer.close()
            raise
        return cls(reader, writer, codec, buffer)

    async def _read_loop(self) -> None:
        try:
            while True:
                decoded = self._codec.decode(self._buffer)
                if decoded is None:
                    await _fill(self._reader, self._buffer)
                    continue
                request_id, response = decoded
                future = self._pending.pop(request_id, None)
                if future is not None and not future.done():
                    future.set_result(response)
        except asyncio.CancelledError:
            self._fail(ConnectionError("client closed"))
            raise
        except Exception as exc:
            self._fail(exc)

    def _fail(self, error: BaseException) -> None:
        self._error = error
        for future in self._pending.values():
            if not future.done():
                future.set_exception(error)
        self._pending.clear()

    async def call(self, action: Action) -> Normal:
        """Send an action and wait for its response."""
        if self._error is not None:
            raise ConnectionError("connection is no longer usable") from self._error
        request_id = next(self._ids)
        future: asyncio.Future[Normal] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            self._writer.write(self._codec.encode(request_id, action))
            await self._writer.drain()
            return await future
        finally:
            self._pending.pop(request_id, None)

    async def close(self) -> None:
        """Stop reading responses and close the connection."""
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._writer.close()
        with contextlib.suppress(ConnectionError, OSError):
            await self._writer.wait_closed()

    async def __aenter__(self) -> AsyncClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()