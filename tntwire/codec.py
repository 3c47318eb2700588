"""Incremental decoder and encoder for a multiplexed connection."""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Any

from .actions import Action
from .codes import GreetingPacketParameters
from .wire import (
    GreetingPacket,
    Response,
    TarantoolError,
    build_request,
    parse_response,
    process_response,
    read_length,
    scramble,
)

_MAX_PREFIX = 5


@dataclass(frozen=True)
class Handshake:
    """The scramble computed from the server greeting."""

    scramble: bytes


@dataclass(frozen=True)
class Normal:
    """The outcome of a request: its data, or the server's error message."""

    data: Any = None
    error: str | None = None


def _outcome(response: Response) -> tuple[Any, str | None]:
    try:
        return process_response(response), None
    except TarantoolError as exc:
        return None, str(exc)


def _take_frame(buffer: bytearray) -> bytes | None:
    """Remove one complete packet from the buffer and return its payload."""
    if not buffer:
        return None
    stream = io.BytesIO(bytes(buffer[:_MAX_PREFIX]))
    try:
        length = read_length(stream)
    except TarantoolError:
        if len(buffer) < _MAX_PREFIX:
            return None
        raise
    prefix = stream.tell()
    if len(buffer) < prefix + length:
        return None
    payload = bytes(buffer[prefix : prefix + length])
    del buffer[: prefix + length]
    return payload


@dataclass
class TarantoolCodec:
    """Turns incoming bytes into responses and actions into framed requests."""

    password: str
    handshake_received: bool = False
    auth_received: bool = False
    auth_error: str | None = None

    def decode(self, buffer: bytearray) -> tuple[int, Handshake | Normal] | None:
        """Consume one message from ``buffer``; return None if nothing is ready.

        The greeting yields request id 0 with a Handshake. The reply to the
        authentication request is consumed without being returned; its error,
        if any, is kept in ``auth_error``.
        """
        if not self.handshake_received:
            size = int(GreetingPacketParameters.SIZE)
            if len(buffer) < size:
                return None
            greeting = GreetingPacket.parse(bytes(buffer[:size]))
            del buffer[:size]
            self.handshake_received = True
            return 0, Handshake(scramble(greeting.salt, self.password))

        payload = _take_frame(buffer)
        if payload is None:
            return None
        response = parse_response(payload)

        if not self.auth_received:
            self.auth_received = True
            self.auth_error = None if response.body is None else _outcome(response)[1]
            return None

        data, error = _outcome(response)
        return response.header.sync, Normal(data=data, error=error)

    def encode(self, request_id: int, action: Action) -> bytes:
        """Frame an action as a request with the given id."""
        return build_request(action, request_id)