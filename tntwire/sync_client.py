"""Blocking client that talks to the server over a single TCP connection."""

from __future__ import annotations

import socket
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, BinaryIO

from .actions import Action, Auth, Select
from .codes import (
    TARANTOOL_INDEX_ID,
    TARANTOOL_INDEX_ID_KEY_NUMBER,
    TARANTOOL_SPACE_ID,
    TARANTOOL_SPACE_ID_KEY_NUMBER,
    GreetingPacketParameters,
    IteratorType,
)
from .wire import (
    GreetingPacket,
    TarantoolError,
    build_request,
    get_response,
    process_response,
    read_payload,
    scramble,
)


@dataclass
class State:
    """Connection parameters, the server greeting and the last request id."""

    address: str
    user: str
    password: str
    greeting_packet: GreetingPacket
    request_id: int = 0

    def next_id(self) -> int:
        """Advance and return the request id."""
        self.request_id += 1
        return self.request_id


class ToMsgPack(ABC):
    """An object that can be stored as a tuple."""

    @abstractmethod
    def to_msgpack(self) -> list[Any]:
        """Return the tuple fields as packable values."""


def _split_address(address: str) -> tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"invalid address {address!r}, expected host:port")
    return host.strip("[]"), int(port)


def _cell(data: Any, row: int, column: int) -> Any:
    try:
        return data[row][column]
    except (IndexError, KeyError, TypeError):
        return None


def _unsigned(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return None


class SyncClient:
    """An authenticated connection that sends one request at a time."""

    def __init__(self, state: State, connection: socket.socket, reader: BinaryIO):
        self.state = state
        self._connection = connection
        self._reader = reader

    @classmethod
    def auth(cls, address: str, user: str, password: str) -> SyncClient:
        """Connect to ``host:port`` and authenticate with chap-sha1."""
        connection = socket.create_connection(_split_address(address))
        reader = connection.makefile("rb")
        try:
            greeting = GreetingPacket.parse(
                read_payload(GreetingPacketParameters.SIZE, reader)
            )
            state = State(
                address=address,
                user=user,
                password=password,
                greeting_packet=greeting,
            )
            request = Auth(username=user, scramble=scramble(greeting.salt, password))
            connection.sendall(build_request(request, 0))
            response = get_response(reader)
            if response.body is not None:
                process_response(response)
                raise TarantoolError("unexpected data in authentication response")
        except BaseException:
            reader.close()
            connection.close()
            raise
        return cls(state, connection, reader)

    def request(self, action: Action) -> Any:
        """Send an action and return the data of its response."""
        self._connection.sendall(build_request(action, self.state.next_id()))
        return process_response(get_response(self._reader))

    def fetch_space_id(self, space_name: str) -> int:
        """Look up the numeric id of a space by its name."""
        data = self.request(
            Select(
                space=TARANTOOL_SPACE_ID,
                index=TARANTOOL_SPACE_ID_KEY_NUMBER,
                limit=1,
                offset=0,
                iterator=IteratorType.EQ,
                keys=[space_name],
            )
        )
        space_id = _unsigned(_cell(data, 0, 0))
        if space_id is None:
            raise TarantoolError("Space not found")
        return space_id

    def fetch_index_id(self, space_id: int, index_name: str) -> int:
        """Look up the numeric id of an index of a space by its name."""
        data = self.request(
            Select(
                space=TARANTOOL_INDEX_ID,
                index=TARANTOOL_INDEX_ID_KEY_NUMBER,
                limit=1,
                offset=0,
                iterator=IteratorType.EQ,
                keys=[space_id, index_name],
            )
        )
        index_id = _unsigned(_cell(data, 0, 1))
        if index_id is None:
            raise TarantoolError("Index not found")
        return index_id

    def close(self) -> None:
        """Close the connection."""
        self._reader.close()
        self._connection.close()

    def __enter__(self) -> SyncClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()