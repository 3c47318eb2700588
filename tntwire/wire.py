"""Framing, packing and unpacking of requests and responses."""

from __future__ import annotations

import base64
import hashlib
import struct
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, BinaryIO

import msgpack

from .codes import Code, GreetingPacketParameters

if TYPE_CHECKING:
    from .actions import Action

_LENGTH_SIZES = {0xCC: 1, 0xCD: 2, 0xCE: 4}
_SALT_START = 64
_SALT_END = _SALT_START + GreetingPacketParameters.SALT


class TarantoolError(Exception):
    """Raised for error responses and malformed data from the server."""


@dataclass(frozen=True)
class Header:
    code: int
    sync: int
    schema_id: int


@dataclass(frozen=True)
class Response:
    header: Header
    body: bytes | None


@dataclass(frozen=True)
class GreetingPacket:
    greeting: str
    salt: str

    @classmethod
    def parse(cls, data: bytes) -> GreetingPacket:
        """Parse the fixed-size greeting the server sends on connect."""
        if len(data) != GreetingPacketParameters.SIZE:
            raise TarantoolError(
                f"greeting must be {int(GreetingPacketParameters.SIZE)} bytes, got {len(data)}"
            )
        try:
            greeting = bytes(data[:_SALT_START]).decode("utf-8")
            salt = bytes(data[_SALT_START:_SALT_END]).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise TarantoolError("greeting is not valid UTF-8") from exc
        return cls(greeting=greeting, salt=salt)


def serialize(value: Any) -> bytes:
    """Pack a value as MessagePack."""
    return msgpack.packb(value, use_bin_type=True)


def header(command: int, request_id: int) -> bytes:
    """Pack a request header carrying the command code and request id."""
    return serialize({int(Code.REQUEST_TYPE): int(command) & 0xFF, int(Code.SYNC): request_id})


def build_request(action: Action, request_id: int) -> bytes:
    """Frame an action as a length-prefixed request."""
    command, body = action.encode()
    head = header(command, request_id)
    length = len(head) + len(body)
    return b"\xce" + struct.pack(">I", length) + head + body


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining:
        chunk = stream.read(remaining)
        if not chunk:
            raise TarantoolError(
                f"connection closed after {size - remaining} of {size} bytes"
            )
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_length(stream: BinaryIO) -> int:
    """Read the MessagePack-encoded length that precedes each packet."""
    marker = _read_exact(stream, 1)[0]
    if marker <= 0x7F:
        return marker
    size = _LENGTH_SIZES.get(marker)
    if size is None:
        raise TarantoolError(f"invalid length marker 0x{marker:02X}")
    return int.from_bytes(_read_exact(stream, size), "big")


def read_payload(length: int, stream: BinaryIO) -> bytes:
    """Read exactly ``length`` bytes of packet payload."""
    return _read_exact(stream, length)


def parse_response(payload: bytes) -> Response:
    """Split a packet payload into its header and raw body."""
    unpacker = msgpack.Unpacker(raw=False, strict_map_key=False)
    unpacker.feed(payload)
    try:
        fields = unpacker.unpack()
    except (msgpack.UnpackException, ValueError) as exc:
        raise TarantoolError("malformed response header") from exc
    if not isinstance(fields, dict):
        raise TarantoolError("response header is not a map")
    code = fields.get(int(Code.REQUEST_TYPE))
    sync = fields.get(int(Code.SYNC), 0)
    schema_id = fields.get(int(Code.SCHEMA_ID), 0)
    if not all(isinstance(v, int) for v in (code, sync, schema_id)):
        raise TarantoolError("response header fields are not numbers")
    rest = payload[unpacker.tell():]
    body = bytes(rest) if len(rest) > 1 else None
    return Response(header=Header(code=code, sync=sync, schema_id=schema_id), body=body)


def get_response(stream: BinaryIO) -> Response:
    """Read one framed response from a stream."""
    length = read_length(stream)
    return parse_response(read_payload(length, stream))


def process_response(response: Response) -> Any:
    """Return the data of a response, raising TarantoolError for errors."""
    if response.body is None:
        raise TarantoolError("Body is empty.")
    try:
        data = msgpack.unpackb(response.body, raw=False, strict_map_key=False)
    except (msgpack.UnpackException, ValueError) as exc:
        raise TarantoolError("Read data error.") from exc
    if not isinstance(data, dict) or not data:
        raise TarantoolError("Read data error.")
    code, content = next(iter(data.items()))
    if not isinstance(code, int) or isinstance(code, bool):
        raise TarantoolError("Operation result code isn't a number.")
    if code == Code.DATA:
        return content
    if isinstance(content, str):
        raise TarantoolError(content)
    raise TarantoolError("Error content isn't a string.")


def scramble(salt: str | bytes, password: str) -> bytes:
    """Compute the chap-sha1 scramble from the base64 salt and a password."""
    decoded_salt = base64.b64decode(salt)
    step_1 = hashlib.sha1(password.encode("utf-8")).digest()
    step_2 = hashlib.sha1(step_1).digest()
    step_3 = hashlib.sha1(decoded_salt[:20] + step_2).digest()
    return bytes(a ^ b for a, b in zip(step_1, step_3))