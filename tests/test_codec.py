import base64
import hashlib
import struct

import msgpack
import pytest

from tntwire.actions import Insert, Select
from tntwire.codes import IteratorType
from tntwire.codec import Handshake, Normal, TarantoolCodec
from tntwire.wire import build_request

SALT = "WPE4wY2+RTBuFvElfHawAheh37sa58XKR/ZEOvgRsa8="
GREETING = b"Tarantool test server".ljust(63) + b"\n" + SALT.encode().ljust(63) + b"\n"
PASSWORD = "password"


def frame(sync, body=None, code=0):
    payload = msgpack.packb({0: code, 1: sync, 5: 1})
    if body is not None:
        payload += msgpack.packb(body, use_bin_type=True)
    return b"\xce" + struct.pack(">I", len(payload)) + payload


def scramble_matches(received, password):
    hash1 = hashlib.sha1(password.encode()).digest()
    hash2 = hashlib.sha1(hash1).digest()
    step3 = hashlib.sha1(base64.b64decode(SALT)[:20] + hash2).digest()
    candidate = bytes(a ^ b for a, b in zip(received, step3))
    return hashlib.sha1(candidate).digest() == hash2


def ready_codec():
    return TarantoolCodec(password=PASSWORD, handshake_received=True, auth_received=True)


def test_partial_greeting_waits():
    codec = TarantoolCodec(password=PASSWORD)
    buffer = bytearray(GREETING[:100])
    assert codec.decode(buffer) is None
    assert len(buffer) == 100
    assert codec.handshake_received is False


def test_greeting_yields_handshake_with_valid_scramble():
    codec = TarantoolCodec(password=PASSWORD)
    buffer = bytearray(GREETING)
    request_id, response = codec.decode(buffer)
    assert request_id == 0
    assert isinstance(response, Handshake)
    assert len(response.scramble) == 20
    assert scramble_matches(response.scramble, PASSWORD)
    assert buffer == bytearray()
    assert codec.handshake_received is True


def test_auth_success_is_consumed_silently():
    codec = TarantoolCodec(password=PASSWORD, handshake_received=True)
    buffer = bytearray(frame(0))
    assert codec.decode(buffer) is None
    assert codec.auth_received is True
    assert codec.auth_error is None
    assert buffer == bytearray()


def test_auth_failure_is_recorded():
    codec = TarantoolCodec(password=PASSWORD, handshake_received=True)
    buffer = bytearray(frame(0, {0x31: "User not found"}, 0x8000 | 45))
    assert codec.decode(buffer) is None
    assert codec.auth_received is True
    assert codec.auth_error == "User not found"


def test_greeting_and_auth_reply_in_one_buffer():
    codec = TarantoolCodec(password=PASSWORD)
    buffer = bytearray(GREETING + frame(0) + frame(1, {0x30: [[7]]}))
    assert isinstance(codec.decode(buffer)[1], Handshake)
    assert codec.decode(buffer) is None
    assert codec.decode(buffer) == (1, Normal(data=[[7]]))


def test_normal_response_carries_sync_and_data():
    buffer = bytearray(frame(5, {0x30: [[1, "a"]]}))
    assert ready_codec().decode(buffer) == (5, Normal(data=[[1, "a"]]))


def test_error_response_carries_message():
    buffer = bytearray(frame(3, {0x31: "Duplicate key exists"}, 0x8003))
    assert ready_codec().decode(buffer) == (3, Normal(error="Duplicate key exists"))


def test_response_without_body_is_an_error():
    buffer = bytearray(frame(4))
    assert ready_codec().decode(buffer) == (4, Normal(error="Body is empty."))


def test_partial_frame_waits_for_rest():
    codec = ready_codec()
    whole = frame(9, {0x30: [[1]]})
    buffer = bytearray(whole[:8])
    assert codec.decode(buffer) is None
    assert bytes(buffer) == whole[:8]
    buffer.extend(whole[8:])
    assert codec.decode(buffer) == (9, Normal(data=[[1]]))
    assert buffer == bytearray()


def test_short_prefix_waits():
    codec = ready_codec()
    buffer = bytearray(b"\xce\x00")
    assert codec.decode(buffer) is None
    assert buffer == bytearray(b"\xce\x00")


def test_frames_decode_in_order():
    codec = ready_codec()
    buffer = bytearray(frame(1, {0x30: [[1]]}) + frame(2, {0x30: [[2]]}))
    assert codec.decode(buffer) == (1, Normal(data=[[1]]))
    assert codec.decode(buffer) == (2, Normal(data=[[2]]))
    assert codec.decode(buffer) is None


@pytest.mark.parametrize(
    "action",
    [
        Insert(space=512, keys=[1]),
        Select(space=512, index=0, limit=10, offset=0, iterator=IteratorType.ALL),
    ],
)
def test_encode_frames_action_with_request_id(action):
    encoded = ready_codec().encode(11, action)
    assert encoded == build_request(action, 11)
    assert encoded[0] == 0xCE
    assert struct.unpack(">I", encoded[1:5])[0] == len(encoded) - 5
    head = msgpack.unpackb(encoded[5:], strict_map_key=False) if False else None
    unpacker = msgpack.Unpacker(strict_map_key=False)
    unpacker.feed(encoded[5:])
    head = unpacker.unpack()
    assert head[1] == 11
    assert head[0] == action.encode()[0]