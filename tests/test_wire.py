import io

import msgpack
import pytest

from tntwire.actions import Insert
from tntwire.codes import Code, RequestTypeKey
from tntwire.wire import (
    GreetingPacket,
    Header,
    Response,
    TarantoolError,
    build_request,
    get_response,
    header,
    parse_response,
    process_response,
    read_length,
    read_payload,
    scramble,
    serialize,
)

SALT = "WPE4wY2+RTBuFvElfHawAheh37sa58XKR/ZEOvgRsa8="
EXPECTED_SCRAMBLE = bytes(
    [0xAC, 0x3F, 0xAD, 0x90, 0x6F, 0xFE, 0x80, 0x28, 0x92, 0x79, 0xCE, 0xC3, 0xFC,
     0xDA, 0x0B, 0x86, 0xBD, 0x06, 0x2A, 0x69]
)


def _payload(sync, body):
    head = serialize({int(Code.REQUEST_TYPE): 0, int(Code.SYNC): sync, int(Code.SCHEMA_ID): 1})
    return head + serialize(body)


def _frame(payload):
    return serialize(len(payload)) + payload


def test_scramble():
    assert scramble(SALT, "123") == EXPECTED_SCRAMBLE


def test_read_length():
    assert read_length(io.BytesIO(bytes([0xCE, 0x00, 0x00, 0x00, 0x05]))) == 5
    assert read_length(io.BytesIO(bytes([0xCE, 0x0, 0x0, 0x0, 0x4B]))) == 75


def test_read_length_rejects_bad_marker():
    with pytest.raises(TarantoolError):
        read_length(io.BytesIO(b"\xa1x"))


def test_read_payload_truncated():
    with pytest.raises(TarantoolError):
        read_payload(10, io.BytesIO(b"abc"))


def test_header_round_trip():
    decoded = msgpack.unpackb(header(RequestTypeKey.SELECT, 42), strict_map_key=False)
    assert decoded == {Code.REQUEST_TYPE: RequestTypeKey.SELECT, Code.SYNC: 42}


def test_build_request_framing():
    action = Insert(space=512, keys=[9])
    request = build_request(action, 7)
    assert request[0] == 0xCE
    assert read_length(io.BytesIO(request)) == len(request) - 5
    unpacker = msgpack.Unpacker(raw=False, strict_map_key=False)
    unpacker.feed(request[5:])
    assert unpacker.unpack() == {Code.REQUEST_TYPE: RequestTypeKey.INSERT, Code.SYNC: 7}
    assert unpacker.unpack() == {Code.SPACE_ID: 512, Code.TUPLE: [9]}


def test_parse_response_header_and_body():
    body = {int(Code.DATA): [[1, "a"]]}
    response = parse_response(_payload(9, body))
    assert response.header == Header(code=0, sync=9, schema_id=1)
    assert response.body == serialize(body)
    assert process_response(response) == [[1, "a"]]


def test_parse_response_empty_body_is_none():
    response = parse_response(_payload(3, {}))
    assert response.body is None
    with pytest.raises(TarantoolError, match="Body is empty."):
        process_response(response)


def test_get_response_from_stream():
    stream = io.BytesIO(_frame(_payload(5, {int(Code.DATA): [10]})))
    response = get_response(stream)
    assert response.header.sync == 5
    assert process_response(response) == [10]


def test_process_response_error_message():
    response = Response(
        header=Header(code=0x8000, sync=1, schema_id=1),
        body=serialize({int(Code.ERROR): "Tuple not found"}),
    )
    with pytest.raises(TarantoolError, match="Tuple not found"):
        process_response(response)


def test_process_response_non_map_body():
    response = Response(header=Header(code=0, sync=1, schema_id=1), body=serialize([1, 2]))
    with pytest.raises(TarantoolError, match="Read data error."):
        process_response(response)


def test_parse_response_malformed_header():
    with pytest.raises(TarantoolError):
        parse_response(serialize([1, 2, 3]))


def test_greeting_packet_parse():
    greeting = b"Tarantool 1.7.3 (Binary)".ljust(63) + b"\n"
    salt_line = SALT.encode().ljust(63) + b"\n"
    packet = GreetingPacket.parse(greeting + salt_line)
    assert packet.greeting == greeting.decode()
    assert packet.salt == SALT
    assert scramble(packet.salt, "123") == EXPECTED_SCRAMBLE


def test_greeting_packet_wrong_size():
    with pytest.raises(TarantoolError):
        GreetingPacket.parse(b"short")