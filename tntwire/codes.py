"""Protocol constants: request keys, command codes and update operators."""

from enum import IntEnum


class Code(IntEnum):
    """Keys used in request and response maps."""

    REQUEST_TYPE = 0x00
    SYNC = 0x01
    # Replication keys (header)
    SERVER_ID = 0x02
    LSN = 0x03
    TIMESTAMP = 0x04
    SCHEMA_ID = 0x05
    # Request body keys
    SPACE_ID = 0x10
    INDEX_ID = 0x11
    LIMIT = 0x12
    OFFSET = 0x13
    ITERATOR = 0x14
    INDEX_BASE = 0x15
    KEY = 0x20
    TUPLE = 0x21
    FUNCTION_NAME = 0x22
    USER_NAME = 0x23
    # Replication keys (body)
    SERVER_UUID = 0x24
    CLUSTER_UUID = 0x25
    VCLOCK = 0x26
    EXPR = 0x27
    OPS = 0x28
    # Response keys
    DATA = 0x30
    ERROR = 0x31
    KEY_MAX = 0x32


class RequestTypeKey(IntEnum):
    """Command codes placed in the request header."""

    OK = 0x00
    SELECT = 0x01
    INSERT = 0x02
    REPLACE = 0x03
    UPDATE = 0x04
    DELETE = 0x05
    CALL = 0x06
    AUTH = 0x07
    EVAL = 0x08
    UPSERT = 0x09
    TYPE_STAT_MAX = 0x0B
    PING = 0x40
    JOIN = 0x41
    SUBSCRIBE = 0x42
    TYPE_ADMIN_MAX = 0x43
    TYPE_ERROR = 0x8000


class IteratorType(IntEnum):
    """Index iteration modes for select requests."""

    EQ = 0
    REQ = 1
    ALL = 2
    LT = 3
    LE = 4
    GE = 5
    GT = 6
    BITS_ALL_SET = 7
    BITS_ANY_SET = 8
    BITS_ALL_NOT_SET = 9


class CommonOperation(IntEnum):
    """Field operators usable on any field type."""

    DELETE = 0x23
    INSERT = 0x21
    ASSIGN = 0x3D


class IntegerOperation(IntEnum):
    """Arithmetic and bitwise field operators."""

    ADDITION = 0x2B
    SUBTRACTION = 0x2D
    AND = 0x26
    XOR = 0x5E
    OR = 0x7C


class StringOperation(IntEnum):
    """String field operators."""

    SPLICE = 0x3A


class UpsertOperation(IntEnum):
    """Operators allowed in upsert requests."""

    ADD = 0x2B
    SUBTRACT = 0x2D
    ASSIGN = 0x3D
    INSERT = 0x21
    DELETE = 0x23


class GreetingPacketParameters(IntEnum):
    """Sizes of the parts of the server greeting."""

    GREETING = 63
    SALT = 44
    NULL = 19
    SIZE = 128


CHAP_SHA_1 = b"\xa9chap-sha1"
FIX_STR_PREFIX = 0xA1
TARANTOOL_SPACE_ID = 280
TARANTOOL_SPACE_ID_KEY_NUMBER = 2
TARANTOOL_INDEX_ID = 288
TARANTOOL_INDEX_ID_KEY_NUMBER = 2