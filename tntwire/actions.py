"""Request bodies: each action encodes itself into a command code and a body."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from .codes import (
    Code,
    CommonOperation,
    IntegerOperation,
    IteratorType,
    RequestTypeKey,
    StringOperation,
    UpsertOperation,
)
from .wire import serialize


def _operator(code: int) -> str:
    """Return the one-character operator string for an operation code."""
    return chr(int(code))


class Action(ABC):
    """A request that can be sent to the server."""

    @abstractmethod
    def encode(self) -> tuple[RequestTypeKey, bytes]:
        """Return the command code and the packed request body."""


@dataclass
class Auth(Action):
    username: str
    scramble: bytes

    def encode(self) -> tuple[RequestTypeKey, bytes]:
        body = {
            int(Code.USER_NAME): self.username,
            int(Code.TUPLE): ["chap-sha1", bytes(self.scramble)],
        }
        return RequestTypeKey.AUTH, serialize(body)


@dataclass
class Call(Action):
    function_name: str
    keys: list[Any] = field(default_factory=list)

    def encode(self) -> tuple[RequestTypeKey, bytes]:
        body = {
            int(Code.FUNCTION_NAME): self.function_name,
            int(Code.TUPLE): list(self.keys),
        }
        return RequestTypeKey.CALL, serialize(body)


@dataclass
class Delete(Action):
    space: int
    index: int
    keys: list[Any] = field(default_factory=list)

    def encode(self) -> tuple[RequestTypeKey, bytes]:
        body = {
            int(Code.SPACE_ID): self.space,
            int(Code.INDEX_ID): self.index,
            int(Code.KEY): list(self.keys),
        }
        return RequestTypeKey.DELETE, serialize(body)


@dataclass
class Eval(Action):
    expression: str
    keys: list[Any] = field(default_factory=list)

    def encode(self) -> tuple[RequestTypeKey, bytes]:
        body = {
            int(Code.EXPR): self.expression,
            int(Code.TUPLE): list(self.keys),
        }
        return RequestTypeKey.EVAL, serialize(body)


@dataclass
class Insert(Action):
    space: int
    keys: list[Any] = field(default_factory=list)

    def encode(self) -> tuple[RequestTypeKey, bytes]:
        body = {int(Code.SPACE_ID): self.space, int(Code.TUPLE): list(self.keys)}
        return RequestTypeKey.INSERT, serialize(body)


@dataclass
class Replace(Action):
    space: int
    keys: list[Any] = field(default_factory=list)

    def encode(self) -> tuple[RequestTypeKey, bytes]:
        body = {int(Code.SPACE_ID): self.space, int(Code.TUPLE): list(self.keys)}
        return RequestTypeKey.REPLACE, serialize(body)


@dataclass
class Select(Action):
    space: int
    index: int
    limit: int
    offset: int
    iterator: IteratorType
    keys: list[Any] = field(default_factory=list)

    def encode(self) -> tuple[RequestTypeKey, bytes]:
        body = {
            int(Code.SPACE_ID): self.space,
            int(Code.INDEX_ID): self.index,
            int(Code.LIMIT): self.limit,
            int(Code.OFFSET): self.offset,
            int(Code.ITERATOR): int(self.iterator) & 0xFF,
            int(Code.KEY): list(self.keys),
        }
        return RequestTypeKey.SELECT, serialize(body)


@dataclass
class UpdateCommon(Action):
    space: int
    index: int
    operation_type: CommonOperation
    field_number: int
    argument: Any
    keys: list[Any] = field(default_factory=list)

    def encode(self) -> tuple[RequestTypeKey, bytes]:
        operation = [_operator(self.operation_type), self.field_number, self.argument]
        body = {
            int(Code.SPACE_ID): self.space,
            int(Code.INDEX_ID): self.index,
            int(Code.KEY): list(self.keys),
            int(Code.TUPLE): [operation],
        }
        return RequestTypeKey.UPDATE, serialize(body)


@dataclass
class UpdateInteger(Action):
    space: int
    index: int
    operation_type: IntegerOperation
    field_number: int
    argument: int
    keys: list[Any] = field(default_factory=list)

    def encode(self) -> tuple[RequestTypeKey, bytes]:
        operation = [_operator(self.operation_type), self.field_number, self.argument]
        body = {
            int(Code.SPACE_ID): self.space,
            int(Code.INDEX_ID): self.index,
            int(Code.KEY): list(self.keys),
            int(Code.TUPLE): [operation],
        }
        return RequestTypeKey.UPDATE, serialize(body)


@dataclass
class UpdateString(Action):
    space: int
    index: int
    field_number: int
    position: int
    offset: int
    argument: str
    keys: list[Any] = field(default_factory=list)

    def encode(self) -> tuple[RequestTypeKey, bytes]:
        operation = [
            _operator(StringOperation.SPLICE),
            self.field_number,
            self.position,
            self.offset,
            self.argument,
        ]
        body = {
            int(Code.SPACE_ID): self.space,
            int(Code.INDEX_ID): self.index,
            int(Code.KEY): list(self.keys),
            int(Code.TUPLE): [operation],
        }
        return RequestTypeKey.UPDATE, serialize(body)


@dataclass
class Upsert(Action):
    space: int
    keys: list[Any]
    operation_type: UpsertOperation
    field_number: int
    argument: int

    def encode(self) -> tuple[RequestTypeKey, bytes]:
        operation = [_operator(self.operation_type), self.field_number, self.argument]
        body = {
            int(Code.SPACE_ID): self.space,
            int(Code.TUPLE): list(self.keys),
            int(Code.OPS): [operation],
        }
        return RequestTypeKey.UPSERT, serialize(body)