# tntwire

A small client for the Tarantool binary protocol (IPROTO). It builds
requests from plain Python objects, packs them with MessagePack and talks to
a Tarantool server either over a blocking socket or through asyncio.

## Installation

```
pip install tntwire
```

To run the test suite:

```
pip install "tntwire[test]"
pytest
```

## Requests

Each request is a dataclass in `tntwire.actions`. All of them derive from
`Action` and have an `encode()` method that returns the command code (a
`RequestTypeKey`) and the packed MessagePack body:

- `Select(space, index, limit, offset, iterator, keys=[])`
- `Insert(space, keys=[])`
- `Replace(space, keys=[])`
- `Delete(space, index, keys=[])`
- `Call(function_name, keys=[])`
- `Eval(expression, keys=[])`
- `UpdateCommon(space, index, operation_type, field_number, argument, keys=[])`
- `UpdateInteger(space, index, operation_type, field_number, argument, keys=[])`
- `UpdateString(space, index, field_number, position, offset, argument, keys=[])`,
  a splice of a string field
- `Upsert(space, keys, operation_type, field_number, argument)`
- `Auth(username, scramble)`, the chap-sha1 authentication request

The enumerations used in request fields and on the wire live in
`tntwire.codes`: `IteratorType`, `CommonOperation`, `IntegerOperation`,
`StringOperation`, `UpsertOperation`, `Code`, `RequestTypeKey` and
`GreetingPacketParameters`, together with the ids of the system spaces used
for name lookups.

## Blocking client

```python
from tntwire.sync_client import SyncClient
from tntwire.actions import Select, Insert, Eval
from tntwire.codes import IteratorType

password = "password"
with SyncClient.auth("127.0.0.1:3301", "test", password) as client:
    client.request(Insert(space=512, keys=[1, "hello"]))
    rows = client.request(
        Select(space=512, index=0, limit=10, offset=0,
               iterator=IteratorType.ALL, keys=[])
    )
    print(client.request(Eval(expression="return 5+5", keys=[])))

    space_id = client.fetch_space_id("Tester")
    index_id = client.fetch_index_id(space_id, "primary")
```

`SyncClient.auth` connects to `host:port`, reads the server greeting and
authenticates. `request` sends one action, waits for its response and returns
the response data. Errors reported by the server, a failed authentication and
malformed responses raise `tntwire.wire.TarantoolError`; `fetch_space_id` and
`fetch_index_id` raise it with "Space not found" or "Index not found" when the
name is unknown. `close()` closes the connection; the client is also a context
manager.

`tntwire.sync_client` also has `State` (connection parameters, the greeting and
the request id counter) and `ToMsgPack`, an abstract base for objects that turn
themselves into tuple fields with `to_msgpack()`.

## Asyncio client

```python
import asyncio
from tntwire.async_client import AsyncClient
from tntwire.actions import Insert

async def main():
    password = "password"
    async with await AsyncClient.auth("127.0.0.1:3301", "test", password) as client:
        results = await asyncio.gather(
            *(client.call(Insert(space=512, keys=[n])) for n in range(10))
        )
        for result in results:
            print(result.error or result.data)

asyncio.run(main())
```

Many requests may be in flight on one `AsyncClient` at once; a background task
reads responses and hands each one to its caller by the sync id in the response
header. `call` returns a `tntwire.codec.Normal` whose `data` holds the response
data, or whose `error` holds the server's message; it does not raise for server
errors. A failed authentication raises `TarantoolError` from `auth`, and once
the connection is lost, pending and later calls raise `ConnectionError`.

The framing state machine is `tntwire.codec.TarantoolCodec`: `decode(buffer)`
consumes one message from a `bytearray` (the greeting comes out as request id 0
with a `Handshake` carrying the scramble; the authentication reply is consumed
and its error kept in `auth_error`), and `encode(request_id, action)` frames a
request.

## Low-level helpers

`tntwire.wire` holds the framing functions on their own:

- `serialize`, `header` and `build_request` pack and frame requests
- `read_length`, `read_payload`, `parse_response` and `get_response` read and
  split framed responses into a `Header` and a raw body (`Response`)
- `process_response` returns the data of a response or raises `TarantoolError`
- `GreetingPacket.parse` splits the 128-byte server greeting
- `scramble` computes the chap-sha1 authentication scramble from the
  base64 greeting salt and a password

## What it does not do

tntwire has no command-line program, no connection pool and no automatic
reconnection. It sends only the requests listed above; there is no ping,
replication or SQL request, and space and index names are not cached.