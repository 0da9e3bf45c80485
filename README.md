# handykit

A small toolkit for network programs on POSIX systems.

## Modules

- `handykit.util`: `cformat` (printf-style formatting; C length modifiers such
  as `%ld` are accepted, output is capped at 29999 characters), `time_micro`,
  `time_milli`, `steady_micro`, `steady_milli`, `readable_time`
  (`YYYY-MM-DD HH:MM:SS` in local time), `atoi` (leading decimal integer, 0 if
  none), `atoi2` (whole-text decimal integer, -1 otherwise), `add_fd_flag`, and
  `ExitCaller`, a context manager that calls a function when the block is left.
- `handykit.status`: `Status`, a frozen code/message pair (code 0 means
  success), with `from_system`, `from_format`, `io_error`, `ok()` and `errstr`.
- `handykit.slice`: `Slice`, a movable view over bytes with `eat`, `eat_word`,
  `eat_line`, `sub`, `trim_space`, `split`, `starts_with`, `end_with`,
  `compare` and ordering.
- `handykit.port`: `htobe` (native to big-endian for 2, 4 or 8 byte integers),
  `get_host_by_name` (an `IPv4Address` or `None`) and `gettid`.
- `handykit.logger`: `Logger`, a levelled logger (`LogLevel` FATAL to ALL) that
  writes one line per record to stdout or to a file, and renames that file with
  a `.YYYYMMDDHHMM` suffix when a rotation interval (one day by default) has
  passed. The helpers `trace`, `debug`, `info`, `warn`, `error`, `fatal`,
  `fatalif`, `exitif`, `setloglevel` and `setlogfile` use the shared logger.
  A FATAL record raises `FatalError`; `exitif` raises `SystemExit(1)`.
- `handykit.net`: `hton`/`ntoh`, `set_non_block`, `set_reuse_addr`,
  `set_reuse_port`, `set_no_delay` (sockets or raw descriptors), `Ip4Addr`
  (an unresolvable host gives an address whose `is_ip_valid()` is false) and
  `Buffer`, a growable byte buffer appended at the end and consumed from the
  front.
- `handykit.threads`: `SafeQueue`, a blocking FIFO with optional capacity, and
  `ThreadPool`, which can be used as a context manager.
- `handykit.proto_msg`: `ProtoMsgCodec` for framed protobuf messages and
  `ProtoMsgDispatcher`, which calls the callback registered for a message's
  type. `decode` raises `ProtoDecodeError` on a bad frame; `handle` raises
  `KeyError` for an unregistered type.
- `handykit.raw_http`: `RawHttpServer` and `make_http_response`.
- `handykit.raw_echo`: `RawEchoServer`.

## Installation

```
pip install handykit
```

## Examples

```python
import threading

from handykit.net import Buffer, Ip4Addr
from handykit.threads import ThreadPool

addr = Ip4Addr("127.0.0.1", 80)
print(str(addr))          # 127.0.0.1:80

buf = Buffer()
buf.append(b"hello world")
buf.consume(6)
print(bytes(buf))         # b'world'

done = threading.Event()
with ThreadPool(2) as pool:
    pool.add_task(done.set)
    done.wait()
```

Leaving the `with` block stops the pool; tasks still queued at that point are
not run, and their number is reported on stderr.

Each protobuf frame holds a 4-byte total length (native byte order, counting
itself), a 4-byte type-name length, the full type name, and then the
serialized message:

```python
from handykit.net import Buffer
from handykit.proto_msg import ProtoMsgCodec

buf = Buffer()
ProtoMsgCodec.encode(message, buf)
if ProtoMsgCodec.msg_complete(buf):
    decoded = ProtoMsgCodec.decode(buf)
```

## Commands

```
handykit-http [--port PORT] [--et] [quiet ...]
handykit-echo [--port PORT] [--quiet]
```

`handykit-http` listens on port 80 by default and answers every request (a
read ending in a blank line) with a fixed 1 MiB page over keep-alive
connections. `--et` watches every connection for writability from the start;
any extra positional argument turns off the per-event output.

`handykit-echo` listens on port 2099 by default and writes back whatever a
client sends.

Both stop on Ctrl-C.

## What it does not do

There is no general event loop, timer, TCP connection or TCP/UDP server class,
and no HTTP request parsing: the two commands are fixed demonstrations built
directly on `selectors`, and `ProtoMsgDispatcher.handle` takes whatever
connection object the caller passes.

## Running the tests

```
pip install handykit[test]
pytest
```