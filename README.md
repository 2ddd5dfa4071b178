# utilkit

A collection of small helpers for programs that live close to the operating
system: bounded containers, string and hashing helpers, a levelled logger,
file-descriptor and socket utilities, a thread-backed work queue, a
broadcast bus over a Unix socket, serial ports, byte channels and a compact
command-line parser.

It needs Python 3.10 or later and nothing outside the standard library.
Several modules (`fdutils`, `event`, `serial`, `channel`, `sockutils`,
`bus_server`, `procutils`) use POSIX interfaces such as `fcntl`, `termios`,
named pipes, Unix sockets and `/proc`, and are meant for Linux.

## What is inside

| Module | What it gives you |
| --- | --- |
| `utilkit.strutils` | hex encoding (`atohstr`, `hstrtoa`), `safe_atoi`, tokenising (`str_sep`, `str_sep_count`, `split_string`), hashes (`hash32_djb2`, `hash32_fnv`, `poly_hash`), `trim_suffix`, `remove_all`, `strcntchr`, `strisempty`, `to_upper`, `to_lower` |
| `utilkit.utils` | `round_up_pow2`, `randint`, `hexdump` / `format_hexdump`, `usec_now`, `usec_since`, `millis_now`, `millis_since` |
| `utilkit.circbuf` | `CircularBuffer`, a fixed-size FIFO ring, with `BufferFullError` and `BufferEmptyError` |
| `utilkit.disjoint_set` | `DisjointSet`, union-find with path compression and union by rank (fewer than 128 nodes) |
| `utilkit.hashmap` | `HashMap`, a chained hash table keyed by strings |
| `utilkit.linked_list` | `LinkedList` and `SinglyLinkedList` over caller-owned `Node` / `SNode` objects, plus `check_links` |
| `utilkit.queue_` | `Queue`, a FIFO of `Node`s built on the doubly linked list |
| `utilkit.stack` | `Stack`, a LIFO of `SNode`s built on the singly linked list |
| `utilkit.filo` | `Filo`, a bounded last-in first-out store, with `FiloFullError` and `FiloEmptyError` |
| `utilkit.strlib` | `BoundedString`, a string with a fixed capacity and `"c"`, `"cf"`, `"a"`, `"af"` copy modes |
| `utilkit.slab` | `Slab`, a fixed pool of equally sized `SlabBlock`s |
| `utilkit.logger` | `Logger` with syslog-style `LogLevel`s, a line prefix and optional colours (`LoggerFlag`) |
| `utilkit.file` | `read_all`, `path_join`, `path_extract`, `is_regular_file`, `get_working_directory` |
| `utilkit.fdutils` | `read_loop`, `write_loop`, `flush_fd`, `fcntl_setfl` for non-blocking descriptors |
| `utilkit.event` | `Event`, a pipe-backed signal usable across threads |
| `utilkit.procutils` | `read_pid`, `write_pid`, `o_redirect`, `parse_proc_cmdline`, `pid_of`, `any_pid_of` |
| `utilkit.sockutils` | `unix_socket_listen`, `unix_socket_connect` |
| `utilkit.workqueue` | `WorkQueue` running `Work` items on a pool of threads; `WorkStatus` |
| `utilkit.bus_server` | `BusServer`, which repeats every message a client sends to all other clients |
| `utilkit.serial` | `Serial` port access with `"8N1"`-style modes (`parse_mode`, `SerialMode`, `baud_constant`) |
| `utilkit.channel` | `ChannelManager` opening `UartChannel`, `FifoChannel` and `UnixBusChannel` by device name; `guess_channel_type` |
| `utilkit.arg_parser` | `ArgParser` with `Option`s (`OptionType`) and sub-`Command`s |

## A few examples

Ring buffer:

```python
from utilkit.circbuf import CircularBuffer, BufferEmptyError

ring = CircularBuffer(10)
for value in range(3):
    ring.push(value)

assert ring.peek() == 0
assert ring.pop() == 0
assert len(ring) == 2
assert ring.free_space() == 8

ring.flush()
try:
    ring.pop()
except BufferEmptyError:
    pass
```

Union-find:

```python
from utilkit.disjoint_set import DisjointSet

groups = DisjointSet(6)
groups.union(0, 1)
groups.union(2, 3)
assert groups.find(0) == groups.find(1)
assert groups.num_roots() == 4
```

String-keyed hash map:

```python
from utilkit.hashmap import HashMap

table = HashMap()
table.insert("alpha", 1)
table.insert("beta", 2)

assert table.get("alpha") == 1
assert "beta" in table
assert len(table) == 2

for key, value in table:
    print(key, value)

table.delete("alpha")
```

`get` and `delete` raise `KeyError` for a missing key.

String helpers:

```python
from utilkit.strutils import atohstr, hstrtoa, str_sep, str_sep_count

assert atohstr(b"\xca\xfe\xba\xbe") == "CAFEBABE"
assert hstrtoa("cafebabe") == b"\xca\xfe\xba\xbe"
assert str_sep_count("   1 2,  3,,,,4,5   ", ", ") == 5

token, rest = str_sep("1,2,3", ",")
assert (token, rest) == ("1", "2,3")
```

Bounded stack:

```python
from utilkit.filo import Filo, FiloFullError

stack = Filo(2)
stack.push("a")
stack.push("b")
try:
    stack.push("c")
except FiloFullError:
    pass
assert stack.pop() == "b"
```

Logging:

```python
import sys
from utilkit.logger import Logger, LogLevel

log = Logger("net", LogLevel.DEBUG, file=sys.stderr)
log.set_prefix("peer %d", 3)
log.log(LogLevel.INFO, "conn", "connected to %s", "localhost")
# net: conn: INFO : peer 3: connected to localhost
```

Lines are cut to 127 characters plus a newline; colours are written only
when the file is a terminal and `LoggerFlag.NO_COLORS` is not set.

Command-line parsing:

```python
from utilkit.arg_parser import ArgParser, Command, Option, OptionType

def run(args, data):
    return (data["verbose"], args)

parser = ArgParser(
    "tool",
    "does things",
    [
        Option("v", "verbose", OptionType.BOOL, dest="verbose", help="Talk more"),
        Command("run", run, help="Run something"),
    ],
)
assert parser.parse(["-v", "run", "x"], {"verbose": False}) == (True, ["x"])
```

Besides the given options, `-f/--fork`, `-q/--quite` and `-h/--help` are
always understood. Errors print the help text and raise `SystemExit`.

## Errors

Where an operation cannot be carried out — a full buffer, an empty stack,
an unknown channel type, a device that is already open — the functions
raise a specific exception (`BufferFullError`, `FiloEmptyError`,
`StringOverflowError`, `SlabError`, `ChannelAlreadyOpenError`,
`SerialError` and so on) rather than returning a status code.

## What it does not do

- `ChannelType.MSGQ` exists so that `guess_channel_type("msgq")` can name
  it, but message-queue channels cannot be opened: `ChannelManager.open`
  raises `UnknownChannelTypeError` for them.
- The package is a library only. It installs no command; `ArgParser` is for
  building your own.

## Running the tests

Install the `test` extra and run pytest from the project root.