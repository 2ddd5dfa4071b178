"""Command line parsing for programs built around options plus one sub-command."""

from __future__ import annotations

import enum
import getopt
import os
import re
import sys
import threading
from collections.abc import Callable, MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any

__all__ = ["OptionType", "Option", "Command", "ArgParser", "HELP_SPACING"]

HELP_SPACING = 25

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_BUILTINS = (
    ("f", "fork", "Fork to background"),
    ("q", "quite", "Prevent writing to tty"),
    ("h", "help", "Print this help message"),
)


class OptionType(enum.Enum):
    BOOL = 1
    INT = 2
    STR = 3
    BOOL_HANDLER = 4


@dataclass
class Option:
    """A command line option with a one-letter and a long name.

    BOOL, INT and STR options store into ``dest`` of the data object (an
    attribute, or a key when the data object is a mapping). A BOOL_HANDLER
    option calls ``handler()`` and then exits with status 0. ``validator``
    is called with the data object after the value is stored; a result other
    than 0 or None makes the program exit with status -1.
    """

    short_name: str
    long_name: str
    type: OptionType
    dest: str | None = None
    opt_name: str | None = None
    help: str = ""
    required: bool = False
    validator: Callable[[Any], Any] | None = None
    handler: Callable[[], Any] | None = None

    def __post_init__(self) -> None:
        if len(self.short_name) != 1 or not self.short_name.isalnum():
            raise ValueError(f"invalid short option name {self.short_name!r}")
        if self.type in (OptionType.BOOL, OptionType.INT, OptionType.STR):
            if not self.dest:
                raise ValueError(f"option --{self.long_name} needs a dest")
        elif self.handler is None:
            raise ValueError(f"option --{self.long_name} needs a handler")

    @property
    def takes_argument(self) -> bool:
        return self.type in (OptionType.INT, OptionType.STR)


@dataclass
class Command:
    """A sub-command; ``handler(args, data)`` receives the arguments after its name."""

    name: str
    handler: Callable[[list[str], Any], Any]
    help: str = ""


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _store(data: Any, dest: str, value: Any) -> None:
    if isinstance(data, MutableMapping):
        data[dest] = value
    else:
        setattr(data, dest, value)


def _silence_output() -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (AttributeError, OSError, ValueError):
            pass
    devnull = os.open(os.devnull, os.O_WRONLY)
    try:
        os.dup2(devnull, 1)
        os.dup2(devnull, 2)
    finally:
        os.close(devnull)


class ArgParser:
    """Parses options, then dispatches to the command named by the first argument.

    Besides the given options, ``-f/--fork`` (run the command in the
    background), ``-q/--quite`` (discard standard output and error) and
    ``-h/--help`` are always understood. Options and commands are checked in
    the order given.
    """

    def __init__(
        self,
        app_name: str,
        app_desc: str = "",
        options: Sequence[Option | Command] = (),
    ) -> None:
        self.app_name = app_name
        self.app_desc = app_desc
        self.entries: list[Option | Command] = list(options)
        self._by_short = {o.short_name: o for o in self.options}
        self._by_long = {o.long_name: o for o in self.options}

    @property
    def options(self) -> list[Option]:
        return [e for e in self.entries if isinstance(e, Option)]

    @property
    def commands(self) -> list[Command]:
        return [e for e in self.entries if isinstance(e, Command)]

    def format_help(self, full: bool = True) -> str:
        """Return the help text; ``full`` adds the name and description line."""
        lines = []
        if full and self.app_name:
            lines.append(f"{self.app_name} - {self.app_desc}")
        lines.append("")
        lines.append(
            f"Usage: {self.app_name} [OPTIONS...] <COMMAND> [CMD_ARGS[0] ...]"
        )
        lines.append("")
        lines.append("OPTIONS:")
        for option in self.options:
            if option.takes_argument:
                opt_str = f"{option.long_name} <{option.opt_name}>"
            else:
                opt_str = option.long_name
            lines.append(
                f"  -{option.short_name}, --{opt_str:<{HELP_SPACING}} {option.help}"
            )
        for short, long, text in _BUILTINS:
            lines.append(f"  -{short}, --{long:<{HELP_SPACING}} {text}")
        commands = self.commands
        if commands:
            lines.append("")
            lines.append("COMMANDS:")
            for command in commands:
                lines.append(f"  {command.name:<{HELP_SPACING}}       {command.help}")
        return "\n".join(lines) + "\n"

    def print_help(self, exit_code: int = 0) -> None:
        """Print the help text and exit with ``exit_code``."""
        sys.stdout.write(self.format_help(full=exit_code == 0))
        sys.stdout.flush()
        raise SystemExit(exit_code)

    def _fail(self, message: str) -> None:
        sys.stdout.write(f"Error: {message}\n\n")
        self.print_help(-1)

    def _getopt_specs(self) -> tuple[str, list[str]]:
        short = []
        longs = []
        for option in self.options:
            suffix = ":" if option.takes_argument else ""
            short.append(option.short_name + suffix)
            longs.append(option.long_name + ("=" if suffix else ""))
        short.append("hqf")
        longs.extend(["help", "quite", "fork"])
        return "".join(short), longs

    def _lookup(self, flag: str) -> Option | None:
        if flag.startswith("--"):
            return self._by_long.get(flag[2:])
        return self._by_short.get(flag[1:])

    def parse(self, argv: Sequence[str] | None = None, data: Any = None) -> Any:
        """Parse ``argv`` (without the program name) into ``data``.

        When commands are defined, the matching command's handler is run and
        its result returned; an unknown or missing command is an error. With
        ``-f``, the handler runs in a background thread, which is returned
        already started. When there are no commands, the remaining positional
        arguments are returned. Errors print the help text and exit with
        status -1.
        """
        args = list(sys.argv[1:] if argv is None else argv)
        shortopts, longopts = self._getopt_specs()
        try:
            parsed, rest = getopt.gnu_getopt(args, shortopts, longopts)
        except getopt.GetoptError as exc:
            sys.stdout.write(f"{exc}\n")
            self.print_help(-1)

        do_fork = False
        seen: set[str] = set()
        for flag, value in parsed:
            if flag in ("-h", "--help"):
                self.print_help(0)
            if flag in ("-q", "--quite"):
                _silence_output()
                continue
            if flag in ("-f", "--fork"):
                do_fork = True
                continue
            option = self._lookup(flag)
            if option is None:
                self.print_help(-1)
            if option.type is OptionType.BOOL:
                _store(data, option.dest, True)
            elif option.type is OptionType.STR:
                _store(data, option.dest, value)
            elif option.type is OptionType.INT:
                _store(data, option.dest, _atoi(value))
            else:
                option.handler()
                raise SystemExit(0)
            if option.validator is not None:
                result = option.validator(data)
                if result not in (None, 0):
                    raise SystemExit(-1)
            seen.add(option.short_name)

        first = rest[0] if rest else None
        for entry in self.entries:
            if isinstance(entry, Option):
                if entry.required and entry.short_name not in seen:
                    self._fail(f"arg '{entry.short_name}' is mandatory")
            elif first is not None and entry.name == first:
                if do_fork:
                    worker = threading.Thread(
                        target=entry.handler,
                        args=(rest[1:], data),
                        name=f"{self.app_name}-{entry.name}",
                    )
                    worker.start()
                    return worker
                return entry.handler(rest[1:], data)

        if self.commands:
            self._fail(f"unknown command '{first or ''}'")
        return rest