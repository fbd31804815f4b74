"""The ``ethgo`` command line tool."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Callable, Sequence

from .version import get_version

_NAME = "ethgo"
_HELP_FLAGS = ("-h", "-help", "--help")
_EXIT_NOT_FOUND = 127


@dataclass(frozen=True)
class _Command:
    synopsis: str
    help: str
    action: Callable[[list[str]], int]


def _run_version(args: list[str]) -> int:
    print(get_version())
    return 0


def _commands() -> dict[str, _Command]:
    return {
        "version": _Command(
            synopsis="Display the Ethgo version",
            help=f"Usage: {_NAME} version\n\n  Display the Ethgo version",
            action=_run_version,
        ),
    }


def _general_help(commands: dict[str, _Command]) -> str:
    width = max((len(name) for name in commands), default=0)
    lines = [
        f"Usage: {_NAME} [--version] [--help] <command> [<args>]",
        "",
        "Available commands are:",
    ]
    lines.extend(
        f"    {name.ljust(width)}    {command.synopsis}"
        for name, command in sorted(commands.items())
    )
    return "\n".join(lines)


def run(args: Sequence[str]) -> int:
    """Run the tool with ``args`` and return the exit code."""
    args = list(args)
    commands = _commands()

    subcommand = args[0] if args and not args[0].startswith("-") else ""
    command = commands.get(subcommand)
    if command is None:
        print(_general_help(commands), file=sys.stderr)
        return _EXIT_NOT_FOUND

    rest = args[1:]
    if any(arg in _HELP_FLAGS for arg in rest):
        print(command.help, file=sys.stderr)
        return 0

    try:
        return command.action(rest)
    except Exception as exc:  # noqa: BLE001 - report any failure as an exit code
        print(f"Error executing CLI: {exc}", file=sys.stderr)
        return 1


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point; reads the arguments from the command line when none are given."""
    return run(sys.argv[1:] if argv is None else argv)