"""Command parser for CLI input."""

import shlex

from cli.models import (
    AssignCommand,
    CommandRequest,
    DeleteCommand,
    GetCommand,
    LookupCommand,
    MasterCommand,
    PutCommand,
    PutFormCommand,
)

ASSIGN_OPTION_KEYS = {"count", "collection", "replication", "ttl", "dc"}
PUT_OPTION_KEYS = {"mime", "collection", "replication", "ttl"}


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "assign":
        return _parse_assign(tokens[1:])
    elif command_name == "put":
        return _parse_put(tokens[1:], multipart=False)
    elif command_name == "put-form":
        return _parse_put(tokens[1:], multipart=True)
    elif command_name == "get":
        return _parse_get(tokens[1:])
    elif command_name == "delete":
        return _parse_delete(tokens[1:])
    elif command_name == "lookup":
        return _parse_lookup(tokens[1:])
    elif command_name == "master":
        return _parse_master(tokens[1:])
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _split_options(args: list[str], allowed: set[str]) -> tuple[list[str], dict[str, str]]:
    """Separate key=value options from positional arguments.

    Only known option keys are treated as options; any other argument,
    including a path containing '=', stays positional.
    """
    positional = []
    options = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        if not sep or key not in allowed:
            positional.append(arg)
            continue
        if not value:
            raise ParseError(f"Option {key} requires a value")
        options[key] = value
    return positional, options


def _parse_assign(args: list[str]) -> AssignCommand:
    """Parse 'assign [count=N] [collection=..] [replication=..] [ttl=..] [dc=..]' command."""
    positional, options = _split_options(args, ASSIGN_OPTION_KEYS)
    if positional:
        raise ParseError(
            f"Unexpected arguments for assign: {' '.join(positional)} "
            f"(options: {', '.join(sorted(ASSIGN_OPTION_KEYS))})"
        )

    count = 1
    if "count" in options:
        try:
            count = int(options["count"])
        except ValueError:
            raise ParseError(f"count must be an integer, got {options['count']!r}")
        if count < 1:
            raise ParseError("count must be at least 1")

    return AssignCommand(
        count=count,
        collection=options.get("collection"),
        replication=options.get("replication"),
        ttl=options.get("ttl"),
        data_center=options.get("dc"),
    )


def _parse_put(args: list[str], multipart: bool) -> PutCommand | PutFormCommand:
    """Parse 'put <file> [mime=..] [collection=..] [replication=..] [ttl=..]' command."""
    name = "put-form" if multipart else "put"
    positional, options = _split_options(args, PUT_OPTION_KEYS)
    if len(positional) != 1:
        raise ParseError(f"{name} requires exactly one file path")

    command_type = PutFormCommand if multipart else PutCommand
    return command_type(
        file_path=positional[0],
        mime=options.get("mime"),
        collection=options.get("collection"),
        replication=options.get("replication"),
        ttl=options.get("ttl"),
    )


def _parse_get(args: list[str]) -> GetCommand:
    """Parse 'get <fid> [output_path]' command."""
    if len(args) < 1 or len(args) > 2:
        raise ParseError("get requires 1 or 2 arguments: <fid> [output_path]")

    fid = args[0]
    output_path = args[1] if len(args) > 1 else None

    return GetCommand(fid=fid, output_path=output_path)


def _parse_delete(args: list[str]) -> DeleteCommand:
    """Parse 'delete <fid>' command."""
    if len(args) != 1:
        raise ParseError("delete requires exactly 1 argument: <fid>")

    return DeleteCommand(fid=args[0])


def _parse_lookup(args: list[str]) -> LookupCommand:
    """Parse 'lookup <volume_id>' command."""
    if len(args) != 1:
        raise ParseError("lookup requires exactly 1 argument: <volume_id>")

    return LookupCommand(volume_id=args[0])


def _parse_master(args: list[str]) -> MasterCommand:
    """Parse 'master [host:port]' command."""
    if len(args) > 1:
        raise ParseError("master takes at most 1 argument: [host:port]")

    return MasterCommand(address=args[0] if args else None)
