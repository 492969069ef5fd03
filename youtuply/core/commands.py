"""Chat command parsing for the ``!ytp`` command surface."""

from __future__ import annotations

from dataclasses import dataclass

COMMAND_PREFIX = "!ytp"

USAGE = {
    "setup": f"{COMMAND_PREFIX} setup",
    "add": f"{COMMAND_PREFIX} add <video url> <playlist id>",
    "connect": f"{COMMAND_PREFIX} connect <playlist id>",
    "help": f"{COMMAND_PREFIX} help",
}


@dataclass(frozen=True)
class Command:
    name: str
    params: str = ""


def parse_command(content: str) -> Command | None:
    """Split ``!ytp <name> <params...>``.

    Returns None when the message does not start with the prefix token, in
    which case it is a plain chat message. A bare prefix yields an empty name.
    """
    parts = (content or "").split(maxsplit=2)
    if not parts or parts[0] != COMMAND_PREFIX:
        return None
    name = parts[1] if len(parts) > 1 else ""
    params = parts[2].strip() if len(parts) > 2 else ""
    return Command(name=name, params=params)


def is_setup_request(content: str) -> bool:
    command = parse_command(content)
    return command is not None and command.name == "setup"
