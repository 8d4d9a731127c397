"""Line-oriented vote command parsing.

Input lines look like ``"<voter> pick <alternative>"`` or
``"<voter> delegate <voter>"``. Verbs are case sensitive and accept a
third-person ``s`` (``picks``, ``delegates``), which is dropped.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

from liquid_democracy.models.db.enums import Action
from liquid_democracy.services.democracy import LiquidDemocracy
from liquid_democracy.services.errors import InvalidCommandError

# Split before a verb preceded by whitespace, and after a verb (optional "s")
# followed by whitespace. Lookbehinds must be fixed width, hence one per verb.
_SPLIT_PATTERN = re.compile(r"\s+(?=pick|delegate)|(?<=pick)s?\s+|(?<=delegate)s?\s+")
_ACTIONS = {action.value: action for action in Action}


@dataclass(frozen=True)
class Command:
    voter: Optional[str]
    action: Optional[Action]
    choice: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        """A command needs at least a voter and an action to be applied."""
        return self.voter is not None and self.action is not None

    def __str__(self) -> str:
        action = self.action.value if self.action is not None else None
        return f"{self.voter} {action} {self.choice}"


def _clean(word: str) -> Optional[str]:
    return word.strip() or None


def parse_line(line: str) -> Command:
    """Parse one input line into a (possibly invalid) command.

    >>> parse_line("Bob delegates Carol")
    Command(voter='Bob', action=<Action.DELEGATE: 'delegate'>, choice='Carol')
    """
    words = _SPLIT_PATTERN.split(line)
    voter = _clean(words[0]) if words else None
    action = _ACTIONS.get(words[1]) if len(words) > 1 else None
    choice = _clean(words[2]) if len(words) > 2 else None
    return Command(voter=voter, action=action, choice=choice)


def apply_command(democracy: LiquidDemocracy, command: Command) -> None:
    if not command.is_valid:
        raise InvalidCommandError(f"Cannot apply incomplete command '{command}'")
    if command.action is Action.PICK:
        democracy.pick(command.voter, command.choice)
    else:
        democracy.delegate(command.voter, command.choice)


def read_commands(lines: Iterable[str]) -> Iterator[Tuple[str, Command]]:
    """Yield ``(line, command)`` pairs until end of input or the first empty line."""
    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            return
        yield line, parse_line(line)


__all__ = ["Command", "parse_line", "apply_command", "read_commands"]
