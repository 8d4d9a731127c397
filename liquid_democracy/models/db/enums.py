"""Central Enum definitions for core domain states.

Shared by the DB models, the pydantic schemas and the command parser so the
action verbs and poll states are spelled in exactly one place.
"""
from __future__ import annotations
import enum


class Action(str, enum.Enum):
    PICK = "pick"
    DELEGATE = "delegate"


class PollStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"


__all__ = [
    "Action",
    "PollStatus",
]
