"""Domain errors raised by the tally engine and poll services.

All are ``ValueError`` subclasses; the API layer maps them onto HTTP status
codes (see ``liquid_democracy.api.v1.endpoints.polls``).
"""
from __future__ import annotations


class LiquidDemocracyError(ValueError):
    """Base class for domain errors."""


class MissingVoterError(LiquidDemocracyError):
    """The acting voter of a pick / delegation was not given."""

    def __init__(self, message: str = "Voter name must not be empty") -> None:
        super().__init__(message)


class InvalidCommandError(LiquidDemocracyError):
    """A parsed command lacks its voter or action and cannot be applied."""


class PollNotFoundError(LiquidDemocracyError):
    def __init__(self, poll_id: int) -> None:
        super().__init__(f"Poll with id {poll_id} not found")
        self.poll_id = poll_id


class PollConflictError(LiquidDemocracyError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Poll with name '{name}' already exists")
        self.name = name


class PollClosedError(LiquidDemocracyError):
    def __init__(self, poll_id: int) -> None:
        super().__init__(f"Poll {poll_id} is closed and accepts no further ballots")
        self.poll_id = poll_id


class ImportTooLargeError(LiquidDemocracyError):
    def __init__(self, lines: int, limit: int) -> None:
        super().__init__(f"Import of {lines} lines exceeds the limit of {limit}")
        self.lines = lines
        self.limit = limit


__all__ = [
    "LiquidDemocracyError",
    "MissingVoterError",
    "InvalidCommandError",
    "PollNotFoundError",
    "PollConflictError",
    "PollClosedError",
    "ImportTooLargeError",
]
