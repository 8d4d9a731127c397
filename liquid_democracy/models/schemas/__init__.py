from .base import ResponseBase
from .polls import (
    PollCreate,
    PollRead,
    BallotCreate,
    BallotRead,
    CommandImport,
    ImportSummaryRead,
    ResultRow,
    PollResults,
    PollChoices,
)

__all__ = [
    # Base
    "ResponseBase",

    # Polls
    "PollCreate",
    "PollRead",

    # Ballots
    "BallotCreate",
    "BallotRead",
    "CommandImport",
    "ImportSummaryRead",

    # Tallies
    "ResultRow",
    "PollResults",
    "PollChoices",
]
