from .enums import Action, PollStatus
from .polls import Poll
from .ballots import Ballot

__all__ = [
    "Action",
    "PollStatus",
    "Poll",
    "Ballot",
]
