"""Persisted polls.

A poll stores its ballots append-only; tallies are computed by replaying the
ballots in cast order through a fresh :class:`LiquidDemocracy`, which yields
the same "last action counts" semantics as the in-memory engine.

Functions take an explicit SQLAlchemy ``Session`` and commit their own
writes, so they are usable from API endpoints and scripts alike.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from liquid_democracy.config import API_SETTINGS
from liquid_democracy.models.db import Action, Ballot, Poll, PollStatus
from liquid_democracy.services.commands import parse_line
from liquid_democracy.services.democracy import LiquidDemocracy, TallyResult
from liquid_democracy.services.errors import (
    ImportTooLargeError,
    MissingVoterError,
    PollClosedError,
    PollConflictError,
    PollNotFoundError,
)
from liquid_democracy.utils import get_logger, log_business_event, log_performance

logger = get_logger(__name__)


@dataclass
class ImportSummary:
    accepted: int = 0
    skipped: int = 0
    skipped_lines: List[str] = field(default_factory=list)


def create_poll(session: Session, name: str, description: Optional[str] = None) -> Poll:
    existing = session.query(Poll).filter(Poll.name == name).first()
    if existing:
        raise PollConflictError(name)
    poll = Poll(name=name, description=description, status=PollStatus.OPEN)
    session.add(poll)
    try:
        session.commit()
    except IntegrityError:
        # Concurrent insert with the same name won the race.
        session.rollback()
        raise PollConflictError(name)
    session.refresh(poll)
    log_business_event("poll_created", {"poll_id": poll.id, "poll_name": poll.name})
    return poll


def get_poll(session: Session, poll_id: int) -> Poll:
    poll = session.get(Poll, poll_id)
    if poll is None:
        raise PollNotFoundError(poll_id)
    return poll


def list_polls(
    session: Session,
    status: Optional[PollStatus] = None,
    limit: int = API_SETTINGS["default_page_size"],
    offset: int = 0,
) -> List[Poll]:
    query = session.query(Poll)
    if status is not None:
        query = query.filter(Poll.status == status)
    return query.order_by(Poll.id).offset(offset).limit(limit).all()


def _ensure_open(poll: Poll) -> None:
    if poll.status != PollStatus.OPEN:
        raise PollClosedError(poll.id)


def _new_ballot(poll: Poll, voter: Optional[str], action: Action, choice: Optional[str]) -> Ballot:
    voter = (voter or "").strip()
    if not voter:
        raise MissingVoterError()
    choice = (choice or "").strip() or None
    return Ballot(poll_id=poll.id, voter=voter, action=action, choice=choice)


def cast_ballot(
    session: Session,
    poll: Poll,
    voter: Optional[str],
    action: Action,
    choice: Optional[str] = None,
) -> Ballot:
    """Append one ballot to an open poll.

    Raises:
        PollClosedError: poll no longer accepts ballots.
        MissingVoterError: voter name empty.
    """
    _ensure_open(poll)
    ballot = _new_ballot(poll, voter, action, choice)
    session.add(ballot)
    session.commit()
    session.refresh(ballot)
    log_business_event(
        "ballot_cast",
        {"poll_id": poll.id, "ballot_id": ballot.id, "voter": ballot.voter, "action": ballot.action.value},
    )
    return ballot


def import_commands(session: Session, poll: Poll, text: str) -> ImportSummary:
    """Cast one ballot per valid command line of ``text``.

    Blank lines are ignored (the CLI's stop-at-empty-line rule does not apply
    to a bounded request body); unparseable lines are reported back.
    """
    _ensure_open(poll)
    # Newline-only split, matching how the CLI reads stdin.
    lines = [raw.rstrip("\r") for raw in text.split("\n")]
    if lines and not lines[-1]:
        lines.pop()
    limit = API_SETTINGS["max_import_lines"]
    if len(lines) > limit:
        raise ImportTooLargeError(len(lines), limit)
    summary = ImportSummary()
    for raw in lines:
        if not raw.strip():
            continue
        command = parse_line(raw)
        if not command.is_valid:
            summary.skipped += 1
            summary.skipped_lines.append(raw)
            continue
        session.add(_new_ballot(poll, command.voter, command.action, command.choice))
        summary.accepted += 1
    session.commit()

    if summary.skipped:
        logger.warning("Skipped invalid command lines", poll_id=poll.id, skipped=summary.skipped)
    log_business_event(
        "commands_imported",
        {"poll_id": poll.id, "accepted": summary.accepted, "skipped": summary.skipped},
    )
    return summary


def close_poll(session: Session, poll: Poll) -> Poll:
    """Stop accepting ballots. Closing twice keeps the first ``closed_at``."""
    if poll.status == PollStatus.CLOSED:
        return poll
    poll.status = PollStatus.CLOSED
    poll.closed_at = datetime.now(timezone.utc)
    session.commit()
    session.refresh(poll)
    log_business_event("poll_closed", {"poll_id": poll.id})
    return poll


def list_ballots(session: Session, poll: Poll) -> List[Ballot]:
    return session.query(Ballot).filter(Ballot.poll_id == poll.id).order_by(Ballot.id).all()


def build_democracy(session: Session, poll: Poll) -> LiquidDemocracy:
    democracy = LiquidDemocracy()
    for ballot in list_ballots(session, poll):
        if ballot.action == Action.PICK:
            democracy.pick(ballot.voter, ballot.choice)
        else:
            democracy.delegate(ballot.voter, ballot.choice)
    return democracy


def tally_poll(session: Session, poll: Poll) -> TallyResult:
    start_time = time.time()
    result = build_democracy(session, poll).results()
    log_performance(
        operation="tally_poll",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"poll_id": poll.id, "voters": result.total},
    )
    return result


__all__ = [
    "ImportSummary",
    "create_poll",
    "get_poll",
    "list_polls",
    "cast_ballot",
    "import_commands",
    "close_poll",
    "list_ballots",
    "build_democracy",
    "tally_poll",
]
