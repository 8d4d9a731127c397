"""
Poll, ballot and tally endpoints.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query, Request
from sqlalchemy.orm import Session
import time
from liquid_democracy.api.deps import get_db, validate_poll_exists
from liquid_democracy.config import API_SETTINGS
from liquid_democracy.models.db import Poll, PollStatus
from liquid_democracy.models.schemas.base import ResponseBase
from liquid_democracy.models.schemas.polls import (
    PollCreate, PollRead, BallotCreate, BallotRead, CommandImport,
    ImportSummaryRead, ResultRow, PollResults, PollChoices,
)
from liquid_democracy.services import polls as poll_service
from liquid_democracy.services.errors import (
    ImportTooLargeError, MissingVoterError, PollClosedError, PollConflictError,
)
from liquid_democracy.services.reporting import ranked_choices
from liquid_democracy.utils import get_logger, log_performance

router = APIRouter()
logger = get_logger(__name__)

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID", "unknown")

@router.post(
    "/",
    response_model=PollRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create new poll"
)
async def create_poll(
    poll_data: PollCreate,
    request: Request,
    db: Session = Depends(get_db)
) -> PollRead:
    """Create a new, open poll."""
    request_id = _request_id(request)
    logger.info("Poll creation started", poll_name=poll_data.name, request_id=request_id)

    try:
        poll = poll_service.create_poll(db, poll_data.name, poll_data.description)
    except PollConflictError as e:
        logger.warning("Poll creation failed: duplicate name", poll_name=poll_data.name, request_id=request_id)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    logger.info("Poll created successfully", poll_id=poll.id, request_id=request_id)
    return PollRead.model_validate(poll)

@router.get(
    "/",
    response_model=List[PollRead],
    summary="List polls"
)
async def list_polls(
    status_filter: Optional[PollStatus] = Query(None),
    limit: int = Query(API_SETTINGS["default_page_size"], ge=1, le=API_SETTINGS["max_page_size"]),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
) -> List[PollRead]:
    """List polls with filtering and pagination."""
    polls = poll_service.list_polls(db, status=status_filter, limit=limit, offset=offset)
    return [PollRead.model_validate(poll) for poll in polls]

@router.get(
    "/{poll_id}",
    response_model=PollRead,
    summary="Get poll"
)
async def read_poll(poll: Poll = Depends(validate_poll_exists)) -> PollRead:
    return PollRead.model_validate(poll)

@router.post(
    "/{poll_id}/close",
    response_model=ResponseBase,
    summary="Close poll",
    description="Stop accepting ballots; results stay available"
)
async def close_poll(
    request: Request,
    poll: Poll = Depends(validate_poll_exists),
    db: Session = Depends(get_db)
) -> ResponseBase:
    poll = poll_service.close_poll(db, poll)
    logger.info("Poll closed", poll_id=poll.id, request_id=_request_id(request))
    return ResponseBase(
        message=f"Poll '{poll.name}' closed",
        data={"poll_id": poll.id, "status": poll.status.value, "closed_at": poll.closed_at},
    )

@router.post(
    "/{poll_id}/ballots",
    response_model=BallotRead,
    status_code=status.HTTP_201_CREATED,
    summary="Cast ballot",
    description="Pick an alternative or delegate to another voter. The voter's latest ballot counts."
)
async def cast_ballot(
    ballot_data: BallotCreate,
    request: Request,
    poll: Poll = Depends(validate_poll_exists),
    db: Session = Depends(get_db)
) -> BallotRead:
    request_id = _request_id(request)
    try:
        ballot = poll_service.cast_ballot(db, poll, ballot_data.voter, ballot_data.action, ballot_data.choice)
    except PollClosedError as e:
        logger.warning("Ballot rejected: poll closed", poll_id=poll.id, request_id=request_id)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except MissingVoterError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    logger.info(
        "Ballot cast",
        poll_id=poll.id,
        ballot_id=ballot.id,
        action=ballot.action.value,
        request_id=request_id
    )
    return BallotRead.model_validate(ballot)

@router.get(
    "/{poll_id}/ballots",
    response_model=List[BallotRead],
    summary="List ballots in cast order"
)
async def list_ballots(
    poll: Poll = Depends(validate_poll_exists),
    db: Session = Depends(get_db)
) -> List[BallotRead]:
    return [BallotRead.model_validate(b) for b in poll_service.list_ballots(db, poll)]

@router.post(
    "/{poll_id}/commands",
    response_model=ImportSummaryRead,
    summary="Import command text",
    description="One '<voter> pick <alternative>' or '<voter> delegate <voter>' per line"
)
async def import_commands(
    payload: CommandImport,
    request: Request,
    poll: Poll = Depends(validate_poll_exists),
    db: Session = Depends(get_db)
) -> ImportSummaryRead:
    start_time = time.time()
    request_id = _request_id(request)
    try:
        summary = poll_service.import_commands(db, poll, payload.text)
    except PollClosedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ImportTooLargeError as e:
        logger.warning("Command import rejected", poll_id=poll.id, lines=e.lines, request_id=request_id)
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e))

    log_performance(
        operation="import_commands",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"poll_id": poll.id, "accepted": summary.accepted}
    )
    return ImportSummaryRead(
        accepted=summary.accepted,
        skipped=summary.skipped,
        skipped_lines=summary.skipped_lines,
    )

@router.get(
    "/{poll_id}/results",
    response_model=PollResults,
    summary="Tally poll",
    description="Votes per alternative after resolving delegations; cycles count as invalid"
)
async def poll_results(
    poll: Poll = Depends(validate_poll_exists),
    db: Session = Depends(get_db)
) -> PollResults:
    result = poll_service.tally_poll(db, poll)
    return PollResults(
        poll_id=poll.id,
        status=poll.status,
        results=[ResultRow(alternative=name, votes=votes) for name, votes in ranked_choices(result)],
        invalid_vote_count=result.invalid_vote_count,
        total_voters=result.total,
    )

@router.get(
    "/{poll_id}/choices",
    response_model=PollChoices,
    summary="Open votes",
    description="Every voter's resulting alternative; null marks an invalid vote"
)
async def poll_choices(
    poll: Poll = Depends(validate_poll_exists),
    db: Session = Depends(get_db)
) -> PollChoices:
    democracy = poll_service.build_democracy(db, poll)
    return PollChoices(poll_id=poll.id, choices=democracy.resulting_choices())
