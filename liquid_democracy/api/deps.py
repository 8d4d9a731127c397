"""
Dependencies for database sessions and common lookups.
"""
from typing import Generator
from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session
from liquid_democracy import database
from liquid_democracy.models.db import Poll
from liquid_democracy.services.errors import PollNotFoundError
from liquid_democracy.services.polls import get_poll
from liquid_democracy.utils import get_logger

logger = get_logger(__name__)

def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.
    Ensures proper session lifecycle management with automatic cleanup.

    Yields:
        Session: SQLAlchemy database session
    """
    db = database.SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error("Database session error", error=str(e), exc_info=True)
        db.rollback()
        raise
    finally:
        db.close()

def validate_poll_exists(poll_id: int, db: Session = Depends(get_db)) -> Poll:
    """
    Resolve the ``poll_id`` path parameter to a Poll.

    Raises:
        HTTPException: 404 if the poll doesn't exist
    """
    try:
        poll = get_poll(db, poll_id)
    except PollNotFoundError as e:
        logger.warning("Poll validation failed", poll_id=poll_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    logger.debug("Poll validated successfully", poll_id=poll_id, poll_name=poll.name)
    return poll
