"""SQLAlchemy model for ballots (one pick or delegation) cast in a poll.

Ballots are append-only; a voter changing their mind casts a new ballot.
"""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import Integer, String, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

if TYPE_CHECKING:  # pragma: no cover
    from .polls import Poll
from liquid_democracy.database import Base
from .enums import Action

class Ballot(Base):
    __tablename__ = "ballots"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    poll_id: Mapped[int] = mapped_column(Integer, ForeignKey("polls.id"), nullable=False, index=True)
    voter: Mapped[str] = mapped_column(String, nullable=False, index=True)
    action: Mapped[Action] = mapped_column(Enum(Action), nullable=False)
    # Alternative name for picks, delegate's voter name for delegations; None = invalid vote.
    choice: Mapped[str | None] = mapped_column(String, nullable=True)
    cast_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    poll: Mapped["Poll"] = relationship("Poll", back_populates="ballots")
