"""SQLAlchemy model for named polls."""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import Integer, String, Text, DateTime, Enum
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql import func

if TYPE_CHECKING:  # pragma: no cover
    from .ballots import Ballot
from liquid_democracy.database import Base
from .enums import PollStatus

class Poll(Base):
    __tablename__ = "polls"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[PollStatus] = mapped_column(Enum(PollStatus), default=PollStatus.OPEN, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Cast order matters: replaying ballots by id applies "last action counts".
    ballots: Mapped[list["Ballot"]] = relationship(
        "Ballot", back_populates="poll", order_by="Ballot.id", cascade="all, delete-orphan"
    )
