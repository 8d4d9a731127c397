"""
Pydantic schemas for polls, ballots and tallies.
"""
from datetime import datetime
from typing import Optional, List, Dict
from pydantic import BaseModel, Field, ConfigDict, field_validator
from ..db.enums import Action, PollStatus

class PollCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "name": "Team lunch",
            "description": "Where do we eat on Friday?"
        }
    })

class PollRead(BaseModel):
    id: int
    name: str
    description: Optional[str]
    status: PollStatus
    created_at: datetime
    closed_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

class BallotCreate(BaseModel):
    voter: str = Field(min_length=1, max_length=200)
    action: Action
    choice: Optional[str] = Field(None, max_length=200, description="Alternative (pick) or voter (delegate); omit for an invalid vote")

    @field_validator("voter")
    @classmethod
    def voter_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("voter must not be blank")
        return v

    @field_validator("choice")
    @classmethod
    def strip_choice(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "voter": "Bob",
            "action": "delegate",
            "choice": "Carol"
        }
    })

class BallotRead(BaseModel):
    id: int
    poll_id: int
    voter: str
    action: Action
    choice: Optional[str]
    cast_at: datetime

    model_config = ConfigDict(from_attributes=True)

class CommandImport(BaseModel):
    text: str = Field(description="Newline separated '<voter> pick <alternative>' / '<voter> delegate <voter>' lines")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "text": "Alice pick Pizza\nBob delegate Carol\nCarol pick Salad"
        }
    })

class ImportSummaryRead(BaseModel):
    accepted: int
    skipped: int
    skipped_lines: List[str]

class ResultRow(BaseModel):
    alternative: str
    votes: int

class PollResults(BaseModel):
    poll_id: int
    status: PollStatus
    results: List[ResultRow] = Field(description="Sorted by votes (desc), then name")
    invalid_vote_count: int
    total_voters: int

class PollChoices(BaseModel):
    poll_id: int
    choices: Dict[str, Optional[str]] = Field(description="Voter -> resulting alternative (null = invalid vote)")
