"""
Candidate Pydantic schemas.
"""

from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from talentflow.schemas.base import TimestampedRead
from talentflow.schemas.stage import DEFAULT_STAGE_ID, Stage


class CandidateCreate(BaseModel):
    """Schema for a recruiter adding a candidate manually."""
    
    full_name: str
    email: str
    phone: str
    job_id: UUID
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    cover_letter: Optional[str] = None
    years_of_experience: Optional[int] = None
    current_stage: str = DEFAULT_STAGE_ID
    rating: int = 0


class ApplicationCreate(BaseModel):
    """Schema for a public application submitted from the careers page."""
    
    full_name: str
    email: str
    phone: str
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    cover_letter: Optional[str] = None
    years_of_experience: Optional[int] = None


class CandidateRead(TimestampedRead):
    """Schema for reading candidate data (API response)."""
    
    full_name: str
    email: str
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    cover_letter: Optional[str] = None
    years_of_experience: Optional[int] = None
    resume_url: Optional[str] = None
    rating: int = 0
    notes: Optional[str] = None
    current_stage: str
    job_id: Optional[UUID] = None
    job_title: Optional[str] = None


class CandidateDetailRead(BaseModel):
    """Candidate plus the stage list used to render the detail page."""
    
    candidate: CandidateRead
    stages: List[Stage]
    display_stage: Stage


class StageChangeRequest(BaseModel):
    """Move one candidate. trigger is 'drag_drop' (pipeline) or 'detail_view'."""
    stage: str = Field(..., min_length=1)
    trigger: str = "detail_view"


class RatingRequest(BaseModel):
    rating: int = Field(..., ge=0, le=5)


class NotesRequest(BaseModel):
    notes: str = ""


class NoteActivityRequest(BaseModel):
    description: str = Field(..., min_length=1)


class BulkStageRequest(BaseModel):
    candidate_ids: List[UUID]
    stage: str


class BulkRatingRequest(BaseModel):
    candidate_ids: List[UUID]
    rating: int


class BulkDeleteRequest(BaseModel):
    candidate_ids: List[UUID]


class TransitionResultRead(BaseModel):
    """Outcome of a single stage move."""
    
    candidate_id: UUID
    old_stage: Optional[str] = None
    new_stage: str
    changed: bool
    notified: bool
    notification_error: Optional[str] = None
    activity_recorded: bool = False


class BulkResultRead(BaseModel):
    """Outcome of a bulk action ('updated N of M')."""
    
    requested: int
    updated: int
    message: str
    notifications_sent: int = 0
    notification_failures: Dict[str, str] = {}
