"""
Interview Pydantic schemas.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from talentflow.schemas.base import TimestampedRead


class InterviewCreate(BaseModel):
    """Schema for scheduling an interview."""
    
    scheduled_at: datetime
    interview_type: str = "phone"
    duration_minutes: int = 60
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    notes: Optional[str] = None


class InterviewRead(TimestampedRead):
    """Schema for reading interview data (API response)."""
    
    candidate_id: Optional[UUID] = None
    interviewer_id: Optional[str] = None
    scheduled_at: datetime
    interview_type: str
    duration_minutes: Optional[int] = None
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    notes: Optional[str] = None
    status: str
