"""
CandidateActivity Pydantic schemas.
"""

from typing import Optional
from uuid import UUID

from talentflow.schemas.base import TimestampedRead


class ActivityRead(TimestampedRead):
    """Schema for reading a timeline entry."""
    
    candidate_id: Optional[UUID] = None
    activity_type: str
    description: str
    created_by: Optional[str] = None
