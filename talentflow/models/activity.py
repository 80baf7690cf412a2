"""
CandidateActivity model.

Append-only timeline of things that happened to a candidate.
"""

import uuid
from typing import Optional, TYPE_CHECKING

from sqlalchemy import String, Text, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from talentflow.models.base_model import TimestampedModel

if TYPE_CHECKING:
    from talentflow.models.candidate import Candidate


class CandidateActivity(TimestampedModel):
    """
    candidate_activities table - notes, stage changes, interviews, etc.
    
    Rows are never updated or deleted by the application.
    """
    
    __tablename__ = "candidate_activities"
    
    candidate_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("candidate.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    
    # "note", "stage_change", "interview" or anything free-form
    activity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    
    # Who performed the action (external user id)
    created_by: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    
    candidate: Mapped[Optional["Candidate"]] = relationship(
        "Candidate",
        back_populates="activities",
    )
