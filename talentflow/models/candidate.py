"""
Candidate model.

Represents a person who applied (or was added) to a job.
"""

import uuid
from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import String, Text, Integer, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from talentflow.models.base_model import TimestampedModel

if TYPE_CHECKING:
    from talentflow.models.activity import CandidateActivity
    from talentflow.models.job import Job


class Candidate(TimestampedModel):
    """
    Candidate table - one row per application.
    
    current_stage holds a stage id from the owning job's stage list.
    It is not a foreign key: stages live in a JSONB array on the job and
    can be removed while candidates still reference them.
    """
    
    __tablename__ = "candidate"
    
    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    
    phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    
    linkedin_url: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )
    
    portfolio_url: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )
    
    cover_letter: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    
    years_of_experience: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    
    # Public URL returned by file storage, NULL when upload failed or skipped
    resume_url: Mapped[Optional[str]] = mapped_column(
        String(1000),
        nullable=True,
    )
    
    # 0-5 stars
    rating: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
    )
    
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    
    current_stage: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="applied",
        server_default="applied",
        index=True,
    )
    
    job_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("job.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    
    job: Mapped[Optional["Job"]] = relationship(
        "Job",
        back_populates="candidates",
        lazy="selectin",
    )
    
    activities: Mapped[List["CandidateActivity"]] = relationship(
        "CandidateActivity",
        back_populates="candidate",
        passive_deletes=True,
    )
    
    @property
    def job_title(self) -> Optional[str]:
        return self.job.title if self.job is not None else None
