"""
Job model.

Represents a job posting owned by a recruiter.
"""

from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from talentflow.models.base_model import TimestampedModel

if TYPE_CHECKING:
    from talentflow.models.candidate import Candidate


class Job(TimestampedModel):
    """
    Job table - a posting candidates apply to.
    
    Each job carries its own ordered pipeline stage list as a JSONB array
    of {id, label, color} objects. NULL means "use the default pipeline".
    """
    
    __tablename__ = "job"
    
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    
    department: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    
    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    
    # e.g. "full-time", "part-time", "contract"
    employment_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    
    requirements: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    
    responsibilities: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    
    # Free text, e.g. "$90k - $120k"
    salary_range: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    
    # "open", "active" or "closed" (see JobStatus)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="open",
        server_default="open",
        index=True,
    )
    
    stages: Mapped[Optional[list]] = mapped_column(
        JSONB,
        nullable=True,
    )
    
    # Recruiter who owns this posting (external user id)
    created_by: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    
    candidates: Mapped[List["Candidate"]] = relationship(
        "Candidate",
        back_populates="job",
        passive_deletes=True,
    )
