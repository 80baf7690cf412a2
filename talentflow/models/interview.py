"""
Interview model.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from talentflow.models.base_model import TimestampedModel


class Interview(TimestampedModel):
    """
    interviews table - a scheduled conversation with a candidate.
    """
    
    __tablename__ = "interviews"
    
    candidate_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("candidate.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    
    interviewer_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    
    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    
    # "phone", "video" or "in-person"
    interview_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    
    duration_minutes: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        default=60,
    )
    
    location: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )
    
    meeting_link: Mapped[Optional[str]] = mapped_column(
        String(1000),
        nullable=True,
    )
    
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="scheduled",
        index=True,
    )
