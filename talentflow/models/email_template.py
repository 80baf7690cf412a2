"""
EmailTemplate model.

Per-stage subject/body used for stage-change notifications.
"""

from typing import Optional

from sqlalchemy import String, Text, Boolean

from sqlalchemy.orm import Mapped, mapped_column

from talentflow.models.base_model import TimestampedModel


class EmailTemplate(TimestampedModel):
    """
    email_templates table - one editable template per stage id.
    
    subject and body_html may contain {{candidateName}}, {{jobTitle}},
    {{oldStage}} and {{newStage}} tokens.
    """
    
    __tablename__ = "email_templates"
    
    stage: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )
    
    subject: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    
    body_html: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )
    
    created_by: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
