"""
Email template and outbound email schemas.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class EmailTemplateUpsert(BaseModel):
    """Save the template for one stage."""
    
    subject: str
    body_html: str
    is_active: bool = True


class EmailTemplateRead(BaseModel):
    """A stored template, or a built-in default (id is None)."""
    
    id: Optional[UUID] = None
    stage: str
    subject: str
    body_html: str
    is_active: bool = True
    is_default: bool = False
    
    model_config = ConfigDict(from_attributes=True)


class StageChangeEmail(BaseModel):
    """Payload of a stage-change notice."""
    
    candidateName: str
    candidateEmail: str
    oldStage: Optional[str] = None
    newStage: str
    jobTitle: str


class CustomEmail(BaseModel):
    """Payload of a recruiter-composed email."""
    
    to: str
    subject: str
    html: str
    candidateName: str
    candidateId: str


class ComposeEmailRequest(BaseModel):
    """Compose request from the send-email dialog; template_id pre-fills subject/body."""
    
    subject: Optional[str] = None
    html: Optional[str] = None
    template_id: Optional[UUID] = None


class RenderedEmail(BaseModel):
    subject: str
    html: str


class EmailSendResult(BaseModel):
    """Outcome of a composed email. A provider failure is reported, not raised."""
    
    sent: bool
    error: Optional[str] = None
