"""
Job Pydantic schemas.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from talentflow.schemas.base import TimestampedRead
from talentflow.schemas.stage import Stage, stages_from_json


class JobCreate(BaseModel):
    """Schema for creating a new job. Stages default to the 5-stage pipeline."""
    
    title: str = Field(..., min_length=1, max_length=255)
    department: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    employment_type: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1)
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    salary_range: Optional[str] = None
    status: Optional[str] = None
    stages: Optional[List[Stage]] = None


class JobUpdate(BaseModel):
    """Schema for editing a job. All fields optional."""
    
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    department: Optional[str] = None
    location: Optional[str] = None
    employment_type: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    salary_range: Optional[str] = None
    status: Optional[str] = None
    stages: Optional[List[Stage]] = None


class JobRead(TimestampedRead):
    """Schema for reading job data (API response)."""
    
    title: str
    department: str
    location: str
    employment_type: str
    description: str
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    salary_range: Optional[str] = None
    status: str
    stages: List[Stage] = []
    created_by: Optional[str] = None

    @field_validator("stages", mode="before")
    @classmethod
    def load_stages(cls, v):
        if v is None:
            return []
        if v and isinstance(v[0], dict):
            return stages_from_json(v)
        return v


class JobDetailRead(JobRead):
    """Job plus derived pipeline info for the job details page."""
    
    effective_stages: List[Stage]
    candidate_count: int = 0
    is_owner: bool = False


class StageEditRequest(BaseModel):
    """One stage-manager edit applied to a job's stage list."""
    
    action: Literal["add", "remove", "relabel", "recolor"]
    index: Optional[int] = None
    label: Optional[str] = None
    color: Optional[str] = None
