"""
Schemas package.

Import all schemas here for easy access.
"""

from talentflow.schemas.stage import Stage, DEFAULT_STAGES, STAGE_COLORS
from talentflow.schemas.job import JobCreate, JobUpdate, JobRead, JobDetailRead, StageEditRequest
from talentflow.schemas.candidate import (
    CandidateCreate,
    ApplicationCreate,
    CandidateRead,
    CandidateDetailRead,
    TransitionResultRead,
    BulkResultRead,
)
from talentflow.schemas.activity import ActivityRead
from talentflow.schemas.email_template import EmailTemplateUpsert, EmailTemplateRead
from talentflow.schemas.interview import InterviewCreate, InterviewRead
from talentflow.schemas.analytics import AnalyticsReport, DashboardStats

__all__ = [
    # Stage
    "Stage", "DEFAULT_STAGES", "STAGE_COLORS",
    # Job
    "JobCreate", "JobUpdate", "JobRead", "JobDetailRead", "StageEditRequest",
    # Candidate
    "CandidateCreate", "ApplicationCreate", "CandidateRead", "CandidateDetailRead",
    "TransitionResultRead", "BulkResultRead",
    # Activity
    "ActivityRead",
    # Email templates
    "EmailTemplateUpsert", "EmailTemplateRead",
    # Interview
    "InterviewCreate", "InterviewRead",
    # Analytics
    "AnalyticsReport", "DashboardStats",
]
