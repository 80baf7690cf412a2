"""
Models package.

Import all models here so they are registered with SQLAlchemy.
This file also makes it easy to import models from one place.
"""

from talentflow.models.job import Job
from talentflow.models.candidate import Candidate
from talentflow.models.activity import CandidateActivity
from talentflow.models.email_template import EmailTemplate
from talentflow.models.interview import Interview

# Export all models
__all__ = [
    "Job",
    "Candidate",
    "CandidateActivity",
    "EmailTemplate",
    "Interview",
]
