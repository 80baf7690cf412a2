"""
FastAPI dependencies.

Services are built per request on the request's database session.
Tests override the ``get_*_service`` providers with in-memory fakes.
"""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from talentflow.db.session import get_db
from talentflow.errors import raise_app_error
from talentflow.repositories.activity_repository import ActivityRepository
from talentflow.repositories.candidate_repository import CandidateRepository
from talentflow.repositories.email_template_repository import EmailTemplateRepository
from talentflow.repositories.interview_repository import InterviewRepository
from talentflow.repositories.job_repository import JobRepository
from talentflow.services.analytics_service import AnalyticsService
from talentflow.services.candidate_service import CandidateService
from talentflow.services.change_feed import ChangeFeed, default_feed
from talentflow.services.email_template_service import EmailTemplateService
from talentflow.services.interview_service import InterviewService
from talentflow.services.job_service import JobService
from talentflow.services.notification_service import EmailClient, EmailNotifier
from talentflow.services.pipeline_service import PipelineService
from talentflow.services.storage_service import FileStorage, LocalFileStorage

__all__ = [
    "get_db",
    "get_current_user_id",
    "get_optional_user_id",
    "get_change_feed",
    "get_file_storage",
    "get_notifier",
    "get_pipeline_service",
    "get_candidate_service",
    "get_job_service",
    "get_analytics_service",
    "get_email_template_service",
    "get_interview_service",
    "get_activity_log",
]


async def get_optional_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
) -> Optional[str]:
    """Acting user id if the caller sent one."""
    if x_user_id is None:
        return None
    return x_user_id.strip() or None


async def get_current_user_id(
    user_id: Optional[str] = Depends(get_optional_user_id),
) -> str:
    """
    Acting recruiter, from the X-User-ID header.

    Authentication happens upstream; this only requires the header.
    """
    if not user_id:
        raise_app_error(401, "AUTH_REQUIRED", "X-User-ID header is required")
    return user_id


def get_change_feed() -> ChangeFeed:
    return default_feed


def get_file_storage() -> FileStorage:
    return LocalFileStorage()


def get_notifier(db: AsyncSession = Depends(get_db)) -> EmailNotifier:
    return EmailNotifier(EmailClient(), EmailTemplateRepository(db))


def get_activity_log(db: AsyncSession = Depends(get_db)) -> ActivityRepository:
    return ActivityRepository(db)


def get_pipeline_service(
    db: AsyncSession = Depends(get_db),
    notifier: EmailNotifier = Depends(get_notifier),
    feed: ChangeFeed = Depends(get_change_feed),
) -> PipelineService:
    return PipelineService(
        candidates=CandidateRepository(db),
        jobs=JobRepository(db),
        notifier=notifier,
        activity_log=ActivityRepository(db),
        change_feed=feed,
    )


def get_candidate_service(
    db: AsyncSession = Depends(get_db),
    storage: FileStorage = Depends(get_file_storage),
    feed: ChangeFeed = Depends(get_change_feed),
) -> CandidateService:
    return CandidateService(CandidateRepository(db), JobRepository(db), storage=storage, change_feed=feed)


def get_job_service(
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
) -> JobService:
    return JobService(JobRepository(db), CandidateRepository(db), change_feed=feed)


def get_analytics_service(db: AsyncSession = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(CandidateRepository(db), JobRepository(db), InterviewRepository(db))


def get_email_template_service(db: AsyncSession = Depends(get_db)) -> EmailTemplateService:
    return EmailTemplateService(EmailTemplateRepository(db))


def get_interview_service(
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
) -> InterviewService:
    return InterviewService(
        InterviewRepository(db),
        CandidateRepository(db),
        activity_log=ActivityRepository(db),
        change_feed=feed,
    )
