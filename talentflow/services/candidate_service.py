"""
Candidate intake, lookup and filtering.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional
from uuid import UUID

from talentflow.repositories.candidate_repository import CandidateRepository
from talentflow.repositories.job_repository import JobRepository
from talentflow.schemas.candidate import ApplicationCreate, CandidateCreate
from talentflow.schemas.stage import DEFAULT_STAGE_ID, Stage, stages_from_json
from talentflow.services.change_feed import CANDIDATES_TABLE, ChangeFeed
from talentflow.services.exceptions import NotFoundError, ServiceError, ValidationError
from talentflow.services.pipeline_service import validate_rating
from talentflow.services.stage_service import effective_stages, resolve_display_stage
from talentflow.services.storage_service import FileStorage, resume_path, validate_resume

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# The careers page lists "open" jobs and the apply page loads "active" ones.
APPLICATION_JOB_STATUSES = ("open", "active")

ALL = "all"


@dataclass
class ResumeUpload:
    filename: str
    content_type: Optional[str]
    data: bytes


@dataclass
class CandidateFilter:
    """Candidates-page filters. None or "all" means no filter."""

    search: Optional[str] = None
    job_id: Optional[UUID] = None
    stage: Optional[str] = None
    min_rating: Optional[int] = None

    def normalized(self) -> "CandidateFilter":
        search = (self.search or "").strip() or None
        stage = None if self.stage in (None, "", ALL) else self.stage
        min_rating = self.min_rating if self.min_rating else None
        return CandidateFilter(search=search, job_id=self.job_id, stage=stage, min_rating=min_rating)

    def matches(self, candidate: Any) -> bool:
        f = self.normalized()
        if f.search:
            needle = f.search.lower()
            if needle not in (candidate.full_name or "").lower() and needle not in (candidate.email or "").lower():
                return False
        if f.job_id is not None and candidate.job_id != f.job_id:
            return False
        if f.stage is not None and candidate.current_stage != f.stage:
            return False
        if f.min_rating is not None and (candidate.rating or 0) < f.min_rating:
            return False
        return True


def parse_job_filter(raw: Optional[str]) -> Optional[UUID]:
    """Query-string job filter: blank or "all" means every job."""
    value = (raw or "").strip()
    if value in ("", ALL):
        return None
    try:
        return UUID(value)
    except ValueError as exc:
        raise ValidationError("Invalid job filter", {"job_id": value}) from exc


def apply_filters(candidates: Iterable[Any], candidate_filter: CandidateFilter) -> List[Any]:
    """In-memory version of the repository filter, for already loaded views."""
    return [candidate for candidate in candidates if candidate_filter.matches(candidate)]


def validate_contact_fields(full_name: str, email: str, phone: str) -> None:
    if not (full_name or "").strip() or not (email or "").strip() or not (phone or "").strip():
        raise ValidationError("Please fill in all required fields")
    if not EMAIL_PATTERN.match(email.strip()):
        raise ValidationError("Please enter a valid email address", {"email": email})


@dataclass
class CandidateDetail:
    candidate: Any
    stages: List[Stage]
    display_stage: Stage


class CandidateService:
    """Creates candidates and serves the candidates list and detail views."""

    def __init__(
        self,
        candidates: CandidateRepository,
        jobs: JobRepository,
        storage: Optional[FileStorage] = None,
        change_feed: Optional[ChangeFeed] = None,
    ):
        self.candidates = candidates
        self.jobs = jobs
        self.storage = storage
        self.change_feed = change_feed

    async def list_candidates(
        self,
        candidate_filter: Optional[CandidateFilter] = None,
        limit: int = 200,
        offset: int = 0,
    ) -> List[Any]:
        f = (candidate_filter or CandidateFilter()).normalized()
        return await self.candidates.list(
            limit=limit,
            offset=offset,
            search=f.search,
            job_id=f.job_id,
            stage=f.stage,
            min_rating=f.min_rating,
        )

    async def get_candidate(self, candidate_id: UUID):
        candidate = await self.candidates.get_by_id(candidate_id)
        if candidate is None:
            raise NotFoundError("candidate", candidate_id)
        return candidate

    async def get_detail(self, candidate_id: UUID) -> CandidateDetail:
        """Candidate with the job's stage list and the stage to highlight."""
        candidate = await self.get_candidate(candidate_id)
        job_stages = None
        if candidate.job_id is not None:
            job = await self.jobs.get_by_id(candidate.job_id)
            if job is not None and job.stages:
                job_stages = stages_from_json(job.stages)
        stages = effective_stages(job_stages)
        return CandidateDetail(
            candidate=candidate,
            stages=stages,
            display_stage=resolve_display_stage(stages, candidate.current_stage),
        )

    async def _store_resume(self, full_name: str, resume: Optional[ResumeUpload]) -> Optional[str]:
        """Upload the resume; on failure log it and carry on without one."""
        if resume is None or self.storage is None:
            return None
        path = resume_path(full_name, resume.filename)
        try:
            return await self.storage.upload(path, resume.data, resume.content_type or "")
        except ServiceError as exc:
            logger.error("Resume upload failed for %s, continuing without it: %s", path, exc)
            return None

    async def _publish(self, job_id: UUID) -> None:
        if self.change_feed is not None:
            await self.change_feed.publish(CANDIDATES_TABLE, {"job_id": str(job_id)})

    async def create_candidate(
        self,
        data: CandidateCreate,
        resume: Optional[ResumeUpload] = None,
    ):
        """Recruiter adds a candidate to a job."""
        validate_contact_fields(data.full_name, data.email, data.phone)
        validate_rating(data.rating)
        if resume is not None:
            validate_resume(resume.content_type, len(resume.data))
        if await self.jobs.get_by_id(data.job_id) is None:
            raise NotFoundError("job", data.job_id)

        resume_url = await self._store_resume(data.full_name, resume)
        fields = data.model_dump()
        fields["full_name"] = data.full_name.strip()
        fields["email"] = data.email.strip()
        fields["current_stage"] = (data.current_stage or "").strip() or DEFAULT_STAGE_ID
        candidate = await self.candidates.create(resume_url=resume_url, **fields)
        await self.candidates.commit()
        await self._publish(data.job_id)
        logger.info("Candidate %s added to job %s", candidate.id, data.job_id)
        return candidate

    async def submit_application(
        self,
        job_id: UUID,
        data: ApplicationCreate,
        resume: Optional[ResumeUpload] = None,
    ):
        """Public application from the careers page. Always lands in 'applied'."""
        validate_contact_fields(data.full_name, data.email, data.phone)
        if resume is not None:
            validate_resume(resume.content_type, len(resume.data))

        job = await self.jobs.get_by_id(job_id)
        if job is None:
            raise NotFoundError("job", job_id)
        if job.status not in APPLICATION_JOB_STATUSES:
            raise ValidationError("This job is no longer accepting applications", {"status": job.status})

        resume_url = await self._store_resume(data.full_name, resume)
        fields = data.model_dump()
        fields["full_name"] = data.full_name.strip()
        fields["email"] = data.email.strip()
        candidate = await self.candidates.create(
            job_id=job_id,
            current_stage=DEFAULT_STAGE_ID,
            rating=0,
            resume_url=resume_url,
            **fields,
        )
        await self.candidates.commit()
        await self._publish(job_id)
        logger.info("Application %s received for job %s", candidate.id, job_id)
        return candidate
