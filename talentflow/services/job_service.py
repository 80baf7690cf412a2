"""
Job postings: CRUD, ownership and the per-job stage list.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional
from uuid import UUID

from talentflow.repositories.candidate_repository import CandidateRepository
from talentflow.repositories.job_repository import JobRepository
from talentflow.schemas.job import JobCreate, JobUpdate, StageEditRequest
from talentflow.schemas.stage import DEFAULT_STAGE_COLOR, DEFAULT_STAGES, Stage, stages_from_json, stages_to_json
from talentflow.services import stage_service
from talentflow.services.change_feed import JOBS_TABLE, ChangeFeed
from talentflow.services.exceptions import NotFoundError, PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_JOB_STATUS = "open"
STATUS_ACTIVE = "active"
STATUS_CLOSED = "closed"
CAREERS_STATUS = "open"


@dataclass
class JobDetail:
    job: Any
    effective_stages: List[Stage]
    candidate_count: int
    is_owner: bool


def is_owner(job: Any, user_id: Optional[str]) -> bool:
    return user_id is not None and job.created_by is not None and job.created_by == user_id


def toggled_status(status: str) -> str:
    """Job details page toggle: active -> closed, anything else -> active."""
    return STATUS_CLOSED if status == STATUS_ACTIVE else STATUS_ACTIVE


class JobService:
    """Service for job postings."""

    def __init__(
        self,
        jobs: JobRepository,
        candidates: CandidateRepository,
        change_feed: Optional[ChangeFeed] = None,
    ):
        self.jobs = jobs
        self.candidates = candidates
        self.change_feed = change_feed

    async def _publish(self, job_id: UUID) -> None:
        if self.change_feed is not None:
            await self.change_feed.publish(JOBS_TABLE, {"id": str(job_id)})

    async def list_jobs(self, limit: int = 100, offset: int = 0, status: Optional[str] = None) -> List[Any]:
        return await self.jobs.list(limit=limit, offset=offset, status=status)

    async def list_open_jobs(self) -> List[Any]:
        """Jobs shown on the public careers page."""
        return await self.jobs.list(status=CAREERS_STATUS)

    async def get_job(self, job_id: UUID):
        job = await self.jobs.get_by_id(job_id)
        if job is None:
            raise NotFoundError("job", job_id)
        return job

    async def get_detail(self, job_id: UUID, user_id: Optional[str] = None) -> JobDetail:
        job = await self.get_job(job_id)
        return JobDetail(
            job=job,
            effective_stages=stage_service.effective_stages(stages_from_json(job.stages)),
            candidate_count=await self.candidates.count_by_job(job_id),
            is_owner=is_owner(job, user_id),
        )

    async def _get_owned(self, job_id: UUID, user_id: Optional[str]):
        job = await self.get_job(job_id)
        if not is_owner(job, user_id):
            raise PermissionDeniedError(
                "Only the job owner can change this job",
                {"job_id": str(job_id)},
            )
        return job

    async def create_job(self, data: JobCreate, user_id: Optional[str]):
        stages = stage_service.validate_stage_list(list(data.stages or DEFAULT_STAGES))
        fields = data.model_dump(exclude={"stages", "status"})
        job = await self.jobs.create(
            **fields,
            status=data.status or DEFAULT_JOB_STATUS,
            stages=stages_to_json(stages),
            created_by=user_id,
        )
        await self.jobs.commit()
        await self._publish(job.id)
        logger.info("Job %s created by %s", job.id, user_id)
        return job

    async def update_job(self, job_id: UUID, data: JobUpdate, user_id: Optional[str]):
        await self._get_owned(job_id, user_id)
        values = data.model_dump(exclude_unset=True, exclude={"stages"})
        if data.stages is not None:
            values["stages"] = stages_to_json(stage_service.validate_stage_list(list(data.stages)))
        job = await self.jobs.update(job_id, values)
        if job is None:
            raise NotFoundError("job", job_id)
        await self.jobs.commit()
        await self._publish(job_id)
        return job

    async def delete_job(self, job_id: UUID, user_id: Optional[str]) -> None:
        """Delete a job and (through the FK cascade) all its candidates."""
        await self._get_owned(job_id, user_id)
        if not await self.jobs.delete(job_id):
            raise NotFoundError("job", job_id)
        await self.jobs.commit()
        await self._publish(job_id)
        logger.info("Job %s deleted by %s", job_id, user_id)

    async def toggle_status(self, job_id: UUID, user_id: Optional[str]):
        job = await self._get_owned(job_id, user_id)
        new_status = toggled_status(job.status)
        job = await self.jobs.update(job_id, {"status": new_status})
        await self.jobs.commit()
        await self._publish(job_id)
        logger.info("Job %s status set to %s", job_id, new_status)
        return job

    async def edit_stages(self, job_id: UUID, edit: StageEditRequest, user_id: Optional[str]):
        """Apply one stage-manager edit to the job's stage list."""
        job = await self._get_owned(job_id, user_id)
        stages = stage_service.effective_stages(stages_from_json(job.stages))

        if edit.action == "add":
            stages = stage_service.add_stage(stages, edit.label or "", edit.color or DEFAULT_STAGE_COLOR)
        else:
            if edit.index is None:
                raise ValidationError("Stage index is required", {"action": edit.action})
            if edit.action == "remove":
                stages = stage_service.remove_stage(stages, edit.index)
            elif edit.action == "relabel":
                stages = stage_service.relabel_stage(stages, edit.index, edit.label or "")
            else:
                stages = stage_service.recolor_stage(stages, edit.index, edit.color or "")

        stage_service.validate_stage_list(stages)
        job = await self.jobs.update(job_id, {"stages": stages_to_json(stages)})
        await self.jobs.commit()
        await self._publish(job_id)
        return job
