"""
Jobs router - recruiter endpoints for job postings and their stage lists.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from talentflow.core.dependencies import (
    get_candidate_service,
    get_current_user_id,
    get_job_service,
    get_optional_user_id,
)
from talentflow.schemas.candidate import CandidateRead
from talentflow.schemas.job import JobCreate, JobDetailRead, JobRead, JobUpdate, StageEditRequest
from talentflow.services.candidate_service import CandidateFilter, CandidateService
from talentflow.services.job_service import JobService

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=List[JobRead])
async def list_jobs(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    status: Optional[str] = None,
    service: JobService = Depends(get_job_service),
):
    """List jobs, newest first."""
    return await service.list_jobs(limit=limit, offset=offset, status=status)


@router.post("", response_model=JobRead, status_code=status.HTTP_201_CREATED)
async def create_job(
    data: JobCreate,
    user_id: str = Depends(get_current_user_id),
    service: JobService = Depends(get_job_service),
):
    """Create a job. Stages default to the standard five-stage pipeline."""
    return await service.create_job(data, user_id)


@router.get("/{job_id}", response_model=JobDetailRead)
async def get_job(
    job_id: UUID,
    user_id: Optional[str] = Depends(get_optional_user_id),
    service: JobService = Depends(get_job_service),
):
    """Job details with its effective stage list, candidate count and ownership."""
    detail = await service.get_detail(job_id, user_id)
    return JobDetailRead(
        **JobRead.model_validate(detail.job).model_dump(),
        effective_stages=detail.effective_stages,
        candidate_count=detail.candidate_count,
        is_owner=detail.is_owner,
    )


@router.put("/{job_id}", response_model=JobRead)
async def update_job(
    job_id: UUID,
    data: JobUpdate,
    user_id: str = Depends(get_current_user_id),
    service: JobService = Depends(get_job_service),
):
    return await service.update_job(job_id, data, user_id)


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job(
    job_id: UUID,
    user_id: str = Depends(get_current_user_id),
    service: JobService = Depends(get_job_service),
):
    """Delete a job and all of its candidates. Owner only."""
    await service.delete_job(job_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{job_id}/status", response_model=JobRead)
async def toggle_job_status(
    job_id: UUID,
    user_id: str = Depends(get_current_user_id),
    service: JobService = Depends(get_job_service),
):
    """Close an active job or re-activate a closed one. Owner only."""
    return await service.toggle_status(job_id, user_id)


@router.post("/{job_id}/stages", response_model=JobRead)
async def edit_job_stages(
    job_id: UUID,
    edit: StageEditRequest,
    user_id: str = Depends(get_current_user_id),
    service: JobService = Depends(get_job_service),
):
    """Add, remove, rename or recolour one pipeline stage."""
    return await service.edit_stages(job_id, edit, user_id)


@router.get("/{job_id}/candidates", response_model=List[CandidateRead])
async def list_job_candidates(
    job_id: UUID,
    job_service: JobService = Depends(get_job_service),
    candidate_service: CandidateService = Depends(get_candidate_service),
):
    """Candidates of one job, for the pipeline board."""
    await job_service.get_job(job_id)
    return await candidate_service.list_candidates(CandidateFilter(job_id=job_id), limit=1000)
