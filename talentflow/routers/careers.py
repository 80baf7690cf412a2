"""
Careers router - public job board and application form.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from talentflow.core.dependencies import get_candidate_service, get_job_service
from talentflow.routers.uploads import read_resume
from talentflow.schemas.candidate import ApplicationCreate, CandidateRead
from talentflow.schemas.job import JobRead
from talentflow.services.candidate_service import CandidateService
from talentflow.services.job_service import JobService

router = APIRouter(prefix="/careers", tags=["careers"])


@router.get("/jobs", response_model=List[JobRead])
async def list_open_jobs(service: JobService = Depends(get_job_service)):
    """Jobs currently open for applications."""
    return await service.list_open_jobs()


@router.get("/jobs/{job_id}", response_model=JobRead)
async def get_open_job(job_id: UUID, service: JobService = Depends(get_job_service)):
    return await service.get_job(job_id)


@router.post("/jobs/{job_id}/apply", response_model=CandidateRead, status_code=status.HTTP_201_CREATED)
async def apply_to_job(
    job_id: UUID,
    full_name: str = Form(...),
    email: str = Form(...),
    phone: str = Form(...),
    linkedin_url: Optional[str] = Form(None),
    portfolio_url: Optional[str] = Form(None),
    cover_letter: Optional[str] = Form(None),
    years_of_experience: Optional[int] = Form(None),
    resume: Optional[UploadFile] = File(None),
    service: CandidateService = Depends(get_candidate_service),
):
    """Submit an application. The candidate starts in the 'applied' stage."""
    data = ApplicationCreate(
        full_name=full_name,
        email=email,
        phone=phone,
        linkedin_url=linkedin_url,
        portfolio_url=portfolio_url,
        cover_letter=cover_letter,
        years_of_experience=years_of_experience,
    )
    return await service.submit_application(job_id, data, await read_resume(resume))
