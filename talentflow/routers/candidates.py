"""
Candidates router - list, detail, pipeline moves, bulk actions and exports.
"""

import io
from dataclasses import asdict
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import StreamingResponse

from talentflow.core.dependencies import (
    get_activity_log,
    get_candidate_service,
    get_current_user_id,
    get_email_template_service,
    get_interview_service,
    get_notifier,
    get_pipeline_service,
)
from talentflow.routers.uploads import read_resume
from talentflow.schemas.activity import ActivityRead
from talentflow.schemas.candidate import (
    BulkDeleteRequest,
    BulkRatingRequest,
    BulkResultRead,
    BulkStageRequest,
    CandidateCreate,
    CandidateDetailRead,
    CandidateRead,
    NoteActivityRequest,
    NotesRequest,
    RatingRequest,
    StageChangeRequest,
    TransitionResultRead,
)
from talentflow.schemas.email_template import ComposeEmailRequest, CustomEmail, EmailSendResult
from talentflow.schemas.interview import InterviewCreate, InterviewRead
from talentflow.services import export_service
from talentflow.services.candidate_service import CandidateFilter, CandidateService, parse_job_filter
from talentflow.services.email_template_service import EmailTemplateService, prefill_custom_email
from talentflow.services.exceptions import NotificationError, ValidationError
from talentflow.services.interview_service import InterviewService
from talentflow.services.notification_service import EmailNotifier
from talentflow.services.pipeline_service import DEFAULT_JOB_TITLE, BulkResult, PipelineService, TransitionTrigger

router = APIRouter(prefix="/candidates", tags=["candidates"])

EXPORT_LIMIT = 10000


def candidate_filter(
    search: Optional[str] = None,
    job_id: Optional[str] = None,
    stage: Optional[str] = None,
    min_rating: Optional[int] = Query(None, ge=0, le=5),
) -> CandidateFilter:
    """Query-string filters shared by the list and export endpoints."""
    return CandidateFilter(search=search, job_id=parse_job_filter(job_id), stage=stage, min_rating=min_rating)


def _bulk_read(result: BulkResult) -> BulkResultRead:
    return BulkResultRead(
        requested=result.requested,
        updated=result.updated,
        message=result.message,
        notifications_sent=result.notifications_sent,
        notification_failures=result.notification_failures,
    )


@router.get("", response_model=List[CandidateRead])
async def list_candidates(
    filters: CandidateFilter = Depends(candidate_filter),
    limit: int = Query(200, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: CandidateService = Depends(get_candidate_service),
):
    """
    List candidates, newest first.

    Filters: search (name or email), job_id, stage, min_rating.
    """
    return await service.list_candidates(filters, limit=limit, offset=offset)


@router.post("", response_model=CandidateRead, status_code=status.HTTP_201_CREATED)
async def create_candidate(
    full_name: str = Form(...),
    email: str = Form(...),
    phone: str = Form(...),
    job_id: UUID = Form(...),
    linkedin_url: Optional[str] = Form(None),
    portfolio_url: Optional[str] = Form(None),
    cover_letter: Optional[str] = Form(None),
    years_of_experience: Optional[int] = Form(None),
    current_stage: str = Form("applied"),
    rating: int = Form(0),
    resume: Optional[UploadFile] = File(None),
    _user_id: str = Depends(get_current_user_id),
    service: CandidateService = Depends(get_candidate_service),
):
    """Add a candidate manually, optionally with a resume."""
    data = CandidateCreate(
        full_name=full_name,
        email=email,
        phone=phone,
        job_id=job_id,
        linkedin_url=linkedin_url,
        portfolio_url=portfolio_url,
        cover_letter=cover_letter,
        years_of_experience=years_of_experience,
        current_stage=current_stage,
        rating=rating,
    )
    return await service.create_candidate(data, await read_resume(resume))


@router.get("/export.csv")
async def export_candidates_csv(
    filters: CandidateFilter = Depends(candidate_filter),
    service: CandidateService = Depends(get_candidate_service),
):
    """Export the filtered candidate list as CSV."""
    candidates = await service.list_candidates(filters, limit=EXPORT_LIMIT)
    body = export_service.to_csv(candidates)

    stream = io.BytesIO(body.encode("utf-8"))
    filename = export_service.export_filename("csv")
    headers = {"Content-Disposition": f"attachment; filename={filename}"}
    return StreamingResponse(stream, media_type=export_service.CSV_MEDIA_TYPE, headers=headers)


@router.get("/export.xlsx")
async def export_candidates_xlsx(
    filters: CandidateFilter = Depends(candidate_filter),
    service: CandidateService = Depends(get_candidate_service),
):
    """Export the filtered candidate list as an Excel workbook."""
    candidates = await service.list_candidates(filters, limit=EXPORT_LIMIT)
    body = export_service.to_xlsx(candidates)

    filename = export_service.export_filename("xlsx")
    headers = {"Content-Disposition": f"attachment; filename={filename}"}
    return StreamingResponse(io.BytesIO(body), media_type=export_service.XLSX_MEDIA_TYPE, headers=headers)


@router.post("/bulk/stage", response_model=BulkResultRead)
async def bulk_move_candidates(
    payload: BulkStageRequest,
    user_id: str = Depends(get_current_user_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    """Move every selected candidate to one stage; emails are sent to each."""
    result = await service.bulk_move(payload.candidate_ids, payload.stage, actor=user_id)
    return _bulk_read(result)


@router.post("/bulk/rating", response_model=BulkResultRead)
async def bulk_rate_candidates(
    payload: BulkRatingRequest,
    _user_id: str = Depends(get_current_user_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    result = await service.bulk_update_rating(payload.candidate_ids, payload.rating)
    return _bulk_read(result)


@router.post("/bulk/delete", response_model=BulkResultRead)
async def bulk_delete_candidates(
    payload: BulkDeleteRequest,
    _user_id: str = Depends(get_current_user_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    result = await service.bulk_delete(payload.candidate_ids)
    return _bulk_read(result)


@router.get("/{candidate_id}", response_model=CandidateDetailRead)
async def get_candidate(
    candidate_id: UUID,
    service: CandidateService = Depends(get_candidate_service),
):
    """Candidate with the job's stages and the stage to show them in."""
    detail = await service.get_detail(candidate_id)
    return CandidateDetailRead(
        candidate=CandidateRead.model_validate(detail.candidate),
        stages=detail.stages,
        display_stage=detail.display_stage,
    )


@router.post("/{candidate_id}/stage", response_model=TransitionResultRead)
async def move_candidate(
    candidate_id: UUID,
    payload: StageChangeRequest,
    user_id: str = Depends(get_current_user_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    """
    Move one candidate to another stage.

    The stage change is saved first. A failed email is reported in
    ``notification_error`` and does not fail the request.
    """
    try:
        trigger = TransitionTrigger(payload.trigger)
    except ValueError as exc:
        raise ValidationError(
            f"Unknown trigger '{payload.trigger}'",
            {"allowed": [t.value for t in TransitionTrigger]},
        ) from exc
    result = await service.move_candidate(candidate_id, payload.stage, trigger=trigger, actor=user_id)
    return TransitionResultRead(**asdict(result))


@router.put("/{candidate_id}/rating", response_model=CandidateRead)
async def rate_candidate(
    candidate_id: UUID,
    payload: RatingRequest,
    _user_id: str = Depends(get_current_user_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    return await service.update_rating(candidate_id, payload.rating)


@router.put("/{candidate_id}/notes", response_model=CandidateRead)
async def update_candidate_notes(
    candidate_id: UUID,
    payload: NotesRequest,
    _user_id: str = Depends(get_current_user_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    return await service.update_notes(candidate_id, payload.notes)


@router.get("/{candidate_id}/activities", response_model=List[ActivityRead])
async def list_candidate_activities(
    candidate_id: UUID,
    candidates: CandidateService = Depends(get_candidate_service),
    activity_log=Depends(get_activity_log),
):
    """Timeline entries, newest first."""
    await candidates.get_candidate(candidate_id)
    return await activity_log.list_for_candidate(candidate_id)


@router.post("/{candidate_id}/notes/activity", response_model=ActivityRead, status_code=status.HTTP_201_CREATED)
async def add_candidate_note(
    candidate_id: UUID,
    payload: NoteActivityRequest,
    user_id: str = Depends(get_current_user_id),
    service: PipelineService = Depends(get_pipeline_service),
):
    return await service.add_note(candidate_id, payload.description, actor=user_id)


@router.get("/{candidate_id}/interviews", response_model=List[InterviewRead])
async def list_candidate_interviews(
    candidate_id: UUID,
    service: InterviewService = Depends(get_interview_service),
):
    return await service.list_for_candidate(candidate_id)


@router.post("/{candidate_id}/interviews", response_model=InterviewRead, status_code=status.HTTP_201_CREATED)
async def schedule_interview(
    candidate_id: UUID,
    payload: InterviewCreate,
    user_id: str = Depends(get_current_user_id),
    service: InterviewService = Depends(get_interview_service),
):
    return await service.schedule(candidate_id, payload, actor=user_id)


@router.post("/{candidate_id}/email", response_model=EmailSendResult)
async def send_candidate_email(
    candidate_id: UUID,
    payload: ComposeEmailRequest,
    _user_id: str = Depends(get_current_user_id),
    candidates: CandidateService = Depends(get_candidate_service),
    templates: EmailTemplateService = Depends(get_email_template_service),
    notifier: EmailNotifier = Depends(get_notifier),
):
    """
    Send a composed email to a candidate.

    With ``template_id`` the template's subject and body are used (with
    the candidate name and job title filled in) unless the request
    provides its own.
    """
    candidate = await candidates.get_candidate(candidate_id)
    subject, html = payload.subject or "", payload.html or ""

    if payload.template_id is not None:
        template = await templates.get_by_id(payload.template_id)
        prefilled = prefill_custom_email(
            template,
            candidate_name=candidate.full_name,
            job_title=candidate.job_title or DEFAULT_JOB_TITLE,
        )
        subject = subject or prefilled.subject
        html = html or prefilled.html

    email = CustomEmail(
        to=candidate.email,
        subject=subject,
        html=html,
        candidateName=candidate.full_name,
        candidateId=str(candidate_id),
    )
    try:
        await notifier.send_custom_email(email)
    except NotificationError as exc:
        return EmailSendResult(sent=False, error=str(exc))
    return EmailSendResult(sent=True)
