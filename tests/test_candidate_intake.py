"""Applications, manual candidate creation, resumes and list filters."""

import asyncio
import uuid
from pathlib import Path

import pytest

from talentflow.schemas.candidate import ApplicationCreate, CandidateCreate
from talentflow.schemas.stage import Stage
from talentflow.services.candidate_service import (
    CandidateFilter,
    CandidateService,
    ResumeUpload,
    apply_filters,
    validate_contact_fields,
)
from talentflow.services.change_feed import CANDIDATES_TABLE, ChangeFeed
from talentflow.services.exceptions import NotFoundError, PersistenceError, ValidationError
from talentflow.services.storage_service import LocalFileStorage, resume_path, validate_resume


pytestmark = pytest.mark.unit

PDF = "application/pdf"


@pytest.fixture
def service(candidate_store, job_store, storage):
    return CandidateService(candidate_store, job_store, storage, change_feed=ChangeFeed())


def application(**overrides):
    fields = {"full_name": "Ada Lovelace", "email": "ada@example.com", "phone": "555-0100"}
    fields.update(overrides)
    return ApplicationCreate(**fields)


def test_contact_validation_messages():
    with pytest.raises(ValidationError) as exc_info:
        validate_contact_fields("Ada", "ada@example.com", "  ")
    assert str(exc_info.value) == "Please fill in all required fields"

    for bad in ("ada", "ada@example", "a da@example.com", "@example.com"):
        with pytest.raises(ValidationError) as exc_info:
            validate_contact_fields("Ada", bad, "555")
        assert str(exc_info.value) == "Please enter a valid email address"

    validate_contact_fields("Ada", "ada@mail.example.co", "555")


def test_resume_validation():
    validate_resume(PDF, 1024, max_bytes=5 * 1024 * 1024)

    with pytest.raises(ValidationError) as exc_info:
        validate_resume("image/png", 10)
    assert str(exc_info.value) == "Please upload a PDF or Word document"

    with pytest.raises(ValidationError) as exc_info:
        validate_resume(PDF, 5 * 1024 * 1024 + 1, max_bytes=5 * 1024 * 1024)
    assert str(exc_info.value) == "File size must be less than 5MB"


def test_resume_path_uses_timestamp_and_name():
    assert resume_path("Ada  King Lovelace", "CV.Final.PDF", now_ms=1700000000000) == (
        "resumes/1700000000000_Ada_King_Lovelace.pdf"
    )


def test_application_lands_in_applied_with_zero_rating(service, candidate_store, storage, make_job):
    job = make_job(status="open", title="Data Engineer")
    resume = ResumeUpload(filename="cv.pdf", content_type=PDF, data=b"%PDF-1.4")

    candidate = asyncio.run(service.submit_application(job.id, application(full_name=" Ada Lovelace "), resume))

    assert candidate.current_stage == "applied"
    assert candidate.rating == 0
    assert candidate.full_name == "Ada Lovelace"
    assert candidate.job_title == "Data Engineer"
    assert candidate.resume_url.startswith("/files/resumes/")
    assert candidate.resume_url.endswith("_Ada_Lovelace.pdf")
    assert len(storage.uploads) == 1


def test_application_accepts_active_jobs_and_rejects_closed(service, make_job):
    active = make_job(status="active")
    asyncio.run(service.submit_application(active.id, application()))

    closed = make_job(status="closed")
    with pytest.raises(ValidationError) as exc_info:
        asyncio.run(service.submit_application(closed.id, application()))
    assert str(exc_info.value) == "This job is no longer accepting applications"

    with pytest.raises(NotFoundError):
        asyncio.run(service.submit_application(uuid.uuid4(), application()))


def test_invalid_resume_rejects_application_before_upload(service, candidate_store, storage, make_job):
    job = make_job()
    resume = ResumeUpload(filename="photo.png", content_type="image/png", data=b"x")

    with pytest.raises(ValidationError):
        asyncio.run(service.submit_application(job.id, application(), resume))

    assert storage.uploads == []
    assert candidate_store.rows == {}


def test_upload_failure_still_saves_candidate(service, candidate_store, storage, make_job):
    storage.fail = True
    job = make_job()

    candidate = asyncio.run(
        service.submit_application(job.id, application(), ResumeUpload("cv.pdf", PDF, b"%PDF"))
    )

    assert candidate.resume_url is None
    assert candidate.id in candidate_store.rows


def test_recruiter_create_keeps_stage_and_publishes(candidate_store, job_store, storage, make_job):
    feed = ChangeFeed()
    seen = []
    feed.subscribe(CANDIDATES_TABLE, seen.append)
    service = CandidateService(candidate_store, job_store, storage, change_feed=feed)
    job = make_job()

    data = CandidateCreate(full_name="Grace", email="grace@example.com", phone="1", job_id=job.id, current_stage="interview", rating=3)
    candidate = asyncio.run(service.create_candidate(data))

    assert candidate.current_stage == "interview"
    assert candidate.rating == 3
    assert seen == [{"job_id": str(job.id)}]

    with pytest.raises(NotFoundError):
        asyncio.run(service.create_candidate(data.model_copy(update={"job_id": uuid.uuid4()})))


def test_recruiter_create_rejects_rating_outside_range(service, candidate_store, storage, make_job):
    job = make_job()
    data = CandidateCreate(full_name="Grace", email="grace@example.com", phone="1", job_id=job.id, rating=9)

    with pytest.raises(ValidationError) as exc_info:
        asyncio.run(service.create_candidate(data, ResumeUpload("cv.pdf", PDF, b"%PDF")))

    assert exc_info.value.details == {"rating": 9}
    assert candidate_store.rows == {}
    assert storage.uploads == []


def test_candidate_changes_publish_only_after_commit(candidate_store, job_store, storage, make_job):
    feed = ChangeFeed()
    commits_at_publish = []
    feed.subscribe(CANDIDATES_TABLE, lambda row: commits_at_publish.append(candidate_store.commits))
    service = CandidateService(candidate_store, job_store, storage, change_feed=feed)
    job = make_job(status="open")

    asyncio.run(service.create_candidate(CandidateCreate(full_name="Grace", email="grace@example.com", phone="1", job_id=job.id)))
    asyncio.run(service.submit_application(job.id, application()))
    assert commits_at_publish == [1, 2]

    candidate_store.fail_commit = True
    with pytest.raises(PersistenceError):
        asyncio.run(service.submit_application(job.id, application(email="late@example.com")))
    assert commits_at_publish == [1, 2]


def test_detail_falls_back_to_first_stage(service, make_job, make_candidate):
    job = make_job(stages=[{"id": "sourced", "label": "Sourced", "color": "bg-blue-500"}])
    candidate = make_candidate(job_id=job.id, current_stage="screening")

    detail = asyncio.run(service.get_detail(candidate.id))

    assert [s.id for s in detail.stages] == ["sourced"]
    assert detail.display_stage == Stage(id="sourced", label="Sourced", color="bg-blue-500")


def test_filters_combine_with_and(make_candidate):
    job_a, job_b = uuid.uuid4(), uuid.uuid4()
    rows = [
        make_candidate(full_name="Ada Lovelace", email="ada@example.com", job_id=job_a, current_stage="interview", rating=4),
        make_candidate(full_name="Grace Hopper", email="grace@navy.mil", job_id=job_a, current_stage="interview", rating=2),
        make_candidate(full_name="Alan Turing", email="alan@example.com", job_id=job_b, current_stage="applied", rating=5),
    ]

    def names(f):
        return [c.full_name for c in apply_filters(rows, f)]

    assert names(CandidateFilter(search="EXAMPLE")) == ["Ada Lovelace", "Alan Turing"]
    assert names(CandidateFilter(job_id=job_a, min_rating=3)) == ["Ada Lovelace"]
    assert names(CandidateFilter(stage="all", min_rating=0)) == ["Ada Lovelace", "Grace Hopper", "Alan Turing"]
    assert names(CandidateFilter(search="navy", stage="applied")) == []


def test_list_candidates_passes_normalized_filter(service, make_candidate):
    make_candidate(full_name="Ada", current_stage="offer")
    make_candidate(full_name="Bob", current_stage="applied")

    rows = asyncio.run(service.list_candidates(CandidateFilter(search="  ", stage="offer")))

    assert [c.full_name for c in rows] == ["Ada"]


def test_local_storage_writes_under_root(tmp_path: Path):
    storage = LocalFileStorage(root=str(tmp_path), public_base_url="https://files.test/")

    url = asyncio.run(storage.upload("resumes/1_Ada.pdf", b"data", PDF))

    assert url == "https://files.test/resumes/1_Ada.pdf"
    assert (tmp_path / "resumes" / "1_Ada.pdf").read_bytes() == b"data"

    with pytest.raises(ValidationError):
        asyncio.run(storage.upload("../escape.pdf", b"x", PDF))
