"""
Pytest configuration and shared fixtures.

The fakes below stand in for the SQLAlchemy repositories, the email
notifier and the file storage so service and API tests run without a
database or network.
"""

import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from talentflow.services.exceptions import NotificationError, PersistenceError


BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: requires database")
    config.addinivalue_line("markers", "server: requires running HTTP server")


def pytest_collection_modifyitems(config, items):
    run_db = os.environ.get("RUN_DB_TESTS") == "1"
    run_server = os.environ.get("RUN_SERVER_TESTS") == "1"

    skip_db = pytest.mark.skip(reason="db tests skipped by default; set RUN_DB_TESTS=1 to enable")
    skip_server = pytest.mark.skip(reason="server tests skipped by default; set RUN_SERVER_TESTS=1 to enable")

    for item in items:
        if "db" in item.keywords and not run_db:
            item.add_marker(skip_db)
        if "server" in item.keywords and not run_server:
            item.add_marker(skip_server)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass
class FakeJob:
    title: str = "Backend Engineer"
    department: str = "Engineering"
    location: str = "Remote"
    employment_type: str = "full-time"
    description: str = "Build things"
    requirements: Optional[str] = None
    responsibilities: Optional[str] = None
    salary_range: Optional[str] = None
    status: str = "open"
    stages: Optional[list] = None
    created_by: Optional[str] = "recruiter-1"
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = BASE_TIME
    updated_at: datetime = BASE_TIME


@dataclass
class FakeCandidate:
    full_name: str = "Ada Lovelace"
    email: str = "ada@example.com"
    phone: Optional[str] = "555-0100"
    current_stage: str = "applied"
    rating: int = 0
    job_id: Optional[uuid.UUID] = None
    job_title: Optional[str] = None
    notes: Optional[str] = None
    resume_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    cover_letter: Optional[str] = None
    years_of_experience: Optional[int] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = BASE_TIME
    updated_at: datetime = BASE_TIME


@dataclass
class FakeActivity:
    candidate_id: uuid.UUID
    activity_type: str
    description: str
    created_by: Optional[str] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = BASE_TIME
    updated_at: datetime = BASE_TIME


@dataclass
class FakeTemplate:
    stage: str
    subject: str
    body_html: str
    is_active: bool = True
    created_by: Optional[str] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = BASE_TIME
    updated_at: datetime = BASE_TIME


@dataclass
class FakeInterview:
    candidate_id: uuid.UUID
    scheduled_at: datetime
    interview_type: str
    status: str = "scheduled"
    interviewer_id: Optional[str] = None
    duration_minutes: Optional[int] = 60
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    notes: Optional[str] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = BASE_TIME
    updated_at: datetime = BASE_TIME


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

class InMemoryJobStore:
    def __init__(self):
        self.rows: Dict[uuid.UUID, FakeJob] = {}
        self.commits = 0

    def add(self, job: FakeJob) -> FakeJob:
        self.rows[job.id] = job
        return job

    async def list(self, limit=100, offset=0, status=None, order_by_title=False):
        rows = [j for j in self.rows.values() if status is None or j.status == status]
        rows.sort(key=lambda j: j.title if order_by_title else j.created_at, reverse=not order_by_title)
        return rows[offset:offset + limit]

    async def get_by_id(self, job_id):
        return self.rows.get(job_id)

    async def count_by_status(self, statuses):
        statuses = set(statuses)
        return sum(1 for j in self.rows.values() if j.status in statuses)

    async def count_all(self):
        return len(self.rows)

    async def create(self, **fields):
        return self.add(FakeJob(**fields))

    async def update(self, job_id, values):
        job = self.rows.get(job_id)
        if job is None:
            return None
        for key, value in values.items():
            setattr(job, key, value)
        return job

    async def delete(self, job_id):
        return self.rows.pop(job_id, None) is not None

    async def commit(self):
        self.commits += 1


class InMemoryCandidateStore:
    """Implements the CandidateRepository surface over a dict."""

    def __init__(self, jobs: Optional[InMemoryJobStore] = None, clock=None):
        self.rows: Dict[uuid.UUID, FakeCandidate] = {}
        self.jobs = jobs
        self.clock = clock or (lambda: BASE_TIME + timedelta(days=1))
        self.commits = 0
        self.fail_updates = False
        self.fail_commit = False

    def add(self, candidate: FakeCandidate) -> FakeCandidate:
        if self.jobs is not None and candidate.job_id in self.jobs.rows and candidate.job_title is None:
            candidate.job_title = self.jobs.rows[candidate.job_id].title
        self.rows[candidate.id] = candidate
        return candidate

    def _check(self):
        if self.fail_updates:
            raise PersistenceError("Failed to update candidate")

    async def list(self, limit=200, offset=0, search=None, job_id=None, stage=None, min_rating=None):
        rows = list(self.rows.values())
        if search:
            needle = search.lower()
            rows = [c for c in rows if needle in c.full_name.lower() or needle in c.email.lower()]
        if job_id is not None:
            rows = [c for c in rows if c.job_id == job_id]
        if stage is not None:
            rows = [c for c in rows if c.current_stage == stage]
        if min_rating is not None:
            rows = [c for c in rows if c.rating >= min_rating]
        rows.sort(key=lambda c: c.created_at, reverse=True)
        return rows[offset:offset + limit]

    async def list_all(self):
        return list(self.rows.values())

    async def list_by_ids(self, candidate_ids):
        return [self.rows[i] for i in candidate_ids if i in self.rows]

    async def list_by_job(self, job_id):
        return [c for c in self.rows.values() if c.job_id == job_id]

    async def count_by_job(self, job_id):
        return len(await self.list_by_job(job_id))

    async def get_by_id(self, candidate_id):
        return self.rows.get(candidate_id)

    async def create(self, **fields):
        return self.add(FakeCandidate(**fields))

    async def _update_one(self, candidate_id, **values):
        self._check()
        candidate = self.rows.get(candidate_id)
        if candidate is None:
            return None
        for key, value in values.items():
            setattr(candidate, key, value)
        candidate.updated_at = self.clock()
        return candidate

    async def _update_many(self, candidate_ids, **values):
        self._check()
        count = 0
        for candidate_id in candidate_ids:
            if await self._update_one(candidate_id, **values) is not None:
                count += 1
        return count

    async def update_stage(self, candidate_id, stage):
        return await self._update_one(candidate_id, current_stage=stage)

    async def update_stage_many(self, candidate_ids, stage):
        return await self._update_many(candidate_ids, current_stage=stage)

    async def update_rating(self, candidate_id, rating):
        return await self._update_one(candidate_id, rating=rating)

    async def update_rating_many(self, candidate_ids, rating):
        return await self._update_many(candidate_ids, rating=rating)

    async def update_notes(self, candidate_id, notes):
        return await self._update_one(candidate_id, notes=notes)

    async def delete_many(self, candidate_ids):
        self._check()
        return sum(1 for i in candidate_ids if self.rows.pop(i, None) is not None)

    async def commit(self):
        if self.fail_commit:
            raise PersistenceError("Failed to save changes")
        self.commits += 1


class InMemoryActivityLog:
    def __init__(self):
        self.entries: List[FakeActivity] = []
        self.fail = False
        self.commits = 0

    async def append(self, candidate_id, activity_type, description, created_by=None):
        if self.fail:
            raise PersistenceError("Failed to record activity")
        entry = FakeActivity(candidate_id, activity_type, description, created_by)
        self.entries.append(entry)
        return entry

    async def list_for_candidate(self, candidate_id, limit=100):
        return [e for e in reversed(self.entries) if e.candidate_id == candidate_id][:limit]

    async def commit(self):
        self.commits += 1


class InMemoryTemplateStore:
    def __init__(self):
        self.rows: Dict[str, FakeTemplate] = {}
        self.lookups = 0

    async def list(self, active_only=False):
        rows = [t for t in self.rows.values() if t.is_active or not active_only]
        return sorted(rows, key=lambda t: t.stage)

    async def get_by_id(self, template_id):
        return next((t for t in self.rows.values() if t.id == template_id), None)

    async def get_by_stage(self, stage):
        return self.rows.get(stage)

    async def get_active_for_stage(self, stage):
        self.lookups += 1
        template = self.rows.get(stage)
        return template if template is not None and template.is_active else None

    async def upsert(self, stage, subject, body_html, is_active=True, created_by=None):
        template = self.rows.get(stage)
        if template is None:
            template = FakeTemplate(stage, subject, body_html, is_active, created_by)
            self.rows[stage] = template
        else:
            template.subject, template.body_html, template.is_active = subject, body_html, is_active
        return template


class InMemoryInterviewStore:
    def __init__(self):
        self.rows: List[FakeInterview] = []
        self.commits = 0

    async def create(self, **fields):
        interview = FakeInterview(**fields)
        self.rows.append(interview)
        return interview

    async def list_for_candidate(self, candidate_id):
        return sorted((i for i in self.rows if i.candidate_id == candidate_id), key=lambda i: i.scheduled_at)

    async def count_by_status(self, status):
        return sum(1 for i in self.rows if i.status == status)

    async def commit(self):
        self.commits += 1


class RecordingNotifier:
    """Notifier port fake; raises NotificationError for addresses in ``fail_for``."""

    def __init__(self, fail_for=()):
        self.calls: List[Dict[str, Any]] = []
        self.custom: List[Any] = []
        self.fail_for = set(fail_for)

    async def notify_stage_change(self, candidate_name, candidate_email, old_stage, new_stage, job_title):
        self.calls.append(
            {
                "candidate_name": candidate_name,
                "candidate_email": candidate_email,
                "old_stage": old_stage,
                "new_stage": new_stage,
                "job_title": job_title,
            }
        )
        if candidate_email in self.fail_for:
            raise NotificationError(f"Email provider rejected {candidate_email}")

    async def send_custom_email(self, email):
        if email.to in self.fail_for:
            raise NotificationError("Email provider rejected the message")
        self.custom.append(email)


class RecordingStorage:
    def __init__(self, fail=False):
        self.fail = fail
        self.uploads: List[str] = []

    async def upload(self, path, data, content_type):
        if self.fail:
            raise PersistenceError("Failed to store file", {"path": path})
        self.uploads.append(path)
        return f"/files/{path}"


class FakeSession:
    """Stands in for AsyncSession where routers only commit."""

    def __init__(self):
        self.commits = 0

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        pass

    async def close(self):
        pass


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def job_store():
    return InMemoryJobStore()


@pytest.fixture
def candidate_store(job_store):
    return InMemoryCandidateStore(job_store)


@pytest.fixture
def activity_log():
    return InMemoryActivityLog()


@pytest.fixture
def template_store():
    return InMemoryTemplateStore()


@pytest.fixture
def interview_store():
    return InMemoryInterviewStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def make_job(job_store):
    def _make(**fields):
        return job_store.add(FakeJob(**fields))
    return _make


@pytest.fixture
def make_candidate(candidate_store):
    def _make(**fields):
        return candidate_store.add(FakeCandidate(**fields))
    return _make


@pytest.fixture
def fake_session():
    return FakeSession()
