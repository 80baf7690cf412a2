"""
Collaborator interfaces for the pipeline engine.

The pipeline and analytics services only talk to these protocols. The
SQLAlchemy repositories, the email notifier and the activity repository
implement them for production; tests pass in-memory fakes.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Protocol, Sequence
from uuid import UUID


class CandidateRecord(Protocol):
    """The candidate attributes the pipeline reads."""

    id: UUID
    full_name: str
    email: str
    phone: Optional[str]
    current_stage: str
    rating: int
    job_id: Optional[UUID]
    created_at: datetime
    updated_at: datetime


class JobRecord(Protocol):
    id: UUID
    title: str
    status: str
    stages: Optional[list]
    created_by: Optional[str]


class CandidateStore(Protocol):
    """Durable candidate collection."""

    async def get_by_id(self, candidate_id: UUID) -> Optional[CandidateRecord]:
        ...

    async def list_by_ids(self, candidate_ids: Sequence[UUID]) -> List[CandidateRecord]:
        ...

    async def list_all(self) -> List[CandidateRecord]:
        ...

    async def update_stage(self, candidate_id: UUID, stage: str) -> Optional[CandidateRecord]:
        ...

    async def update_stage_many(self, candidate_ids: Sequence[UUID], stage: str) -> int:
        ...

    async def update_rating(self, candidate_id: UUID, rating: int) -> Optional[CandidateRecord]:
        ...

    async def update_rating_many(self, candidate_ids: Sequence[UUID], rating: int) -> int:
        ...

    async def update_notes(self, candidate_id: UUID, notes: str) -> Optional[CandidateRecord]:
        ...

    async def delete_many(self, candidate_ids: Sequence[UUID]) -> int:
        ...

    async def commit(self) -> None:
        """Make pending changes durable; raises PersistenceError on failure."""
        ...


class JobStore(Protocol):
    """Durable job collection."""

    async def get_by_id(self, job_id: UUID) -> Optional[JobRecord]:
        ...

    async def count_by_status(self, statuses: Iterable[str]) -> int:
        ...

    async def count_all(self) -> int:
        ...


class Notifier(Protocol):
    """Sends the stage-change email. Raises NotificationError on failure."""

    async def notify_stage_change(
        self,
        candidate_name: str,
        candidate_email: str,
        old_stage: Optional[str],
        new_stage: str,
        job_title: str,
    ) -> None:
        ...


class ActivityLog(Protocol):
    """Append-only activity record."""

    async def append(
        self,
        candidate_id: UUID,
        activity_type: str,
        description: str,
        created_by: Optional[str] = None,
    ) -> object:
        ...

    async def commit(self) -> None:
        ...


class InterviewStore(Protocol):
    async def count_by_status(self, status: str) -> int:
        ...
