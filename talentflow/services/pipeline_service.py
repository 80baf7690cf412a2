"""
Candidate pipeline: stage transitions and the other scalar mutations.

A stage move has exactly one required effect, persisting the new
``current_stage``. The email notice and the activity entry that follow are
best-effort: their failures are logged and reported on the result object,
never raised, and never undo the stage change.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence
from uuid import UUID

from talentflow.services.change_feed import ACTIVITIES_TABLE, CANDIDATES_TABLE, ChangeFeed
from talentflow.services.exceptions import NotFoundError, ValidationError
from talentflow.services.ports import ActivityLog, CandidateRecord, CandidateStore, JobStore, Notifier

logger = logging.getLogger(__name__)

DEFAULT_JOB_TITLE = "Position"
MIN_RATING = 0
MAX_RATING = 5


class TransitionTrigger(str, enum.Enum):
    DRAG_DROP = "drag_drop"
    DETAIL_VIEW = "detail_view"
    BULK = "bulk"


# Bulk moves do not write timeline entries.
ACTIVITY_RECORDING_TRIGGERS: FrozenSet[TransitionTrigger] = frozenset(
    {TransitionTrigger.DRAG_DROP, TransitionTrigger.DETAIL_VIEW}
)


@dataclass
class TransitionResult:
    candidate_id: UUID
    old_stage: Optional[str]
    new_stage: str
    changed: bool
    notified: bool = False
    notification_error: Optional[str] = None
    activity_recorded: bool = False


@dataclass
class BulkResult:
    requested: int
    updated: int
    notifications_sent: int = 0
    notification_failures: Dict[str, str] = field(default_factory=dict)
    verb: str = "Updated"

    @property
    def message(self) -> str:
        if self.updated == self.requested:
            return f"{self.verb} {self.updated} candidate(s)"
        return f"{self.verb} {self.updated} of {self.requested} candidate(s)"


@dataclass
class _NoticeTarget:
    candidate_id: UUID
    name: str
    email: str
    old_stage: Optional[str]
    job_title: str


def _validate_stage(stage: str) -> str:
    stage = (stage or "").strip()
    if not stage:
        raise ValidationError("Please select a stage")
    return stage


def validate_rating(rating: int) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(
            f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}",
            {"rating": rating},
        )
    return rating


def _dedupe(candidate_ids: Iterable[UUID]) -> List[UUID]:
    return list(dict.fromkeys(candidate_ids))


class PipelineService:
    """Mediates every change to a candidate's stage, rating and notes."""

    def __init__(
        self,
        candidates: CandidateStore,
        jobs: JobStore,
        notifier: Notifier,
        activity_log: ActivityLog,
        change_feed: Optional[ChangeFeed] = None,
        activity_triggers: FrozenSet[TransitionTrigger] = ACTIVITY_RECORDING_TRIGGERS,
    ):
        self.candidates = candidates
        self.jobs = jobs
        self.notifier = notifier
        self.activity_log = activity_log
        self.change_feed = change_feed
        self.activity_triggers = activity_triggers

    async def _job_title(self, job_id: Optional[UUID], cache: Optional[Dict[UUID, str]] = None) -> str:
        if job_id is None:
            return DEFAULT_JOB_TITLE
        if cache is not None and job_id in cache:
            return cache[job_id]
        job = await self.jobs.get_by_id(job_id)
        title = job.title if job is not None and job.title else DEFAULT_JOB_TITLE
        if cache is not None:
            cache[job_id] = title
        return title

    async def _get_candidate(self, candidate_id: UUID) -> CandidateRecord:
        candidate = await self.candidates.get_by_id(candidate_id)
        if candidate is None:
            raise NotFoundError("candidate", candidate_id)
        return candidate

    async def _publish(self, table: str, row: Dict[str, str]) -> None:
        if self.change_feed is not None:
            await self.change_feed.publish(table, row)

    async def _notify(self, target: _NoticeTarget, new_stage: str) -> None:
        await self.notifier.notify_stage_change(
            candidate_name=target.name,
            candidate_email=target.email,
            old_stage=target.old_stage,
            new_stage=new_stage,
            job_title=target.job_title,
        )

    async def move_candidate(
        self,
        candidate_id: UUID,
        new_stage: str,
        trigger: TransitionTrigger = TransitionTrigger.DETAIL_VIEW,
        actor: Optional[str] = None,
    ) -> TransitionResult:
        """Move one candidate (pipeline drop or detail page)."""
        new_stage = _validate_stage(new_stage)
        candidate = await self._get_candidate(candidate_id)
        old_stage = candidate.current_stage

        if old_stage == new_stage:
            return TransitionResult(candidate_id, old_stage, new_stage, changed=False)

        target = _NoticeTarget(
            candidate_id=candidate_id,
            name=candidate.full_name,
            email=candidate.email,
            old_stage=old_stage,
            job_title=await self._job_title(candidate.job_id),
        )

        # Required step; any PersistenceError propagates and nothing else runs.
        updated = await self.candidates.update_stage(candidate_id, new_stage)
        if updated is None:
            raise NotFoundError("candidate", candidate_id)
        await self.candidates.commit()
        await self._publish(CANDIDATES_TABLE, {"id": str(candidate_id), "job_id": str(candidate.job_id)})
        logger.info("Candidate %s moved %s -> %s (%s)", candidate_id, old_stage, new_stage, trigger.value)

        result = TransitionResult(candidate_id, old_stage, new_stage, changed=True)

        try:
            await self._notify(target, new_stage)
            result.notified = True
        except Exception as exc:  # noqa: BLE001
            logger.warning("Stage updated but email notification failed for candidate %s: %s", candidate_id, exc)
            result.notification_error = str(exc) or exc.__class__.__name__

        if trigger in self.activity_triggers:
            result.activity_recorded = await self._record_stage_activity(candidate_id, old_stage, new_stage, actor)

        return result

    async def _record_stage_activity(
        self,
        candidate_id: UUID,
        old_stage: Optional[str],
        new_stage: str,
        actor: Optional[str],
    ) -> bool:
        try:
            await self.activity_log.append(
                candidate_id,
                "stage_change",
                f"Stage changed from {old_stage or 'none'} to {new_stage}",
                created_by=actor,
            )
            await self.activity_log.commit()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not record stage change activity for candidate %s: %s", candidate_id, exc)
            return False
        await self._publish(ACTIVITIES_TABLE, {"candidate_id": str(candidate_id)})
        return True

    async def bulk_move(
        self,
        candidate_ids: Sequence[UUID],
        new_stage: str,
        actor: Optional[str] = None,
    ) -> BulkResult:
        """
        Apply one target stage to a selection.

        The stage update is a single batch call; if it fails the whole bulk
        action fails. Notifications then run concurrently and every outcome
        is collected (settle-all), so one failed email never aborts the rest.
        """
        ids = _dedupe(candidate_ids)
        if not ids:
            raise ValidationError("Please select candidates and a stage")
        new_stage = _validate_stage(new_stage)

        existing = await self.candidates.list_by_ids(ids)
        titles: Dict[UUID, str] = {}
        targets = []
        for candidate in existing:
            targets.append(
                _NoticeTarget(
                    candidate_id=candidate.id,
                    name=candidate.full_name,
                    email=candidate.email,
                    old_stage=candidate.current_stage,
                    job_title=await self._job_title(candidate.job_id, titles),
                )
            )

        updated = await self.candidates.update_stage_many(ids, new_stage)
        await self.candidates.commit()
        await self._publish(CANDIDATES_TABLE, {"stage": new_stage})
        logger.info("Bulk stage update to %s: %d of %d candidates", new_stage, updated, len(ids))

        result = BulkResult(requested=len(ids), updated=updated)

        outcomes = await asyncio.gather(
            *(self._notify(target, new_stage) for target in targets),
            return_exceptions=True,
        )
        for target, outcome in zip(targets, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning("Email notification failed for candidate %s: %s", target.candidate_id, outcome)
                result.notification_failures[str(target.candidate_id)] = str(outcome) or outcome.__class__.__name__
            else:
                result.notifications_sent += 1

        return result

    async def update_rating(self, candidate_id: UUID, rating: int) -> CandidateRecord:
        rating = validate_rating(rating)
        candidate = await self.candidates.update_rating(candidate_id, rating)
        if candidate is None:
            raise NotFoundError("candidate", candidate_id)
        await self.candidates.commit()
        await self._publish(CANDIDATES_TABLE, {"id": str(candidate_id)})
        return candidate

    async def bulk_update_rating(self, candidate_ids: Sequence[UUID], rating: int) -> BulkResult:
        ids = _dedupe(candidate_ids)
        if not ids:
            raise ValidationError("Please select candidates and a rating")
        rating = validate_rating(rating)
        updated = await self.candidates.update_rating_many(ids, rating)
        await self.candidates.commit()
        await self._publish(CANDIDATES_TABLE, {"rating": str(rating)})
        return BulkResult(requested=len(ids), updated=updated)

    async def update_notes(self, candidate_id: UUID, notes: str) -> CandidateRecord:
        candidate = await self.candidates.update_notes(candidate_id, notes or "")
        if candidate is None:
            raise NotFoundError("candidate", candidate_id)
        await self.candidates.commit()
        await self._publish(CANDIDATES_TABLE, {"id": str(candidate_id)})
        return candidate

    async def bulk_delete(self, candidate_ids: Sequence[UUID]) -> BulkResult:
        ids = _dedupe(candidate_ids)
        if not ids:
            raise ValidationError("Please select candidates to delete")
        deleted = await self.candidates.delete_many(ids)
        await self.candidates.commit()
        await self._publish(CANDIDATES_TABLE, {})
        logger.info("Deleted %d of %d candidates", deleted, len(ids))
        return BulkResult(requested=len(ids), updated=deleted, verb="Deleted")

    async def add_note(self, candidate_id: UUID, description: str, actor: Optional[str] = None) -> object:
        """Write a 'note' entry on the candidate's timeline."""
        description = (description or "").strip()
        if not description:
            raise ValidationError("Note must not be empty")
        await self._get_candidate(candidate_id)
        activity = await self.activity_log.append(candidate_id, "note", description, created_by=actor)
        await self.activity_log.commit()
        await self._publish(ACTIVITIES_TABLE, {"candidate_id": str(candidate_id)})
        return activity
