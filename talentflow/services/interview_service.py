"""
Interview scheduling.
"""

import logging
from typing import List, Optional
from uuid import UUID

from talentflow.repositories.candidate_repository import CandidateRepository
from talentflow.repositories.interview_repository import InterviewRepository
from talentflow.schemas.interview import InterviewCreate
from talentflow.services.change_feed import ACTIVITIES_TABLE, ChangeFeed
from talentflow.services.exceptions import NotFoundError, ValidationError
from talentflow.services.ports import ActivityLog
from talentflow.utils.time import ensure_aware

logger = logging.getLogger(__name__)

INTERVIEW_TYPES = ("phone", "video", "in-person")
DURATION_STEP_MINUTES = 15
SCHEDULED = "scheduled"


def validate_interview(data: InterviewCreate) -> None:
    if data.interview_type not in INTERVIEW_TYPES:
        raise ValidationError(
            f"Unknown interview type '{data.interview_type}'",
            {"allowed": list(INTERVIEW_TYPES)},
        )
    if data.duration_minutes < DURATION_STEP_MINUTES or data.duration_minutes % DURATION_STEP_MINUTES:
        raise ValidationError(
            "Duration must be a multiple of 15 minutes",
            {"duration_minutes": data.duration_minutes},
        )


class InterviewService:
    def __init__(
        self,
        interviews: InterviewRepository,
        candidates: CandidateRepository,
        activity_log: Optional[ActivityLog] = None,
        change_feed: Optional[ChangeFeed] = None,
    ):
        self.interviews = interviews
        self.candidates = candidates
        self.activity_log = activity_log
        self.change_feed = change_feed

    async def schedule(self, candidate_id: UUID, data: InterviewCreate, actor: Optional[str] = None):
        validate_interview(data)
        if await self.candidates.get_by_id(candidate_id) is None:
            raise NotFoundError("candidate", candidate_id)

        scheduled_at = ensure_aware(data.scheduled_at)
        interview = await self.interviews.create(
            candidate_id=candidate_id,
            interviewer_id=actor,
            scheduled_at=scheduled_at,
            interview_type=data.interview_type,
            duration_minutes=data.duration_minutes,
            location=data.location,
            meeting_link=data.meeting_link,
            notes=data.notes,
            status=SCHEDULED,
        )
        await self.interviews.commit()
        logger.info("Interview %s scheduled for candidate %s", interview.id, candidate_id)

        if self.activity_log is not None:
            try:
                await self.activity_log.append(
                    candidate_id,
                    "interview",
                    f"{data.interview_type.capitalize()} interview scheduled for {scheduled_at:%Y-%m-%d %H:%M} UTC",
                    created_by=actor,
                )
                await self.activity_log.commit()
            except Exception as exc:  # noqa: BLE001
                logger.warning("Could not record interview activity for candidate %s: %s", candidate_id, exc)
            else:
                if self.change_feed is not None:
                    await self.change_feed.publish(ACTIVITIES_TABLE, {"candidate_id": str(candidate_id)})
        return interview

    async def list_for_candidate(self, candidate_id: UUID) -> List:
        return await self.interviews.list_for_candidate(candidate_id)

    async def count_scheduled(self) -> int:
        return await self.interviews.count_by_status(SCHEDULED)
