"""
CandidateActivity repository - append-only timeline storage.
"""

import logging
from typing import List, Optional
from uuid import UUID
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from talentflow.models.activity import CandidateActivity
from talentflow.services.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class ActivityRepository:
    """Repository for CandidateActivity rows. There is no update or delete."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def append(
        self,
        candidate_id: UUID,
        activity_type: str,
        description: str,
        created_by: Optional[str] = None,
    ) -> CandidateActivity:
        activity = CandidateActivity(
            id=uuid.uuid4(),
            candidate_id=candidate_id,
            activity_type=activity_type,
            description=description,
            created_by=created_by,
        )
        # Savepoint, so a failed insert leaves the outer transaction usable
        try:
            async with self.db.begin_nested():
                self.db.add(activity)
                await self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to record activity", {"candidate_id": str(candidate_id), "reason": str(exc)}) from exc
        return activity
    
    async def list_for_candidate(self, candidate_id: UUID, limit: int = 100) -> List[CandidateActivity]:
        """Timeline entries, newest first."""
        result = await self.db.execute(
            select(CandidateActivity)
            .where(CandidateActivity.candidate_id == candidate_id)
            .order_by(CandidateActivity.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
    
    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise PersistenceError("Failed to save activity", {"reason": str(exc)}) from exc
