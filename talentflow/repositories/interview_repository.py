"""
Interview repository - database operations for Interview.
"""

import logging
from typing import List
from uuid import UUID
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from talentflow.models.interview import Interview
from talentflow.services.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class InterviewRepository:
    """Repository for Interview database operations."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def create(self, **fields) -> Interview:
        interview = Interview(id=uuid.uuid4(), **fields)
        self.db.add(interview)
        try:
            await self.db.flush()
            await self.db.refresh(interview)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to schedule interview", {"reason": str(exc)}) from exc
        return interview
    
    async def list_for_candidate(self, candidate_id: UUID) -> List[Interview]:
        result = await self.db.execute(
            select(Interview)
            .where(Interview.candidate_id == candidate_id)
            .order_by(Interview.scheduled_at.asc())
        )
        return list(result.scalars().all())
    
    async def count_by_status(self, status: str) -> int:
        result = await self.db.execute(
            select(func.count(Interview.id)).where(Interview.status == status)
        )
        return int(result.scalar_one())
    
    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error("Interview commit failed: %s", exc)
            raise PersistenceError("Failed to save interview", {"reason": str(exc)}) from exc
