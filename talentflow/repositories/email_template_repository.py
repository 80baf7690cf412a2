"""
EmailTemplate repository.
"""

from typing import List, Optional
from uuid import UUID
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func

from talentflow.models.email_template import EmailTemplate
from talentflow.services.exceptions import PersistenceError


class EmailTemplateRepository:
    """Repository for EmailTemplate database operations."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def list(self, active_only: bool = False) -> List[EmailTemplate]:
        query = select(EmailTemplate)
        if active_only:
            query = query.where(EmailTemplate.is_active.is_(True))
        result = await self.db.execute(query.order_by(EmailTemplate.stage.asc()))
        return list(result.scalars().all())
    
    async def get_by_id(self, template_id: UUID) -> Optional[EmailTemplate]:
        result = await self.db.execute(
            select(EmailTemplate).where(EmailTemplate.id == template_id)
        )
        return result.scalar_one_or_none()
    
    async def get_by_stage(self, stage: str) -> Optional[EmailTemplate]:
        result = await self.db.execute(
            select(EmailTemplate).where(EmailTemplate.stage == stage)
        )
        return result.scalar_one_or_none()
    
    async def get_active_for_stage(self, stage: str) -> Optional[EmailTemplate]:
        """The template the notifier uses for a stage, if any."""
        result = await self.db.execute(
            select(EmailTemplate).where(
                EmailTemplate.stage == stage,
                EmailTemplate.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()
    
    async def upsert(
        self,
        stage: str,
        subject: str,
        body_html: str,
        is_active: bool = True,
        created_by: Optional[str] = None,
    ) -> EmailTemplate:
        """Create the stage's template or overwrite the existing one."""
        template = await self.get_by_stage(stage)
        if template is None:
            template = EmailTemplate(
                id=uuid.uuid4(),
                stage=stage,
                subject=subject,
                body_html=body_html,
                is_active=is_active,
                created_by=created_by,
            )
            self.db.add(template)
        else:
            template.subject = subject
            template.body_html = body_html
            template.is_active = is_active
            template.updated_at = func.now()
        try:
            await self.db.flush()
            await self.db.refresh(template)
        except SQLAlchemyError as exc:
            raise PersistenceError("Failed to save template", {"stage": stage, "reason": str(exc)}) from exc
        return template
