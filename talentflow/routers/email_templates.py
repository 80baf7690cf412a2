"""
Email templates router - one editable template per stage.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from talentflow.core.dependencies import get_current_user_id, get_db, get_email_template_service
from talentflow.schemas.email_template import EmailTemplateRead, EmailTemplateUpsert
from talentflow.services.email_template_service import EmailTemplateService

router = APIRouter(prefix="/email-templates", tags=["email-templates"])


@router.get("", response_model=List[EmailTemplateRead])
async def list_templates(service: EmailTemplateService = Depends(get_email_template_service)):
    """Saved templates, with editor defaults for stages that have none."""
    return await service.list_templates()


@router.get("/{stage}", response_model=EmailTemplateRead)
async def get_template(stage: str, service: EmailTemplateService = Depends(get_email_template_service)):
    return await service.get_template_for_stage(stage)


@router.put("/{stage}", response_model=EmailTemplateRead)
async def save_template(
    stage: str,
    data: EmailTemplateUpsert,
    user_id: str = Depends(get_current_user_id),
    service: EmailTemplateService = Depends(get_email_template_service),
    db: AsyncSession = Depends(get_db),
):
    """Create or overwrite the stage's template."""
    template = await service.upsert_template(stage, data.subject, data.body_html, data.is_active, actor=user_id)
    await db.commit()
    return template
