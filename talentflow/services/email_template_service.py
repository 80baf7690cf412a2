"""
Stage email templates.

A template is plain text with ``{{placeholder}}`` tokens. Substitution is
literal string replacement; there is no template language, no escaping
and no conditionals.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional
from uuid import UUID

from talentflow.repositories.email_template_repository import EmailTemplateRepository
from talentflow.schemas.email_template import EmailTemplateRead, RenderedEmail
from talentflow.services.exceptions import NotFoundError, ValidationError
from talentflow.utils.time import utc_now

logger = logging.getLogger(__name__)

PLACEHOLDERS = ("candidateName", "jobTitle", "oldStage", "newStage")

# Pre-filled in the template editor for a stage with no saved template.
DEFAULT_TEMPLATES: Dict[str, Dict[str, str]] = {
    "applied": {
        "subject": "Application Received - {{jobTitle}}",
        "body": (
            "<p>Dear {{candidateName}},</p>"
            "<p>We have received your application and our team will review it shortly.</p>"
            "<p><strong>Position:</strong> {{jobTitle}}</p>"
            "<p>Thank you for your interest!</p>"
        ),
    },
    "screening": {
        "subject": "Application Under Review - {{jobTitle}}",
        "body": (
            "<p>Dear {{candidateName}},</p>"
            "<p>Your application is currently being reviewed by our recruitment team.</p>"
            "<p><strong>Position:</strong> {{jobTitle}}</p>"
            "<p>We will update you on the next steps soon.</p>"
        ),
    },
    "interview": {
        "subject": "Interview Stage - {{jobTitle}}",
        "body": (
            "<p>Dear {{candidateName}},</p>"
            "<p>Congratulations! Your application has progressed to the interview stage.</p>"
            "<p><strong>Position:</strong> {{jobTitle}}</p>"
            "<p>Our team will contact you soon to schedule an interview.</p>"
        ),
    },
    "offer": {
        "subject": "Job Offer - Congratulations!",
        "body": (
            "<p>Dear {{candidateName}},</p>"
            "<p>We are delighted to extend an offer for this position.</p>"
            "<p><strong>Position:</strong> {{jobTitle}}</p>"
            "<p>Our team will contact you with the details shortly.</p>"
        ),
    },
    "hired": {
        "subject": "Welcome to the Team!",
        "body": (
            "<p>Dear {{candidateName}},</p>"
            "<p>Welcome aboard! We're excited to have you join our team.</p>"
            "<p><strong>Position:</strong> {{jobTitle}}</p>"
            "<p>You'll receive onboarding information soon.</p>"
        ),
    },
    "rejected": {
        "subject": "Application Update - {{jobTitle}}",
        "body": (
            "<p>Dear {{candidateName}},</p>"
            "<p>Thank you for your interest in this position. While we have decided to move "
            "forward with other candidates, we appreciate the time you invested in the "
            "application process.</p>"
            "<p><strong>Position:</strong> {{jobTitle}}</p>"
            "<p>We encourage you to apply for future openings.</p>"
        ),
    },
}
TEMPLATE_STAGES = list(DEFAULT_TEMPLATES)


@dataclass(frozen=True)
class _StageMessage:
    subject: str
    message: str
    emoji: str


# Built-in notice used when a stage has no active custom template.
_STAGE_MESSAGES: Dict[str, _StageMessage] = {
    "applied": _StageMessage(
        "Application Received",
        "We have received your application and our team will review it shortly.",
        "\U0001F4DD",
    ),
    "screening": _StageMessage(
        "Application Under Review",
        "Your application is currently being reviewed by our recruitment team.",
        "\U0001F50D",
    ),
    "interview": _StageMessage(
        "Interview Stage",
        "Congratulations! Your application has progressed to the interview stage. "
        "Our team will contact you soon to schedule an interview.",
        "\U0001F4DE",
    ),
    "offer": _StageMessage(
        "Job Offer - Congratulations!",
        "We are delighted to extend an offer for this position. "
        "Our team will contact you with the details shortly.",
        "\U0001F389",
    ),
    "hired": _StageMessage(
        "Welcome to the Team!",
        "Welcome aboard! We're excited to have you join our team. "
        "You'll receive onboarding information soon.",
        "\U0001F38A",
    ),
    "rejected": _StageMessage(
        "Application Update",
        "Thank you for your interest in this position. While we have decided to move forward "
        "with other candidates, we appreciate the time you invested in the application process.",
        "\U0001F4C4",
    ),
}

_REJECTED_CLOSING = (
    "<p>We encourage you to apply for future openings that match your qualifications. "
    "We wish you the best in your job search.</p>"
)
_DEFAULT_CLOSING = "<p>If you have any questions, please don't hesitate to reach out to us.</p>"

_BUILTIN_HTML = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <style>
      body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px; }}
      .container {{ background-color: #ffffff; border-radius: 8px; padding: 32px; box-shadow: 0 2px 4px rgba(0, 0, 0, 0.1); }}
      .header {{ text-align: center; margin-bottom: 32px; padding-bottom: 24px; border-bottom: 2px solid #f0f0f0; }}
      .emoji {{ font-size: 48px; margin-bottom: 16px; }}
      h1 {{ color: #1a1a1a; font-size: 24px; margin: 0; }}
      .job-title {{ background-color: #f8f9fa; padding: 16px; border-radius: 6px; margin: 24px 0; border-left: 4px solid #4f46e5; }}
      .job-title strong {{ color: #4f46e5; }}
      .footer {{ margin-top: 32px; padding-top: 24px; border-top: 1px solid #e5e5e5; text-align: center; color: #666; font-size: 14px; }}
    </style>
  </head>
  <body>
    <div class="container">
      <div class="header">
        <div class="emoji">{emoji}</div>
        <h1>{title}</h1>
      </div>
      <div class="content">
        <p>Dear {candidate_name},</p>
        <p>{message}</p>
        <div class="job-title">
          <strong>Position:</strong> {job_title}
        </div>
        {closing}
      </div>
      <div class="footer">
        <p>This is an automated notification from our Applicant Tracking System.</p>
        <p>&copy; {year} ATS. All rights reserved.</p>
      </div>
    </div>
  </body>
</html>
"""


def substitute_placeholders(text: str, values: Mapping[str, Optional[str]]) -> str:
    """
    Replace every ``{{name}}`` occurrence for the known placeholders.

    A placeholder with no value (missing or None) becomes an empty string.
    Unknown ``{{tokens}}`` are left as they are.
    """
    result = text or ""
    for name in PLACEHOLDERS:
        result = result.replace("{{" + name + "}}", values.get(name) or "")
    return result


def default_template(stage: str) -> Optional[EmailTemplateRead]:
    defaults = DEFAULT_TEMPLATES.get(stage)
    if defaults is None:
        return None
    return EmailTemplateRead(
        stage=stage,
        subject=defaults["subject"],
        body_html=defaults["body"],
        is_active=True,
        is_default=True,
    )


def builtin_stage_email(candidate_name: str, new_stage: str, job_title: str, year: Optional[int] = None) -> RenderedEmail:
    """The fallback HTML notice. Unknown stages get the 'applied' wording."""
    info = _STAGE_MESSAGES.get(new_stage) or _STAGE_MESSAGES["applied"]
    html = _BUILTIN_HTML.format(
        emoji=info.emoji,
        title=info.subject,
        candidate_name=candidate_name,
        message=info.message,
        job_title=job_title,
        closing=_REJECTED_CLOSING if new_stage == "rejected" else _DEFAULT_CLOSING,
        year=year or utc_now().year,
    )
    return RenderedEmail(subject=f"{info.subject} - {job_title}", html=html)


def render_stage_email(
    template,
    candidate_name: str,
    job_title: str,
    new_stage: str,
    old_stage: Optional[str] = None,
) -> RenderedEmail:
    """
    Render the stage-change email.

    ``template`` is an active custom template (anything with ``subject``
    and ``body_html``) or None for the built-in notice.
    """
    if template is None:
        return builtin_stage_email(candidate_name, new_stage, job_title)

    values = {
        "candidateName": candidate_name,
        "jobTitle": job_title,
        "oldStage": old_stage,
        "newStage": new_stage,
    }
    return RenderedEmail(
        subject=substitute_placeholders(template.subject, values),
        html=substitute_placeholders(template.body_html, values),
    )


def prefill_custom_email(template, candidate_name: str, job_title: str) -> RenderedEmail:
    """Pre-fill the compose dialog from a template; stage tokens stay untouched."""
    values = {"candidateName": candidate_name, "jobTitle": job_title}
    subject = template.subject
    html = template.body_html
    for name, value in values.items():
        subject = subject.replace("{{" + name + "}}", value)
        html = html.replace("{{" + name + "}}", value)
    return RenderedEmail(subject=subject, html=html)


class EmailTemplateService:
    """CRUD over the per-stage templates with editor defaults."""

    def __init__(self, repository: EmailTemplateRepository):
        self.repository = repository

    async def list_templates(self) -> List[EmailTemplateRead]:
        """Every editable stage: the saved template, or its default."""
        stored = {template.stage: template for template in await self.repository.list()}
        result = []
        for stage in TEMPLATE_STAGES:
            if stage in stored:
                result.append(EmailTemplateRead.model_validate(stored.pop(stage)))
            else:
                result.append(default_template(stage))
        # Templates saved for custom stages
        result.extend(EmailTemplateRead.model_validate(t) for t in stored.values())
        return result

    async def get_template_for_stage(self, stage: str) -> EmailTemplateRead:
        template = await self.repository.get_by_stage(stage)
        if template is not None:
            return EmailTemplateRead.model_validate(template)
        fallback = default_template(stage)
        if fallback is None:
            raise NotFoundError("template", stage)
        return fallback

    async def get_active_for_stage(self, stage: str):
        return await self.repository.get_active_for_stage(stage)

    async def get_by_id(self, template_id: UUID):
        template = await self.repository.get_by_id(template_id)
        if template is None:
            raise NotFoundError("template", template_id)
        return template

    async def upsert_template(
        self,
        stage: str,
        subject: str,
        body_html: str,
        is_active: bool = True,
        actor: Optional[str] = None,
    ) -> EmailTemplateRead:
        stage = (stage or "").strip()
        if not stage:
            raise ValidationError("Please select a stage")
        if not (subject or "").strip() or not (body_html or "").strip():
            raise ValidationError("Please fill in both subject and body")

        template = await self.repository.upsert(
            stage=stage,
            subject=subject.strip(),
            body_html=body_html,
            is_active=is_active,
            created_by=actor,
        )
        logger.info("Email template for stage %s saved", stage)
        return EmailTemplateRead.model_validate(template)
