"""
Outbound candidate email.

``EmailClient`` posts to a Resend-compatible HTTP API. ``EmailNotifier``
implements the pipeline's ``Notifier`` port on top of it: it picks the
active custom template for the new stage (or the built-in notice),
renders it and sends it. Every failure surfaces as ``NotificationError``;
callers decide whether that is fatal (it never is for stage moves).
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from talentflow.core.config import settings
from talentflow.schemas.email_template import CustomEmail, RenderedEmail, StageChangeEmail
from talentflow.services.email_template_service import render_stage_email
from talentflow.services.exceptions import NotificationError, ValidationError

logger = logging.getLogger(__name__)


class TemplateLookup(Protocol):
    async def get_active_for_stage(self, stage: str) -> Any:
        ...


class EmailClient:
    """Thin async wrapper over the email provider's send endpoint."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url or settings.EMAIL_API_URL
        self.api_key = api_key if api_key is not None else settings.EMAIL_API_KEY
        self.sender = sender or settings.EMAIL_FROM
        self.timeout_seconds = timeout_seconds or settings.EMAIL_TIMEOUT_SECONDS
        self._transport = transport

    async def send(self, to: str, subject: str, html: str) -> Dict[str, Any]:
        if not self.api_key:
            raise NotificationError("Email API key is not configured")

        payload = {"from": self.sender, "to": [to], "subject": subject, "html": html}
        headers = {"Authorization": f"Bearer {self.api_key}"}
        timeout = httpx.Timeout(self.timeout_seconds)
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise NotificationError("Email provider unreachable", {"to": to, "reason": str(exc)}) from exc

        if response.status_code >= 400:
            raise NotificationError(
                "Email provider rejected the message",
                {"to": to, "status_code": response.status_code, "body": response.text[:500]},
            )

        try:
            return response.json()
        except ValueError:
            return {}


class EmailNotifier:
    """
    Sends stage-change notices.

    Template lookups are cached per stage and serialized: a bulk move
    notifies many candidates concurrently, but they all share one
    database session, which does not allow concurrent queries.
    """

    def __init__(
        self,
        client: EmailClient,
        templates: Optional[TemplateLookup] = None,
        enabled: Optional[bool] = None,
    ):
        self.client = client
        self.templates = templates
        self.enabled = settings.NOTIFICATIONS_ENABLED if enabled is None else enabled
        self._template_cache: Dict[str, Any] = {}
        self._lookup_lock = asyncio.Lock()

    async def _active_template(self, stage: str):
        if self.templates is None:
            return None
        async with self._lookup_lock:
            if stage not in self._template_cache:
                try:
                    self._template_cache[stage] = await self.templates.get_active_for_stage(stage)
                except Exception as exc:  # noqa: BLE001
                    raise NotificationError("Could not load email template", {"stage": stage, "reason": str(exc)}) from exc
            return self._template_cache[stage]

    async def render(self, notice: StageChangeEmail) -> RenderedEmail:
        template = await self._active_template(notice.newStage)
        if template is not None:
            logger.debug("Using custom template for stage %s", notice.newStage)
        return render_stage_email(
            template,
            candidate_name=notice.candidateName,
            job_title=notice.jobTitle,
            new_stage=notice.newStage,
            old_stage=notice.oldStage,
        )

    async def notify_stage_change(
        self,
        candidate_name: str,
        candidate_email: str,
        old_stage: Optional[str],
        new_stage: str,
        job_title: str,
    ) -> None:
        if not (candidate_name and candidate_email and new_stage and job_title):
            raise NotificationError(
                "Missing required fields",
                {"candidate_email": candidate_email, "new_stage": new_stage},
            )

        notice = StageChangeEmail(
            candidateName=candidate_name,
            candidateEmail=candidate_email,
            oldStage=old_stage,
            newStage=new_stage,
            jobTitle=job_title,
        )
        email = await self.render(notice)

        if not self.enabled:
            logger.info(
                "Notifications disabled; skipped '%s' to %s (%s -> %s)",
                email.subject, candidate_email, old_stage or "initial", new_stage,
            )
            return

        logger.info("Sending stage email to %s: %s -> %s", candidate_email, old_stage or "initial", new_stage)
        await self.client.send(candidate_email, email.subject, email.html)

    async def send_custom_email(self, email: CustomEmail) -> None:
        """Send a recruiter-composed email to one candidate."""
        if not email.subject.strip() or not email.html.strip():
            raise ValidationError("Please fill in both subject and body")
        if not email.to:
            raise ValidationError("Candidate has no email address")

        if not self.enabled:
            logger.info("Notifications disabled; skipped custom email to candidate %s", email.candidateId)
            return

        await self.client.send(email.to, email.subject, email.html)
        logger.info("Custom email sent to candidate %s", email.candidateId)
