# services/notification.py
import logging
from functools import lru_cache
from typing import Optional

import httpx

from config import Settings, get_settings

logger = logging.getLogger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"


class EmailService:
    """Outbound email. Sending never raises: callers run it after the work it reports on."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def enabled(self) -> bool:
        key = self.settings.sendgrid_api_key
        return bool(key and key.startswith("SG."))

    async def send_email(self, to: str, subject: str, html: str) -> bool:
        if not self.enabled:
            logger.info("Email simulated (no SendGrid key): to=%s subject=%s", to, subject)
            return False

        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.settings.from_email},
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }
        headers = {"Authorization": f"Bearer {self.settings.sendgrid_api_key}"}
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                response = await client.post(SENDGRID_URL, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Email sending failed for %s: %s", to, e)
            return False
        logger.info("Email sent to %s", to)
        return True

    async def send_enrollment_confirmation(self, to: str, student_name: str, course_title: str) -> bool:
        subject = f"You're enrolled in {course_title}"
        html = (
            f"<h2>Welcome, {student_name}!</h2>"
            f"<p>Your enrollment in <strong>{course_title}</strong> is confirmed. Happy learning!</p>"
            f"<p>{self.settings.platform_name}</p>"
        )
        return await self.send_email(to, subject, html)

    async def send_certificate_issued(self, to: str, student_name: str, course_title: str,
                                      certificate_url: str) -> bool:
        subject = f"Your certificate for {course_title}"
        html = (
            f"<h2>Congratulations, {student_name}!</h2>"
            f"<p>You have completed <strong>{course_title}</strong>.</p>"
            f"<p>Download your certificate: {certificate_url}</p>"
        )
        return await self.send_email(to, subject, html)


@lru_cache(maxsize=1)
def get_email_service() -> EmailService:
    return EmailService()
