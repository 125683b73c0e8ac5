"""
Donation emails sent through SendGrid.

Delivery is best-effort and at-most-once: failures are logged and dropped,
nothing is retried and nothing is queued durably.
"""
from datetime import datetime
from html import escape
from typing import Optional

import httpx
import structlog
from pydantic import BaseModel

from fundflow.core.config import Settings

logger = structlog.get_logger(__name__)


class DonationNotice(BaseModel):
    """Everything the post-donation emails need, captured before the request ends"""
    donor_email: Optional[str]
    donor_name: str
    creator_email: Optional[str]
    creator_name: str
    campaign_id: str
    campaign_title: str
    amount: float
    message: Optional[str] = None
    anonymous: bool = False


class EmailNotifier:
    """SendGrid v3 mail-send client"""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        api_base: str = "https://api.sendgrid.com",
        timeout: float = 10.0,
        frontend_url: str = "http://localhost:3000",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.base_url = api_base.rstrip("/")
        self.timeout = httpx.Timeout(timeout, connect=5.0)
        self.frontend_url = frontend_url.rstrip("/")
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailNotifier":
        return cls(
            api_key=settings.sendgrid_api_key,
            from_email=settings.sendgrid_from_email,
            api_base=settings.sendgrid_api_base,
            timeout=settings.email_timeout,
            frontend_url=settings.frontend_url,
        )

    async def send_email(self, to: str, subject: str, html: str) -> bool:
        """Send one email; returns False instead of raising on any failure"""
        if not self.api_key:
            logger.warning("Email provider API key not configured, skipping email", to=to)
            return False

        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.from_email},
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/v3/mail/send",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.TimeoutException:
            logger.error("Timeout while sending email", to=to)
            return False
        except httpx.RequestError as e:
            logger.error("Connection error to email provider", to=to, error=str(e))
            return False

        if response.status_code >= 300:
            logger.error("Email provider rejected message", to=to, status_code=response.status_code)
            return False

        logger.info("Email sent", to=to, subject=subject)
        return True

    async def send_donor_thank_you(self, notice: DonationNotice) -> bool:
        subject = f'Thank you for your donation to "{notice.campaign_title}"'
        html = f"""
        <h1>Thank You for Your Generosity!</h1>
        <p>Hi {escape(notice.donor_name or "Generous Donor")},</p>
        <p>Thank you so much for your donation! Your contribution makes a real difference.</p>
        <p><strong>Campaign:</strong> {escape(notice.campaign_title)}</p>
        <p><strong>Amount:</strong> ${notice.amount:.2f}</p>
        <p>{escape(notice.creator_name)} and the entire community are grateful for your support.</p>
        <p><a href="{self.frontend_url}/campaigns">View More Campaigns</a></p>
        <p>Best regards,<br>The FundFlow Team</p>
        """
        return await self.send_email(notice.donor_email, subject, html)

    async def send_creator_alert(self, notice: DonationNotice) -> bool:
        subject = f'New donation received for "{notice.campaign_title}"!'
        donor = "An anonymous supporter" if notice.anonymous else (notice.donor_name or "A supporter")
        message_block = ""
        if notice.message:
            message_block = f"<p><strong>Message from donor:</strong><br>\"{escape(notice.message)}\"</p>"
        html = f"""
        <h1>Great News!</h1>
        <p>Hi {escape(notice.creator_name)},</p>
        <p>Your campaign "<strong>{escape(notice.campaign_title)}</strong>" just received a new donation!</p>
        <p><strong>From:</strong> {escape(donor)}</p>
        <p><strong>Amount:</strong> ${notice.amount:.2f}</p>
        <p><strong>Date:</strong> {datetime.now().strftime("%B %d, %Y %H:%M")}</p>
        {message_block}
        <p><a href="{self.frontend_url}/campaigns/{notice.campaign_id}">View Campaign Dashboard</a></p>
        <p>Best regards,<br>The FundFlow Team</p>
        """
        return await self.send_email(notice.creator_email, subject, html)


async def notify_donation(notifier: EmailNotifier, notice: DonationNotice) -> None:
    """Background task: thank the donor and alert the creator, never raising"""
    try:
        if notice.donor_email:
            await notifier.send_donor_thank_you(notice)
        if notice.creator_email:
            await notifier.send_creator_alert(notice)
    except Exception as e:
        logger.error(
            "Error sending donation emails",
            campaign_id=notice.campaign_id,
            error=str(e),
            error_type=type(e).__name__,
        )
