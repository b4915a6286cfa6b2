"""
Outbound mail for partner invitations.

SendGrid delivers the message when SENDGRID_API_KEY is set; otherwise the
message is only logged, which is what development and tests use.
"""
from functools import lru_cache
from html import escape
from typing import Optional

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from ..config import get_settings
from ..logging_config import get_logger

logger = get_logger("mail")


def render_invitation(name: str, brand_name: str, invite_link: str, expiry_days: int,
                      custom_message: Optional[str] = None):
    """Subject, plain text and HTML of an invitation email."""
    subject = f"{brand_name} invited you to join Ignyt"
    lines = [
        f"Hi {name},",
        "",
        f"{brand_name} has invited you to join their retail partner network on Ignyt.",
    ]
    if custom_message:
        lines += ["", custom_message]
    lines += [
        "",
        f"Accept the invitation: {invite_link}",
        "",
        f"This invitation expires in {expiry_days} days.",
    ]
    text = "\n".join(lines)
    link = escape(invite_link)
    html = "".join(f"<p>{escape(line)}</p>" for line in lines if line).replace(
        link, f'<a href="{link}">{link}</a>'
    )
    return subject, text, html


class Mailer:
    """Send partner invitations. Returns whether the message went out."""

    def send(self, to: str, subject: str, text: str, html: str) -> bool:
        raise NotImplementedError

    def send_partner_invitation(self, email: str, name: str, brand_name: str, invite_link: str,
                                expiry_days: int, custom_message: Optional[str] = None) -> bool:
        subject, text, html = render_invitation(name, brand_name, invite_link, expiry_days, custom_message)
        return self.send(email, subject, text, html)


class LoggingMailer(Mailer):
    """Logs instead of sending."""

    def send(self, to: str, subject: str, text: str, html: str) -> bool:
        logger.info("Email not sent (no mail provider configured)", to=to, subject=subject)
        return False


class SendGridMailer(Mailer):

    def __init__(self, api_key: str, from_email: str, from_name: str):
        self.client = SendGridAPIClient(api_key)
        self.from_email = (from_email, from_name)

    def send(self, to: str, subject: str, text: str, html: str) -> bool:
        message = Mail(
            from_email=self.from_email,
            to_emails=to,
            subject=subject,
            plain_text_content=text,
            html_content=html,
        )
        try:
            response = self.client.send(message)
        except Exception as e:
            # Mail is best effort; the invite itself is already stored
            logger.error("Failed to send email", error=e, to=to)
            return False
        logger.info("Email sent", to=to, status_code=response.status_code)
        return 200 <= response.status_code < 300


@lru_cache()
def get_mailer() -> Mailer:
    """FastAPI dependency returning the configured mailer."""
    settings = get_settings()
    if settings.sendgrid_api_key:
        return SendGridMailer(settings.sendgrid_api_key, settings.mail_from, settings.mail_from_name)
    return LoggingMailer()
