"""
Transactional email for the volunteer portal.

Messages go out through the first configured provider, in order: SendGrid,
Mailgun, then plain SMTP. With nothing configured the message is logged and
reported as undelivered, which is the normal state in local development.
"""

import asyncio
import logging
import re
import smtplib
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

import httpx

from portal.settings import settings

logger = logging.getLogger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"
MAILGUN_URL = "https://api.mailgun.net/v3/{domain}/messages"


@dataclass(frozen=True)
class OutgoingEmail:
    to_email: str
    subject: str
    html: str
    text: str
    reply_to: str | None = None


def html_to_text(html: str) -> str:
    text = re.sub(r"<[^>]+>", "", html).replace("&nbsp;", " ")
    return re.sub(r"\s+", " ", text).strip()


class EmailService:
    """Sends mail through whichever provider the settings configure."""

    def __init__(self):
        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_username = settings.smtp_username
        self.smtp_password = settings.smtp_password
        self.smtp_use_tls = settings.smtp_use_tls
        self.from_email = settings.smtp_from_email or settings.brand_support_email
        self.from_name = settings.smtp_from_name or settings.brand_name
        self.sendgrid_api_key = settings.sendgrid_api_key
        self.mailgun_api_key = settings.mailgun_api_key
        self.mailgun_domain = settings.mailgun_domain

    @property
    def sender(self) -> str:
        return f"{self.from_name} <{self.from_email}>"

    def _provider(self) -> tuple[str, Callable[[OutgoingEmail], Awaitable[None]]] | None:
        if self.sendgrid_api_key:
            return "SendGrid", self._sendgrid
        if self.mailgun_api_key and self.mailgun_domain:
            return "Mailgun", self._mailgun
        if self.smtp_host:
            return "SMTP", self._smtp
        return None

    @property
    def is_configured(self) -> bool:
        return self._provider() is not None

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: str | None = None,
        reply_to: str | None = None,
    ) -> bool:
        """Deliver one message. Returns False instead of raising when it was not sent."""
        message = OutgoingEmail(
            to_email=to_email,
            subject=subject,
            html=html_content,
            text=text_content or html_to_text(html_content),
            reply_to=reply_to,
        )

        provider = self._provider()
        if provider is None:
            logger.warning(f"No email provider configured, not sending {subject!r} to {to_email}")
            return False

        name, send = provider
        try:
            await send(message)
        except Exception as e:
            logger.error(f"{name} delivery to {to_email} failed: {e}")
            return False

        logger.info(f"Email {subject!r} sent to {to_email} via {name}")
        return True

    async def _sendgrid(self, message: OutgoingEmail) -> None:
        payload: dict = {
            "personalizations": [{"to": [{"email": message.to_email}]}],
            "from": {"email": self.from_email, "name": self.from_name},
            "subject": message.subject,
            "content": [
                {"type": "text/plain", "value": message.text},
                {"type": "text/html", "value": message.html},
            ],
        }
        if message.reply_to:
            payload["reply_to"] = {"email": message.reply_to}

        async with httpx.AsyncClient() as client:
            response = await client.post(
                SENDGRID_URL,
                headers={"Authorization": f"Bearer {self.sendgrid_api_key}"},
                json=payload,
            )
        response.raise_for_status()

    async def _mailgun(self, message: OutgoingEmail) -> None:
        data = {
            "from": self.sender,
            "to": message.to_email,
            "subject": message.subject,
            "text": message.text,
            "html": message.html,
        }
        if message.reply_to:
            data["h:Reply-To"] = message.reply_to

        async with httpx.AsyncClient() as client:
            response = await client.post(
                MAILGUN_URL.format(domain=self.mailgun_domain),
                auth=("api", self.mailgun_api_key),
                data=data,
            )
        response.raise_for_status()

    async def _smtp(self, message: OutgoingEmail) -> None:
        mime = MIMEMultipart("alternative")
        mime["Subject"] = message.subject
        mime["From"] = self.sender
        mime["To"] = message.to_email
        if message.reply_to:
            mime["Reply-To"] = message.reply_to
        mime.attach(MIMEText(message.text, "plain"))
        mime.attach(MIMEText(message.html, "html"))

        def deliver():
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                if self.smtp_use_tls:
                    server.starttls()
                if self.smtp_username and self.smtp_password:
                    server.login(self.smtp_username, self.smtp_password)
                server.sendmail(self.from_email, [message.to_email], mime.as_string())

        # smtplib blocks
        await asyncio.get_running_loop().run_in_executor(None, deliver)


# Global email service instance
email_service = EmailService()


def _wrap_html(title: str, body: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <style>
            body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif; line-height: 1.6; color: #333; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 40px 20px; }}
            .logo {{ font-size: 24px; font-weight: bold; color: {settings.brand_primary_color}; text-align: center; margin-bottom: 30px; }}
            .content {{ background: #f8fafc; border-radius: 8px; padding: 30px; margin-bottom: 30px; }}
            .button {{ display: inline-block; background: {settings.brand_primary_color}; color: white; text-decoration: none; padding: 14px 28px; border-radius: 6px; font-weight: 500; }}
            .credentials {{ font-family: monospace; background: #fff; border: 1px solid #e2e8f0; border-radius: 6px; padding: 12px; }}
            .footer {{ text-align: center; font-size: 12px; color: #64748b; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="logo">{escape(settings.brand_name)}</div>
            <div class="content">
                <h2>{title}</h2>
                {body}
            </div>
            <div class="footer">
                <p>{escape(settings.brand_name)} | {escape(settings.brand_support_email)}</p>
            </div>
        </div>
    </body>
    </html>
    """


async def send_welcome_email(
    to_email: str,
    name: str,
    temp_password: str,
    team_name: str,
    service: EmailService | None = None,
) -> bool:
    """
    Send login credentials to a newly provisioned team member.

    Args:
        to_email: Email of the new account
        name: Member's name
        temp_password: The generated temporary credential
        team_name: Team the member was approved with
        service: Email service to send through (defaults to the global one)

    Returns:
        True if email was sent successfully
    """
    service = service or email_service
    login_url = settings.login_url

    subject = f"Welcome to {settings.brand_name} - Your Account is Ready!"

    text_content = (
        f"Hello {name},\n\n"
        "Your volunteer application has been approved! Your account has been created.\n\n"
        "Login credentials:\n"
        f"Email: {to_email}\n"
        f"Temporary Password: {temp_password}\n\n"
        f"Please log in at {login_url} and change your password immediately.\n\n"
        f"You are part of the team: {team_name}\n\n"
        "Welcome aboard!\n"
        f"{settings.brand_name} Team"
    )

    html_content = _wrap_html(
        "Your account is ready",
        f"""
                <p>Hello {escape(name)},</p>
                <p>Your volunteer application has been approved and your account has been created.
                You are part of the team <strong>{escape(team_name)}</strong>.</p>
                <div class="credentials">
                    Email: {escape(to_email)}<br>
                    Temporary Password: {escape(temp_password)}
                </div>
                <p style="text-align: center; margin: 30px 0;">
                    <a href="{login_url}" class="button">Log In</a>
                </p>
                <p style="font-size: 13px; color: #64748b;">
                    Please change your password right after your first login.
                </p>
        """,
    )

    return await service.send_email(
        to_email=to_email,
        subject=subject,
        html_content=html_content,
        text_content=text_content,
    )


async def send_rejection_email(
    to_email: str,
    name: str,
    reason: str,
    service: EmailService | None = None,
) -> bool:
    """Tell a team contact their application was not approved."""
    service = service or email_service

    subject = f"Update on your {settings.brand_name} volunteer application"
    text_content = (
        f"Hello {name},\n\n"
        "Thank you for applying to volunteer with us. Unfortunately your team's "
        "application was not approved at this time.\n\n"
        f"Reason: {reason}\n\n"
        f"{settings.brand_name} Team"
    )
    html_content = _wrap_html(
        "Application update",
        f"""
                <p>Hello {escape(name)},</p>
                <p>Thank you for applying to volunteer with us. Unfortunately your team's
                application was not approved at this time.</p>
                <p><strong>Reason:</strong> {escape(reason)}</p>
        """,
    )

    return await service.send_email(
        to_email=to_email,
        subject=subject,
        html_content=html_content,
        text_content=text_content,
    )
