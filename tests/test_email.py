"""Tests for transactional email content and provider fallback."""

from portal.services.email import EmailService, send_rejection_email, send_welcome_email
from portal.settings import settings


class CapturingService:
    def __init__(self):
        self.messages = []

    async def send_email(self, **kwargs):
        self.messages.append(kwargs)
        return True


async def test_welcome_email_carries_credentials():
    service = CapturingService()

    sent = await send_welcome_email(
        to_email="a@x.com",
        name="Ada",
        temp_password="Xy7!abcDEF12",
        team_name="Solar Sprouts",
        service=service,
    )

    assert sent is True
    message = service.messages[0]
    assert message["to_email"] == "a@x.com"
    assert settings.brand_name in message["subject"]
    assert "Xy7!abcDEF12" in message["text_content"]
    assert settings.login_url in message["text_content"]
    assert "Solar Sprouts" in message["text_content"]
    assert "Xy7!abcDEF12" in message["html_content"]


async def test_welcome_email_escapes_html():
    service = CapturingService()

    await send_welcome_email(
        to_email="a@x.com",
        name="<script>",
        temp_password="pw",
        team_name="Team",
        service=service,
    )

    assert "<script>" not in service.messages[0]["html_content"]


async def test_rejection_email_includes_reason():
    service = CapturingService()

    await send_rejection_email("a@x.com", "Ada", "Roster incomplete", service=service)

    assert "Roster incomplete" in service.messages[0]["text_content"]


async def test_no_provider_configured():
    service = EmailService()
    service.smtp_host = None
    service.sendgrid_api_key = None
    service.mailgun_api_key = None

    assert not service.is_configured
    assert await service.send_email("a@x.com", "Subject", "<p>Hello</p>") is False


def configured_service(**keys) -> EmailService:
    service = EmailService()
    service.smtp_host = keys.get("smtp_host")
    service.sendgrid_api_key = keys.get("sendgrid_api_key")
    service.mailgun_api_key = keys.get("mailgun_api_key")
    service.mailgun_domain = keys.get("mailgun_domain")
    return service


async def test_sendgrid_preferred_over_other_providers():
    service = configured_service(sendgrid_api_key="sg", mailgun_api_key="mg", mailgun_domain="mg.org", smtp_host="smtp")
    delivered = []

    async def fake_sendgrid(message):
        delivered.append(message)

    service._sendgrid = fake_sendgrid

    assert await service.send_email("a@x.com", "Hi", "<p>Hello&nbsp;there</p>") is True
    assert delivered[0].to_email == "a@x.com"
    assert delivered[0].text == "Hello there"


async def test_provider_error_reports_undelivered():
    service = configured_service(smtp_host="smtp.invalid")

    async def broken_smtp(message):
        raise OSError("connection refused")

    service._smtp = broken_smtp

    assert await service.send_email("a@x.com", "Hi", "<p>Hello</p>") is False
