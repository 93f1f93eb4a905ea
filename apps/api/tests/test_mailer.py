import pytest

from config import settings
from services import mailer


@pytest.fixture
def mail_enabled(monkeypatch):
    monkeypatch.setattr(settings, "EMAIL_ENABLED", True)
    monkeypatch.setattr(settings, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setattr(settings, "SMTP_FROM", "noreply@example.com")


@pytest.mark.asyncio
async def test_send_email_reports_disabled_without_transport(monkeypatch):
    monkeypatch.setattr(settings, "EMAIL_ENABLED", False)

    def fail_deliver(_message):
        raise AssertionError("transport must not be used when mail is disabled")

    monkeypatch.setattr(mailer, "_deliver", fail_deliver)
    result = await mailer.send_email("someone@example.com", "Hi", "Body")
    assert result.status == mailer.MAIL_DISABLED
    assert result.sent is False


@pytest.mark.asyncio
async def test_send_email_delivers_multipart_message(mail_enabled, monkeypatch):
    delivered = []
    monkeypatch.setattr(mailer, "_deliver", delivered.append)

    result = await mailer.send_email("someone@example.com", "You got a viewer", "plain text", "<b>html</b>")
    assert result.sent is True
    assert result.message_id
    assert len(delivered) == 1
    message = delivered[0]
    assert message["To"] == "someone@example.com"
    assert message["From"] == "noreply@example.com"
    assert message["Subject"] == "You got a viewer"
    assert message.is_multipart()


@pytest.mark.asyncio
async def test_send_email_transport_failure_is_reported(mail_enabled, monkeypatch):
    def broken_deliver(_message):
        raise OSError("connection refused")

    monkeypatch.setattr(mailer, "_deliver", broken_deliver)
    result = await mailer.send_email("someone@example.com", "Hi", "Body")
    assert result.status == mailer.MAIL_ERROR
    assert "connection refused" in result.error


@pytest.mark.asyncio
async def test_send_email_rejects_empty_recipient(mail_enabled):
    result = await mailer.send_email("  ", "Hi", "Body")
    assert result.status == mailer.MAIL_ERROR
