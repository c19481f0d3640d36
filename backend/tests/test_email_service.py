# Overview: Pytest coverage for outbound email delivery and its dev-mode fallback.

import smtplib

import pytest

from foodbook.services import auth_service, email_service


class FakeSMTP:
    """Records what would have been sent."""
    sent = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        pass

    def send_message(self, message):
        FakeSMTP.sent.append(message)


class BrokenSMTP(FakeSMTP):
    def send_message(self, message):
        raise smtplib.SMTPException("relay refused")


@pytest.fixture
def smtp_configured(app, monkeypatch):
    monkeypatch.setitem(app.config, "SMTP_HOST", "smtp.example.com")
    monkeypatch.setitem(app.config, "SMTP_USER", "noreply@example.com")
    monkeypatch.setitem(app.config, "SMTP_PASS", "secret")
    FakeSMTP.sent = []
    monkeypatch.setattr(email_service.smtplib, "SMTP", FakeSMTP)


class TestSendEmail:

    def test_not_configured_returns_false(self, db_session):
        assert email_service.is_configured() is False
        assert email_service.send_email("a@b.com", "Hi", "<p>Hi</p>") is False

    def test_sends_when_configured(self, db_session, smtp_configured):
        assert email_service.send_email("a@b.com", "Hi", "<p>Hi</p>") is True

        message = FakeSMTP.sent[0]
        assert message["To"] == "a@b.com"
        assert message["Subject"] == "Hi"
        assert "noreply@example.com" in message["From"]

    def test_failure_is_logged_not_raised(self, db_session, smtp_configured, monkeypatch):
        monkeypatch.setattr(email_service.smtplib, "SMTP", BrokenSMTP)
        assert email_service.send_email("a@b.com", "Hi", "<p>Hi</p>") is False

    def test_otp_email_subject_by_purpose(self, db_session, smtp_configured):
        email_service.send_otp_email("a@b.com", "123456", "delete_account")

        message = FakeSMTP.sent[0]
        assert message["Subject"] == "URGENT: Account Deletion Request"

    def test_mail_carries_product_name(self, db_session, smtp_configured):
        email_service.send_otp_email("a@b.com", "123456", "login")
        email_service.send_welcome_email("a@b.com")

        login, welcome = FakeSMTP.sent
        assert login["Subject"] == "Your Login Code - FoodBook"
        assert welcome["Subject"] == "Welcome to FoodBook!"
        assert "FoodBook" in login["From"]


class TestOtpDelivery:

    def test_issue_otp_mails_code_and_hides_it(self, db_session, owner_a, smtp_configured):
        result = auth_service.issue_otp(owner_a.email, "login")

        assert result == {"mode": "smtp"}
        assert len(FakeSMTP.sent) == 1
        assert FakeSMTP.sent[0]["To"] == owner_a.email
