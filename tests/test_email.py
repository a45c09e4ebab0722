"""Email service and welcome email task tests."""

import asyncio
import logging
import smtplib
from unittest.mock import AsyncMock, patch

import pytest
from celery.exceptions import Retry
from sqlalchemy.orm import sessionmaker

from src.config import get_settings
from src.services.email import EmailService
from src.tasks.email import send_welcome_email


@pytest.fixture
def task_session(db):
    """Point the task at the test database."""
    with patch("src.tasks.email.SessionLocal", sessionmaker(bind=db.get_bind())):
        yield


def test_send_without_smtp_logs(caplog):
    service = EmailService()
    with caplog.at_level(logging.INFO, logger="src.services.email"):
        asyncio.run(service.send("a@x.com", "Hello", "Body"))
    assert "SMTP not configured" in caplog.text


def test_send_over_smtp():
    service = EmailService()
    service.settings = get_settings().model_copy(
        update={"smtp_host": "smtp.example.com", "smtp_username": "u", "smtp_password": "p"}
    )
    with patch("src.services.email.smtplib.SMTP") as mock_smtp:
        asyncio.run(service.send("a@x.com", "Hello", "Body"))

    mock_smtp.assert_called_once_with("smtp.example.com", 587, timeout=30)
    server = mock_smtp.return_value.__enter__.return_value
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("u", "p")
    message = server.send_message.call_args.args[0]
    assert message["To"] == "a@x.com"
    assert message["Subject"] == "Hello"


def test_password_reset_email_contains_url(make_user):
    user = make_user(name="Jonas Schmedtmann")
    service = EmailService()
    with patch.object(service, "send", new_callable=AsyncMock) as mock_send:
        asyncio.run(service.send_password_reset(user, "http://testserver/reset/abc"))

    kwargs = mock_send.call_args.kwargs
    assert kwargs["to"] == user.email
    assert "valid for only 10 minutes" in kwargs["subject"]
    assert "Hi Jonas," in kwargs["body"]
    assert "http://testserver/reset/abc" in kwargs["body"]


def test_welcome_task_sends_email(make_user, task_session):
    user = make_user()
    with patch("src.tasks.email.EmailService.send_welcome", new_callable=AsyncMock) as mock_send:
        assert send_welcome_email(user.id) is True

    sent_user, url = mock_send.call_args.args
    assert sent_user.id == user.id
    assert url.endswith("/me")


def test_welcome_task_skips_missing_user(task_session):
    with patch("src.tasks.email.EmailService.send_welcome", new_callable=AsyncMock) as mock_send:
        assert send_welcome_email(999) is False
    mock_send.assert_not_called()


def test_welcome_task_retries_on_smtp_failure(make_user, task_session):
    user = make_user()
    with (
        patch(
            "src.tasks.email.EmailService.send_welcome",
            new_callable=AsyncMock,
            side_effect=smtplib.SMTPException("down"),
        ),
        patch.object(send_welcome_email, "retry", side_effect=Retry()) as mock_retry,
    ):
        with pytest.raises(Retry):
            send_welcome_email(user.id)
    assert isinstance(mock_retry.call_args.kwargs["exc"], smtplib.SMTPException)
