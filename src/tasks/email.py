"""Celery tasks for outgoing email."""

import asyncio
import logging
import smtplib

from sqlalchemy.orm import Session

from src.celery_app import app as celery_app
from src.config import get_settings
from src.database import SessionLocal
from src.services.auth import get_user_by_id
from src.services.email import EmailService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3, default_retry_delay=60)
def send_welcome_email(self, user_id: int) -> bool:
    """Send the welcome email to a newly registered user.

    Args:
        user_id: ID of the user who just signed up

    Returns:
        True if the email was handed to the mail server (or logged when SMTP
        is not configured), False if the user no longer exists
    """
    db: Session = SessionLocal()
    try:
        user = get_user_by_id(db, user_id)
        if not user:
            logger.warning(f"User {user_id} not found, skipping welcome email")
            return False

        url = f"{get_settings().frontend_url}/me"
        try:
            asyncio.run(EmailService().send_welcome(user, url))
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(f"Welcome email to user {user_id} failed, retrying: {e}")
            raise self.retry(exc=e) from e
        return True
    finally:
        db.close()
