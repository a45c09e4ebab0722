"""Celery application for background email delivery."""

from celery import Celery

from src.config import get_settings

settings = get_settings()

app = Celery(
    "tour_booking",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["src.tasks.email"],
)

app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Mail goes out on its own queue so a slow SMTP server backs up nothing else
    task_routes={"src.tasks.email.*": {"queue": "email"}},
    # Re-deliver if a worker dies mid-send
    task_acks_late=True,
    task_time_limit=60,
    task_soft_time_limit=45,
    result_expires=3600,
)
