""" Worker: "celery -A books_project worker -l info" (books_project/__init__.py
    exposes celery_app). Recurring vouchers need the scheduler too:
    "celery -A books_project beat -l info" """
from __future__ import annotations
import os
from celery import Celery
from celery.schedules import crontab

# ensure Django settings are set for Celery
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "books_project.settings")

celery_app = Celery("books_project")

# read config from Django settings, using CELERY_ prefix
celery_app.config_from_object("django.conf:settings", namespace="CELERY")

# autoload tasks from installed apps
celery_app.autodiscover_tasks()

celery_app.conf.beat_schedule = {
    "generate-recurring-vouchers": {
        "task": "books_core.tasks.generate_recurring_vouchers",
        # once a day, shortly after midnight
        "schedule": crontab(hour=0, minute=15),
    },
}
