"""
Celery application for the RiderApp console.

Configuration is read from the CELERY_* Django settings.
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("riderapp_console")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
