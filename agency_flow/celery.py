# agency_flow/celery.py
import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "agency_flow.settings")

app = Celery("agency_flow")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
