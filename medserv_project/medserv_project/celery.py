""" Celery application for the records backend.

    Worker:  celery -A medserv_project worker -l info
    Beat:    celery -A medserv_project beat -l info
    (beat only runs the periodic balance recompute, see settings) """
import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "medserv_project.settings")

celery_app = Celery("medserv_project")

# every CELERY_* Django setting configures the app
celery_app.config_from_object("django.conf:settings", namespace="CELERY")

# picks up records_core.tasks
celery_app.autodiscover_tasks()
