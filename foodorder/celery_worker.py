# foodorder/celery_worker.py
from celery import Celery

from foodorder.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "foodorder",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# import task modules explicitly so the worker registers them
celery_app.conf.imports = (
    "foodorder.services.notification_service",
)

celery_app.conf.task_acks_late = True
celery_app.conf.timezone = "UTC"
