# foodorder/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./foodorder.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")

PUSH_ENDPOINT_URL = os.getenv("PUSH_ENDPOINT_URL", "https://exp.host/--/api/v2/push/send")
PUSH_TIMEOUT_SECONDS = int(os.getenv("PUSH_TIMEOUT_SECONDS", 10))
PUSH_BATCH_SIZE = int(os.getenv("PUSH_BATCH_SIZE", 100))

CANCEL_WINDOW_MS = int(os.getenv("CANCEL_WINDOW_MS", 60_000))
CART_CACHE_TTL_SECONDS = int(os.getenv("CART_CACHE_TTL_SECONDS", 30 * 24 * 3600))
SELLER_COMMISSION_RATE = os.getenv("SELLER_COMMISSION_RATE", "0.2")
NOTIFICATION_FEED_LIMIT = int(os.getenv("NOTIFICATION_FEED_LIMIT", 150))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
