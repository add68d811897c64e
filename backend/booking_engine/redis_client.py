# backend/booking_engine/redis_client.py

import redis

from .config import settings

# None when REDIS_URL is not configured: event delivery is then skipped
redis_client = (
    redis.from_url(settings.redis_url, decode_responses=True, socket_timeout=2.0)
    if settings.redis_url
    else None
)
