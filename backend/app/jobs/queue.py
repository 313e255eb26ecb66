from __future__ import annotations
from functools import lru_cache
from redis import Redis
from rq import Queue
from app.config import settings


@lru_cache(maxsize=1)
def get_job_queue() -> Queue | None:
    # None means "run jobs in-process as FastAPI background tasks"
    if settings.jobs_backend != "rq":
        return None
    return Queue("default", connection=Redis.from_url(settings.redis_url))
