from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "arcade-scores-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "8 Bit Arcade")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/arcade_dev")
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379/0")
    # rq = enqueue on the worker queue, inline = run as a FastAPI background task
    jobs_backend: str = os.getenv("JOBS_BACKEND", "rq")
    score_changes_channel: str = os.getenv("SCORE_CHANGES_CHANNEL", "arcade:score-changes")

    s3_endpoint: str = os.getenv("S3_ENDPOINT", "http://minio:9000")
    s3_access_key: str = os.getenv("S3_ACCESS_KEY", "minioadmin")
    s3_secret_key: str = os.getenv("S3_SECRET_KEY", "minioadmin")
    s3_bucket_uploads: str = os.getenv("S3_BUCKET_UPLOADS", "arcade-score-proofs-dev")
    # Public prefix the proof images are reachable under (bucket policy allows anonymous GET)
    media_public_base_url: str = os.getenv("MEDIA_PUBLIC_BASE_URL", "http://localhost:9000/arcade-score-proofs-dev")
    upload_timeout_seconds: float = float(os.getenv("UPLOAD_TIMEOUT_SECONDS", "15"))

    # Submission rules
    max_submissions_per_game: int = int(os.getenv("MAX_SUBMISSIONS_PER_GAME", "5"))
    max_image_bytes: int = int(os.getenv("MAX_IMAGE_BYTES", str(10 * 1024 * 1024)))

    # Generative AI (any OpenAI-compatible endpoint)
    ai_api_key: str = os.getenv("AI_API_KEY", "")
    ai_base_url: str | None = os.getenv("AI_BASE_URL") or None
    ai_model: str = os.getenv("AI_MODEL", "gpt-4o-mini")
    ai_vision_model: str = os.getenv("AI_VISION_MODEL", "gpt-4o-mini")
    ai_timeout_seconds: float = float(os.getenv("AI_TIMEOUT_SECONDS", "30"))
    image_fetch_timeout_seconds: float = float(os.getenv("IMAGE_FETCH_TIMEOUT_SECONDS", "10"))

    # Auth
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    access_ttl_min: int = int(os.getenv("ACCESS_TTL_MIN", "60"))
    refresh_ttl_min: int = int(os.getenv("REFRESH_TTL_MIN", "10080"))  # 7d

    # Event venue
    event_timezone: str = os.getenv("EVENT_TIMEZONE", "UTC")
    default_playlist_id: str = os.getenv("DEFAULT_PLAYLIST_ID", "PLNMTXgsQnLlCAYdQGh3sVAvun2hWZ_a6x")

settings = Settings()
