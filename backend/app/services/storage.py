from __future__ import annotations
import io
from functools import lru_cache
from minio import Minio
from minio.error import S3Error
import structlog
from app.config import settings

log = structlog.get_logger()

def _parse_endpoint(ep: str) -> tuple[str, bool]:
    # Return (host:port, secure)
    secure = ep.startswith("https://")
    host = ep.replace("http://", "").replace("https://", "")
    return host, secure


class ProofStorage:
    """Score proof photos in an S3-compatible bucket (MinIO in dev)."""

    def __init__(self, client: Minio, bucket: str, public_base_url: str):
        self.client = client
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        self._bucket_checked = False

    def _ensure_bucket(self) -> None:
        if self._bucket_checked:
            return
        try:
            if not self.client.bucket_exists(self.bucket):
                self.client.make_bucket(self.bucket)
        except S3Error as e:
            # Concurrent creators race on make_bucket; the bucket exists either way
            if e.code not in ("BucketAlreadyOwnedByYou", "BucketAlreadyExists"):
                raise
        self._bucket_checked = True

    def put_bytes(self, key: str, data: bytes, content_type: str) -> None:
        self._ensure_bucket()
        self.client.put_object(
            self.bucket, key, io.BytesIO(data), length=len(data), content_type=content_type
        )
        log.info("proof_stored", key=key, bytes=len(data), content_type=content_type)

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"


@lru_cache(maxsize=1)
def get_storage() -> ProofStorage:
    host, secure = _parse_endpoint(settings.s3_endpoint)
    client = Minio(host, access_key=settings.s3_access_key, secret_key=settings.s3_secret_key, secure=secure)
    return ProofStorage(client, settings.s3_bucket_uploads, settings.media_public_base_url)
