from __future__ import annotations
import asyncio
import base64
from functools import lru_cache
from uuid import UUID
import httpx
import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.models.submission import ScoreSubmission
from app.schemas.ai import ImageVerificationRequest, VerificationVerdict
from app.services.ai import ScoreImageVerifier

log = structlog.get_logger()


class VerificationError(Exception):
    status_code = 502

class SubmissionNotFound(VerificationError):
    status_code = 404

class NoProofImage(VerificationError):
    status_code = 422

class ImageFetchFailed(VerificationError):
    status_code = 502

class VerifierFailed(VerificationError):
    status_code = 502


@lru_cache(maxsize=1)
def get_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(follow_redirects=True)


async def close_http_client() -> None:
    # Only close a client that was actually built
    if get_http_client.cache_info().currsize:
        await get_http_client().aclose()
        get_http_client.cache_clear()


async def fetch_image(http: httpx.AsyncClient, url: str, timeout: float) -> tuple[bytes, str]:
    try:
        r = await http.get(url, timeout=timeout)
    except httpx.HTTPError as e:
        raise ImageFetchFailed(f"Failed to fetch image from storage: {type(e).__name__}") from e
    if not r.is_success:
        raise ImageFetchFailed(f"Failed to fetch image from storage (HTTP {r.status_code})")
    mime = (r.headers.get("content-type") or "").split(";")[0].strip() or "image/jpeg"
    return r.content, mime


def to_data_uri(data: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


async def verify_submission_image(
    session: AsyncSession,
    http: httpx.AsyncClient,
    verifier: ScoreImageVerifier,
    submission_id: UUID,
    *,
    fetch_timeout: float | None = None,
    ai_timeout: float | None = None,
) -> VerificationVerdict:
    """
    Compare the photographed score of a submission with the value entered.

    Read-only: the verdict is returned to the admin, not stored. The verifier
    is only called once the image has actually been fetched.
    """
    s = await session.get(ScoreSubmission, submission_id)
    if not s:
        raise SubmissionNotFound("Score not found")
    if not s.image_url:
        raise NoProofImage("Score has no proof image")

    data, mime = await fetch_image(http, s.image_url, fetch_timeout or settings.image_fetch_timeout_seconds)

    request = ImageVerificationRequest(
        photo_data_uri=to_data_uri(data, mime),
        entered_score=s.score_value,
        game_name=s.game_name,
    )
    timeout = ai_timeout or settings.ai_timeout_seconds
    try:
        verdict = await asyncio.wait_for(verifier.verify(request), timeout=timeout)
    except asyncio.TimeoutError:
        log.warning("verification_failed", submission_id=str(s.id), error="timeout")
        raise VerifierFailed(f"AI verification timed out after {timeout:g}s")
    except Exception as e:
        log.warning("verification_failed", submission_id=str(s.id), error=str(e))
        raise VerifierFailed(f"AI verification failed: {e}") from e

    log.info(
        "verification_done",
        submission_id=str(s.id),
        verified=verdict.is_verified,
        detected=verdict.image_detected_score,
        entered=s.score_value,
    )
    return verdict
