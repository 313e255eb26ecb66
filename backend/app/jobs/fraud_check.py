from __future__ import annotations
import asyncio
from collections.abc import Callable
from uuid import UUID
import structlog
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from app.config import settings
from app.models.submission import ScoreSubmission
from app.schemas.ai import FraudCheckRequest
from app.services.ai import FraudScorer, build_fraud_scorer, assessment_reason
from app.services.feed import Change, score_changed, publish_to_redis

log = structlog.get_logger()


async def run_fraud_check(
    submission_id: str | UUID,
    request_payload: dict,
    *,
    sessionmaker: async_sessionmaker[AsyncSession],
    scorer: FraudScorer,
    publish: Callable[[Change], object] | None = None,
    timeout: float | None = None,
) -> str:
    """
    Ask the fraud-scoring function about one submission and record the answer.

    Success attaches the suspicion fields. Any failure (error, timeout, bad
    output, unreadable payload) rejects the submission with a diagnostic
    reason instead of leaving it un-triaged. Returns "assessed", "rejected"
    or "missing".
    """
    sid = UUID(str(submission_id))
    timeout = timeout or settings.ai_timeout_seconds
    structlog.contextvars.bind_contextvars(submission_id=str(sid))
    try:
        assessment, failure = None, None
        try:
            request = FraudCheckRequest.model_validate(request_payload)
            assessment = await asyncio.wait_for(scorer.assess(request), timeout=timeout)
        except ValidationError as e:
            failure = f"malformed request: {e.error_count()} validation error(s)"
        except asyncio.TimeoutError:
            failure = f"timed out after {timeout:g}s"
        except Exception as e:
            failure = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__

        async with sessionmaker() as session:
            s = await session.get(ScoreSubmission, sid)
            if not s:
                # Deleted by an admin before the check finished
                log.info("fraud_check_skipped_missing")
                return "missing"
            if failure is None:
                s.is_suspicious = assessment.is_suspicious
                s.suspicion_reason = assessment_reason(assessment)
                s.fraud_confidence = round(assessment.confidence)
                s.suggested_action = assessment.suggested_action
                outcome = "assessed"
            else:
                s.status = "rejected"
                s.suspicion_reason = f"Automated fraud check failed: {failure}"
                outcome = "rejected"
            await session.commit()

        if failure is None:
            log.info(
                "fraud_check_done",
                suspicious=assessment.is_suspicious,
                confidence=assessment.confidence,
                action=assessment.suggested_action,
            )
        else:
            log.warning("fraud_check_failed", error=failure)
        if publish is not None:
            publish(score_changed(sid, "updated"))
        return outcome
    finally:
        structlog.contextvars.unbind_contextvars("submission_id")


async def _run_in_worker(submission_id: str, request_payload: dict) -> str:
    # Each RQ job gets its own loop, so pooled connections can't be shared across jobs
    engine = create_async_engine(settings.database_url, poolclass=NullPool, future=True)
    try:
        return await run_fraud_check(
            submission_id,
            request_payload,
            sessionmaker=async_sessionmaker(engine, expire_on_commit=False),
            scorer=build_fraud_scorer(),
            publish=publish_to_redis,
        )
    finally:
        await engine.dispose()


def fraud_check_submission(submission_id: str, request_payload: dict) -> str:
    # RQ entry point (sync); run the async coroutine
    return asyncio.run(_run_in_worker(submission_id, request_payload))
