from __future__ import annotations
from uuid import UUID
import httpx
import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Query, UploadFile
from rq import Queue
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from app.auth_deps import get_current_user, require_admin
from app.db import get_session, get_sessionmaker
from app.jobs.fraud_check import fraud_check_submission, run_fraud_check
from app.jobs.queue import get_job_queue
from app.models.submission import ScoreSubmission
from app.schemas.ai import VerificationVerdict
from app.schemas.submission import ScorePublic, ScoreSortKey, ScoreStatusUpdate, ScoreValueUpdate, SortDirection
from app.services.ai import FraudScorer, ScoreImageVerifier, get_fraud_scorer, get_image_verifier
from app.services.feed import ChangeFeed, get_change_feed, score_changed
from app.services.scores import SubmissionError, submit_score
from app.services.storage import ProofStorage, get_storage
from app.services.verification import VerificationError, get_http_client, verify_submission_image

log = structlog.get_logger()

router = APIRouter(prefix="/scores", tags=["scores"])
admin_router = APIRouter(prefix="/admin/scores", tags=["admin"], dependencies=[Depends(require_admin)])

_SORT_COLUMNS = {
    "submitted_at": ScoreSubmission.submitted_at,
    "score_value": ScoreSubmission.score_value,
    "game_name": ScoreSubmission.game_name,
    "event_name": ScoreSubmission.event_name,
    "player_name": ScoreSubmission.player_name,
    "status": ScoreSubmission.status,
}


@router.post("", response_model=ScorePublic, status_code=201)
async def create_score(
    background: BackgroundTasks,
    player_id: UUID = Form(...),
    score_value: str = Form(...),
    game_id: UUID | None = Form(default=None),
    game_name: str | None = Form(default=None),
    image: UploadFile | None = File(default=None, description="photo of the arcade screen showing the score"),
    user=Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    sessionmaker: async_sessionmaker[AsyncSession] = Depends(get_sessionmaker),
    storage: ProofStorage = Depends(get_storage),
    scorer: FraudScorer = Depends(get_fraud_scorer),
    queue: Queue | None = Depends(get_job_queue),
    feed: ChangeFeed = Depends(get_change_feed),
):
    data = await image.read() if image is not None else None
    try:
        accepted = await submit_score(
            session,
            storage,
            player_id=player_id,
            score_value=score_value,
            image=data,
            game_id=game_id,
            game_name=game_name,
        )
    except SubmissionError as e:
        log.info("score_refused", player_id=str(player_id), reason=str(e), status=e.status_code)
        raise HTTPException(status_code=e.status_code, detail=str(e))

    s = accepted.submission
    feed.publish(score_changed(s.id, "created"))

    payload = accepted.fraud_request.model_dump(by_alias=True)
    if queue is not None:
        queue.enqueue(fraud_check_submission, str(s.id), payload, job_timeout=120)
    else:
        background.add_task(
            run_fraud_check, str(s.id), payload, sessionmaker=sessionmaker, scorer=scorer, publish=feed.publish
        )
    return ScorePublic.model_validate(s)


@admin_router.get("", response_model=list[ScorePublic])
async def list_scores(
    event_id: UUID | None = Query(default=None),
    sort: ScoreSortKey = Query(default="submitted_at"),
    direction: SortDirection = Query(default="desc"),
    session: AsyncSession = Depends(get_session),
):
    col = _SORT_COLUMNS[sort]
    order = [col.desc() if direction == "desc" else col.asc(), ScoreSubmission.id.asc()]
    stmt = select(ScoreSubmission).order_by(*order)
    if event_id is not None:
        stmt = stmt.where(ScoreSubmission.event_id == event_id)
    rows = (await session.execute(stmt)).scalars().all()
    return [ScorePublic.model_validate(s) for s in rows]


async def _load(session: AsyncSession, score_id: UUID) -> ScoreSubmission:
    s = await session.get(ScoreSubmission, score_id)
    if not s:
        raise HTTPException(status_code=404, detail="Score not found")
    return s


@admin_router.patch("/{score_id}/status", response_model=ScorePublic)
async def set_score_status(
    score_id: UUID,
    payload: ScoreStatusUpdate,
    session: AsyncSession = Depends(get_session),
    feed: ChangeFeed = Depends(get_change_feed),
    admin=Depends(require_admin),
):
    s = await _load(session, score_id)
    s.status = payload.status
    await session.commit()
    await session.refresh(s)
    log.info("score_status_set", submission_id=str(s.id), status=s.status, admin_id=str(admin.id))
    feed.publish(score_changed(s.id, "updated"))
    return ScorePublic.model_validate(s)


@admin_router.patch("/{score_id}/value", response_model=ScorePublic)
async def set_score_value(
    score_id: UUID,
    payload: ScoreValueUpdate,
    session: AsyncSession = Depends(get_session),
    feed: ChangeFeed = Depends(get_change_feed),
    admin=Depends(require_admin),
):
    s = await _load(session, score_id)
    old = s.score_value
    s.score_value = payload.score_value
    await session.commit()
    await session.refresh(s)
    log.info("score_value_set", submission_id=str(s.id), old=old, new=s.score_value, admin_id=str(admin.id))
    feed.publish(score_changed(s.id, "updated"))
    return ScorePublic.model_validate(s)


@admin_router.delete("/{score_id}", status_code=204)
async def delete_score(
    score_id: UUID,
    session: AsyncSession = Depends(get_session),
    feed: ChangeFeed = Depends(get_change_feed),
    admin=Depends(require_admin),
):
    s = await _load(session, score_id)
    await session.delete(s)
    await session.commit()
    log.info("score_deleted", submission_id=str(score_id), admin_id=str(admin.id))
    feed.publish(score_changed(score_id, "deleted"))


@admin_router.post("/{score_id}/verify", response_model=VerificationVerdict, response_model_by_alias=False)
async def verify_score(
    score_id: UUID,
    session: AsyncSession = Depends(get_session),
    http: httpx.AsyncClient = Depends(get_http_client),
    verifier: ScoreImageVerifier = Depends(get_image_verifier),
):
    try:
        return await verify_submission_image(session, http, verifier, score_id)
    except VerificationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
