from __future__ import annotations
import asyncio
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone as dt_tz
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog
from app.config import settings
from app.models.catalog import Game
from app.models.player import Player
from app.models.submission import ScoreSubmission
from app.schemas.ai import FraudCheckRequest, CurrentSubmission, PlayerContext, PreviousScore
from app.services.media import validate_proof_image, ext_for_mime
from app.services.storage import ProofStorage

log = structlog.get_logger()

_WHOLE_NUMBER = re.compile(r"-?[0-9]+")


class SubmissionError(Exception):
    status_code = 400

class InvalidSubmission(SubmissionError):
    status_code = 422

class NotFound(SubmissionError):
    status_code = 404

class SubmissionCapReached(SubmissionError):
    status_code = 409

class UploadFailed(SubmissionError):
    status_code = 502

class PersistenceFailed(SubmissionError):
    status_code = 500


@dataclass
class AcceptedSubmission:
    submission: ScoreSubmission
    fraud_request: FraudCheckRequest


def iso_utc(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=dt_tz.utc)
    return dt.astimezone(dt_tz.utc).isoformat().replace("+00:00", "Z")


def parse_score_value(raw) -> int:
    if isinstance(raw, bool):
        raise InvalidSubmission("Score must be a whole number")
    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw if raw is not None else "").strip()
        # ASCII digits only; str.isdigit also accepts superscripts and other scripts
        if not _WHOLE_NUMBER.fullmatch(text):
            raise InvalidSubmission("Score must be a whole number")
        value = int(text)
    if value < 0:
        raise InvalidSubmission("Score must be a positive number")
    return value


async def resolve_active_game(session: AsyncSession, game_id: UUID | None, game_name: str | None) -> Game:
    game = None
    if game_id is not None:
        game = await session.get(Game, game_id)
    elif game_name and game_name.strip():
        game = await session.scalar(select(Game).where(Game.name == game_name.strip()).order_by(Game.id).limit(1))
    else:
        raise InvalidSubmission("Please select a game")
    if game is None or not game.is_active:
        raise InvalidSubmission("Unknown or inactive game")
    return game


async def prior_submissions(session: AsyncSession, player_id: UUID, game_id: UUID) -> list[ScoreSubmission]:
    return (
        await session.execute(
            select(ScoreSubmission)
            .where(ScoreSubmission.player_id == player_id, ScoreSubmission.game_id == game_id)
            .order_by(ScoreSubmission.submitted_at.asc(), ScoreSubmission.id.asc())
        )
    ).scalars().all()


def build_fraud_request(s: ScoreSubmission, player: Player, prior: list[ScoreSubmission]) -> FraudCheckRequest:
    return FraudCheckRequest(
        current_submission=CurrentSubmission(
            player_id=str(s.player_id),
            game_name=s.game_name,
            score_value=s.score_value,
            image_url=s.image_url,
            timestamp=iso_utc(s.submitted_at),
        ),
        player_context=PlayerContext(name=player.name, instagram=player.instagram),
        previous_scores_by_player_for_game=[
            PreviousScore(score_value=p.score_value, timestamp=iso_utc(p.submitted_at)) for p in prior
        ],
    )


async def _upload(storage: ProofStorage, key: str, data: bytes, mime: str, timeout: float) -> None:
    try:
        await asyncio.wait_for(asyncio.to_thread(storage.put_bytes, key, data, mime), timeout=timeout)
    except asyncio.TimeoutError:
        raise UploadFailed(f"Image upload timed out after {timeout:g}s")
    except Exception as e:
        log.error("proof_upload_failed", key=key, error=str(e))
        raise UploadFailed(f"Image upload failed: {e}") from e


async def submit_score(
    session: AsyncSession,
    storage: ProofStorage,
    *,
    player_id: UUID,
    score_value,
    image: bytes | None,
    game_id: UUID | None = None,
    game_name: str | None = None,
    max_per_game: int | None = None,
    upload_timeout: float | None = None,
) -> AcceptedSubmission:
    """
    Validate and record a score submission.

    The new row is committed in ``pending`` before this returns, so readers see
    it while the fraud check is still outstanding. Raises a SubmissionError
    subclass on any rejection; nothing is written in that case.
    """
    cap = max_per_game or settings.max_submissions_per_game
    value = parse_score_value(score_value)
    if not image:
        raise InvalidSubmission("Image proof is required")
    if len(image) > settings.max_image_bytes:
        raise InvalidSubmission("Image is too large")
    try:
        mime = validate_proof_image(image)
    except ValueError as e:
        raise InvalidSubmission(str(e))
    game = await resolve_active_game(session, game_id, game_name)

    player = await session.get(Player, player_id)
    if player is None:
        raise NotFound("Player not found")

    prior = await prior_submissions(session, player.id, game.id)
    if len(prior) >= cap:
        raise SubmissionCapReached(f"Submission limit of {cap} reached for {game.name}.")

    sub_id = uuid.uuid4()
    key = f"score_proofs/{player.id}/{game.id}/{sub_id.hex}.{ext_for_mime(mime)}"
    await _upload(storage, key, image, mime, upload_timeout or settings.upload_timeout_seconds)

    s = ScoreSubmission(
        id=sub_id,
        player_id=player.id,
        player_name=player.name,
        player_instagram=player.instagram,
        game_id=game.id,
        game_name=game.name,
        event_id=player.event_id,
        event_name=player.event_name,
        score_value=value,
        image_key=key,
        image_url=storage.public_url(key),
        image_mime=mime,
        status="pending",
        submitted_at=datetime.now(dt_tz.utc),
    )
    session.add(s)
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        log.error("score_persist_failed", player_id=str(player.id), game_id=str(game.id), error=str(e))
        raise PersistenceFailed("Failed to save score") from e
    await session.refresh(s)

    log.info(
        "score_submitted",
        submission_id=str(s.id),
        player_id=str(player.id),
        game=game.name,
        score=value,
        prior_count=len(prior),
    )
    return AcceptedSubmission(submission=s, fraud_request=build_fraud_request(s, player, prior))
