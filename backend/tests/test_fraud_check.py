from __future__ import annotations
import asyncio
import uuid
from datetime import datetime, timezone
import pytest
from app.jobs.fraud_check import run_fraud_check
from app.models.submission import ScoreSubmission
from app.schemas.ai import FraudAssessment


def _payload(score=500):
    return {
        "currentSubmission": {
            "playerId": str(uuid.uuid4()),
            "gameName": "Galaga",
            "scoreValue": score,
            "imageURL": "http://media.test/x.png",
            "timestamp": "2025-06-01T18:00:00Z",
        },
        "playerContext": {"name": "Ada", "instagram": "ada_plays"},
        "previousScoresByPlayerForGame": [{"scoreValue": 20, "timestamp": "2025-06-01T17:00:00Z"}],
    }


async def _seed(sessionmaker) -> uuid.UUID:
    s = ScoreSubmission(
        player_id=uuid.uuid4(), player_name="Ada", game_id=uuid.uuid4(), game_name="Galaga",
        score_value=500, status="pending", submitted_at=datetime.now(timezone.utc),
    )
    async with sessionmaker() as session:
        session.add(s)
        await session.commit()
    return s.id


class _SlowScorer:
    async def assess(self, request):
        await asyncio.sleep(5)


class _SuspiciousScorer:
    async def assess(self, request):
        assert request.previous_scores_by_player_for_game[0].score_value == 20
        return FraudAssessment(
            is_suspicious=True, reason="Score jumped 25x in an hour.", confidence=87.6, suggested_action="Review manually"
        )


@pytest.mark.asyncio
async def test_suspicious_result_is_attached(sessionmaker):
    sid = await _seed(sessionmaker)
    published = []
    out = await run_fraud_check(sid, _payload(), sessionmaker=sessionmaker, scorer=_SuspiciousScorer(), publish=published.append)
    assert out == "assessed"
    async with sessionmaker() as session:
        s = await session.get(ScoreSubmission, sid)
    assert s.status == "pending"
    assert s.is_suspicious is True
    assert s.suspicion_reason == "Score jumped 25x in an hour. (confidence 88%)"
    assert s.fraud_confidence == 88
    assert s.suggested_action == "Review manually"
    assert [(c.doc_id, c.op) for c in published] == [(str(sid), "updated")]


@pytest.mark.asyncio
async def test_timeout_rejects(sessionmaker):
    sid = await _seed(sessionmaker)
    out = await run_fraud_check(sid, _payload(), sessionmaker=sessionmaker, scorer=_SlowScorer(), timeout=0.05)
    assert out == "rejected"
    async with sessionmaker() as session:
        s = await session.get(ScoreSubmission, sid)
    assert s.status == "rejected"
    assert s.suspicion_reason == "Automated fraud check failed: timed out after 0.05s"
    assert s.is_suspicious is None


@pytest.mark.asyncio
async def test_deleted_submission_is_left_alone(sessionmaker, scorer):
    published = []
    out = await run_fraud_check(uuid.uuid4(), _payload(), sessionmaker=sessionmaker, scorer=scorer, publish=published.append)
    assert out == "missing"
    assert published == []


@pytest.mark.asyncio
async def test_malformed_request_rejects_without_calling_scorer(sessionmaker, scorer):
    sid = await _seed(sessionmaker)
    published = []
    out = await run_fraud_check(
        sid, {"currentSubmission": {}}, sessionmaker=sessionmaker, scorer=scorer, publish=published.append
    )
    assert out == "rejected"
    assert scorer.calls == []
    assert len(published) == 1
    async with sessionmaker() as session:
        s = await session.get(ScoreSubmission, sid)
    assert s.status == "rejected"
    assert s.suspicion_reason.startswith("Automated fraud check failed: malformed request")
