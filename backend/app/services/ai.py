"""
Clients for the two hosted generative-AI functions.

Both talk to an OpenAI-compatible chat-completions endpoint, ask for a JSON
object back, and validate it against the contracts in ``app.schemas.ai``.
Any transport error, timeout or malformed answer surfaces as ``AIServiceError``;
nothing here retries.
"""
from __future__ import annotations
from functools import lru_cache
import openai
from openai import AsyncOpenAI
from pydantic import ValidationError
import structlog
from app.config import settings
from app.schemas.ai import FraudCheckRequest, FraudAssessment, ImageVerificationRequest, VerificationVerdict

log = structlog.get_logger()


class AIServiceError(Exception):
    pass


FRAUD_SYSTEM_PROMPT = """You are an AI fraud detection system for a retro arcade event, acting as an expert analyst.
Your task is to analyze a new score submission and identify patterns indicating spam or fraudulent activity beyond simple duplicate counts.
Consider the player's history for the specific game to detect anomalies such as unrealistic score increases, submission frequency, or inconsistent scoring patterns.
Focus your analysis on the provided textual data and metadata; you cannot analyze the image content directly.

Answer with a JSON object with exactly these keys:
  "isSuspicious": boolean,
  "reason": string, a detailed explanation for the suspicion or lack thereof,
  "confidence": number from 0 to 100,
  "suggestedAction": string, e.g. "Review manually", "Reject automatically", "Approve"."""

VERIFY_SYSTEM_PROMPT = """You are an expert image analysis assistant for retro arcade game high score verification.
Carefully examine the image to identify the score displayed and compare it with the entered score.

If the scores match, set "isVerified" to true.
If the scores do not match, set "isVerified" to false and explain in "discrepancyReason".
If you cannot clearly identify a score in the image, set "isVerified" to false, "imageDetectedScore" to null, and explain why in "discrepancyReason".
If verified, "discrepancyReason" is "No discrepancy found."

Answer with a JSON object with exactly these keys:
  "isVerified": boolean,
  "imageDetectedScore": integer or null,
  "discrepancyReason": string,
  "confidence": number from 0 to 1."""


def render_fraud_prompt(req: FraudCheckRequest) -> str:
    cur = req.current_submission
    lines = [
        "Here is the current score submission details:",
        f"Player ID: {cur.player_id}",
        f"Game Name: {cur.game_name}",
        f"Score Value: {cur.score_value}",
        f"Image Proof URL: {cur.image_url or 'Not yet available.'}",
        f"Timestamp: {cur.timestamp}",
        "",
        "Player Context:",
        f"Name: {req.player_context.name}",
        f"Instagram: {req.player_context.instagram or ''}",
        "",
        "Previous Scores by Player for this Game (sorted chronologically by timestamp):",
    ]
    if req.previous_scores_by_player_for_game:
        lines += [f"- Score: {p.score_value}, Timestamp: {p.timestamp}" for p in req.previous_scores_by_player_for_game]
    else:
        lines.append("No previous scores for this player in this game.")
    lines += [
        "",
        "Based on all the above information, determine if the current submission is suspicious.",
    ]
    return "\n".join(lines)


def _json_payload(raw: str | None) -> str:
    text = (raw or "").strip()
    if text.startswith("```"):
        # ```json ... ``` fences from models that ignore response_format
        text = text.split("```")[1]
        if text.startswith("json"):
            text = text[4:]
    return text.strip()


class _ChatJSONClient:
    def __init__(self, client: AsyncOpenAI, model: str):
        self.client = client
        self.model = model

    async def _complete(self, messages: list[dict]) -> str:
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format={"type": "json_object"},
                temperature=0,
            )
        except openai.OpenAIError as e:
            raise AIServiceError(f"{type(e).__name__}: {e}") from e
        if not completion.choices:
            raise AIServiceError("empty completion")
        return _json_payload(completion.choices[0].message.content)


class FraudScorer(_ChatJSONClient):
    async def assess(self, request: FraudCheckRequest) -> FraudAssessment:
        raw = await self._complete([
            {"role": "system", "content": FRAUD_SYSTEM_PROMPT},
            {"role": "user", "content": render_fraud_prompt(request)},
        ])
        try:
            return FraudAssessment.model_validate_json(raw)
        except ValidationError as e:
            raise AIServiceError(f"malformed fraud assessment: {e.error_count()} error(s)") from e


class ScoreImageVerifier(_ChatJSONClient):
    async def verify(self, request: ImageVerificationRequest) -> VerificationVerdict:
        prompt = (
            f'Analyze this high score screen for the game "{request.game_name}".\n'
            f"Game Name: {request.game_name}\n"
            f"Entered Score: {request.entered_score}"
        )
        raw = await self._complete([
            {"role": "system", "content": VERIFY_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": request.photo_data_uri}},
                ],
            },
        ])
        try:
            return VerificationVerdict.model_validate_json(raw)
        except ValidationError as e:
            raise AIServiceError(f"malformed verification verdict: {e.error_count()} error(s)") from e


def _openai_client() -> AsyncOpenAI:
    return AsyncOpenAI(
        api_key=settings.ai_api_key,
        base_url=settings.ai_base_url,
        timeout=settings.ai_timeout_seconds,
        max_retries=0,
    )


def build_fraud_scorer() -> FraudScorer:
    # Worker jobs each run their own event loop, so they build a fresh client
    return FraudScorer(_openai_client(), settings.ai_model)


@lru_cache(maxsize=1)
def get_fraud_scorer() -> FraudScorer:
    return build_fraud_scorer()


@lru_cache(maxsize=1)
def get_image_verifier() -> ScoreImageVerifier:
    return ScoreImageVerifier(_openai_client(), settings.ai_vision_model)


def assessment_reason(a: FraudAssessment) -> str:
    """Human-readable suspicion reason stored on the submission."""
    return f"{a.reason.strip()} (confidence {round(a.confidence)}%)"
