from __future__ import annotations
import io
import uuid
import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool
from app.main import app
from app.db import Base, get_sessionmaker
from app.jobs.queue import get_job_queue
from app.models.user import Admin
from app.schemas.ai import FraudAssessment, VerificationVerdict
from app.services.ai import get_fraud_scorer, get_image_verifier
from app.services.feed import ChangeFeed, get_change_feed
from app.services.storage import get_storage
from app.services.verification import get_http_client

MEDIA_BASE = "http://media.test"


def make_png(color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (16, 16), color).save(buf, format="PNG")
    return buf.getvalue()


class FakeStorage:
    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.error: Exception | None = None

    def put_bytes(self, key, data, content_type):
        if self.error:
            raise self.error
        self.objects[key] = (data, content_type)

    def public_url(self, key):
        return f"{MEDIA_BASE}/{key}"


class FakeScorer:
    def __init__(self):
        self.calls = []
        self.error: Exception | None = None
        self.result = FraudAssessment(
            is_suspicious=False, reason="Consistent with history", confidence=12, suggested_action="Approve"
        )

    async def assess(self, request):
        self.calls.append(request)
        if self.error:
            raise self.error
        return self.result


class FakeVerifier:
    def __init__(self):
        self.calls = []
        self.error: Exception | None = None
        self.result = VerificationVerdict(
            is_verified=True, image_detected_score=None, discrepancy_reason="No discrepancy found.", confidence=0.9
        )

    async def verify(self, request):
        self.calls.append(request)
        if self.error:
            raise self.error
        return self.result


@pytest_asyncio.fixture
async def sessionmaker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'arcade.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def scorer():
    return FakeScorer()


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest_asyncio.fixture
async def http_client(storage):
    # Serves whatever FakeStorage holds under MEDIA_BASE; anything else is a 404
    def handler(request: httpx.Request) -> httpx.Response:
        obj = storage.objects.get(request.url.path.lstrip("/"))
        if obj is None:
            return httpx.Response(404)
        return httpx.Response(200, content=obj[0], headers={"content-type": obj[1]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        yield client


@pytest_asyncio.fixture
async def ac(sessionmaker, storage, scorer, verifier, feed, http_client):
    app.dependency_overrides.update({
        get_sessionmaker: lambda: sessionmaker,
        get_storage: lambda: storage,
        get_fraud_scorer: lambda: scorer,
        get_image_verifier: lambda: verifier,
        get_http_client: lambda: http_client,
        get_change_feed: lambda: feed,
        get_job_queue: lambda: None,
    })
    try:
        async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


async def _register_login(ac: AsyncClient) -> tuple[dict, str]:
    email = f"user-{uuid.uuid4()}@ex.com"
    assert (await ac.post("/auth/register", json={"email": email, "password": "supersecret"})).status_code == 201
    r = await ac.post("/auth/login", json={"email": email, "password": "supersecret"})
    assert r.status_code == 200
    hdrs = {"Authorization": f"Bearer {r.json()['access']}"}
    me = await ac.get("/auth/me", headers=hdrs)
    return hdrs, me.json()["id"]


@pytest_asyncio.fixture
async def user_headers(ac):
    hdrs, _ = await _register_login(ac)
    return hdrs


@pytest_asyncio.fixture
async def admin_headers(ac, sessionmaker):
    hdrs, user_id = await _register_login(ac)
    async with sessionmaker() as session:
        session.add(Admin(user_id=uuid.UUID(user_id)))
        await session.commit()
    return hdrs


@pytest_asyncio.fixture
async def arcade(ac, admin_headers, user_headers):
    """One active game, one player, ready for submissions."""
    game = (await ac.post("/admin/games", headers=admin_headers, json={"name": "Galaga"})).json()
    player = (await ac.post("/players", headers=user_headers, json={"name": "Ada", "group_size": 2})).json()
    return {"game": game, "player": player}


async def submit(ac, headers, player_id, score, *, game_id=None, game_name=None, image=None):
    data = {"player_id": player_id, "score_value": str(score)}
    if game_id:
        data["game_id"] = game_id
    if game_name:
        data["game_name"] = game_name
    files = {"image": ("proof.png", make_png() if image is None else image, "image/png")}
    return await ac.post("/scores", headers=headers, data=data, files=files)


@pytest.fixture
def submit_score():
    return submit
