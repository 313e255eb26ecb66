from __future__ import annotations
import pytest
from app.config import settings


@pytest.mark.asyncio
async def test_media_falls_back_to_default_playlist(ac):
    body = (await ac.get("/media")).json()
    assert body["playlist_id"] == settings.default_playlist_id
    assert body["is_default"] is True
    assert body["embed_url"].endswith(f"list={settings.default_playlist_id}")


@pytest.mark.asyncio
async def test_admin_sets_playlist(ac, admin_headers, user_headers):
    r = await ac.put("/admin/settings/media", headers=admin_headers, json={"playlist_id": "  PLretro123 "})
    assert r.status_code == 200
    assert r.json()["playlist_id"] == "PLretro123"

    body = (await ac.get("/media")).json()
    assert body == {
        "playlist_id": "PLretro123",
        "embed_url": "https://www.youtube.com/embed/videoseries?list=PLretro123",
        "is_default": False,
    }

    # second write updates the same row
    await ac.put("/admin/settings/media", headers=admin_headers, json={"playlist_id": "PLother"})
    assert (await ac.get("/media")).json()["playlist_id"] == "PLother"

    assert (await ac.put("/admin/settings/media", headers=admin_headers, json={"playlist_id": "   "})).status_code == 422
    assert (await ac.put("/admin/settings/media", headers=user_headers, json={"playlist_id": "PLx"})).status_code == 403
