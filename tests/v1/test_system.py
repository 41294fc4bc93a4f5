# tests/v1/test_system.py
"""Tests for stats, export, uploads and service endpoints."""

import json
from pathlib import Path

from fastapi import status

from codeshare.core.settings import settings


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


def test_root_describes_api(client) -> None:
    data = client.get("/").json()
    assert data["name"] == "Code Share API"
    assert data["realtime"] == "/api/ws"


def test_unknown_route_is_404(client) -> None:
    assert client.get("/api/nothing-here").status_code == status.HTTP_404_NOT_FOUND


def test_stats(client, make_post) -> None:
    make_post(language="python")
    make_post(language="python")
    post = make_post(language="java")
    client.post(f"/api/posts/{post['id']}/like")

    stats = client.get("/api/stats").json()

    assert stats["totalPosts"] == 3
    assert stats["totalLikes"] == 1
    assert stats["languages"] == {"python": 2, "java": 1}
    assert stats["recentPosts"][0]["id"] == post["id"]


def test_export_bundle(client, make_post, admin_headers) -> None:
    post = make_post()
    client.post(f"/api/posts/{post['id']}/comments", json={"author": "B", "text": "hi"})

    response = client.get("/api/export", headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    assert "attachment" in response.headers["content-disposition"]
    bundle = json.loads(response.content)
    assert bundle["totalPosts"] == 1
    assert bundle["totalComments"] == 1
    assert bundle["posts"][0]["id"] == post["id"]
    assert str(post["id"]) in bundle["comments"]
    assert "exportedAt" in bundle


def test_upload_stores_file(client, admin_headers) -> None:
    response = client.post(
        "/api/upload",
        files={"file": ("snippet.py", b"print('hi')\n", "text/x-python")},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    info = response.json()["file"]
    assert info["originalname"] == "snippet.py"
    assert info["size"] == 12
    stored = Path(settings.upload_dir) / info["filename"]
    assert stored.read_bytes() == b"print('hi')\n"
    assert client.get(info["path"]).content == b"print('hi')\n"


def test_upload_requires_admin(client) -> None:
    response = client.post("/api/upload", files={"file": ("a.txt", b"x", "text/plain")})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_upload_size_limit(client, admin_headers, monkeypatch) -> None:
    monkeypatch.setattr(settings, "upload_max_bytes", 4)
    before = set(Path(settings.upload_dir).iterdir())

    response = client.post(
        "/api/upload",
        files={"file": ("big.txt", b"0123456789", "text/plain")},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    assert set(Path(settings.upload_dir).iterdir()) == before
