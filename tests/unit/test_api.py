"""
API tests through FastAPI's TestClient.

The app is built with create_app() and handed in-memory collaborators, so
requests run the real routes, dependencies and pipelines without FFmpeg
or S3.
"""

import re
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from tests.fakes import FASTSTART_MARKER, InspectableObjectStore
from tubely.api.dependencies import Services
from tubely.config.settings import Settings
from tubely.core.media.errors import ProbeUnavailable
from tubely.core.media.models import Geometry
from tubely.infrastructure.auth.tokens import JWTCredentialValidator, issue_token
from tubely.infrastructure.records.repository import InMemoryVideoRepository
from tubely.infrastructure.storage.assets import LocalAssetStore
from tubely.main import create_app

SECRET = "api-test-secret-key-long-enough-for-hs256"
VIDEO_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"mdat" * 512


@pytest.fixture
def settings(tmp_path, scratch_dir) -> Settings:
    return Settings(
        jwt_secret=SECRET,
        assets_root=str(tmp_path / "assets"),
        scratch_dir=str(scratch_dir),
        s3_bucket="tubely-api-test",
        s3_mock_mode=True,
        media_mock_mode=True,
        max_thumbnail_size_mb=1,
    )


@pytest.fixture
def services(settings, media_tool) -> Services:
    return Services(
        repository=InMemoryVideoRepository(),
        media_tool=media_tool,
        object_store=InspectableObjectStore(bucket_name=settings.s3_bucket),
        asset_store=LocalAssetStore(root=settings.assets_root, base_url=settings.base_url),
        credential_validator=JWTCredentialValidator(SECRET),
    )


@pytest.fixture
def client(settings, services):
    with TestClient(create_app(settings=settings, services=services)) as client:
        yield client


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def auth(user_id) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_token(user_id, SECRET)}"}


@pytest.fixture
def video_id(client, auth) -> str:
    response = client.post("/api/videos", json={"title": "Boots and Cats"}, headers=auth)
    assert response.status_code == 201
    return response.json()["id"]


def upload_video(client, video_id, headers, content_type="video/mp4", data=VIDEO_BYTES):
    return client.post(
        f"/api/video_upload/{video_id}",
        files={"video": ("clip.mp4", data, content_type)},
        headers=headers,
    )


class TestAuthentication:

    def test_missing_token_is_401(self, client, video_id):
        response = upload_video(client, video_id, headers={})

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    def test_bad_token_is_401(self, client):
        response = client.get("/api/videos", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_other_user_cannot_upload(self, client, video_id, services, scratch_dir):
        intruder = {"Authorization": f"Bearer {issue_token(uuid4(), SECRET)}"}

        response = upload_video(client, video_id, headers=intruder)

        assert response.status_code == 401
        assert services.media_tool.probed == []
        assert list(scratch_dir.iterdir()) == []


class TestVideoUpload:

    def test_upload_stores_remuxed_video_and_returns_presigned_url(self, client, auth, video_id, services, scratch_dir):
        response = upload_video(client, video_id, headers=auth)

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == video_id
        assert re.fullmatch(r"mock://tubely-api-test/landscape/[A-Za-z0-9_-]{43}\.mp4\?expires=3600", body["video_url"])
        assert services.object_store.fetch(body["video_url"]) == FASTSTART_MARKER + VIDEO_BYTES
        assert list(scratch_dir.iterdir()) == []

        stored = services.repository.get_video(UUID(video_id))
        assert stored.video_url.startswith("tubely-api-test,landscape/")

    def test_get_video_issues_fresh_url(self, client, auth, video_id):
        upload_video(client, video_id, headers=auth)

        response = client.get(f"/api/videos/{video_id}", headers=auth)

        assert response.status_code == 200
        assert response.json()["video_url"].startswith("mock://tubely-api-test/landscape/")

    def test_list_videos_signs_each_record(self, client, auth, video_id):
        upload_video(client, video_id, headers=auth)
        client.post("/api/videos", json={"title": "No upload yet"}, headers=auth)

        response = client.get("/api/videos", headers=auth)

        assert response.status_code == 200
        videos = response.json()
        assert [v["title"] for v in videos] == ["Boots and Cats", "No upload yet"]
        assert videos[0]["video_url"].startswith("mock://")
        assert videos[1]["video_url"] is None

    def test_wrong_content_type_is_400(self, client, auth, video_id):
        response = upload_video(client, video_id, headers=auth, content_type="video/quicktime")

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_input"

    def test_invalid_video_id_is_400(self, client, auth):
        response = upload_video(client, "not-a-uuid", headers=auth)

        assert response.status_code == 400

    def test_unknown_video_is_404(self, client, auth):
        response = upload_video(client, str(uuid4()), headers=auth)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_tool_failure_is_500_and_record_unchanged(self, client, auth, video_id, services, scratch_dir):
        services.media_tool.probe_error = ProbeUnavailable("ffprobe not found")

        response = upload_video(client, video_id, headers=auth)

        assert response.status_code == 500
        assert response.json()["error"] == "tool_failure"
        assert list(scratch_dir.iterdir()) == []

        check = client.get(f"/api/videos/{video_id}", headers=auth)
        assert check.json()["video_url"] is None

    def test_portrait_prefix(self, client, auth, video_id, services):
        services.media_tool.geometry = Geometry(1080, 1920)

        response = upload_video(client, video_id, headers=auth)

        assert "/portrait/" in response.json()["video_url"]


class TestThumbnailUpload:

    def test_thumbnail_is_stored_and_served(self, client, auth, video_id):
        response = client.post(
            f"/api/thumbnail_upload/{video_id}",
            files={"thumbnail": ("thumb.png", b"\x89PNG-bytes", "image/png")},
            headers=auth,
        )

        assert response.status_code == 200
        thumbnail_url = response.json()["thumbnail_url"]
        assert re.fullmatch(r"http://localhost:8091/assets/[A-Za-z0-9_-]{43}\.png", thumbnail_url)

        served = client.get(thumbnail_url.removeprefix("http://localhost:8091"))
        assert served.status_code == 200
        assert served.content == b"\x89PNG-bytes"

    def test_unsupported_thumbnail_type(self, client, auth, video_id):
        response = client.post(
            f"/api/thumbnail_upload/{video_id}",
            files={"thumbnail": ("thumb.gif", b"GIF89a", "image/gif")},
            headers=auth,
        )

        assert response.status_code == 400

    def test_thumbnail_too_large_is_413(self, client, auth, video_id):
        response = client.post(
            f"/api/thumbnail_upload/{video_id}",
            files={"thumbnail": ("thumb.png", b"x" * (1024 * 1024 + 1), "image/png")},
            headers=auth,
        )

        assert response.status_code == 413


class TestHealth:

    def test_liveness(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["details"]["mock_mode"] == {"s3": True, "media": True}

    def test_readiness_ok_with_fakes(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_readiness_fails_without_secret(self, tmp_path, services):
        settings = Settings(assets_root=str(tmp_path / "assets"), s3_mock_mode=True, jwt_secret="")
        with TestClient(create_app(settings=settings, services=services)) as client:
            response = client.get("/health/ready")

        assert response.status_code == 503
        checks = {c["name"]: c["status"] for c in response.json()["checks"]}
        assert checks["configuration"] == "error"
