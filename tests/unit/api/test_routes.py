"""Unit tests for API routes."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from hlsforge.api.main import create_app
from hlsforge.application.dtos import BackfillFailure, BackfillReport, SweepReport
from hlsforge.commons.infrastructure.documentdb import HealthStatus
from hlsforge.commons.settings.models import Settings
from hlsforge.domain.exceptions import (
    AssetFileNotFoundException,
    DuplicateAssetException,
    EncodeException,
    InvalidAssetPathException,
    ProbeException,
    VideoNotFoundException,
    VideoNotReadyException,
)
from hlsforge.domain.models import VideoAsset, VideoStatus

FP = "8" * 64


def healthy(flag: bool = True) -> HealthStatus:
    return HealthStatus(
        healthy=flag, latency_ms=1.5, message="ok" if flag else "down"
    )


def make_asset(**overrides) -> VideoAsset:
    data = {
        "id": 1,
        "fingerprint": FP,
        "duration_seconds": 30.0,
        "poster": "15.000000.jpg",
    }
    data.update(overrides)
    return VideoAsset(**data)


@pytest.fixture
def settings():
    """Settings for the app under test."""
    return Settings()


@pytest.fixture
def mock_factory():
    """Create mock infrastructure factory."""
    factory = MagicMock()
    factory.get_document_db.return_value.health_check = AsyncMock(
        return_value=healthy()
    )
    factory.get_video_storage.return_value.health_check = AsyncMock(
        return_value=healthy()
    )
    return factory


@pytest.fixture
def mock_ingestion_service():
    return AsyncMock()


@pytest.fixture
def mock_playback_service():
    return AsyncMock()


@pytest.fixture
def mock_poster_service():
    return AsyncMock()


@pytest.fixture
def client(
    settings,
    mock_factory,
    mock_ingestion_service,
    mock_playback_service,
    mock_poster_service,
):
    """Create test client with mocked dependencies."""
    from hlsforge.api.dependencies import (
        get_infrastructure_factory,
        get_ingestion_service,
        get_playback_service,
        get_poster_service,
        get_settings,
    )

    with (
        patch("hlsforge.api.main.get_settings", return_value=settings),
        patch("hlsforge.api.dependencies.init_services", new_callable=AsyncMock),
        patch("hlsforge.api.dependencies.shutdown_services", new_callable=AsyncMock),
    ):
        app = create_app()
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_infrastructure_factory] = lambda: mock_factory
        app.dependency_overrides[get_ingestion_service] = lambda: mock_ingestion_service
        app.dependency_overrides[get_playback_service] = lambda: mock_playback_service
        app.dependency_overrides[get_poster_service] = lambda: mock_poster_service
        yield TestClient(app, raise_server_exceptions=False)


class TestHealthRoutes:
    """Tests for health check endpoints."""

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert {c["name"] for c in data["components"]} == {"document_db", "storage"}

    def test_health_degraded(self, client, mock_factory):
        mock_factory.get_document_db.return_value.health_check.return_value = healthy(
            False
        )

        assert client.get("/health").json()["status"] == "degraded"

    def test_liveness_check(self, client):
        response = client.get("/health/live")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "ok"}

    def test_readiness_check(self, client, mock_factory):
        assert client.get("/health/ready").json()["ready"] is True

        mock_factory.get_video_storage.return_value.health_check.return_value = (
            healthy(False)
        )
        data = client.get("/health/ready").json()
        assert data["ready"] is False
        assert data["checks"] == {"document_db": True, "storage": False}

    def test_request_id_echoed(self, client):
        response = client.get("/health/live", headers={"X-Request-ID": "req-1"})
        assert response.headers["X-Request-ID"] == "req-1"


class TestUploadRoutes:
    """Tests for the upload endpoint."""

    def test_upload_accepted(self, client, mock_ingestion_service):
        mock_ingestion_service.upload.return_value = make_asset(id=12)

        response = client.post(
            "/v1/videos",
            files={"file": ("clip.mp4", b"video-bytes", "video/mp4")},
        )

        assert response.status_code == status.HTTP_202_ACCEPTED
        data = response.json()
        assert data["video_id"] == 12
        assert data["status"] == "processing"
        assert data["fingerprint"] == FP

        upload = mock_ingestion_service.upload.call_args.args[0]
        assert upload.filename == "clip.mp4"
        assert upload.size == len(b"video-bytes")

    def test_upload_duplicate(self, client, mock_ingestion_service):
        mock_ingestion_service.upload.side_effect = DuplicateAssetException(FP)

        response = client.post(
            "/v1/videos",
            files={"file": ("clip.mp4", b"video-bytes", "video/mp4")},
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        error = response.json()["error"]
        assert error["code"] == "DUPLICATE_VIDEO"
        assert error["details"] == {"fingerprint": FP}
        assert "request_id" in error

    def test_upload_unreadable(self, client, mock_ingestion_service):
        mock_ingestion_service.upload.side_effect = ProbeException(
            "clip.mp4", "no duration reported"
        )

        response = client.post(
            "/v1/videos",
            files={"file": ("clip.mp4", b"video-bytes", "video/mp4")},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"]["code"] == "UNREADABLE_VIDEO"

    def test_upload_without_file(self, client):
        response = client.post("/v1/videos")
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestVideoRoutes:
    """Tests for status, listing and deletion."""

    def test_status(self, client, mock_ingestion_service):
        asset = make_asset(status=VideoStatus.PROCESSED)
        mock_ingestion_service.get_video.return_value = asset

        response = client.get(f"/v1/videos/{asset.public_id}/status")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "processed"

    def test_status_not_found(self, client, mock_ingestion_service):
        mock_ingestion_service.get_video.side_effect = VideoNotFoundException("nope")

        response = client.get("/v1/videos/nope/status")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["code"] == "VIDEO_NOT_FOUND"

    def test_list_filtered(self, client, mock_ingestion_service):
        mock_ingestion_service.list_videos.return_value = [
            make_asset(status=VideoStatus.FAILED)
        ]

        response = client.get("/v1/videos", params={"status": "failed"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["total"] == 1
        mock_ingestion_service.list_videos.assert_called_once_with(
            status=VideoStatus.FAILED
        )

    def test_list_rejects_unknown_status(self, client):
        response = client.get("/v1/videos", params={"status": "done"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_delete(self, client, mock_ingestion_service):
        mock_ingestion_service.delete_video.return_value = True

        response = client.delete("/v1/videos/pub-1")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["success"] is True

    def test_delete_not_found(self, client, mock_ingestion_service):
        mock_ingestion_service.delete_video.return_value = False

        response = client.delete("/v1/videos/pub-1")

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestPlaybackRoutes:
    """Tests for playlists, segments and posters."""

    def test_master_playlist(self, client, mock_playback_service):
        mock_playback_service.get_master_playlist.return_value = b"#EXTM3U\n"

        response = client.get("/v1/videos/pub-1")

        assert response.status_code == status.HTTP_200_OK
        assert response.content == b"#EXTM3U\n"
        assert response.headers["content-type"].startswith(
            "application/vnd.apple.mpegurl"
        )

    def test_master_playlist_not_ready(self, client, mock_playback_service):
        mock_playback_service.get_master_playlist.side_effect = VideoNotReadyException(
            "pub-1", VideoStatus.PROCESSING
        )

        response = client.get("/v1/videos/pub-1")

        assert response.status_code == status.HTTP_409_CONFLICT
        error = response.json()["error"]
        assert error["code"] == "VIDEO_NOT_READY"
        assert error["details"]["status"] == "processing"

    def test_segment(self, client, mock_playback_service):
        mock_playback_service.get_stream_file.return_value = b"\x47"

        response = client.get(f"/v1/videos/{FP}/720_001.ts")

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"] == "video/mp2t"
        mock_playback_service.get_stream_file.assert_called_once_with(
            FP, "720_001.ts"
        )

    def test_segment_missing(self, client, mock_playback_service):
        mock_playback_service.get_stream_file.side_effect = AssetFileNotFoundException(
            f"{FP}/720_999.ts"
        )

        response = client.get(f"/v1/videos/{FP}/720_999.ts")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["code"] == "FILE_NOT_FOUND"

    def test_invalid_path(self, client, mock_playback_service):
        mock_playback_service.get_stream_file.side_effect = InvalidAssetPathException(
            "x/clip.mp4", "Not a playlist or segment"
        )

        response = client.get("/v1/videos/x/clip.mp4")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "INVALID_PATH"

    def test_poster(self, client, mock_playback_service):
        mock_playback_service.get_poster.return_value = b"\xff\xd8"

        response = client.get("/v1/posters/pub-1")

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"] == "image/jpeg"


class TestMaintenanceRoutes:
    """Tests for maintenance jobs."""

    def test_backfill(self, client, mock_poster_service):
        mock_poster_service.backfill_posters.return_value = BackfillReport(
            candidates=2,
            updated=[1],
            failures=[BackfillFailure(video_id=2, fingerprint=FP, reason="boom")],
        )

        response = client.post("/v1/maintenance/posters")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["updated"] == [1]
        assert data["failures"][0]["video_id"] == 2

    def test_sweep(self, client, mock_playback_service):
        mock_playback_service.sweep_orphans.return_value = SweepReport(
            scanned=3, removed=[FP]
        )

        response = client.post("/v1/maintenance/sweep")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["removed"] == [FP]

    def test_server_error_envelope(self, client, mock_playback_service):
        mock_playback_service.sweep_orphans.side_effect = EncodeException(
            "x", "stage", "boom"
        )

        response = client.post("/v1/maintenance/sweep")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error"]["code"] == "ENCODE_ERROR"

    def test_unexpected_error_is_hidden(self, client, mock_playback_service):
        mock_playback_service.sweep_orphans.side_effect = RuntimeError("secret")

        response = client.post("/v1/maintenance/sweep")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        error = response.json()["error"]
        assert error["code"] == "INTERNAL_ERROR"
        assert "secret" not in error["message"]
