"""Integration tests for the admin export API endpoints.

Requests run against the real export service, wired to a seeded SQLite
content store and a temporary export directory; only authentication is
overridden.
"""

import io
import json
import uuid
import zipfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from haven_api.api.v1.exports import exports_router
from haven_api.core.background import BoundedTaskRunner
from haven_api.core.config import Settings, get_settings
from haven_api.core.dependencies import get_current_user, get_export_service
from haven_api.lib.export_jobs import ExportJob, JobRegistry
from haven_api.services.export_service import ExportService


def _mock_user(role: str = "admin") -> MagicMock:
    user = MagicMock()
    user.id = uuid.uuid4()
    user.email = f"{role}@havenword.test"
    user.role = role
    user.active = True
    return user


def _make_app(user: MagicMock | None, service: ExportService, settings: Settings) -> FastAPI:
    app = FastAPI()
    app.include_router(exports_router, prefix="/api/v1")
    app.dependency_overrides[get_export_service] = lambda: service
    app.dependency_overrides[get_settings] = lambda: settings
    if user is not None:
        app.dependency_overrides[get_current_user] = lambda: user
    return app


@pytest.fixture
def admin_user() -> MagicMock:
    return _mock_user("admin")


@pytest.fixture
async def admin_client(admin_user: MagicMock, export_service: ExportService, settings: Settings) -> AsyncClient:
    transport = ASGITransport(app=_make_app(admin_user, export_service, settings))
    async with AsyncClient(transport=transport, base_url="https://test") as client:
        yield client


@pytest.fixture
async def member_client(export_service: ExportService, settings: Settings) -> AsyncClient:
    transport = ASGITransport(app=_make_app(_mock_user("member"), export_service, settings))
    async with AsyncClient(transport=transport, base_url="https://test") as client:
        yield client


@pytest.fixture
async def anonymous_client(export_service: ExportService, settings: Settings) -> AsyncClient:
    transport = ASGITransport(app=_make_app(None, export_service, settings))
    async with AsyncClient(transport=transport, base_url="https://test") as client:
        yield client


async def _create_and_finish(client: AsyncClient, runner: BoundedTaskRunner, body: dict) -> str:
    resp = await client.post("/api/v1/admin/export", json=body)
    assert resp.status_code == 202
    await runner.wait_all()
    return resp.json()["job_id"]


class TestAuthorization:
    @pytest.mark.asyncio
    async def test_member_forbidden(self, member_client: AsyncClient) -> None:
        resp = await member_client.post("/api/v1/admin/export", json={"content_types": ["users"], "format": "json"})
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_member_cannot_read_history(self, member_client: AsyncClient) -> None:
        resp = await member_client.get("/api/v1/admin/export/history")
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_token_unauthorized(self, anonymous_client: AsyncClient) -> None:
        resp = await anonymous_client.get("/api/v1/admin/export/options")
        assert resp.status_code == 401


class TestExportOptions:
    @pytest.mark.asyncio
    async def test_lists_catalog(self, admin_client: AsyncClient) -> None:
        resp = await admin_client.get("/api/v1/admin/export/options")
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["content_types"]) == 7
        assert body["content_types"][0]["id"] == "blogs"
        assert [f["id"] for f in body["formats"]] == ["json", "csv", "xml"]
        assert {"value": "custom", "label": "Custom Range"} in body["filters"]["date_ranges"]


@pytest.mark.usefixtures("seeded_content")
class TestCreateExport:
    @pytest.mark.asyncio
    async def test_accepted(self, admin_client: AsyncClient, task_runner: BoundedTaskRunner) -> None:
        resp = await admin_client.post(
            "/api/v1/admin/export",
            json={"content_types": ["users", "blogs"], "format": "json"},
        )
        assert resp.status_code == 202
        body = resp.json()
        assert len(body["job_id"]) == 32
        assert body["status"] == "processing"
        assert body["estimated_seconds"] == 50
        assert body["message"] == "Export job created successfully"
        await task_runner.wait_all()

    @pytest.mark.asyncio
    async def test_records_requesting_admin(
        self, admin_client: AsyncClient, admin_user: MagicMock, task_runner: BoundedTaskRunner
    ) -> None:
        await _create_and_finish(admin_client, task_runner, {"content_types": ["users"], "format": "json"})
        resp = await admin_client.get("/api/v1/admin/export/history")
        assert resp.json()["items"][0]["created_by"] == str(admin_user.id)

    @pytest.mark.asyncio
    async def test_empty_content_types_rejected(self, admin_client: AsyncClient) -> None:
        resp = await admin_client.post("/api/v1/admin/export", json={"content_types": [], "format": "json"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_format_rejected(self, admin_client: AsyncClient) -> None:
        resp = await admin_client.post("/api/v1/admin/export", json={"content_types": ["users"], "format": "pdf"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_content_type_rejected(
        self, admin_client: AsyncClient, job_registry: JobRegistry
    ) -> None:
        resp = await admin_client.post(
            "/api/v1/admin/export",
            json={"content_types": ["users", "donations"], "format": "json"},
        )
        assert resp.status_code == 400
        assert "donations" in resp.json()["detail"]
        assert await job_registry.count() == 0

    @pytest.mark.asyncio
    async def test_inverted_custom_range_rejected(self, admin_client: AsyncClient) -> None:
        resp = await admin_client.post(
            "/api/v1/admin/export",
            json={
                "content_types": ["blogs"],
                "format": "json",
                "filters": {
                    "date_range": "custom",
                    "custom_start_date": "2024-02-01T00:00:00Z",
                    "custom_end_date": "2024-01-01T00:00:00Z",
                },
            },
        )
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_inverted_mixed_aware_naive_range_rejected(self, admin_client: AsyncClient) -> None:
        resp = await admin_client.post(
            "/api/v1/admin/export",
            json={
                "content_types": ["blogs"],
                "format": "json",
                "filters": {
                    "date_range": "custom",
                    "custom_start_date": "2024-03-01T00:00:00Z",
                    "custom_end_date": "2024-02-01T00:00:00",
                },
            },
        )
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_mixed_aware_naive_range_accepted(
        self, admin_client: AsyncClient, task_runner: BoundedTaskRunner
    ) -> None:
        resp = await admin_client.post(
            "/api/v1/admin/export",
            json={
                "content_types": ["blogs"],
                "format": "json",
                "filters": {
                    "date_range": "custom",
                    "custom_start_date": "2024-01-01T00:00:00Z",
                    "custom_end_date": "2024-02-01T00:00:00",
                },
            },
        )
        assert resp.status_code == 202
        await task_runner.wait_all()


@pytest.mark.usefixtures("seeded_content")
class TestExportStatusAndDownload:
    @pytest.mark.asyncio
    async def test_completed_status(self, admin_client: AsyncClient, task_runner: BoundedTaskRunner) -> None:
        job_id = await _create_and_finish(admin_client, task_runner, {"content_types": ["users"], "format": "json"})

        resp = await admin_client.get(f"/api/v1/admin/export/{job_id}")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "completed"
        assert body["progress"] == 100
        assert body["total_items"] == 5
        assert body["processed_items"] == 5
        assert body["file_size"] > 0
        assert body["download_url"] == f"/api/v1/admin/export/{job_id}/download"

    @pytest.mark.asyncio
    async def test_unknown_job(self, admin_client: AsyncClient) -> None:
        resp = await admin_client.get("/api/v1/admin/export/does-not-exist")
        assert resp.status_code == 404
        assert "not found" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_download_json(self, admin_client: AsyncClient, task_runner: BoundedTaskRunner) -> None:
        job_id = await _create_and_finish(
            admin_client,
            task_runner,
            {"content_types": ["users"], "format": "json", "custom_file_name": "members"},
        )

        resp = await admin_client.get(f"/api/v1/admin/export/{job_id}/download")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/json")
        assert 'filename="members.json"' in resp.headers["content-disposition"]
        assert len(json.loads(resp.content)["users"]) == 5

    @pytest.mark.asyncio
    async def test_download_zip(self, admin_client: AsyncClient, task_runner: BoundedTaskRunner) -> None:
        job_id = await _create_and_finish(
            admin_client,
            task_runner,
            {"content_types": ["blogs", "sermons"], "format": "csv", "compress": True},
        )

        resp = await admin_client.get(f"/api/v1/admin/export/{job_id}/download")
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/zip"
        with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
            assert sorted(zf.namelist()) == ["blogs.csv", "sermons.csv"]

    @pytest.mark.asyncio
    async def test_download_not_ready(self, admin_client: AsyncClient, job_registry: JobRegistry) -> None:
        await job_registry.insert(ExportJob(id="running", content_types=["users"], format="json", file_name="x"))
        resp = await admin_client.get("/api/v1/admin/export/running/download")
        assert resp.status_code == 409
        assert "not ready" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_download_unknown_job(self, admin_client: AsyncClient) -> None:
        resp = await admin_client.get("/api/v1/admin/export/missing/download")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_failed_job_status(self, admin_client: AsyncClient, task_runner: BoundedTaskRunner) -> None:
        with patch(
            "haven_api.services.export_service.encode_export",
            side_effect=RuntimeError("encoder exploded"),
        ):
            job_id = await _create_and_finish(
                admin_client, task_runner, {"content_types": ["users"], "format": "json"}
            )

        body = (await admin_client.get(f"/api/v1/admin/export/{job_id}")).json()
        assert body["status"] == "failed"
        assert body["error"] == "encoder exploded"
        assert body["download_url"] is None

        resp = await admin_client.get(f"/api/v1/admin/export/{job_id}/download")
        assert resp.status_code == 409


@pytest.mark.usefixtures("seeded_content")
class TestExportHistory:
    @pytest.mark.asyncio
    async def test_empty(self, admin_client: AsyncClient) -> None:
        resp = await admin_client.get("/api/v1/admin/export/history")
        assert resp.status_code == 200
        body = resp.json()
        assert body["items"] == []
        assert body["pagination"] == {"total": 0, "page": 1, "page_size": 10, "total_pages": 0}

    @pytest.mark.asyncio
    async def test_paginated_newest_first(self, admin_client: AsyncClient, task_runner: BoundedTaskRunner) -> None:
        ids = [
            await _create_and_finish(admin_client, task_runner, {"content_types": [ct], "format": "json"})
            for ct in ("users", "blogs", "sermons")
        ]

        resp = await admin_client.get("/api/v1/admin/export/history", params={"page": 1, "page_size": 2})
        body = resp.json()
        assert [item["id"] for item in body["items"]] == [ids[2], ids[1]]
        assert body["pagination"]["total"] == 3
        assert body["pagination"]["total_pages"] == 2

        resp = await admin_client.get("/api/v1/admin/export/history", params={"page": 2, "page_size": 2})
        assert [item["id"] for item in resp.json()["items"]] == [ids[0]]

    @pytest.mark.asyncio
    async def test_page_size_limit(self, admin_client: AsyncClient) -> None:
        resp = await admin_client.get("/api/v1/admin/export/history", params={"page_size": 101})
        assert resp.status_code == 422


@pytest.mark.usefixtures("seeded_content")
class TestCancelAndDelete:
    @pytest.mark.asyncio
    async def test_cancel_unknown_job(self, admin_client: AsyncClient) -> None:
        resp = await admin_client.post("/api/v1/admin/export/missing/cancel")
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_cancel_processing_job(self, admin_client: AsyncClient, job_registry: JobRegistry) -> None:
        await job_registry.insert(ExportJob(id="running", content_types=["users"], format="json", file_name="x"))
        resp = await admin_client.post("/api/v1/admin/export/running/cancel")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "processing"
        assert body["cancel_requested"] is True

    @pytest.mark.asyncio
    async def test_cancel_completed_job_is_noop(
        self, admin_client: AsyncClient, task_runner: BoundedTaskRunner
    ) -> None:
        job_id = await _create_and_finish(admin_client, task_runner, {"content_types": ["users"], "format": "json"})
        resp = await admin_client.post(f"/api/v1/admin/export/{job_id}/cancel")
        assert resp.status_code == 200
        assert resp.json()["status"] == "completed"

    @pytest.mark.asyncio
    async def test_delete(
        self, admin_client: AsyncClient, task_runner: BoundedTaskRunner, export_service: ExportService
    ) -> None:
        job_id = await _create_and_finish(admin_client, task_runner, {"content_types": ["users"], "format": "json"})
        job = await export_service.get_status(job_id)
        artifact = Path(job.file_path or "")
        assert artifact.exists()

        resp = await admin_client.delete(f"/api/v1/admin/export/{job_id}")
        assert resp.status_code == 200
        assert resp.json() == {"message": "Export deleted successfully", "warning": None}
        assert not artifact.exists()

        assert (await admin_client.get(f"/api/v1/admin/export/{job_id}")).status_code == 404
        assert (await admin_client.get(f"/api/v1/admin/export/{job_id}/download")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_with_undeletable_artifact(
        self, admin_client: AsyncClient, task_runner: BoundedTaskRunner
    ) -> None:
        job_id = await _create_and_finish(admin_client, task_runner, {"content_types": ["users"], "format": "json"})

        with patch(
            "haven_api.lib.export_jobs.registry.remove_artifact",
            side_effect=PermissionError("read-only file system"),
        ):
            resp = await admin_client.delete(f"/api/v1/admin/export/{job_id}")

        assert resp.status_code == 200
        assert "read-only file system" in resp.json()["warning"]
        assert (await admin_client.get(f"/api/v1/admin/export/{job_id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_unknown_job(self, admin_client: AsyncClient) -> None:
        resp = await admin_client.delete("/api/v1/admin/export/missing")
        assert resp.status_code == 404
