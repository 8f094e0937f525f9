"""
tests/test_acquisition_router.py

HTTP surface of the acquisition router with the service replaced.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.acquisition.errors import NotFoundError
from app.acquisition.pipeline import summarize_results
from app.acquisition.provider_file import ProviderFileImportSummary, ProviderFileIssue
from app.api.routers import acquisition_router
from app.domain.execution import BatchRunResult, ExecutionResult, ReconcileAction, ReconcileOutcome
from app.services.acquisition_service import get_acquisition_service
from db.session import get_db

KNOWN_ENDPOINT = uuid.uuid4()


class FakeAcquisitionService:
    def __init__(self) -> None:
        self.import_paths: list[str | None] = []

    def run_category(self, *, db, category: str) -> ExecutionResult:
        if category == "gas":
            raise NotFoundError("Unknown provider category 'gas'.")
        return ExecutionResult(
            category="mobile",
            success=True,
            execution_time_ms=12,
            providers_fetched=1,
            providers_saved=1,
            attempts=1,
            outcomes=(
                ReconcileOutcome(
                    name="Telia",
                    category="mobile",
                    action=ReconcileAction.INSERTED,
                    fingerprint="a" * 64,
                    provider_id=uuid.uuid4(),
                ),
            ),
        )

    def run_all_categories(self, *, db) -> BatchRunResult:
        results = (
            ExecutionResult(category="electricity", success=True, providers_fetched=2, providers_saved=2),
            ExecutionResult(category="mobile", success=False, error="All 1 endpoints failed"),
        )
        return BatchRunResult(results=results, summary=summarize_results(results))

    def run_endpoint(self, *, db, endpoint_id: uuid.UUID) -> ExecutionResult:
        if endpoint_id != KNOWN_ENDPOINT:
            raise NotFoundError(f"Endpoint {endpoint_id} does not exist.")
        return ExecutionResult(category="banking", success=True, endpoint_id=endpoint_id)

    def import_provider_file(self, *, db, path: str | None = None) -> ProviderFileImportSummary:
        self.import_paths.append(path)
        if path == "missing.txt":
            raise FileNotFoundError("missing.txt")
        return ProviderFileImportSummary(
            path=path or "data/providers.txt",
            registered=12,
            skipped=1,
            issues=[ProviderFileIssue(4, "gas|X|https://x.no", "unknown category 'gas'")],
        )


@pytest.fixture()
def service() -> FakeAcquisitionService:
    return FakeAcquisitionService()


@pytest.fixture()
def client(service: FakeAcquisitionService) -> Iterator[TestClient]:
    application = FastAPI()
    application.include_router(acquisition_router)

    def _no_db() -> Iterator[None]:
        yield None

    application.dependency_overrides[get_db] = _no_db
    application.dependency_overrides[get_acquisition_service] = lambda: service
    with TestClient(application) as test_client:
        yield test_client


class TestAcquisitionRouter:
    def test_run_category(self, client: TestClient) -> None:
        response = client.post("/acquisition/categories/mobil/run")

        assert response.status_code == 200
        body = response.json()
        assert body["category"] == "mobile"
        assert body["providers_saved"] == 1
        assert body["outcomes"][0]["action"] == "inserted"

    def test_unknown_category_is_404(self, client: TestClient) -> None:
        response = client.post("/acquisition/categories/gas/run")

        assert response.status_code == 404
        assert "gas" in response.json()["detail"]

    def test_run_all(self, client: TestClient) -> None:
        response = client.post("/acquisition/run-all")

        assert response.status_code == 200
        summary = response.json()["summary"]
        assert summary["total_categories"] == 2
        assert summary["failed_categories"] == 1
        assert summary["total_saved"] == 2

    def test_run_endpoint(self, client: TestClient) -> None:
        assert client.post(f"/acquisition/endpoints/{KNOWN_ENDPOINT}/run").status_code == 200
        assert client.post(f"/acquisition/endpoints/{uuid.uuid4()}/run").status_code == 404
        assert client.post("/acquisition/endpoints/not-a-uuid/run").status_code == 422

    def test_import_provider_file(self, client: TestClient, service: FakeAcquisitionService) -> None:
        response = client.post("/acquisition/provider-file/import", json={"path": "custom.txt"})

        assert response.status_code == 200
        assert response.json()["registered"] == 12
        assert response.json()["issues"][0]["line_number"] == 4
        assert service.import_paths == ["custom.txt"]

    def test_import_without_body_uses_default_path(self, client: TestClient, service: FakeAcquisitionService) -> None:
        response = client.post("/acquisition/provider-file/import")

        assert response.status_code == 200
        assert service.import_paths == [None]

    def test_missing_provider_file_is_400(self, client: TestClient) -> None:
        response = client.post("/acquisition/provider-file/import", json={"path": "missing.txt"})

        assert response.status_code == 400
