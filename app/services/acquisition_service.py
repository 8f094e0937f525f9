"""
app/services/acquisition_service.py

Service orchestration for provider acquisition runs.
"""

from __future__ import annotations

import uuid
from functools import lru_cache
from pathlib import Path

import requests
from sqlalchemy.orm import Session

from app.acquisition.cancellation import Sleeper
from app.acquisition.fetchers.registry import FetcherRegistry
from app.acquisition.pipeline import AcquisitionPipeline
from app.acquisition.provider_file import ProviderFileImportSummary, import_provider_file
from app.acquisition.store.sqlalchemy_store import SQLAlchemyAcquisitionStore
from app.config import AcquisitionSettings, get_acquisition_settings, resolve_path
from app.domain.execution import BatchRunResult, ExecutionResult, ExecutionType


def build_acquisition_pipeline(
    *,
    session: Session,
    settings: AcquisitionSettings,
    http_session: requests.Session | None = None,
    sleep: Sleeper | None = None,
) -> AcquisitionPipeline:
    """
    Wire a pipeline over a SQLAlchemy session with HTTP fetchers.
    """

    return AcquisitionPipeline(
        store=SQLAlchemyAcquisitionStore(session=session),
        fetchers=FetcherRegistry.from_settings(settings, session=http_session, sleep=sleep),
        settings=settings,
        sleep=sleep,
    )


class AcquisitionService:
    """
    Runs acquisition against the request's database session.
    """

    def __init__(self) -> None:
        self._settings = get_acquisition_settings()
        self._http = requests.Session()

    def _pipeline(self, db: Session) -> AcquisitionPipeline:
        return build_acquisition_pipeline(session=db, settings=self._settings, http_session=self._http)

    def run_category(
        self,
        *,
        db: Session,
        category: str,
        execution_type: str = ExecutionType.MANUAL,
    ) -> ExecutionResult:
        return self._pipeline(db).run_category(category, execution_type=execution_type)

    def run_all_categories(
        self,
        *,
        db: Session,
        execution_type: str = ExecutionType.MANUAL,
    ) -> BatchRunResult:
        return self._pipeline(db).run_all_categories(execution_type=execution_type)

    def run_endpoint(
        self,
        *,
        db: Session,
        endpoint_id: uuid.UUID,
        execution_type: str = ExecutionType.MANUAL,
    ) -> ExecutionResult:
        return self._pipeline(db).run_endpoint(endpoint_id, execution_type=execution_type)

    def import_provider_file(
        self,
        *,
        db: Session,
        path: str | None = None,
    ) -> ProviderFileImportSummary:
        target = Path(resolve_path(path)) if path else Path(self._settings.provider_file_path)
        return import_provider_file(target, registry=self._pipeline(db).registry)


@lru_cache(maxsize=1)
def get_acquisition_service() -> AcquisitionService:
    """
    Build and cache the acquisition service.
    """

    return AcquisitionService()
