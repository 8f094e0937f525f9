"""
app/api/routers/acquisition.py

Provider acquisition endpoints.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.acquisition.errors import NotFoundError
from app.schemas.acquisition import (
    BatchRunResponse,
    ExecutionResultResponse,
    ProviderFileImportRequest,
    ProviderFileImportResponse,
)
from app.services.acquisition_service import AcquisitionService, get_acquisition_service
from db.session import get_db

router = APIRouter(prefix="/acquisition", tags=["acquisition"])


@router.post("/categories/{category}/run", response_model=ExecutionResultResponse)
def run_category(
    category: str,
    db: Session = Depends(get_db),
    acquisition_service: AcquisitionService = Depends(get_acquisition_service),
) -> ExecutionResultResponse:
    """
    Fetch, reconcile and log one provider category.
    """

    try:
        result = acquisition_service.run_category(db=db, category=category)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return ExecutionResultResponse.from_result(result)


@router.post("/run-all", response_model=BatchRunResponse)
def run_all_categories(
    db: Session = Depends(get_db),
    acquisition_service: AcquisitionService = Depends(get_acquisition_service),
) -> BatchRunResponse:
    """
    Run every category sequentially and return per-category results.
    """

    return BatchRunResponse.from_batch(acquisition_service.run_all_categories(db=db))


@router.post("/endpoints/{endpoint_id}/run", response_model=ExecutionResultResponse)
def run_endpoint(
    endpoint_id: uuid.UUID,
    db: Session = Depends(get_db),
    acquisition_service: AcquisitionService = Depends(get_acquisition_service),
) -> ExecutionResultResponse:
    try:
        result = acquisition_service.run_endpoint(db=db, endpoint_id=endpoint_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return ExecutionResultResponse.from_result(result)


@router.post("/provider-file/import", response_model=ProviderFileImportResponse)
def import_provider_file(
    request: ProviderFileImportRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    acquisition_service: AcquisitionService = Depends(get_acquisition_service),
) -> ProviderFileImportResponse:
    """
    Register scraping endpoints from a `category|name|url` provider file.
    """

    try:
        summary = acquisition_service.import_provider_file(
            db=db,
            path=request.path if request is not None else None,
        )
    except (ValueError, FileNotFoundError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return ProviderFileImportResponse.from_summary(summary)
