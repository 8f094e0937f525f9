"""
app/services package marker.
"""

from app.services.acquisition_service import (
    AcquisitionService,
    build_acquisition_pipeline,
    get_acquisition_service,
)

__all__ = [
    "AcquisitionService",
    "build_acquisition_pipeline",
    "get_acquisition_service",
]
