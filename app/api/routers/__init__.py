"""
app/api/routers package marker.
"""

from app.api.routers.acquisition import router as acquisition_router

__all__ = [
    "acquisition_router",
]
