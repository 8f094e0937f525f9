"""
Storage layer exports.
"""

from app.acquisition.store.base import AcquisitionStore, RawEndpointRow
from app.acquisition.store.sqlalchemy_store import SQLAlchemyAcquisitionStore

__all__ = ["AcquisitionStore", "RawEndpointRow", "SQLAlchemyAcquisitionStore"]
