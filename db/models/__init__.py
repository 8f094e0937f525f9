"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.execution_log import EndpointExecutionLog, ImportLog
from db.models.provider import Provider
from db.models.provider_endpoint import ProviderEndpoint
from db.models.provider_fingerprint import ProviderFingerprint

__all__ = [
    "EndpointExecutionLog",
    "ImportLog",
    "Provider",
    "ProviderEndpoint",
    "ProviderFingerprint",
]
