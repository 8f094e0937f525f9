"""
app/repositories package marker.
"""

from app.repositories.endpoint_repository import EndpointRepository
from app.repositories.execution_log_repository import ExecutionLogRepository
from app.repositories.provider_repository import ProviderRepository

__all__ = [
    "EndpointRepository",
    "ExecutionLogRepository",
    "ProviderRepository",
]
