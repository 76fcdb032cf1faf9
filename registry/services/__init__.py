"""Service layer for business logic."""

from registry.services.lifecycle_service import DatasetLifecycleService
from registry.services.query_service import QueryService

__all__ = [
    "DatasetLifecycleService",
    "QueryService",
]
