"""FastAPI dependencies that build services from the application's shared handles."""

from fastapi import Request

from registry.services.lifecycle_service import DatasetLifecycleService
from registry.services.query_service import QueryService


def get_query_service(request: Request) -> QueryService:
    return QueryService(request.app.state.store)


def get_lifecycle_service(request: Request) -> DatasetLifecycleService:
    return DatasetLifecycleService(request.app.state.store, request.app.state.blob_store)
