"""Entry point for the metadata registry service."""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from registry.blob_store_client import BlobStore, BlobStoreClient
from registry.config import DATABASE_PATH, REGISTRY_HOST, REGISTRY_PORT
from registry.database import Database
from registry.exceptions import (
    AuthorizationError,
    BlobStoreError,
    ConflictError,
    NotFoundError,
    RegistryException,
    StoreError,
    ValidationError,
)
from registry.routes import metadata_router
from registry.store import MetadataStore

logger = setup_logging('registry')


def _error_response(
    request: Request,
    exc: Exception,
    status_code: int,
    code: str,
    level: int = logging.WARNING,
) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.log(
        level,
        f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=exc if level >= logging.ERROR else None,
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": code}
    )


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()))
            detail = f"Missing or invalid parameter: {location}"
        else:
            detail = "Missing or invalid parameters"
        return _error_response(request, ValidationError(detail), status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR")

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR")

    @app.exception_handler(AuthorizationError)
    async def authorization_handler(request: Request, exc: AuthorizationError):
        return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "AUTHORIZATION_FAILED")

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "NOT_FOUND")

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "CONFLICT")

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "STORE_ERROR", logging.ERROR)

    @app.exception_handler(BlobStoreError)
    async def blob_store_error_handler(request: Request, exc: BlobStoreError):
        return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "BLOB_STORE_ERROR", logging.ERROR)

    @app.exception_handler(RegistryException)
    async def registry_exception_handler(request: Request, exc: RegistryException):
        return _error_response(
            request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", logging.ERROR
        )


def create_app(
    store: Optional[MetadataStore] = None,
    blob_store: Optional[BlobStore] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        store: Metadata store to serve; opened from DATABASE_PATH on startup if omitted
        blob_store: Blob store client; created from configuration on startup if omitted

    Returns:
        Configured application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Metadata registry starting up...")
        owned_client: Optional[BlobStoreClient] = None

        if app.state.store is None:
            database = Database(DATABASE_PATH)
            database.init_schema()
            app.state.store = MetadataStore(database)
            logger.info("Database initialized")

        if app.state.blob_store is None:
            owned_client = BlobStoreClient()
            app.state.blob_store = owned_client

        yield

        logger.info("Metadata registry shutting down...")
        if owned_client is not None:
            await owned_client.close()

    app = FastAPI(
        title="Dataset Metadata Registry",
        description="Metadata for shared datasets, with wallet-signature authorization",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.blob_store = blob_store

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Middleware to log all HTTP requests and responses.
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()
        logger.info(f"Request started: {request.method} {request.url.path} [request_id={request_id}]")

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
        )

        response.headers["X-Request-ID"] = request_id
        return response

    _register_exception_handlers(app)
    app.include_router(metadata_router)

    @app.get("/")
    async def root():
        """
        Root endpoint for health check.
        """
        return {"message": "Dataset Metadata Registry API", "status": "running"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "registry"}

    @app.get("/ready")
    async def ready_check(request: Request):
        """
        Readiness check endpoint.
        Verifies database connectivity and that a blob store client is configured.
        """
        try:
            await request.app.state.store.ping()
            db_status = "ok"
        except Exception as e:
            db_status = f"error: {e}"

        blob_status = "ok" if request.app.state.blob_store is not None else "error: not configured"

        ready = db_status == "ok" and blob_status == "ok"
        return JSONResponse(
            status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ready": ready, "database": db_status, "blob_store": blob_status}
        )

    return app


app = create_app()


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "registry.main:app",
        host=REGISTRY_HOST,
        port=REGISTRY_PORT,
    )


if __name__ == "__main__":
    main()
