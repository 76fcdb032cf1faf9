"""Configuration settings for the metadata registry server."""

import os


REGISTRY_HOST = os.environ.get("REGISTRY_HOST", "0.0.0.0")

REGISTRY_PORT = int(os.environ.get("REGISTRY_PORT", "8000"))

USE_TEST_DB = os.environ.get("REGISTRY_USE_TEST_DB", "false").lower() == "true"

DATABASE_PATH = os.environ.get(
    "REGISTRY_DATABASE_PATH",
    "./data/test.sqlite3" if USE_TEST_DB else "./data/prod.sqlite3",
)

BLOB_STORE_API_URL = os.environ.get("BLOB_STORE_API_URL", "https://api.estuary.tech")

BLOB_STORE_UPLOAD_URL = os.environ.get("BLOB_STORE_UPLOAD_URL", "https://upload.estuary.tech")

BLOB_STORE_API_KEY = os.environ.get("BLOB_STORE_API_KEY", "")

BLOB_STORE_TIMEOUT_SECONDS = float(os.environ.get("BLOB_STORE_TIMEOUT_SECONDS", "30"))

BLOB_DELETE_RETRIES = int(os.environ.get("BLOB_DELETE_RETRIES", "5"))

PUBLISH_UPDATE_ATTEMPTS = int(os.environ.get("PUBLISH_UPDATE_ATTEMPTS", "3"))

DELETE_ROUTE = "/metadata/files"
