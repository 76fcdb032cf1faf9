"""Custom exception classes for the metadata registry."""


class RegistryException(Exception):
    """
    Base exception class for all registry errors.
    """
    pass


class ValidationError(RegistryException):
    """
    Raised when a required parameter is missing or malformed.
    """
    pass


class AuthorizationError(RegistryException):
    """
    Raised when a signature was not produced by the claimed address.
    """
    pass


class NotFoundError(RegistryException):
    """
    Raised when no visible record matches a request.

    Covers both records that do not exist and records the caller may not see.
    """
    pass


class ConflictError(RegistryException):
    """
    Raised when an operation is forbidden by the current record state,
    e.g. deleting a published dataset.
    """
    pass


class StoreError(RegistryException):
    """
    Raised when the metadata database fails.
    """
    pass


class BlobStoreError(RegistryException):
    """
    Raised when the blob store rejects or cannot complete a request.
    """
    pass
