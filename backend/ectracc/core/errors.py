"""
Error kinds raised by the catalog and footprint engines.

Absence of a product is not an error: lookups return ``None`` and the HTTP
layer turns that into a 404.
"""

import logging
from contextlib import contextmanager
from typing import Optional

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for failures surfaced by the engines."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class InvalidInputError(ServiceError):
    """Malformed filter, sort or payload values."""

    kind = "invalid_input"
    status_code = 400


class ServiceUnavailableError(ServiceError):
    """The backing store is missing or unreachable."""

    kind = "service_unavailable"
    status_code = 503


class InternalServiceError(ServiceError):
    """Unexpected store failure, e.g. an aggregation error."""

    kind = "internal"
    status_code = 500


@contextmanager
def store_operation(operation: str):
    """
    Annotate failures raised inside the block with the operation name.

    Errors are re-raised on the first failure; nothing is retried here.
    """
    try:
        yield
    except ServiceError as e:
        if e.operation is None:
            e.operation = operation
        logger.debug(f"{operation} failed: {e.message}")
        raise
    except Exception as e:
        raise InternalServiceError(f"{operation} failed: {e}", operation) from e
