# Base exception class
from .base import DynamoDBMapperError

from .domain_exceptions import (
    ValidationError,
    NotFoundError,
    ConflictError,
    ConnectionError,
    RetryableError,
    UnsupportedOperationError,
)

__all__ = [
    # Base exception
    "DynamoDBMapperError",

    # Domain exceptions (alphabetically ordered)
    "ConflictError",
    "ConnectionError",
    "NotFoundError",
    "RetryableError",
    "UnsupportedOperationError",
    "ValidationError",
]
