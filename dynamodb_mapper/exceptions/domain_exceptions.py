"""
Mapper Exceptions

All errors raised by the mapper extend DynamoDBMapperError. boto3 ClientErrors
are translated into these classes by core.errors.map_dynamodb_error.

Organized by category:
1. Data Validation Errors
2. Resource Not Found Errors
3. Conflict and Conditional Errors
4. Infrastructure and Retry Errors
5. Usage Errors
"""

from typing import Any, Dict, Optional

from .base import DynamoDBMapperError


# =============================================================================
# Data Validation Errors
# =============================================================================

class ValidationError(DynamoDBMapperError):
    """Raised when data validation fails.

    Used for:
    - Items that cannot be converted into their Pydantic model
    - DynamoDB ValidationException responses
    - Query expressions that cannot produce a key condition
    """

    def __init__(self, message: str, errors: Optional[Dict[str, Any]] = None, original_error: Optional[Exception] = None):
        """Initialize validation error.

        Args:
            message: Human-readable error message
            errors: Dictionary of field-level validation errors
            original_error: The original exception that caused this error
        """
        self.errors = errors or {}
        super().__init__(message, original_error, validation_errors=self.errors or None)


# =============================================================================
# Resource Not Found Errors
# =============================================================================

class NotFoundError(DynamoDBMapperError):
    """Raised when a DynamoDB resource (table, index) does not exist.

    An absent item is not an error: load() returns None for it.
    """

    def __init__(self, message: str, resource_type: Optional[str] = None, resource_name: Optional[str] = None, original_error: Optional[Exception] = None):
        """Initialize not found error.

        Args:
            message: Human-readable error message
            resource_type: Type of resource not found (e.g., 'table', 'index')
            resource_name: Name of the resource not found
            original_error: The original exception that caused this error
        """
        self.resource_type = resource_type
        self.resource_name = resource_name
        super().__init__(message, original_error, resource_type=resource_type, resource_name=resource_name)


# =============================================================================
# Conflict and Conditional Errors
# =============================================================================

class ConflictError(DynamoDBMapperError):
    """Raised when a conditional write fails.

    Used for:
    - ConditionalCheckFailedException from save/delete expressions
    - Optimistic locking failures on version attributes
    - Transaction conflicts
    """

    def __init__(self, message: str, resource_id: Optional[str] = None, original_error: Optional[Exception] = None):
        """Initialize conflict error.

        Args:
            message: Human-readable error message
            resource_id: Key of the conflicting item
            original_error: The original exception that caused this error
        """
        self.resource_id = resource_id
        super().__init__(message, original_error, resource_id=resource_id)


# =============================================================================
# Infrastructure and Retry Errors
# =============================================================================

class ConnectionError(DynamoDBMapperError):
    """Raised when connection to DynamoDB fails.

    Used for:
    - Session/resource creation failures
    - Authentication/authorization failures
    - Invalid endpoint configurations
    - Unrecognised service errors
    """


class RetryableError(DynamoDBMapperError):
    """Raised when an operation fails for a temporary reason and can be retried.

    Used for:
    - ProvisionedThroughputExceededException
    - RequestLimitExceeded and other throttling errors
    - Temporary service unavailability and request timeouts
    """

    def __init__(self, message: str, retry_after_seconds: Optional[int] = None, original_error: Optional[Exception] = None):
        """Initialize retryable error.

        Args:
            message: Human-readable error message
            retry_after_seconds: Suggested retry delay in seconds
            original_error: The original exception that caused this error
        """
        self.retry_after_seconds = retry_after_seconds
        super().__init__(message, original_error, retry_after_seconds=retry_after_seconds)


# =============================================================================
# Usage Errors
# =============================================================================

class UnsupportedOperationError(DynamoDBMapperError, TypeError):
    """Raised when a paginated list is used in a way its loading strategy forbids.

    Also a TypeError, so len() on an ITERATION_ONLY list behaves like len() on
    an iterator: list(), tuple() and sorted() fall back to plain iteration.
    """

    def __init__(self, message: str, strategy: Optional[str] = None):
        super().__init__(message, strategy=strategy)
