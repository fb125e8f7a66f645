import logging
from typing import Optional

from botocore.exceptions import ClientError

from ..exceptions import (
    ConflictError,
    ConnectionError,
    DynamoDBMapperError,
    NotFoundError,
    RetryableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_CONFLICT_CODES = {
    'ConditionalCheckFailedException',
    'TransactionConflictException',
    'ResourceInUseException',
    'DuplicateTransactionException',
}

_VALIDATION_CODES = {
    'ValidationException',
    'ItemCollectionSizeLimitExceededException',
    'LimitExceededException',
    'IdempotentParameterMismatchException',
}

_RETRYABLE_CODES = {
    'ProvisionedThroughputExceededException',
    'RequestLimitExceeded',
    'ThrottlingException',
    'InternalServerError',
    'ServiceUnavailable',
    'ServiceUnavailableException',
    'TransactionCanceledException',
    'TransactionInProgressException',
    'RequestTimeoutException',
}

_CONNECTION_CODES = {
    'UnrecognizedClientException',
    'AccessDeniedException',
    'InvalidEndpointException',
    'IncompleteSignatureException',
    'InvalidSignatureException',
    'ExpiredTokenException',
}


def map_dynamodb_error(
    error: ClientError,
    operation: str,
    table_name: str,
    resource_id: Optional[str] = None
) -> DynamoDBMapperError:
    """Map a DynamoDB ClientError to a mapper exception.

    Args:
        error: The boto3 ClientError
        operation: The operation that failed (e.g., "GetItem", "PutItem")
        table_name: The DynamoDB table name
        resource_id: Optional item key for context

    Returns:
        ConflictError for failed conditions and transaction conflicts,
        NotFoundError for missing tables or indexes,
        ValidationError for rejected requests,
        RetryableError for throttling and transient service failures,
        ConnectionError for credential/endpoint problems and unknown codes
    """
    error_code = error.response.get('Error', {}).get('Code', 'Unknown')
    error_message = error.response.get('Error', {}).get('Message', str(error))

    context = f"{operation} on {table_name}"
    if resource_id:
        context += f" (resource: {resource_id})"

    full_message = f"{context}: {error_message}"

    if error_code == 'ConditionalCheckFailedException':
        return ConflictError(f"Conditional check failed - {full_message}", resource_id, original_error=error)

    elif error_code in _CONFLICT_CODES:
        return ConflictError(f"Conflict - {full_message}", resource_id, original_error=error)

    elif error_code in ('ResourceNotFoundException', 'TableNotFoundException'):
        return NotFoundError(f"Table not found - {full_message}", 'table', table_name, original_error=error)

    elif error_code == 'IndexNotFoundException':
        return NotFoundError(f"Index not found - {full_message}", 'index', None, original_error=error)

    elif error_code in _VALIDATION_CODES:
        return ValidationError(f"Validation failed - {full_message}", original_error=error)

    elif error_code in _RETRYABLE_CODES:
        return RetryableError(f"Retryable failure - {full_message}", original_error=error)

    elif error_code in _CONNECTION_CODES:
        return ConnectionError(f"Authentication/endpoint failure - {full_message}", original_error=error)

    # Default to ConnectionError for unknown errors
    logger.warning(f"Unknown DynamoDB error code '{error_code}' mapped to ConnectionError")
    return ConnectionError(f"DynamoDB operation failed - {full_message}", original_error=error)
