"""
DynamoDB Mapper

Maps Pydantic models onto DynamoDB tables with boto3, and provides
DynamoDBMapperWrapper, a delegating facade over the mapper and the low-level
DynamoDB client.
"""

from .config import (
    DEFAULT_MAPPER_CONFIG,
    ConsistentReads,
    DynamoDBConfig,
    MapperConfig,
    PaginationLoadingStrategy,
    SaveBehavior,
    TableNameOverride,
)
from .exceptions import (
    ConflictError,
    ConnectionError,
    DynamoDBMapperError,
    NotFoundError,
    RetryableError,
    UnsupportedOperationError,
    ValidationError,
)
from .models import (
    # Table metadata
    GSIDefinition,
    TableMeta,
    # Expressions
    DeleteExpression,
    QueryExpression,
    SaveExpression,
    ScanExpression,
    # Results
    PaginatedList,
    PaginatedQueryList,
    PaginatedScanList,
    QueryResultPage,
    ScanResultPage,
)
from .core import (
    DynamoDBMapper,
    DynamoDBMapperWrapper,
    create_mapper_wrapper,
)

__version__ = "1.0.0"
__all__ = [
    # Configuration
    "DynamoDBConfig",
    "MapperConfig",
    "DEFAULT_MAPPER_CONFIG",
    "SaveBehavior",
    "ConsistentReads",
    "PaginationLoadingStrategy",
    "TableNameOverride",

    # Exceptions
    "ConflictError",
    "ConnectionError",
    "DynamoDBMapperError",
    "NotFoundError",
    "RetryableError",
    "UnsupportedOperationError",
    "ValidationError",

    # Table metadata
    "GSIDefinition",
    "TableMeta",

    # Expressions
    "DeleteExpression",
    "QueryExpression",
    "SaveExpression",
    "ScanExpression",

    # Results
    "PaginatedList",
    "PaginatedQueryList",
    "PaginatedScanList",
    "QueryResultPage",
    "ScanResultPage",

    # Mapper and wrapper
    "DynamoDBMapper",
    "DynamoDBMapperWrapper",
    "create_mapper_wrapper",
]
