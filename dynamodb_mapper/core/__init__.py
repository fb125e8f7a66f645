"""
Core components for mapping models onto DynamoDB.

- DynamoDBMapper: Pydantic model <-> DynamoDB item mapper
- DynamoDBMapperWrapper: delegating facade over a mapper and a low-level client
- map_dynamodb_error: ClientError -> mapper exception translation
- Factory functions for boto3 resources and wrappers
"""

from .errors import map_dynamodb_error
from .mapper import DynamoDBMapper
from .mapper_wrapper import DynamoDBMapperWrapper, create_mapper_wrapper
from .session import create_dynamodb_resource

__all__ = [
    "DynamoDBMapper",
    "DynamoDBMapperWrapper",
    "create_dynamodb_resource",
    "create_mapper_wrapper",
    "map_dynamodb_error",
]
