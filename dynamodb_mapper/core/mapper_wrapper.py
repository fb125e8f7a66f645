"""
Mapper Wrapper

A facade over a DynamoDBMapper and a low-level DynamoDB client. Each method
forwards its arguments unchanged to exactly one collaborator call:

- update          -> client.update_item
- save            -> mapper.save (returns the saved item)
- load            -> mapper.load (returns the model, or None when absent)
- query/scan      -> mapper.query/scan (PaginatedQueryList/PaginatedScanList)
- query_page/scan_page -> mapper.query_page/scan_page (result pages)

The wrapper owns neither collaborator and holds no other state. It does not
validate, retry or translate errors: anything a collaborator raises reaches
the caller unchanged.
"""

import logging
from typing import Any, Dict, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from ..config import DynamoDBConfig, MapperConfig, TableNameOverride
from ..models import (
    PaginatedQueryList,
    PaginatedScanList,
    QueryExpression,
    QueryResultPage,
    SaveExpression,
    ScanExpression,
    ScanResultPage,
)
from .mapper import DynamoDBMapper
from .session import create_dynamodb_resource

T = TypeVar('T', bound=BaseModel)


class DynamoDBMapperWrapper:
    """
    Delegating facade over a DynamoDBMapper and a low-level DynamoDB client.

    Args:
        mapper: Object mapper handling save/load/query/scan
        client: boto3 DynamoDB client handling raw update_item requests
    """

    def __init__(self, mapper: DynamoDBMapper, client):
        self.mapper = mapper
        self.client = client

    def update(self, request: Dict[str, Any]) -> None:
        """
        Execute a raw UpdateItem request on the low-level client.

        Args:
            request: update_item parameters in low-level (typed AttributeValue) form

        Example:
            wrapper.update({
                'TableName': 'orders',
                'Key': {'customer_id': {'S': 'c-1'}, 'order_id': {'S': 'o-7'}},
                'UpdateExpression': 'SET #s = :s',
                'ExpressionAttributeNames': {'#s': 'status'},
                'ExpressionAttributeValues': {':s': {'S': 'SHIPPED'}},
            })
        """
        self.client.update_item(**request)

    def save(
        self,
        item: T,
        *,
        save_expression: Optional[SaveExpression] = None,
        config: Optional[MapperConfig] = None
    ) -> T:
        """Save an item and return that same item."""
        self.mapper.save(item, save_expression=save_expression, config=config)
        return item

    def load(
        self,
        key_or_class: Union[BaseModel, Type[T]],
        hash_key: Any = None,
        range_key: Any = None,
        *,
        config: Optional[MapperConfig] = None
    ) -> Optional[T]:
        """
        Load an item by key object, or by model class and key values.

        Returns:
            The loaded model, or None if the mapper found no item
        """
        return self.mapper.load(key_or_class, hash_key=hash_key, range_key=range_key, config=config)

    def query(
        self,
        model_class: Type[T],
        query_expression: QueryExpression,
        *,
        config: Optional[MapperConfig] = None
    ) -> PaginatedQueryList:
        return self.mapper.query(model_class, query_expression, config=config)

    def query_page(
        self,
        model_class: Type[T],
        query_expression: QueryExpression,
        *,
        config: Optional[MapperConfig] = None
    ) -> QueryResultPage:
        return self.mapper.query_page(model_class, query_expression, config=config)

    def scan(
        self,
        model_class: Type[T],
        scan_expression: ScanExpression,
        *,
        config: Optional[MapperConfig] = None
    ) -> PaginatedScanList:
        return self.mapper.scan(model_class, scan_expression, config=config)

    def scan_page(
        self,
        model_class: Type[T],
        scan_expression: ScanExpression,
        *,
        config: Optional[MapperConfig] = None
    ) -> ScanResultPage:
        return self.mapper.scan_page(model_class, scan_expression, config=config)


def create_mapper_wrapper(config: DynamoDBConfig, mapper_config: Optional[MapperConfig] = None) -> DynamoDBMapperWrapper:
    """
    Factory function to create a DynamoDBMapperWrapper from connection settings.

    Table names get the config's prefix and environment (see
    DynamoDBConfig.get_table_name) unless mapper_config sets its own
    TableNameOverride.

    Args:
        config: DynamoDB connection configuration
        mapper_config: Mapper-wide settings

    Returns:
        Wrapper over a new DynamoDBMapper and the resource's low-level client
    """
    if config.enable_debug_logging:
        logging.getLogger('dynamodb_mapper').setLevel(logging.DEBUG)

    dynamodb = create_dynamodb_resource(config)

    prefix = config.table_name_prefix()
    base_config = MapperConfig(
        table_name_override=TableNameOverride(table_name_prefix=prefix) if prefix else None
    )
    mapper = DynamoDBMapper(dynamodb, base_config.merge(mapper_config))
    return DynamoDBMapperWrapper(mapper, dynamodb.meta.client)
