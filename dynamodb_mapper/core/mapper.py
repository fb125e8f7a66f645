"""
DynamoDB Object Mapper

Maps Pydantic models onto DynamoDB tables through a boto3 service resource.
Each model declares its table and keys in an inner ``Meta(TableMeta)`` class;
see models.meta for the contract.

The mapper:
- Saves items with UpdateItem or PutItem depending on SaveBehavior
- Enforces optimistic locking through the model's version attribute
- Loads single items, returning None when the item is absent
- Runs queries and scans either one page at a time or as a PaginatedList
- Translates boto3 ClientErrors into mapper exceptions

Behaviour is controlled by MapperConfig. The mapper's own config is merged
over DEFAULT_MAPPER_CONFIG, and a config passed to a single call is merged
over the mapper's config.
"""

import logging
from typing import Any, Dict, Optional, Type, TypeVar, Union

from boto3.dynamodb.conditions import Attr, ConditionBase, Key
from botocore.exceptions import ClientError
from pydantic import BaseModel

from ..config import DEFAULT_MAPPER_CONFIG, MapperConfig, SaveBehavior
from ..exceptions import ValidationError
from ..models import (
    DeleteExpression,
    PaginatedQueryList,
    PaginatedScanList,
    QueryExpression,
    QueryResultPage,
    ResultPage,
    SaveExpression,
    ScanExpression,
    ScanResultPage,
    TableMeta,
    get_table_meta,
)
from ..utils import (
    build_item_key,
    build_model_key,
    build_projection_expression,
    dynamodb_attribute_type,
    item_to_model,
    key_to_resource_id,
    model_to_item,
    to_dynamodb_value,
)
from .errors import map_dynamodb_error

T = TypeVar('T', bound=BaseModel)

logger = logging.getLogger(__name__)


def _and(left: Optional[ConditionBase], right: Optional[ConditionBase]) -> Optional[ConditionBase]:
    if left is None:
        return right
    if right is None:
        return left
    return left & right


class DynamoDBMapper:
    """
    Object mapper for Pydantic models stored in DynamoDB.

    Args:
        dynamodb: boto3 DynamoDB ServiceResource
        config: Mapper-wide settings, merged over DEFAULT_MAPPER_CONFIG
    """

    def __init__(self, dynamodb, config: Optional[MapperConfig] = None):
        self.dynamodb = dynamodb
        self.config = DEFAULT_MAPPER_CONFIG.merge(config)

    @property
    def client(self):
        """Low-level DynamoDB client sharing the resource's session."""
        return self.dynamodb.meta.client

    def _resolve_config(self, config: Optional[MapperConfig]) -> MapperConfig:
        return self.config.merge(config)

    def _table(self, table_name: str):
        return self.dynamodb.Table(table_name)

    def get_table_name(self, model_class: Type[BaseModel], *, config: Optional[MapperConfig] = None) -> str:
        """Table name for a model after applying the config's TableNameOverride."""
        meta = get_table_meta(model_class)
        return self._resolve_config(config).resolve_table_name(meta.table_name)

    # =========================================================================
    # Writes
    # =========================================================================

    def save(
        self,
        item: BaseModel,
        *,
        save_expression: Optional[SaveExpression] = None,
        config: Optional[MapperConfig] = None
    ) -> None:
        """
        Save an item to its table.

        UPDATE and UPDATE_SKIP_NULL_ATTRIBUTES issue UpdateItem and leave
        attributes the model does not declare untouched; PUT and CLOBBER issue
        PutItem and replace the whole item. Unless the behaviour is CLOBBER, a
        model with a version attribute is written only if the stored version
        matches the item's, and the item's version is incremented afterwards.

        Args:
            item: Model instance to save
            save_expression: Extra condition the stored item must satisfy
            config: Per-call settings

        Raises:
            ConflictError: If the save expression or the version check fails
            ValueError: If the item's key attributes are missing
        """
        config = self._resolve_config(config)
        meta = get_table_meta(type(item))
        table_name = config.resolve_table_name(meta.table_name)
        behavior = SaveBehavior(config.save_behavior)
        key = build_item_key(item, meta)

        condition = save_expression.condition_expression if save_expression else None
        attributes = model_to_item(item, exclude_none=False)

        new_version = None
        if meta.version_attribute and behavior != SaveBehavior.CLOBBER:
            current_version = getattr(item, meta.version_attribute)
            if current_version is None:
                condition = _and(condition, Attr(meta.version_attribute).not_exists())
                new_version = 1
            else:
                condition = _and(condition, Attr(meta.version_attribute).eq(current_version))
                new_version = current_version + 1
            attributes[meta.version_attribute] = new_version

        try:
            if behavior in (SaveBehavior.PUT, SaveBehavior.CLOBBER):
                self._put_item(table_name, attributes, condition)
            else:
                self._update_item(
                    table_name, key, attributes, condition,
                    skip_null_attributes=behavior == SaveBehavior.UPDATE_SKIP_NULL_ATTRIBUTES
                )
        except ClientError as e:
            raise map_dynamodb_error(e, "SaveItem", table_name, key_to_resource_id(key)) from e

        if new_version is not None:
            setattr(item, meta.version_attribute, new_version)
        logger.info(f"Saved {type(item).__name__} to {table_name} ({behavior.value}): {key}")

    def _put_item(self, table_name: str, attributes: Dict[str, Any], condition: Optional[ConditionBase]) -> None:
        put_kwargs = {'Item': {name: value for name, value in attributes.items() if value is not None}}
        if condition is not None:
            put_kwargs['ConditionExpression'] = condition
        self._table(table_name).put_item(**put_kwargs)

    def _update_item(
        self,
        table_name: str,
        key: Dict[str, Any],
        attributes: Dict[str, Any],
        condition: Optional[ConditionBase],
        skip_null_attributes: bool
    ) -> None:
        # '#a'/':a' placeholders; boto3 renders conditions with '#n'/':v'
        names = {}
        values = {}
        set_parts = []
        remove_parts = []

        for name, value in attributes.items():
            if name in key or (value is None and skip_null_attributes):
                continue
            name_ref = f"#a{len(names)}"
            names[name_ref] = name
            if value is None:
                remove_parts.append(name_ref)
            else:
                value_ref = f":a{len(values)}"
                values[value_ref] = value
                set_parts.append(f"{name_ref} = {value_ref}")

        clauses = []
        if set_parts:
            clauses.append("SET " + ", ".join(set_parts))
        if remove_parts:
            clauses.append("REMOVE " + ", ".join(remove_parts))

        update_kwargs = {'Key': key}
        if clauses:
            update_kwargs['UpdateExpression'] = " ".join(clauses)
        if names:
            update_kwargs['ExpressionAttributeNames'] = names
        if values:
            update_kwargs['ExpressionAttributeValues'] = values
        if condition is not None:
            update_kwargs['ConditionExpression'] = condition

        self._table(table_name).update_item(**update_kwargs)

    def delete(
        self,
        item: BaseModel,
        *,
        delete_expression: Optional[DeleteExpression] = None,
        config: Optional[MapperConfig] = None
    ) -> None:
        """
        Delete an item by its key.

        Unless the save behaviour is CLOBBER, an item carrying a version is
        deleted only if the stored version matches.

        Raises:
            ConflictError: If the delete expression or the version check fails
        """
        config = self._resolve_config(config)
        meta = get_table_meta(type(item))
        table_name = config.resolve_table_name(meta.table_name)
        key = build_item_key(item, meta)

        condition = delete_expression.condition_expression if delete_expression else None
        if meta.version_attribute and SaveBehavior(config.save_behavior) != SaveBehavior.CLOBBER:
            current_version = getattr(item, meta.version_attribute)
            if current_version is not None:
                condition = _and(condition, Attr(meta.version_attribute).eq(current_version))

        delete_kwargs = {'Key': key}
        if condition is not None:
            delete_kwargs['ConditionExpression'] = condition

        try:
            self._table(table_name).delete_item(**delete_kwargs)
        except ClientError as e:
            raise map_dynamodb_error(e, "DeleteItem", table_name, key_to_resource_id(key)) from e

        logger.info(f"Deleted {type(item).__name__} from {table_name}: {key}")

    # =========================================================================
    # Reads
    # =========================================================================

    def load(
        self,
        key_or_class: Union[BaseModel, Type[T]],
        hash_key: Any = None,
        range_key: Any = None,
        *,
        config: Optional[MapperConfig] = None
    ) -> Optional[T]:
        """
        Load a single item by key.

        Either pass a model instance whose key attributes are set, or a model
        class together with hash_key (and range_key for composite keys).

        Args:
            key_or_class: Model instance carrying the key, or the model class
            hash_key: Partition key value (model class form only)
            range_key: Sort key value (model class form only)
            config: Per-call settings

        Returns:
            The loaded model, or None if no item has that key

        Raises:
            ValueError: If key values are missing or given alongside a key instance
            TypeError: If a MapperConfig is given as a key value
        """
        if isinstance(hash_key, MapperConfig) or isinstance(range_key, MapperConfig):
            raise TypeError("MapperConfig must be passed to load() as config=..., not as a key value")
        config = self._resolve_config(config)

        if isinstance(key_or_class, type):
            model_class = key_or_class
            meta = get_table_meta(model_class)
            key = build_model_key(meta, hash_key, range_key)
        else:
            if hash_key is not None or range_key is not None:
                raise ValueError("hash_key/range_key only apply when loading by model class")
            model_class = type(key_or_class)
            meta = get_table_meta(model_class)
            key = build_item_key(key_or_class, meta)

        table_name = config.resolve_table_name(meta.table_name)
        try:
            response = self._table(table_name).get_item(Key=key, ConsistentRead=config.consistent_read)
        except ClientError as e:
            raise map_dynamodb_error(e, "GetItem", table_name, key_to_resource_id(key)) from e

        if 'Item' not in response:
            logger.debug(f"No item in {table_name} for key {key}")
            return None
        return item_to_model(response['Item'], model_class)

    def _read_kwargs(
        self,
        meta: Type[TableMeta],
        expression: Union[QueryExpression, ScanExpression],
        config: MapperConfig,
        start_key: Optional[Dict[str, Any]],
        include_projection: bool = True
    ) -> Dict[str, Any]:
        """Request parameters shared by Query and Scan."""
        read_kwargs = {}

        if expression.index_name:
            read_kwargs['IndexName'] = expression.index_name
        if expression.filter_expression is not None:
            read_kwargs['FilterExpression'] = expression.filter_expression
        if expression.limit:
            read_kwargs['Limit'] = expression.limit
        if start_key:
            read_kwargs['ExclusiveStartKey'] = start_key

        if include_projection:
            projection, names = build_projection_expression(expression.projection)
            if projection:
                read_kwargs['ProjectionExpression'] = projection
                read_kwargs['ExpressionAttributeNames'] = names

        consistent = expression.consistent_read
        if consistent is None:
            consistent = config.consistent_read
        # GSIs only support eventually consistent reads
        if consistent and meta.get_gsi_by_name(expression.index_name) is None:
            read_kwargs['ConsistentRead'] = True

        return read_kwargs

    def _key_condition(self, meta: Type[TableMeta], expression: QueryExpression) -> ConditionBase:
        if expression.key_condition_expression is not None:
            return expression.key_condition_expression

        if expression.hash_key_values is None:
            raise ValidationError(
                f"Query on '{meta.table_name}' needs hash_key_values or key_condition_expression"
            )

        partition_key = meta.partition_key
        gsi = meta.get_gsi_by_name(expression.index_name)
        if gsi is not None:
            partition_key = gsi.partition_key

        hash_value = getattr(expression.hash_key_values, partition_key, None)
        if hash_value is None:
            raise ValidationError(
                f"hash_key_values has no value for partition key '{partition_key}'",
                {partition_key: "missing"}
            )

        condition = Key(partition_key).eq(to_dynamodb_value(hash_value))
        return _and(condition, expression.range_key_condition)

    def _query_kwargs(
        self,
        meta: Type[TableMeta],
        expression: QueryExpression,
        config: MapperConfig,
        start_key: Optional[Dict[str, Any]],
        include_projection: bool = True
    ) -> Dict[str, Any]:
        query_kwargs = self._read_kwargs(meta, expression, config, start_key, include_projection)
        query_kwargs['KeyConditionExpression'] = self._key_condition(meta, expression)
        query_kwargs['ScanIndexForward'] = expression.scan_index_forward
        return query_kwargs

    def _scan_kwargs(
        self,
        meta: Type[TableMeta],
        expression: ScanExpression,
        config: MapperConfig,
        start_key: Optional[Dict[str, Any]],
        include_projection: bool = True
    ) -> Dict[str, Any]:
        scan_kwargs = self._read_kwargs(meta, expression, config, start_key, include_projection)
        if expression.total_segments is not None:
            scan_kwargs['Segment'] = expression.segment
            scan_kwargs['TotalSegments'] = expression.total_segments
        if not expression.limit:
            logger.warning(f"Scan on {meta.table_name} without Limit - consider adding one")
        return scan_kwargs

    @staticmethod
    def _to_page(page_class: Type[ResultPage], response: Dict[str, Any], model_class: Type[BaseModel]) -> ResultPage:
        results = [item_to_model(item, model_class) for item in response.get('Items', [])]
        return page_class(
            results=results,
            last_evaluated_key=response.get('LastEvaluatedKey'),
            count=response.get('Count', len(results)),
            scanned_count=response.get('ScannedCount'),
            consumed_capacity=response.get('ConsumedCapacity'),
        )

    def _fetch_query_page(
        self,
        model_class: Type[BaseModel],
        expression: QueryExpression,
        config: MapperConfig,
        start_key: Optional[Dict[str, Any]]
    ) -> QueryResultPage:
        meta = get_table_meta(model_class)
        table_name = config.resolve_table_name(meta.table_name)
        query_kwargs = self._query_kwargs(meta, expression, config, start_key)
        try:
            response = self._table(table_name).query(**query_kwargs)
        except ClientError as e:
            raise map_dynamodb_error(e, "Query", table_name) from e
        logger.debug(f"Query on {table_name} returned {response.get('Count', 0)} items")
        return self._to_page(QueryResultPage, response, model_class)

    def _fetch_scan_page(
        self,
        model_class: Type[BaseModel],
        expression: ScanExpression,
        config: MapperConfig,
        start_key: Optional[Dict[str, Any]]
    ) -> ScanResultPage:
        meta = get_table_meta(model_class)
        table_name = config.resolve_table_name(meta.table_name)
        scan_kwargs = self._scan_kwargs(meta, expression, config, start_key)
        try:
            response = self._table(table_name).scan(**scan_kwargs)
        except ClientError as e:
            raise map_dynamodb_error(e, "Scan", table_name) from e
        logger.debug(f"Scan on {table_name} returned {response.get('Count', 0)} items")
        return self._to_page(ScanResultPage, response, model_class)

    def query(
        self,
        model_class: Type[T],
        query_expression: QueryExpression,
        *,
        config: Optional[MapperConfig] = None
    ) -> PaginatedQueryList:
        """
        Query a table or index, returning every matching item as a PaginatedQueryList.

        The first page is requested immediately; later pages follow the
        config's pagination_loading_strategy.
        """
        config = self._resolve_config(config)
        return PaginatedQueryList(
            lambda start_key: self._fetch_query_page(model_class, query_expression, config, start_key),
            start_key=query_expression.exclusive_start_key,
            strategy=config.pagination_loading_strategy,
        )

    def query_page(
        self,
        model_class: Type[T],
        query_expression: QueryExpression,
        *,
        config: Optional[MapperConfig] = None
    ) -> QueryResultPage:
        """Run a single Query request starting at query_expression.exclusive_start_key."""
        config = self._resolve_config(config)
        return self._fetch_query_page(model_class, query_expression, config, query_expression.exclusive_start_key)

    def scan(
        self,
        model_class: Type[T],
        scan_expression: ScanExpression,
        *,
        config: Optional[MapperConfig] = None
    ) -> PaginatedScanList:
        """Scan a table or index, returning every matching item as a PaginatedScanList."""
        config = self._resolve_config(config)
        return PaginatedScanList(
            lambda start_key: self._fetch_scan_page(model_class, scan_expression, config, start_key),
            start_key=scan_expression.exclusive_start_key,
            strategy=config.pagination_loading_strategy,
        )

    def scan_page(
        self,
        model_class: Type[T],
        scan_expression: ScanExpression,
        *,
        config: Optional[MapperConfig] = None
    ) -> ScanResultPage:
        """Run a single Scan request starting at scan_expression.exclusive_start_key."""
        config = self._resolve_config(config)
        return self._fetch_scan_page(model_class, scan_expression, config, scan_expression.exclusive_start_key)

    def count(
        self,
        model_class: Type[BaseModel],
        expression: Union[QueryExpression, ScanExpression],
        *,
        config: Optional[MapperConfig] = None
    ) -> int:
        """
        Count the items matching a query or scan expression.

        Uses Select='COUNT' and follows LastEvaluatedKey until the last page,
        so no items are transferred.
        """
        config = self._resolve_config(config)
        meta = get_table_meta(model_class)
        table_name = config.resolve_table_name(meta.table_name)
        table = self._table(table_name)

        if isinstance(expression, QueryExpression):
            operation, request = "Query", table.query
            build_kwargs = self._query_kwargs
        else:
            operation, request = "Scan", table.scan
            build_kwargs = self._scan_kwargs

        total = 0
        start_key = expression.exclusive_start_key
        while True:
            request_kwargs = build_kwargs(meta, expression, config, start_key, include_projection=False)
            request_kwargs['Select'] = 'COUNT'
            try:
                response = request(**request_kwargs)
            except ClientError as e:
                raise map_dynamodb_error(e, operation, table_name) from e
            total += response.get('Count', 0)
            start_key = response.get('LastEvaluatedKey')
            if not start_key:
                return total

    # =========================================================================
    # Table definitions
    # =========================================================================

    def create_table_request(self, model_class: Type[BaseModel], *, config: Optional[MapperConfig] = None) -> Dict[str, Any]:
        """
        Build create_table parameters from a model's Meta class.

        Returns:
            Keyword arguments for ``dynamodb.create_table(**request)``, billed PAY_PER_REQUEST

        Example:
            dynamodb.create_table(**mapper.create_table_request(Order))
        """
        meta = get_table_meta(model_class)
        table_name = self._resolve_config(config).resolve_table_name(meta.table_name)

        key_schema = [{'AttributeName': meta.partition_key, 'KeyType': 'HASH'}]
        if meta.sort_key:
            key_schema.append({'AttributeName': meta.sort_key, 'KeyType': 'RANGE'})

        attribute_names = list(meta.get_key_fields())
        gsis = []
        for gsi in meta.gsis:
            gsi_schema = [{'AttributeName': gsi.partition_key, 'KeyType': 'HASH'}]
            if gsi.sort_key:
                gsi_schema.append({'AttributeName': gsi.sort_key, 'KeyType': 'RANGE'})

            if gsi.projection is None:
                projection = {'ProjectionType': 'ALL'}
            elif not gsi.projection:
                projection = {'ProjectionType': 'KEYS_ONLY'}
            else:
                projection = {'ProjectionType': 'INCLUDE', 'NonKeyAttributes': list(gsi.projection)}

            gsis.append({'IndexName': gsi.name, 'KeySchema': gsi_schema, 'Projection': projection})
            for name in (gsi.partition_key, gsi.sort_key):
                if name and name not in attribute_names:
                    attribute_names.append(name)

        request = {
            'TableName': table_name,
            'KeySchema': key_schema,
            'AttributeDefinitions': [
                {'AttributeName': name, 'AttributeType': dynamodb_attribute_type(model_class, name)}
                for name in attribute_names
            ],
            'BillingMode': 'PAY_PER_REQUEST',
        }
        if gsis:
            request['GlobalSecondaryIndexes'] = gsis
        return request
