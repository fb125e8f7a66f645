"""
Mapper Utilities

Helpers shared by the mapper:
- Model <-> DynamoDB item conversion for the boto3 resource layer
- Key building from a model's Meta class
- Projection expressions and key attribute types for table creation
"""

import logging
import types
import typing
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError
from .models.meta import TableMeta

logger = logging.getLogger(__name__)


# =============================================================================
# Serialization
# =============================================================================

def to_dynamodb_value(value: Any) -> Any:
    """Convert a Python value into a type the boto3 resource layer accepts.

    - float -> Decimal (boto3 rejects floats)
    - datetime/date -> ISO string
    - Enum -> its value
    - tuples -> lists; dicts, lists and sets are converted recursively
    - everything else (str, int, Decimal, bool, bytes, None) unchanged
    """
    if isinstance(value, dict):
        return {k: to_dynamodb_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [to_dynamodb_value(v) for v in value]
    elif isinstance(value, (set, frozenset)):
        return {to_dynamodb_value(v) for v in value}
    elif isinstance(value, bool):
        return value
    elif isinstance(value, float):
        return Decimal(str(value))
    elif isinstance(value, (datetime, date)):
        return value.isoformat()
    elif isinstance(value, Enum):
        return to_dynamodb_value(value.value)
    return value


def model_to_item(model: BaseModel, exclude_none: bool = True) -> Dict[str, Any]:
    """Convert a Pydantic model into a DynamoDB item.

    Args:
        model: Model instance to convert
        exclude_none: Drop attributes whose value is None

    Returns:
        Item dictionary ready for the boto3 Table resource
    """
    dumped = model.model_dump(exclude_none=exclude_none)
    return {name: to_dynamodb_value(value) for name, value in dumped.items()}


def item_to_model(item: Dict[str, Any], model_class: Type[BaseModel]) -> BaseModel:
    """Convert a DynamoDB item into a model instance.

    ISO datetime strings and Decimal numbers are coerced by Pydantic according
    to the model's field types.

    Raises:
        ValidationError: If the item does not validate against the model
    """
    try:
        return model_class.model_validate(item)
    except PydanticValidationError as e:
        logger.error(f"Failed to convert item to {model_class.__name__}: {e}")
        errors = {".".join(str(loc) for loc in err['loc']): err['msg'] for err in e.errors()}
        raise ValidationError(f"Failed to convert item to {model_class.__name__}", errors, e) from e


# =============================================================================
# Key Building (Meta class based)
# =============================================================================

def build_model_key(meta: Type[TableMeta], hash_key: Any, range_key: Any = None) -> Dict[str, Any]:
    """Build a DynamoDB key from key values and a model's Meta class.

    Args:
        meta: The model's TableMeta subclass
        hash_key: Partition key value
        range_key: Sort key value (required when the table has a sort key)

    Returns:
        Key dictionary

    Raises:
        ValueError: If a required key value is missing or an unexpected one is given
    """
    if hash_key is None:
        raise ValueError(f"Missing partition key '{meta.partition_key}' for table '{meta.table_name}'")

    key = {meta.partition_key: to_dynamodb_value(hash_key)}

    if meta.sort_key:
        if range_key is None:
            raise ValueError(f"Missing sort key '{meta.sort_key}' for table '{meta.table_name}'")
        key[meta.sort_key] = to_dynamodb_value(range_key)
    elif range_key is not None:
        raise ValueError(f"Table '{meta.table_name}' has no sort key, got range key {range_key!r}")

    return key


def build_item_key(item: BaseModel, meta: Type[TableMeta]) -> Dict[str, Any]:
    """Build the DynamoDB key of a model instance."""
    hash_key = getattr(item, meta.partition_key, None)
    range_key = getattr(item, meta.sort_key, None) if meta.sort_key else None
    return build_model_key(meta, hash_key, range_key)


def key_to_resource_id(key: Dict[str, Any]) -> str:
    """Render a key as a resource id for error context, e.g. 'c-1/o-7'."""
    return "/".join(str(value) for value in key.values())


# =============================================================================
# Expression Building
# =============================================================================

def build_projection_expression(fields: Optional[List[str]]) -> Tuple[Optional[str], Optional[Dict[str, str]]]:
    """Build ProjectionExpression with ExpressionAttributeNames.

    Placeholders avoid clashes with DynamoDB reserved words.

    Example:
        >>> build_projection_expression(['order_id', 'status'])
        ('#f0, #f1', {'#f0': 'order_id', '#f1': 'status'})
    """
    if not fields:
        return None, None

    expression_names = {}
    projection_parts = []

    for i, field in enumerate(fields):
        attr_name = f"#f{i}"
        expression_names[attr_name] = field
        projection_parts.append(attr_name)

    return ', '.join(projection_parts), expression_names


_NUMBER_TYPES = (int, float, Decimal)


def dynamodb_attribute_type(model_class: Type[BaseModel], field_name: str) -> str:
    """Scalar attribute type ('S', 'N' or 'B') of a key field, for AttributeDefinitions.

    Optional[...] annotations are unwrapped; anything that is not numeric or
    bytes is stored as a string.
    """
    field = model_class.model_fields.get(field_name)
    if field is None:
        raise ValueError(f"Model {model_class.__name__} has no field '{field_name}'")

    annotation = field.annotation
    args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
    if typing.get_origin(annotation) in (typing.Union, types.UnionType) and len(args) == 1:
        annotation = args[0]

    if isinstance(annotation, type):
        if issubclass(annotation, bool):
            raise ValueError(f"Boolean field '{field_name}' cannot be a key attribute")
        if issubclass(annotation, _NUMBER_TYPES):
            return 'N'
        if issubclass(annotation, bytes):
            return 'B'
    return 'S'
