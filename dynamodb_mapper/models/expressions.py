"""
Expression objects passed to save, delete, query and scan.

Conditions are boto3 condition objects (``boto3.dynamodb.conditions.Key`` /
``Attr``); the boto3 resource layer renders them into expression strings and
attribute placeholders. Expressions are immutable and the mapper never changes
them.
"""

from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import ConditionBase
from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Expression(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)


class SaveExpression(_Expression):
    """Condition that must hold for a save to be written.

    Example:
        SaveExpression(condition_expression=Attr('status').eq('PENDING'))
    """

    condition_expression: Optional[ConditionBase] = Field(None, description="Condition on the stored item")


class DeleteExpression(_Expression):
    """Condition that must hold for a delete to be applied."""

    condition_expression: Optional[ConditionBase] = Field(None, description="Condition on the stored item")


class QueryExpression(_Expression):
    """
    Query parameters for DynamoDBMapper.query() / query_page().

    The key condition comes from key_condition_expression when given. Otherwise
    it is built from hash_key_values, a model instance carrying the partition
    key of the table (or of the GSI named by index_name), ANDed with
    range_key_condition.

    Example:
        QueryExpression(
            hash_key_values=Order(customer_id='c-1', order_id='', total=0),
            range_key_condition=Key('order_id').begins_with('2024-'),
            filter_expression=Attr('status').eq('SHIPPED'),
            limit=25,
        )
    """

    hash_key_values: Optional[Any] = Field(None, description="Model instance carrying the partition key value")
    key_condition_expression: Optional[ConditionBase] = Field(None, description="Complete key condition")
    range_key_condition: Optional[ConditionBase] = Field(None, description="Sort key condition ANDed to the hash key")
    index_name: Optional[str] = Field(None, description="Secondary index to query")
    filter_expression: Optional[ConditionBase] = Field(None, description="Server-side filter")
    projection: Optional[List[str]] = Field(None, description="Attributes to return")
    limit: Optional[int] = Field(None, gt=0, description="Items evaluated per page")
    scan_index_forward: bool = Field(True, description="Ascending sort key order")
    exclusive_start_key: Optional[Dict[str, Any]] = Field(None, description="Key to resume from")
    consistent_read: Optional[bool] = Field(None, description="Overrides the config's consistent_reads")


class ScanExpression(_Expression):
    """
    Scan parameters for DynamoDBMapper.scan() / scan_page().

    Parallel scans set segment and total_segments together.
    """

    filter_expression: Optional[ConditionBase] = Field(None, description="Server-side filter")
    projection: Optional[List[str]] = Field(None, description="Attributes to return")
    limit: Optional[int] = Field(None, gt=0, description="Items evaluated per page")
    exclusive_start_key: Optional[Dict[str, Any]] = Field(None, description="Key to resume from")
    index_name: Optional[str] = Field(None, description="Secondary index to scan")
    segment: Optional[int] = Field(None, ge=0, description="Segment of a parallel scan")
    total_segments: Optional[int] = Field(None, gt=0, description="Number of parallel scan segments")
    consistent_read: Optional[bool] = Field(None, description="Overrides the config's consistent_reads")

    @model_validator(mode='after')
    def check_segments(self):
        if (self.segment is None) != (self.total_segments is None):
            raise ValueError("segment and total_segments must be set together")
        if self.segment is not None and self.segment >= self.total_segments:
            raise ValueError(f"segment {self.segment} is out of range for total_segments {self.total_segments}")
        return self
