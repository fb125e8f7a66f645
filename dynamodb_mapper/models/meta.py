"""
Table metadata declared by mapped models.

A mapped model is any Pydantic model with an inner ``Meta`` class deriving from
TableMeta::

    class Order(BaseModel):
        customer_id: str
        order_id: str
        total: Decimal
        version: Optional[int] = None

        class Meta(TableMeta):
            table_name = "orders"
            partition_key = "customer_id"
            sort_key = "order_id"
            version_attribute = "version"
            gsis = [GSIDefinition(name="TotalIndex", partition_key="total")]

The Meta class is the single source of truth for keys; the mapper never guesses
them from field names.
"""

from typing import List, Optional, Type

from pydantic import BaseModel


class GSIDefinition:
    """Defines a Global Secondary Index for DynamoDB."""
    def __init__(
        self,
        name: str,
        partition_key: str,
        sort_key: Optional[str] = None,
        projection: Optional[List[str]] = None
    ):
        self.name = name
        self.partition_key = partition_key
        self.sort_key = sort_key
        self.projection = projection  # None means ALL attributes

    def __repr__(self) -> str:
        return f"GSIDefinition(name={self.name!r}, partition_key={self.partition_key!r}, sort_key={self.sort_key!r})"


class TableMeta:
    """Base class for table metadata definitions."""
    table_name: str
    partition_key: str
    sort_key: Optional[str] = None
    version_attribute: Optional[str] = None
    gsis: List[GSIDefinition] = []

    @classmethod
    def get_key_fields(cls) -> List[str]:
        """Get DynamoDB item key field names.

        - For simple keys: [partition_key]
        - For composite keys: [partition_key, sort_key]
        """
        fields = [cls.partition_key]
        if cls.sort_key:
            fields.append(cls.sort_key)
        return fields

    @classmethod
    def get_gsi_by_name(cls, gsi_name: str) -> Optional[GSIDefinition]:
        for gsi in cls.gsis:
            if gsi.name == gsi_name:
                return gsi
        return None


def get_table_meta(model_class: Type[BaseModel]) -> Type[TableMeta]:
    """Return the Meta class of a mapped model.

    Raises:
        ValueError: If the model has no Meta class, or Meta lacks table_name or partition_key
    """
    meta = getattr(model_class, 'Meta', None)
    if meta is None:
        raise ValueError(f"Model {model_class.__name__} must have a Meta class with table_name and partition_key")
    if not (isinstance(meta, type) and issubclass(meta, TableMeta)):
        raise ValueError(f"Model {model_class.__name__}.Meta must derive from TableMeta")

    if not getattr(meta, 'table_name', None):
        raise ValueError(f"Model {model_class.__name__}.Meta must define table_name")
    if not getattr(meta, 'partition_key', None):
        raise ValueError(f"Model {model_class.__name__}.Meta must define partition_key")

    return meta
