"""
Per-mapper and per-call behaviour settings.

A MapperConfig is immutable. Every field is optional: None means "inherit from
the config this one is merged over". The mapper starts from
DEFAULT_MAPPER_CONFIG, merges its own config over it, and merges any per-call
config over the result.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SaveBehavior(str, Enum):
    """How save() writes an item."""

    # UpdateItem: set non-null attributes, remove null ones
    UPDATE = "UPDATE"
    # UpdateItem: set non-null attributes, leave null ones untouched
    UPDATE_SKIP_NULL_ATTRIBUTES = "UPDATE_SKIP_NULL_ATTRIBUTES"
    # PutItem: replace the whole item, version attribute still checked
    PUT = "PUT"
    # PutItem: replace the whole item, version attribute ignored
    CLOBBER = "CLOBBER"


class ConsistentReads(str, Enum):
    EVENTUAL = "EVENTUAL"
    CONSISTENT = "CONSISTENT"


class PaginationLoadingStrategy(str, Enum):
    """How a PaginatedList fetches the pages after the first one."""

    LAZY_LOADING = "LAZY_LOADING"
    EAGER_LOADING = "EAGER_LOADING"
    ITERATION_ONLY = "ITERATION_ONLY"


class TableNameOverride(BaseModel):
    """Replaces or prefixes the table name declared in a model's Meta."""

    table_name: Optional[str] = Field(None, description="Replacement table name")
    table_name_prefix: Optional[str] = Field(None, description="Prefix added to the declared table name")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def check_exactly_one(self):
        if (self.table_name is None) == (self.table_name_prefix is None):
            raise ValueError("TableNameOverride needs exactly one of table_name or table_name_prefix")
        return self

    def apply(self, base_name: str) -> str:
        if self.table_name is not None:
            return self.table_name
        return f"{self.table_name_prefix}{base_name}"


class MapperConfig(BaseModel):
    """Immutable mapper settings; unset fields inherit when merged."""

    save_behavior: Optional[SaveBehavior] = Field(None, description="Write strategy for save()")
    consistent_reads: Optional[ConsistentReads] = Field(None, description="Read consistency for load()")
    table_name_override: Optional[TableNameOverride] = Field(None, description="Table name replacement or prefix")
    pagination_loading_strategy: Optional[PaginationLoadingStrategy] = Field(
        None, description="Page loading for query() and scan() lists"
    )

    model_config = ConfigDict(frozen=True)

    def merge(self, overrides: Optional['MapperConfig']) -> 'MapperConfig':
        """Return a config where every field set on overrides replaces this one's.

        Args:
            overrides: Config whose non-None fields win, or None

        Returns:
            The merged config (self when there is nothing to merge)
        """
        if overrides is None:
            return self
        updates = {name: value for name, value in overrides if value is not None}
        if not updates:
            return self
        return self.model_copy(update=updates)

    @property
    def consistent_read(self) -> bool:
        return self.consistent_reads == ConsistentReads.CONSISTENT

    def resolve_table_name(self, base_name: str) -> str:
        if self.table_name_override is None:
            return base_name
        return self.table_name_override.apply(base_name)


DEFAULT_MAPPER_CONFIG = MapperConfig(
    save_behavior=SaveBehavior.UPDATE,
    consistent_reads=ConsistentReads.EVENTUAL,
    pagination_loading_strategy=PaginationLoadingStrategy.LAZY_LOADING,
)
