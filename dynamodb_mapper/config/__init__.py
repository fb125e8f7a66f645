from .config import DynamoDBConfig
from .mapper_config import (
    DEFAULT_MAPPER_CONFIG,
    ConsistentReads,
    MapperConfig,
    PaginationLoadingStrategy,
    SaveBehavior,
    TableNameOverride,
)

__all__ = [
    "DynamoDBConfig",
    "MapperConfig",
    "DEFAULT_MAPPER_CONFIG",
    "SaveBehavior",
    "ConsistentReads",
    "PaginationLoadingStrategy",
    "TableNameOverride",
]
