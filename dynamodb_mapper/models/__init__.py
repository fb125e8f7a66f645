# Table metadata declared by mapped models
from .meta import (
    GSIDefinition,
    TableMeta,
    get_table_meta,
)

# Expression objects passed through to the mapper
from .expressions import (
    DeleteExpression,
    QueryExpression,
    SaveExpression,
    ScanExpression,
)

# Query/Scan results
from .pages import (
    PaginatedList,
    PaginatedQueryList,
    PaginatedScanList,
    QueryResultPage,
    ResultPage,
    ScanResultPage,
)

__all__ = [
    # Metadata
    "GSIDefinition",
    "TableMeta",
    "get_table_meta",

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
    "ResultPage",
    "ScanResultPage",
]
