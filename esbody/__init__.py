# esbody/__init__.py
"""esbody - A fluent builder for search engine query documents."""

from esbody.builder import (
    ESBuilder,
    SubAggregationBuilder,
    SubFilterBuilder,
    SubQueryBuilder,
    body,
)
from esbody.catalog import DEFAULT_CATALOG, TypeCatalog
from esbody.errors import AmbiguousConfiguration, ESBodyError, InvalidArguments, UnknownType
from esbody.query import merge_sort

__all__ = [
    # Builders
    "body",
    "ESBuilder",
    "SubQueryBuilder",
    "SubFilterBuilder",
    "SubAggregationBuilder",
    # Catalog
    "TypeCatalog",
    "DEFAULT_CATALOG",
    # Sorting
    "merge_sort",
    # Errors
    "ESBodyError",
    "InvalidArguments",
    "UnknownType",
    "AmbiguousConfiguration",
]
