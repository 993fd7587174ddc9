# esbody/builder.py
"""Fluent builders that accumulate query, filter and aggregation entries.

The root ``ESBuilder`` exposes everything. Sub-builders handed to callbacks
only expose the methods that make sense where they are nested:

- ``SubQueryBuilder`` / ``SubFilterBuilder``: query and filter methods
- ``SubAggregationBuilder``: aggregation and filter methods
"""

import logging
from collections.abc import Iterator, Sequence
from typing import Any, Self

from esbody.catalog import DEFAULT_CATALOG, TypeCatalog
from esbody.compiler import compile_query_data
from esbody.errors import InvalidArguments
from esbody.models import Bucket, Context, Entry, QueryData, iter_tree
from esbody.query.arguments import (
    NormalizedArgs,
    SubBuilderFn,
    normalize_aggregation_args,
    normalize_clause_args,
    normalize_sort_args,
)
from esbody.query.sort import merge_sort

logger = logging.getLogger(__name__)


class BaseBuilder:
    """State holder shared by root and sub-builders."""

    def __init__(
        self,
        catalog: TypeCatalog = DEFAULT_CATALOG,
        *,
        child: bool = False,
        parent: Context | None = None,
    ) -> None:
        self._catalog = catalog
        self._data = QueryData(in_child_context=child, parent=parent)
        self._parent_builder: BaseBuilder | None = None

    @property
    def data(self) -> QueryData:
        """The accumulated state. Treat as read-only."""
        return self._data

    @property
    def catalog(self) -> TypeCatalog:
        return self._catalog

    def build(self) -> dict[str, Any]:
        """Compile the accumulated state into a query document."""
        return compile_query_data(self._data)

    def _invoke_sub_builder(
        self,
        fn: SubBuilderFn,
        builder_cls: type["BaseBuilder"],
        parent: Context | None,
    ) -> QueryData:
        child = builder_cls(self._catalog, child=True, parent=parent)
        child._parent_builder = self
        logger.debug("Invoking %s sub-builder", builder_cls.__name__)
        result = fn(child)
        if not isinstance(result, BaseBuilder):
            raise InvalidArguments(
                f"Sub-builder must return a builder, got {type(result).__name__}"
            )
        if self._would_cycle(result._data):
            raise InvalidArguments("Sub-builder returned a builder it is nested in")
        return result._data

    def _ancestors(self) -> Iterator["BaseBuilder"]:
        builder: BaseBuilder | None = self
        while builder is not None:
            yield builder
            builder = builder._parent_builder

    def _would_cycle(self, data: QueryData) -> bool:
        """True if attaching ``data`` below this builder would make the tree cyclic."""
        ancestors = {id(b._data) for b in self._ancestors()}
        return any(id(node) in ancestors for node in iter_tree(data))

    def _resolve(
        self,
        args: NormalizedArgs,
        builder_cls: type["BaseBuilder"],
        parent: Context | None,
    ) -> Entry:
        nested = None
        if args.sub_builder is not None:
            nested = self._invoke_sub_builder(args.sub_builder, builder_cls, parent)
        return Entry(
            type=args.type,
            field=args.field,
            value=args.value,
            config=args.config,
            name=args.name,
            nested=nested,
            has_value=args.has_value,
        )

    def _add_clause(self, context: Context, bucket: Bucket, args: Sequence[object]) -> Self:
        normalized = normalize_clause_args(args, self._catalog)
        builder_cls = SubQueryBuilder if context == "query" else SubFilterBuilder
        entry = self._resolve(normalized, builder_cls, context)
        self._data.group(context).bucket(bucket).append(entry)
        logger.debug("Added %s clause %r to %s bucket", context, entry.type or "<nested>", bucket)
        return self

    def _set_minimum_should_match(self, context: Context, param: int | str) -> Self:
        if isinstance(param, bool) or not isinstance(param, int | str):
            raise InvalidArguments(
                f"minimum_should_match must be an int or a string, got {type(param).__name__}"
            )
        self._data.group(context).minimum_should_match = param
        return self


class QueryMixin(BaseBuilder):
    def query(self, *args: Any) -> Self:
        """Add a query clause, ANDed with the other query clauses."""
        return self._add_clause("query", "and", args)

    def and_query(self, *args: Any) -> Self:
        return self._add_clause("query", "and", args)

    def or_query(self, *args: Any) -> Self:
        return self._add_clause("query", "or", args)

    def not_query(self, *args: Any) -> Self:
        return self._add_clause("query", "not", args)

    def query_minimum_should_match(self, param: int | str) -> Self:
        return self._set_minimum_should_match("query", param)


class FilterMixin(BaseBuilder):
    def filter(self, *args: Any) -> Self:
        """Add a filter clause, ANDed with the other filter clauses."""
        return self._add_clause("filter", "and", args)

    def and_filter(self, *args: Any) -> Self:
        return self._add_clause("filter", "and", args)

    def or_filter(self, *args: Any) -> Self:
        return self._add_clause("filter", "or", args)

    def not_filter(self, *args: Any) -> Self:
        return self._add_clause("filter", "not", args)

    def filter_minimum_should_match(self, param: int | str) -> Self:
        return self._set_minimum_should_match("filter", param)


class AggregationMixin(BaseBuilder):
    def aggregation(self, *args: Any) -> Self:
        """Add a named aggregation.

        A trailing callable receives a SubAggregationBuilder; its aggregations
        become nested ``aggs`` and its filters become the aggregation's
        ``filter``.
        """
        normalized = normalize_aggregation_args(args, self._catalog)
        entry = self._resolve(normalized, SubAggregationBuilder, None)
        self._data.aggregations.append(entry)
        logger.debug("Added %s aggregation %r", entry.type, entry.name)
        return self

    def agg(self, *args: Any) -> Self:
        return self.aggregation(*args)


class SubQueryBuilder(QueryMixin, FilterMixin):
    """Builder passed to query sub-builder callbacks."""


class SubFilterBuilder(QueryMixin, FilterMixin):
    """Builder passed to filter sub-builder callbacks."""


class SubAggregationBuilder(AggregationMixin, FilterMixin):
    """Builder passed to aggregation sub-builder callbacks."""


class ESBuilder(QueryMixin, FilterMixin, AggregationMixin):
    """Root builder: queries, filters, aggregations, sorting and paging."""

    def sort(self, *args: Any) -> Self:
        """Add sort directives.

        Accepts ``sort(field)``, ``sort(field, direction)``,
        ``sort(field, body)`` or ``sort([field_or_directive, ...])``. Repeated
        calls append lower-precedence tie-breaks.
        """
        incoming = normalize_sort_args(args)
        self._data.sort = merge_sort(self._data.sort, incoming)
        return self

    def from_(self, quantity: int) -> Self:
        self._data.from_ = _check_quantity("from", quantity)
        return self

    def size(self, quantity: int) -> Self:
        self._data.size = _check_quantity("size", quantity)
        return self

    def raw_option(self, key: str, value: Any) -> Self:
        """Set a top-level key verbatim, overriding anything the builder derives."""
        if not isinstance(key, str):
            raise InvalidArguments(f"Raw option key must be a string, got {type(key).__name__}")
        self._data.raw_option[key] = value
        return self


def _check_quantity(name: str, quantity: object) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise InvalidArguments(f"{name} must be a non-negative integer, got {quantity!r}")
    return quantity


def body(catalog: TypeCatalog = DEFAULT_CATALOG) -> ESBuilder:
    """Create a new root builder."""
    return ESBuilder(catalog)
