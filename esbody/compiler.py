# esbody/compiler.py
"""Compile builder state into the search engine's query DSL."""

import copy
import logging
from typing import Any

from esbody.models import BoolGroup, Context, Entry, QueryData
from esbody.query.sort import compile_sort

logger = logging.getLogger(__name__)

_OTHER_CONTEXT: dict[Context, Context] = {"filter": "query", "query": "filter"}


def compile_query_data(data: QueryData) -> dict[str, Any]:
    """Reduce a QueryData tree into a fresh query document.

    The tree is only read; every value in the result is a copy, so the
    document can be mutated freely and ``build()`` can be called again.
    """
    built: dict[str, Any] = {}

    query = compile_bool_group(data.query, "query")
    if query is not None:
        built["query"] = query

    filter_ = compile_bool_group(data.filter, "filter")
    if filter_ is not None:
        built["filter"] = filter_

    if data.aggregations:
        built["aggs"] = compile_aggregations(data.aggregations)

    if data.sort is not None:
        built["sort"] = compile_sort(data.sort)

    if data.from_ is not None:
        built["from"] = data.from_
    if data.size is not None:
        built["size"] = data.size

    # Raw options override anything derived above
    for key, value in data.raw_option.items():
        built[key] = copy.deepcopy(value)

    logger.debug("Compiled query document with keys: %s", list(built))
    return built


def compile_bool_group(group: BoolGroup, context: Context) -> dict[str, Any] | None:
    """Compile one boolean context, or return None when nothing was added."""
    if group.is_empty():
        return None

    body: dict[str, Any] = {}
    if group.and_:
        body["must"] = [compile_clause(e, context) for e in group.and_]
    if group.or_:
        body["should"] = [compile_clause(e, context) for e in group.or_]
    if group.not_:
        body["must_not"] = [compile_clause(e, context) for e in group.not_]

    if group.minimum_should_match is not None and "should" in body:
        body["minimum_should_match"] = group.minimum_should_match

    return {"bool": body}


def compile_clause(entry: Entry, context: Context) -> dict[str, Any]:
    """Compile a single query or filter entry."""
    if entry.is_bare:
        return _compile_bare_nested(entry.nested, context)

    body = _clause_body(entry)
    if entry.nested is not None:
        for nested_context in ("query", "filter"):
            nested = compile_bool_group(entry.nested.group(nested_context), nested_context)
            if nested is not None:
                body[nested_context] = nested

    return {entry.type: body}


def _compile_bare_nested(nested: QueryData | None, context: Context) -> dict[str, Any]:
    if nested is None:
        return {"bool": {}}

    compiled = compile_bool_group(nested.group(context), context) or {"bool": {}}
    other_context = _OTHER_CONTEXT[context]
    other = compile_bool_group(nested.group(other_context), other_context)
    if other is not None:
        compiled["bool"]["filter"] = other
    return compiled


def _clause_body(entry: Entry) -> dict[str, Any]:
    if entry.field is None:
        return copy.deepcopy(entry.config) if entry.config is not None else {}

    if entry.has_value:
        body: dict[str, Any] = {entry.field: copy.deepcopy(entry.value)}
    elif entry.config is not None:
        # (type, field, config): the config describes the field
        return {entry.field: copy.deepcopy(entry.config)}
    else:
        body = {"field": entry.field}

    if entry.config is not None:
        body.update(copy.deepcopy(entry.config))
    return body


def compile_aggregations(entries: list[Entry]) -> dict[str, Any]:
    """Compile aggregation entries into the ``aggs`` mapping, in insertion order."""
    aggs: dict[str, Any] = {}
    for entry in entries:
        if entry.name in aggs:
            logger.warning("Aggregation %r defined more than once, keeping the last", entry.name)
        aggs[entry.name] = compile_aggregation(entry)
    return aggs


def compile_aggregation(entry: Entry) -> dict[str, Any]:
    body: dict[str, Any] = {}
    if entry.field is not None:
        body["field"] = entry.field
    if entry.config is not None:
        body.update(copy.deepcopy(entry.config))

    compiled: dict[str, Any] = {entry.type: body}

    if entry.nested is not None:
        nested_filter = compile_bool_group(entry.nested.filter, "filter")
        if nested_filter is not None:
            compiled["filter"] = nested_filter
        if entry.nested.aggregations:
            compiled["aggs"] = compile_aggregations(entry.nested.aggregations)

    return compiled
