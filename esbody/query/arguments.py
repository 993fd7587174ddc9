# esbody/query/arguments.py
"""Resolve the overloaded builder call shapes into one canonical record.

Every query, filter and aggregation method accepts several positional
layouts. They are resolved here, once, at the call boundary::

    query(fn)                              bare sub-builder
    query(type, field)
    query(type, config)
    query(type, field, value)
    query(type, field, config)
    query(type, field, fn)
    query(type, config, fn)
    query(type, field, value, fn)
    query(type, field, value, config)
    query(type, field, value, config, fn)

    agg(name, type, field)
    agg(name, type, config)
    agg(name, type, field, fn)
    agg(name, type, field, config)
    agg(name, type, config, fn)
    agg(name, type, field, config, fn)
"""

import copy
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from esbody.catalog import TypeCatalog
from esbody.errors import AmbiguousConfiguration, InvalidArguments, UnknownType
from esbody.models import Primitive, Sort

logger = logging.getLogger(__name__)

SubBuilderFn = Callable[[Any], Any]


@dataclass(frozen=True)
class NormalizedArgs:
    """Canonical form of one query, filter or aggregation call."""

    type: str | None
    field: str | None = None
    value: Primitive | list[Primitive] = None
    config: dict[str, Any] | None = None
    sub_builder: SubBuilderFn | None = None
    name: str | None = None
    has_value: bool = False


def _is_primitive(value: object) -> bool:
    return value is None or isinstance(value, str | int | float | bool)


def _is_value(value: object) -> bool:
    if isinstance(value, list | tuple):
        return all(_is_primitive(v) for v in value)
    return _is_primitive(value)


def _is_sub_builder(value: object) -> bool:
    return callable(value) and not isinstance(value, type)


def _check_field_collision(field: str, config: dict[str, Any], *, value_given: bool) -> None:
    if "field" in config:
        raise AmbiguousConfiguration(
            f"Field {field!r} given both positionally and as config['field']={config['field']!r}"
        )
    if value_given and field in config:
        raise AmbiguousConfiguration(f"Config overrides the value given for field {field!r}")


def _describe(args: Sequence[object]) -> str:
    return "(" + ", ".join(type(a).__name__ for a in args) + ")"


def normalize_clause_args(args: Sequence[object], catalog: TypeCatalog) -> NormalizedArgs:
    """Resolve the arguments of a query or filter call.

    Raises:
        InvalidArguments: No supported call shape matches.
        UnknownType: The clause type is not in the catalog.
        AmbiguousConfiguration: A positional field collides with the config.
    """
    match args:
        case [fn] if _is_sub_builder(fn):
            return NormalizedArgs(type=None, sub_builder=fn)
        case [str() as type_, *rest] if rest:
            pass
        case _:
            raise InvalidArguments(f"Unsupported clause arguments: {_describe(args)}")

    if not catalog.is_query_type(type_):
        raise UnknownType("query", type_)

    match rest:
        case [str() as field]:
            return NormalizedArgs(type_, field=field)
        case [dict() as config]:
            return NormalizedArgs(type_, config=copy.deepcopy(config))
        case [dict() as config, fn] if _is_sub_builder(fn):
            return NormalizedArgs(type_, config=copy.deepcopy(config), sub_builder=fn)
        case [str() as field, fn] if _is_sub_builder(fn):
            return NormalizedArgs(type_, field=field, sub_builder=fn)
        case [str() as field, dict() as config]:
            _check_field_collision(field, config, value_given=False)
            return NormalizedArgs(type_, field=field, config=copy.deepcopy(config))
        case [str() as field, value] if _is_value(value):
            return NormalizedArgs(type_, field=field, value=_freeze_value(value), has_value=True)
        case [str() as field, value, fn] if _is_value(value) and _is_sub_builder(fn):
            return NormalizedArgs(
                type_, field=field, value=_freeze_value(value), sub_builder=fn, has_value=True
            )
        case [str() as field, value, dict() as config] if _is_value(value):
            _check_field_collision(field, config, value_given=True)
            return NormalizedArgs(
                type_,
                field=field,
                value=_freeze_value(value),
                config=copy.deepcopy(config),
                has_value=True,
            )
        case [str() as field, value, dict() as config, fn] if (
            _is_value(value) and _is_sub_builder(fn)
        ):
            _check_field_collision(field, config, value_given=True)
            return NormalizedArgs(
                type_,
                field=field,
                value=_freeze_value(value),
                config=copy.deepcopy(config),
                sub_builder=fn,
                has_value=True,
            )

    raise InvalidArguments(f"Unsupported arguments for {type_!r} clause: {_describe(rest)}")


def normalize_aggregation_args(args: Sequence[object], catalog: TypeCatalog) -> NormalizedArgs:
    """Resolve the arguments of an ``agg``/``aggregation`` call."""
    match args:
        case [str() as name, str() as type_, *rest] if rest:
            pass
        case _:
            raise InvalidArguments(f"Unsupported aggregation arguments: {_describe(args)}")

    if not catalog.is_aggregation_type(type_):
        raise UnknownType("aggregation", type_)

    resolved: tuple[str | None, dict[str, Any] | None, SubBuilderFn | None]
    match rest:
        case [str() as field]:
            resolved = (field, None, None)
        case [dict() as config]:
            resolved = (None, config, None)
        case [str() as field, fn] if _is_sub_builder(fn):
            resolved = (field, None, fn)
        case [str() as field, dict() as config]:
            resolved = (field, config, None)
        case [dict() as config, fn] if _is_sub_builder(fn):
            resolved = (None, config, fn)
        case [str() as field, dict() as config, fn] if _is_sub_builder(fn):
            resolved = (field, config, fn)
        case _:
            raise InvalidArguments(
                f"Unsupported arguments for {name!r} aggregation: {_describe(rest)}"
            )

    field, config, fn = resolved
    if field is not None and config is not None:
        _check_field_collision(field, config, value_given=False)

    return NormalizedArgs(
        type_,
        field=field,
        config=copy.deepcopy(config) if config is not None else None,
        sub_builder=fn,
        name=name,
    )


def normalize_sort_args(args: Sequence[object]) -> Sort:
    """Resolve ``sort(field)``, ``sort(field, direction)``, ``sort(field, body)``
    and ``sort([...])`` into a sort directive."""
    match args:
        case [str() as field] if field:
            return field
        case [str() as field, str() as direction] if field:
            return {field: direction}
        case [str() as field, dict() as body] if field:
            return {field: copy.deepcopy(body)}
        case [list() | tuple() as fields] if all(_is_sort_directive(f) for f in fields):
            return copy.deepcopy(list(fields))
    raise InvalidArguments(f"Unsupported sort arguments: {_describe(args)}")


def _is_sort_directive(value: object) -> bool:
    return isinstance(value, dict) or (isinstance(value, str) and value != "")


def _freeze_value(value: Primitive | Sequence[Primitive]) -> Primitive | list[Primitive]:
    if isinstance(value, list | tuple):
        return list(value)
    return value
