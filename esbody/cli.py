# esbody/cli.py
import json
import logging
import sys
from collections.abc import Sequence
from typing import Annotated, Any

import cyclopts

from esbody.builder import ESBuilder, body
from esbody.errors import ESBodyError

app = cyclopts.App(
    name="esbody",
    help="Compose search engine query documents from the command line.",
)


def _parse_value(raw: str) -> Any:
    """Parse a JSON literal, falling back to the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_clause(spec: str) -> tuple[Any, ...]:
    """Parse ``TYPE:FIELD=VALUE``, ``TYPE:FIELD`` or ``TYPE:{json}`` into call arguments.

    Example:
        >>> parse_clause("term:status=open")
        ('term', 'status', 'open')
    """
    type_, sep, rest = spec.partition(":")
    if not sep or not type_ or not rest:
        raise ValueError(f"Invalid clause {spec!r}, expected TYPE:FIELD[=VALUE] or TYPE:{{json}}")

    if rest.startswith("{"):
        config = json.loads(rest)
        return (type_, config)

    field, sep, raw = rest.partition("=")
    if not sep:
        return (type_, field)

    value = _parse_value(raw)
    return (type_, field, value)


def parse_aggregation(spec: str) -> tuple[str, str, str]:
    """Parse ``NAME:TYPE:FIELD``."""
    parts = spec.split(":", 2)
    if len(parts) != 3 or not all(parts):
        raise ValueError(f"Invalid aggregation {spec!r}, expected NAME:TYPE:FIELD")
    name, type_, field = parts
    return (name, type_, field)


def parse_sort(spec: str) -> tuple[str, ...]:
    """Parse ``FIELD`` or ``FIELD:DIRECTION``."""
    field, sep, direction = spec.partition(":")
    if not field or (sep and not direction):
        raise ValueError(f"Invalid sort {spec!r}, expected FIELD or FIELD:DIRECTION")
    return (field, direction) if sep else (field,)


def parse_raw(spec: str) -> tuple[str, Any]:
    """Parse ``KEY=JSON``."""
    key, sep, raw = spec.partition("=")
    if not sep or not key:
        raise ValueError(f"Invalid raw option {spec!r}, expected KEY=VALUE")
    return (key, _parse_value(raw))


def compose(
    queries: Sequence[str] = (),
    or_queries: Sequence[str] = (),
    not_queries: Sequence[str] = (),
    filters: Sequence[str] = (),
    or_filters: Sequence[str] = (),
    not_filters: Sequence[str] = (),
    aggs: Sequence[str] = (),
    sorts: Sequence[str] = (),
    size: int | None = None,
    from_: int | None = None,
    raw: Sequence[str] = (),
) -> ESBuilder:
    """Apply command-line specs to a fresh root builder."""
    b = body()
    for spec in queries:
        b.query(*parse_clause(spec))
    for spec in or_queries:
        b.or_query(*parse_clause(spec))
    for spec in not_queries:
        b.not_query(*parse_clause(spec))
    for spec in filters:
        b.filter(*parse_clause(spec))
    for spec in or_filters:
        b.or_filter(*parse_clause(spec))
    for spec in not_filters:
        b.not_filter(*parse_clause(spec))
    for spec in aggs:
        b.agg(*parse_aggregation(spec))
    for spec in sorts:
        b.sort(*parse_sort(spec))
    if size is not None:
        b.size(size)
    if from_ is not None:
        b.from_(from_)
    for spec in raw:
        b.raw_option(*parse_raw(spec))
    return b


@app.command(name="build")
def build(
    query: Annotated[
        list[str] | None,
        cyclopts.Parameter(name=["--query", "-q"], help="Query clause: TYPE:FIELD=VALUE"),
    ] = None,
    or_query: Annotated[
        list[str] | None,
        cyclopts.Parameter(name="--or-query", help="Query clause added to 'should'"),
    ] = None,
    not_query: Annotated[
        list[str] | None,
        cyclopts.Parameter(name="--not-query", help="Query clause added to 'must_not'"),
    ] = None,
    filter: Annotated[
        list[str] | None,
        cyclopts.Parameter(name=["--filter", "-f"], help="Filter clause: TYPE:FIELD=VALUE"),
    ] = None,
    or_filter: Annotated[
        list[str] | None,
        cyclopts.Parameter(name="--or-filter", help="Filter clause added to 'should'"),
    ] = None,
    not_filter: Annotated[
        list[str] | None,
        cyclopts.Parameter(name="--not-filter", help="Filter clause added to 'must_not'"),
    ] = None,
    agg: Annotated[
        list[str] | None,
        cyclopts.Parameter(name=["--agg", "-a"], help="Aggregation: NAME:TYPE:FIELD"),
    ] = None,
    sort: Annotated[
        list[str] | None,
        cyclopts.Parameter(name=["--sort", "-s"], help="Sort: FIELD or FIELD:DIRECTION"),
    ] = None,
    size: Annotated[
        int | None,
        cyclopts.Parameter(name="--size", help="Number of hits to return"),
    ] = None,
    from_: Annotated[
        int | None,
        cyclopts.Parameter(name="--from", help="Offset of the first hit"),
    ] = None,
    raw: Annotated[
        list[str] | None,
        cyclopts.Parameter(name="--raw", help="Raw top-level option: KEY=JSON"),
    ] = None,
    indent: Annotated[
        int,
        cyclopts.Parameter(name="--indent", help="JSON indentation"),
    ] = 2,
    verbose: Annotated[
        bool,
        cyclopts.Parameter(name=["--verbose", "-v"], help="Enable debug logging"),
    ] = False,
) -> None:
    """Compose a query document and print it as JSON."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        builder = compose(
            queries=query or [],
            or_queries=or_query or [],
            not_queries=not_query or [],
            filters=filter or [],
            or_filters=or_filter or [],
            not_filters=not_filter or [],
            aggs=agg or [],
            sorts=sort or [],
            size=size,
            from_=from_,
            raw=raw or [],
        )
    except (ValueError, ESBodyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(builder.build(), indent=indent, ensure_ascii=False))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
