# esbody/query/sort.py
import copy
from typing import Any

from esbody.models import Sort, SortDirective

SCORE_FIELD = "_score"


def default_direction(field: str) -> str:
    """Relevance score sorts descending by default, everything else ascending."""
    return "desc" if field == SCORE_FIELD else "asc"


def merge_sort(current: Sort | None, incoming: Sort) -> Sort:
    """Combine an existing sort specification with a newly supplied one.

    Later directives become lower-precedence tie-breaks; nothing is replaced.
    Neither argument is mutated.
    """
    if not current:
        return incoming

    if current is incoming:
        return current

    merged: list[SortDirective]
    if isinstance(current, str):
        merged = [{current: default_direction(current)}]
    elif isinstance(current, list):
        merged = list(current)
    else:
        merged = [current]

    if isinstance(incoming, list):
        return [*merged, *incoming]
    return [*merged, incoming]


def compile_sort(sort: Sort) -> list[dict[str, Any]]:
    """Compile a sort specification into the wire-level list of directives."""
    directives = sort if isinstance(sort, list) else [sort]
    compiled: list[dict[str, Any]] = []
    for directive in directives:
        if isinstance(directive, str):
            compiled.append({directive: default_direction(directive)})
        else:
            compiled.append(copy.deepcopy(directive))
    return compiled
