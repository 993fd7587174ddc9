# esbody/models.py
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Literal

Bucket = Literal["and", "or", "not"]
Context = Literal["filter", "query"]

Primitive = str | int | float | bool | None
SortDirective = str | dict[str, Any]
Sort = SortDirective | list[SortDirective]


@dataclass(frozen=True)
class Entry:
    """Normalized query, filter or aggregation entry."""

    type: str | None
    field: str | None = None
    value: Primitive | list[Primitive] = None
    has_value: bool = False  # Distinguishes an explicit None value
    config: dict[str, Any] | None = None
    name: str | None = None  # Aggregations only
    nested: "QueryData | None" = None  # State returned by a sub-builder

    @property
    def is_bare(self) -> bool:
        """True for the type-less ``(fn)`` sub-builder form."""
        return self.type is None


@dataclass
class BoolGroup:
    """The and/or/not buckets of one boolean context."""

    and_: list[Entry] = field(default_factory=list)
    or_: list[Entry] = field(default_factory=list)
    not_: list[Entry] = field(default_factory=list)
    minimum_should_match: int | str | None = None

    def bucket(self, name: Bucket) -> list[Entry]:
        match name:
            case "and":
                return self.and_
            case "or":
                return self.or_
            case "not":
                return self.not_
        raise ValueError(f"Unknown bucket: {name!r}")

    def is_empty(self) -> bool:
        return not (self.and_ or self.or_ or self.not_) and self.minimum_should_match is None


@dataclass
class QueryData:
    """Mutable state accumulated by a single builder."""

    aggregations: list[Entry] = field(default_factory=list)
    filter: BoolGroup = field(default_factory=BoolGroup)
    query: BoolGroup = field(default_factory=BoolGroup)
    sort: Sort | None = None
    from_: int | None = None
    size: int | None = None
    raw_option: dict[str, Any] = field(default_factory=dict)
    in_child_context: bool = False
    parent: Context | None = None

    def group(self, context: Context) -> BoolGroup:
        return self.filter if context == "filter" else self.query


def iter_tree(data: QueryData) -> Iterator[QueryData]:
    """Yield ``data`` and every QueryData nested below it, each once."""
    seen: set[int] = set()
    stack = [data]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node
        entries = [*node.aggregations]
        for group in (node.filter, node.query):
            entries.extend([*group.and_, *group.or_, *group.not_])
        stack.extend(e.nested for e in entries if e.nested is not None)
