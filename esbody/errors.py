# esbody/errors.py
"""Exceptions raised while composing a query."""


class ESBodyError(Exception):
    """Base class for all esbody errors."""


class InvalidArguments(ESBodyError, TypeError):
    """No supported call shape matches the given arguments."""


class UnknownType(InvalidArguments):
    """Query, filter or aggregation type is not in the type catalog."""

    def __init__(self, kind: str, name: object) -> None:
        super().__init__(f"Unknown {kind} type: {name!r}")
        self.kind = kind
        self.name = name


class AmbiguousConfiguration(ESBodyError, ValueError):
    """A positional field collides with a field given in the config."""
