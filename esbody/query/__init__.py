from .arguments import (
    NormalizedArgs,
    normalize_aggregation_args,
    normalize_clause_args,
    normalize_sort_args,
)
from .sort import SCORE_FIELD, compile_sort, merge_sort

__all__ = [
    "NormalizedArgs",
    "normalize_clause_args",
    "normalize_aggregation_args",
    "normalize_sort_args",
    "merge_sort",
    "compile_sort",
    "SCORE_FIELD",
]
