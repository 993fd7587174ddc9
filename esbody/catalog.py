# esbody/catalog.py
"""Names of the query and aggregation types a builder accepts."""

from collections.abc import Iterable
from dataclasses import dataclass

QUERY_TYPES = frozenset(
    {
        # Full text
        "combined_fields",
        "intervals",
        "match",
        "match_bool_prefix",
        "match_phrase",
        "match_phrase_prefix",
        "multi_match",
        "query_string",
        "simple_query_string",
        # Term level
        "exists",
        "fuzzy",
        "ids",
        "prefix",
        "range",
        "regexp",
        "term",
        "terms",
        "terms_set",
        "type",
        "wildcard",
        # Compound
        "bool",
        "boosting",
        "constant_score",
        "dis_max",
        "function_score",
        # Joining
        "has_child",
        "has_parent",
        "nested",
        "parent_id",
        # Geo
        "geo_bounding_box",
        "geo_distance",
        "geo_polygon",
        "geo_shape",
        "shape",
        # Specialized
        "distance_feature",
        "knn",
        "more_like_this",
        "percolate",
        "rank_feature",
        "script",
        "script_score",
        "semantic",
        "sparse_vector",
        "wrapper",
        "match_all",
        "match_none",
        "span_containing",
        "span_first",
        "span_multi",
        "span_near",
        "span_not",
        "span_or",
        "span_term",
        "span_within",
    }
)

AGGREGATION_TYPES = frozenset(
    {
        # Metrics
        "avg",
        "boxplot",
        "cardinality",
        "extended_stats",
        "geo_bounds",
        "geo_centroid",
        "geo_line",
        "matrix_stats",
        "max",
        "median_absolute_deviation",
        "min",
        "percentile_ranks",
        "percentiles",
        "rate",
        "scripted_metric",
        "stats",
        "string_stats",
        "sum",
        "t_test",
        "top_hits",
        "top_metrics",
        "value_count",
        "weighted_avg",
        # Bucket
        "adjacency_matrix",
        "auto_date_histogram",
        "children",
        "composite",
        "date_histogram",
        "date_range",
        "diversified_sampler",
        "filter",
        "filters",
        "geo_distance",
        "geohash_grid",
        "geotile_grid",
        "global",
        "histogram",
        "ip_range",
        "missing",
        "multi_terms",
        "nested",
        "parent",
        "range",
        "rare_terms",
        "reverse_nested",
        "sampler",
        "significant_terms",
        "significant_text",
        "terms",
        "variable_width_histogram",
        # Pipeline
        "avg_bucket",
        "bucket_script",
        "bucket_selector",
        "bucket_sort",
        "cumulative_cardinality",
        "cumulative_sum",
        "derivative",
        "extended_stats_bucket",
        "max_bucket",
        "min_bucket",
        "moving_fn",
        "moving_percentiles",
        "normalize",
        "percentiles_bucket",
        "serial_diff",
        "stats_bucket",
        "sum_bucket",
    }
)


@dataclass(frozen=True)
class TypeCatalog:
    """Closed set of recognized query/filter and aggregation type names.

    The catalog only answers membership questions; the shape of each type's
    config is passed through untouched.
    """

    queries: frozenset[str] = QUERY_TYPES
    aggregations: frozenset[str] = AGGREGATION_TYPES

    def is_query_type(self, name: object) -> bool:
        return isinstance(name, str) and name in self.queries

    def is_aggregation_type(self, name: object) -> bool:
        return isinstance(name, str) and name in self.aggregations

    def extend(
        self,
        queries: Iterable[str] = (),
        aggregations: Iterable[str] = (),
    ) -> "TypeCatalog":
        """Return a new catalog that also accepts the given type names."""
        return TypeCatalog(
            queries=self.queries | frozenset(queries),
            aggregations=self.aggregations | frozenset(aggregations),
        )


DEFAULT_CATALOG = TypeCatalog()
