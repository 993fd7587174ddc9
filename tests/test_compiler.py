# tests/test_compiler.py
from esbody import body


def test_empty_builder_compiles_to_empty_document():
    assert body().build() == {}


def test_and_filter_only_populates_must():
    built = body().and_filter("term", "status", "open").build()
    assert built == {"filter": {"bool": {"must": [{"term": {"status": "open"}}]}}}


def test_minimum_should_match_needs_should():
    built = body().and_filter("term", "a", 1).filter_minimum_should_match(1).build()
    assert "minimum_should_match" not in built["filter"]["bool"]

    built = (
        body()
        .or_query("term", "a", 1)
        .or_query("term", "b", 2)
        .query_minimum_should_match("50%")
        .build()
    )
    assert built["query"]["bool"]["minimum_should_match"] == "50%"
    assert len(built["query"]["bool"]["should"]) == 2


def test_minimum_should_match_alone_keeps_group():
    assert body().query_minimum_should_match(1).build() == {"query": {"bool": {}}}


def test_all_buckets():
    built = (
        body()
        .query("match", "title", "quick")
        .or_query("term", "tag", "a")
        .not_query("term", "tag", "b")
        .build()
    )
    assert built["query"] == {
        "bool": {
            "must": [{"match": {"title": "quick"}}],
            "should": [{"term": {"tag": "a"}}],
            "must_not": [{"term": {"tag": "b"}}],
        }
    }


def test_repeated_entries_are_kept():
    built = body().filter("term", "a", 1).filter("term", "a", 1).build()
    assert built["filter"]["bool"]["must"] == [{"term": {"a": 1}}, {"term": {"a": 1}}]


def test_leaf_body_shapes():
    built = (
        body()
        .query("exists", "user")
        .query("match_all", {})
        .query("terms", "tag", ["a", "b"])
        .query("range", "age", {"gte": 18, "lt": 65})
        .query("match", "title", "quick", {"boost": 2})
        .build()
    )
    assert built["query"]["bool"]["must"] == [
        {"exists": {"field": "user"}},
        {"match_all": {}},
        {"terms": {"tag": ["a", "b"]}},
        {"range": {"age": {"gte": 18, "lt": 65}}},
        {"match": {"title": "quick", "boost": 2}},
    ]


def test_bare_sub_builder_is_transparent():
    nested = body().query(lambda b: b.and_query("term", "status", "open")).build()
    direct = body().and_query("term", "status", "open").build()
    assert nested == {"query": {"bool": {"must": [direct["query"]]}}}


def test_bare_sub_builder_in_or_bucket():
    built = (
        body()
        .filter("term", "user", "kimchy")
        .or_filter(lambda f: f.filter("term", "tag", "a").filter("term", "tag", "b"))
        .or_filter("term", "tag", "c")
        .build()
    )
    assert built["filter"] == {
        "bool": {
            "must": [{"term": {"user": "kimchy"}}],
            "should": [
                {"bool": {"must": [{"term": {"tag": "a"}}, {"term": {"tag": "b"}}]}},
                {"term": {"tag": "c"}},
            ],
        }
    }


def test_bare_sub_builder_other_context_goes_under_filter():
    built = (
        body()
        .query(lambda q: q.or_query("match", "title", "a").filter("term", "lang", "en"))
        .build()
    )
    assert built["query"]["bool"]["must"] == [
        {
            "bool": {
                "should": [{"match": {"title": "a"}}],
                "filter": {"bool": {"must": [{"term": {"lang": "en"}}]}},
            }
        }
    ]


def test_empty_bare_sub_builder():
    assert body().not_filter(lambda f: f).build() == {
        "filter": {"bool": {"must_not": [{"bool": {}}]}}
    }


def test_typed_sub_builder_merges_into_body():
    built = (
        body()
        .query(
            "nested",
            {"path": "comments", "score_mode": "avg"},
            lambda q: q.query("match", "comments.body", "great"),
        )
        .build()
    )
    assert built["query"]["bool"]["must"] == [
        {
            "nested": {
                "path": "comments",
                "score_mode": "avg",
                "query": {"bool": {"must": [{"match": {"comments.body": "great"}}]}},
            }
        }
    ]


def test_typed_sub_builder_with_field():
    built = body().filter("has_child", "comment", lambda f: f.filter("term", "a", 1)).build()
    assert built["filter"]["bool"]["must"] == [
        {
            "has_child": {
                "field": "comment",
                "filter": {"bool": {"must": [{"term": {"a": 1}}]}},
            }
        }
    ]


def test_nested_aggregations():
    built = (
        body()
        .agg("byStatus", "terms", "status", lambda sub: sub.agg("avgPrice", "avg", "price"))
        .build()
    )
    assert built["aggs"]["byStatus"] == {
        "terms": {"field": "status"},
        "aggs": {"avgPrice": {"avg": {"field": "price"}}},
    }


def test_aggregation_with_filter_and_sub_aggregations():
    built = (
        body()
        .aggregation(
            "byStatus",
            "terms",
            "status",
            {"size": 5},
            lambda sub: sub.filter("term", "active", True).agg("maxPrice", "max", "price"),
        )
        .build()
    )
    assert built["aggs"] == {
        "byStatus": {
            "terms": {"field": "status", "size": 5},
            "filter": {"bool": {"must": [{"term": {"active": True}}]}},
            "aggs": {"maxPrice": {"max": {"field": "price"}}},
        }
    }


def test_aggregation_config_only():
    built = body().agg("hist", "histogram", {"field": "price", "interval": 50}).build()
    assert built["aggs"] == {"hist": {"histogram": {"field": "price", "interval": 50}}}


def test_aggregation_order_is_preserved():
    built = body().agg("b", "max", "x").agg("a", "min", "x").agg("c", "avg", "x").build()
    assert list(built["aggs"]) == ["b", "a", "c"]


def test_duplicate_aggregation_name_keeps_last(caplog):
    built = body().agg("a", "max", "x").agg("a", "min", "y").build()
    assert built["aggs"] == {"a": {"min": {"field": "y"}}}
    assert "defined more than once" in caplog.text


def test_sort_compilation():
    assert body().sort("name").build() == {"sort": [{"name": "asc"}]}
    assert body().sort("_score").build() == {"sort": [{"_score": "desc"}]}


def test_repeated_sort_calls_append():
    built = (
        body()
        .sort("_score")
        .sort("date", "desc")
        .sort("price", {"order": "asc", "mode": "avg"})
        .sort(["name", {"id": "asc"}])
        .build()
    )
    assert built["sort"] == [
        {"_score": "desc"},
        {"date": "desc"},
        {"price": {"order": "asc", "mode": "avg"}},
        {"name": "asc"},
        {"id": "asc"},
    ]


def test_pagination():
    assert body().from_(20).size(10).build() == {"from": 20, "size": 10}
    assert body().from_(0).size(0).build() == {"from": 0, "size": 0}


def test_raw_option_overrides_structured_keys():
    built = body().size(10).raw_option("size", 99).build()
    assert built == {"size": 99}

    built = body().query("term", "a", 1).raw_option("query", {"match_all": {}}).build()
    assert built == {"query": {"match_all": {}}}


def test_raw_option_adds_keys():
    built = body().raw_option("_source", ["title"]).build()
    assert built == {"_source": ["title"]}


def test_build_is_repeatable_and_independent():
    b = (
        body()
        .query("match", "title", "quick", {"boost": 2})
        .agg("a", "terms", "tag", {"order": {"_count": "desc"}})
        .sort("price", {"order": "asc"})
        .raw_option("highlight", {"fields": {"title": {}}})
    )
    first = b.build()
    second = b.build()
    assert first == second
    assert first is not second

    first["query"]["bool"]["must"][0]["match"]["boost"] = 100
    first["aggs"]["a"]["terms"]["order"]["_count"] = "asc"
    first["sort"][0]["price"]["order"] = "desc"
    first["highlight"]["fields"]["body"] = {}
    assert b.build() == second


def test_composing_after_build():
    b = body().filter("term", "a", 1)
    before = b.build()
    b.filter("term", "b", 2)
    assert before == {"filter": {"bool": {"must": [{"term": {"a": 1}}]}}}
    assert len(b.build()["filter"]["bool"]["must"]) == 2


def test_full_document():
    built = (
        body()
        .query("match", "message", "this is a test")
        .filter("term", "user", "kimchy")
        .not_filter("term", "status", "deleted")
        .agg("byUser", "terms", "user", lambda a: a.agg("avgAge", "avg", "age"))
        .sort("timestamp", "desc")
        .from_(0)
        .size(25)
        .build()
    )
    assert built == {
        "query": {"bool": {"must": [{"match": {"message": "this is a test"}}]}},
        "filter": {
            "bool": {
                "must": [{"term": {"user": "kimchy"}}],
                "must_not": [{"term": {"status": "deleted"}}],
            }
        },
        "aggs": {
            "byUser": {
                "terms": {"field": "user"},
                "aggs": {"avgAge": {"avg": {"field": "age"}}},
            }
        },
        "sort": [{"timestamp": "desc"}],
        "from": 0,
        "size": 25,
    }
