# aggregations.py (exploration queries over the playback index)
from typing import Any, Dict, List, Tuple


def by_hours_script_query() -> Dict[str, Any]:
    # hour computed at query time from the stored datetime
    return {
        "size": 0,
        "aggregations": {
            "by_hour": {
                "terms": {
                    "script": {"source": "doc['datetime'].value.getHour()"}
                }
            }
        },
    }


def by_hours_term_query() -> Dict[str, Any]:
    return {
        "size": 0,
        "aggregations": {
            "by_hour": {
                "terms": {"field": "hour_of_day"}
            }
        },
    }


def rating_per_country_query() -> Dict[str, Any]:
    return {
        "size": 0,
        "aggregations": {
            "by_country": {
                "terms": {"field": "country"},
                "aggregations": {
                    "by_rating": {"avg": {"field": "movie.rank"}}
                },
            }
        },
    }


QUERIES = {
    "by-hour-script": by_hours_script_query,
    "by-hour-term": by_hours_term_query,
    "rating-per-country": rating_per_country_query,
}


def run_aggregation(store, index: str, name: str):
    if name not in QUERIES:
        raise ValueError(f"unknown aggregation: {name} (choose from {sorted(QUERIES)})")
    return store.search(index, QUERIES[name]())


def buckets(res, agg: str) -> List[Tuple[Any, int]]:
    return [(b["key"], b["doc_count"]) for b in res["aggregations"][agg]["buckets"]]


def rating_buckets(res) -> List[Tuple[Any, int, float]]:
    return [(b["key"], b["doc_count"], b["by_rating"]["value"])
            for b in res["aggregations"]["by_country"]["buckets"]]
