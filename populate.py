# populate.py (bulk population + exploration CLI)
import argparse
import json
import logging
import sys
from functools import wraps
from pathlib import Path
from timeit import Timer
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence

import pandas as pd

from aggregations import QUERIES, run_aggregation, buckets, rating_buckets
from catalog import load_movies
from config import load_config, configure_logging, seed_rng_from_cfg
from dist import sample_many
from generators import (COUNTRIES, EVENT_TYPES, WEIGHTED_DAYS, WEIGHTED_MONTHS,
                        generate_playback_entry, generate_post_entry, movie_weights)
from models import Movie
from search_store import SearchStore, PLAYBACK_MAPPING, POST_MAPPING
from viz_tools import RecordLogger, distribution_summary, print_distribution_report, plot_distribution

logger = logging.getLogger(__name__)


def timeit_decorator(the_func):
    """Runs the call once under timeit.Timer; seconds land on wrapper.last_execution_time."""
    @wraps(the_func)
    def my_timeit(*args, **kwargs):
        output_container = []
        def wrapper():
            output_container.append(the_func(*args, **kwargs))
        timer = Timer(wrapper)
        delta = timer.timeit(1)
        my_timeit.last_execution_time = delta
        return output_container.pop()

    my_timeit.last_execution_time = None
    return my_timeit


# --------------------------------------------------------------------------
# Bulk actions
def bulk_actions_generator(num: int, index: str, movies: Sequence[Movie],
                           year: int = 2014, rng=None) -> Iterator[Dict[str, Any]]:
    for _ in range(num):
        yield {
            "_index": index,
            "_source": generate_playback_entry(movies, year=year, rng=rng).to_source(),
        }


def post_actions_generator(num: int, index: str, text=None, rng=None) -> Iterator[Dict[str, Any]]:
    for _ in range(num):
        yield {
            "_index": index,
            "_source": generate_post_entry(text=text, rng=rng).to_source(),
        }


@timeit_decorator
def populate_index(store: SearchStore, num: int, index: str, movies: Sequence[Movie],
                   year: int = 2014, chunk_size: int = 500, rng=None):
    actions = bulk_actions_generator(num, index, movies, year=year, rng=rng)
    res = store.bulk_index(actions, chunk_size=chunk_size)
    store.refresh(index)
    return res


def populate_posts(store: SearchStore, num: int, index: str, chunk_size: int = 500, text=None, rng=None):
    actions = post_actions_generator(num, index, text=text, rng=rng)
    res = store.bulk_index(actions, chunk_size=chunk_size)
    store.refresh(index)
    return res


def dump_ndjson(path: str, records: Iterable[Dict[str, Any]]) -> int:
    """Write sources as newline-delimited JSON; datetimes as ISO strings."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    n = 0
    with p.open("w", encoding="utf-8") as f:
        for rec in records:
            f.write(json.dumps(rec, ensure_ascii=False, default=lambda o: o.isoformat()) + "\n")
            n += 1
    return n


# --------------------------------------------------------------------------
# Offline report
def build_report(movies: Sequence[Movie], num: int, year: int = 2014, rng=None):
    """Generate `num` records locally; summaries keyed by column name."""
    rec_logger = RecordLogger()
    rec_logger.extend(generate_playback_entry(movies, year=year, rng=rng) for _ in range(num))
    df = rec_logger.to_dataframe()
    return {
        "country": distribution_summary(df, "country", COUNTRIES),
        "event_type": distribution_summary(df, "event_type", [(e.value, w) for e, w in EVENT_TYPES]),
        "movie_id": distribution_summary(df, "movie_id", [(m.id, w) for m, w in movie_weights(movies)]),
        "month": distribution_summary(df, "month"),
        "day": distribution_summary(df, "day"),
        "hour_of_day": distribution_summary(df, "hour_of_day"),
    }


TABLES = {
    "country": COUNTRIES,
    "month": WEIGHTED_MONTHS,
    "day": WEIGHTED_DAYS,
}


# --------------------------------------------------------------------------
# CLI
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="playbackgen", description="Synthetic playback/post data for Elasticsearch")
    p.add_argument("--config", default=None, help="YAML config (default: ./config.yaml if present)")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("create-index", help="create the playback index with its mapping")

    sp = sub.add_parser("populate", help="bulk index synthetic playback events")
    sp.add_argument("-n", "--num", type=int, default=None)

    sp = sub.add_parser("populate-posts", help="bulk index synthetic blog posts")
    sp.add_argument("-n", "--num", type=int, default=None)

    sub.add_parser("update-mapping", help="apply the post mapping to the posts index")

    sp = sub.add_parser("aggregate", help="run an exploration aggregation")
    sp.add_argument("name", choices=sorted(QUERIES))

    sp = sub.add_parser("analyze", help="run the analyzer of FIELD over TEXT")
    sp.add_argument("field")
    sp.add_argument("text")

    sp = sub.add_parser("dump", help="write synthetic playback events to NDJSON (no Elasticsearch)")
    sp.add_argument("path")
    sp.add_argument("-n", "--num", type=int, default=None)

    sp = sub.add_parser("report", help="observed vs declared distributions of generated records")
    sp.add_argument("-n", "--num", type=int, default=None)
    sp.add_argument("--table", choices=sorted(TABLES), default=None,
                    help="sample one weighted table directly instead of whole records")
    sp.add_argument("--plot-dir", default=None, help="save bar charts here")
    return p


def _run_store_command(args, cfg: Dict[str, Any]) -> int:
    idx = cfg["indices"]
    gen = cfg["generation"]
    with SearchStore.from_config(cfg) as store:
        if args.command == "create-index":
            store.create_index(idx["playbacks"], mappings=PLAYBACK_MAPPING)
        elif args.command == "populate":
            movies = load_movies(cfg["catalog"]["movies_path"])
            num = args.num if args.num is not None else gen["num_playbacks"]
            try:
                ok, failed = populate_index(store, num, idx["playbacks"], movies,
                                            year=gen["year"], chunk_size=gen["chunk_size"])
            except Exception:
                logger.exception("[BULK] populate %s aborted", idx["playbacks"])
                raise
            print(f"indexed {ok} playbacks ({failed} failed) in {populate_index.last_execution_time:.2f}s")
        elif args.command == "populate-posts":
            num = args.num if args.num is not None else gen["num_posts"]
            ok, failed = populate_posts(store, num, idx["posts"], chunk_size=gen["chunk_size"])
            print(f"indexed {ok} posts ({failed} failed)")
        elif args.command == "update-mapping":
            store.update_mapping(idx["posts"], POST_MAPPING)
        elif args.command == "aggregate":
            res = run_aggregation(store, idx["playbacks"], args.name)
            if args.name == "rating-per-country":
                for key, count, avg in rating_buckets(res):
                    print(f"{key:12s}: docs={count:7d} avg_rank={avg:.2f}")
            else:
                for key, count in buckets(res, "by_hour"):
                    print(f"{str(key):>4s}: {count}")
        elif args.command == "analyze":
            print(" ".join(store.analyze(idx["analyze"], args.field, args.text)))
    return 0


def _run_report(args, cfg: Dict[str, Any]) -> int:
    num = args.num if args.num is not None else cfg["generation"]["num_playbacks"]
    if args.table:
        table = TABLES[args.table]
        df = pd.DataFrame({args.table: sample_many(table, num, seed=cfg.get("rng_seed"))})
        summaries = {args.table: distribution_summary(df, args.table, table)}
    else:
        movies = load_movies(cfg["catalog"]["movies_path"])
        summaries = build_report(movies, num, year=cfg["generation"]["year"])
    for col, summary in summaries.items():
        print_distribution_report(summary, title=f"{col} (n={num})")
        if args.plot_dir:
            plot_distribution(summary, title=col, save_path=str(Path(args.plot_dir) / f"{col}.png"))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config(args.config)
    configure_logging(cfg)
    seed_rng_from_cfg(cfg)

    if args.command == "dump":
        movies = load_movies(cfg["catalog"]["movies_path"])
        num = args.num if args.num is not None else cfg["generation"]["num_playbacks"]
        gen = (generate_playback_entry(movies, year=cfg["generation"]["year"]).to_source() for _ in range(num))
        n = dump_ndjson(args.path, gen)
        print(f"written: {n} records -> {args.path}")
        return 0
    if args.command == "report":
        return _run_report(args, cfg)
    return _run_store_command(args, cfg)


if __name__ == "__main__":
    sys.exit(main())
