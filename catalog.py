# catalog.py (movie catalog)
import json
import logging
from pathlib import Path
from typing import List, Sequence

from dist import InvalidDistribution
from models import Movie

logger = logging.getLogger(__name__)

DEFAULT_MOVIES_PATH = "data/movies.json"


def validate_ranks(movies: Sequence[Movie]):
    bad = [m.id for m in movies if m.rank <= 0]
    if bad:
        raise InvalidDistribution(f"movie rank must be a positive integer, offending ids: {bad}")


def load_movies(path: str = DEFAULT_MOVIES_PATH) -> List[Movie]:
    with Path(path).open("r", encoding="utf-8") as movie_fp:
        raw = json.load(movie_fp)
    movies = [Movie.from_dict(d) for d in raw]
    validate_ranks(movies)
    logger.info("[CATALOG] loaded %d movies from %s", len(movies), path)
    return movies
