# generators.py (synthetic playback / post records)
import random
from datetime import datetime
from typing import Optional, Sequence

from faker import Faker

from catalog import validate_ranks
from dist import weighted_choice, uniform_table, with_overrides
from models import EventType, Movie, PlaybackRecord, Post

DEFAULT_YEAR = 2014

# rng arguments: a random.Random-like object (random, choice, randint, sample);
# None uses the module-level random. weighted draws alone only need random().

# base tables are immutable; boosted variants are derived by value lookup
MONTHS = uniform_table(range(1, 12))
WEIGHTED_MONTHS = with_overrides(MONTHS, {6: 2, 7: 3})

DAYS = uniform_table(range(1, 31))
WEIGHTED_DAYS = with_overrides(DAYS, {9: 3, 10: 3, 11: 3})

# evening-heavy viewing hours; random_datetime does not draw from this table
HOURS = uniform_table(range(9, 24))
WEIGHTED_HOURS = with_overrides(HOURS, {15: 2, 16: 2, 20: 3, 21: 4, 22: 5, 23: 3})

EVENT_TYPES = ((EventType.START, 6), (EventType.STOP, 4))

COUNTRIES = (
    ("UK", 4),
    ("France", 3),
    ("Spain", 3),
    ("USA", 2),
    ("Brazil", 2),
    ("Italy", 2),
    ("Germany", 1),
    ("Belgium", 1),
    ("Portugal", 1),
    ("Greece", .5),
)

POST_TAGS = ("jazz", "rock", "alternative", "country", "techno", "house", "classical")

_fake: Optional[Faker] = None


def default_text_source() -> Faker:
    global _fake
    if _fake is None:
        _fake = Faker()
    return _fake


def random_datetime(year: int = DEFAULT_YEAR, rng=None) -> datetime:
    """
    Weighted calendar draw with rejection sampling.
    month/day are weighted draws, minute/second uniform over range(59);
    any combination datetime() refuses (Feb 30, slot out of range) is redrawn.
    rng needs random() and choice().
    """
    r = rng or random

    def _generate():
        month = weighted_choice(WEIGHTED_MONTHS, rng=rng)
        day = weighted_choice(WEIGHTED_DAYS, rng=rng)
        minutes = r.choice(range(59))
        seconds = r.choice(range(59))
        # minute/second draws fill the hour/minute positional slots
        return datetime(year, month, day, minutes, seconds)

    while True:
        try:
            return _generate()
        except ValueError:
            pass


def random_hour(rng=None) -> int:
    return weighted_choice(WEIGHTED_HOURS, rng=rng)


def movie_weights(movies: Sequence[Movie]):
    validate_ranks(movies)
    return [(m, 1 / m.rank) for m in movies]


def random_movie(movies: Sequence[Movie], rng=None) -> Movie:
    return weighted_choice(movie_weights(movies), rng=rng)


def random_country(rng=None) -> str:
    return weighted_choice(COUNTRIES, rng=rng)


def random_event_type(rng=None) -> EventType:
    return weighted_choice(EVENT_TYPES, rng=rng)


def generate_playback_entry(movies: Sequence[Movie], year: int = DEFAULT_YEAR, rng=None) -> PlaybackRecord:
    return PlaybackRecord(
        datetime=random_datetime(year, rng=rng),
        event_type=random_event_type(rng=rng),
        country=random_country(rng=rng),
        movie=random_movie(movies, rng=rng),
    )


def generate_post_entry(text=None, rng=None) -> Post:
    """
    text: any object with Faker's sentence()/paragraphs() signature.
    rng needs randint() and sample().
    """
    r = rng or random
    text = text or default_text_source()
    return Post(
        title=text.sentence(nb_words=r.randint(4, 10)),
        description=". ".join(text.paragraphs(nb=r.randint(1, 5))),
        tags=r.sample(POST_TAGS, r.randint(1, 3)),
    )
