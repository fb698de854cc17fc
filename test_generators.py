import calendar
import random
from collections import Counter

import pytest

from dist import InvalidDistribution, LockedRandom
from generators import (COUNTRIES, DAYS, HOURS, MONTHS, POST_TAGS, WEIGHTED_DAYS, WEIGHTED_HOURS,
                        WEIGHTED_MONTHS, generate_playback_entry, generate_post_entry, random_country,
                        random_datetime, random_event_type, random_hour, random_movie)
from models import EventType, Movie

MOVIES = [Movie(1, "one", 1), Movie(2, "two", 2), Movie(3, "three", 4)]


class FakeText:
    def sentence(self, nb_words):
        return " ".join(["word"] * nb_words) + "."

    def paragraphs(self, nb):
        return [f"paragraph {i}" for i in range(nb)]


def test_month_table_boosts_june_and_july():
    weights = dict(WEIGHTED_MONTHS)
    assert weights[6] == 2 and weights[7] == 3
    assert set(weights) == set(range(1, 12))
    assert all(w == 1 for m, w in weights.items() if m not in (6, 7))
    assert all(w == 1 for _, w in MONTHS)


def test_day_table_boosts_9th_to_11th():
    weights = dict(WEIGHTED_DAYS)
    assert len(WEIGHTED_DAYS) == 30
    assert {d for d, w in weights.items() if w == 3} == {9, 10, 11}
    assert all(w == 1 for _, w in DAYS)


def test_hour_table():
    weights = dict(WEIGHTED_HOURS)
    assert set(weights) == set(range(9, 24))
    assert weights[22] == 5 and weights[21] == 4
    assert all(w == 1 for _, w in HOURS)
    rng = random.Random(4)
    assert all(9 <= random_hour(rng=rng) <= 23 for _ in range(500))


def test_random_datetime_always_valid():
    rng = random.Random(2014)
    for _ in range(10_000):
        dt = random_datetime(rng=rng)
        assert dt.year == 2014
        assert 1 <= dt.month <= 11
        assert 1 <= dt.day <= calendar.monthrange(dt.year, dt.month)[1]
        assert 0 <= dt.hour <= 23
        assert 0 <= dt.minute <= 58


def test_random_datetime_never_feb_30_or_31st():
    rng = random.Random(7)
    days = Counter((d.month, d.day) for d in (random_datetime(rng=rng) for _ in range(5000)))
    assert (2, 30) not in days and (2, 29) not in days  # 2014 is not a leap year
    assert all(day <= 30 for _, day in days)


def test_random_datetime_respects_year():
    assert random_datetime(year=2020, rng=random.Random(1)).year == 2020


def test_movie_frequencies_follow_inverse_rank():
    rng = random.Random(123)
    n = 100_000
    counts = Counter(random_movie(MOVIES, rng=rng).id for _ in range(n))
    total = 1 + 0.5 + 0.25
    assert counts[1] / n == pytest.approx(1 / total, abs=0.01)
    assert counts[2] / n == pytest.approx(0.5 / total, abs=0.01)
    assert counts[3] / n == pytest.approx(0.25 / total, abs=0.01)


@pytest.mark.parametrize("rank", [0, -3])
def test_random_movie_rejects_non_positive_rank(rank):
    with pytest.raises(InvalidDistribution):
        random_movie([Movie(1, "ok", 1), Movie(2, "bad", rank)])


def test_random_movie_empty_catalog():
    with pytest.raises(InvalidDistribution):
        random_movie([])


def test_country_and_event_type_values():
    rng = random.Random(5)
    names = {c for c, _ in COUNTRIES}
    assert all(random_country(rng=rng) in names for _ in range(1000))
    counts = Counter(random_event_type(rng=rng) for _ in range(20_000))
    assert set(counts) == {EventType.START, EventType.STOP}
    assert counts[EventType.START] / 20_000 == pytest.approx(0.6, abs=0.02)


def test_playback_entry_source_document():
    rec = generate_playback_entry(MOVIES, rng=random.Random(9))
    src = rec.to_source()
    assert set(src) == {"datetime", "hour_of_day", "event_type", "country", "movie"}
    assert src["hour_of_day"] == rec.datetime.hour
    assert src["event_type"] in ("start", "stop")
    assert src["movie"]["id"] in (1, 2, 3)


def test_post_entry_with_injected_text_source():
    rng = random.Random(3)
    for _ in range(200):
        post = generate_post_entry(text=FakeText(), rng=rng)
        assert 4 <= len(post.title.split()) <= 10
        assert 1 <= len(post.description.split(". ")) <= 5
        assert 1 <= len(post.tags) <= 3
        assert len(set(post.tags)) == len(post.tags)
        assert set(post.tags) <= set(POST_TAGS)


class OnlyRandom:
    """Exposes random() and nothing else."""

    def __init__(self, seed):
        self._r = random.Random(seed)

    def random(self):
        return self._r.random()


def test_weighted_draws_need_only_random():
    rng = OnlyRandom(4)
    assert random_country(rng=rng) in dict(COUNTRIES)
    assert random_event_type(rng=rng) in (EventType.START, EventType.STOP)
    assert random_movie(MOVIES, rng=rng) in MOVIES
    assert random_hour(rng=rng) in dict(HOURS)


def test_date_and_post_draws_need_random_like_source():
    with pytest.raises(AttributeError):
        random_datetime(rng=OnlyRandom(4))
    rng = LockedRandom(5)
    assert random_datetime(rng=rng).year == 2014
    post = generate_post_entry(text=FakeText(), rng=rng)
    assert 1 <= len(post.tags) <= 3
