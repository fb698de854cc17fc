# dist.py (weighted samplers)
import math
import random
import threading
from bisect import bisect_right
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, TypeVar

import numpy as np

T = TypeVar("T")

WeightedEntry = Tuple[T, float]
WeightedSet = Sequence[WeightedEntry]


class InvalidDistribution(ValueError):
    """Weighted table cannot produce a draw (empty, negative, non-finite or zero total)."""


class LockedRandom(random.Random):
    """
    random.Random with random() and getrandbits() serialised by a lock.
    choice/randint/sample go through getrandbits, so every draw the generators make is covered.
    threads can share one instance; the stream order across threads is unspecified.
    """

    def __init__(self, seed=None):
        self._lock = threading.Lock()
        super().__init__(seed)

    def random(self) -> float:
        with self._lock:
            return super().random()

    def getrandbits(self, k: int) -> int:
        with self._lock:
            return super().getrandbits(k)

    def seed(self, a=None, version=2):
        with self._lock:
            return super().seed(a, version)


def _check_weights(weights: Sequence[float]):
    if not weights:
        raise InvalidDistribution("empty weighted table")
    for i, w in enumerate(weights):
        if not math.isfinite(w) or w < 0:
            raise InvalidDistribution(f"weight[{i}]={w!r} must be finite and >= 0")


def cumulative_totals(weights: Iterable[float]) -> List[float]:
    totals = []
    running_total = 0.0
    for w in weights:
        running_total += w
        totals.append(running_total)
    return totals


def weighted_choice_index(weights: Sequence[float], rng=None) -> int:
    """
    Index of one weight, drawn with probability weight / sum(weights).
    r = uniform01 * total, then the first index whose running total is strictly greater than r.
    A draw exactly on a boundary totals[i] belongs to i+1.
    """
    weights = list(weights)
    _check_weights(weights)
    totals = cumulative_totals(weights)
    total = totals[-1]
    if total <= 0:
        raise InvalidDistribution(f"total weight {total} is non-positive")

    rnd = (rng or random).random() * total
    i = bisect_right(totals, rnd)
    if i >= len(totals):
        # u*total rounded up to total: fall back to the last reachable entry
        i = max(j for j, w in enumerate(weights) if w > 0)
    return i


def weighted_choice(entries: WeightedSet, rng=None):
    values = [v[0] for v in entries]
    weights = [v[1] for v in entries]
    return values[weighted_choice_index(weights, rng=rng)]


def uniform_table(values: Iterable[T], weight: float = 1) -> Tuple[WeightedEntry, ...]:
    return tuple((v, weight) for v in values)


def with_overrides(base: WeightedSet, overrides: Mapping[Any, float]) -> Tuple[WeightedEntry, ...]:
    """New table with weights replaced by value lookup; base is left untouched."""
    known = {v for v, _ in base}
    missing = [k for k in overrides if k not in known]
    if missing:
        raise InvalidDistribution(f"override values not in table: {missing}")
    return tuple((v, overrides.get(v, w)) for v, w in base)


def probabilities(entries: WeightedSet) -> Dict[Any, float]:
    weights = [w for _, w in entries]
    _check_weights(weights)
    total = sum(weights)
    if total <= 0:
        raise InvalidDistribution(f"total weight {total} is non-positive")
    out: Dict[Any, float] = {}
    for v, w in entries:
        out[v] = out.get(v, 0.0) + w / total
    return out


def sample_many(entries: WeightedSet, size: int, seed: Optional[int] = None) -> List[Any]:
    """Vectorised draws with the same upper-bound rule (searchsorted side='right')."""
    values = [v[0] for v in entries]
    weights = [v[1] for v in entries]
    _check_weights(weights)
    totals = np.cumsum(np.asarray(weights, dtype=float))
    total = float(totals[-1])
    if total <= 0:
        raise InvalidDistribution(f"total weight {total} is non-positive")
    gen = np.random.default_rng(seed)
    idx = np.searchsorted(totals, gen.random(size) * total, side="right")
    last = max(j for j, w in enumerate(weights) if w > 0)
    idx = np.minimum(idx, last)
    return [values[i] for i in idx]

