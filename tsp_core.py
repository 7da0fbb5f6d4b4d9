"""
TSP Solver - Core Module
Contains the fundamental data structures for representing the TSP problem:
cities, the memoized pairwise distance cache and tours (chromosomes).
"""

import threading
import uuid
import numpy as np
from typing import Dict, FrozenSet, Hashable, Iterable, List, Optional, Tuple


class City:
    """Immutable 2D point with an identity, used as the atomic gene."""

    __slots__ = ("_id", "_x", "_y")

    def __init__(self, x: float, y: float, city_id: Optional[Hashable] = None):
        object.__setattr__(self, "_id", city_id if city_id is not None else uuid.uuid4())
        object.__setattr__(self, "_x", np.float32(x))
        object.__setattr__(self, "_y", np.float32(y))

    def __setattr__(self, name, value):
        raise AttributeError("City is immutable")

    @property
    def id(self) -> Hashable:
        return self._id

    @property
    def x(self) -> np.float32:
        return self._x

    @property
    def y(self) -> np.float32:
        return self._y

    def distance_to(self, city: 'City') -> np.float32:
        """Calculate Euclidean distance to another city (uncached)."""
        dx = self._x - city._x
        dy = self._y - city._y
        return np.float32(np.sqrt(dx * dx + dy * dy))

    def same_position(self, city: 'City') -> bool:
        return self._x == city._x and self._y == city._y

    def position(self) -> Tuple[float, float]:
        return float(self._x), float(self._y)

    def __repr__(self):
        return f"City(id={self._id!r}, x={self._x:.2f}, y={self._y:.2f})"

    # Identity, not coordinates: two distinct cities may share a position.
    def __eq__(self, other):
        if not isinstance(other, City):
            return NotImplemented
        return self._id == other._id

    def __hash__(self):
        return hash(self._id)


class DistanceCache:
    """
    Memoizes pairwise city distances.

    Entries are keyed by the unordered pair of city identities, so
    ``distance(a, b)`` and ``distance(b, a)`` share one slot. The cache is
    filled lazily and never evicted; for N cities it holds at most
    N*(N-1)/2 entries (plus one per self-pair that was queried).
    """

    def __init__(self):
        self._distances: Dict[FrozenSet[Hashable], np.float32] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(city1: City, city2: City) -> FrozenSet[Hashable]:
        return frozenset((city1.id, city2.id))

    def distance(self, city1: City, city2: City) -> np.float32:
        """Return the cached distance, computing and storing it on first use."""
        key = self.key(city1, city2)
        with self._lock:
            cached = self._distances.get(key)
            if cached is not None:
                return cached
            dist = city1.distance_to(city2)
            self._distances[key] = dist
            return dist

    def clear(self):
        with self._lock:
            self._distances.clear()

    def __contains__(self, pair) -> bool:
        city1, city2 = pair
        with self._lock:
            return self.key(city1, city2) in self._distances

    def __len__(self):
        with self._lock:
            return len(self._distances)


class Tour:
    """
    Represents a tour (chromosome) as an ordered permutation of cities.

    The closed-tour length is computed on construction and recomputed after
    every in-place change, so it is always consistent with ``cities``.
    Change genes through item assignment, ``swap`` or ``mutate``; editing
    ``cities`` directly leaves the cached length stale.
    No permutation check happens here; see ``is_permutation_of``.
    """

    def __init__(self, cities: Iterable[City], distance_cache: Optional[DistanceCache] = None):
        self.cities: List[City] = list(cities)
        self.distance_cache = distance_cache if distance_cache is not None else DistanceCache()
        self._distance = self._compute_total_distance()

    def _compute_total_distance(self) -> float:
        n = len(self.cities)
        if n < 2:
            return 0.0

        distance = 0.0
        for i in range(n):
            from_city = self.cities[i]
            to_city = self.cities[(i + 1) % n]
            distance += float(self.distance_cache.distance(from_city, to_city))
        return distance

    def get_total_distance(self) -> float:
        """Total closed-tour length, including the wrap edge back to the start."""
        return self._distance

    def swap(self, i: int, j: int):
        self.cities[i], self.cities[j] = self.cities[j], self.cities[i]
        self._distance = self._compute_total_distance()

    def mutate(self, rng) -> Tuple[int, int]:
        """
        Swap two genes picked uniformly with replacement.

        Picking the same position twice is a no-op swap. Returns the two
        positions so callers can inspect what changed.
        """
        n = len(self.cities)
        gene1 = rng.randrange(n)
        gene2 = rng.randrange(n)
        self.swap(gene1, gene2)
        return gene1, gene2

    def is_permutation_of(self, cities: Iterable[City]) -> bool:
        expected = [city.id for city in cities]
        actual = [city.id for city in self.cities]
        return len(actual) == len(expected) and len(set(actual)) == len(actual) \
            and set(actual) == set(expected)

    def clone(self) -> 'Tour':
        """Copy sharing the same cities and distance cache."""
        return Tour(self.cities, self.distance_cache)

    def snapshot(self) -> Tuple[City, ...]:
        return tuple(self.cities)

    def __len__(self):
        return len(self.cities)

    def __iter__(self):
        return iter(self.cities)

    def __getitem__(self, index):
        return self.cities[index]

    def __setitem__(self, index, city: City):
        self.cities[index] = city
        self._distance = self._compute_total_distance()

    def __repr__(self):
        return f"Tour(cities={len(self.cities)}, distance={self._distance:.2f})"
