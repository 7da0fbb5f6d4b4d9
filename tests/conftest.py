import random

import pytest

from tsp_core import City, DistanceCache


class ScriptedRandom:
    """Replays a fixed sequence of randrange results."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def randrange(self, stop):
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        assert 0 <= value < stop
        return value


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def cache():
    return DistanceCache()


@pytest.fixture
def square_cities():
    return [
        City(0, 0, city_id="a"),
        City(10, 0, city_id="b"),
        City(10, 10, city_id="c"),
        City(0, 10, city_id="d"),
    ]


@pytest.fixture
def six_cities():
    return [City(i * 3.0, (i % 2) * 4.0, city_id=i) for i in range(6)]
