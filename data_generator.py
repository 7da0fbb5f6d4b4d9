import math
import random
from typing import List, Optional

from genetic_algorithm import ConfigurationError
from tsp_core import City

FIELD_SIZE = 700.0
MARGIN = 10.0


def generate_random_cities(
    n: int,
    field_size: float = FIELD_SIZE,
    margin: float = MARGIN,
    rng: Optional[random.Random] = None
) -> List[City]:
    """
    Place n cities uniformly inside a square field, inset by ``margin``
    from every edge. City ids are their creation index.
    """
    if n < 2:
        raise ConfigurationError(f"at least 2 cities are required, got {n}")
    low = margin
    high = field_size - margin
    if high <= low:
        raise ConfigurationError(
            f"margin {margin} leaves no room inside a field of size {field_size}"
        )

    rng = rng if rng is not None else random.Random()
    cities = []
    for i in range(n):
        x = rng.uniform(low, high)
        y = rng.uniform(low, high)
        cities.append(City(x, y, city_id=i))
    return cities


def generate_circle_cities(n: int, radius: float = 50, center_x: float = 50, center_y: float = 50) -> List[City]:
    """Cities on a regular polygon; the optimal tour is its perimeter."""
    cities = []
    for i in range(n):
        angle = 2 * math.pi * i / n
        x = center_x + radius * math.cos(angle)
        y = center_y + radius * math.sin(angle)
        cities.append(City(x, y, city_id=i))
    return cities
