"""
Genetic Algorithm Solver with elitism, tournament selection and
ordered crossover + swap mutation.
Publishes an immutable snapshot of the best tour after every generation.
"""

import random
import numpy as np
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple
from tqdm import tqdm
from tsp_core import City, DistanceCache, Tour


class ConfigurationError(ValueError):
    """Raised when the GA parameters cannot produce a meaningful run."""


class CrossoverInvariantError(RuntimeError):
    """Raised when crossover yields something that is not a permutation of the cities."""


@dataclass(frozen=True)
class BestSolution:
    """Read-only snapshot of the best tour of one generation."""

    generation: int
    cities: Tuple[City, ...]
    total_length: float
    average_length: float

    @property
    def points(self) -> Tuple[Tuple[float, float], ...]:
        return tuple(city.position() for city in self.cities)

    @classmethod
    def from_tour(cls, generation: int, tour: Tour, average_length: float) -> 'BestSolution':
        return cls(
            generation=generation,
            cities=tour.snapshot(),
            total_length=tour.get_total_distance(),
            average_length=float(average_length),
        )


class Population:
    """Represents one generation of tours."""

    def __init__(self, population_size: int, cities: List[City], distance_cache: DistanceCache):
        self.population_size = population_size
        self.cities = cities
        self.distance_cache = distance_cache
        self.tours: List[Tour] = []

    def initialize(self, rng: random.Random):
        """Fill the population with independent random shuffles of the city set."""
        self.tours = []
        for _ in range(self.population_size):
            shuffled = list(self.cities)
            rng.shuffle(shuffled)
            self.tours.append(Tour(shuffled, self.distance_cache))

    def get_fittest(self) -> Tour:
        # min() keeps the first of equal tours, so carried-over elites win ties.
        return min(self.tours, key=lambda tour: tour.get_total_distance())

    def get_elites(self, elite_size: int) -> List[Tour]:
        """Best ``elite_size`` tours, ties kept in population order."""
        ranked = sorted(self.tours, key=lambda tour: tour.get_total_distance())
        return ranked[:elite_size]

    def get_average_distance(self) -> float:
        return float(np.mean([t.get_total_distance() for t in self.tours]))

    def __len__(self):
        return len(self.tours)

    def __iter__(self):
        return iter(self.tours)


class TournamentSelector:
    """Best-of-k selection, drawing contestants uniformly with replacement."""

    def __init__(self, tournament_size: int, rng: random.Random):
        self.tournament_size = tournament_size
        self.rng = rng

    def select(self, population: Population) -> Tour:
        tours = population.tours
        contestants = [tours[self.rng.randrange(len(tours))] for _ in range(self.tournament_size)]
        return min(contestants, key=lambda t: t.get_total_distance())


class Breeder:
    """Produces one mutated offspring from two parents via ordered crossover."""

    def __init__(self, cities: Sequence[City], distance_cache: DistanceCache, rng: random.Random):
        self.cities = list(cities)
        self.city_ids = frozenset(city.id for city in self.cities)
        self.distance_cache = distance_cache
        self.rng = rng

    def crossover_points(self, size: int) -> Tuple[int, int]:
        gene1 = self.rng.randrange(size)
        gene2 = self.rng.randrange(size)
        return min(gene1, gene2), max(gene1, gene2)

    def ordered_crossover(self, parent1: Tour, parent2: Tour) -> List[City]:
        """
        Copy the inclusive segment ``parent1[start..end]`` and splice it at
        ``start`` into parent2's order with the segment's cities removed.

        Containment is checked by city identity, so two cities sharing
        coordinates are still both kept.
        """
        size = len(parent1.cities)
        start, end = self.crossover_points(size)

        segment = parent1.cities[start:end + 1]
        inherited = {city.id for city in segment}
        remainder = [city for city in parent2.cities if city.id not in inherited]

        child = remainder[:start] + segment + remainder[start:]
        self._check_permutation(child)
        return child

    def _check_permutation(self, genes: List[City]):
        ids = [city.id for city in genes]
        if len(ids) != len(self.cities):
            raise CrossoverInvariantError(
                f"crossover invariant violated: offspring has {len(ids)} cities, "
                f"expected {len(self.cities)}"
            )
        if len(set(ids)) != len(ids) or set(ids) != self.city_ids:
            raise CrossoverInvariantError(
                "crossover invariant violated: offspring is not a permutation of the city set"
            )

    def breed(self, parent1: Tour, parent2: Tour) -> Tour:
        offspring = Tour(self.ordered_crossover(parent1, parent2), self.distance_cache)
        offspring.mutate(self.rng)
        return offspring


class GeneticAlgorithmSolver:
    """
    Genetic Algorithm solver for TSP.

    Each generation keeps the ``elite_size`` best tours unchanged and fills
    the rest with offspring bred from two tournament-selected parents. All
    random draws go through ``rng`` so a seeded run is reproducible.
    """

    def __init__(
        self,
        cities: List[City],
        population_size: int = 20,
        elite_size: int = 1,
        tournament_size: int = 5,
        rng: Optional[random.Random] = None,
        distance_cache: Optional[DistanceCache] = None
    ):
        validate_config(len(cities), population_size, elite_size, tournament_size)

        self.cities = list(cities)
        self.population_size = population_size
        self.elite_size = elite_size
        self.tournament_size = tournament_size
        self.rng = rng if rng is not None else random.Random()
        self.distance_cache = distance_cache if distance_cache is not None else DistanceCache()

        self.selector = TournamentSelector(tournament_size, self.rng)
        self.breeder = Breeder(self.cities, self.distance_cache, self.rng)

        # GA state
        self.population: Optional[Population] = None
        self.generation = 0
        self.best_solution: Optional[BestSolution] = None
        self.best_distance_history: List[float] = []

    # ---------------------------------------
    # Initialization
    # ---------------------------------------

    def initialize(self):
        self.population = Population(self.population_size, self.cities, self.distance_cache)
        self.population.initialize(self.rng)
        self.generation = 0
        self.best_solution = None
        self.best_distance_history = [self.population.get_fittest().get_total_distance()]

    # ---------------------------------------
    # Single generation evolution
    # ---------------------------------------

    def evolve_generation(self) -> BestSolution:
        if self.population is None:
            self.initialize()

        new_pop = Population(self.population_size, self.cities, self.distance_cache)

        # --- elitism ---
        for elite in self.population.get_elites(self.elite_size):
            new_pop.tours.append(elite.clone())

        # --- offspring ---
        while len(new_pop.tours) < self.population_size:
            p1 = self.selector.select(self.population)
            p2 = self.selector.select(self.population)
            new_pop.tours.append(self.breeder.breed(p1, p2))

        self.population = new_pop
        self.generation += 1

        best = self.population.get_fittest()
        self.best_solution = BestSolution.from_tour(
            self.generation, best, self.population.get_average_distance()
        )
        self.best_distance_history.append(self.best_solution.total_length)
        return self.best_solution

    # ---------------------------------------
    # Generational loop
    # ---------------------------------------

    def solve(
        self,
        generations: int = 100,
        verbose: bool = False,
        callback: Optional[Callable[[int, BestSolution], None]] = None,
        progress: bool = False
    ) -> Tuple[Tour, list]:
        """
        Run ``generations`` generations from a fresh random population.

        Returns:
            best_tour
            log = [(generation, best_distance)], one entry per generation
        """
        if generations <= 0:
            raise ConfigurationError(f"generations must be > 0, got {generations}")

        self.initialize()
        log = []

        steps = range(1, generations + 1)
        if progress:
            steps = tqdm(steps, desc="GA", unit="gen")

        for _ in steps:
            best = self.evolve_generation()
            log.append((best.generation, best.total_length))

            if progress:
                steps.set_postfix({
                    'best': f'{best.total_length:.2f}',
                    'avg': f'{best.average_length:.2f}'
                })

            if verbose and (best.generation % 10 == 0 or best.generation == generations):
                print(f"Gen {best.generation} | Best = {best.total_length:.2f}")

            if callback:
                callback(best.generation, best)

        return self.get_best_tour(), log

    def get_best_tour(self) -> Optional[Tour]:
        return self.population.get_fittest() if self.population else None


def validate_config(cities_count: int, population_size: int, elite_size: int, tournament_size: int):
    """Refuse parameter sets that would make the generational loop meaningless."""
    if cities_count < 2:
        raise ConfigurationError(f"at least 2 cities are required, got {cities_count}")
    if population_size <= 0:
        raise ConfigurationError(f"population_size must be > 0, got {population_size}")
    if elite_size < 0:
        raise ConfigurationError(f"elite_size must be >= 0, got {elite_size}")
    if elite_size >= population_size:
        raise ConfigurationError(
            f"elite_size ({elite_size}) must be smaller than population_size ({population_size})"
        )
    if tournament_size < 1:
        raise ConfigurationError(f"tournament_size must be >= 1, got {tournament_size}")
    if tournament_size > population_size:
        raise ConfigurationError(
            f"tournament_size ({tournament_size}) must not exceed population_size ({population_size})"
        )
