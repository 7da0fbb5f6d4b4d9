"""
TSP Solver - Main Application
Evolves a closed tour over randomly placed cities and prints the best
tour of every generation.
"""

import argparse
import queue
import random
import sys
import threading
import time
from typing import Optional

from data_generator import generate_random_cities
from genetic_algorithm import BestSolution, ConfigurationError, GeneticAlgorithmSolver

CONFIG = {
    'population_size': 20,
    'cities': 20,
    'elite_size': 1,
    'tournament_size': 5,
    'generations': 100,
    'field_size': 700.0,
    'margin': 10.0,
}


class ConsoleRenderer:
    """Prints best-tour snapshots; stands in for a drawing surface."""

    def __init__(self, show_points: bool = False):
        self.show_points = show_points
        self.last: Optional[BestSolution] = None

    def render(self, generation: int, best: BestSolution):
        self.last = best
        print(f"{generation}. {best.total_length:.4f}")
        if self.show_points:
            path = " -> ".join(f"({x:.1f}, {y:.1f})" for x, y in best.points)
            print(f"   {path} -> back to start")


def run_foreground(solver: GeneticAlgorithmSolver, generations: int, renderer: ConsoleRenderer, progress: bool):
    return solver.solve(generations=generations, callback=renderer.render, progress=progress)


def run_background(solver: GeneticAlgorithmSolver, generations: int, renderer: ConsoleRenderer):
    """
    Run the loop on a worker thread; snapshots travel to this thread
    through a queue and are rendered here.
    """
    updates: "queue.Queue[BestSolution]" = queue.Queue()
    result = {}

    def worker():
        try:
            result["value"] = solver.solve(
                generations=generations,
                callback=lambda generation, best: updates.put(best),
            )
        except Exception as e:
            result["error"] = e

    thread = threading.Thread(target=worker, daemon=True)
    thread.start()

    while thread.is_alive() or not updates.empty():
        try:
            best = updates.get(timeout=0.05)
        except queue.Empty:
            continue
        renderer.render(best.generation, best)

    thread.join()
    if "error" in result:
        raise result["error"]
    return result["value"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="TSP Solver - evolve a short closed tour with a genetic algorithm",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default run: 20 cities, population 20, 100 generations
  python main.py

  # Reproducible run on 40 cities
  python main.py --cities 40 --generations 500 --seed 7

  # Evolve on a worker thread, print the tour coordinates each generation
  python main.py --background --show-points
        """
    )

    parser.add_argument('--population-size', type=int, default=CONFIG['population_size'],
                        help=f"Tours per generation (default: {CONFIG['population_size']})")
    parser.add_argument('--cities', type=int, default=CONFIG['cities'],
                        help=f"Number of cities to generate (default: {CONFIG['cities']})")
    parser.add_argument('--elite-size', type=int, default=CONFIG['elite_size'],
                        help=f"Tours carried over unchanged (default: {CONFIG['elite_size']})")
    parser.add_argument('--tournament-size', type=int, default=CONFIG['tournament_size'],
                        help=f"Contestants per tournament (default: {CONFIG['tournament_size']})")
    parser.add_argument('--generations', type=int, default=CONFIG['generations'],
                        help=f"Generations to run (default: {CONFIG['generations']})")
    parser.add_argument('--field-size', type=float, default=CONFIG['field_size'],
                        help=f"Side length of the square field (default: {CONFIG['field_size']})")
    parser.add_argument('--margin', type=float, default=CONFIG['margin'],
                        help=f"Inset of city placement from the field edges (default: {CONFIG['margin']})")
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the random source (default: unseeded)')
    parser.add_argument('--background', action='store_true',
                        help='Run the generational loop on a worker thread')
    parser.add_argument('--show-points', action='store_true',
                        help='Print the coordinates of the best tour each generation')
    parser.add_argument('--progress', action='store_true',
                        help='Show a progress bar (foreground only)')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    rng = random.Random(args.seed)

    try:
        cities = generate_random_cities(args.cities, field_size=args.field_size, margin=args.margin, rng=rng)
        solver = GeneticAlgorithmSolver(
            cities,
            population_size=args.population_size,
            elite_size=args.elite_size,
            tournament_size=args.tournament_size,
            rng=rng,
        )
        if args.generations <= 0:
            raise ConfigurationError(f"generations must be > 0, got {args.generations}")
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Evolving {len(cities)} cities: population={args.population_size}, "
          f"elite={args.elite_size}, tournament={args.tournament_size}, generations={args.generations}")

    renderer = ConsoleRenderer(show_points=args.show_points)
    start_time = time.time()
    if args.background:
        best_tour, log = run_background(solver, args.generations, renderer)
    else:
        best_tour, log = run_foreground(solver, args.generations, renderer, progress=args.progress)
    elapsed = time.time() - start_time

    initial = solver.best_distance_history[0]
    final = best_tour.get_total_distance()
    print(f"\nInitial best: {initial:.2f}")
    print(f"Final best:   {final:.2f}")
    print(f"Improvement:  {(initial - final) / initial * 100:.2f}%")
    print(f"Time:         {elapsed:.2f}s")
    return best_tour


if __name__ == "__main__":
    main()
