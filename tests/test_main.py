"""Tests for the command line entry point."""

import random

import pytest

from data_generator import generate_random_cities
from genetic_algorithm import BestSolution, GeneticAlgorithmSolver
from main import ConsoleRenderer, build_parser, main, run_background
from tsp_core import City, Tour


class TestMain:

    def test_defaults_match_config(self):
        args = build_parser().parse_args([])
        assert args.population_size == 20
        assert args.cities == 20
        assert args.elite_size == 1
        assert args.tournament_size == 5
        assert args.generations == 100
        assert args.seed is None

    def test_foreground_run(self, capsys):
        best = main(["--cities", "6", "--generations", "5", "--seed", "3"])
        out = capsys.readouterr().out
        assert len(best) == 6
        for gen in range(1, 6):
            assert f"\n{gen}. " in out or out.startswith(f"{gen}. ")
        assert "Final best:" in out

    def test_background_run_renders_every_generation(self, capsys):
        best = main(["--cities", "6", "--generations", "8", "--seed", "3", "--background"])
        lines = [line for line in capsys.readouterr().out.splitlines() if ". " in line[:4]]
        assert [line.split(".")[0] for line in lines] == [str(g) for g in range(1, 9)]
        assert len(best) == 6

    def test_progress_run(self, capsys):
        best = main(["--cities", "6", "--generations", "4", "--seed", "5", "--progress"])
        captured = capsys.readouterr()
        assert len(best) == 6
        assert "GA" in captured.err
        assert "Final best:" in captured.out

    def test_background_worker_error_propagates(self, monkeypatch):
        cities = generate_random_cities(5, rng=random.Random(1))
        solver = GeneticAlgorithmSolver(cities, population_size=6, tournament_size=2,
                                        rng=random.Random(1))

        def failing_solve(**kwargs):
            raise RuntimeError("worker failed")

        monkeypatch.setattr(solver, "solve", failing_solve)
        with pytest.raises(RuntimeError, match="worker failed"):
            run_background(solver, 3, ConsoleRenderer())

    def test_background_matches_foreground(self):
        argv = ["--cities", "7", "--generations", "10", "--seed", "21"]
        foreground = main(argv)
        background = main(argv + ["--background"])
        assert [c.id for c in foreground] == [c.id for c in background]

    @pytest.mark.parametrize("argv", [
        ["--elite-size", "20"],
        ["--tournament-size", "21"],
        ["--cities", "1"],
        ["--generations", "0"],
        ["--field-size", "15"],
    ])
    def test_invalid_configuration_exits(self, argv, capsys):
        with pytest.raises(SystemExit) as exc:
            main(argv)
        assert exc.value.code == 1
        assert "Error:" in capsys.readouterr().err


class TestConsoleRenderer:

    def test_prints_points(self, capsys):
        cities = [City(0, 0, city_id=1), City(3, 4, city_id=2)]
        best = BestSolution.from_tour(2, Tour(cities), 10.0)
        renderer = ConsoleRenderer(show_points=True)
        renderer.render(2, best)
        out = capsys.readouterr().out
        assert out.startswith("2. 10.0000")
        assert "(0.0, 0.0) -> (3.0, 4.0)" in out
        assert renderer.last is best
