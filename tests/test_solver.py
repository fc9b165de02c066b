import math
import threading

import numpy as np
import pytest

from cuttingstock_core.context import Context
from cuttingstock_core.cost import LinearResolutionMethod
from cuttingstock_core.models import Box, Sheet, Solution
from cuttingstock_core.neighbours import NeighbourOperator, default_search_operators
from cuttingstock_core.packing import GuillotineBafPacker
from cuttingstock_core.resolution import generate_first_solution
from cuttingstock_core.settings import DEFAULT_SETTINGS
from cuttingstock_core.solver import SimulatedAnnealing, SolverState, acceptance_probability


class OverflowNeighbour(NeighbourOperator):
    """Always produces a plan no packer can place."""

    name = "overflow"

    def generate(self, solution, context, rng):
        return solution.with_pattern(0, solution[0].incremented(0, 50))


@pytest.fixture
def context():
    return Context("demo", Sheet(10, 10), (Box(4, 4, 1), Box(4, 4, 1), Box(4, 4, 1)))


def _annealer(operators=None, iterations=200, **kwargs):
    packer = GuillotineBafPacker()
    kwargs.setdefault("settings", DEFAULT_SETTINGS)
    kwargs.setdefault("seed", 3)
    return SimulatedAnnealing(
        packer,
        LinearResolutionMethod(DEFAULT_SETTINGS),
        operators or default_search_operators(packer),
        iterations,
        **kwargs,
    )


def test_acceptance_probability_values():
    assert acceptance_probability(-1.0, 5.0) == 1.0
    assert acceptance_probability(0.0, 5.0) == 1.0
    assert acceptance_probability(2.0, 4.0) == pytest.approx(math.exp(-0.5))
    assert acceptance_probability(2.0, 0.0) == 0.0


def test_worse_moves_are_accepted_at_the_metropolis_rate():
    annealer = _annealer()
    annealer.temperature = 2.0
    trials = 20000

    accepted = sum(annealer._accept(1.0) for _ in range(trials))

    assert accepted / trials == pytest.approx(math.exp(-0.5), abs=0.02)


def test_best_cost_never_increases(context):
    annealer = _annealer(iterations=300)

    best = annealer.get_solution(generate_first_solution(context), context)

    costs = annealer.trace.best_costs
    assert all(later <= earlier for earlier, later in zip(costs, costs[1:]))
    assert annealer.best_cost == costs[-1]
    assert annealer.best_cost <= 65.52 + 1e-9
    assert annealer.packer.all_feasible(best)


def test_state_moves_to_terminated(context):
    annealer = _annealer(iterations=10)
    assert annealer.state is SolverState.INITIALIZING

    annealer.get_solution(generate_first_solution(context), context)

    assert annealer.state is SolverState.TERMINATED
    assert annealer.trace.iterations == 10


def test_temperature_cools_geometrically_to_the_floor(context):
    annealer = _annealer(iterations=50, cooling_rate=0.5, min_temperature=1e-3)

    annealer.get_solution(generate_first_solution(context), context)

    temps = annealer.trace.temperatures
    assert temps[0] == pytest.approx(10.0)
    assert temps[1] == pytest.approx(5.0)
    assert temps[-1] == pytest.approx(1e-3)


def test_infeasible_candidates_are_discarded(context):
    start = generate_first_solution(context)
    annealer = _annealer([OverflowNeighbour()], iterations=25)

    best = annealer.get_solution(start, context)

    assert best == start
    assert annealer.trace.infeasible == 25
    assert annealer.trace.accepted == 0


def test_infeasible_start_is_refused(context):
    start = OverflowNeighbour().generate(generate_first_solution(context), context, None)

    with pytest.raises(ValueError):
        _annealer().get_solution(start, context)


def test_cancel_event_stops_the_search(context):
    event = threading.Event()
    event.set()
    annealer = _annealer(iterations=1000, cancel_event=event)
    start = generate_first_solution(context)

    assert annealer.get_solution(start, context) == start
    assert annealer.trace.iterations == 0
    assert annealer.state is SolverState.TERMINATED


def test_random_walk_accepts_every_feasible_move(context):
    annealer = _annealer(iterations=100)

    walked = annealer.get_random_solution(generate_first_solution(context), context)

    assert annealer.trace.accepted + annealer.trace.infeasible == 100
    assert annealer.packer.all_feasible(walked)


def test_metropolis_walk_counts_every_candidate(context):
    annealer = _annealer(iterations=100)

    walked = annealer.get_random_solution(
        generate_first_solution(context), context, accept_all=False
    )

    trace = annealer.trace
    assert trace.accepted + trace.rejected + trace.infeasible == 100
    assert annealer.state is SolverState.INITIALIZING
    assert annealer.packer.all_feasible(walked)


def test_zero_iterations_returns_the_start(context):
    start = generate_first_solution(context)

    assert _annealer(iterations=0).get_solution(start, context) == start


def test_same_seed_same_result(context):
    start = generate_first_solution(context)

    first = _annealer(seed=11).get_solution(start, context)
    second = _annealer(seed=11).get_solution(start, context)

    assert first == second


@pytest.mark.parametrize(
    "kwargs",
    [
        {"iterations": -1},
        {"operators": []},
        {"initial_temperature": 0},
        {"cooling_rate": 1.5},
    ],
)
def test_invalid_arguments_are_refused(kwargs):
    packer = GuillotineBafPacker()
    args = {
        "operators": default_search_operators(packer),
        "iterations": 10,
    }
    args.update(kwargs)
    operators = args.pop("operators")
    iterations = args.pop("iterations")

    with pytest.raises(ValueError):
        SimulatedAnnealing(
            packer,
            LinearResolutionMethod(DEFAULT_SETTINGS),
            operators,
            iterations,
            settings=DEFAULT_SETTINGS,
            **args,
        )


def test_rng_can_be_shared():
    rng = np.random.default_rng(0)
    annealer = _annealer(rng=rng, seed=None)

    assert annealer.rng is rng


def test_empty_solution_start_is_allowed(context):
    annealer = _annealer(iterations=50)

    best = annealer.get_solution(Solution(), context)

    assert annealer.best_cost <= 3000
    assert annealer.packer.all_feasible(best)
