import numpy as np
import pytest

from cuttingstock_core.context import Context
from cuttingstock_core.models import Box, Pattern, Sheet, Solution
from cuttingstock_core.neighbours import (
    DynPatternIncrementNeighbour,
    DynPatternMoveNeighbour,
    IncrementNeighbour,
    MoveNeighbour,
    RemovePatternNeighbour,
    default_search_operators,
    default_walk_operators,
    is_removable,
)
from cuttingstock_core.packing import GuillotineBafPacker
from cuttingstock_core.resolution import generate_first_solution


@pytest.fixture
def context():
    return Context("demo", Sheet(10, 10), (Box(4, 4, 1), Box(4, 4, 1), Box(4, 4, 1)))


@pytest.fixture
def rng():
    return np.random.default_rng(7)


def _solution(context, *rows):
    template = Pattern.empty(context.sheet, context.boxes)
    patterns = []
    for row in rows:
        pattern = template
        for index, amount in enumerate(row):
            pattern = pattern.with_amount(index, amount)
        patterns.append(pattern)
    return Solution(tuple(patterns))


def test_increment_adds_one_unit(context, rng):
    start = generate_first_solution(context)

    candidate = IncrementNeighbour().generate(start, context, rng)

    assert sum(candidate.box_totals()) == 4
    assert len(candidate) == 3
    assert start == generate_first_solution(context)


def test_move_keeps_totals(context, rng):
    start = _solution(context, (2, 0, 1), (0, 1, 0))

    for _ in range(20):
        candidate = MoveNeighbour().generate(start, context, rng)
        assert candidate.box_totals() == start.box_totals()
        assert len(candidate) == 2


def test_move_needs_two_patterns(context, rng):
    start = _solution(context, (1, 1, 1))

    assert MoveNeighbour().generate(start, context, rng) is start


def test_remove_keeps_every_box_type(context, rng):
    start = generate_first_solution(context)

    # each pattern is the only one holding its box type
    assert RemovePatternNeighbour().generate(start, context, rng) is start


def test_remove_drops_a_redundant_pattern(context, rng):
    start = _solution(context, (1, 1, 1), (1, 0, 0))

    candidate = RemovePatternNeighbour().generate(start, context, rng)

    assert len(candidate) == 1
    assert all(total > 0 for total in candidate.box_totals())


def test_remove_never_empties_the_solution(context, rng):
    start = _solution(context, (1, 1, 1))

    assert RemovePatternNeighbour().generate(start, context, rng) is start


def test_is_removable(context):
    solution = _solution(context, (1, 1, 0), (0, 1, 1))

    assert not is_removable(solution, 0, context)
    assert not is_removable(solution, 1, context)
    assert is_removable(solution.with_appended(solution[0]), 0, context)


def test_dyn_increment_opens_a_new_pattern_when_full(rng):
    context = Context("full", Sheet(10, 10), (Box(10, 10, 2),))
    start = Solution((Pattern.empty(context.sheet, context.boxes).with_amount(0, 1),))

    candidate = DynPatternIncrementNeighbour(GuillotineBafPacker()).generate(
        start, context, rng
    )

    assert [p.amounts for p in candidate] == [(1,), (1,)]


def test_dyn_increment_fills_an_existing_pattern(context, rng):
    start = _solution(context, (1, 0, 0))

    candidate = DynPatternIncrementNeighbour(GuillotineBafPacker()).generate(
        start, context, rng
    )

    assert len(candidate) == 1
    assert candidate[0].unit_count == 2


def test_dyn_move_merges_lone_units(context, rng):
    start = generate_first_solution(context)

    candidate = DynPatternMoveNeighbour(GuillotineBafPacker()).generate(
        start, context, rng
    )

    assert len(candidate) == 2
    assert candidate.box_totals() == (1, 1, 1)


def test_dyn_move_of_a_lone_unit_without_target_is_a_no_op(context, rng):
    start = _solution(context, (1, 0, 0))

    assert DynPatternMoveNeighbour(GuillotineBafPacker()).generate(start, context, rng) is start


def test_dyn_move_keeps_every_pattern_packable(rng):
    context = Context("mixed", Sheet(10, 10), (Box(6, 6, 2), Box(4, 4, 1)))
    packer = GuillotineBafPacker()
    start = _solution(context, (1, 1), (1, 0))
    operator = DynPatternMoveNeighbour(packer)

    for _ in range(50):
        candidate = operator.generate(start, context, rng)
        assert candidate.box_totals() == (2, 1)
        assert packer.all_feasible(candidate)
        assert not any(pattern.is_empty for pattern in candidate)


def test_default_operator_lists():
    packer = GuillotineBafPacker()

    walk = default_walk_operators()
    search = default_search_operators(packer, repetitions=5)

    assert [op.name for op in walk] == ["increment", "move", "remove_pattern"]
    assert len(search) == 11
    assert search[-1].name == "remove_pattern"


@pytest.mark.parametrize(
    "make_operator",
    [
        lambda packer: IncrementNeighbour(),
        lambda packer: MoveNeighbour(),
        lambda packer: RemovePatternNeighbour(),
        DynPatternIncrementNeighbour,
        DynPatternMoveNeighbour,
    ],
)
def test_operators_leave_their_input_untouched(context, rng, make_operator):
    operator = make_operator(GuillotineBafPacker())
    rows = ((1, 1, 0), (0, 1, 1), (1, 0, 0))
    start = _solution(context, *rows)

    for _ in range(20):
        operator.generate(start, context, rng)

    assert start == _solution(context, *rows)
    assert [p.amounts for p in start] == list(rows)
