import pytest

from cuttingstock_core.context import Context
from cuttingstock_core.cost import LinearResolutionMethod
from cuttingstock_core.metrics import pattern_metrics, solution_metrics
from cuttingstock_core.models import Box, Pattern, Sheet, Solution
from cuttingstock_core.packing import GuillotineBafPacker
from cuttingstock_core.settings import DEFAULT_SETTINGS


@pytest.fixture
def context():
    return Context("demo", Sheet(10, 10), (Box(4, 4, 1), Box(4, 4, 1), Box(4, 4, 1)))


def _merged(context):
    pattern = Pattern.empty(context.sheet, context.boxes)
    for index in range(3):
        pattern = pattern.with_amount(index, 1)
    return pattern


def test_pattern_metrics_report_layout(context):
    metrics = pattern_metrics(_merged(context), GuillotineBafPacker())

    assert metrics["feasible"]
    assert metrics["amounts"] == [1, 1, 1]
    assert metrics["utilization"] == pytest.approx(0.48)
    assert metrics["waste_area"] == pytest.approx(52)
    assert len(metrics["placements"]) == 3


def test_solution_metrics_summarise_plan(context):
    method = LinearResolutionMethod(DEFAULT_SETTINGS)

    metrics = solution_metrics(Solution((_merged(context),)), context, method)

    assert metrics["cost"] == pytest.approx(21.52)
    assert metrics["sheets"] == 1
    assert metrics["prints"] == [1]
    assert metrics["mean_utilization"] == pytest.approx(0.48)
    assert metrics["printed_waste_area"] == pytest.approx(52)
    assert [box["produced"] for box in metrics["boxes"]] == [1, 1, 1]


def test_empty_plan_metrics(context):
    metrics = solution_metrics(Solution(), context, LinearResolutionMethod(DEFAULT_SETTINGS))

    assert metrics["patterns"] == 0
    assert metrics["mean_utilization"] == 0.0
    assert metrics["unmet"] == 3
