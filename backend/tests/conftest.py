import pytest
from livemetrics.clock import ManualClock
from livemetrics.metrics.models import MetricCategory, MetricFormat, ThresholdDirection

from tests.factories import T0, make_definition


@pytest.fixture
def clock():
    return ManualClock(T0)


@pytest.fixture
def error_rate():
    return make_definition()


@pytest.fixture
def active_users():
    return make_definition(
        "active_users",
        warning=800,
        critical=500,
        direction=ThresholdDirection.LOWER_IS_WORSE,
        category=MetricCategory.USERS,
        unit="",
        format=MetricFormat.NUMBER,
        target=1500,
    )
