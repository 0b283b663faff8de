from typing import Callable

import pytest
import structlog
from pytest import fixture

from graphite_metrics.metrics.config import PusherConfig
from tests.utils import FakeTimerFactory


@fixture
def config() -> PusherConfig:
    return PusherConfig(prefix="myprefix", host="localhost", port=2003)


@fixture
def timer_factory() -> FakeTimerFactory:
    return FakeTimerFactory()


@fixture
def fixed_clock() -> Callable[[], float]:
    return lambda: 1700000000.75


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()
