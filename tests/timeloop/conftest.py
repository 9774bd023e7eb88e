from __future__ import annotations

import itertools
from collections.abc import Callable

import pytest

from timeloop.runtime.loop_engine import RuntimeLoopEngine
from timeloop.state.repository import MemorySaveStore
from timeloop.state.service import SaveService


class CallRecorder:
    """Behavior stand-in that records every invocation."""

    def __init__(self) -> None:
        self.calls: list[object] = []

    def __call__(self, context: object) -> None:
        self.calls.append(context)

    @property
    def call_count(self) -> int:
        return len(self.calls)


@pytest.fixture
def recorder() -> CallRecorder:
    return CallRecorder()


@pytest.fixture
def make_recorder() -> Callable[[], CallRecorder]:
    return CallRecorder


@pytest.fixture
def scene() -> object:
    return object()


@pytest.fixture
def engine(scene: object) -> RuntimeLoopEngine:
    return RuntimeLoopEngine(loop_duration_seconds=10, time_scale=1, context=scene)


@pytest.fixture
def fixed_clock() -> Callable[[], int]:
    counter = itertools.count(1_700_000_000_000, 1000)
    return lambda: next(counter)


@pytest.fixture
def save_service(fixed_clock: Callable[[], int]) -> SaveService:
    return SaveService(MemorySaveStore(), clock=fixed_clock)
