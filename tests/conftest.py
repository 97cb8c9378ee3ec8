"""Shared fixtures for the trip import tests."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Mapping, Optional

import pytest

from trip_import.adapters.feedback import LoggingFeedback
from trip_import.config import reset_config
from trip_import.container import reset_container
from trip_import.domain.errors import StepOperationError
from trip_import.domain.models import ImportMethod, StepId
from trip_import.services import ImportFlowController


class FakeOperation:
    """Step operation returning canned results after an optional delay."""

    def __init__(
        self,
        results: Optional[Dict[StepId, Mapping[str, Any]]] = None,
        failures: Optional[Dict[StepId, int]] = None,
        delay: float = 0.0,
    ):
        self.results = results or {}
        self.failures = dict(failures or {})
        self.delay = delay
        self.calls: List[StepId] = []
        self.cancelled: List[StepId] = []

    async def run(
        self,
        step: StepId,
        method: Optional[ImportMethod],
        data: Mapping[str, Any],
    ) -> Mapping[str, Any]:
        self.calls.append(step)
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled.append(step)
            raise
        if self.failures.get(step, 0) > 0:
            self.failures[step] -= 1
            raise StepOperationError(f"{step.value} failed", step=step.value)
        return dict(self.results.get(step, {}))


@pytest.fixture(autouse=True)
def fresh_globals():
    reset_config()
    reset_container()
    yield
    reset_config()
    reset_container()


@pytest.fixture
def completed():
    return []


@pytest.fixture
def feedback():
    return LoggingFeedback()


@pytest.fixture
def controller(completed, feedback):
    flow = ImportFlowController(on_complete=completed.append, feedback=feedback)
    flow.open()
    feedback.clear()
    return flow


@pytest.fixture
def operation():
    return FakeOperation()
