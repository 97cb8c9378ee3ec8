"""Tests for step ordinals, pipeline lengths and titles."""

import pytest

from trip_import.domain.models import ImportMethod, StepId
from trip_import.graph import metadata
from trip_import.graph.step_graph import PIPELINE_STEPS, TERMINAL_STEPS, is_error_step


def test_every_step_has_an_ordinal():
    assert set(metadata.STEP_ORDINALS) == set(StepId)


def test_method_selection_is_first():
    assert metadata.ordinal(StepId.METHOD_SELECTION) == 1


@pytest.mark.parametrize("method", list(ImportMethod))
def test_terminal_ordinal_equals_total_steps(method):
    terminal = TERMINAL_STEPS[method]
    assert metadata.ordinal(terminal) == metadata.total_steps(method)


@pytest.mark.parametrize("method", list(ImportMethod))
def test_ordinals_stay_within_pipeline_length(method):
    total = metadata.total_steps(method)
    for step in PIPELINE_STEPS[method]:
        assert 2 <= metadata.ordinal(step) <= total


def test_manual_input_steps_share_an_ordinal():
    ordinals = {
        metadata.ordinal(step)
        for step in (StepId.MANUAL_FLIGHT, StepId.MANUAL_HOTEL, StepId.MANUAL_CAR)
    }
    assert ordinals == {3}


@pytest.mark.parametrize(
    "error_step, last_async",
    [
        (StepId.EMAIL_ERROR, StepId.EMAIL_SCANNING),
        (StepId.LINK_ERROR, StepId.LINK_FETCHING),
        (StepId.MANUAL_ERROR, StepId.MANUAL_FETCHING),
    ],
)
def test_error_steps_sit_at_last_async_step(error_step, last_async):
    assert is_error_step(error_step)
    assert metadata.ordinal(error_step) == metadata.ordinal(last_async)


def test_total_steps_per_method():
    assert metadata.total_steps(ImportMethod.EMAIL) == 8
    assert metadata.total_steps(ImportMethod.ACCOUNT_LINK) == 7
    assert metadata.total_steps(ImportMethod.MANUAL_ENTRY) == 6
    assert metadata.total_steps(ImportMethod.DOCUMENT_SCAN) == 5


def test_total_steps_without_method():
    assert metadata.total_steps(None) == 1


class TestTitle:
    def test_default_title_before_choice(self):
        assert metadata.title(StepId.METHOD_SELECTION, None) == "Import Trip"

    def test_default_title_at_method_selection_after_rewind(self):
        # The method survives a rewind to method selection, the title does not.
        assert metadata.title(StepId.METHOD_SELECTION, ImportMethod.EMAIL) == "Import Trip"

    @pytest.mark.parametrize(
        "step, method, expected",
        [
            (StepId.EMAIL_PROVIDER, ImportMethod.EMAIL, "Import via Email"),
            (StepId.LINK_AUTH, ImportMethod.ACCOUNT_LINK, "Link Travel Account"),
            (StepId.MANUAL_HOTEL, ImportMethod.MANUAL_ENTRY, "Add Manually"),
            (StepId.SCAN_RESULT, ImportMethod.DOCUMENT_SCAN, "Scan Ticket"),
        ],
    )
    def test_method_title(self, step, method, expected):
        assert metadata.title(step, method) == expected
