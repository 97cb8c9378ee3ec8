"""Tests for the wizard presentation shell and its factory."""

import asyncio
import logging
from unittest.mock import MagicMock

import pytest

from trip_import.adapters.feedback import LoggingFeedback
from trip_import.config import FlowConfig
from trip_import.domain.errors import ConfigurationError
from trip_import.domain.models import FeedbackStyle, ImportMethod, StepId
from trip_import.services import (
    AsyncStepRunner,
    ImportWizard,
    ImportWizardFactory,
    StepHandlerRegistry,
)


@pytest.fixture
def registry():
    handlers = StepHandlerRegistry()

    @handlers.handler(StepId.METHOD_SELECTION)
    def choose(context):
        return "choose-method"

    @handlers.handler(StepId.SCAN_CAMERA, StepId.SCAN_SCANNING)
    def scan(context):
        return f"scan:{context.step.value}"

    return handlers


@pytest.fixture
def closed():
    return MagicMock()


@pytest.fixture
def wizard(controller, registry, closed):
    controller.close()
    controller.reset()
    return ImportWizard(
        controller=controller,
        handlers=registry,
        reset_delay_seconds=0.3,
        on_close=closed,
    )


def finish_scan(wizard):
    wizard.controller.advance(None, ImportMethod.DOCUMENT_SCAN)
    for _ in range(4):
        wizard.controller.advance()


class TestStepHandlerRegistry:
    def test_resolves_registered_handler(self, registry):
        assert registry.resolve(StepId.SCAN_SCANNING).__name__ == "scan"

    def test_falls_back_to_method_selection(self, registry, caplog):
        with caplog.at_level(logging.WARNING):
            handler = registry.resolve(StepId.LINK_AUTH)

        assert handler.__name__ == "choose"
        assert "falling back" in caplog.text

    def test_missing_fallback_raises(self):
        with pytest.raises(KeyError):
            StepHandlerRegistry().resolve(StepId.EMAIL_LINK)

    def test_missing_lists_unhandled_steps(self, registry):
        missing = registry.missing()

        assert StepId.METHOD_SELECTION not in missing
        assert StepId.SCAN_CAMERA not in missing
        assert len(missing) == len(StepId) - 3


class TestRender:
    def test_open_shows_method_selection(self, wizard):
        view = wizard.open()

        assert wizard.visible
        assert view.current_step == StepId.METHOD_SELECTION
        assert wizard.render().output == "choose-method"

    def test_handler_drives_navigation(self, wizard):
        wizard.open()
        context_holder = []
        wizard.handlers.register(StepId.METHOD_SELECTION, context_holder.append)

        wizard.render()
        context_holder[0].advance({"source": "camera"}, ImportMethod.DOCUMENT_SCAN)

        rendered = wizard.render()
        assert rendered.view.current_step == StepId.SCAN_CAMERA
        assert rendered.output == "scan:scan-camera"
        assert rendered.view.title == "Scan Ticket"

    def test_handler_receives_collected_data(self, wizard):
        wizard.open()
        wizard.controller.advance({"source": "camera"}, ImportMethod.DOCUMENT_SCAN)
        seen = []
        wizard.handlers.register(StepId.SCAN_CAMERA, seen.append)

        wizard.render()

        assert seen[0].step == StepId.SCAN_CAMERA
        assert seen[0].data["source"] == "camera"


class TestClose:
    def test_close_without_loop_resets_immediately(self, wizard, closed, feedback):
        wizard.open()
        wizard.controller.advance(None, ImportMethod.EMAIL)
        feedback.clear()

        wizard.close()

        assert not wizard.visible
        assert wizard.controller.current_step == StepId.METHOD_SELECTION
        assert wizard.controller.method is None
        assert feedback.impulses == [FeedbackStyle.LIGHT]
        closed.assert_called_once_with()

    def test_close_when_closed_is_noop(self, wizard, closed, feedback):
        wizard.close()

        closed.assert_not_called()
        assert feedback.impulses == []

    def test_reset_waits_for_dismissal_delay(self, wizard):
        wizard.reset_delay_seconds = 0.05

        async def scenario():
            wizard.open()
            wizard.controller.advance(None, ImportMethod.DOCUMENT_SCAN)
            wizard.close()
            assert wizard.controller.current_step == StepId.SCAN_CAMERA
            await asyncio.sleep(0.1)

        asyncio.run(scenario())

        assert wizard.controller.current_step == StepId.METHOD_SELECTION

    def test_reopen_cancels_pending_reset(self, wizard):
        wizard.reset_delay_seconds = 0.05

        async def scenario():
            wizard.open()
            wizard.controller.advance(None, ImportMethod.EMAIL)
            wizard.close()
            wizard.open()
            wizard.controller.advance(None, ImportMethod.DOCUMENT_SCAN)
            await asyncio.sleep(0.1)

        asyncio.run(scenario())

        assert wizard.visible
        assert wizard.controller.current_step == StepId.SCAN_CAMERA

    def test_rewind_on_first_step_dismisses(self, wizard, closed, feedback):
        wizard.open()
        feedback.clear()

        assert wizard.controller.rewind() is False

        assert not wizard.visible
        closed.assert_called_once_with()
        assert feedback.impulses == [FeedbackStyle.LIGHT]

    def test_close_cancels_running_step(self, controller, registry, operation):
        operation.delay = 10
        runner = AsyncStepRunner(controller=controller, operation=operation)
        wizard = ImportWizard(controller=controller, handlers=registry, runner=runner)

        async def scenario():
            wizard.open()
            wizard.controller.advance(None, ImportMethod.MANUAL_ENTRY)
            wizard.controller.advance({"manual_type": "car"})
            wizard.controller.advance({"pickup": "FCO"})
            await asyncio.sleep(0)
            assert runner.pending
            wizard.close()
            assert not runner.pending
            for _ in range(3):
                await asyncio.sleep(0)

        asyncio.run(scenario())

        assert operation.cancelled == [StepId.MANUAL_FETCHING]


class TestCompletion:
    def test_completion_delivers_payload_and_dismisses(self, wizard, completed, closed):
        wizard.open()
        finish_scan(wizard)

        assert completed == [{}]
        assert not wizard.visible
        closed.assert_called_once_with()

    def test_completion_without_dismiss(self, controller, registry, completed):
        wizard = ImportWizard(controller=controller, handlers=registry, close_on_complete=False)
        wizard.open()
        finish_scan(wizard)

        assert len(completed) == 1
        assert wizard.visible
        assert wizard.controller.is_complete


class TestFactory:
    def test_creates_independent_closed_wizards(self, registry, operation, completed):
        factory = ImportWizardFactory(
            feedback=LoggingFeedback(),
            operation=operation,
            config=FlowConfig(reset_delay_seconds=0.5, operation_timeout_seconds=5.0),
        )

        first = factory.create(on_complete=completed.append, handlers=registry)
        second = factory.create(on_complete=completed.append, handlers=registry)

        assert first.controller is not second.controller
        assert not first.visible
        assert first.reset_delay_seconds == 0.5
        assert first.runner.timeout_seconds == 5.0
        assert first.runner.operation is operation

        first.open()
        first.controller.advance(None, ImportMethod.EMAIL)
        assert second.controller.current_step == StepId.METHOD_SELECTION

    def test_requires_method_selection_handler(self, operation):
        factory = ImportWizardFactory(
            feedback=LoggingFeedback(),
            operation=operation,
            config=FlowConfig(),
        )

        with pytest.raises(ConfigurationError) as exc_info:
            factory.create(on_complete=print, handlers=StepHandlerRegistry())

        assert exc_info.value.setting_name == "handlers"
