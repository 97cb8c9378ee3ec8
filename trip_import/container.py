"""Dependency injection container.

Wires the import flow's ports to their adapters without an external
framework. Wizards themselves are never registered as singletons: the
container hands out an ImportWizardFactory and every import gets its
own controller.

Every binding is built lazily, once, on first resolution. Tests swap
in fakes by registering over a default binding.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .config import AppConfig, get_config


@dataclass
class Container:
    """Port bindings of one application.

    Usage:
        # Application
        container = Container.create_default()
        factory = container.resolve(ImportWizardFactory)
        wizard = factory.create(on_complete=save_trip, handlers=registry)

        # Testing
        container = Container.create_default()
        container.register(StepOperationPort, lambda: FakeOperation())

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _bindings: Dict[type[Any], Callable[[], Any]] = field(default_factory=dict, repr=False)
    _built: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(self, port_type: type[Any], factory: Callable[[], Any]) -> None:
        """Bind a port type to a factory, replacing any earlier binding.

        Every instance built so far is dropped, so bindings that depend on
        the replaced port pick up the new one on their next resolution.
        """
        with self._lock:
            self._bindings[port_type] = factory
            self._built.clear()

    def resolve(self, port_type: type[Any]) -> Any:
        """Return the instance bound to a port type, building it on first use.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._built:
                try:
                    factory = self._bindings[port_type]
                except KeyError:
                    raise KeyError(f"Type not registered: {port_type}") from None
                self._built[port_type] = factory()
            return self._built[port_type]

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with the default bindings.

        Feedback is logged when haptics are enabled and dropped otherwise;
        step operations are simulated with the configured delays.

        Args:
            config: Optional configuration override.

        Returns:
            A configured Container instance.
        """
        from .adapters.feedback import LoggingFeedback, NullFeedback
        from .adapters.operations import SimulatedStepOperation
        from .ports.feedback import FeedbackPort
        from .ports.operations import StepOperationPort
        from .services import ImportWizardFactory

        config = config or get_config()
        container = cls(config=config)

        def create_feedback() -> FeedbackPort:
            if config.flow.haptics_enabled:
                return LoggingFeedback()
            return NullFeedback()

        container.register(FeedbackPort, create_feedback)
        container.register(
            StepOperationPort,
            lambda: SimulatedStepOperation(config.timing),
        )
        container.register(
            ImportWizardFactory,
            lambda: ImportWizardFactory(
                feedback=container.resolve(FeedbackPort),
                operation=container.resolve(StepOperationPort),
                config=config.flow,
            ),
        )

        return container


# Global default container (lazy initialized)
_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container, creating it on first use."""
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Reset the default container.

    Call this in tests to ensure a fresh container.
    """
    global _default_container
    with _container_lock:
        _default_container = None
