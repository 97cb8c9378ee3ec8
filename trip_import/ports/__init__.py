"""Ports layer - Abstract interfaces (Protocols) for the application.

Ports define the contracts between the import flow core and its
external collaborators. They enable dependency injection and make the
controller testable without a device or network.

This module follows the Hexagonal Architecture pattern:
- Input ports: How the application is driven (services)
- Output ports: How the application drives external systems (adapters)
"""

from .feedback import FeedbackPort
from .operations import StepOperationPort

__all__ = [
    "FeedbackPort",
    "StepOperationPort",
]
