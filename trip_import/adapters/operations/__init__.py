"""Step operation adapters - Implementations of StepOperationPort.

Available implementations:
- SimulatedStepOperation: Fixed-delay stand-in for provider, inbox and booking calls
"""

from .simulated import SimulatedStepOperation

__all__ = ["SimulatedStepOperation"]
