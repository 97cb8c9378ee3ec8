"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the import flow to its external collaborators:
- Tactile feedback (null, logging)
- Step operations (simulated provider, inbox and booking calls)
"""
