"""Core numerical primitives for backpropnet."""

from . import activations, model, types

__all__ = ["activations", "model", "types"]
