"""Error measures used by the training loop."""

from __future__ import annotations

import math

import numpy as np

from ..core.model import FeedForwardModel
from ..data.dataset import Dataset

EMPTY_CONTROL_ERROR = 1.0


def squared_error(model: FeedForwardModel, inputs, desired) -> float:
    """Sum over output nodes of the squared difference to ``desired``."""

    diff = model.forward(inputs) - np.asarray(desired, dtype=np.float64)
    return float(np.dot(diff, diff))


def rms_error(model: FeedForwardModel, dataset: Dataset, *, empty: float | None = None) -> float:
    """Root of the mean per-example squared error over ``dataset``.

    Runs a forward pass per example without touching the weights. An empty
    dataset returns ``empty`` when given and raises ``ValueError`` otherwise.
    """

    if len(dataset) == 0:
        if empty is None:
            raise ValueError("Cannot compute the error of an empty dataset")
        return float(empty)
    total = 0.0
    for example in dataset:
        total += squared_error(model, example.inputs, example.outputs)
    return math.sqrt(total / len(dataset))


__all__ = ["EMPTY_CONTROL_ERROR", "rms_error", "squared_error"]
