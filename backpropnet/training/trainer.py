"""Online backpropagation training loop with overfitting detection."""

from __future__ import annotations

import logging
from typing import Dict, Sequence

import numpy as np

from ..core.model import FeedForwardModel
from ..core.types import TrainingResult, TrainingStatus
from ..data.dataset import Dataset
from .metrics import EMPTY_CONTROL_ERROR, rms_error
from .monitor import OverfittingMonitor

logger = logging.getLogger(__name__)

CONTROL_EVERY = 2


class Trainer:
    """Run the epoch loop of a :class:`FeedForwardModel`.

    Each epoch draws ``len(training)`` examples uniformly with replacement
    and backpropagates each one. After the epoch the training RMS error is
    measured; on even epochs the control RMS error is measured as well and
    fed to an :class:`OverfittingMonitor`.

    The run stops when either error drops to ``max_error`` (success), when
    the monitor's slope turns positive (overfitting), or when the 0-based
    epoch index exceeds ``max_epochs`` (exhausted). Control examples never
    update weights.
    """

    def __init__(
        self,
        model: FeedForwardModel,
        training: Dataset,
        control: Dataset | None = None,
        *,
        rng: np.random.Generator | None = None,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.model = model
        self.training = training
        self.control = control
        self.rng = rng if rng is not None else model.rng
        self.callbacks = list(callbacks or [])
        self.status = TrainingStatus.IDLE

    def run(
        self,
        max_epochs: int = 500,
        max_error: float = 0.01,
        *,
        monitor: OverfittingMonitor | None = None,
    ) -> TrainingResult:
        n_train = len(self.training)
        if n_train == 0:
            raise ValueError("Training requires at least one training example")
        if not self.model.initialized:
            self.model.initialise()

        monitor = monitor if monitor is not None else OverfittingMonitor()
        self.status = TrainingStatus.RUNNING

        epoch = 0
        control_error = EMPTY_CONTROL_ERROR
        while True:
            self._run_epoch(n_train)
            training_error = rms_error(self.model, self.training)
            if epoch % CONTROL_EVERY == 0:
                control_error = self._control_error()
                monitor.record(control_error)

            self._emit_epoch(
                epoch,
                {
                    "train_error": training_error,
                    "control_error": control_error,
                    "slope": monitor.slope,
                },
            )

            converged = training_error <= max_error or control_error <= max_error
            exhausted = epoch > max_epochs
            epoch += 1
            overfitting = monitor.overfitting
            if converged or exhausted or overfitting:
                break

        if converged:
            status = TrainingStatus.SUCCEEDED
        elif overfitting:
            status = TrainingStatus.FAILED_OVERFITTING
        else:
            status = TrainingStatus.FAILED_MAX_EPOCHS
        self.status = status
        logger.info(
            "Training stopped after %d epochs: %s (train=%.6f, control=%.6f, slope=%.6g)",
            epoch,
            status.value,
            training_error,
            control_error,
            monitor.slope,
        )
        return TrainingResult(
            epochs=epoch,
            training_error=training_error,
            control_error=control_error,
            slope=monitor.slope,
            status=status,
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _run_epoch(self, n_train: int) -> None:
        for _ in range(n_train):
            index = int(self.rng.integers(0, n_train))
            inputs = self.training.inputs[index]
            desired = self.training.outputs[index]
            output = self.model.forward(inputs)
            self.model.backpropagate(output, desired)

    def _control_error(self) -> float:
        if self.control is None:
            return EMPTY_CONTROL_ERROR
        return rms_error(self.model, self.control, empty=EMPTY_CONTROL_ERROR)

    def _emit_epoch(self, epoch: int, metrics: Dict[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["Trainer", "CONTROL_EVERY"]
