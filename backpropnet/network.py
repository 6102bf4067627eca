"""Public network API: topology, data, training and persistence in one object."""

from __future__ import annotations

from pathlib import Path
from typing import Hashable, List, Optional, Sequence

import numpy as np

from .core.model import FeedForwardModel
from .core.types import Array, NetworkState, TrainingResult, TrainingStatus
from .data.dataset import Dataset
from .persistence import load_network, save_network
from .training.monitor import OverfittingMonitor
from .training.trainer import Trainer


class NeuralNetwork:
    """Multi-layer tanh network with a training set and a control set.

    Example::

        net = NeuralNetwork([3, 4, 1], seed=0)
        net.add_training_example((-1, -1, 1), (-1,))
        net.add_training_example((-1, 1, 1), (1,))
        net.add_training_example((1, -1, 1), (1,))
        net.add_training_example((1, 1, 1), (-1,))
        if net.train(1000, 0.01):
            print(net.get_epoch(), net.calculate((1, -1, 1)))

    Weights are drawn on the first :meth:`train` call (or by :meth:`reset`)
    and persist across calls, so training can be resumed. All randomness
    comes from one ``numpy.random.Generator``; pass ``rng`` or ``seed`` for
    reproducible runs.

    Instances are not safe for concurrent use.
    """

    def __init__(
        self,
        topology: Sequence[int],
        *,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
        momentum_cache: str = "per_node",
        callbacks: Sequence[object] | None = None,
    ) -> None:
        if rng is None:
            rng = np.random.default_rng(seed)
        self.rng = rng
        self.model = FeedForwardModel(topology=topology, rng=rng, momentum_cache=momentum_cache)
        self.training_set = Dataset(self.model.topology[0], self.model.topology[-1])
        self.control_set = Dataset(self.model.topology[0], self.model.topology[-1])
        self.callbacks = list(callbacks or [])
        self._result: TrainingResult | None = None
        self._status = TrainingStatus.IDLE

    def __repr__(self) -> str:
        return f"<NeuralNetwork topology={list(self.topology)}>"

    @classmethod
    def from_state(cls, state: NetworkState, **kwargs) -> "NeuralNetwork":
        network = cls(state.topology, **kwargs)
        network.import_state(state)
        return network

    @property
    def topology(self) -> tuple:
        return tuple(self.model.topology)

    @property
    def layer_count(self) -> int:
        return self.model.layer_count

    # ------------------------------------------------------------------
    # Data

    def add_training_example(
        self, inputs: Sequence[float], outputs: Sequence[float], id: Optional[Hashable] = None
    ) -> None:
        self.training_set.add(inputs, outputs, id)

    def add_control_example(
        self, inputs: Sequence[float], outputs: Sequence[float], id: Optional[Hashable] = None
    ) -> None:
        """Add an example used only to detect overfitting, never to update weights."""
        self.control_set.add(inputs, outputs, id)

    def get_training_ids(self) -> List[Optional[Hashable]]:
        return list(self.training_set.identifiers)

    def get_control_ids(self) -> List[Optional[Hashable]]:
        return list(self.control_set.identifiers)

    # ------------------------------------------------------------------
    # Hyperparameters

    def set_learning_rate(self, rate: float | Sequence[float]) -> None:
        """Set one rate for the whole network or one per layer connection."""
        self.model.set_learning_rate(rate)

    def get_learning_rate(self, layer: int) -> float:
        return self.model.get_learning_rate(layer)

    def set_momentum(self, momentum: float) -> None:
        self.model.momentum = float(momentum)

    def get_momentum(self) -> float:
        return self.model.momentum

    # ------------------------------------------------------------------
    # Training

    def initialise(self) -> None:
        self.model.initialise()

    def reset(self) -> None:
        """Re-randomise weights and thresholds for a fresh training run."""
        self.model.initialise()

    def train(
        self,
        max_epochs: int = 500,
        max_error: float = 0.01,
        *,
        monitor: OverfittingMonitor | None = None,
    ) -> bool:
        """Train until an error reaches ``max_error``, overfitting shows, or epochs run out.

        Returns True only when the error threshold was reached.
        """
        trainer = Trainer(
            self.model,
            self.training_set,
            self.control_set,
            rng=self.rng,
            callbacks=self.callbacks,
        )
        self._status = TrainingStatus.RUNNING
        try:
            self._result = trainer.run(max_epochs, max_error, monitor=monitor)
        finally:
            self._status = trainer.status
        return self._result.success

    def calculate(self, inputs: Sequence[float]) -> Array:
        return self.model.forward(inputs)

    def get_result(self) -> TrainingResult | None:
        return self._result

    def get_status(self) -> TrainingStatus:
        return self._status

    def get_epoch(self) -> int | None:
        return self._result.epochs if self._result else None

    def get_training_error(self) -> float | None:
        return self._result.training_error if self._result else None

    def get_control_error(self) -> float | None:
        return self._result.control_error if self._result else None

    def was_successful(self) -> bool:
        return bool(self._result and self._result.success)

    # ------------------------------------------------------------------
    # State

    def export_state(self) -> NetworkState:
        return self.model.export_state()

    def import_state(self, state: NetworkState) -> "NeuralNetwork":
        self.model.import_state(state)
        return self

    def save_to_file(self, path: str | Path) -> bool:
        return save_network(path, self.model, self.training_set, self.control_set)

    def load_from_file(self, path: str | Path) -> bool:
        """Load weights and identifiers; training and control examples are cleared."""
        return load_network(path, self.model, self.training_set, self.control_set)


__all__ = ["NeuralNetwork"]
