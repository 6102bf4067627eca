"""Core typing contracts for backpropnet."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple

import numpy as np

Array = np.ndarray

STATE_VERSION = 1


class TrainingStatus(str, enum.Enum):
    """Outcome of the most recent training run."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED_MAX_EPOCHS = "failed-max-epochs"
    FAILED_OVERFITTING = "failed-overfitting"


@dataclass(frozen=True)
class TrainingResult:
    """Summary returned by :meth:`backpropnet.training.trainer.Trainer.run`."""

    epochs: int
    training_error: float
    control_error: float
    slope: float
    status: TrainingStatus

    @property
    def success(self) -> bool:
        return self.status is TrainingStatus.SUCCEEDED


@dataclass(frozen=True)
class NetworkState:
    """Versioned snapshot of everything needed to rebuild a network.

    ``weights[k]`` has shape ``(topology[k], topology[k + 1])`` and
    ``thresholds[k]`` holds the thresholds of layer ``k + 1``.
    """

    topology: Tuple[int, ...]
    weights: List[Array]
    thresholds: List[Array]
    learning_rate: Tuple[float, ...]
    momentum: float
    initialized: bool
    version: int = STATE_VERSION

    def to_dict(self) -> Dict[str, object]:
        return {
            "version": self.version,
            "topology": list(self.topology),
            "weights": [w.tolist() for w in self.weights],
            "thresholds": [t.tolist() for t in self.thresholds],
            "learning_rate": list(self.learning_rate),
            "momentum": self.momentum,
            "initialized": self.initialized,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "NetworkState":
        version = int(data.get("version", STATE_VERSION))
        if version != STATE_VERSION:
            raise ValueError(f"Unsupported network state version: {version}")
        return cls(
            topology=tuple(int(n) for n in data["topology"]),
            weights=[np.asarray(w, dtype=np.float64) for w in data["weights"]],
            thresholds=[np.asarray(t, dtype=np.float64) for t in data["thresholds"]],
            learning_rate=tuple(float(r) for r in data["learning_rate"]),
            momentum=float(data["momentum"]),
            initialized=bool(data["initialized"]),
            version=version,
        )

