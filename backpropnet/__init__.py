"""backpropnet public API."""

from .config import TrainingConfig, load_config, load_preset, presets
from .core import activations, types  # noqa: F401
from .core.model import FeedForwardModel
from .core.types import NetworkState, TrainingResult, TrainingStatus
from .data.dataset import Dataset, Example, make_xor_dataset
from .network import NeuralNetwork
from .training.pipelines import run_pipeline

__all__ = [
    "Dataset",
    "Example",
    "FeedForwardModel",
    "NetworkState",
    "NeuralNetwork",
    "TrainingConfig",
    "TrainingResult",
    "TrainingStatus",
    "activations",
    "load_config",
    "load_preset",
    "make_xor_dataset",
    "presets",
    "run_pipeline",
    "types",
]
