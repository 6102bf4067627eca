"""Config-driven training runs with a bounded number of attempts."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping

from ..config import TrainingConfig
from ..core.types import TrainingResult
from ..data.dataset import Dataset
from ..network import NeuralNetwork
from ..reporting.metrics import CsvSink, JsonlSink

logger = logging.getLogger(__name__)


def build_network(config: TrainingConfig) -> NeuralNetwork:
    network = NeuralNetwork(
        config.topology,
        seed=config.seed,
        momentum_cache=config.momentum_cache,
    )
    network.set_learning_rate(config.learning_rate)
    network.set_momentum(config.momentum)
    return network


def _copy_examples(source: Dataset, add) -> None:
    for example in source:
        add(example.inputs, example.outputs, example.identifier)


def run_pipeline(
    config: TrainingConfig | Mapping[str, object],
    training: Dataset | None = None,
    control: Dataset | None = None,
    *,
    network: NeuralNetwork | None = None,
) -> TrainingResult:
    """Train up to ``config.max_attempts`` times, resuming from current weights.

    Without ``network`` a fresh one is built from ``config`` and filled from
    ``training`` and ``control``. A given ``network`` is trained on the
    examples it already holds.

    When ``config.run_dir`` is set, per-epoch metrics go to
    ``metrics.jsonl`` and ``metrics.csv`` and the outcome to
    ``result.json`` in that directory.
    """

    if not isinstance(config, TrainingConfig):
        config = TrainingConfig.from_mapping(config)
    if network is None:
        if training is None:
            raise ValueError("run_pipeline needs training data or a network")
        network = build_network(config)
        _copy_examples(training, network.add_training_example)
        if control is not None:
            _copy_examples(control, network.add_control_example)

    sinks: list = []
    run_dir = Path(config.run_dir) if config.run_dir else None
    if run_dir is not None:
        sinks.append(JsonlSink(run_dir / "metrics.jsonl", seed=config.seed))
        sinks.append(CsvSink(run_dir / "metrics.csv"))
    network.callbacks.extend(sinks)

    try:
        for attempt in range(config.max_attempts):
            for sink in sinks:
                sink.attempt = attempt
            if network.train(config.max_epochs, config.max_error):
                break
            logger.info("Attempt %d of %d did not converge", attempt + 1, config.max_attempts)
    finally:
        for sink in sinks:
            network.callbacks.remove(sink)

    result = network.get_result()
    if result is None:
        raise RuntimeError("Training finished without a result")
    if run_dir is not None:
        payload = {
            "config": config.to_dict(),
            "attempts": attempt + 1,
            "epochs": result.epochs,
            "training_error": result.training_error,
            "control_error": result.control_error,
            "status": result.status.value,
        }
        (run_dir / "result.json").write_text(json.dumps(payload, indent=2, sort_keys=True))
    return result


__all__ = ["build_network", "run_pipeline"]
