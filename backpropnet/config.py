"""Training configuration and built-in presets."""

from __future__ import annotations

import json
from copy import deepcopy
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Mapping

import yaml

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor": {
        "topology": [3, 4, 1],
        "learning_rate": 0.1,
        "momentum": 0.8,
        "max_epochs": 1000,
        "max_error": 0.01,
        "max_attempts": 3,
        "seed": 0,
    },
    "xor-per-edge": {
        "topology": [3, 4, 1],
        "learning_rate": 0.1,
        "momentum": 0.8,
        "momentum_cache": "per_edge",
        "max_epochs": 1000,
        "max_error": 0.01,
        "max_attempts": 3,
        "seed": 0,
    },
}


@dataclass
class TrainingConfig:
    """Hyperparameters of one training run."""

    topology: List[int] = field(default_factory=lambda: [3, 4, 1])
    learning_rate: float | List[float] = 0.1
    momentum: float = 0.8
    max_epochs: int = 500
    max_error: float = 0.01
    max_attempts: int = 3
    seed: int | None = None
    momentum_cache: str = "per_node"
    run_dir: str | None = None

    def __post_init__(self) -> None:
        self.topology = [int(n) for n in self.topology]
        if not isinstance(self.learning_rate, (int, float)):
            self.learning_rate = [float(r) for r in self.learning_rate]
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "TrainingConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise KeyError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return cls(**dict(data))  # type: ignore[arg-type]

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def _read_config_file(path: Path) -> Mapping[str, object]:
    suffix = path.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    text = path.read_text()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text or "{}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def load_config(path: str | Path, overrides: Mapping[str, object] | None = None) -> TrainingConfig:
    """Read a JSON/YAML file into a :class:`TrainingConfig`.

    A ``preset`` key names a built-in preset whose values the file overrides.
    """

    data = dict(_read_config_file(Path(path)))
    preset = data.pop("preset", None)
    merged: Dict[str, object] = dict(load_preset(str(preset))) if preset else {}
    merged.update(data)
    merged.update(overrides or {})
    return TrainingConfig.from_mapping(merged)


def presets() -> Mapping[str, Mapping[str, object]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def load_preset(name: str) -> Mapping[str, object]:
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def preset_config(name: str, **overrides: object) -> TrainingConfig:
    data: Dict[str, object] = dict(load_preset(name))
    data.update(overrides)
    return TrainingConfig.from_mapping(data)


__all__ = [
    "TrainingConfig",
    "load_config",
    "load_preset",
    "preset_config",
    "presets",
]
