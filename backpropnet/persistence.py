"""
persistence.py
~~~~~~~~~~~~~~

Flat key/value file storage for trained networks.

The file is INI-style text with two sections::

    [weights]
    edges = [[[...], ...], ...]
    thresholds = [[...], ...]

    [identifiers]
    training_data = [...]
    control_data = [...]

Every value is JSON, so floats round-trip exactly and the file stays
human-editable. Only weights, thresholds and example identifiers are
stored; the examples themselves are not.
"""

import configparser
import json
import logging
from pathlib import Path
from typing import Any, List, Union

import numpy as np

from .core.model import FeedForwardModel
from .data.dataset import Dataset

logger = logging.getLogger(__name__)

WEIGHTS_SECTION = "weights"
IDENTIFIERS_SECTION = "identifiers"

PathLike = Union[str, Path]


class NetworkEncoder(json.JSONEncoder):
    """JSON encoder that also accepts numpy arrays and scalars."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.generic):
            return obj.item()
        return super().default(obj)


def _new_parser() -> configparser.ConfigParser:
    return configparser.ConfigParser(interpolation=None)


def save_network(
    path: PathLike,
    model: FeedForwardModel,
    training: Dataset,
    control: Dataset,
) -> bool:
    """
    Write weights, thresholds and identifier lists to ``path``.

    Args:
        path: Destination file; parent directories must exist
        model: The model whose parameters are stored
        training: Training set whose identifiers are stored
        control: Control set whose identifiers are stored

    Returns:
        bool: True if the file was written, False otherwise
    """
    parser = _new_parser()
    try:
        parser[WEIGHTS_SECTION] = {
            "edges": json.dumps(list(model.weights), cls=NetworkEncoder),
            "thresholds": json.dumps(list(model.thresholds), cls=NetworkEncoder),
        }
        parser[IDENTIFIERS_SECTION] = {
            "training_data": json.dumps(list(training.identifiers), cls=NetworkEncoder),
            "control_data": json.dumps(list(control.identifiers), cls=NetworkEncoder),
        }
    except (TypeError, ValueError) as e:
        logger.error(f"Could not serialise network for '{path}': {e}")
        return False

    try:
        with open(path, "w", encoding="utf-8") as handle:
            parser.write(handle)
    except OSError as e:
        logger.error(f"Could not save network to '{path}': {e}")
        return False

    logger.info(f"Saved network to '{path}'")
    return True


def _parse_tables(raw: str) -> List[np.ndarray]:
    tables = json.loads(raw)
    if not isinstance(tables, list):
        raise ValueError(f"expected a JSON list of tables, got {type(tables).__name__}")
    return [np.asarray(table, dtype=np.float64) for table in tables]


def load_network(
    path: PathLike,
    model: FeedForwardModel,
    training: Dataset,
    control: Dataset,
) -> bool:
    """
    Restore a network written by :func:`save_network`.

    On success the model takes the stored weights and thresholds, both
    datasets take the stored identifiers and lose their examples. The caller
    re-adds examples matching those identifiers. On failure nothing is
    modified.

    Args:
        path: File to read
        model: Model receiving the stored parameters
        training: Training set receiving the stored identifiers
        control: Control set receiving the stored identifiers

    Returns:
        bool: True if the network was loaded, False otherwise
    """
    if not Path(path).is_file():
        logger.warning(f"Network file '{path}' not found")
        return False

    parser = _new_parser()
    try:
        with open(path, encoding="utf-8") as handle:
            parser.read_file(handle)
    except OSError as e:
        logger.error(f"Could not read network file '{path}': {e}")
        return False
    except (configparser.Error, UnicodeDecodeError) as e:
        logger.error(f"Malformed network file '{path}': {e}")
        return False

    if not parser.has_option(WEIGHTS_SECTION, "edges") or not parser.has_option(
        WEIGHTS_SECTION, "thresholds"
    ):
        logger.error(f"Network file '{path}' has no [{WEIGHTS_SECTION}] edges/thresholds")
        return False

    try:
        weights = _parse_tables(parser.get(WEIGHTS_SECTION, "edges"))
        thresholds = _parse_tables(parser.get(WEIGHTS_SECTION, "thresholds"))
        model.check_parameters(weights, thresholds)
        training_ids = json.loads(
            parser.get(IDENTIFIERS_SECTION, "training_data", fallback="[]")
        )
        control_ids = json.loads(
            parser.get(IDENTIFIERS_SECTION, "control_data", fallback="[]")
        )
        if not isinstance(training_ids, list) or not isinstance(control_ids, list):
            raise ValueError("identifier entries must be JSON lists")
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid network data in '{path}': {e}")
        return False

    model.set_parameters(weights, thresholds)

    # Identifiers without their examples would point at the wrong data,
    # so the examples are dropped until the caller adds them again.
    training.clear_examples()
    control.clear_examples()
    training.set_identifiers(training_ids)
    control.set_identifiers(control_ids)

    logger.info(f"Loaded network from '{path}'")
    return True


__all__ = ["save_network", "load_network"]
