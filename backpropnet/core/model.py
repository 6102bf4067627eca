"""Fully-connected tanh network trained by online backpropagation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, MutableSequence, Sequence, Tuple

import numpy as np

from .activations import tanh, tanh_deriv
from .types import Array, NetworkState

INIT_RANGE = 0.25
MOMENTUM_CACHE_MODES = ("per_node", "per_edge")


def _validate_topology(topology: Sequence[int]) -> Tuple[int, ...]:
    dims = tuple(int(n) for n in topology)
    if len(dims) < 2:
        raise ValueError(
            f"Topology needs at least an input and an output layer, got {list(dims)}"
        )
    if any(n <= 0 for n in dims):
        raise ValueError(f"Layer sizes must be positive, got {list(dims)}")
    return dims


@dataclass(eq=False)
class FeedForwardModel:
    """Layered network with per-layer weights, thresholds and momentum cache.

    ``weights[k][i, j]`` connects node ``i`` of layer ``k`` to node ``j`` of
    layer ``k + 1``; ``thresholds[k][j]`` is subtracted from the weighted sum
    of node ``j`` in layer ``k + 1``.

    With ``momentum_cache="per_node"`` one correction is kept per destination
    node. It is overwritten edge by edge during an update, so the correction
    of edge ``i`` is carried into edge ``i + 1`` and only the last edge's
    correction survives into the next update. ``"per_edge"`` keeps one
    correction per weight instead.
    """

    topology: Sequence[int]
    rng: np.random.Generator = field(default_factory=np.random.default_rng, repr=False)
    momentum_cache: str = "per_node"
    learning_rate: Tuple[float, ...] = (0.1,)
    momentum: float = 0.8
    weights: MutableSequence[Array] = field(init=False, repr=False)
    thresholds: MutableSequence[Array] = field(init=False, repr=False)
    corrections: MutableSequence[Array] = field(init=False, repr=False)
    initialized: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        self.topology = _validate_topology(self.topology)
        if self.momentum_cache not in MOMENTUM_CACHE_MODES:
            raise ValueError(
                f"momentum_cache must be one of {MOMENTUM_CACHE_MODES}, "
                f"got {self.momentum_cache!r}"
            )
        self.set_learning_rate(self.learning_rate)
        dims = self.topology
        self.weights = [np.zeros((a, b)) for a, b in zip(dims[:-1], dims[1:])]
        self.thresholds = [np.zeros(b) for b in dims[1:]]
        self._zero_corrections()
        self._activations: List[Array] | None = None

    @property
    def layer_count(self) -> int:
        return len(self.topology)

    # ------------------------------------------------------------------
    # Hyperparameters

    def set_learning_rate(self, rate: float | Sequence[float]) -> None:
        """Set one global rate or one rate per inter-layer connection."""

        if np.isscalar(rate):
            rates = (float(rate),)
        else:
            rates = tuple(float(r) for r in rate)
        if not rates:
            raise ValueError("At least one learning rate is required")
        self.learning_rate = rates

    def get_learning_rate(self, layer: int) -> float:
        """Rate for connection ``layer -> layer + 1``, falling back to index 0."""

        if 0 <= layer < len(self.learning_rate):
            return self.learning_rate[layer]
        return self.learning_rate[0]

    # ------------------------------------------------------------------
    # Initialisation

    def _zero_corrections(self) -> None:
        if self.momentum_cache == "per_edge":
            self.corrections = [np.zeros_like(w) for w in self.weights]
        else:
            self.corrections = [np.zeros(w.shape[1]) for w in self.weights]

    def initialise(self) -> None:
        """Draw every weight and threshold from U(-0.25, 0.25) and zero momentum."""

        for idx, (in_dim, out_dim) in enumerate(zip(self.topology[:-1], self.topology[1:])):
            self.thresholds[idx] = self.rng.uniform(-INIT_RANGE, INIT_RANGE, size=out_dim)
            self.weights[idx] = self.rng.uniform(
                -INIT_RANGE, INIT_RANGE, size=(in_dim, out_dim)
            )
        self._zero_corrections()
        self._activations = None
        self.initialized = True

    # ------------------------------------------------------------------
    # Forward / backward

    def forward(self, inputs: Sequence[float]) -> Array:
        """Propagate ``inputs`` and keep every layer's activations.

        Returns a copy of the output layer's activations.
        """

        if not self.initialized:
            raise RuntimeError("Weights are not initialised; call initialise() or train first")
        x = np.asarray(inputs, dtype=np.float64)
        if x.shape != (self.topology[0],):
            raise ValueError(
                f"Expected an input vector of length {self.topology[0]}, got shape {x.shape}"
            )
        activations = [x]
        for W, theta in zip(self.weights, self.thresholds):
            x = tanh(x @ W - theta)
            activations.append(x)
        self._activations = activations
        return x.copy()

    def backpropagate(self, output: Sequence[float], desired: Sequence[float]) -> None:
        """Update weights and thresholds from one example.

        Precondition: ``output`` is the result of the immediately preceding
        :meth:`forward` call on this example. The stored activations of that
        pass are used for every layer.
        """

        if self._activations is None:
            raise RuntimeError("backpropagate() requires a preceding forward() pass")
        activations = self._activations
        out = np.asarray(output, dtype=np.float64)
        target = np.asarray(desired, dtype=np.float64)
        n_out = self.topology[-1]
        if out.shape != (n_out,) or target.shape != (n_out,):
            raise ValueError(
                f"Expected output vectors of length {n_out}, "
                f"got {out.shape} and {target.shape}"
            )
        if not np.array_equal(out, activations[-1]):
            raise RuntimeError("output does not match the last forward() pass")

        momentum = self.momentum
        gradient = tanh_deriv(out) * (target - out)
        for layer in range(self.layer_count - 1, 0, -1):
            idx = layer - 1
            if layer < self.layer_count - 1:
                # weights[layer] was already updated while handling layer + 1
                gradient = tanh_deriv(activations[layer]) * (self.weights[layer] @ gradient)

            rate = self.get_learning_rate(idx)
            correction = rate * np.outer(activations[idx], gradient)
            previous = self.corrections[idx]
            if self.momentum_cache == "per_edge":
                self.weights[idx] += correction + momentum * previous
                self.corrections[idx] = correction
            else:
                carried = np.vstack([previous[np.newaxis, :], correction[:-1]])
                self.weights[idx] += correction + momentum * carried
                self.corrections[idx] = correction[-1].copy()

            self.thresholds[idx] -= rate * gradient

    # ------------------------------------------------------------------
    # State

    def export_state(self) -> NetworkState:
        return NetworkState(
            topology=tuple(self.topology),
            weights=[w.copy() for w in self.weights],
            thresholds=[t.copy() for t in self.thresholds],
            learning_rate=tuple(self.learning_rate),
            momentum=float(self.momentum),
            initialized=self.initialized,
        )

    def check_parameters(self, weights: Sequence[Array], thresholds: Sequence[Array]) -> None:
        """Raise ``ValueError`` unless the arrays fit this topology."""

        dims = self.topology
        if len(weights) != len(dims) - 1 or len(thresholds) != len(dims) - 1:
            raise ValueError(f"Expected {len(dims) - 1} weight and threshold tables")
        for idx, (in_dim, out_dim) in enumerate(zip(dims[:-1], dims[1:])):
            if np.shape(weights[idx]) != (in_dim, out_dim):
                raise ValueError(
                    f"Weight table {idx} has shape {np.shape(weights[idx])}, "
                    f"expected {(in_dim, out_dim)}"
                )
            if np.shape(thresholds[idx]) != (out_dim,):
                raise ValueError(
                    f"Threshold table {idx} has shape {np.shape(thresholds[idx])}, "
                    f"expected {(out_dim,)}"
                )

    def set_parameters(self, weights: Sequence[Array], thresholds: Sequence[Array]) -> None:
        """Replace weights and thresholds; the momentum cache is zeroed."""

        self.check_parameters(weights, thresholds)
        self.weights = [np.array(w, dtype=np.float64) for w in weights]
        self.thresholds = [np.array(t, dtype=np.float64) for t in thresholds]
        self._zero_corrections()
        self._activations = None
        self.initialized = True

    def import_state(self, state: NetworkState) -> None:
        if tuple(state.topology) != tuple(self.topology):
            raise ValueError(
                f"State topology {list(state.topology)} does not match "
                f"network topology {list(self.topology)}"
            )
        if state.initialized:
            self.set_parameters(state.weights, state.thresholds)
        else:
            self.check_parameters(state.weights, state.thresholds)
            self.weights = [np.array(w, dtype=np.float64) for w in state.weights]
            self.thresholds = [np.array(t, dtype=np.float64) for t in state.thresholds]
            self._zero_corrections()
            self._activations = None
            self.initialized = False
        self.set_learning_rate(state.learning_rate)
        self.momentum = float(state.momentum)


__all__ = ["FeedForwardModel", "INIT_RANGE", "MOMENTUM_CACHE_MODES"]
