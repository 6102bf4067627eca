"""In-memory training and control sets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Iterator, List, Optional, Sequence

import numpy as np

from ..core.types import Array


@dataclass(frozen=True)
class Example:
    """A single input/output pair with an optional opaque identifier."""

    inputs: Array
    outputs: Array
    identifier: Optional[Hashable] = None


class Dataset:
    """Ordered examples whose vector sizes are fixed by the network topology.

    Identifiers are kept in their own list. After a network is loaded from
    disk the identifiers come back while the examples do not; adding
    examples then overwrites identifier slots in order, so data re-added in
    the original order lines up with its identifiers again.
    """

    def __init__(self, n_inputs: int, n_outputs: int) -> None:
        self.n_inputs = int(n_inputs)
        self.n_outputs = int(n_outputs)
        self.inputs: List[Array] = []
        self.outputs: List[Array] = []
        self.identifiers: List[Optional[Hashable]] = []

    def __len__(self) -> int:
        return len(self.inputs)

    def __getitem__(self, index: int) -> Example:
        identifier = self.identifiers[index] if index < len(self.identifiers) else None
        return Example(self.inputs[index], self.outputs[index], identifier)

    def __iter__(self) -> Iterator[Example]:
        for index in range(len(self)):
            yield self[index]

    def add(
        self,
        inputs: Sequence[float],
        outputs: Sequence[float],
        identifier: Optional[Hashable] = None,
    ) -> None:
        x = np.array(inputs, dtype=np.float64)
        y = np.array(outputs, dtype=np.float64)
        if x.shape != (self.n_inputs,):
            raise ValueError(
                f"Expected an input vector of length {self.n_inputs}, got shape {x.shape}"
            )
        if y.shape != (self.n_outputs,):
            raise ValueError(
                f"Expected an output vector of length {self.n_outputs}, got shape {y.shape}"
            )
        index = len(self.inputs)
        self.inputs.append(x)
        self.outputs.append(y)
        if index < len(self.identifiers):
            self.identifiers[index] = identifier
        else:
            self.identifiers.append(identifier)

    def clear_examples(self) -> None:
        """Drop inputs and outputs, keeping the identifier list."""

        self.inputs = []
        self.outputs = []

    def set_identifiers(self, identifiers: Sequence[Optional[Hashable]]) -> None:
        self.identifiers = list(identifiers)


def make_xor_dataset() -> Dataset:
    """Return the four XOR patterns in the signed (-1, 1) encoding.

    The third input is a constant bias of 1.
    """

    dataset = Dataset(n_inputs=3, n_outputs=1)
    dataset.add((-1, -1, 1), (-1,))
    dataset.add((-1, 1, 1), (1,))
    dataset.add((1, -1, 1), (1,))
    dataset.add((1, 1, 1), (-1,))
    return dataset


__all__ = ["Example", "Dataset", "make_xor_dataset"]
