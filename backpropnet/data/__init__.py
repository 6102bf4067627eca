"""Dataset store for backpropnet."""

from .dataset import Dataset, Example, make_xor_dataset

__all__ = ["Dataset", "Example", "make_xor_dataset"]
