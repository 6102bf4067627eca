"""Reporting utilities for backpropnet."""

from .metrics import CsvSink, JsonlSink

__all__ = ["CsvSink", "JsonlSink"]
