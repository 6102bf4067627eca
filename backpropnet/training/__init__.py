"""Training loop, error measures and overfitting detection."""

from .metrics import rms_error
from .monitor import OverfittingMonitor, fit_line
from .trainer import Trainer

__all__ = ["OverfittingMonitor", "Trainer", "fit_line", "rms_error"]
