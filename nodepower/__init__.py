"""
Node platform power estimation

Estimates node-level power with a pluggable model when no platform sensor is
available, and integrates the readings into per-source energy counters.
"""

__version__ = "1.0.0"

from . import config
from . import energy
from . import models
from . import stats

__all__ = [
    "config",
    "energy",
    "models",
    "stats",
]
