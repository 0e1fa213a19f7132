"""
Estimator contract.

A backend buffers feature rows for one sampling round and turns them into one
power value (Watts) per domain index. It never sees elapsed time; callers
integrate power into energy.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Sequence


class EstimatorError(Exception):
    """Base class for estimator failures."""


class ModelConstructionError(EstimatorError):
    """Model config or artifact could not be turned into a ready estimator."""


class PredictionError(EstimatorError):
    """A single prediction failed; the round contributes no energy."""


class PowerEstimator(ABC):

    @abstractmethod
    def reset_sample_buffer(self) -> None:
        """Drop pending feature rows. Safe to call repeatedly."""

    @abstractmethod
    def feature_names(self) -> List[str]:
        """Feature order expected in each row."""

    @abstractmethod
    def add_feature_row(self, values: Sequence[float]) -> None:
        """Append one row for the next prediction."""

    @abstractmethod
    def predict(self, is_idle: bool) -> Dict[int, int]:
        """
        Predict power per domain.

        Args:
            is_idle: Use the baseline path, ignoring buffered rows

        Returns:
            Mapping of domain index to non-negative integer Watts

        Raises:
            PredictionError: If no prediction can be made this round
        """

    @abstractmethod
    def is_ready(self) -> bool:
        """True once artifacts loaded without fatal error."""
