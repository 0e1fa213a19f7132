"""Power-to-energy integration for estimated platform power."""

from .aggregator import SourceAggregator
from .integrator import ESTIMATOR_SOURCE_ID, EnergyIntegrator, source_id

__all__ = ['SourceAggregator', 'ESTIMATOR_SOURCE_ID', 'EnergyIntegrator', 'source_id']
