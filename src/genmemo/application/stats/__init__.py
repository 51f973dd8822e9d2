# Application Stats Package
from .metrics_calculator import CollectionStats, ItemStats, MetricsCalculator

__all__ = ["ItemStats", "CollectionStats", "MetricsCalculator"]
