"""Domain services module."""

from .randomization_service import generate_orders
from .scoring_service import ScoringService

__all__ = [
    "generate_orders",
    "ScoringService",
]
