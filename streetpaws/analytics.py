"""
Public entry points of the incident analytics engine.

All functions are synchronous and side-effect free; malformed input
produces an empty or default result rather than an exception.
"""

from streetpaws.analysis.spatial import detect_hotspots, haversine_distance
from streetpaws.analysis.temporal import (
    analyze_trend,
    confidence_heuristic,
    forecast,
    monthly_counts,
)
from streetpaws.models.recommender import generate_strategic_recommendations
from streetpaws.models.resource_allocator import allocate_resources, remaining_pool

__all__ = [
    "allocate_resources",
    "analyze_trend",
    "confidence_heuristic",
    "detect_hotspots",
    "forecast",
    "generate_strategic_recommendations",
    "haversine_distance",
    "monthly_counts",
    "remaining_pool",
]
