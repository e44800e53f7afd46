"""
Shelter reach areas: geodesic buffers dissolved into one coverage polygon.
"""

from .buffer import DEFAULT_SEGMENTS, REACH_MIN_ZOOM, ReachAreaBuilder, ReachLayer

__all__ = [
    "DEFAULT_SEGMENTS",
    "REACH_MIN_ZOOM",
    "ReachAreaBuilder",
    "ReachLayer",
]
