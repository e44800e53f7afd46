"""
Exception types for the map core.

Only load-time configuration problems surface to callers. Interactive
operations (search, classify, measure, reach) degrade to empty results and
never raise these.
"""


class HazardMapError(Exception):
    """Base exception for hazard map errors."""
    pass


class DatasetError(HazardMapError):
    """A shelter, legend or tile source document is missing or malformed."""
    pass


class TileSampleError(HazardMapError):
    """A tile image could not be fetched or decoded."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Tile sample failed for {url}: {reason}")
