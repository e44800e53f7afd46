"""
Hazard Map CLI Package

Command-line access to the shelter and hazard map core: shelter search,
hazard pixel classification, distance measurement and reach areas.

Usage:
    hazardmap --shelters shelters.geojson search 市役所
    hazardmap reverse 35.68 139.70
    hazardmap classify 139.47 35.68 --layer flood_layer --zoom 15
    hazardmap measure 139.70,35.68 139.71,35.69
    hazardmap --shelters shelters.geojson reach --radius 500
    hazardmap layers
"""

__version__ = "0.1.0"

from cli.main import cli

__all__ = ["cli", "__version__"]
