"""Polygon set operations over streamed GeoJSON"""

__version__ = "0.1.0"
