"""
Geospatial operations for the raster catalog.

This module contains:
- Footprint and ground resolution normalization
- Spatial filter parsing
- Filtering, sorting and limiting of catalog records
"""
