"""Raster catalog: a STAC-like catalog and query engine for raster resources."""
