"""Geometry, configuration and plotting helpers."""
