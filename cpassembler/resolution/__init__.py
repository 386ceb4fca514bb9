"""Coordinate resolution, contributor aggregation and classpath assembly."""
