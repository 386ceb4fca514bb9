"""Descriptor, version, scope and project value types."""
