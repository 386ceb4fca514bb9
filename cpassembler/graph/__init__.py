"""Project graph utilities."""

from .closure import ProjectGraph, transitive_closure

__all__ = ["ProjectGraph", "transitive_closure"]
