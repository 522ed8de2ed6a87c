"""Core numerical primitives for nn4md."""

from . import activations, engine, network, types

__all__ = ["activations", "engine", "network", "types"]
