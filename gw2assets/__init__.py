"""Decoders for game textures, model vertex buffers and text resources."""

__version__ = "0.1.0"

__all__ = ["dxt", "image", "text", "vertex"]