"""Galaxy Map backend: two-level (sector + hex) spatial queries over a galaxy map."""

__version__ = "1.0.0"
