"""Tile map viewer: map and eLVL metadata reading, camera, and software rendering."""

__version__ = "0.1.0"