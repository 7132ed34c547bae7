"""Masonry ordering and placement service for the photo gallery."""

__version__ = "1.0.0"
