"""
Palette Colors Module

Provides pixel sampling, median-cut partitioning, vibrancy ranking and
color-space conversions for extracting representative palettes from images.
"""

__version__ = "1.0.0"
