"""
Geodify - Geode mod-loader installer for Geometry Dash on Linux/Steam.
"""

__version__ = "0.3.0"
