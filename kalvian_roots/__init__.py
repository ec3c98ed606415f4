"""Kalvian Roots - Family network resolution and citations for Juuret Kälviällä."""

__version__ = "0.1.0"
