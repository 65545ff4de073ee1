"""Highlighting for jj commit descriptions."""

__version__ = "0.1.0"
