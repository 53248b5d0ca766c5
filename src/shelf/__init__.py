"""Shelf: browse and clean up local assistant memory and config files."""

__version__ = "0.1.0"
