"""Diverse bingo sheet generation."""

from .version import __version__

__all__ = ["__version__"]
