"""Exceptions raised by sheet generation."""

from __future__ import annotations


class BingoSheetsError(Exception):
    """Base class for generation errors."""


class InvalidArgumentError(BingoSheetsError, ValueError):
    """Pool, arrangement length or sheet count is outside its contract."""


class LengthMismatchError(BingoSheetsError, ValueError):
    """Per-column arrangement sequences do not have the same length."""
