"""Core module for bingo sheet generation."""

from .arrangements import enumerate_arrangements, standard_pools, universe_for
from .assembler import FREE_CELL, assemble_grids
from .builder import BuildParams, BuildResult, SheetBuilder
from .sampler import ColumnSampler, SamplerState, sample_column, similarity

__all__ = [
    "BuildParams",
    "BuildResult",
    "ColumnSampler",
    "FREE_CELL",
    "SamplerState",
    "SheetBuilder",
    "assemble_grids",
    "enumerate_arrangements",
    "sample_column",
    "similarity",
    "standard_pools",
    "universe_for",
]
