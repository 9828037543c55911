"""
Interactive editing operations on memory map declarations.
"""

from .spatial_insertion import (
    InsertionErrorKind,
    InsertionResult,
    SpatialInsertionService,
    next_sequential_name,
)

__all__ = [
    "SpatialInsertionService",
    "InsertionResult",
    "InsertionErrorKind",
    "next_sequential_name",
]
