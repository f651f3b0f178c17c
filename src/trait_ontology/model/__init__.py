"""Shared record model for trait ontologies."""

from .records import (
    SHEET_NAMES,
    CategoryCounter,
    Method,
    Mismatch,
    NameIndex,
    Record,
    Resolution,
    ResolvedVariable,
    Root,
    Scale,
    ScaleCategory,
    Trait,
    TraitClass,
    TraitRecords,
    Variable,
)

__all__ = [
    "SHEET_NAMES",
    "CategoryCounter",
    "Method",
    "Mismatch",
    "NameIndex",
    "Record",
    "Resolution",
    "ResolvedVariable",
    "Root",
    "Scale",
    "ScaleCategory",
    "Trait",
    "TraitClass",
    "TraitRecords",
    "Variable",
]
