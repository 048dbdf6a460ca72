"""
Battery Estimator Data Module
=============================

Contains the chemistry registry, the auto-detect table and lookup functions.
"""

from .chemistry_database import (
    AUTODETECT_PRIORITY_TABLE,
    BUILTIN_CHEMISTRIES,
    CHEMISTRY_DATABASE,
    DetectionEntry,
    get_chemistry,
    lookup_chemistry,
    list_chemistries,
    list_available_chemistries,
)

__all__ = [
    "AUTODETECT_PRIORITY_TABLE",
    "BUILTIN_CHEMISTRIES",
    "CHEMISTRY_DATABASE",
    "DetectionEntry",
    "get_chemistry",
    "lookup_chemistry",
    "list_chemistries",
    "list_available_chemistries",
]
