"""
Battery Estimator Models
========================

Core data models for chemistry and pack estimation.
"""

from .chemistry import ChemistryProfile, DischargeCurve
from .pack import BatteryPack

__all__ = [
    "ChemistryProfile",
    "DischargeCurve",
    "BatteryPack",
]
