"""
Battery Estimator Calculations Module
=====================================

Pure functions for detection and state-of-charge estimation.
All voltages in volts.
"""

from .cell_count import (
    estimate_cell_count,
    detect_cell_count,
)

from .autodetect import auto_detect_battery_pack

from .state_of_charge import voltage_to_percent

from .resolver import get_battery_pack

__all__ = [
    # Cell count
    "estimate_cell_count",
    "detect_cell_count",
    # Auto-detection
    "auto_detect_battery_pack",
    # State of charge
    "voltage_to_percent",
    # Resolution
    "get_battery_pack",
]
