"""
FieldBattery - Main Package
===========================

Battery configuration and estimation tools for embedded field devices.

This package provides:
- Battery Estimator (battery_estimator): chemistry profiles, cell-count and
  pack auto-detection, and voltage to state-of-charge estimation
"""

__version__ = "0.1.0"
__author__ = "FieldBattery Team"
