"""
Battery Estimator Module
========================

Battery chemistry detection and state-of-charge estimation for field
devices that only measure pack voltage.

Features:
---------
- Built-in chemistry profiles (lead-acid, LiFePO4, Li-ion, LiPo) plus
  custom profiles from device configuration
- Series cell count estimation (1S-24S) from a single reading
- Pack auto-detection with an explicit, ordered tie-break table for
  overlapping voltage windows
- Voltage to state of charge via discharge curve interpolation
- Legacy battery configuration migration (preset names, custom types)

Usage:
------
    from src.battery_estimator import (
        BatteryConfig, auto_detect_battery_pack, voltage_to_percent,
    )

    # No configuration: detect everything from the reading
    pack = auto_detect_battery_pack(3.86)       # 1S li-ion
    soc = voltage_to_percent(pack, 3.86)

    # Configured chemistry: only the cell count is detected
    config = BatteryConfig(chemistry="lifepo4")
    pack = config.get_battery_pack(13.0)        # 4S lifepo4
"""

from .models.chemistry import ChemistryProfile, DischargeCurve
from .models.pack import BatteryPack
from .data.chemistry_database import (
    AUTODETECT_PRIORITY_TABLE,
    CHEMISTRY_DATABASE,
    get_chemistry,
    lookup_chemistry,
    list_chemistries,
    list_available_chemistries,
)
from .calculations import (
    auto_detect_battery_pack,
    detect_cell_count,
    estimate_cell_count,
    get_battery_pack,
    voltage_to_percent,
)
from .config import BatteryConfig, default_battery_config, MIN_CELL_COUNT, MAX_CELL_COUNT
from .exceptions import (
    BatteryEstimatorError,
    UnknownChemistryError,
    InvalidCellCountError,
    MalformedCurveError,
    UndetectableVoltageError,
    MigrationError,
)
from .migration import migrate_battery_config, needs_migration
from .loader import load_battery_config
from .debugger import CalculationDebugger, get_debugger, set_debugger, debug_step
from .debug_trace import trace_battery_estimate

__all__ = [
    # Core classes
    "ChemistryProfile",
    "DischargeCurve",
    "BatteryPack",
    # Database access
    "AUTODETECT_PRIORITY_TABLE",
    "CHEMISTRY_DATABASE",
    "get_chemistry",
    "lookup_chemistry",
    "list_chemistries",
    "list_available_chemistries",
    # Estimation
    "auto_detect_battery_pack",
    "detect_cell_count",
    "estimate_cell_count",
    "get_battery_pack",
    "voltage_to_percent",
    # Config
    "BatteryConfig",
    "default_battery_config",
    "MIN_CELL_COUNT",
    "MAX_CELL_COUNT",
    "load_battery_config",
    "migrate_battery_config",
    "needs_migration",
    # Errors
    "BatteryEstimatorError",
    "UnknownChemistryError",
    "InvalidCellCountError",
    "MalformedCurveError",
    "UndetectableVoltageError",
    "MigrationError",
    # Debugger
    "CalculationDebugger",
    "get_debugger",
    "set_debugger",
    "debug_step",
    "trace_battery_estimate",
]
