"""
Battery Pack Resolution
=======================

Turns a configuration record plus a voltage reading into a BatteryPack,
using whichever of chemistry and cell count are configured and detecting
the rest.
"""

from ..config import BatteryConfig
from ..debugger import debug_step
from ..models.pack import BatteryPack
from .autodetect import auto_detect_battery_pack
from .cell_count import estimate_cell_count


def get_battery_pack(config: BatteryConfig, voltage: float) -> BatteryPack:
    """
    Resolve the battery pack for a reading.

    - No chemistry configured: full auto-detection.
    - Chemistry configured: use it; take manual_cell_count if set,
      otherwise estimate the cell count from the voltage.

    Raises:
    ------
    UnknownChemistryError
        If the configured chemistry is not registered.

    UndetectableVoltageError
        If auto-detection finds no match.

    InvalidCellCountError
        If manual_cell_count is outside 1-24.

    MalformedCurveError
        If the configured custom profile is unusable.
    """
    if not config.chemistry:
        return auto_detect_battery_pack(voltage)

    profile = config.resolve_chemistry(config.chemistry)

    if config.manual_cell_count > 0:
        debug_step(
            category="Detection",
            description="Use manually configured cell count",
            formula="",
            variables={"chemistry": profile.name},
            result=config.manual_cell_count,
            result_name="N_cells",
        )
        return BatteryPack(profile, config.manual_cell_count)

    return BatteryPack(profile, estimate_cell_count(profile, voltage))
