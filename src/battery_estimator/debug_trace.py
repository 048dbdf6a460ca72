"""
Debug Trace Functions
=====================

Runs a full estimate (pack resolution + state of charge) with a fresh
debugger installed, so every detection decision ends up in one report.
"""

from typing import Optional

from .config import BatteryConfig, default_battery_config
from .calculations.resolver import get_battery_pack
from .calculations.state_of_charge import voltage_to_percent
from .debugger import CalculationDebugger, debug_step, get_debugger, set_debugger
from .exceptions import BatteryEstimatorError


def trace_battery_estimate(
    voltage: float,
    config: Optional[BatteryConfig] = None
) -> CalculationDebugger:
    """
    Trace pack resolution and state of charge for one reading.

    Estimation errors are recorded as a final "Error" step rather than
    raised, so the trace always explains what happened. The previously
    installed debugger (if any) is restored afterwards.

    Parameters:
    ----------
    voltage : float
        Measured pack voltage (V)

    config : BatteryConfig, optional
        Battery configuration; defaults to full auto-detection

    Returns:
    -------
    CalculationDebugger
        Debugger holding every recorded step
    """
    if config is None:
        config = default_battery_config()

    debugger = CalculationDebugger()
    debugger.start(
        voltage=f"{voltage:.3f}V",
        chemistry=config.chemistry or "auto-detect",
        manual_cell_count=config.manual_cell_count or "auto-detect",
    )

    previous = get_debugger()
    set_debugger(debugger)
    try:
        debugger.start_section("PACK RESOLUTION")
        try:
            pack = get_battery_pack(config, voltage)
        except BatteryEstimatorError as e:
            debug_step(
                category="Error",
                description="Pack resolution failed",
                formula="",
                variables={"V_pack": voltage},
                result=type(e).__name__,
                result_name="error",
                comment=str(e),
            )
            return debugger

        debugger.start_section("STATE OF CHARGE")
        voltage_to_percent(pack, voltage)
    finally:
        set_debugger(previous)
        debugger.finish()

    return debugger
