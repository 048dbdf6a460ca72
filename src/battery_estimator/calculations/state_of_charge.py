"""
State of Charge Estimation
==========================

Converts a pack voltage into a 0-100% charge estimate using the
chemistry's per-cell discharge curve.

The bracketing curve segment is found with numpy.searchsorted.
"""

import numpy as np

from ..debugger import debug_step
from ..exceptions import InvalidCellCountError, UnknownChemistryError
from ..models.pack import BatteryPack


def voltage_to_percent(pack: BatteryPack, voltage: float) -> float:
    """
    Estimate state of charge from pack voltage.

    Voltages at or below the first curve point read as the first percent
    (0%), at or above the last point as the last percent (100%). In
    between, the result is linearly interpolated between the two
    bracketing curve points.

    Parameters:
    ----------
    pack : BatteryPack
        Resolved chemistry and cell count

    voltage : float
        Measured pack voltage (V)

    Returns:
    -------
    float
        State of charge (0-100%)

    Raises:
    ------
    InvalidCellCountError
        If the pack has no cells.

    UnknownChemistryError
        If the pack has no chemistry profile.

    MalformedCurveError
        If the curve is empty or its sequences differ in length.
    """
    if pack.cell_count <= 0:
        raise InvalidCellCountError(f"Pack has {pack.cell_count} cells")
    if pack.chemistry is None:
        raise UnknownChemistryError("<none>")

    curve = pack.chemistry.curve
    curve.check_shape()

    cells = pack.cell_count
    voltages = np.asarray(curve.voltages, dtype=float)
    percents = curve.percents

    # Bounds are compared at pack scale so scaled_min/max_voltage hit
    # the end points exactly
    if voltage <= curve.voltages[0] * cells:
        percent = percents[0]
    elif voltage >= curve.voltages[-1] * cells:
        percent = percents[-1]
    else:
        cell_voltage = voltage / cells
        # voltages[i-1] <= cell_voltage < voltages[i]
        i = int(np.searchsorted(voltages, cell_voltage, side="right"))
        i = max(1, min(len(voltages) - 1, i))
        v1, v2 = curve.voltages[i - 1], curve.voltages[i]
        p1, p2 = percents[i - 1], percents[i]
        if v2 == v1:
            percent = p1
        else:
            percent = p1 + (p2 - p1) * (cell_voltage - v1) / (v2 - v1)

    result = float(max(0.0, min(100.0, percent)))
    debug_step(
        category="Interpolation",
        description=f"State of charge for {pack.configuration_string} {pack.chemistry.name}",
        formula="SOC = p1 + (p2 - p1) * (V_cell - v1) / (v2 - v1)",
        variables={"V_pack": voltage, "N": cells, "V_cell": voltage / cells},
        result=result,
        result_name="SOC",
        result_unit="%",
    )
    return result
