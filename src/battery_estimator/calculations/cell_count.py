"""
Cell Count Detection
====================

Estimates how many cells are wired in series from a single pack voltage
and a known chemistry.

    cells = floor(V_pack / V_nominal + 0.5),  clamped to 1-24

where V_nominal is the midpoint of the chemistry's cell voltage window.
Half-up rounding is used deliberately (Python's round() would send 2.5
to 2).
"""

import math
from typing import Optional

from ..config import CUSTOM_CHEMISTRY, MIN_CELL_COUNT, MAX_CELL_COUNT
from ..data.chemistry_database import get_chemistry
from ..debugger import debug_step
from ..exceptions import MalformedCurveError
from ..models.chemistry import ChemistryProfile


def estimate_cell_count(profile: ChemistryProfile, voltage: float) -> int:
    """
    Estimate series cell count for a known chemistry profile.

    Non-positive voltages are not rejected; they clamp to one cell.

    Parameters:
    ----------
    profile : ChemistryProfile
        Cell chemistry

    voltage : float
        Measured pack voltage (V)

    Returns:
    -------
    int
        Cell count in 1-24

    Raises:
    ------
    MalformedCurveError
        If the profile's nominal voltage is not positive.
    """
    nominal = profile.nominal_voltage
    if nominal <= 0:
        raise MalformedCurveError(
            f"Chemistry {profile.name}: nominal voltage {nominal}V is not positive"
        )
    ratio = voltage / nominal
    cells = math.floor(ratio + 0.5)
    clamped = max(MIN_CELL_COUNT, min(MAX_CELL_COUNT, cells))

    debug_step(
        category="Detection",
        description=f"Estimate {profile.name} cell count",
        formula="N = clamp(floor(V_pack / V_nominal + 0.5), 1, 24)",
        variables={"V_pack": voltage, "V_nominal": nominal, "ratio": ratio},
        result=clamped,
        result_name="N_cells",
        comment="clamped" if clamped != cells else "",
    )
    return clamped


def detect_cell_count(
    chemistry: str,
    voltage: float,
    custom_profile: Optional[ChemistryProfile] = None
) -> int:
    """
    Estimate series cell count for a chemistry name.

    Parameters:
    ----------
    chemistry : str
        Registered chemistry name, or "custom" together with custom_profile

    voltage : float
        Measured pack voltage (V)

    custom_profile : ChemistryProfile, optional
        Profile used when chemistry is "custom"

    Returns:
    -------
    int
        Cell count in 1-24, or 0 if the chemistry is unknown or its
        profile is unusable
    """
    if chemistry == CUSTOM_CHEMISTRY and custom_profile is not None:
        profile = custom_profile
    else:
        profile = get_chemistry(chemistry)

    if profile is None:
        debug_step(
            category="Detection",
            description=f"Unknown chemistry '{chemistry}'",
            formula="",
            variables={"V_pack": voltage},
            result=0,
            result_name="N_cells",
            comment="0 means could not detect",
        )
        return 0

    if profile is custom_profile:
        try:
            profile.validate()
        except MalformedCurveError as e:
            debug_step(
                category="Detection",
                description="Custom chemistry is unusable",
                formula="",
                variables={"V_pack": voltage},
                result=0,
                result_name="N_cells",
                comment=str(e),
            )
            return 0

    return estimate_cell_count(profile, voltage)
