"""
Pack Auto-Detection
===================

Identifies both chemistry and cell count from a bare voltage reading.

Per-cell windows of different chemistries overlap once multiplied by
different cell counts (3.86V is inside both 1S Li-ion and 2S lead-acid),
so closest-match numerics cannot give a stable answer. Detection runs in
two phases instead:

1. Priority table: walk AUTODETECT_PRIORITY_TABLE in order and return the
   first (chemistry, cells) whose scaled window contains the voltage.
2. Fallback: try every registered chemistry with 1-10 cells and keep the
   match with the fewest cells; equal cell counts go to registry order.

Both window bounds are inclusive.
"""

from typing import Optional, Sequence

from ..config import FALLBACK_MAX_CELLS
from ..data.chemistry_database import (
    AUTODETECT_PRIORITY_TABLE,
    BUILTIN_CHEMISTRIES,
    DetectionEntry,
)
from ..debugger import debug_step
from ..exceptions import UndetectableVoltageError
from ..models.chemistry import ChemistryProfile
from ..models.pack import BatteryPack


def auto_detect_battery_pack(
    voltage: float,
    priority_table: Optional[Sequence[DetectionEntry]] = None,
    profiles: Optional[Sequence[ChemistryProfile]] = None
) -> BatteryPack:
    """
    Detect chemistry and cell count from a voltage alone.

    Parameters:
    ----------
    voltage : float
        Measured pack voltage (V)

    priority_table : sequence of DetectionEntry, optional
        Preferred configurations in priority order. Defaults to the
        built-in table.

    profiles : sequence of ChemistryProfile, optional
        Chemistries available to both phases, in tie-break order.
        Defaults to the built-in registry.

    Returns:
    -------
    BatteryPack
        The detected pack; its window always contains voltage

    Raises:
    ------
    UndetectableVoltageError
        If voltage <= 0 or no configuration explains it.
    """
    if priority_table is None:
        priority_table = AUTODETECT_PRIORITY_TABLE
    if profiles is None:
        profiles = BUILTIN_CHEMISTRIES

    if voltage <= 0:
        raise UndetectableVoltageError(
            f"Cannot auto-detect battery from non-positive voltage {voltage}V"
        )

    pack = _match_priority_table(voltage, priority_table, profiles)
    if pack is None:
        pack = _match_fallback(voltage, profiles)
    if pack is None:
        raise UndetectableVoltageError(
            f"No battery chemistry matches {voltage:.2f}V"
        )
    return pack


def _match_priority_table(
    voltage: float,
    priority_table: Sequence[DetectionEntry],
    profiles: Sequence[ChemistryProfile]
) -> Optional[BatteryPack]:
    by_name = {profile.name: profile for profile in profiles}

    for priority, entry in enumerate(priority_table, start=1):
        profile = by_name.get(entry.chemistry)
        if profile is None:
            continue
        low, high = profile.scaled_window(entry.cell_count)
        if low <= voltage <= high:
            debug_step(
                category="Detection",
                description="Match auto-detect priority table",
                formula="V_min*N <= V_pack <= V_max*N",
                variables={
                    "V_pack": voltage,
                    "chemistry": entry.chemistry,
                    "N": entry.cell_count,
                    "window": f"{low:.2f}-{high:.2f}V",
                },
                result=priority,
                result_name="priority",
                comment="first matching entry wins",
            )
            return BatteryPack(profile, entry.cell_count)
    return None


def _match_fallback(
    voltage: float,
    profiles: Sequence[ChemistryProfile]
) -> Optional[BatteryPack]:
    matches = []
    for profile in profiles:
        for cells in range(1, FALLBACK_MAX_CELLS + 1):
            low, high = profile.scaled_window(cells)
            if low <= voltage <= high:
                matches.append((cells, profile))

    if not matches:
        return None

    # min() keeps the first of equal keys, so ties fall to registry order
    cells, profile = min(matches, key=lambda match: match[0])
    debug_step(
        category="Detection",
        description="Fallback search over all chemistries",
        formula="min N such that V_min*N <= V_pack <= V_max*N",
        variables={"V_pack": voltage, "candidates": len(matches)},
        result=f"{cells}S {profile.name}",
        result_name="pack",
        comment="no priority table entry matched",
    )
    return BatteryPack(profile, cells)
