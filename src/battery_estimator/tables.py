"""
Presentation Tables
===================

pandas views of the chemistry registry and the auto-detect table, for
configuration UIs and reports.
"""

from typing import Optional, Sequence

import pandas as pd

from .data.chemistry_database import (
    AUTODETECT_PRIORITY_TABLE,
    BUILTIN_CHEMISTRIES,
    CHEMISTRY_DATABASE,
    DetectionEntry,
)


def chemistries_frame() -> pd.DataFrame:
    """
    One row per built-in chemistry, in registry order.

    Columns: name, description, min_voltage, max_voltage, nominal_voltage,
    curve_points.
    """
    rows = [
        {
            "name": profile.name,
            "description": profile.description,
            "min_voltage": profile.min_voltage,
            "max_voltage": profile.max_voltage,
            "nominal_voltage": profile.nominal_voltage,
            "curve_points": len(profile.curve),
        }
        for profile in BUILTIN_CHEMISTRIES
    ]
    return pd.DataFrame(rows)


def detection_windows_frame(
    max_cells: Optional[int] = None,
    priority_table: Optional[Sequence[DetectionEntry]] = None
) -> pd.DataFrame:
    """
    Scaled pack voltage window of every auto-detect table entry.

    Parameters:
    ----------
    max_cells : int, optional
        Drop entries with more cells than this

    priority_table : sequence of DetectionEntry, optional
        Table to describe; defaults to the built-in table

    Returns:
    -------
    pd.DataFrame
        Columns: priority, chemistry, cell_count, label, min_voltage,
        max_voltage. Rows in priority order (1 = checked first).
    """
    if priority_table is None:
        priority_table = AUTODETECT_PRIORITY_TABLE

    rows = []
    for priority, entry in enumerate(priority_table, start=1):
        if max_cells is not None and entry.cell_count > max_cells:
            continue
        low, high = CHEMISTRY_DATABASE[entry.chemistry].scaled_window(entry.cell_count)
        rows.append({
            "priority": priority,
            "chemistry": entry.chemistry,
            "cell_count": entry.cell_count,
            "label": f"{entry.cell_count}S {entry.chemistry}",
            "min_voltage": low,
            "max_voltage": high,
        })
    return pd.DataFrame(
        rows,
        columns=["priority", "chemistry", "cell_count", "label",
                 "min_voltage", "max_voltage"],
    )
