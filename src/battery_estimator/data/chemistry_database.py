"""
Chemistry Database
==================

Built-in chemistry profiles and the auto-detect priority table.

Curves are per-cell resting (open circuit) voltages. They are sampled at
0, 5, 10, 20 ... 90, 100% and their end points coincide with the chemistry's
min/max voltage, so a pack at its scaled min/max reads exactly 0/100%.

Data Sources:
- Lead-acid: flooded/AGM resting voltage tables (12.6V = full 6-cell battery)
- LiFePO4: typical LFP prismatic cell OCV, note the very flat 20-90% plateau
- Li-ion: NMC 18650/21700 OCV, 3.0V cutoff
- LiPo: hobby pouch cell resting voltage, 3.3V storage cutoff

Everything here is built once at import and never mutated.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..config import (
    CHEMISTRY_LEAD_ACID,
    CHEMISTRY_LIFEPO4,
    CHEMISTRY_LI_ION,
    CHEMISTRY_LIPO,
)
from ..exceptions import UnknownChemistryError
from ..models.chemistry import ChemistryProfile, DischargeCurve


# SOC sample points shared by the built-in curves (%)
_SOC_POINTS = (0, 5, 10, 20, 30, 40, 50, 60, 70, 80, 90, 100)


# =============================================================================
# Built-in Chemistries (registry order is also fallback tie-break order)
# =============================================================================

BUILTIN_CHEMISTRIES: Tuple[ChemistryProfile, ...] = (
    ChemistryProfile(
        name=CHEMISTRY_LEAD_ACID,
        min_voltage=1.80,
        max_voltage=2.30,
        curve=DischargeCurve.from_sequences(
            (1.80, 1.93, 1.94, 1.96, 1.98, 1.99, 2.01, 2.03, 2.05, 2.07, 2.11, 2.30),
            _SOC_POINTS,
        ),
        description="Lead-Acid (Flooded/AGM/Gel)",
    ),
    ChemistryProfile(
        name=CHEMISTRY_LIFEPO4,
        min_voltage=2.50,
        max_voltage=3.65,
        curve=DischargeCurve.from_sequences(
            (2.50, 2.90, 3.05, 3.15, 3.20, 3.23, 3.25, 3.27, 3.30, 3.32, 3.35, 3.65),
            _SOC_POINTS,
        ),
        description="Lithium Iron Phosphate (LiFePO4)",
    ),
    ChemistryProfile(
        name=CHEMISTRY_LI_ION,
        min_voltage=3.00,
        max_voltage=4.20,
        curve=DischargeCurve.from_sequences(
            (3.00, 3.30, 3.45, 3.55, 3.62, 3.66, 3.70, 3.75, 3.82, 3.92, 4.05, 4.20),
            _SOC_POINTS,
        ),
        description="Lithium Ion (NMC/NCA)",
    ),
    ChemistryProfile(
        name=CHEMISTRY_LIPO,
        min_voltage=3.30,
        max_voltage=4.20,
        curve=DischargeCurve.from_sequences(
            (3.30, 3.50, 3.61, 3.69, 3.73, 3.77, 3.80, 3.84, 3.87, 3.95, 4.06, 4.20),
            _SOC_POINTS,
        ),
        description="Lithium Polymer (LiPo)",
    ),
)

for _profile in BUILTIN_CHEMISTRIES:
    _profile.validate()

CHEMISTRY_DATABASE: Dict[str, ChemistryProfile] = {
    profile.name: profile for profile in BUILTIN_CHEMISTRIES
}


# =============================================================================
# Auto-detect Priority Table
# =============================================================================

@dataclass(frozen=True)
class DetectionEntry:
    """One expected (chemistry, cell count) configuration."""
    chemistry: str
    cell_count: int


# Configurations seen on deployed devices, most preferred first. The first
# entry whose scaled window contains a reading wins, so order encodes which
# reading of an overlapping voltage we believe (e.g. 3.86V is a 1S Li-ion,
# not a 2S lead-acid; 6.6V is a 2S LiFePO4, not a flat 2S Li-ion).
AUTODETECT_PRIORITY_TABLE: Tuple[DetectionEntry, ...] = (
    DetectionEntry(CHEMISTRY_LEAD_ACID, 1),
    DetectionEntry(CHEMISTRY_LIFEPO4, 1),
    DetectionEntry(CHEMISTRY_LI_ION, 1),
    DetectionEntry(CHEMISTRY_LEAD_ACID, 2),
    DetectionEntry(CHEMISTRY_LIFEPO4, 2),
    DetectionEntry(CHEMISTRY_LI_ION, 2),
    DetectionEntry(CHEMISTRY_LI_ION, 3),
    DetectionEntry(CHEMISTRY_LIFEPO4, 3),
    DetectionEntry(CHEMISTRY_LI_ION, 4),
    DetectionEntry(CHEMISTRY_LIFEPO4, 4),      # 12V LiFePO4
    DetectionEntry(CHEMISTRY_LEAD_ACID, 6),    # 12V lead-acid
    DetectionEntry(CHEMISTRY_LI_ION, 5),
    DetectionEntry(CHEMISTRY_LI_ION, 6),
    DetectionEntry(CHEMISTRY_LI_ION, 8),
    DetectionEntry(CHEMISTRY_LIFEPO4, 8),      # 24V LiFePO4
    DetectionEntry(CHEMISTRY_LEAD_ACID, 12),   # 24V lead-acid
    DetectionEntry(CHEMISTRY_LI_ION, 10),      # 36V scooter packs
    DetectionEntry(CHEMISTRY_LIFEPO4, 16),     # 48V LiFePO4
    DetectionEntry(CHEMISTRY_LEAD_ACID, 24),   # 48V lead-acid
)

for _entry in AUTODETECT_PRIORITY_TABLE:
    if _entry.chemistry not in CHEMISTRY_DATABASE:
        raise UnknownChemistryError(_entry.chemistry, CHEMISTRY_DATABASE)


# =============================================================================
# Database Access Functions
# =============================================================================

def get_chemistry(name: str) -> Optional[ChemistryProfile]:
    """
    Get a chemistry profile by name.

    Parameters:
    ----------
    name : str
        Chemistry name (e.g., "lifepo4", "li-ion")

    Returns:
    -------
    ChemistryProfile or None
        Profile if found
    """
    return CHEMISTRY_DATABASE.get(name)


def lookup_chemistry(name: str) -> ChemistryProfile:
    """
    Get a chemistry profile by name, failing loudly.

    Raises:
    ------
    UnknownChemistryError
        If the name is not registered.
    """
    profile = CHEMISTRY_DATABASE.get(name)
    if profile is None:
        raise UnknownChemistryError(name, list_chemistries())
    return profile


def list_chemistries() -> List[str]:
    """Chemistry names in registry order."""
    return [profile.name for profile in BUILTIN_CHEMISTRIES]


def list_available_chemistries() -> List[Dict[str, object]]:
    """
    Summaries of every built-in chemistry for configuration UIs.

    Returns:
    -------
    list of dict
        {name, min_voltage, max_voltage, description} in registry order
    """
    return [profile.to_dict() for profile in BUILTIN_CHEMISTRIES]
