"""
Legacy Configuration Migration
==============================

Older devices describe their battery with a preset name
(preset-battery-type = "lime") or a hand-entered custom battery type
instead of chemistry + cell count. This module upgrades those records
once, at load time; the estimator itself never sees legacy fields.

Migration runs only when a legacy field is present and no chemistry has
been set yet.
"""

import dataclasses
from typing import Dict, Tuple

from .config import (
    BatteryConfig,
    CHEMISTRY_LEAD_ACID,
    CHEMISTRY_LIFEPO4,
    CHEMISTRY_LI_ION,
    CUSTOM_CHEMISTRY,
    CUSTOM_RANGE_TOLERANCE_V,
)
from .calculations.cell_count import estimate_cell_count
from .data.chemistry_database import BUILTIN_CHEMISTRIES, get_chemistry
from .debugger import debug_step
from .exceptions import MigrationError
from .models.chemistry import ChemistryProfile, DischargeCurve


# Preset name -> (chemistry, series cells)
LEGACY_PRESETS: Dict[str, Tuple[str, int]] = {
    "lime": (CHEMISTRY_LI_ION, 10),              # 36V scooter pack
    "li-ion": (CHEMISTRY_LI_ION, 1),
    "lifepo4-6v": (CHEMISTRY_LIFEPO4, 2),
    "lifepo4-12v": (CHEMISTRY_LIFEPO4, 4),
    "lifepo4-24v": (CHEMISTRY_LIFEPO4, 8),
    "lead-acid-12v": (CHEMISTRY_LEAD_ACID, 6),
    "lead-acid-24v": (CHEMISTRY_LEAD_ACID, 12),
}


def needs_migration(config: BatteryConfig) -> bool:
    """True if the record still uses the legacy battery description."""
    return config.has_legacy_fields and not config.chemistry


def estimate_cell_count_from_preset(preset: str) -> int:
    """Series cell count for a legacy preset, or 0 if unknown."""
    return LEGACY_PRESETS.get(preset, ("", 0))[1]


def determine_chemistry_from_custom_type(battery_type: ChemistryProfile) -> str:
    """
    Guess which chemistry a legacy custom battery type describes.

    An explicit chemistry name wins. Otherwise the first built-in chemistry
    whose min and max cell voltages are both within 0.2V of the legacy
    values is used; if none is that close the result is "custom".
    """
    if battery_type.name and battery_type.name != CUSTOM_CHEMISTRY:
        return battery_type.name

    for profile in BUILTIN_CHEMISTRIES:
        if (abs(profile.min_voltage - battery_type.min_voltage) <= CUSTOM_RANGE_TOLERANCE_V
                and abs(profile.max_voltage - battery_type.max_voltage) <= CUSTOM_RANGE_TOLERANCE_V):
            return profile.name
    return CUSTOM_CHEMISTRY


def migrate_battery_config(config: BatteryConfig) -> BatteryConfig:
    """
    Upgrade a legacy record to chemistry + cell count.

    Every non-legacy field is preserved; the legacy fields are cleared in
    the returned copy. The input record is not modified.

    Raises:
    ------
    MigrationError
        If the preset name is unknown or the record has nothing to migrate.
    """
    if config.preset_battery_type:
        preset = config.preset_battery_type
        if preset not in LEGACY_PRESETS:
            raise MigrationError(
                f"Unknown preset battery type '{preset}'. "
                f"Known presets: {sorted(LEGACY_PRESETS)}"
            )
        chemistry, cell_count = LEGACY_PRESETS[preset]
        migrated = dataclasses.replace(
            config,
            chemistry=chemistry,
            manual_cell_count=cell_count,
            preset_battery_type="",
            custom_battery_type=None,
        )
        source = f"preset '{preset}'"

    elif config.custom_battery_type is not None:
        battery_type = config.custom_battery_type
        chemistry = determine_chemistry_from_custom_type(battery_type)
        profile = get_chemistry(chemistry)

        if profile is not None:
            midpoint = (battery_type.min_voltage + battery_type.max_voltage) / 2.0
            cell_count = estimate_cell_count(profile, midpoint)
            custom = config.custom_chemistry
        else:
            # Keep the user's own curve (pack level); a bare range becomes a line
            chemistry = CUSTOM_CHEMISTRY
            cell_count = 1
            curve = battery_type.curve
            if len(curve) == 0:
                curve = DischargeCurve.from_sequences(
                    (battery_type.min_voltage, battery_type.max_voltage), (0, 100)
                )
            custom = dataclasses.replace(battery_type, name=CUSTOM_CHEMISTRY, curve=curve)

        migrated = dataclasses.replace(
            config,
            chemistry=chemistry,
            manual_cell_count=cell_count,
            custom_chemistry=custom,
            preset_battery_type="",
            custom_battery_type=None,
        )
        source = "custom battery type"

    else:
        raise MigrationError("Battery configuration has no legacy fields to migrate")

    debug_step(
        category="Migration",
        description=f"Migrate legacy {source}",
        formula="",
        variables={"manually_configured": migrated.manually_configured},
        result=f"{migrated.chemistry} x{migrated.manual_cell_count}",
        result_name="battery",
    )
    return migrated
