"""
Battery Section Loader
======================

Turns the [battery] table of a device config, as handed over by the host
configuration layer, into a migrated and validated BatteryConfig. Reading
and parsing the config file itself is left to the host.
"""

from typing import Any, Mapping, Optional

from .config import BatteryConfig
from .debugger import debug_step
from .migration import migrate_battery_config, needs_migration


BATTERY_KEY = "battery"


def load_battery_config(section: Optional[Mapping[str, Any]]) -> BatteryConfig:
    """
    Build the battery record from its configuration table.

    Parameters:
    ----------
    section : mapping or None
        Contents of the [battery] table; None or empty gives the defaults

    Returns:
    -------
    BatteryConfig
        Migrated and validated record

    Raises:
    ------
    ValueError
        If the table cannot be decoded or fails validation.
        MigrationError (a ValueError) for unknown legacy presets.
    """
    if section is None:
        section = {}
    if not isinstance(section, Mapping):
        raise ValueError(f"[{BATTERY_KEY}] must be a table, got {type(section).__name__}")

    config = BatteryConfig.from_dict(section)

    if needs_migration(config):
        config = migrate_battery_config(config)

    is_valid, error = config.validate()
    if not is_valid:
        raise ValueError(f"Invalid battery configuration: {error}")

    debug_step(
        category="Config",
        description=f"Load [{BATTERY_KEY}] section",
        formula="",
        variables={"keys": len(section)},
        result=config.chemistry or "auto-detect",
        result_name="chemistry",
    )
    return config
