"""
Battery Estimator Configuration
===============================

Contains limits, chemistry identifiers, default tuning values and the
persisted battery configuration record consumed by the estimator.

All voltages are in volts (V). Cell voltages are per cell; pack voltages
are cell voltage times series cell count.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, TYPE_CHECKING

from .exceptions import InvalidCellCountError, UnknownChemistryError

if TYPE_CHECKING:
    from .models.chemistry import ChemistryProfile
    from .models.pack import BatteryPack


# =============================================================================
# Cell Count Limits
# =============================================================================

# Series cell count accepted anywhere a count is configured or detected
MIN_CELL_COUNT = 1
MAX_CELL_COUNT = 24

# Highest cell count tried by the auto-detect fallback search
FALLBACK_MAX_CELLS = 10


# =============================================================================
# Chemistry Identifiers
# =============================================================================

CHEMISTRY_LEAD_ACID = "lead-acid"
CHEMISTRY_LIFEPO4 = "lifepo4"
CHEMISTRY_LI_ION = "li-ion"
CHEMISTRY_LIPO = "lipo"
CUSTOM_CHEMISTRY = "custom"

# Max per-cell distance (V) when matching a legacy custom range to a chemistry
CUSTOM_RANGE_TOLERANCE_V = 0.2


# =============================================================================
# Default Tuning Values
# =============================================================================

# Readings below this pack voltage mean "no battery connected" (V)
DEFAULT_MINIMUM_VOLTAGE_DETECTION = 1.0

DEFAULT_DEPLETION_HISTORY_HOURS = 48
DEFAULT_DEPLETION_WARNING_HOURS = 12.0

# Fraction of the normal discharge rate expected in power-saving mode
DEFAULT_POWER_SAVING_DISCHARGE_RATIO = 0.3


# =============================================================================
# Battery Configuration Record
# =============================================================================

# Legacy fields left out of to_dict() while unset
LEGACY_OPTIONAL_FIELDS = (
    "preset_battery_type",
    "no_battery_reading",
    "low_battery_reading",
    "full_battery_reading",
)

# Field name -> configuration-file key
CONFIG_KEYS = {
    "enable_voltage_readings": "enable-voltage-readings",
    "manually_configured": "manually-configured",
    "chemistry": "chemistry",
    "manual_cell_count": "manual-cell-count",
    "custom_chemistry": "custom-chemistry",
    "minimum_voltage_detection": "minimum-voltage-detection",
    "enable_depletion_estimate": "enable-depletion-estimate",
    "depletion_history_hours": "depletion-history-hours",
    "depletion_warning_hours": "depletion-warning-hours",
    "power_saving_discharge_ratio": "power-saving-discharge-ratio",
    "updated": "updated",
    "preset_battery_type": "preset-battery-type",
    "custom_battery_type": "custom-battery-type",
    "no_battery_reading": "no-battery-reading",
    "low_battery_reading": "low-battery-reading",
    "full_battery_reading": "full-battery-reading",
}


@dataclass
class BatteryConfig:
    """
    Battery section of the device configuration.

    An empty chemistry and a zero manual cell count both mean
    "auto-detect from the voltage reading".

    Attributes:
    ----------
    enable_voltage_readings : bool
        Whether the device samples battery voltage at all

    manually_configured : bool
        True once a user has picked chemistry or cell count by hand

    chemistry : str
        Chemistry name, "custom", or "" for auto-detect

    manual_cell_count : int
        Series cell count, or 0 for auto-detect

    custom_chemistry : ChemistryProfile, optional
        Profile used when chemistry is "custom"

    minimum_voltage_detection : float
        Pack voltage below which no battery is assumed (V)

    enable_depletion_estimate, depletion_history_hours,
    depletion_warning_hours, power_saving_discharge_ratio
        Depletion estimator tuning, passed through untouched

    updated : any
        Timestamp written by the configuration store

    preset_battery_type : str
        Legacy preset name, cleared by migration

    custom_battery_type : ChemistryProfile, optional
        Legacy custom battery, cleared by migration

    no_battery_reading, low_battery_reading, full_battery_reading : int
        Raw ADC thresholds from the oldest record format; kept as read,
        unused by estimation and not a migration trigger
    """
    enable_voltage_readings: bool = True
    manually_configured: bool = False
    chemistry: str = ""
    manual_cell_count: int = 0
    custom_chemistry: Optional["ChemistryProfile"] = None

    minimum_voltage_detection: float = DEFAULT_MINIMUM_VOLTAGE_DETECTION
    enable_depletion_estimate: bool = True
    depletion_history_hours: int = DEFAULT_DEPLETION_HISTORY_HOURS
    depletion_warning_hours: float = DEFAULT_DEPLETION_WARNING_HOURS
    power_saving_discharge_ratio: float = DEFAULT_POWER_SAVING_DISCHARGE_RATIO

    updated: Any = None

    # Legacy fields
    preset_battery_type: str = ""
    custom_battery_type: Optional["ChemistryProfile"] = field(default=None, repr=False)
    no_battery_reading: int = 0
    low_battery_reading: int = 0
    full_battery_reading: int = 0

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self) -> tuple[bool, str]:
        """Validate configuration values."""
        from .data.chemistry_database import get_chemistry
        from .exceptions import MalformedCurveError

        errors = []

        if self.manual_cell_count != 0 and not (
            MIN_CELL_COUNT <= self.manual_cell_count <= MAX_CELL_COUNT
        ):
            errors.append(
                f"Manual cell count must be {MIN_CELL_COUNT}-{MAX_CELL_COUNT}, "
                f"got {self.manual_cell_count}"
            )

        if self.chemistry == CUSTOM_CHEMISTRY:
            if self.custom_chemistry is None:
                errors.append("Chemistry is 'custom' but no custom chemistry is defined")
        elif self.chemistry and get_chemistry(self.chemistry) is None:
            errors.append(f"Unknown chemistry: {self.chemistry}")

        if self.custom_chemistry is not None:
            try:
                self.custom_chemistry.validate()
            except MalformedCurveError as e:
                errors.append(f"Custom chemistry: {e}")

        if self.minimum_voltage_detection < 0:
            errors.append("Minimum voltage detection cannot be negative")
        if self.depletion_history_hours < 0:
            errors.append("Depletion history hours cannot be negative")
        if self.depletion_warning_hours < 0:
            errors.append("Depletion warning hours cannot be negative")
        if not 0.0 <= self.power_saving_discharge_ratio <= 1.0:
            errors.append("Power saving discharge ratio should be between 0-1")

        if errors:
            return False, "; ".join(errors)
        return True, ""

    # =========================================================================
    # Manual Configuration
    # =========================================================================

    def is_manually_configured(self) -> bool:
        return self.manually_configured

    def set_manual_chemistry(self, chemistry: str):
        """
        Pin the chemistry instead of auto-detecting it.

        Raises:
        ------
        UnknownChemistryError
            If the name is not registered (or is "custom" with no profile).
        """
        self.resolve_chemistry(chemistry)
        self.chemistry = chemistry
        self.manually_configured = True

    def set_manual_cell_count(self, cell_count: int):
        """
        Pin the series cell count instead of detecting it.

        Raises:
        ------
        InvalidCellCountError
            If cell_count is outside 1-24.
        """
        if not MIN_CELL_COUNT <= cell_count <= MAX_CELL_COUNT:
            raise InvalidCellCountError(
                f"Cell count must be {MIN_CELL_COUNT}-{MAX_CELL_COUNT}, got {cell_count}"
            )
        self.manual_cell_count = cell_count
        self.manually_configured = True

    def clear_manual_configuration(self):
        """Return to full auto-detection."""
        self.chemistry = ""
        self.manual_cell_count = 0
        self.custom_chemistry = None
        self.manually_configured = False

    # =========================================================================
    # Estimation API
    # =========================================================================

    def resolve_chemistry(self, chemistry: str) -> "ChemistryProfile":
        """
        Get the profile for a chemistry name, including this record's
        custom profile.

        Raises:
        ------
        UnknownChemistryError
            If the name cannot be resolved.

        MalformedCurveError
            If the custom profile has an invalid window or curve.
        """
        from .data.chemistry_database import get_chemistry, list_chemistries

        if chemistry == CUSTOM_CHEMISTRY and self.custom_chemistry is not None:
            self.custom_chemistry.validate()
            return self.custom_chemistry

        profile = get_chemistry(chemistry)
        if profile is None:
            raise UnknownChemistryError(chemistry, list_chemistries())
        return profile

    def detect_cell_count(self, chemistry: str, voltage: float) -> int:
        """Estimate cell count; 0 if the chemistry is unknown."""
        from .calculations.cell_count import detect_cell_count

        return detect_cell_count(chemistry, voltage, custom_profile=self.custom_chemistry)

    def get_battery_pack(self, voltage: float) -> "BatteryPack":
        """Resolve chemistry and cell count for a voltage reading."""
        from .calculations.resolver import get_battery_pack

        return get_battery_pack(self, voltage)

    # =========================================================================
    # Legacy Fields
    # =========================================================================

    @property
    def has_legacy_fields(self) -> bool:
        """True if a pre-chemistry battery description is present."""
        return bool(self.preset_battery_type) or self.custom_battery_type is not None

    # =========================================================================
    # Dict Conversion
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """Convert to configuration-file form, skipping unset optional values."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.name in LEGACY_OPTIONAL_FIELDS and not value:
                continue
            if f.name in ("custom_chemistry", "custom_battery_type"):
                value = value.to_config()
            result[CONFIG_KEYS[f.name]] = value
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BatteryConfig":
        """
        Build a record from a configuration table, starting from defaults.

        Keys are matched case-insensitively. String values such as "true"
        or "12" are accepted for boolean and numeric fields.

        Raises:
        ------
        ValueError
            If the table contains an unknown key or an unconvertible value.
        """
        from .models.chemistry import ChemistryProfile

        by_key = {key: name for name, key in CONFIG_KEYS.items()}
        config = cls()
        for raw_key, value in data.items():
            key = str(raw_key).lower()
            if key not in by_key:
                raise ValueError(f"Unknown battery configuration key: {raw_key}")
            name = by_key[key]

            if name in ("custom_chemistry", "custom_battery_type"):
                value = ChemistryProfile.from_dict(value) if value is not None else None
            elif name in ("enable_voltage_readings", "manually_configured",
                          "enable_depletion_estimate"):
                value = _to_bool(value, key)
            elif name in ("manual_cell_count", "depletion_history_hours",
                          "no_battery_reading", "low_battery_reading",
                          "full_battery_reading"):
                value = int(value)
            elif name in ("minimum_voltage_detection", "depletion_warning_hours",
                          "power_saving_discharge_ratio"):
                value = float(value)
            elif name in ("chemistry", "preset_battery_type"):
                value = str(value)

            setattr(config, name, value)
        return config


def default_battery_config() -> BatteryConfig:
    """Default battery section: everything auto-detected."""
    return BatteryConfig()


def _to_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in ("true", "1", "yes", "on"):
        return True
    if text in ("false", "0", "no", "off", ""):
        return False
    raise ValueError(f"Cannot convert {value!r} to bool for '{key}'")
