"""
Battery Pack Model
==================

A chemistry profile combined with a series cell count. Packs are transient:
they are built from a configuration record and a voltage reading on every
query and never persisted.
"""

from dataclasses import dataclass

from .chemistry import ChemistryProfile
from ..config import MIN_CELL_COUNT, MAX_CELL_COUNT
from ..exceptions import InvalidCellCountError


@dataclass(frozen=True)
class BatteryPack:
    """
    Series string of identical cells.

    Attributes:
    ----------
    chemistry : ChemistryProfile
        Cell chemistry (shared, never mutated by the pack)

    cell_count : int
        Number of cells in series, 1-24

    Example:
    -------
        from src.battery_estimator import BatteryPack, lookup_chemistry

        pack = BatteryPack(lookup_chemistry("lifepo4"), cell_count=4)
        pack.scaled_max_voltage        # 14.6
        pack.voltage_to_percent(13.0)  # ~50.0
    """
    chemistry: ChemistryProfile
    cell_count: int

    def __post_init__(self):
        """Validate cell count."""
        if not MIN_CELL_COUNT <= self.cell_count <= MAX_CELL_COUNT:
            raise InvalidCellCountError(
                f"Cell count must be {MIN_CELL_COUNT}-{MAX_CELL_COUNT}, "
                f"got {self.cell_count}"
            )

    # =========================================================================
    # Basic Properties
    # =========================================================================

    @property
    def configuration_string(self) -> str:
        """Configuration string (e.g., '4S')."""
        return f"{self.cell_count}S"

    @property
    def scaled_min_voltage(self) -> float:
        """Fully discharged pack voltage (V)."""
        return self.chemistry.min_voltage * self.cell_count

    @property
    def scaled_max_voltage(self) -> float:
        """Fully charged pack voltage (V)."""
        return self.chemistry.max_voltage * self.cell_count

    @property
    def nominal_voltage(self) -> float:
        """Nominal pack voltage (V)."""
        return self.chemistry.nominal_voltage * self.cell_count

    def contains_voltage(self, voltage: float) -> bool:
        """True if voltage lies inside the pack window (inclusive)."""
        return self.scaled_min_voltage <= voltage <= self.scaled_max_voltage

    # =========================================================================
    # State of Charge
    # =========================================================================

    def voltage_to_percent(self, voltage: float) -> float:
        """Estimated state of charge (0-100%) for a pack voltage."""
        from ..calculations.state_of_charge import voltage_to_percent

        return voltage_to_percent(self, voltage)

    def summary(self) -> str:
        """Return a formatted summary string."""
        return (
            f"{self.configuration_string} {self.chemistry.name}\n"
            f"  Voltage Range: {self.scaled_min_voltage:.2f}-"
            f"{self.scaled_max_voltage:.2f}V\n"
            f"  Nominal: {self.nominal_voltage:.2f}V"
        )
