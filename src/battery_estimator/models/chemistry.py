"""
Chemistry Profile Model
=======================

Defines the per-cell voltage characteristics of a battery chemistry:
its safe voltage window and the discharge curve used to turn a cell
voltage into a state of charge.

Profiles are immutable. Built-in profiles live in the chemistry database;
custom profiles come from the device configuration.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Sequence, Tuple

from ..config import CUSTOM_CHEMISTRY
from ..exceptions import MalformedCurveError


@dataclass(frozen=True)
class DischargeCurve:
    """
    Ordered (voltage, percent) samples for a single cell.

    Attributes:
    ----------
    voltages : tuple of float
        Cell voltages (V), strictly ascending

    percents : tuple of float
        State of charge (%) at each voltage, strictly ascending
    """
    voltages: Tuple[float, ...]
    percents: Tuple[float, ...]

    @classmethod
    def from_sequences(
        cls,
        voltages: Sequence[float],
        percents: Sequence[float]
    ) -> "DischargeCurve":
        """Build a curve from any pair of numeric sequences."""
        return cls(
            voltages=tuple(float(v) for v in voltages),
            percents=tuple(float(p) for p in percents),
        )

    def __len__(self) -> int:
        return len(self.voltages)

    def check_shape(self):
        """
        Structural check only: non-empty and equal lengths.

        Raises:
        ------
        MalformedCurveError
            If either sequence is empty or the lengths differ.
        """
        if not self.voltages or not self.percents:
            raise MalformedCurveError("Discharge curve has no points")
        if len(self.voltages) != len(self.percents):
            raise MalformedCurveError(
                f"Discharge curve has {len(self.voltages)} voltages "
                f"but {len(self.percents)} percents"
            )

    def validate(self):
        """
        Full check: shape plus strictly ascending voltages and percents.

        Raises:
        ------
        MalformedCurveError
            If the curve is empty, mismatched or out of order.
        """
        self.check_shape()
        for i in range(1, len(self.voltages)):
            if self.voltages[i] <= self.voltages[i - 1]:
                raise MalformedCurveError(
                    f"Curve voltages must be strictly ascending "
                    f"(point {i}: {self.voltages[i - 1]} -> {self.voltages[i]})"
                )
            if self.percents[i] <= self.percents[i - 1]:
                raise MalformedCurveError(
                    f"Curve percents must be strictly ascending "
                    f"(point {i}: {self.percents[i - 1]} -> {self.percents[i]})"
                )


@dataclass(frozen=True)
class ChemistryProfile:
    """
    Voltage characteristics of one cell chemistry.

    Attributes:
    ----------
    name : str
        Chemistry identifier (e.g., "lifepo4", "li-ion")

    min_voltage : float
        Fully discharged cell voltage (V)

    max_voltage : float
        Fully charged cell voltage (V)

    curve : DischargeCurve
        Cell voltage to state of charge samples

    description : str
        Human readable label for configuration UIs
    """
    name: str
    min_voltage: float
    max_voltage: float
    curve: DischargeCurve
    description: str = ""

    @property
    def nominal_voltage(self) -> float:
        """Midpoint of the cell voltage window (V), used for cell counting."""
        return (self.min_voltage + self.max_voltage) / 2.0

    def scaled_window(self, cell_count: int) -> Tuple[float, float]:
        """Pack voltage window (V) for a series string of cell_count cells."""
        return self.min_voltage * cell_count, self.max_voltage * cell_count

    def validate(self):
        """
        Check voltage bounds and curve ordering.

        Raises:
        ------
        MalformedCurveError
            If the window is inverted or the curve is malformed.
        """
        if self.min_voltage <= 0 or self.max_voltage <= self.min_voltage:
            raise MalformedCurveError(
                f"Chemistry {self.name}: voltage window "
                f"{self.min_voltage}-{self.max_voltage}V is invalid"
            )
        self.curve.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Summary used by configuration UIs."""
        return {
            "name": self.name,
            "min_voltage": self.min_voltage,
            "max_voltage": self.max_voltage,
            "description": self.description,
        }

    def to_config(self) -> Dict[str, Any]:
        """Full profile in configuration-file form (hyphenated keys)."""
        return {
            "chemistry": self.name,
            "min-voltage": self.min_voltage,
            "max-voltage": self.max_voltage,
            "voltages": list(self.curve.voltages),
            "percents": list(self.curve.percents),
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChemistryProfile":
        """
        Build a custom profile from a configuration table.

        Accepts both the current keys (min-voltage, max-voltage, percents)
        and the older spellings (minvoltage, maxvoltage, percent). An empty
        or missing chemistry name becomes "custom"; the legacy "name" key is
        a display label and ends up in the description.

        Parameters:
        ----------
        data : mapping
            Configuration table for the profile

        Returns:
        -------
        ChemistryProfile
            Unvalidated profile; call validate() before use
        """
        name = data.get("chemistry") or CUSTOM_CHEMISTRY
        min_voltage = _first_present(data, "min-voltage", "minvoltage", "min_voltage")
        max_voltage = _first_present(data, "max-voltage", "maxvoltage", "max_voltage")
        voltages = _first_present(data, "voltages", default=())
        percents = _first_present(data, "percents", "percent", default=())

        if min_voltage is None and voltages:
            min_voltage = min(voltages)
        if max_voltage is None and voltages:
            max_voltage = max(voltages)

        return cls(
            name=name,
            min_voltage=float(min_voltage or 0.0),
            max_voltage=float(max_voltage or 0.0),
            curve=DischargeCurve.from_sequences(voltages, percents),
            description=str(data.get("description", data.get("name", ""))),
        )

    def summary(self) -> str:
        """Return a formatted summary string."""
        return (
            f"{self.name}: {self.min_voltage:.2f}-{self.max_voltage:.2f}V/cell "
            f"(nominal {self.nominal_voltage:.3f}V, {len(self.curve)} curve points)"
        )


def _first_present(data: Mapping[str, Any], *keys: str, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default
