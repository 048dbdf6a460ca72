"""
Battery Estimator Errors
========================

Every error also subclasses the matching builtin type: LookupError for
unknown names, ValueError for bad values.
"""


class BatteryEstimatorError(Exception):
    """Base class for all battery estimator errors."""


class UnknownChemistryError(BatteryEstimatorError, LookupError):
    """Requested chemistry name is not in the registry."""

    def __init__(self, name: str, available=None):
        self.name = name
        message = f"Unknown battery chemistry '{name}'"
        if available:
            message += f". Available chemistries: {list(available)}"
        super().__init__(message)


class InvalidCellCountError(BatteryEstimatorError, ValueError):
    """Configured cell count is outside the supported range."""


class MalformedCurveError(BatteryEstimatorError, ValueError):
    """Discharge curve is empty, mismatched or not ascending."""


class UndetectableVoltageError(BatteryEstimatorError, ValueError):
    """No chemistry/cell-count combination explains the voltage."""


class MigrationError(BatteryEstimatorError, ValueError):
    """Legacy battery configuration could not be upgraded."""
