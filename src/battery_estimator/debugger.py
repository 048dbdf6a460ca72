"""
Calculation Debugger
====================

Records each detection, interpolation and migration step so a reading can
be explained after the fact ("why did 3.86V come out as 1S Li-ion?").

Recording is opt-in: the module-level debugger is None until set_debugger()
installs one, and debug_step() is a no-op while it is None.
"""

from dataclasses import dataclass
from typing import Any, List, Optional
from datetime import datetime


@dataclass
class CalculationStep:
    """A single calculation step with inputs, formula, and result."""
    category: str           # "Detection", "Interpolation", "Migration", ...
    description: str
    formula: str
    variables: dict
    result: Any
    result_name: str
    result_unit: str = ""
    comment: str = ""

    def format(self, number: int) -> List[str]:
        """Report lines for this step."""
        lines = [f"[{number}] {self.description}"]
        if self.variables:
            inputs = ", ".join(
                f"{name}={_fmt(value)}" for name, value in self.variables.items()
            )
            lines.append(f"    Inputs: {inputs}")
        if self.formula:
            lines.append(f"    Formula: {self.formula}")
        unit = f" {self.result_unit}" if self.result_unit else ""
        lines.append(f"    => {self.result_name} = {_fmt(self.result)}{unit}")
        if self.comment:
            lines.append(f"    // {self.comment}")
        return lines


class CalculationDebugger:
    """
    Collects calculation steps grouped into named sections.

    Usage:
        debugger = CalculationDebugger()
        set_debugger(debugger)
        auto_detect_battery_pack(3.86)
        print(debugger.get_report())
    """

    def __init__(self):
        self.steps: List[CalculationStep] = []
        self.sections: List[tuple] = []  # (first step index, name)
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.metadata: dict = {}

    def clear(self):
        """Forget all recorded steps."""
        self.steps = []
        self.sections = []
        self.start_time = None
        self.end_time = None
        self.metadata = {}

    def start(self, **metadata):
        """Begin a new session, discarding previous steps."""
        self.clear()
        self.start_time = datetime.now()
        self.metadata = metadata

    def finish(self):
        self.end_time = datetime.now()

    def start_section(self, name: str):
        self.sections.append((len(self.steps), name))

    def add_step(self, step: CalculationStep):
        self.steps.append(step)

    def get_report(self) -> str:
        """Formatted text report of all recorded steps."""
        lines = ["=" * 70, "BATTERY ESTIMATE TRACE", "=" * 70]
        if self.start_time:
            lines.append(f"Generated: {self.start_time.strftime('%Y-%m-%d %H:%M:%S')}")
        for key, value in self.metadata.items():
            lines.append(f"  {key}: {value}")
        lines.append("")

        section_names = dict(self.sections)
        for i, step in enumerate(self.steps):
            if i in section_names:
                lines.extend([">>> " + section_names[i], ""])
            lines.extend(step.format(i + 1))
            lines.append("")

        lines.append("=" * 70)
        lines.append(f"Total Steps: {len(self.steps)}")
        if self.start_time and self.end_time:
            elapsed = (self.end_time - self.start_time).total_seconds()
            lines.append(f"Elapsed Time: {elapsed:.3f} seconds")
        return "\n".join(lines)

    def get_step_count(self) -> int:
        return len(self.steps)

    def find_steps_by_category(self, category: str) -> List[CalculationStep]:
        return [s for s in self.steps if s.category == category]

    def find_step_by_result(self, result_name: str) -> Optional[CalculationStep]:
        """Most recent step that produced result_name."""
        for step in reversed(self.steps):
            if step.result_name == result_name:
                return step
        return None


def _fmt(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.6g}"
    return str(value)


# Global debugger instance, inactive until set
_debugger: Optional[CalculationDebugger] = None


def get_debugger() -> Optional[CalculationDebugger]:
    """Get the active debugger, or None if tracing is off."""
    return _debugger


def set_debugger(debugger: Optional[CalculationDebugger]):
    """Install (or with None, remove) the global debugger."""
    global _debugger
    _debugger = debugger


def debug_step(
    category: str,
    description: str,
    formula: str,
    variables: dict,
    result: Any,
    result_name: str,
    result_unit: str = "",
    comment: str = ""
):
    """Add a step to the global debugger (if active)."""
    if _debugger is not None:
        _debugger.add_step(CalculationStep(
            category=category,
            description=description,
            formula=formula,
            variables=variables,
            result=result,
            result_name=result_name,
            result_unit=result_unit,
            comment=comment,
        ))
