"""
Battery Estimator Plotting Module
=================================

Visualisations of chemistry data and detection behaviour.

Plot Types Available:
--------------------
- Per-cell discharge curves for all (or selected) chemistries
- Pack state of charge versus pack voltage
- Auto-detect windows, showing where chemistries overlap

Usage:
-----
    from src.battery_estimator.plotting import BatteryPlotter

    plotter = BatteryPlotter()
    plotter.plot_detection_windows(max_cells=6)
    plt.show()
"""

from typing import Optional, Sequence, Tuple

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

from .calculations.state_of_charge import voltage_to_percent
from .data.chemistry_database import BUILTIN_CHEMISTRIES, lookup_chemistry
from .models.pack import BatteryPack
from .tables import detection_windows_frame


class BatteryPlotter:
    """
    Plots for chemistry profiles, packs and auto-detection.

    Every method returns the Figure and accepts an existing Axes so plots
    can be composed into a larger layout.
    """

    DEFAULT_FIGURE_SIZE = (10, 6)
    DEFAULT_COLORS = {
        "lead-acid": "tab:gray",
        "lifepo4": "tab:green",
        "li-ion": "tab:blue",
        "lipo": "tab:orange",
    }

    def _get_axes(
        self,
        ax: Optional[Axes],
        figsize: Optional[Tuple[int, int]]
    ) -> Tuple[Figure, Axes]:
        if ax is None:
            fig, ax = plt.subplots(figsize=figsize or self.DEFAULT_FIGURE_SIZE)
        else:
            fig = ax.get_figure()
        return fig, ax

    def _color(self, chemistry: str) -> Optional[str]:
        return self.DEFAULT_COLORS.get(chemistry)

    # =========================================================================
    # Discharge Curves
    # =========================================================================

    def plot_discharge_curves(
        self,
        chemistries: Optional[Sequence[str]] = None,
        figsize: Optional[Tuple[int, int]] = None,
        ax: Optional[Axes] = None
    ) -> Figure:
        """
        Plot per-cell state of charge against cell voltage.

        Parameters:
        ----------
        chemistries : sequence of str, optional
            Chemistry names to include (default: all built-ins)

        figsize : tuple, optional
            Figure size (width, height) in inches.

        ax : Axes, optional
            Existing axes to plot on.

        Returns:
        -------
        Figure
            Matplotlib figure object.
        """
        if chemistries is None:
            profiles = BUILTIN_CHEMISTRIES
        else:
            profiles = [lookup_chemistry(name) for name in chemistries]

        fig, ax = self._get_axes(ax, figsize)
        for profile in profiles:
            ax.plot(
                profile.curve.voltages, profile.curve.percents,
                marker="o", markersize=3,
                color=self._color(profile.name),
                label=profile.description or profile.name,
            )

        ax.set_xlabel("Cell Voltage (V)")
        ax.set_ylabel("State of Charge (%)")
        ax.set_title("Discharge Curves")
        ax.set_ylim(-2, 102)
        ax.grid(True, alpha=0.3)
        ax.legend()
        return fig

    # =========================================================================
    # Pack State of Charge
    # =========================================================================

    def plot_pack_soc(
        self,
        pack: BatteryPack,
        num_points: int = 200,
        margin: float = 0.05,
        figsize: Optional[Tuple[int, int]] = None,
        ax: Optional[Axes] = None
    ) -> Figure:
        """
        Plot estimated state of charge across a pack's voltage range.

        Parameters:
        ----------
        pack : BatteryPack
            Pack to evaluate

        num_points : int
            Number of voltages sampled

        margin : float
            Fraction of the pack window to extend on each side, to show
            the clamping at 0% and 100%

        figsize : tuple, optional
            Figure size (width, height) in inches.

        ax : Axes, optional
            Existing axes to plot on.

        Returns:
        -------
        Figure
            Matplotlib figure object.
        """
        span = pack.scaled_max_voltage - pack.scaled_min_voltage
        pack_voltages = np.linspace(
            pack.scaled_min_voltage - span * margin,
            pack.scaled_max_voltage + span * margin,
            num_points,
        )
        soc = np.array([voltage_to_percent(pack, float(v)) for v in pack_voltages])

        fig, ax = self._get_axes(ax, figsize)
        ax.plot(pack_voltages, soc, color=self._color(pack.chemistry.name), linewidth=2)
        ax.axvline(pack.scaled_min_voltage, color="red", linestyle="--", alpha=0.5)
        ax.axvline(pack.scaled_max_voltage, color="red", linestyle="--", alpha=0.5)

        ax.set_xlabel("Pack Voltage (V)")
        ax.set_ylabel("State of Charge (%)")
        ax.set_title(f"{pack.configuration_string} {pack.chemistry.name}")
        ax.set_ylim(-2, 102)
        ax.grid(True, alpha=0.3)
        return fig

    # =========================================================================
    # Detection Windows
    # =========================================================================

    def plot_detection_windows(
        self,
        max_cells: Optional[int] = None,
        voltage: Optional[float] = None,
        figsize: Optional[Tuple[int, int]] = None,
        ax: Optional[Axes] = None
    ) -> Figure:
        """
        Horizontal bars for each auto-detect table entry, top = checked first.

        Parameters:
        ----------
        max_cells : int, optional
            Hide entries with more cells than this

        voltage : float, optional
            Reading to mark with a vertical line

        figsize : tuple, optional
            Figure size (width, height) in inches.

        ax : Axes, optional
            Existing axes to plot on.

        Returns:
        -------
        Figure
            Matplotlib figure object.
        """
        windows = detection_windows_frame(max_cells=max_cells)

        fig, ax = self._get_axes(ax, figsize)
        positions = np.arange(len(windows))[::-1]
        ax.barh(
            positions,
            windows["max_voltage"] - windows["min_voltage"],
            left=windows["min_voltage"],
            color=[self._color(c) for c in windows["chemistry"]],
            alpha=0.7,
        )
        ax.set_yticks(positions)
        ax.set_yticklabels(windows["label"])

        if voltage is not None:
            ax.axvline(voltage, color="red", linewidth=1.5, label=f"{voltage:.2f}V")
            ax.legend()

        ax.set_xlabel("Pack Voltage (V)")
        ax.set_title("Auto-detect Windows (top = highest priority)")
        ax.grid(True, axis="x", alpha=0.3)
        return fig
