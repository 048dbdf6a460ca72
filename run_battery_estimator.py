#!/usr/bin/env python3
"""
Battery Estimator Launcher
==========================

Prints the chemistry registry and the auto-detect table, traces a set of
sample readings through detection and state-of-charge estimation, then
shows the discharge curve and detection window plots.

Usage:
    python run_battery_estimator.py

Requirements:
    - Python 3.9+
    - numpy
    - pandas
    - matplotlib
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

# Readings seen on deployed devices, including overlapping windows where
# the priority table decides, and a reading with no battery attached
SAMPLE_VOLTAGES = (3.86, 6.6, 13.2, 12.6, 38.5, 0.4)


def main():
    """Print the registry, trace sample readings and show plots."""
    print("=" * 60)
    print("Battery Estimator")
    print("=" * 60)
    print()

    try:
        import numpy
        import pandas
        import matplotlib
        print(f"  [OK] numpy {numpy.__version__}")
        print(f"  [OK] pandas {pandas.__version__}")
        print(f"  [OK] matplotlib {matplotlib.__version__}")
    except ImportError as e:
        print(f"\n[ERROR] Missing required dependency: {e}")
        print("\nPlease install dependencies using:")
        print("    pip install -e .")
        sys.exit(1)

    from src.battery_estimator import trace_battery_estimate
    from src.battery_estimator.tables import chemistries_frame, detection_windows_frame

    print()
    print("Chemistries:")
    print(chemistries_frame().to_string(index=False))
    print()
    print("Auto-detect priority table:")
    print(detection_windows_frame().to_string(index=False))
    print()

    for voltage in SAMPLE_VOLTAGES:
        print(trace_battery_estimate(voltage).get_report())
        print()

    import matplotlib.pyplot as plt
    from src.battery_estimator.plotting import BatteryPlotter

    plotter = BatteryPlotter()
    plotter.plot_discharge_curves()
    plotter.plot_detection_windows(max_cells=8, voltage=SAMPLE_VOLTAGES[0])
    plt.show()


if __name__ == "__main__":
    main()
