"""
Battery Estimator Tests
=======================

Validates chemistry profiles, cell count detection, pack auto-detection
and state-of-charge interpolation.

Test Methodology:
- Built-in curves must be well formed and span exactly min..max voltage
- Cell counts recovered from nominal pack voltages (12V LiFePO4 = 4S, etc.)
- Auto-detection of overlapping readings follows the priority table
- State of charge clamps at the pack window and never decreases with voltage
"""

import sys
from pathlib import Path
from types import SimpleNamespace
import unittest

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.battery_estimator import (
    AUTODETECT_PRIORITY_TABLE,
    CHEMISTRY_DATABASE,
    BatteryConfig,
    BatteryPack,
    ChemistryProfile,
    DischargeCurve,
    InvalidCellCountError,
    MalformedCurveError,
    UndetectableVoltageError,
    UnknownChemistryError,
    auto_detect_battery_pack,
    detect_cell_count,
    estimate_cell_count,
    get_battery_pack,
    get_chemistry,
    list_available_chemistries,
    list_chemistries,
    lookup_chemistry,
    voltage_to_percent,
)
from src.battery_estimator.data.chemistry_database import DetectionEntry


def make_profile(min_v, max_v, voltages=None, percents=None, name="custom"):
    """Custom profile with a straight-line curve unless one is given."""
    if voltages is None:
        voltages = (min_v, max_v)
    if percents is None:
        percents = (0, 100)
    return ChemistryProfile(
        name=name,
        min_voltage=min_v,
        max_voltage=max_v,
        curve=DischargeCurve.from_sequences(voltages, percents),
    )


class TestChemistryDatabase(unittest.TestCase):
    """Test the built-in chemistry registry."""

    def test_standard_chemistries_exist(self):
        """The four standard chemistries are registered."""
        for name in ("lead-acid", "lifepo4", "li-ion", "lipo"):
            self.assertIn(name, CHEMISTRY_DATABASE)

    def test_lookup_returns_profile(self):
        profile = lookup_chemistry("lifepo4")
        self.assertEqual(profile.name, "lifepo4")
        self.assertAlmostEqual(profile.min_voltage, 2.5)
        self.assertAlmostEqual(profile.max_voltage, 3.65)

    def test_lookup_unknown_raises(self):
        """Unknown names fail loudly; get_chemistry returns None instead."""
        with self.assertRaises(UnknownChemistryError):
            lookup_chemistry("invalid-chemistry")
        self.assertIsNone(get_chemistry("invalid-chemistry"))

    def test_unknown_chemistry_is_lookup_error(self):
        with self.assertRaises(LookupError):
            lookup_chemistry("nimh")

    def test_builtin_curves_are_valid(self):
        """Every built-in curve is non-empty, matched and ascending."""
        for profile in CHEMISTRY_DATABASE.values():
            profile.validate()
            self.assertGreater(len(profile.curve), 0)

    def test_curve_end_points_match_voltage_window(self):
        """Curves start at min_voltage/0% and end at max_voltage/100%."""
        for profile in CHEMISTRY_DATABASE.values():
            self.assertEqual(profile.curve.voltages[0], profile.min_voltage)
            self.assertEqual(profile.curve.voltages[-1], profile.max_voltage)
            self.assertEqual(profile.curve.percents[0], 0)
            self.assertEqual(profile.curve.percents[-1], 100)

    def test_list_chemistries_in_registry_order(self):
        self.assertEqual(list_chemistries()[:4], ["lead-acid", "lifepo4", "li-ion", "lipo"])

    def test_list_available_chemistries_fields(self):
        """Configuration UIs get name, voltage window and description."""
        chemistries = list_available_chemistries()
        self.assertGreaterEqual(len(chemistries), 4)
        for chem in chemistries:
            self.assertIsInstance(chem["name"], str)
            self.assertIsInstance(chem["min_voltage"], float)
            self.assertIsInstance(chem["max_voltage"], float)
            self.assertIsInstance(chem["description"], str)
            self.assertLess(chem["min_voltage"], chem["max_voltage"])

    def test_nominal_voltage_is_midpoint(self):
        self.assertAlmostEqual(lookup_chemistry("lifepo4").nominal_voltage, 3.075)

    def test_priority_table_uses_registered_chemistries(self):
        for entry in AUTODETECT_PRIORITY_TABLE:
            self.assertIn(entry.chemistry, CHEMISTRY_DATABASE)
            self.assertGreaterEqual(entry.cell_count, 1)


class TestDischargeCurveValidation(unittest.TestCase):
    """Malformed curves are configuration errors."""

    def test_descending_voltages_rejected(self):
        profile = make_profile(3.0, 4.2, voltages=(4.2, 3.0))
        with self.assertRaises(MalformedCurveError):
            profile.validate()

    def test_descending_percents_rejected(self):
        profile = make_profile(3.0, 4.2, percents=(100, 0))
        with self.assertRaises(MalformedCurveError):
            profile.validate()

    def test_flat_percents_rejected(self):
        """Two points with the same percent are not strictly ascending."""
        profile = make_profile(3.0, 4.2, voltages=(3.0, 3.6, 4.2), percents=(0, 50, 50))
        with self.assertRaises(MalformedCurveError):
            profile.validate()

    def test_mismatched_lengths_rejected(self):
        profile = make_profile(3.0, 4.2, voltages=(3.0, 3.6, 4.2), percents=(0, 100))
        with self.assertRaises(MalformedCurveError):
            profile.validate()

    def test_empty_curve_rejected(self):
        profile = make_profile(3.0, 4.2, voltages=(), percents=())
        with self.assertRaises(MalformedCurveError):
            profile.validate()

    def test_inverted_window_rejected(self):
        profile = make_profile(4.2, 3.0, voltages=(3.0, 4.2))
        with self.assertRaises(MalformedCurveError):
            profile.validate()

    def test_malformed_curve_is_value_error(self):
        with self.assertRaises(ValueError):
            make_profile(3.0, 4.2, voltages=()).validate()


class TestBatteryPack(unittest.TestCase):
    """Test BatteryPack construction and derived values."""

    def test_scaled_voltages(self):
        pack = BatteryPack(lookup_chemistry("lifepo4"), 4)
        self.assertAlmostEqual(pack.scaled_min_voltage, 10.0)
        self.assertAlmostEqual(pack.scaled_max_voltage, 14.6)
        self.assertAlmostEqual(pack.nominal_voltage, 12.3)
        self.assertEqual(pack.configuration_string, "4S")

    def test_cell_count_limits(self):
        """1-24 cells are accepted, anything else is rejected."""
        profile = lookup_chemistry("li-ion")
        BatteryPack(profile, 1)
        BatteryPack(profile, 24)
        for bad in (0, -1, 25):
            with self.assertRaises(InvalidCellCountError):
                BatteryPack(profile, bad)

    def test_contains_voltage_inclusive(self):
        pack = BatteryPack(lookup_chemistry("li-ion"), 2)
        self.assertTrue(pack.contains_voltage(pack.scaled_min_voltage))
        self.assertTrue(pack.contains_voltage(pack.scaled_max_voltage))
        self.assertFalse(pack.contains_voltage(pack.scaled_max_voltage + 0.01))

    def test_pack_is_immutable(self):
        pack = BatteryPack(lookup_chemistry("li-ion"), 2)
        with self.assertRaises(AttributeError):
            pack.cell_count = 3


class TestCellCountDetection(unittest.TestCase):
    """Test series cell count estimation."""

    def test_lifepo4_12v(self):
        """12V LiFePO4: 13.0 / 3.075 = 4.23 -> 4 cells."""
        self.assertEqual(detect_cell_count("lifepo4", 13.0), 4)

    def test_lifepo4_24v(self):
        self.assertEqual(detect_cell_count("lifepo4", 26.0), 8)

    def test_li_ion(self):
        self.assertEqual(detect_cell_count("li-ion", 14.8), 4)

    def test_boundary_cases(self):
        """Readings between two counts round to the nearest one."""
        cases = [
            ("lifepo4", 4.875, 2),
            ("lifepo4", 8.125, 3),
            ("li-ion", 27.75, 8),
            ("li-ion", 31.45, 9),
            ("lead-acid", 11.55, 6),
            ("lead-acid", 12.6, 6),
        ]
        for chemistry, voltage, expected in cases:
            with self.subTest(chemistry=chemistry, voltage=voltage):
                self.assertEqual(detect_cell_count(chemistry, voltage), expected)

    def test_rounds_half_up(self):
        """Exactly 2.5x nominal gives 3 cells, not banker's rounding to 2."""
        profile = make_profile(1.0, 3.0)  # nominal 2.0V
        self.assertEqual(estimate_cell_count(profile, 5.0), 3)
        self.assertEqual(estimate_cell_count(profile, 3.0), 2)

    def test_very_low_voltage_clamps_to_one(self):
        self.assertEqual(detect_cell_count("lifepo4", 0.5), 1)

    def test_zero_and_negative_voltage_clamp_to_one(self):
        """Non-positive readings are not special-cased."""
        self.assertEqual(detect_cell_count("li-ion", 0.0), 1)
        self.assertEqual(detect_cell_count("li-ion", -5.0), 1)

    def test_very_high_voltage_caps_at_24(self):
        self.assertEqual(detect_cell_count("lifepo4", 100.0), 24)

    def test_unknown_chemistry_returns_zero(self):
        self.assertEqual(detect_cell_count("invalid-chemistry", 12.0), 0)

    def test_custom_chemistry(self):
        profile = make_profile(1.0, 3.0)
        self.assertEqual(detect_cell_count("custom", 8.0, custom_profile=profile), 4)
        self.assertEqual(detect_cell_count("custom", 8.0), 0)

    def test_unusable_custom_profile_returns_zero(self):
        """A custom profile with no voltage window cannot be counted."""
        empty = ChemistryProfile.from_dict({})
        self.assertEqual(detect_cell_count("custom", 12.0, custom_profile=empty), 0)

        inverted = make_profile(4.2, 3.0, voltages=(3.0, 4.2))
        self.assertEqual(detect_cell_count("custom", 12.0, custom_profile=inverted), 0)

    def test_zero_nominal_voltage_rejected(self):
        with self.assertRaises(MalformedCurveError):
            estimate_cell_count(ChemistryProfile.from_dict({}), 12.0)

    def test_nominal_voltage_round_trip(self):
        """N x nominal voltage always recovers N."""
        for profile in CHEMISTRY_DATABASE.values():
            for cells in range(1, 25):
                with self.subTest(chemistry=profile.name, cells=cells):
                    voltage = cells * profile.nominal_voltage
                    self.assertEqual(detect_cell_count(profile.name, voltage), cells)


class TestAutoDetectBatteryPack(unittest.TestCase):
    """Test chemistry + cell count detection from voltage alone."""

    EXPECTED = [
        (3.86, "li-ion", 1),
        (6.6, "lifepo4", 2),
        (2.1, "lead-acid", 1),
        (2.6, "lifepo4", 1),
        (4.0, "li-ion", 1),
        (6.5, "lifepo4", 2),
        (6.7, "lifepo4", 2),
        (7.8, "li-ion", 2),
        (8.6, "lifepo4", 3),
        (10.5, "li-ion", 3),
        (12.0, "li-ion", 3),
        (13.5, "li-ion", 4),
        (17.2, "li-ion", 5),
        (21.0, "li-ion", 5),
        (27.0, "li-ion", 8),
        (35.0, "li-ion", 10),
    ]

    def test_detection_table(self):
        """Each reading resolves to the expected pack and lies in its window."""
        for voltage, chemistry, cells in self.EXPECTED:
            with self.subTest(voltage=voltage):
                pack = auto_detect_battery_pack(voltage)
                self.assertEqual(pack.chemistry.name, chemistry)
                self.assertEqual(pack.cell_count, cells)
                self.assertTrue(pack.contains_voltage(voltage))

    def test_li_ion_preferred_over_lead_acid(self):
        """3.86V fits both 1S Li-ion and 2S lead-acid; the table prefers Li-ion."""
        lead_acid_2s = BatteryPack(lookup_chemistry("lead-acid"), 2)
        self.assertTrue(lead_acid_2s.contains_voltage(3.86))

        pack = auto_detect_battery_pack(3.86)
        self.assertEqual(pack.chemistry.name, "li-ion")
        self.assertEqual(pack.cell_count, 1)

    def test_non_positive_voltage_fails(self):
        for voltage in (0.0, -5.0):
            with self.subTest(voltage=voltage):
                with self.assertRaises(UndetectableVoltageError):
                    auto_detect_battery_pack(voltage)

    def test_below_every_window_fails(self):
        with self.assertRaises(UndetectableVoltageError):
            auto_detect_battery_pack(1.5)

    def test_above_every_window_fails(self):
        with self.assertRaises(UndetectableVoltageError):
            auto_detect_battery_pack(60.0)

    def test_deterministic(self):
        """Repeated detection of the same reading gives the same pack."""
        for voltage in np.linspace(1.8, 58.0, 200):
            try:
                first = auto_detect_battery_pack(float(voltage))
            except UndetectableVoltageError:
                continue
            second = auto_detect_battery_pack(float(voltage))
            self.assertEqual(first, second)

    def test_detected_pack_contains_voltage(self):
        for voltage in np.linspace(1.8, 58.0, 200):
            try:
                pack = auto_detect_battery_pack(float(voltage))
            except UndetectableVoltageError:
                continue
            self.assertTrue(pack.contains_voltage(float(voltage)))

    def test_table_order_beats_cell_count(self):
        """A table listing 2S lead-acid first wins over the smaller 1S Li-ion."""
        table = (DetectionEntry("lead-acid", 2), DetectionEntry("li-ion", 1))
        pack = auto_detect_battery_pack(3.86, priority_table=table)
        self.assertEqual(pack.chemistry.name, "lead-acid")
        self.assertEqual(pack.cell_count, 2)


class TestAutoDetectFallback(unittest.TestCase):
    """With no priority table match, the smallest matching pack wins."""

    def test_fallback_prefers_fewer_cells(self):
        pack = auto_detect_battery_pack(3.86, priority_table=())
        self.assertEqual(pack.chemistry.name, "li-ion")
        self.assertEqual(pack.cell_count, 1)

    def test_fallback_multi_cell(self):
        pack = auto_detect_battery_pack(4.5, priority_table=())
        self.assertEqual(pack.chemistry.name, "lead-acid")
        self.assertEqual(pack.cell_count, 2)

    def test_fallback_tie_goes_to_registry_order(self):
        """3.2V is 1S LiFePO4 and 1S Li-ion; LiFePO4 is registered first."""
        pack = auto_detect_battery_pack(3.2, priority_table=())
        self.assertEqual(pack.chemistry.name, "lifepo4")
        self.assertEqual(pack.cell_count, 1)

    def test_fallback_limited_to_ten_cells(self):
        """48V LiFePO4 (16S) is only reachable through the table."""
        self.assertEqual(auto_detect_battery_pack(52.0).cell_count, 16)
        with self.assertRaises(UndetectableVoltageError):
            auto_detect_battery_pack(52.0, priority_table=())

    def test_custom_profiles(self):
        profile = make_profile(1.0, 1.5, name="nimh")
        pack = auto_detect_battery_pack(7.0, priority_table=(), profiles=[profile])
        self.assertEqual(pack.chemistry.name, "nimh")
        self.assertEqual(pack.cell_count, 5)


class TestVoltageToPercent(unittest.TestCase):
    """Test state-of-charge interpolation."""

    def setUp(self):
        """12V LiFePO4 pack."""
        self.pack = BatteryPack(lookup_chemistry("lifepo4"), 4)

    def test_mid_range(self):
        """13.0V = 3.25V/cell, middle of the LiFePO4 plateau."""
        percent = voltage_to_percent(self.pack, 13.0)
        self.assertGreaterEqual(percent, 40)
        self.assertLessEqual(percent, 60)

    def test_li_ion_nominal(self):
        pack = BatteryPack(lookup_chemistry("li-ion"), 4)
        percent = pack.voltage_to_percent(14.8)
        self.assertGreaterEqual(percent, 40)
        self.assertLessEqual(percent, 60)

    def test_boundaries(self):
        cases = [
            (9.0, 0.0),     # below minimum
            (10.0, 0.0),    # at minimum
            (15.0, 100.0),  # above maximum
            (14.6, 100.0),  # at maximum
            (0.0, 0.0),
            (-5.0, 0.0),
        ]
        for voltage, expected in cases:
            with self.subTest(voltage=voltage):
                self.assertAlmostEqual(voltage_to_percent(self.pack, voltage), expected, delta=0.1)

    def test_scaled_window_maps_to_0_and_100(self):
        """For every chemistry and cell count, exact window edges give 0/100."""
        for profile in CHEMISTRY_DATABASE.values():
            for cells in range(1, 25):
                with self.subTest(chemistry=profile.name, cells=cells):
                    pack = BatteryPack(profile, cells)
                    self.assertEqual(voltage_to_percent(pack, pack.scaled_min_voltage), 0)
                    self.assertEqual(voltage_to_percent(pack, pack.scaled_max_voltage), 100)

    def test_clamps_outside_window(self):
        for profile in CHEMISTRY_DATABASE.values():
            pack = BatteryPack(profile, 3)
            self.assertEqual(voltage_to_percent(pack, pack.scaled_min_voltage - 1.0), 0)
            self.assertEqual(voltage_to_percent(pack, pack.scaled_max_voltage + 1.0), 100)

    def test_monotonic_increase(self):
        """SOC never decreases as voltage rises."""
        for profile in CHEMISTRY_DATABASE.values():
            pack = BatteryPack(profile, 4)
            voltages = np.linspace(pack.scaled_min_voltage - 1, pack.scaled_max_voltage + 1, 500)
            percents = [voltage_to_percent(pack, float(v)) for v in voltages]
            for prev, current in zip(percents, percents[1:]):
                self.assertLessEqual(prev, current, f"SOC decreased for {profile.name}")

    def test_result_in_range(self):
        for voltage in np.linspace(-10, 30, 100):
            percent = voltage_to_percent(self.pack, float(voltage))
            self.assertGreaterEqual(percent, 0.0)
            self.assertLessEqual(percent, 100.0)

    def test_custom_midpoint(self):
        """Two-point custom curve interpolates linearly: midpoint = 50%."""
        pack = BatteryPack(make_profile(3.4, 4.17), 1)
        self.assertAlmostEqual(voltage_to_percent(pack, 3.785), 50.0, places=6)

    def test_exact_curve_point(self):
        """3.25V/cell is a LiFePO4 curve sample at 50%."""
        self.assertAlmostEqual(voltage_to_percent(self.pack, 13.0), 50.0, places=6)

    def test_repeated_voltage_point(self):
        """A repeated curve voltage does not divide by zero."""
        profile = make_profile(3.0, 4.0, voltages=(3.0, 3.5, 3.5, 4.0), percents=(0, 40, 60, 100))
        pack = BatteryPack(profile, 1)
        self.assertAlmostEqual(voltage_to_percent(pack, 3.5), 60.0)
        self.assertAlmostEqual(voltage_to_percent(pack, 3.25), 20.0)

    def test_malformed_curve_rejected(self):
        mismatched = BatteryPack(make_profile(3.0, 4.2, voltages=(3.0, 4.2), percents=(0,)), 1)
        with self.assertRaises(MalformedCurveError):
            voltage_to_percent(mismatched, 3.5)

        empty = BatteryPack(make_profile(3.0, 4.2, voltages=(), percents=()), 1)
        with self.assertRaises(MalformedCurveError):
            voltage_to_percent(empty, 3.5)

    def test_pack_without_cells_rejected(self):
        pack = SimpleNamespace(chemistry=lookup_chemistry("li-ion"), cell_count=0)
        with self.assertRaises(InvalidCellCountError):
            voltage_to_percent(pack, 3.7)

    def test_pack_without_chemistry_rejected(self):
        pack = SimpleNamespace(chemistry=None, cell_count=2)
        with self.assertRaises(UnknownChemistryError):
            voltage_to_percent(pack, 7.4)


class TestGetBatteryPack(unittest.TestCase):
    """Test pack resolution from a configuration record."""

    def test_configured_chemistry_detects_cells(self):
        config = BatteryConfig(chemistry="lifepo4")
        self.assertEqual(get_battery_pack(config, 13.0).cell_count, 4)
        self.assertEqual(config.get_battery_pack(26.0).cell_count, 8)

    def test_manual_cell_count_used(self):
        """A configured cell count overrides the voltage estimate."""
        config = BatteryConfig(chemistry="li-ion", manual_cell_count=10)
        pack = get_battery_pack(config, 3.0)
        self.assertEqual(pack.chemistry.name, "li-ion")
        self.assertEqual(pack.cell_count, 10)

    def test_no_chemistry_auto_detects(self):
        pack = get_battery_pack(BatteryConfig(), 3.86)
        self.assertEqual(pack.chemistry.name, "li-ion")
        self.assertEqual(pack.cell_count, 1)

    def test_no_chemistry_undetectable(self):
        with self.assertRaises(UndetectableVoltageError):
            get_battery_pack(BatteryConfig(), 0.0)

    def test_invalid_chemistry(self):
        config = BatteryConfig(chemistry="invalid-chemistry")
        with self.assertRaises(UnknownChemistryError):
            get_battery_pack(config, 12.0)

    def test_custom_chemistry(self):
        config = BatteryConfig(chemistry="custom", custom_chemistry=make_profile(3.4, 4.17))
        pack = get_battery_pack(config, 3.785)
        self.assertEqual(pack.cell_count, 1)
        self.assertAlmostEqual(pack.voltage_to_percent(3.785), 50.0, places=6)

    def test_custom_without_profile(self):
        with self.assertRaises(UnknownChemistryError):
            get_battery_pack(BatteryConfig(chemistry="custom"), 12.0)

    def test_unusable_custom_profile(self):
        config = BatteryConfig(
            chemistry="custom",
            custom_chemistry=ChemistryProfile.from_dict({}),
        )
        with self.assertRaises(MalformedCurveError):
            get_battery_pack(config, 12.0)


if __name__ == "__main__":
    unittest.main()
