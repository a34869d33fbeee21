"""
Test suite for the reference orbit catalog and unit systems.
"""

import pytest

from spaceguard import UnitSystem, get_preset, available_presets
from spaceguard.presets import PRESETS, parse_unit_system


class TestUnitSystem:
    """Test unit system parsing and properties."""

    @pytest.mark.parametrize("text, expected", [
        ('km_s', UnitSystem.KM_S),
        ('KM_D', UnitSystem.KM_D),
        ('au_d', UnitSystem.AU_D),
    ])
    def test_parse_strings(self, text, expected):
        """Strings parse case-insensitively."""
        assert parse_unit_system(text) is expected

    def test_parse_enum_passthrough(self):
        """Enum values pass through unchanged."""
        assert parse_unit_system(UnitSystem.AU_D) is UnitSystem.AU_D

    def test_parse_unknown_rejected(self):
        """Unknown names raise ValueError."""
        with pytest.raises(ValueError, match="Unknown unit system"):
            parse_unit_system('m_s')

    def test_parse_wrong_type_rejected(self):
        """Non-string, non-enum values raise TypeError."""
        with pytest.raises(TypeError):
            parse_unit_system(3)

    def test_time_scaling(self):
        """Only KM_S uses seconds as its time unit."""
        assert UnitSystem.KM_S.time_units_per_day == 86400.0
        assert UnitSystem.KM_D.time_units_per_day == 1.0
        assert UnitSystem.AU_D.time_units_per_day == 1.0

    def test_unit_labels(self):
        """Length and time labels."""
        assert UnitSystem.AU_D.length_unit == 'AU'
        assert UnitSystem.KM_D.length_unit == 'km'
        assert UnitSystem.KM_S.time_unit == 's'
        assert UnitSystem.AU_D.time_unit == 'day'


class TestCatalog:
    """Test catalog lookup."""

    def test_available_presets(self):
        """Both reference bodies are listed."""
        assert set(available_presets()) == {'earth', 'pdc17a'}

    def test_every_body_has_every_unit_system(self):
        """Each body is published in all three unit systems."""
        for by_units in PRESETS.values():
            assert set(by_units) == set(UnitSystem)

    def test_lookup_case_insensitive(self):
        """Names are case-insensitive."""
        assert get_preset('EARTH') is get_preset('earth')

    def test_earth_km_s_values(self):
        """Earth elements in km/s."""
        earth = get_preset('earth', 'km_s')
        assert earth.epoch == 2460511.5
        assert earth.a == 1.494671667413757e+08
        assert earth.mu == 1.3271283864237474e+11

    def test_asteroid_au_d_values(self):
        """PDC 2017a elements in AU/day."""
        pdc = get_preset('pdc17a', UnitSystem.AU_D)
        assert pdc.a == 2.240646616555420
        assert pdc.ecc == 6.067306208299826e-01

    def test_radians(self):
        """Angles convert to radians in (i, Ω, ω, M, ν) order."""
        earth = get_preset('earth')
        i, raan, argp, M, nu = earth.radians()
        assert raan == pytest.approx(1.743237727544583e+02 * 3.141592653589793 / 180.0)
        assert nu == pytest.approx(1.940052537229808e+02 * 3.141592653589793 / 180.0)

    def test_unknown_name_rejected(self):
        """Unknown bodies raise ValueError."""
        with pytest.raises(ValueError, match="Unknown preset"):
            get_preset('apophis')

    def test_non_string_name_rejected(self):
        """Names must be strings."""
        with pytest.raises(TypeError):
            get_preset(None)
