"""
Test suite for the intercept transfer service.

Scenario: Earth and the PDC 2017a impactor at their common catalog epoch,
taken as the impact epoch. The transfer departs 1780 days before impact
and arrives 1280 days before impact after a 500-day flight.
"""

import math

import pytest

from spaceguard import OrbitData, LambertSolution, get_transfer_orbit
from spaceguard.orbit_utils import AU2KM, DAY2SEC, TWO_PI


# =============================================================================
# Test Configuration
# =============================================================================

LEAD_DAYS = 1280.0
TRANSFER_DAYS = 500.0


@pytest.fixture
def earth():
    return OrbitData.from_preset('earth')


@pytest.fixture
def asteroid(earth):
    orbit = OrbitData.from_preset('pdc17a')
    orbit.to_epoch(earth.epoch)
    return orbit


@pytest.fixture
def solution(earth, asteroid):
    return get_transfer_orbit(earth, asteroid, LEAD_DAYS, TRANSFER_DAYS)


class TestTransferSolution:
    """Test the reference intercept."""

    def test_solution_found(self, solution):
        """A bound transfer with positive launch energy exists."""
        assert isinstance(solution, LambertSolution)
        assert math.isfinite(solution.c3)
        assert solution.c3 > 0.0
        assert solution.c3 == pytest.approx(solution.v_infinity ** 2)

    def test_departure_epoch(self, earth, solution):
        """The transfer orbit is anchored at departure."""
        assert solution.departure_epoch == earth.epoch - LEAD_DAYS - TRANSFER_DAYS
        assert solution.transfer_orbit.epoch == solution.departure_epoch

    def test_arc_reaches_asteroid(self, asteroid, solution):
        """Flying the transfer orbit for the transfer time reaches the target."""
        transfer = solution.transfer_orbit.copy()
        transfer.step(TRANSFER_DAYS)
        target = asteroid.copy()
        target.step(-LEAD_DAYS)
        miss = (transfer.position - target.position).magnitude
        assert miss < 1e-6 * target.position.magnitude

    def test_departure_delta_v(self, earth, solution):
        """Transfer velocity is Earth's velocity plus the departure delta-V."""
        departure = earth.copy()
        departure.step(-(LEAD_DAYS + TRANSFER_DAYS))
        expected = departure.velocity + solution.departure_delta_v
        assert solution.transfer_orbit.velocity.isclose(expected)
        assert solution.transfer_orbit.position.isclose(departure.position)

    def test_arrival_delta_v(self, asteroid, solution):
        """Arrival delta-V is the transfer velocity relative to the target."""
        transfer = solution.transfer_orbit.copy()
        transfer.step(TRANSFER_DAYS)
        target = asteroid.copy()
        target.step(-LEAD_DAYS)
        relative = transfer.velocity - target.velocity
        assert relative.isclose(solution.arrival_delta_v, rtol=1e-6, atol=1e-6)
        assert solution.impact_speed == pytest.approx(relative.magnitude, rel=1e-6)

    def test_angles_in_range(self, solution):
        """Transfer angles lie in [0, 2π)."""
        assert 0.0 <= solution.transfer_angle < TWO_PI
        assert 0.0 <= solution.planar_transfer_angle < TWO_PI

    def test_impact_angle_cosine(self, solution):
        """The normalized impact cosine is a valid cosine."""
        assert -1.0 <= solution.impact_angle_cosine <= 1.0

    def test_to_string(self, solution):
        """Summary lists the launch energy and the transfer elements."""
        text = solution.to_string(in_degrees=True)
        assert f"nRevs\t{solution.revolutions}" in text
        assert "C3\t" in text
        assert "Transfer Orbit:" in text
        assert str(solution) == solution.to_string()


class TestInputs:
    """Test input handling."""

    def test_inputs_not_modified(self, earth, asteroid):
        """Live orbits are never stepped in place."""
        earth_before = earth.copy()
        asteroid_before = asteroid.copy()
        get_transfer_orbit(earth, asteroid, LEAD_DAYS, TRANSFER_DAYS)
        assert earth == earth_before
        assert asteroid == asteroid_before

    def test_snapshots_accepted(self, earth, asteroid, solution):
        """Frozen snapshots give the same transfer."""
        from_snapshots = get_transfer_orbit(earth.snapshot(), asteroid.snapshot(),
                                            LEAD_DAYS, TRANSFER_DAYS)
        assert from_snapshots.c3 == pytest.approx(solution.c3, rel=1e-12)
        assert from_snapshots.revolutions == solution.revolutions

    def test_epoch_mismatch_rejected(self, earth, asteroid):
        """Both orbits must be given at the same reference epoch."""
        asteroid.to_epoch(earth.epoch + 200.0)
        with pytest.raises(ValueError, match="reference epoch"):
            get_transfer_orbit(earth, asteroid, LEAD_DAYS, TRANSFER_DAYS)

    def test_unit_mismatch_rejected(self, earth):
        """Both orbits must be in the same unit system."""
        asteroid_au = OrbitData.from_preset('pdc17a', 'au_d')
        asteroid_au.to_epoch(earth.epoch)
        with pytest.raises(ValueError, match="same units"):
            get_transfer_orbit(earth, asteroid_au, LEAD_DAYS, TRANSFER_DAYS)

    def test_wrong_type_rejected(self, asteroid):
        """Only orbits and snapshots are accepted."""
        with pytest.raises(TypeError, match="OrbitData or OrbitSnapshot"):
            get_transfer_orbit("earth", asteroid, LEAD_DAYS, TRANSFER_DAYS)

    def test_non_positive_transfer_time(self, earth, asteroid):
        """Transfer time must be positive."""
        with pytest.raises(ValueError, match="Transfer time"):
            get_transfer_orbit(earth, asteroid, LEAD_DAYS, 0.0)

    def test_negative_revolutions(self, earth, asteroid):
        """Revolution counts cannot be negative."""
        with pytest.raises(ValueError, match="Revolution count"):
            get_transfer_orbit(earth, asteroid, LEAD_DAYS, TRANSFER_DAYS, revolutions=-1)

    def test_au_day_units(self, earth, asteroid):
        """AU/day orbits give the same launch energy after unit conversion."""
        km_s = get_transfer_orbit(earth, asteroid, LEAD_DAYS, TRANSFER_DAYS, revolutions=0)

        earth_au = OrbitData.from_preset('earth', 'au_d')
        asteroid_au = OrbitData.from_preset('pdc17a', 'au_d')
        earth_au.to_epoch(earth.epoch)
        asteroid_au.to_epoch(earth.epoch)
        au_d = get_transfer_orbit(earth_au, asteroid_au, LEAD_DAYS, TRANSFER_DAYS,
                                  revolutions=0, mu=asteroid_au.mu)

        c3_km_s = au_d.c3 * (AU2KM / DAY2SEC) ** 2
        assert c3_km_s == pytest.approx(km_s.c3, rel=0.1)


class TestRevolutionSearch:
    """Test the automatic revolution count search."""

    def test_fixed_revolution_count_used(self, earth, asteroid):
        """An explicit count is honored."""
        fixed = get_transfer_orbit(earth, asteroid, LEAD_DAYS, TRANSFER_DAYS, revolutions=0)
        assert fixed.revolutions == 0

    def test_search_not_worse_than_direct(self, earth, asteroid, solution):
        """The searched transfer never needs more energy than the direct one."""
        direct = get_transfer_orbit(earth, asteroid, LEAD_DAYS, TRANSFER_DAYS, revolutions=0)
        assert solution.c3 <= direct.c3 * (1.0 + 1e-12)

    def test_search_stops_at_local_minimum(self, earth, asteroid, solution):
        """One more revolution does not lower C3."""
        next_rev = get_transfer_orbit(earth, asteroid, LEAD_DAYS, TRANSFER_DAYS,
                                      revolutions=solution.revolutions + 1)
        assert next_rev is None or next_rev.c3 >= solution.c3

    def test_search_beats_previous_count(self, earth, asteroid, solution):
        """One revolution fewer does not lower C3 either."""
        if solution.revolutions == 0:
            pytest.skip("direct transfer chosen, no lower count to compare")
        prev_rev = get_transfer_orbit(earth, asteroid, LEAD_DAYS, TRANSFER_DAYS,
                                      revolutions=solution.revolutions - 1)
        assert prev_rev is None or prev_rev.c3 >= solution.c3

    def test_infeasible_revolution_count(self, earth, asteroid):
        """Too many revolutions for the flight time give no transfer."""
        assert get_transfer_orbit(earth, asteroid, LEAD_DAYS, 10.0, revolutions=5) is None

    def test_unbound_transfer_warns(self, earth, asteroid):
        """A hyperbolic arc is reported and discarded."""
        with pytest.warns(RuntimeWarning, match="not a bound"):
            result = get_transfer_orbit(earth, asteroid, LEAD_DAYS, 1.0, revolutions=0)
        assert result is None
