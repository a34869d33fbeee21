"""
Test suite for kinetic-impactor mission evaluation.

Tests cover:
- LaunchVehicle payload curve
- Mission feasibility verdicts
- Applying a kinetic impact
- Close-approach search
"""

import dataclasses
import math

import pytest

from spaceguard import (OrbitData, LaunchVehicle, Feasibility, MissionAssessment,
                        assess_mission, apply_kinetic_impact, closest_approach_distance)
from spaceguard.orbit_utils import calculate_deflection_delta_v_ecliptic


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
def heavy_lift():
    """Vehicle whose Gaussian fit covers the intercept C3 (about 1124 km²/s²)."""
    return LaunchVehicle(a=10000.0, b=0.0, c=5000.0, curve_fitting_max_c3=5000.0,
                         name="Heavy")


@pytest.fixture
def extended_vehicle():
    """Vehicle with a linear extension beyond its fitted range."""
    return LaunchVehicle(a=1000.0, b=0.0, c=10.0, curve_fitting_max_c3=50.0,
                         use_linear_interpolation=True, x0_c3=50.0, y0_mass=100.0,
                         x1_c3=100.0, y1_mass=0.0, linear_interp_max_c3=100.0)


class TestLaunchVehicle:
    """Test the deliverable mass curve."""

    def test_gaussian_peak(self, extended_vehicle):
        """Peak of the fit is at C3 = b."""
        assert extended_vehicle.deliverable_mass(0.0) == pytest.approx(1000.0)

    def test_gaussian_shape(self, extended_vehicle):
        """One width from the peak gives a/e."""
        assert extended_vehicle.deliverable_mass(10.0) == pytest.approx(1000.0 / math.e)

    def test_multiple_launches(self, extended_vehicle):
        """Mass scales with the number of launches."""
        single = extended_vehicle.deliverable_mass(5.0)
        assert extended_vehicle.deliverable_mass(5.0, num_launches=3) == pytest.approx(3.0 * single)

    def test_linear_segment(self, extended_vehicle):
        """Between the fit limit and the linear limit, mass is interpolated."""
        assert extended_vehicle.deliverable_mass(75.0) == pytest.approx(50.0)

    def test_beyond_capability(self, extended_vehicle):
        """Beyond the linear limit nothing is delivered."""
        assert extended_vehicle.deliverable_mass(120.0) == 0.0

    def test_no_linear_segment(self):
        """Without interpolation the curve ends at the fit limit."""
        vehicle = LaunchVehicle(a=1000.0, b=0.0, c=10.0, curve_fitting_max_c3=50.0)
        assert vehicle.deliverable_mass(60.0) == 0.0

    def test_never_negative(self):
        """Extrapolated negative masses are clamped to zero."""
        vehicle = LaunchVehicle(a=1000.0, b=0.0, c=10.0, curve_fitting_max_c3=50.0,
                                use_linear_interpolation=True, x0_c3=50.0, y0_mass=10.0,
                                x1_c3=60.0, y1_mass=0.0, linear_interp_max_c3=80.0)
        assert vehicle.deliverable_mass(70.0) == 0.0

    def test_max_c3_for_mass(self, extended_vehicle):
        """Inverse of the linear segment."""
        assert extended_vehicle.max_c3_for_mass(50.0) == pytest.approx(75.0)

    def test_flat_segment_rejected(self):
        """A flat linear segment has no inverse."""
        vehicle = LaunchVehicle(a=1.0, b=0.0, c=1.0, curve_fitting_max_c3=1.0,
                                x0_c3=1.0, y0_mass=5.0, x1_c3=2.0, y1_mass=5.0)
        with pytest.raises(ValueError, match="flat"):
            vehicle.max_c3_for_mass(5.0)

    def test_zero_width_rejected(self):
        """Gaussian width must be non-zero."""
        with pytest.raises(ValueError, match="non-zero"):
            LaunchVehicle(a=1.0, b=0.0, c=0.0, curve_fitting_max_c3=1.0)

    def test_degenerate_linear_segment_rejected(self):
        """Linear segment end points must differ in C3."""
        with pytest.raises(ValueError, match="distinct"):
            LaunchVehicle(a=1.0, b=0.0, c=1.0, curve_fitting_max_c3=1.0,
                          use_linear_interpolation=True, x0_c3=5.0, x1_c3=5.0)

    def test_frozen(self, heavy_lift):
        """Vehicles are immutable."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            heavy_lift.a = 1.0


class TestAssessMission:
    """Test mission feasibility verdicts."""

    def test_feasible(self, earth, asteroid, heavy_lift):
        """A capable vehicle gives a feasible mission with positive mass."""
        result = assess_mission(earth, asteroid, earth.epoch, LEAD_DAYS,
                                TRANSFER_DAYS, heavy_lift)
        assert isinstance(result, MissionAssessment)
        assert result.status is Feasibility.FEASIBLE
        assert result.feasible
        assert result.deliverable_mass > 0.0
        assert result.solution is not None
        assert result.deliverable_mass == pytest.approx(
            heavy_lift.deliverable_mass(result.solution.c3))

    def test_insufficient_energy(self, earth, asteroid):
        """A vehicle limited to tiny C3 cannot fly the intercept."""
        weak = LaunchVehicle(a=1000.0, b=0.0, c=10.0, curve_fitting_max_c3=1e-6)
        result = assess_mission(earth, asteroid, earth.epoch, LEAD_DAYS,
                                TRANSFER_DAYS, weak)
        assert result.status is Feasibility.INSUFFICIENT_ENERGY
        assert not result.feasible
        assert result.reason == 'insufficient launch energy'
        assert result.solution is not None

    def test_no_transfer(self, earth, asteroid, heavy_lift):
        """Impossible revolution counts are reported, not raised."""
        result = assess_mission(earth, asteroid, earth.epoch, LEAD_DAYS, 10.0,
                                heavy_lift, revolutions=5)
        assert result.status is Feasibility.NO_TRANSFER
        assert result.solution is None
        assert result.deliverable_mass == 0.0

    def test_launch_count_scales_mass(self, earth, asteroid, heavy_lift):
        """Pooling launches multiplies the deliverable mass."""
        one = assess_mission(earth, asteroid, earth.epoch, LEAD_DAYS,
                             TRANSFER_DAYS, heavy_lift)
        two = assess_mission(earth, asteroid, earth.epoch, LEAD_DAYS,
                             TRANSFER_DAYS, heavy_lift, num_launches=2)
        assert two.deliverable_mass == pytest.approx(2.0 * one.deliverable_mass)

    def test_orbits_not_modified(self, earth, asteroid, heavy_lift):
        """Assessment works on copies of the live orbits."""
        earth_before = earth.copy()
        assess_mission(earth, asteroid, earth.epoch + 50.0, LEAD_DAYS,
                       TRANSFER_DAYS, heavy_lift)
        assert earth == earth_before


class TestKineticImpact:
    """Test applying a deflection."""

    def test_delta_v_returned(self, earth, asteroid):
        """The applied delta-V matches the momentum-transfer formula."""
        deflection_epoch = asteroid.epoch + 100.0
        d_ref = asteroid.copy()
        i_ref = earth.copy()
        d_ref.to_epoch(deflection_epoch)
        i_ref.to_epoch(deflection_epoch)
        expected = calculate_deflection_delta_v_ecliptic(d_ref, i_ref, 1e10, 1e6)

        dv = apply_kinetic_impact(asteroid, earth, deflection_epoch, 1e10, 1e6)
        assert dv.isclose(expected)

    def test_epochs_restored(self, earth, asteroid):
        """Both orbits return to their original epochs."""
        epoch = asteroid.epoch
        apply_kinetic_impact(asteroid, earth, epoch + 100.0, 1e10, 1e6)
        assert asteroid.epoch == epoch
        assert earth.epoch == epoch

    def test_deflected_orbit_changes(self, earth, asteroid):
        """The deflected body's orbit is altered, the impactor's is not."""
        asteroid_ref = asteroid.copy()
        asteroid_ref.step(0.0)
        earth_ref = earth.copy()
        earth_ref.step(0.0)

        apply_kinetic_impact(asteroid, earth, asteroid.epoch + 100.0, 1e10, 1e6)

        assert not asteroid.position.isclose(asteroid_ref.position)
        assert earth.position.isclose(earth_ref.position, rtol=1e-9)

    def test_unbinding_impact_rejected(self, earth, asteroid):
        """An impact that would unbind the body is refused and both orbits are restored."""
        epoch = asteroid.epoch
        asteroid_ref = asteroid.copy()
        asteroid_ref.step(0.0)

        with pytest.raises(ValueError, match="bound ellipse"):
            apply_kinetic_impact(asteroid, earth, epoch + 100.0, 1.0, 1000.0)

        assert asteroid.epoch == epoch
        assert earth.epoch == epoch
        assert asteroid.position.isclose(asteroid_ref.position, rtol=1e-9)
        assert asteroid.velocity.isclose(asteroid_ref.velocity, rtol=1e-9)
        assert asteroid.a == pytest.approx(asteroid_ref.a)


class TestClosestApproach:
    """Test the close-approach search."""

    def test_same_orbit_zero(self, asteroid):
        """A body never separates from itself."""
        assert closest_approach_distance(asteroid, asteroid.copy(), 365.0) == 0.0

    def test_bounded_by_start(self, earth, asteroid):
        """The minimum is never above the starting separation."""
        start = (earth.position - asteroid.position).magnitude
        assert closest_approach_distance(earth, asteroid, 365.0, 73) <= start

    def test_orbits_not_moved(self, earth, asteroid):
        """The search steps copies only."""
        epoch = earth.epoch
        closest_approach_distance(earth, asteroid, 365.0)
        assert earth.epoch == epoch

    def test_invalid_step_count(self, earth, asteroid):
        """At least one step is required."""
        with pytest.raises(ValueError, match="num_steps"):
            closest_approach_distance(earth, asteroid, 365.0, num_steps=0)
