'''Kinetic-impactor mission evaluation
Launch vehicle performance, mission feasibility, impact application and
close-approach search'''

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .lambert import LambertSolution, get_transfer_orbit
from .orbit_data import OrbitData
from .orbit_utils import GM_SUN, calculate_deflection_delta_v_ecliptic
from .vector3d import Vector3d

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LaunchVehicle:
    """
    Deliverable mass versus launch energy for one launch vehicle.

    Up to `curve_fitting_max_c3` the payload follows a Gaussian fit
    m(C3) = a·exp(-((C3 - b) / c)²). With linear interpolation enabled the
    curve continues as a straight line through (x0_c3, y0_mass) and
    (x1_c3, y1_mass) up to `linear_interp_max_c3`. Beyond the valid range
    nothing can be delivered.

    Attributes
    ----------
    a, b, c : float
        Gaussian fit coefficients (a in kg, b and c in km²/s²)
    curve_fitting_max_c3 : float
        Upper C3 limit of the Gaussian fit [km²/s²]
    use_linear_interpolation : bool
        Extend the curve with the linear segment
    x0_c3, y0_mass, x1_c3, y1_mass : float
        End points of the linear segment
    linear_interp_max_c3 : float
        Upper C3 limit of the linear segment
    name : str, optional
    """
    a: float
    b: float
    c: float
    curve_fitting_max_c3: float
    use_linear_interpolation: bool = False
    x0_c3: float = 0.0
    y0_mass: float = 0.0
    x1_c3: float = 0.0
    y1_mass: float = 0.0
    linear_interp_max_c3: float = 0.0
    name: Optional[str] = None

    def __post_init__(self):
        if self.c == 0:
            raise ValueError("Gaussian width c must be non-zero")
        if self.use_linear_interpolation and self.x1_c3 == self.x0_c3:
            raise ValueError("Linear segment needs distinct C3 end points")

    def deliverable_mass(self, c3: float, num_launches: int = 1) -> float:
        """
        Payload mass [kg] deliverable to a departure energy C3.

        Parameters
        ----------
        c3 : float
            Characteristic launch energy [km²/s²]
        num_launches : int, optional
            Number of launches pooled on the same trajectory (default 1)

        Returns
        -------
        float
            Deliverable mass, never negative
        """
        if c3 <= self.curve_fitting_max_c3:
            mass = self.a * math.exp(-((c3 - self.b) / self.c) ** 2)
        elif self.use_linear_interpolation and c3 <= self.linear_interp_max_c3:
            t = (c3 - self.x0_c3) / (self.x1_c3 - self.x0_c3)
            mass = (1.0 - t) * self.y0_mass + t * self.y1_mass
        else:
            mass = 0.0

        mass *= num_launches
        return mass if mass > 0.0 else 0.0

    def max_c3_for_mass(self, mass: float) -> float:
        """C3 at which the linear segment delivers exactly `mass` [kg]."""
        if self.y1_mass == self.y0_mass:
            raise ValueError("Linear segment is flat, C3 is not defined by mass")
        t = (mass - self.y0_mass) / (self.y1_mass - self.y0_mass)
        return (1.0 - t) * self.x0_c3 + t * self.x1_c3


class Feasibility(Enum):
    FEASIBLE = 'feasible'
    NO_TRANSFER = 'no transfer found'
    NEGATIVE_C3 = 'transfer requires negative C3'
    INSUFFICIENT_ENERGY = 'insufficient launch energy'


@dataclass(frozen=True)
class MissionAssessment:
    """Feasibility verdict for one kinetic-impactor mission"""
    status: Feasibility
    solution: Optional[LambertSolution] = None
    deliverable_mass: float = 0.0

    @property
    def feasible(self):
        return self.status is Feasibility.FEASIBLE

    @property
    def reason(self):
        return self.status.value


def assess_mission(departure: OrbitData, arrival: OrbitData, impact_epoch: float,
                   lead_days: float, transfer_days: float, vehicle: LaunchVehicle,
                   num_launches: int = 1, revolutions: Optional[int] = None,
                   mu: float = GM_SUN) -> MissionAssessment:
    """
    Decide whether a launch vehicle can fly the intercept.

    Copies of both orbits are moved to `impact_epoch`; the transfer departs
    at impact_epoch - lead_days - transfer_days and reaches the target at
    impact_epoch - lead_days. Infeasible missions are reported through
    the returned status, never raised.

    Parameters
    ----------
    departure, arrival : OrbitData
        Live orbits of the launching body and the target (not modified)
    impact_epoch : float
        Predicted impact epoch [JDN]
    lead_days, transfer_days : float
        Deflection lead time and time of flight [days]
    vehicle : LaunchVehicle
    num_launches : int, optional
        Number of launches (default 1)
    revolutions : int, optional
        Fixed revolution count, searched if None
    mu : float, optional
        Gravitational parameter of the transfer (default GM_SUN)

    Returns
    -------
    MissionAssessment
    """
    dep = departure.copy()
    arr = arrival.copy()
    dep.to_epoch(impact_epoch)
    arr.to_epoch(impact_epoch)

    solution = get_transfer_orbit(dep, arr, lead_days, transfer_days, revolutions, mu)
    if solution is None:
        logger.debug("No Lambert solution found for D = %s, TOF = %s",
                     lead_days, transfer_days)
        return MissionAssessment(Feasibility.NO_TRANSFER)
    if solution.c3 <= 0.0:
        return MissionAssessment(Feasibility.NEGATIVE_C3, solution)

    mass = vehicle.deliverable_mass(solution.c3, num_launches)
    if mass <= 0.0:
        logger.debug("Launch C3 = %.4f beyond vehicle capability", solution.c3)
        return MissionAssessment(Feasibility.INSUFFICIENT_ENERGY, solution)

    logger.debug("Launch C3 = %.4f, impact mass = %.4f, impact speed = %.4e",
                 solution.c3, mass, solution.impact_speed)
    return MissionAssessment(Feasibility.FEASIBLE, solution, mass)


def apply_kinetic_impact(deflected: OrbitData, impactor: OrbitData,
                         deflection_epoch: float, mass_deflected: float,
                         mass_impactor: float, beta: float = 1.0) -> Vector3d:
    """
    Apply a kinetic impact to the deflected body's orbit in place.

    Both orbits are moved to `deflection_epoch`, the momentum-transfer
    delta-V is added to the deflected body's velocity, and both are
    returned to their original epochs.

    Returns
    -------
    Vector3d
        The applied delta-V

    Raises
    ------
    ValueError
        If the impact would leave the deflected body unbound. Both orbits
        are still returned to their original epochs, undeflected.
    """
    original_deflected = deflected.epoch
    original_impactor = impactor.epoch

    deflected.to_epoch(deflection_epoch)
    impactor.to_epoch(deflection_epoch)
    try:
        delta_v = calculate_deflection_delta_v_ecliptic(
            deflected, impactor, mass_deflected, mass_impactor, beta)
        deflected.velocity = deflected.velocity + delta_v
    finally:
        deflected.to_epoch(original_deflected)
        impactor.to_epoch(original_impactor)
    logger.debug("Delta V: %.5e %.5e %.5e", delta_v.x, delta_v.y, delta_v.z)
    return delta_v


def closest_approach_distance(orbit1: OrbitData, orbit2: OrbitData,
                              interval_days: float, num_steps: int = 30) -> float:
    """
    Minimum separation of two bodies over the next `interval_days`.

    Separations are sampled at num_steps + 1 evenly spaced instants from
    the current epoch to the end of the interval, on copies of the orbits.
    """
    if num_steps < 1:
        raise ValueError(f"num_steps must be at least 1, got {num_steps}")
    o1 = orbit1.copy()
    o2 = orbit2.copy()
    step = interval_days / num_steps

    min_distance = Vector3d.distance(o1.position, o2.position)
    for _ in range(num_steps):
        o1.step(step)
        o2.step(step)
        min_distance = min(min_distance, Vector3d.distance(o1.position, o2.position))
    return min_distance
