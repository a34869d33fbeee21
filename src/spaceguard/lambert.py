'''Intercept transfer orbits between two bodies
LambertSolution record and the get_transfer_orbit service built on Gooding's solver'''

import logging
import math
import warnings
from dataclasses import dataclass, field
from typing import Optional, Union

from .config import config
from .gooding import lamrhg
from .orbit_data import OrbitData, OrbitSnapshot
from .orbit_utils import TWO_PI, GM_SUN, RAD2DEG
from .utils import Timer
from .vector3d import Vector3d

logger = logging.getLogger(__name__)

# days; reference epochs of the two orbits must agree to this
_EPOCH_MATCH_TOL = 1e-9


@dataclass(frozen=True)
class LambertSolution:
    """
    Result of a transfer-orbit solve.

    Attributes
    ----------
    revolutions : int
        Number of complete revolutions flown before arrival
    transfer_angle : float
        Angle swept from departure to arrival position [rad], in [0, 2π)
    planar_transfer_angle : float
        Same angle measured in the ecliptic (xy) plane [rad], in [0, 2π)
    v_infinity : float
        Departure hyperbolic excess speed, |ΔV_dep|
    c3 : float
        Characteristic launch energy, v_infinity²
    impact_speed : float
        Speed of the transfer vehicle relative to the arrival body
    departure_delta_v : Vector3d
        Transfer velocity minus departure body velocity
    arrival_delta_v : Vector3d
        Transfer arrival velocity minus arrival body velocity
    dot_product : float
        Impact-geometry diagnostic, kept in its historical form
        -a_x·v_x - a_y·v_y - a_z·v_z / |a| / |v| (a: arrival body velocity
        minus transfer velocity, v: arrival body velocity). Only the z term
        is normalized; see `impact_angle_cosine` for the normalized value.
    impact_angle_cosine : float
        Cosine of the angle between the impact velocity and the arrival
        body's velocity
    transfer_orbit : OrbitData
        Transfer arc anchored at the departure epoch
    """
    revolutions: int
    transfer_angle: float
    planar_transfer_angle: float
    v_infinity: float
    c3: float
    impact_speed: float
    departure_delta_v: Vector3d
    arrival_delta_v: Vector3d
    dot_product: float
    impact_angle_cosine: float
    transfer_orbit: OrbitData = field(compare=False)

    @property
    def departure_epoch(self):
        return self.transfer_orbit.epoch

    def to_string(self, in_degrees: bool = False):
        """Human-readable summary followed by the transfer orbit elements"""
        ta, pta = self.transfer_angle, self.planar_transfer_angle
        if in_degrees:
            ta, pta = ta * RAD2DEG, pta * RAD2DEG
        dv = self.arrival_delta_v
        return (f"nRevs\t{self.revolutions}\n"
                f"TA\t{ta:.5f}\n"
                f"pTA\t{pta:.5f}\n"
                f"Vinf\t{self.v_infinity:.5f}\n"
                f"C3\t{self.c3:.5f}\n"
                f"ArrDV\n{dv.x:.5E}\n{dv.y:.5E}\n{dv.z:.5E}\n"
                f"Vimp\t{self.impact_speed:.5f}\n"
                f"Vimp Dot Product\t{self.dot_product:.5f}\n"
                f"Transfer Orbit:\n{self.transfer_orbit.to_string(in_degrees)}")

    def __str__(self):
        return self.to_string(in_degrees=False)


@dataclass(frozen=True)
class _ArcCandidate:
    # one Lambert arc for a fixed revolution count
    revolutions: int
    transfer_angle: float
    departure_delta_v: Vector3d
    arrival_delta_v: Vector3d

    @property
    def c3(self):
        return self.departure_delta_v.sqr_magnitude


def _working_copy(orbit: Union[OrbitData, OrbitSnapshot]):
    if isinstance(orbit, OrbitSnapshot):
        return OrbitData.from_snapshot(orbit)
    if isinstance(orbit, OrbitData):
        return orbit.copy()
    raise TypeError(f"Expected OrbitData or OrbitSnapshot, got {type(orbit)}")


def _plane_normal(pos1, vel1, pos2):
    """Unit normal of the transfer plane and the transfer angle [0, 2π)"""
    r1, r2 = pos1.magnitude, pos2.magnitude
    cos_ta = min(1.0, max(-1.0, Vector3d.dot(pos1, pos2) / (r1 * r2)))
    ta = math.acos(cos_ta)

    h = Vector3d.cross(pos1, pos2)
    if h.magnitude == 0.0:
        # collinear endpoints leave the plane undefined, use the departure orbit plane
        h = Vector3d.cross(pos1, vel1)
    h_hat = h.normalized

    # retrograde arc: flip the plane and take the long way round
    if h_hat.z < 0.0:
        h_hat = -h_hat
        ta = TWO_PI - ta
    return h_hat, ta


def _solve_arc(revolutions, pos1, vel1, pos2, vel2, tof, mu):
    """
    Lambert arc for a fixed revolution count.

    Returns None if no arc exists. With two arcs, the one with the lower
    summed departure and arrival delta-V is kept.
    """
    r1, r2 = pos1.magnitude, pos2.magnitude
    h_hat, ta = _plane_normal(pos1, vel1, pos2)

    result = lamrhg(mu, r1, r2, ta + revolutions * TWO_PI, tof)
    if not result.has_solution:
        return None

    tan1 = Vector3d.cross(h_hat, pos1) / r1
    tan2 = Vector3d.cross(h_hat, pos2) / r2
    rad1 = pos1 / r1
    rad2 = pos2 / r2

    best = None
    for sol in result.solutions:
        dep_dv = sol.radial_1 * rad1 + sol.tangential_1 * tan1 - vel1
        arr_dv = vel2 - sol.radial_2 * rad2 - sol.tangential_2 * tan2
        cost = dep_dv.magnitude + arr_dv.magnitude
        if best is None or cost < best[0]:
            best = (cost, _ArcCandidate(revolutions, ta, dep_dv, arr_dv))
    return best[1]


def _c3_or_inf(candidate):
    return math.inf if candidate is None else candidate.c3


def get_transfer_orbit(departure: Union[OrbitData, OrbitSnapshot],
                       arrival: Union[OrbitData, OrbitSnapshot],
                       lead_days: float, transfer_days: float,
                       revolutions: Optional[int] = None,
                       mu: float = GM_SUN) -> Optional[LambertSolution]:
    """
    Compute the intercept transfer from one body to another.

    Both orbits are expected at the same reference (impact) epoch. The
    departure body is stepped back by lead_days + transfer_days and the
    arrival body by lead_days; the transfer arc connects those two
    positions in transfer_days. The inputs are never modified.

    Parameters
    ----------
    departure, arrival : OrbitData or OrbitSnapshot
        Orbits of the launching body and the target at the reference epoch
    lead_days : float
        Days between arrival at the target and the reference epoch
    transfer_days : float
        Time of flight [days], > 0
    revolutions : int, optional
        Fixed revolution count. If None, counts are searched upward from 0
        while C3 keeps improving and the last improving count is used.
    mu : float, optional
        Gravitational parameter for the transfer arc (default GM_SUN).
        Must be in the same units as the orbits' state vectors.

    Returns
    -------
    LambertSolution or None
        None if no transfer exists for the requested revolution count, or
        if the resulting arc is not a bound ellipse.

    Raises
    ------
    ValueError
        If the orbits are not at the same epoch or not in the same units,
        if transfer_days <= 0, or if revolutions < 0
    TypeError
        If an orbit is neither OrbitData nor OrbitSnapshot

    Examples
    --------
    >>> earth = OrbitData.from_preset('earth')
    >>> asteroid = OrbitData.from_preset('pdc17a')
    >>> asteroid.to_epoch(earth.epoch)
    >>> solution = get_transfer_orbit(earth, asteroid, 1280, 500)
    >>> solution.c3 > 0
    True
    """
    if transfer_days <= 0:
        raise ValueError(f"Transfer time must be positive, got {transfer_days}")
    if revolutions is not None and revolutions < 0:
        raise ValueError(f"Revolution count must be non-negative, got {revolutions}")

    dep = _working_copy(departure)
    arr = _working_copy(arrival)
    if abs(dep.epoch - arr.epoch) > _EPOCH_MATCH_TOL:
        raise ValueError(f"Departure and arrival orbits must share the reference epoch, "
                         f"got {dep.epoch} and {arr.epoch}")
    if dep.units is not arr.units:
        raise ValueError(f"Departure and arrival orbits must use the same units, "
                         f"got {dep.units.name} and {arr.units.name}")
    dep.step(-(lead_days + transfer_days))
    arr.step(-lead_days)

    pos1, vel1 = dep.position, dep.velocity
    pos2, vel2 = arr.position, arr.velocity
    tof = transfer_days * dep.units.time_units_per_day

    if revolutions is None:
        with Timer("Revolution search", logger=logger):
            best = _search_revolutions(pos1, vel1, pos2, vel2, tof, mu)
    else:
        best = _solve_arc(revolutions, pos1, vel1, pos2, vel2, tof, mu)
        logger.debug("Rev #%d: C3 = %s", revolutions, _c3_or_inf(best))

    if best is None:
        return None

    vel_transfer = vel1 + best.departure_delta_v
    energy = vel_transfer.sqr_magnitude / 2.0 - mu / pos1.magnitude
    if energy >= 0.0:
        warnings.warn(
            f"Transfer arc with {best.revolutions} revolution(s) is not a bound "
            f"ellipse (specific energy {energy:.6e}), no transfer orbit returned",
            RuntimeWarning, stacklevel=2)
        return None
    transfer_orbit = OrbitData.from_state(dep.epoch, pos1, vel_transfer, mu, units=dep.units)

    # planar transfer angle in the ecliptic
    pta = math.atan2(pos2.y, pos2.x) - math.atan2(pos1.y, pos1.x)
    if pta < 0.0:
        pta += TWO_PI

    a = best.arrival_delta_v
    v_mag = vel2.magnitude
    a_mag = a.magnitude
    if a_mag > 0.0 and v_mag > 0.0:
        dot_product = -a.x * vel2.x - a.y * vel2.y - a.z * vel2.z / a_mag / v_mag
        impact_cos = -Vector3d.dot(a, vel2) / (a_mag * v_mag)
    else:
        dot_product = impact_cos = math.nan

    v_inf = best.departure_delta_v.magnitude
    return LambertSolution(
        revolutions=best.revolutions,
        transfer_angle=best.transfer_angle,
        planar_transfer_angle=pta,
        v_infinity=v_inf,
        c3=v_inf * v_inf,
        impact_speed=a_mag,
        departure_delta_v=best.departure_delta_v,
        arrival_delta_v=-a,
        dot_product=dot_product,
        impact_angle_cosine=impact_cos,
        transfer_orbit=transfer_orbit)


def _search_revolutions(pos1, vel1, pos2, vel2, tof, mu):
    """
    Hill-climb over revolution counts on C3.

    m = 0 and m = 1 are evaluated first; m then increases while C3 strictly
    improves, up to config.LAMBERT_MAX_REVOLUTIONS. Counts without a
    solution score C3 = inf.
    """
    previous = _solve_arc(0, pos1, vel1, pos2, vel2, tof, mu)
    logger.debug("Rev #0: C3 = %s", _c3_or_inf(previous))
    m = 1
    current = _solve_arc(m, pos1, vel1, pos2, vel2, tof, mu)
    logger.debug("Rev #1: C3 = %s", _c3_or_inf(current))

    while _c3_or_inf(current) < _c3_or_inf(previous):
        if m >= config.LAMBERT_MAX_REVOLUTIONS:
            return current
        previous = current
        m += 1
        current = _solve_arc(m, pos1, vel1, pos2, vel2, tof, mu)
        logger.debug("Rev #%d: C3 = %s", m, _c3_or_inf(current))

    # C3 stopped improving at m, the previous count is the best
    return previous
