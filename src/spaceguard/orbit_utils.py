'''Physical constants and stateless helpers for two-body orbital mechanics
Angle and anomaly conversions, Kepler's equation, Julian dates,
kinetic-impactor deflection and frame transforms'''

import math
import warnings
from datetime import datetime

import numpy as np

from .config import config
from .utils import convergence_warning
from .vector3d import Vector3d

# ========== CONSTANTS ==========
PI = math.pi
TWO_PI = 2.0 * PI

J2000 = 2451545.0                       # Julian Day Number of the J2000 epoch

G = 6.67408e-20                         # km^3 kg^-1 s^-2
GM_EARTH_SUN = 1.3271283864237474e+11   # km^3 s^-2, Sun as seen from Earth's ephemeris
GM_ASTEROID_SUN = 1.32712440041930e+11  # km^3 s^-2, Sun as seen from asteroid ephemeris
GM_EARTH = 3.986004418e+05              # km^3 s^-2
GM_SUN = 1.32712440018e+11              # km^3 s^-2

MASS_SUN = 1.988919445342813e+30        # kg
MASS_EARTH = 5.974057670868442e+24      # kg

RADIUS_EARTH = 6.3781e+03               # km
RADIUS_SUN = 6.95700e+05                # km
LUNAR_DIST = 384402.0                   # km
EARTH_CAPTURE_DIST = RADIUS_EARTH + 1.5 * RADIUS_EARTH  # km

KM2ER = 1.0 / RADIUS_EARTH
AU2KM = 149597870.700
KM2AU = 1.0 / AU2KM
DAY2SEC = 86400.0
SEC2DAY = 1.0 / DAY2SEC
DEG2RAD = TWO_PI / 360.0
RAD2DEG = 1.0 / DEG2RAD

# Julian-date algorithm lower validity bound
_JDN_MIN_VALID = 4480

_MONTH_NAMES = ("January", "February", "March", "April", "May", "June", "July",
                "August", "September", "October", "November", "December")


# ========== ANGLES AND ANOMALIES ==========
def normalize_angle(value, min_value=0.0, max_value=TWO_PI):
    """
    Wrap an angle into the half-open interval [min_value, max_value).

    Parameters
    ----------
    value : float
        Angle [rad]
    min_value, max_value : float, optional
        Interval bounds, typically (0, 2π) or (-π, π). Default (0, 2π).

    Returns
    -------
    float
        Equivalent angle in [min_value, max_value). If the interval is
        empty, min_value is returned.
    """
    span = max_value - min_value
    if abs(span) < np.finfo(float).tiny:
        return min_value
    wrapped = (value - min_value) % span + min_value
    # float modulo can round up onto the open bound
    if wrapped >= max_value:
        wrapped = min_value
    return wrapped


def solve_kepler_eq_for_eccentric_anom(ecc, mean_anomaly, tol=None, max_iter=None):
    """
    Solve Kepler's equation M = E - e·sin(E) for the eccentric anomaly.

    Newton iteration started from E0 = M + e·sin(M), with M first wrapped
    into [-π, π). If the iteration cap is reached, a ConvergenceWarning is
    issued and the current best estimate is returned.

    Parameters
    ----------
    ecc : float
        Eccentricity, 0 <= ecc < 1
    mean_anomaly : float
        Mean anomaly [rad]
    tol : float, optional
        Convergence tolerance on |ΔE| [rad]. Default: config.KEPLER_TOL
    max_iter : int, optional
        Iteration cap. Default: config.KEPLER_MAX_ITER

    Returns
    -------
    float
        Eccentric anomaly [rad], consistent with the wrapped mean anomaly

    Notes
    -----
    The wrap is half-open, so M = π comes back as E = -π and recomputing
    M' = E - e·sin(E) gives -π, the same angle on the circle.
    """
    tol = config.KEPLER_TOL if tol is None else tol
    max_iter = config.KEPLER_MAX_ITER if max_iter is None else max_iter

    M = normalize_angle(mean_anomaly, -PI, PI)
    E = M + ecc * math.sin(M)
    for _ in range(max_iter):
        delta_E = (M - (E - ecc * math.sin(E))) / (1.0 - ecc * math.cos(E))
        E += delta_E
        if abs(delta_E) <= tol:
            return E

    convergence_warning(
        f"Kepler equation failed to converge: E = {E:.5f}, n = {max_iter}")
    return E


def mean_anom_to_eccentric_anom(mean_anomaly, ecc, tol=1e-3, max_iter=100):
    """
    Coarse mean-to-eccentric anomaly conversion.

    Uses the second-order starter E0 = M + e·sin(M)·(1 + e·cos(M)) and a
    loose default tolerance, suited to display purposes. Use
    `solve_kepler_eq_for_eccentric_anom` where precision matters.
    """
    E0 = mean_anomaly + ecc * math.sin(mean_anomaly) * (1.0 + ecc * math.cos(mean_anomaly))
    E1 = E0
    for _ in range(max_iter):
        E1 = E0 - (E0 - ecc * math.sin(E0) - mean_anomaly) / (1.0 - ecc * math.cos(E0))
        if abs(E1 - E0) < tol:
            break
        E0 = E1
    return E1


def true_anom_to_eccentric_anom(true_anomaly, ecc):
    """Eccentric anomaly [rad] in (-π, π] for a given true anomaly."""
    half = 0.5 * true_anomaly
    return 2.0 * math.atan2(math.sqrt(1.0 - ecc) * math.sin(half),
                            math.sqrt(1.0 + ecc) * math.cos(half))


def eccentric_anom_to_true_anom(eccentric_anomaly, ecc):
    """True anomaly [rad] in (-π, π] for a given eccentric anomaly."""
    half = 0.5 * eccentric_anomaly
    return 2.0 * math.atan2(math.sqrt(1.0 + ecc) * math.sin(half),
                            math.sqrt(1.0 - ecc) * math.cos(half))


def eccentric_anom_to_mean_anom(eccentric_anomaly, ecc):
    """Kepler's equation, M = E - e·sin(E)."""
    return eccentric_anomaly - ecc * math.sin(eccentric_anomaly)


# ========== DEFLECTION ==========
def calculate_deflection_delta_v_ecliptic(deflected, impactor, mass_deflected,
                                          mass_impactor, beta=1.0):
    """
    Delta-V imparted to a body by a perfectly inelastic kinetic impact.

    ΔV = (v_impactor - v_deflected) · β · m_impactor / m_deflected

    Parameters
    ----------
    deflected, impactor : OrbitData
        Orbits of the target body and the impactor at the impact epoch
    mass_deflected, mass_impactor : float
        Masses [kg]
    beta : float, optional
        Momentum enhancement factor (default 1.0, no ejecta recoil)

    Returns
    -------
    Vector3d
        Delta-V in the ecliptic frame, velocity units of the orbits
    """
    if mass_deflected <= 0:
        raise ValueError(f"Deflected mass must be positive, got {mass_deflected}")
    v_rel = impactor.velocity - deflected.velocity
    return v_rel * (beta * mass_impactor / mass_deflected)


def calculate_deflection_delta_v_acn(deflected, impactor, mass_deflected,
                                     mass_impactor, beta=1.0):
    """
    Deflection delta-V expressed in the deflected body's along-track,
    cross-track, normal frame.

    Along-track is the velocity direction, normal is the orbital angular
    momentum direction and cross-track completes the right-handed set
    (normal × along).

    Returns
    -------
    Vector3d
        (along, cross, normal) components
    """
    delta_v = calculate_deflection_delta_v_ecliptic(
        deflected, impactor, mass_deflected, mass_impactor, beta)

    along = deflected.velocity.normalized
    normal = Vector3d.cross(deflected.position, deflected.velocity).normalized
    cross = Vector3d.cross(normal, along)

    return Vector3d(Vector3d.dot(delta_v, along),
                    Vector3d.dot(delta_v, cross),
                    Vector3d.dot(delta_v, normal))


# ========== ORBIT GEOMETRY ==========
def tisserand_parameter(a, ecc, i):
    """
    Tisserand parameter with respect to a perturber on a unit circular orbit.

    `a` must be expressed in units of the perturber's semi-major axis.
    """
    return 1.0 / a + 2.0 * math.sqrt(a * (1.0 - ecc * ecc)) * math.cos(i)


def get_transform_to_ecliptic(i, raan, argp, true_anomaly=None):
    """
    Perifocal (or orbital-plane) to ecliptic rotation, reduced to 3×2.

    Parameters
    ----------
    i, raan, argp : float
        Inclination, longitude of ascending node, argument of perifocus [rad]
    true_anomaly : float, optional
        If given, the in-plane axes are rotated to the radial direction
        (argument of latitude ω + ν instead of ω).

    Returns
    -------
    np.ndarray
        Shape (3, 2) matrix mapping in-plane (x, y) to ecliptic (X, Y, Z)
    """
    u = argp if true_anomaly is None else argp + true_anomaly
    sin_i, cos_i = math.sin(i), math.cos(i)
    sin_om, cos_om = math.sin(raan), math.cos(raan)
    sin_w, cos_w = math.sin(u), math.cos(u)

    return np.array([
        [cos_w * cos_om - sin_w * sin_om * cos_i, -sin_w * cos_om - cos_w * sin_om * cos_i],
        [cos_w * sin_om + sin_w * cos_om * cos_i, -sin_w * sin_om + cos_w * cos_om * cos_i],
        [sin_w * sin_i,                            cos_w * sin_i],
    ])


def apply_transform(x, y, transform):
    """
    Map in-plane coordinates through a 3×2 transform.

    Raises
    ------
    ValueError
        If `transform` is not 3×2.
    """
    T = np.asarray(transform, dtype=float)
    if T.shape != (3, 2):
        raise ValueError(f"Transformation matrix must be 3x2, got {T.shape}")
    return Vector3d.from_array(T @ np.array([x, y]))


# ========== TIME ==========
def _jdn_to_calendar(jdn):
    #Gregorian year, month, day from a Julian Day Number
    if jdn < _JDN_MIN_VALID:
        warnings.warn(
            f"Julian date conversion only valid after JDN {_JDN_MIN_VALID}, got {jdn}",
            UserWarning, stacklevel=3)

    g = math.floor(math.floor((jdn - 4479.5) / 36524.25) * 0.75 + 0.5) - 37
    N = jdn + g
    year = math.floor(N / 365.25) - 4712
    day_of_year = math.floor(math.fmod(N - 59.25, 365.25))
    month = (math.floor((day_of_year + 0.5) / 30.6) + 2) % 12 + 1
    day = math.floor(math.fmod(day_of_year + 0.5, 30.6)) + 1
    return year, month, day


def jdn_to_calendar_string(jdn):
    """
    Format a Julian Day Number as 'YYYY-MonthName-D'.

    Examples
    --------
    >>> jdn_to_calendar_string(2451545.0)
    '2000-January-1'
    """
    year, month, day = _jdn_to_calendar(jdn)
    return f"{year}-{_MONTH_NAMES[month - 1]}-{day}"


def jdn_to_datetime(jdn):
    """
    Convert a Julian Day Number to a Gregorian `datetime` (midnight).

    The underlying algorithm can land one day past the end of a month
    (e.g. Feb-29 in a common year); such dates are pulled back one day.

    Raises
    ------
    ValueError
        If no valid date can be formed.
    """
    year, month, day = _jdn_to_calendar(jdn)
    try:
        return datetime(year, month, day)
    except ValueError:
        return datetime(year, month, day - 1)


# ========== PHYSICAL PROPERTIES ==========
def mass_of_sphere(diameter, density):
    """
    Mass of a homogeneous sphere.

    Parameters
    ----------
    diameter : float
        Diameter [km]
    density : float
        Density [g/cm³]

    Returns
    -------
    float
        Mass [kg]
    """
    radius = (diameter / 2.0) * 1e5                 # km -> cm
    volume = (4.0 / 3.0) * PI * radius ** 3         # cm^3
    return density * volume / 1000.0                # g -> kg
