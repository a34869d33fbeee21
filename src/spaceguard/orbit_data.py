'''Orbital state of a single body about one gravitating center
OrbitData (live, mutable) and OrbitSnapshot (frozen) class definitions'''

import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
import pandas as pd

from .config import config
from .orbit_utils import (TWO_PI, RAD2DEG, GM_SUN, normalize_angle,
                          solve_kepler_eq_for_eccentric_anom,
                          true_anom_to_eccentric_anom, eccentric_anom_to_mean_anom,
                          jdn_to_calendar_string)
from .presets import UnitSystem, get_preset, parse_unit_system
from .utils import validation_error
from .vector3d import Vector3d

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrbitSnapshot:
    """
    Immutable copy of an orbit's full state at one epoch.

    Used wherever an orbit has to be evaluated without touching live
    simulation state. Convert back with `OrbitData.from_snapshot`.
    """
    epoch: float
    mu: float
    a: float
    ecc: float
    i: float
    raan: float
    argp: float
    mean_anomaly: float
    true_anomaly: float
    eccentric_anomaly: float
    position: Vector3d
    velocity: Vector3d
    units: UnitSystem = UnitSystem.KM_S

    def to_orbit(self):
        """Create a live OrbitData from this snapshot"""
        return OrbitData.from_snapshot(self)


class OrbitData:
    """
    Keplerian orbit with classical elements and Cartesian state kept in sync.

    Writing the position or velocity re-derives the elements; stepping in
    time (or writing the epoch) advances the mean anomaly and rebuilds the
    Cartesian state. All angles are in radians, the epoch is a Julian Day
    Number and lengths/times follow the orbit's UnitSystem.

    Only elliptical orbits (0 <= ecc < 1) are supported.

    Examples
    --------
    >>> earth = OrbitData.from_preset('earth')
    >>> earth.step(365.25)
    >>> earth.epoch
    2460876.75
    """
    # ========== CONSTRUCTION ==========
    def __init__(self, epoch: float, mu: float, a: float, ecc: float, i: float,
                 raan: float, argp: float, mean_anomaly: float,
                 true_anomaly: Optional[float] = None,
                 units: Union[UnitSystem, str] = UnitSystem.KM_S):
        """
        Create an orbit from classical elements.

        Parameters
        ----------
        epoch : float
            Reference instant [JDN]
        mu : float
            Gravitational parameter of the central body [length³/time²]
        a : float
            Semi-major axis [length]
        ecc : float
            Eccentricity, 0 <= ecc < 1
        i, raan, argp : float
            Inclination, longitude of ascending node, argument of perifocus [rad]
        mean_anomaly : float
            Mean anomaly at epoch [rad]
        true_anomaly : float, optional
            True anomaly at epoch [rad]. If omitted it is solved from the
            mean anomaly with Kepler's equation.
        units : UnitSystem or str, optional
            Length/time units of mu and the state vectors (default KM_S)

        Raises
        ------
        ValueError
            If mu <= 0, a <= 0, ecc outside [0, 1) or any value is not finite
        """
        self._units = parse_unit_system(units)
        self._epoch = float(epoch)
        self._mu = float(mu)
        self._a = float(a)
        self._ecc = float(ecc)
        self._i = float(i)
        self._raan = float(raan)
        self._argp = float(argp)
        self._M = float(mean_anomaly)
        self._validate()

        if true_anomaly is None:
            self._E = solve_kepler_eq_for_eccentric_anom(self._ecc, self._M)
            self._nu = self._true_from_eccentric(self._E)
        else:
            self._nu = float(true_anomaly)
            self._E = normalize_angle(true_anom_to_eccentric_anom(self._nu, self._ecc))

        self._update_derived()
        self._update_state_from_elements()
        logger.debug("r = %.10e, v = %.10e", self._position.magnitude,
                     self._velocity.magnitude)

    @classmethod
    def from_preset(cls, name: str, units: Union[UnitSystem, str] = UnitSystem.KM_S):
        """
        Create an orbit from the named catalog.

        Parameters
        ----------
        name : str
            Catalog entry, case-insensitive ('earth', 'pdc17a')
        units : UnitSystem or str, optional
            Unit system (default KM_S)

        Raises
        ------
        ValueError
            If the name or unit system is unknown
        """
        units = parse_unit_system(units)
        preset = get_preset(name, units)
        i, raan, argp, M, nu = preset.radians()
        return cls(preset.epoch, preset.mu, preset.a, preset.ecc, i, raan, argp,
                   M, nu, units=units)

    @classmethod
    def from_state(cls, epoch: float, position, velocity, mu: float = GM_SUN,
                   units: Union[UnitSystem, str] = UnitSystem.KM_S):
        """
        Create an orbit from a Cartesian state.

        Parameters
        ----------
        epoch : float
            Reference instant [JDN]
        position, velocity : Vector3d or array-like
            Cartesian state relative to the central body
        mu : float, optional
            Gravitational parameter (default GM_SUN, km³/s²)
        units : UnitSystem or str, optional
            Unit system (default KM_S)

        Raises
        ------
        ValueError
            If mu <= 0 or the state does not describe a bound ellipse
        """
        orbit = cls.__new__(cls)
        orbit._units = parse_unit_system(units)
        orbit._epoch = float(epoch)
        orbit._mu = float(mu)
        if not (math.isfinite(orbit._mu) and orbit._mu > 0):
            raise ValueError(f"Gravitational parameter must be positive, got {mu}")
        orbit._position = _as_vector(position)
        orbit._velocity = _as_vector(velocity)
        orbit._update_elements_from_state()
        return orbit

    @classmethod
    def from_snapshot(cls, snapshot: OrbitSnapshot):
        """Create a live OrbitData holding exactly the snapshot's state"""
        orbit = cls.__new__(cls)
        orbit._units = snapshot.units
        orbit._epoch = snapshot.epoch
        orbit._mu = snapshot.mu
        orbit._a = snapshot.a
        orbit._ecc = snapshot.ecc
        orbit._i = snapshot.i
        orbit._raan = snapshot.raan
        orbit._argp = snapshot.argp
        orbit._M = snapshot.mean_anomaly
        orbit._nu = snapshot.true_anomaly
        orbit._E = snapshot.eccentric_anomaly
        orbit._position = snapshot.position
        orbit._velocity = snapshot.velocity
        orbit._update_derived()
        return orbit

    # ========== VALIDATION ==========
    def _validate(self):
        """Check that the elements describe a supported (elliptical) orbit"""
        values = (self._epoch, self._mu, self._a, self._ecc, self._i,
                  self._raan, self._argp, self._M)
        if not all(math.isfinite(v) for v in values):
            raise ValueError("Orbital elements contain NaN or Inf")
        if self._mu <= 0:
            raise ValueError(f"Gravitational parameter must be positive, got {self._mu}")
        if self._a <= 0:
            raise ValueError(f"Elliptic orbit requires positive semi-major axis, "
                             f"got a={self._a}")
        if self._ecc < 0 or self._ecc >= 1:
            raise ValueError(f"Eccentricity must be in [0, 1), got {self._ecc}")
        if self._i < 0 or self._i > math.pi:
            validation_error(f"Inclination out of range [0, π]: {self._i}")

    # ========== PROPERTY ACCESS ==========
    @property
    def units(self):
        """Unit system of mu and the state vectors"""
        return self._units

    @property
    def epoch(self):
        """Reference instant [JDN]"""
        return self._epoch

    @epoch.setter
    def epoch(self, value):
        self.to_epoch(value)

    @property
    def mu(self):
        """Gravitational parameter [length³/time²]"""
        return self._mu

    @property
    def a(self):
        """Semi-major axis"""
        return self._a

    @property
    def ecc(self):
        """Eccentricity"""
        return self._ecc

    @property
    def i(self):
        """Inclination [rad]"""
        return self._i

    @property
    def raan(self):
        """Longitude of ascending node [rad]"""
        return self._raan

    @property
    def argp(self):
        """Argument of perifocus [rad]"""
        return self._argp

    @property
    def mean_anomaly(self):
        return self._M

    @property
    def true_anomaly(self):
        return self._nu

    @property
    def eccentric_anomaly(self):
        return self._E

    @property
    def mean_motion(self):
        """Mean motion [rad/time unit]"""
        return self._N

    @property
    def period(self):
        """Orbital period [time unit]"""
        return self._period

    @property
    def period_days(self):
        """Orbital period [days]"""
        return self._period / self._units.time_units_per_day

    @property
    def position(self):
        """Cartesian position [length]"""
        return self._position

    @position.setter
    def position(self, value):
        self._commit_state(_as_vector(value), self._velocity)

    @property
    def velocity(self):
        """Cartesian velocity [length/time]"""
        return self._velocity

    @velocity.setter
    def velocity(self, value):
        self._commit_state(self._position, _as_vector(value))

    def set_state(self, position, velocity):
        """Replace position and velocity together, re-deriving elements once."""
        self._commit_state(_as_vector(position), _as_vector(velocity))

    def _commit_state(self, position, velocity):
        """Install a new state, keeping the old one if it is rejected"""
        old_position, old_velocity = self._position, self._velocity
        self._position, self._velocity = position, velocity
        try:
            self._update_elements_from_state()
        except ValueError:
            self._position, self._velocity = old_position, old_velocity
            raise

    # ========== PROPAGATION ==========
    def step(self, delta_days: float):
        """
        Propagate the orbit by `delta_days` (negative steps go backward).

        The mean anomaly advances by Δt·N and is wrapped to [0, 2π);
        Kepler's equation gives the eccentric anomaly, from which the true
        anomaly and Cartesian state are rebuilt. The epoch advances by
        exactly `delta_days`.

        Warns
        -----
        ConvergenceWarning
            If Kepler's equation does not converge within
            config.KEPLER_MAX_ITER iterations. The best estimate is used.
        """
        dt = delta_days * self._units.time_units_per_day
        self._M = normalize_angle(self._M + dt * self._N, 0.0, TWO_PI)
        E = solve_kepler_eq_for_eccentric_anom(self._ecc, self._M)
        self._E = normalize_angle(E, 0.0, TWO_PI)
        self._nu = self._true_from_eccentric(self._E)
        self._update_state_from_elements()
        self._epoch = self._epoch + delta_days

    def to_epoch(self, epoch: float):
        """Propagate to an absolute epoch [JDN]."""
        self.step(epoch - self._epoch)
        self._epoch = float(epoch)

    # ========== ORBITAL PROPERTIES ==========
    def specific_energy(self):
        """Specific orbital energy, -mu / 2a"""
        return -self._mu / (2.0 * self._a)

    def specific_angular_momentum(self):
        """Specific angular momentum magnitude, |r × v|"""
        return Vector3d.cross(self._position, self._velocity).magnitude

    def radius(self):
        """Distance from the central body"""
        return self._position.magnitude

    # ========== UTILITY METHODS ==========
    def copy(self):
        """Create an independent copy of the orbit"""
        return OrbitData.from_snapshot(self.snapshot())

    def snapshot(self):
        """Freeze the current state into an OrbitSnapshot"""
        return OrbitSnapshot(
            epoch=self._epoch, mu=self._mu, a=self._a, ecc=self._ecc,
            i=self._i, raan=self._raan, argp=self._argp,
            mean_anomaly=self._M, true_anomaly=self._nu,
            eccentric_anomaly=self._E, position=self._position,
            velocity=self._velocity, units=self._units)

    def sample_positions(self, n_points: Optional[int] = None):
        """
        Positions around one full period, sampled uniformly in time.

        A copy of the orbit is stepped, the orbit itself is not modified.

        Parameters
        ----------
        n_points : int, optional
            Number of samples (default config.DEFAULT_PLOT_POINTS)

        Returns
        -------
        np.ndarray
            Shape (n_points, 3). Empty (0, 3) if n_points < 2.
        """
        if n_points is None:
            n_points = config.DEFAULT_PLOT_POINTS
        if n_points < 2:
            return np.empty((0, 3))

        slice_days = self.period_days / n_points
        clone = self.copy()
        positions = np.empty((n_points, 3))
        positions[0] = clone.position.to_numpy()
        for j in range(1, n_points):
            clone.step(slice_days)
            positions[j] = clone.position.to_numpy()
        return positions

    def ephemeris(self, epochs) -> pd.DataFrame:
        """
        Tabulate the Cartesian state at the given epochs.

        Parameters
        ----------
        epochs : array-like
            Julian Day Numbers to evaluate

        Returns
        -------
        pd.DataFrame
            Columns epoch, x, y, z, vx, vy, vz
        """
        epochs = np.atleast_1d(np.asarray(epochs, dtype=float))
        states = np.empty((len(epochs), 6))
        clone = self.copy()
        for row, epoch in enumerate(epochs):
            clone.to_epoch(epoch)
            states[row, :3] = clone.position.to_numpy()
            states[row, 3:] = clone.velocity.to_numpy()

        data = {
            'epoch': epochs,
            'x': states[:, 0],
            'y': states[:, 1],
            'z': states[:, 2],
            'vx': states[:, 3],
            'vy': states[:, 4],
            'vz': states[:, 5],
        }
        return pd.DataFrame(data)

    def to_string(self, in_degrees: bool = True, labels: bool = True):
        """
        Element table, one element per line, preceded by the epoch.

        Parameters
        ----------
        in_degrees : bool, optional
            Express angles in degrees (default True)
        labels : bool, optional
            Prefix each value with its label and suffix its unit (default True)
        """
        names = ("SMA", "Ecc", "Inc", "LAN", "ArgP", "TA", "MA", "Period")
        angle_unit = "deg" if in_degrees else "rad"
        unit_names = (self._units.length_unit, "", angle_unit, angle_unit, angle_unit,
                      angle_unit, angle_unit, self._units.time_unit)
        angles = np.array([self._i, self._raan, self._argp, self._nu, self._M])
        if in_degrees:
            angles = angles * RAD2DEG
        values = [self._a, self._ecc, *angles.tolist(), self._period]

        lines = [f"{self._epoch}"]
        for name, value, unit in zip(names, values, unit_names):
            if labels:
                lines.append(f"{name}\t{value:.15E}\t{unit}")
            else:
                lines.append(f"{value:.15E}")
        return "\n".join(lines) + "\n"

    def calendar_date(self):
        """Epoch formatted as 'YYYY-MonthName-D'"""
        return jdn_to_calendar_string(self._epoch)

    # ========== INTERNAL UPDATES ==========
    def _update_derived(self):
        # mean motion and period from a and mu
        self._N = math.sqrt(self._mu / self._a ** 3)
        self._period = TWO_PI * math.sqrt(self._a ** 3 / self._mu)

    def _true_from_eccentric(self, E):
        ecc = self._ecc
        nu = 2.0 * math.atan2(math.sqrt(1.0 + ecc) * math.sin(E / 2.0),
                              math.sqrt(1.0 - ecc) * math.cos(E / 2.0))
        return normalize_angle(nu, 0.0, TWO_PI)

    def _update_state_from_elements(self):
        """Rebuild position and velocity using the flight-path-angle formulation"""
        a, ecc, nu = self._a, self._ecc, self._nu
        # radial distance and speed from vis-viva
        r = a * (1.0 - ecc * ecc) / (1.0 + ecc * math.cos(nu))
        v = math.sqrt(self._mu * (2.0 / r - 1.0 / a))
        # flight path angle
        fpa = math.atan(ecc * math.sin(nu) / (1.0 + ecc * math.cos(nu)))

        u = nu + self._argp
        cos_u, sin_u = math.cos(u), math.sin(u)
        cos_uf, sin_uf = math.cos(u - fpa), math.sin(u - fpa)
        cos_i, sin_i = math.cos(self._i), math.sin(self._i)
        cos_om, sin_om = math.cos(self._raan), math.sin(self._raan)

        self._position = Vector3d(r * (cos_u * cos_om - sin_u * cos_i * sin_om),
                                  r * (cos_u * sin_om + sin_u * cos_i * cos_om),
                                  r * (sin_u * sin_i))
        self._velocity = Vector3d(v * (-sin_uf * cos_om - cos_uf * cos_i * sin_om),
                                  v * (-sin_uf * sin_om + cos_uf * cos_i * cos_om),
                                  v * (cos_uf * sin_i))

    def _update_elements_from_state(self):
        """
        Derive classical elements from the Cartesian state.

        Near-equatorial orbits (|n|/|h| below config.SNAP_TO_EQUATORIAL) take
        the node along +x with Ω = 0; near-circular orbits (ecc below
        config.SNAP_TO_CIRCULAR) place perifocus on the node with ω = 0.
        In those cases angles are measured in the orbit plane with atan2.
        """
        pos, vel, mu = self._position, self._velocity, self._mu

        h = Vector3d.cross(pos, vel)
        r = pos.magnitude
        v2 = vel.sqr_magnitude
        h_mag = h.magnitude
        if r == 0.0 or h_mag == 0.0:
            raise ValueError("State vector is degenerate (zero radius or rectilinear motion)")

        inv_a = 2.0 / r - v2 / mu
        if inv_a <= 0.0:
            raise ValueError(f"State does not describe a bound ellipse "
                             f"(specific energy {v2 / 2.0 - mu / r:.6e} >= 0)")

        e_vec = Vector3d.cross(vel, h) / mu - pos / r
        node = Vector3d.cross(Vector3d.FORWARD, h)

        ecc = e_vec.magnitude
        if ecc >= 1.0:
            raise ValueError(f"State does not describe a bound ellipse (ecc={ecc})")

        # checks done, elements are only written from here on
        self._a = 1.0 / inv_a
        self._ecc = ecc
        self._i = math.acos(_clip_unit(h.z / h_mag))

        n_mag = node.magnitude
        equatorial = n_mag / h_mag < config.SNAP_TO_EQUATORIAL
        circular = self._ecc < config.SNAP_TO_CIRCULAR

        if equatorial:
            node_hat = Vector3d.RIGHT
            self._raan = 0.0
        else:
            node_hat = node / n_mag
            self._raan = math.acos(_clip_unit(node.x / n_mag))
            if node.y < 0:
                self._raan = TWO_PI - self._raan
        # in-plane axis 90 degrees ahead of the node
        b_hat = Vector3d.cross(h / h_mag, node_hat)

        if circular:
            self._argp = 0.0
        elif equatorial:
            self._argp = normalize_angle(math.atan2(Vector3d.dot(e_vec, b_hat),
                                                    Vector3d.dot(e_vec, node_hat)))
        else:
            self._argp = math.acos(_clip_unit(Vector3d.dot(node, e_vec) / (n_mag * self._ecc)))
            if e_vec.z < 0:
                self._argp = TWO_PI - self._argp

        if circular or equatorial:
            u = math.atan2(Vector3d.dot(pos, b_hat), Vector3d.dot(pos, node_hat))
            self._nu = normalize_angle(u - self._argp)
        else:
            self._nu = math.acos(_clip_unit(Vector3d.dot(e_vec, pos) / (self._ecc * r)))
            if Vector3d.dot(pos, vel) < 0:
                self._nu = TWO_PI - self._nu

        self._E = normalize_angle(true_anom_to_eccentric_anom(self._nu, self._ecc))
        self._M = eccentric_anom_to_mean_anom(self._E, self._ecc)
        self._update_derived()

    # ========== SPECIAL METHODS ==========
    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo):
        return self.copy()

    def __repr__(self):
        return (f"OrbitData(epoch={self._epoch!r}, mu={self._mu!r}, a={self._a!r}, "
                f"ecc={self._ecc!r}, i={self._i!r}, raan={self._raan!r}, "
                f"argp={self._argp!r}, mean_anomaly={self._M!r}, "
                f"true_anomaly={self._nu!r}, units={self._units})")

    def __str__(self):
        return self.to_string(in_degrees=True)

    def __eq__(self, other):
        #Check equality with tolerance
        if not isinstance(other, OrbitData):
            return NotImplemented
        if self._units != other._units:
            return False
        mine = np.array([self._epoch, self._mu, *self._position, *self._velocity])
        theirs = np.array([other._epoch, other._mu, *other._position, *other._velocity])
        return bool(np.allclose(mine, theirs, rtol=config.EQUALITY_RTOL,
                                atol=config.EQUALITY_ATOL))

    # mutable, so not hashable
    __hash__ = None


def _as_vector(value):
    #Accept Vector3d or any 3-element array-like
    if isinstance(value, Vector3d):
        return value
    return Vector3d.from_array(value)


def _clip_unit(value):
    return min(1.0, max(-1.0, value))
