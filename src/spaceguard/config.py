"""
Package Settings
================

One mutable ``SpaceguardConfig`` instance, ``spaceguard.config``, holds the
solver tolerances, iteration caps, validation policy and plot defaults read
by every module at call time.

Examples
--------
Inspect the settings:

>>> import spaceguard
>>> print(spaceguard.config)

Change a setting for the rest of the session:

>>> spaceguard.config.KEPLER_TOL = 1e-12  # Tighter Kepler solve
>>> spaceguard.config.DEFAULT_PLOT_POINTS = 720  # Smoother ellipses

Go back to the shipped values:

>>> spaceguard.config.reset()

Change settings for one block only:

>>> with spaceguard.temp_config(LAMBERT_MAX_REVOLUTIONS=3):
...     solution = spaceguard.get_transfer_orbit(earth, asteroid, 1280, 500)

Notes
-----
Settings are read when a function runs, not when an object is built, so a
change applies to every later call including those on existing orbits.
"""

from dataclasses import dataclass, fields
from contextlib import contextmanager


@dataclass
class SpaceguardConfig:
    """
    Package-wide numerical and presentation settings.

    Attributes
    ----------
    EQUALITY_RTOL : float
        Relative tolerance used by ``OrbitData.__eq__`` and
        ``Vector3d.isclose``. Default: 1e-12
    EQUALITY_ATOL : float
        Absolute tolerance paired with EQUALITY_RTOL. Default: 1e-14
    SNAP_TO_CIRCULAR : float
        Eccentricity below which a state vector is treated as circular and
        the argument of perifocus is set to 0. Default: 1e-10
    SNAP_TO_EQUATORIAL : float
        Ratio |node| / |h| below which a state vector is treated as
        equatorial and the ascending node is set to 0. Default: 1e-12
    STRICT_VALIDATION : bool
        Raise on invalid orbital input when True, warn and continue when
        False. Default: True
    KEPLER_TOL : float
        Newton step size [rad] at which Kepler's equation counts as solved
        in OrbitData.step. Default: 1e-10
    KEPLER_MAX_ITER : int
        Newton iterations allowed for Kepler's equation before a
        ConvergenceWarning. Default: 20
    GOODING_TMIN_TOL : float
        Relative step at which the minimum-time search of the
        multi-revolution Lambert solver stops. Default: 3e-7
    GOODING_TMIN_MAX_ITER : int
        Halley iterations allowed for the minimum-time search. Default: 12
    GOODING_HALLEY_ITER : int
        Halley refinements applied to each Lambert starter. Default: 3
    LAMBERT_MAX_REVOLUTIONS : int
        Highest revolution count tried by the automatic revolution
        search. Default: 50
    DEFAULT_PLOT_POINTS : int
        Points per orbit ellipse in plots. Default: 360
    DEFAULT_ORBIT_COLOR : str
        Line color of orbit ellipses. Default: 'lightblue'
    DEFAULT_TRANSFER_COLOR : str
        Line color of transfer arcs. Default: 'red'
    DEFAULT_SUN_COLOR : str
        Marker color of the central body. Default: 'gold'
    """

    # Equality comparisons
    EQUALITY_RTOL: float = 1e-12
    EQUALITY_ATOL: float = 1e-14

    # Degenerate geometry
    SNAP_TO_CIRCULAR: float = 1e-10
    SNAP_TO_EQUATORIAL: float = 1e-12

    # Input checking
    STRICT_VALIDATION: bool = True

    # Kepler propagation
    KEPLER_TOL: float = 1e-10
    KEPLER_MAX_ITER: int = 20

    # Lambert solver
    GOODING_TMIN_TOL: float = 3e-7
    GOODING_TMIN_MAX_ITER: int = 12
    GOODING_HALLEY_ITER: int = 3
    LAMBERT_MAX_REVOLUTIONS: int = 50

    # Plotting
    DEFAULT_PLOT_POINTS: int = 360
    DEFAULT_ORBIT_COLOR: str = 'lightblue'
    DEFAULT_TRANSFER_COLOR: str = 'red'
    DEFAULT_SUN_COLOR: str = 'gold'

    _SECTIONS = (
        ("Equality", ("EQUALITY_RTOL", "EQUALITY_ATOL")),
        ("Degenerate Geometry", ("SNAP_TO_CIRCULAR", "SNAP_TO_EQUATORIAL")),
        ("Kepler Propagation", ("KEPLER_TOL", "KEPLER_MAX_ITER")),
        ("Lambert Solver", ("GOODING_TMIN_TOL", "GOODING_TMIN_MAX_ITER",
                            "GOODING_HALLEY_ITER", "LAMBERT_MAX_REVOLUTIONS")),
        ("Validation", ("STRICT_VALIDATION",)),
        ("Plotting", ("DEFAULT_PLOT_POINTS", "DEFAULT_ORBIT_COLOR",
                      "DEFAULT_TRANSFER_COLOR", "DEFAULT_SUN_COLOR")),
    )

    def reset(self):
        """
        Restore every setting to its shipped value.

        Examples
        --------
        >>> import spaceguard
        >>> spaceguard.config.KEPLER_MAX_ITER = 5
        >>> spaceguard.config.reset()
        >>> spaceguard.config.KEPLER_MAX_ITER
        20
        """
        for f in fields(self):
            setattr(self, f.name, f.default)

    def __repr__(self):
        lines = ["SpaceguardConfig:"]
        for title, names in self._SECTIONS:
            lines.append(f"  {title}:")
            lines.extend(f"    {name} = {getattr(self, name)!r}" for name in names)
        return "\n".join(lines)


config = SpaceguardConfig()


@contextmanager
def temp_config(**kwargs):
    """
    Apply settings for the duration of a ``with`` block.

    Previous values come back when the block exits, whether or not it
    raised. All keys are checked before anything is changed.

    Parameters
    ----------
    **kwargs
        Setting names and their temporary values.

    Yields
    ------
    SpaceguardConfig
        The global settings object.

    Raises
    ------
    AttributeError
        If a key is not a setting.

    Examples
    --------
    >>> import spaceguard
    >>> with spaceguard.temp_config(KEPLER_MAX_ITER=2, STRICT_VALIDATION=False):
    ...     orbit.step(10.0)  # may warn about Kepler convergence
    >>> spaceguard.config.KEPLER_MAX_ITER
    20
    """
    known = {f.name for f in fields(config)}
    unknown = sorted(set(kwargs) - known)
    if unknown:
        raise AttributeError(
            f"SpaceguardConfig has no attribute {unknown[0]!r}. "
            f"Valid attributes: {sorted(known)}"
        )

    saved = {key: getattr(config, key) for key in kwargs}
    for key, value in kwargs.items():
        setattr(config, key, value)
    try:
        yield config
    finally:
        for key, value in saved.items():
            setattr(config, key, value)
