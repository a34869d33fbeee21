'''Catalog of reference heliocentric orbits
Elements are osculating values at a fixed reference epoch, one set per unit system'''

from dataclasses import dataclass
from enum import Enum

import numpy as np


# define an enumerated list of distance/time unit combinations
class UnitSystem(Enum):
    KM_S = 'km_s'   # km, km/s, km^3/s^2
    KM_D = 'km_d'   # km, km/day, km^3/day^2
    AU_D = 'au_d'   # AU, AU/day, AU^3/day^2

    @property
    def length_unit(self):
        return 'AU' if self is UnitSystem.AU_D else 'km'

    @property
    def time_unit(self):
        return 's' if self is UnitSystem.KM_S else 'day'

    @property
    def time_units_per_day(self):
        """Number of native time units in one day"""
        return 86400.0 if self is UnitSystem.KM_S else 1.0


@dataclass(frozen=True)
class PresetElements:
    """
    Classical elements for one catalog entry.

    Angles are stored in degrees as published and converted on access
    through `radians()`.
    """
    epoch: float                # Julian Day Number
    mu: float
    a: float
    ecc: float
    inc_deg: float
    raan_deg: float
    argp_deg: float
    mean_anomaly_deg: float
    true_anomaly_deg: float

    def radians(self):
        """Return (i, Ω, ω, M, ν) in radians"""
        return tuple(np.radians([self.inc_deg, self.raan_deg, self.argp_deg,
                                 self.mean_anomaly_deg, self.true_anomaly_deg]).tolist())


PRESETS = {
    'earth': {
        UnitSystem.KM_S: PresetElements(
            epoch=2460511.50,
            mu=1.3271283864237474e+11,
            a=1.494671667413757e+08,
            ecc=1.755515200922813e-02,
            inc_deg=3.415029833502834e-03,
            raan_deg=1.743237727544583e+02,
            argp_deg=2.891171874912577e+02,
            mean_anomaly_deg=1.944983899148370e+02,
            true_anomaly_deg=1.940052537229808e+02),
        UnitSystem.KM_D: PresetElements(
            epoch=2460512.5,
            mu=9.9069603195178176e+20,
            a=1.494606976586629e+08,
            ecc=1.757248349510941e-02,
            inc_deg=3.725596059425610e-03,
            raan_deg=1.676963142208247e+02,
            argp_deg=2.960923139782446e+02,
            mean_anomaly_deg=1.951261813216196e+02,
            true_anomaly_deg=1.946116523341310e+02),
        UnitSystem.AU_D: PresetElements(
            epoch=2460511.845138889,
            mu=2.9591309705483544e-04,
            a=9.991065181306177e-01,
            ecc=1.756626879605684e-02,
            inc_deg=3.516016131060297e-03,
            raan_deg=1.718949799164563e+02,
            argp_deg=2.916672713700146e+02,
            mean_anomaly_deg=1.947138594699715e+02,
            true_anomaly_deg=1.942132348290812e+02),
    },
    # Hypothetical impactor from the 2017 Planetary Defense Conference exercise
    'pdc17a': {
        UnitSystem.KM_S: PresetElements(
            epoch=2460511.5,
            mu=1.3271244004193930e+11,
            a=3.351959978987864e+08,
            ecc=6.067308998464853e-01,
            inc_deg=6.297860669424182,
            raan_deg=2.980466946281459e+02,
            argp_deg=3.116195745824791e+02,
            mean_anomaly_deg=4.874493591005381e+01,
            true_anomaly_deg=1.218024541247387e+02),
        UnitSystem.KM_D: PresetElements(
            epoch=2460512.5,
            mu=9.9069305641547517e+20,
            a=3.351962701009536e+08,
            ecc=6.067305783811098e-01,
            inc_deg=6.297858601278221,
            raan_deg=2.980466307458600e+02,
            argp_deg=3.116197271660765e+02,
            mean_anomaly_deg=4.903874628554143e+01,
            true_anomaly_deg=1.220721328669098e+02),
        UnitSystem.AU_D: PresetElements(
            epoch=2460511.845138889,
            mu=2.9591220828559093e-04,
            a=2.240646616555420e+00,
            ecc=6.067306208299826e-01,
            inc_deg=6.297858542904073,
            raan_deg=2.980466617932057e+02,
            argp_deg=3.116196342717132e+02,
            mean_anomaly_deg=4.884676739427096e+01,
            true_anomaly_deg=1.218961183208733e+02),
    },
}


def parse_unit_system(units):
    """Convert string or enum to UnitSystem enum"""
    if isinstance(units, UnitSystem):
        return units
    elif isinstance(units, str):
        key = units.lower()
        for unit_system in UnitSystem:
            if key == unit_system.value or key == unit_system.name.lower():
                return unit_system
        raise ValueError(f"Unknown unit system '{units}'. "
                         f"Use: {[u.value for u in UnitSystem]}")
    else:
        raise TypeError(f"units must be UnitSystem or str, got {type(units)}")


def get_preset(name, units=UnitSystem.KM_S):
    """
    Look up a catalog entry.

    Parameters
    ----------
    name : str
        Body name, case-insensitive ('earth', 'pdc17a')
    units : UnitSystem or str, optional
        Unit system of the returned elements (default KM_S)

    Returns
    -------
    PresetElements

    Raises
    ------
    ValueError
        If the body or unit system is unknown
    """
    units = parse_unit_system(units)
    if not isinstance(name, str):
        raise TypeError(f"Preset name must be str, got {type(name)}")
    try:
        by_units = PRESETS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown preset '{name}'. Use: {list(PRESETS)}") from None
    return by_units[units]


def available_presets():
    """Names of all catalog entries"""
    return list(PRESETS)
