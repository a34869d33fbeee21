"""
Spaceguard: Planetary Defense Orbital Core

A Python package for two-body heliocentric orbit propagation, intercept
transfer design with Gooding's Lambert solver, and kinetic-impactor
deflection analysis.
"""

# Core classes
from .vector3d import Vector3d
from .orbit_data import OrbitData, OrbitSnapshot
from .presets import UnitSystem, PresetElements, get_preset, available_presets
from .gooding import lamrhg, GoodingResult, LambertOutcome, VelocityComponents
from .lambert import LambertSolution, get_transfer_orbit
from .mission import (LaunchVehicle, MissionAssessment, Feasibility, assess_mission,
                      apply_kinetic_impact, closest_approach_distance)

# Configuration
from .config import config, temp_config
from .utils import ConvergenceWarning

# Helper module with constants and conversions
from . import orbit_utils

# Package metadata
__version__ = "0.1.0"

# Define what gets imported with "from spaceguard import *"
__all__ = [
    # Classes
    "Vector3d",
    "OrbitData",
    "OrbitSnapshot",
    "UnitSystem",
    "PresetElements",
    "GoodingResult",
    "LambertOutcome",
    "VelocityComponents",
    "LambertSolution",
    "LaunchVehicle",
    "MissionAssessment",
    "Feasibility",
    # Functions
    "get_preset",
    "available_presets",
    "lamrhg",
    "get_transfer_orbit",
    "assess_mission",
    "apply_kinetic_impact",
    "closest_approach_distance",
    # Configuration
    "config",
    "temp_config",
    "ConvergenceWarning",
    "orbit_utils",
]
