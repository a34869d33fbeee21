"""Smoke tests to verify package imports work."""

def test_package_imports():
    """Test that all main classes can be imported."""
    from spaceguard import Vector3d, OrbitData, LambertSolution, LaunchVehicle
    assert Vector3d is not None
    assert OrbitData is not None
    assert LambertSolution is not None
    assert LaunchVehicle is not None

def test_version_exists():
    """Test that version is defined."""
    import spaceguard
    assert hasattr(spaceguard, '__version__')
    assert spaceguard.__version__ == "0.1.0"

def test_can_create_vector():
    """Test basic Vector3d creation."""
    from spaceguard import Vector3d
    v = Vector3d(1.0, 2.0, 2.0)
    assert v.magnitude == 3.0

def test_can_create_orbit_from_preset():
    """Test basic OrbitData creation from the catalog."""
    from spaceguard import OrbitData
    earth = OrbitData.from_preset('earth')
    assert earth.epoch == 2460511.5

def test_can_call_lambert_solver():
    """Test that the Lambert solver is reachable from the package root."""
    from spaceguard import lamrhg
    result = lamrhg(1.0, 1.0, 1.0, 1.0, 1.0)
    assert result.has_solution

def test_plotting_module_imports():
    """Test that the plotting helpers import."""
    from spaceguard.plotting import plot_orbits, add_orbit_to_plot, add_transfer_to_plot
    assert plot_orbits is not None
    assert add_orbit_to_plot is not None
    assert add_transfer_to_plot is not None
