from spaceguard import OrbitData, LaunchVehicle, assess_mission, apply_kinetic_impact
from spaceguard import closest_approach_distance
from spaceguard.orbit_utils import mass_of_sphere, RADIUS_EARTH
from spaceguard.plotting import plot_orbits, add_transfer_to_plot
import plotly.io as pio
pio.renderers.default = 'browser'

# Reference bodies at the predicted impact epoch
earth = OrbitData.from_preset('earth')
asteroid = OrbitData.from_preset('pdc17a')
asteroid.to_epoch(earth.epoch)
impact_epoch = earth.epoch

# Heavy-lift vehicle, Gaussian payload fit in kg vs km^2/s^2
vehicle = LaunchVehicle(a=10000, b=0, c=5000, curve_fitting_max_c3=5000,
                        name="Heavy")

# Deflect 1280 days before impact after a 500 day cruise
lead_days = 1280
transfer_days = 500
mission = assess_mission(earth, asteroid, impact_epoch, lead_days, transfer_days, vehicle)
print(mission.reason)
if mission.solution is not None:
    print(mission.solution.to_string(in_degrees=True))

if mission.feasible:
    # 200 m rubble pile at 2 g/cm^3
    asteroid_mass = mass_of_sphere(0.2, 2.0)
    impactor = mission.solution.transfer_orbit.copy()
    dv = apply_kinetic_impact(asteroid, impactor, impact_epoch - lead_days,
                              asteroid_mass, mission.deliverable_mass, beta=2.0)
    print(f"Delta V: {dv}")

    # Miss distance in Earth radii over the 60 days around impact
    probe_e = earth.copy()
    probe_a = asteroid.copy()
    probe_e.to_epoch(impact_epoch - 30)
    probe_a.to_epoch(impact_epoch - 30)
    miss = closest_approach_distance(probe_e, probe_a, 60, num_steps=600)
    print(f"Closest approach: {miss / RADIUS_EARTH:.3f} Earth radii")

    fig = plot_orbits([earth, asteroid], names=['Earth', 'PDC 2017a'])
    add_transfer_to_plot(fig, mission.solution, transfer_days)
    fig.show()
