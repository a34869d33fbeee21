'''3D plotly views of heliocentric orbits and transfer arcs
All coordinates are drawn in AU'''

from typing import Optional, Sequence

import numpy as np
import plotly.graph_objects as go

from .config import config
from .orbit_data import OrbitData
from .orbit_utils import KM2AU
from .presets import UnitSystem


def _to_au(orbit: OrbitData, positions: np.ndarray) -> np.ndarray:
    #Scale sampled positions into AU
    if orbit.units is UnitSystem.AU_D:
        return positions
    return positions * KM2AU


def _orbit_positions_au(orbit, n_points):
    positions = _to_au(orbit, orbit.sample_positions(n_points))
    # close the ellipse
    if len(positions):
        positions = np.vstack([positions, positions[:1]])
    return positions


def _add_line(fig, positions, color, name, **kwargs):
    fig.add_trace(go.Scatter3d(
        x=positions[:, 0],
        y=positions[:, 1],
        z=positions[:, 2],
        mode='lines',
        line=dict(color=color, width=3),
        name=name,
        hovertemplate='x: %{x:.4f}<br>y: %{y:.4f}<br>z: %{z:.4f}<extra></extra>',
        **kwargs
    ))


def _default_name(fig, prefix):
    n_existing = sum(1 for trace in fig.data if isinstance(trace, go.Scatter3d))
    return f'{prefix} {n_existing}'


def plot_orbits(orbits: Sequence[OrbitData], names: Optional[Sequence[str]] = None,
                n_points: Optional[int] = None, show_sun: bool = True,
                colors: Optional[Sequence[str]] = None) -> go.Figure:
    """
    Create a 3D plot of one or more orbit ellipses around the Sun.

    Parameters:
        orbits: Orbits to draw (each sampled over one period)
        names: Legend names, one per orbit (default: 'Orbit N')
        n_points: Samples per ellipse (default: config.DEFAULT_PLOT_POINTS)
        show_sun: Whether to mark the central body at the origin (default: True)
        colors: Line colors, one per orbit (default: config.DEFAULT_ORBIT_COLOR)

    Returns:
        Plotly Figure object
    """
    if names is not None and len(names) != len(orbits):
        raise ValueError(f"Got {len(names)} names for {len(orbits)} orbits")
    if colors is not None and len(colors) != len(orbits):
        raise ValueError(f"Got {len(colors)} colors for {len(orbits)} orbits")

    fig = go.Figure()
    if show_sun:
        fig.add_trace(go.Scatter3d(
            x=[0.0], y=[0.0], z=[0.0],
            mode='markers',
            marker=dict(color=config.DEFAULT_SUN_COLOR, size=8),
            name='Sun',
            hoverinfo='name'
        ))

    for j, orbit in enumerate(orbits):
        add_orbit_to_plot(fig, orbit, n_points=n_points,
                          color=None if colors is None else colors[j],
                          name=None if names is None else names[j])

    fig.update_layout(
        scene=dict(
            xaxis_title='X [AU]',
            yaxis_title='Y [AU]',
            zaxis_title='Z [AU]',
            aspectmode='data'
        ),
        title='Heliocentric Orbits',
        showlegend=True
    )
    return fig


def add_orbit_to_plot(fig: go.Figure, orbit: OrbitData, n_points: Optional[int] = None,
                      color: Optional[str] = None, name: Optional[str] = None,
                      **kwargs) -> go.Figure:
    """
    Add one orbit ellipse to an existing figure.

    Parameters:
        fig: Existing Plotly Figure object
        orbit: Orbit to draw over one period from its current epoch
        n_points: Samples per ellipse (default: config.DEFAULT_PLOT_POINTS)
        color: Line color (default: config.DEFAULT_ORBIT_COLOR)
        name: Legend name (default: 'Orbit N')
        **kwargs: Additional arguments passed to Scatter3d

    Returns:
        Updated Plotly Figure object (same object, modified in place)
    """
    if name is None:
        name = _default_name(fig, 'Orbit')
    _add_line(fig, _orbit_positions_au(orbit, n_points),
              color or config.DEFAULT_ORBIT_COLOR, name, **kwargs)
    return fig


def add_transfer_to_plot(fig: go.Figure, solution, transfer_days: float,
                         n_points: Optional[int] = None, color: Optional[str] = None,
                         name: Optional[str] = None, **kwargs) -> go.Figure:
    """
    Add the flown part of a transfer arc to an existing figure.

    Parameters:
        fig: Existing Plotly Figure object
        solution: LambertSolution whose transfer orbit is drawn
        transfer_days: Time of flight [days], from the departure epoch
        n_points: Number of samples along the arc (default: config.DEFAULT_PLOT_POINTS)
        color: Line color (default: config.DEFAULT_TRANSFER_COLOR)
        name: Legend name (default: 'Transfer')
        **kwargs: Additional arguments passed to Scatter3d

    Returns:
        Updated Plotly Figure object (same object, modified in place)
    """
    if n_points is None:
        n_points = config.DEFAULT_PLOT_POINTS
    orbit = solution.transfer_orbit
    start = orbit.epoch
    epochs = start + np.linspace(0.0, transfer_days, max(n_points, 2))
    table = orbit.ephemeris(epochs)
    positions = _to_au(orbit, table[['x', 'y', 'z']].to_numpy())

    _add_line(fig, positions, color or config.DEFAULT_TRANSFER_COLOR,
              name or 'Transfer', **kwargs)
    # mark departure and arrival
    fig.add_trace(go.Scatter3d(
        x=positions[[0, -1], 0],
        y=positions[[0, -1], 1],
        z=positions[[0, -1], 2],
        mode='markers',
        marker=dict(color=color or config.DEFAULT_TRANSFER_COLOR, size=4),
        name=f'{name or "Transfer"} endpoints',
        hoverinfo='name'
    ))
    return fig
