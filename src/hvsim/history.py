'''Recorded ensemble snapshots for post-run inspection
EnsembleHistory class definition'''

import numpy as np
import pandas as pd
import plotly.graph_objects as go
from typing import List, Optional, TYPE_CHECKING
from .config import config

if TYPE_CHECKING:
    from .interpolator import TrajectoryInterpolator


class EnsembleHistory:
    """
    Time-ordered snapshots of an integrated ensemble.

    Snapshots are appended by the integrator as it runs; the arrays are
    stacked on access.

    Attributes:
        times: snapshot times [Myr], shape (S,)
        positions: sample positions [kpc], shape (S, N, 3)
        velocities: sample velocities [kpc/Myr], shape (S, N, 3)
    """
    # ========== CONSTRUCTION ==========
    def __init__(self, times=None, positions=None, velocities=None):
        self._times: List[float] = []
        self._positions: List[np.ndarray] = []
        self._velocities: List[np.ndarray] = []
        if times is not None:
            for t, pos, vel in zip(times, positions, velocities):
                self.append(t, pos, vel)

    def append(self, time: float, positions, velocities):
        """Record one snapshot (arrays are copied)."""
        positions = np.array(positions, dtype=float)
        velocities = np.array(velocities, dtype=float)
        if positions.ndim != 2 or positions.shape[1] != 3:
            raise ValueError(f"Positions must have shape (N, 3), got {positions.shape}")
        if velocities.shape != positions.shape:
            raise ValueError(
                f"Velocities shape {velocities.shape} does not match "
                f"positions shape {positions.shape}"
            )
        if self._positions and positions.shape != self._positions[0].shape:
            raise ValueError(
                f"Snapshot has {positions.shape[0]} samples, "
                f"history has {self._positions[0].shape[0]}"
            )
        self._times.append(float(time))
        self._positions.append(positions)
        self._velocities.append(velocities)

    # ========== PROPERTY ACCESS ==========
    @property
    def times(self) -> np.ndarray:
        return np.array(self._times)

    @property
    def positions(self) -> np.ndarray:
        if not self._positions:
            return np.zeros((0, 0, 3))
        return np.stack(self._positions)

    @property
    def velocities(self) -> np.ndarray:
        if not self._velocities:
            return np.zeros((0, 0, 3))
        return np.stack(self._velocities)

    @property
    def n_snapshots(self) -> int:
        return len(self._times)

    @property
    def n_samples(self) -> int:
        return self._positions[0].shape[0] if self._positions else 0

    @property
    def t0(self) -> float:
        """Time of the first snapshot [Myr]."""
        return self._times[0]

    @property
    def tf(self) -> float:
        """Time of the last snapshot [Myr]."""
        return self._times[-1]

    @property
    def duration(self) -> float:
        return self.tf - self.t0

    # ========== UTILITY METHODS ==========
    def mean_positions(self) -> np.ndarray:
        """Ensemble mean position at each snapshot, shape (S, 3)."""
        return self.positions.mean(axis=1)

    def spread(self) -> np.ndarray:
        """RMS distance of the samples from the ensemble mean, shape (S,)."""
        positions = self.positions
        offsets = positions - positions.mean(axis=1, keepdims=True)
        return np.sqrt((offsets ** 2).sum(axis=2).mean(axis=1))

    def sample_track(self, index: int) -> np.ndarray:
        """Position history of one sample, shape (S, 3)."""
        return self.positions[:, index, :]

    def to_dataframe(self) -> pd.DataFrame:
        """
        Export the history to a long-format pandas DataFrame.

        Returns:
            DataFrame with one row per (snapshot, sample) and columns
            time, sample, x, y, z, vx, vy, vz
        """
        positions = self.positions
        velocities = self.velocities
        n_snap, n_samp = positions.shape[0], positions.shape[1]

        data = {
            'time': np.repeat(self.times, n_samp),
            'sample': np.tile(np.arange(n_samp), n_snap),
            'x': positions[:, :, 0].ravel(),
            'y': positions[:, :, 1].ravel(),
            'z': positions[:, :, 2].ravel(),
            'vx': velocities[:, :, 0].ravel(),
            'vy': velocities[:, :, 1].ravel(),
            'vz': velocities[:, :, 2].ravel(),
        }
        return pd.DataFrame(data)

    # ========== PLOTTING ==========
    def plot_3d(self,
                mw: Optional["TrajectoryInterpolator"] = None,
                lmc: Optional["TrajectoryInterpolator"] = None,
                max_tracks: int = 50,
                sample_color: Optional[str] = None,
                show_tracks: bool = True) -> go.Figure:
        """
        Create a 3D plot of the ensemble with optional galaxy centre tracks.

        Parameters:
            mw: Milky Way interpolator; its centre path over the recorded
                time span is drawn if given
            lmc: LMC interpolator, drawn likewise
            max_tracks: Maximum number of sample paths to draw (default: 50)
            sample_color: Color of sample paths and end points
                (default: config.DEFAULT_SAMPLE_COLOR)
            show_tracks: Whether to draw sample paths (default: True)

        Returns:
            Plotly Figure object
        """
        if sample_color is None:
            sample_color = config.DEFAULT_SAMPLE_COLOR

        fig = go.Figure()
        positions = self.positions

        if show_tracks and self.n_snapshots > 1:
            n_tracks = min(max_tracks, self.n_samples)
            for i in range(n_tracks):
                fig.add_trace(go.Scatter3d(
                    x=positions[:, i, 0],
                    y=positions[:, i, 1],
                    z=positions[:, i, 2],
                    mode='lines',
                    line=dict(color=sample_color, width=1),
                    opacity=0.4,
                    showlegend=(i == 0),
                    name='Samples',
                    hoverinfo='skip'
                ))

        if self.n_snapshots > 0:
            final = positions[-1]
            fig.add_trace(go.Scatter3d(
                x=final[:, 0],
                y=final[:, 1],
                z=final[:, 2],
                mode='markers',
                marker=dict(color=sample_color, size=config.DEFAULT_MARKER_SIZE),
                name=f'Samples at t = {self.tf:.1f} Myr',
                hovertemplate='x: %{x:.2f}<br>y: %{y:.2f}<br>z: %{z:.2f}<extra></extra>'
            ))

        if mw is not None:
            self.add_centre_to_plot(fig, mw, color=config.DEFAULT_MW_COLOR,
                                    name=mw.name or 'MW')
        if lmc is not None:
            self.add_centre_to_plot(fig, lmc, color=config.DEFAULT_LMC_COLOR,
                                    name=lmc.name or 'LMC')

        fig.update_layout(
            scene=dict(
                xaxis_title='X [kpc]',
                yaxis_title='Y [kpc]',
                zaxis_title='Z [kpc]',
                aspectmode='data'
            ),
            title='Hypervelocity Star Ensemble',
            showlegend=True
        )
        return fig

    def add_centre_to_plot(self, fig: go.Figure,
                           interpolator: "TrajectoryInterpolator",
                           color: str = 'blue', name: Optional[str] = None,
                           n_points: int = 500) -> go.Figure:
        """
        Add a galaxy centre path over the recorded time span to a figure.

        Parameters:
            fig: Existing Plotly Figure object
            interpolator: Centre history to draw
            color: Line color (default: 'blue')
            name: Legend name (default: interpolator name)
            n_points: Number of points along the path (default: 500)

        Returns:
            Updated Plotly Figure object (same object, modified in place)
        """
        if self.n_snapshots == 0:
            return fig
        times = np.linspace(self.t0, self.tf, n_points)
        path = interpolator.evaluate(times)[:, 0:3]
        fig.add_trace(go.Scatter3d(
            x=path[:, 0],
            y=path[:, 1],
            z=path[:, 2],
            mode='lines',
            line=dict(color=color, width=4),
            name=name or interpolator.name or 'Centre',
        ))
        # mark the centre at the end of the run
        fig.add_trace(go.Scatter3d(
            x=[path[-1, 0]],
            y=[path[-1, 1]],
            z=[path[-1, 2]],
            mode='markers',
            marker=dict(color=color, size=6),
            showlegend=False,
            hoverinfo='skip'
        ))
        return fig

    # ========== SPECIAL METHODS ==========
    def __len__(self):
        return self.n_snapshots

    def __repr__(self):
        if self.n_snapshots == 0:
            return "EnsembleHistory(empty)"
        return (f"EnsembleHistory(n_snapshots={self.n_snapshots}, "
                f"n_samples={self.n_samples}, t0={self.t0}, tf={self.tf})")
