"""
Test suite for EnsembleHistory.

Tests cover:
- Appending and stacked array access
- Summary statistics (mean position, spread)
- DataFrame export
- Plotting functions (smoke tests)
"""

import pytest
import numpy as np
import pandas as pd
import plotly.graph_objects as go
from hvsim import EnsembleHistory, TrajectoryInterpolator


@pytest.fixture
def history():
    """Two samples moving apart along x over three snapshots."""
    h = EnsembleHistory()
    for t in (0.0, -1.0, -2.0):
        positions = np.array([[t, 0.0, 0.0], [-t, 0.0, 0.0]])
        velocities = np.array([[1.0, 0.0, 0.0], [-1.0, 0.0, 0.0]])
        h.append(t, positions, velocities)
    return h


class TestRecording:
    """Test appending snapshots."""

    def test_shapes(self, history):
        assert history.times.shape == (3,)
        assert history.positions.shape == (3, 2, 3)
        assert history.velocities.shape == (3, 2, 3)
        assert len(history) == 3
        assert history.n_samples == 2

    def test_time_range(self, history):
        assert history.t0 == 0.0
        assert history.tf == -2.0
        assert history.duration == -2.0

    def test_append_copies(self):
        h = EnsembleHistory()
        positions = np.zeros((1, 3))
        h.append(0.0, positions, np.zeros((1, 3)))
        positions[0, 0] = 5.0
        assert h.positions[0, 0, 0] == 0.0

    def test_sample_count_mismatch(self, history):
        with pytest.raises(ValueError, match="samples"):
            history.append(-3.0, np.zeros((3, 3)), np.zeros((3, 3)))

    def test_bad_shape(self):
        with pytest.raises(ValueError, match="shape"):
            EnsembleHistory().append(0.0, np.zeros((2, 2)), np.zeros((2, 2)))

    def test_construct_from_arrays(self, history):
        copy = EnsembleHistory(history.times, history.positions, history.velocities)
        assert np.array_equal(copy.positions, history.positions)

    def test_empty(self):
        h = EnsembleHistory()
        assert h.n_snapshots == 0
        assert h.n_samples == 0
        assert "empty" in repr(h)


class TestStatistics:
    """Test ensemble summaries."""

    def test_mean_positions(self, history):
        assert np.allclose(history.mean_positions(), 0.0)

    def test_spread(self, history):
        assert np.allclose(history.spread(), [0.0, 1.0, 2.0])

    def test_sample_track(self, history):
        assert np.allclose(history.sample_track(1)[:, 0], [0.0, 1.0, 2.0])


class TestExport:
    """Test DataFrame export."""

    def test_long_format(self, history):
        df = history.to_dataframe()
        assert isinstance(df, pd.DataFrame)
        assert len(df) == 6
        assert list(df.columns) == ['time', 'sample', 'x', 'y', 'z', 'vx', 'vy', 'vz']
        last = df[(df['time'] == -2.0) & (df['sample'] == 1)]
        assert last['x'].iloc[0] == 2.0
        assert last['vx'].iloc[0] == -1.0


class TestPlotting:
    """Smoke tests for plotting."""

    def test_plot_3d(self, history):
        fig = history.plot_3d()
        assert isinstance(fig, go.Figure)
        # two tracks and the end-point markers
        assert len(fig.data) == 3

    def test_plot_with_centres(self, history):
        mw = TrajectoryInterpolator([0.0, -2.0], [[0, 0, 0], [1, 0, 0]],
                                    [[0, 0, 0], [0, 0, 0]],
                                    time_factor=1.0, name="MW")
        fig = history.plot_3d(mw=mw, lmc=mw, show_tracks=False)
        names = [trace.name for trace in fig.data]
        assert "MW" in names

    def test_max_tracks(self, history):
        fig = history.plot_3d(max_tracks=1)
        assert len(fig.data) == 2

    def test_add_centre_to_empty_history(self):
        fig = go.Figure()
        mw = TrajectoryInterpolator([0.0], [[0, 0, 0]], [[0, 0, 0]])
        assert EnsembleHistory().add_centre_to_plot(fig, mw) is fig
        assert len(fig.data) == 0
