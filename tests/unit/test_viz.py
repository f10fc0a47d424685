"""Smoke tests for trajectory plots."""

import matplotlib.pyplot as plt

from saferoute.observer import LedgerMirror
from saferoute.viz import plot_slot_timeline, plot_trajectories, save_figure


def test_plot_trajectories(service, scenario_a_path, tmp_path):
    service.submit(1, 0, 10, scenario_a_path)
    service.submit(3, 20, 30, [(40.0, -74.0), (40.002, -74.0), (40.003, -74.001)])
    mirror = LedgerMirror(service)
    mirror.reload()

    fig, ax = plot_trajectories(mirror.trajectories, show_samples=True)
    assert ax.get_xlabel() == "Longitude (°)"
    assert len(ax.get_lines()) == 2

    out = tmp_path / "trajectories.png"
    save_figure(fig, out)
    assert out.exists()
    plt.close(fig)


def test_plot_empty_mirror():
    fig, ax = plot_trajectories(())
    assert len(ax.get_lines()) == 0
    plt.close(fig)


def test_plot_slot_timeline(service, scenario_a_path):
    service.submit(1, 0, 10, scenario_a_path)
    service.submit(3, 20, 30, scenario_a_path)
    mirror = LedgerMirror(service)
    mirror.reload()

    fig, ax = plot_slot_timeline(mirror.trajectories)
    assert len(ax.patches) == 2
    plt.close(fig)
