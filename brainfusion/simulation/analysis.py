"""Post-simulation analysis tools.

Functions for computing firing rates, spike rasters, activity
statistics and weight trajectories from SimulationResult objects.
"""

import numpy as np
import pandas as pd


def _windowed_spikes(result, time_window=None):
    """spike_table() restricted to [start, end) when a window is given."""
    table = result.spike_table()
    if time_window is not None:
        t0, t1 = time_window
        table = table[(table["time"] >= t0) & (table["time"] < t1)]
    return table


def firing_rates(result, time_window=None):
    """Spikes per unit time for each neuron.

    Parameters
    ----------
    result : SimulationResult
        Simulation output.
    time_window : tuple of float, optional
        (start, end) in simulation time. Defaults to the whole run.

    Returns
    -------
    np.ndarray
        Shape (n_neurons,).
    """
    if time_window is None:
        return result.neuron_rates()

    t0, t1 = time_window
    counts = (_windowed_spikes(result, time_window)["neuron"]
              .value_counts()
              .reindex(range(result.n_neurons), fill_value=0))
    return counts.to_numpy(dtype=np.float64) / (t1 - t0)


def spike_raster(result, neuron_indices=None, time_window=None):
    """(time, neuron) pairs of every spike, in firing order.

    Parameters
    ----------
    result : SimulationResult
        Simulation output.
    neuron_indices : array-like, optional
        Subset of neurons. If None, all neurons.
    time_window : tuple of float, optional
        (start, end) to restrict.

    Returns
    -------
    times : np.ndarray
    neurons : np.ndarray
    """
    table = _windowed_spikes(result, time_window)
    if neuron_indices is not None:
        table = table[table["neuron"].isin(list(neuron_indices))]
    return table["time"].to_numpy(), table["neuron"].to_numpy()


def active_fraction(result, min_spikes=1):
    """Fraction of neurons that fired at least min_spikes times."""
    if result.n_neurons == 0:
        return 0.0
    counts = result.spikes.sum(axis=1)
    return float(np.mean(counts >= min_spikes))


def weight_evolution(snapshots, times):
    """Summarize weight trajectory across snapshots.

    Parameters
    ----------
    snapshots : list of np.ndarray
        Weight matrices at each snapshot (SimulationResult.weight_snapshots).
    times : list of float
        Snapshot times.

    Returns
    -------
    pd.DataFrame
        Columns: time, mean_weight, std_weight, min_weight, max_weight,
        frac_potentiated, frac_depressed (relative to the first snapshot).
    """
    columns = ["time", "mean_weight", "std_weight", "min_weight",
               "max_weight", "frac_potentiated", "frac_depressed"]
    if not snapshots:
        return pd.DataFrame(columns=columns)

    initial = snapshots[0]
    rows = []
    for t, w in zip(times, snapshots):
        rows.append({
            "time": t,
            "mean_weight": float(np.mean(w)),
            "std_weight": float(np.std(w)),
            "min_weight": float(np.min(w)),
            "max_weight": float(np.max(w)),
            "frac_potentiated": float(np.mean(w > initial + 1e-12)),
            "frac_depressed": float(np.mean(w < initial - 1e-12)),
        })
    return pd.DataFrame(rows, columns=columns)
