"""Multi-step runners for the spiking network.

``simulate`` drives a SpikingNetwork with a current stimulus matrix;
``replay_events`` drives an EventEmulator with a schedule of spike
injections. Both collect spikes into a SimulationResult.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import pandas as pd

from brainfusion.utils import get_logger

LOG = get_logger("simulation.engine")


@dataclass
class SimulationResult:
    """Results from a multi-step run.

    Attributes
    ----------
    spike_times : list of np.ndarray
        spike_times[i] holds the simulation times at which neuron i fired.
    spikes : np.ndarray
        Boolean spike matrix, shape (n_neurons, n_steps).
    v_trace : Optional[np.ndarray]
        Membrane potential after each step, shape (n_recorded, n_steps).
        Only populated if record_v=True.
    recorded_idx : np.ndarray
        Indices of neurons whose traces were recorded.
    weight_snapshots : list of np.ndarray
        Copies of the weight matrix taken every snapshot_every steps.
    snapshot_times : list of float
        Simulation time of each snapshot.
    dt : float
        Step size used.
    n_steps : int
        Number of steps run.
    t_start : float
        Network clock before the first step.
    """
    spike_times: list
    spikes: np.ndarray
    v_trace: Optional[np.ndarray] = None
    recorded_idx: np.ndarray = None
    weight_snapshots: list = field(default_factory=list)
    snapshot_times: list = field(default_factory=list)
    dt: float = 1.0
    n_steps: int = 0
    t_start: float = 0.0

    @property
    def n_neurons(self):
        return len(self.spike_times)

    @property
    def n_spikes(self):
        """Total number of spikes across all neurons."""
        return int(self.spikes.sum())

    @property
    def duration(self):
        return self.n_steps * self.dt

    def mean_rate(self):
        """Mean number of spikes per neuron per unit time."""
        if self.n_neurons == 0 or self.duration == 0:
            return 0.0
        return self.n_spikes / (self.n_neurons * self.duration)

    def neuron_rates(self):
        """Per-neuron spikes per unit time."""
        if self.duration == 0:
            return np.zeros(self.n_neurons)
        return self.spikes.sum(axis=1) / self.duration

    def spike_table(self):
        """One row per spike, sorted by time."""
        neurons, steps = np.nonzero(self.spikes)
        table = pd.DataFrame({
            "neuron": neurons,
            "step": steps,
            "time": self.t_start + (steps + 1) * self.dt,
        })
        return table.sort_values(["step", "neuron"]).reset_index(drop=True)


class _Recorder:
    """Accumulates per-step outputs of a network."""

    def __init__(self, network, n_steps, dt, record_v, record_idx,
                 snapshot_every):
        n = network.n_neurons
        self.network = network
        self.dt = dt
        self.n_steps = n_steps
        self.t_start = network.sim_time
        self.snapshot_every = snapshot_every
        self.spikes = np.zeros((n, n_steps), dtype=bool)
        self.spike_times = [[] for _ in range(n)]
        self.weight_snapshots = []
        self.snapshot_times = []

        if record_v:
            if record_idx is None:
                record_idx = np.arange(min(100, n))
            self.record_idx = np.asarray(record_idx)
            self.v_trace = np.zeros((len(self.record_idx), n_steps))
        else:
            self.record_idx = np.array([], dtype=int)
            self.v_trace = None

    def record(self, step, spiked):
        t = self.network.sim_time
        self.spikes[:, step] = spiked
        for idx in np.nonzero(spiked)[0]:
            self.spike_times[idx].append(t)
        if self.v_trace is not None and len(self.record_idx) > 0:
            self.v_trace[:, step] = \
                self.network.membrane_potentials()[self.record_idx]
        if self.snapshot_every > 0 and step % self.snapshot_every == 0:
            self.weight_snapshots.append(self.network.weights)
            self.snapshot_times.append(t)

    def result(self):
        return SimulationResult(
            spike_times=[np.array(st) for st in self.spike_times],
            spikes=self.spikes,
            v_trace=self.v_trace,
            recorded_idx=self.record_idx,
            weight_snapshots=self.weight_snapshots,
            snapshot_times=self.snapshot_times,
            dt=self.dt,
            n_steps=self.n_steps,
            t_start=self.t_start,
        )


def simulate(network, stimulus=None, n_steps=None, dt=1.0, record_v=False,
             record_idx=None, snapshot_every=0):
    """Run a SpikingNetwork for several steps.

    Parameters
    ----------
    network : SpikingNetwork
        The network to advance. Its state carries over between calls.
    stimulus : np.ndarray, optional
        External current, shape (n_inputs, n_steps). Column k is passed
        to step k; n_inputs may differ from the neuron count.
        If None, no external input.
    n_steps : int, optional
        Number of steps. Required when stimulus is None.
    dt : float
        Step size.
    record_v : bool
        If True, record membrane potentials for selected neurons.
    record_idx : array-like, optional
        Indices of neurons to record. If None and record_v=True,
        records the first 100 neurons.
    snapshot_every : int
        Copy the weight matrix every this many steps. 0 to disable.

    Returns
    -------
    SimulationResult
    """
    if stimulus is not None:
        stimulus = np.asarray(stimulus, dtype=np.float64)
        if stimulus.ndim != 2:
            raise ValueError("stimulus must be 2-D (n_inputs, n_steps), "
                             f"got shape {stimulus.shape}")
        if n_steps is None:
            n_steps = stimulus.shape[1]
        elif n_steps != stimulus.shape[1]:
            raise ValueError(f"n_steps={n_steps} does not match stimulus "
                             f"length {stimulus.shape[1]}")
    elif n_steps is None:
        raise ValueError("n_steps is required when no stimulus is given")

    recorder = _Recorder(network, n_steps, dt, record_v, record_idx,
                         snapshot_every)

    LOG.info("Starting simulation: %d neurons, %d steps, dt=%.3f",
             network.n_neurons, n_steps, dt)

    for step in range(n_steps):
        inputs = stimulus[:, step] if stimulus is not None else None
        recorder.record(step, network.step(inputs, dt))

    result = recorder.result()
    LOG.info("Simulation complete: %d spikes, mean rate %.4f",
             result.n_spikes, result.mean_rate())
    return result


def replay_events(emulator, schedule, n_steps, dt=1.0, record_v=False,
                  record_idx=None, snapshot_every=0):
    """Drive an EventEmulator from a schedule of spike injections.

    Parameters
    ----------
    emulator : EventEmulator
        The emulator to advance.
    schedule : dict
        Maps step index to an iterable of target neuron indices. Events
        are injected just before that step, stamped with the time the
        step will reach.
    n_steps : int
        Number of steps.
    dt : float
        Step size.
    record_v, record_idx, snapshot_every
        As for simulate().

    Returns
    -------
    SimulationResult
    """
    network = emulator.network
    recorder = _Recorder(network, n_steps, dt, record_v, record_idx,
                         snapshot_every)

    schedule = {int(k): list(v) for k, v in schedule.items()}
    n_events = sum(len(v) for k, v in schedule.items() if k < n_steps)
    LOG.info("Replaying %d events over %d steps, dt=%.3f",
             n_events, n_steps, dt)

    for step in range(n_steps):
        for neuron_index in schedule.get(step, ()):
            emulator.inject_spike(neuron_index, network.sim_time + dt)
        recorder.record(step, emulator.step_event(dt))

    result = recorder.result()
    LOG.info("Replay complete: %d spikes, mean rate %.4f",
             result.n_spikes, result.mean_rate())
    return result
