"""Stimulus protocols for the spiking network.

Current stimuli return an array of shape (n_neurons, n_steps) whose
column k is the input vector for step k. Event stimuli return a
schedule {step: [neuron indices]} for replay_events().
"""

from dataclasses import dataclass

import numpy as np


@dataclass
class StimulusProtocol:
    """Description of a stimulus for provenance tracking.

    Attributes
    ----------
    name : str
        Protocol name.
    target_indices : np.ndarray
        Neuron indices receiving stimulus.
    params : dict
        Protocol parameters.
    """
    name: str
    target_indices: np.ndarray
    params: dict


def _rng(seed):
    if seed is not None:
        return np.random.RandomState(seed)
    return np.random.RandomState()


def step_stimulus(n_neurons, n_steps, target_indices, amplitude=1.5,
                  start_step=0, end_step=None):
    """Generate a constant current injection over a window of steps.

    Parameters
    ----------
    n_neurons : int
        Total number of neurons.
    n_steps : int
        Number of steps.
    target_indices : array-like
        Neurons receiving current.
    amplitude : float
        Current amplitude.
    start_step, end_step : int
        Half-open window [start_step, end_step). end_step defaults to
        n_steps.

    Returns
    -------
    stimulus : np.ndarray
        Shape (n_neurons, n_steps).
    protocol : StimulusProtocol
    """
    target_indices = np.asarray(target_indices, dtype=int)
    stimulus = np.zeros((n_neurons, n_steps), dtype=np.float64)

    if end_step is None:
        end_step = n_steps
    end_step = min(end_step, n_steps)

    if start_step < end_step:
        stimulus[np.ix_(target_indices, range(start_step, end_step))] = amplitude

    protocol = StimulusProtocol(
        name="step",
        target_indices=target_indices,
        params={"amplitude": amplitude, "start_step": start_step,
                "end_step": end_step},
    )

    return stimulus, protocol


def pulse_stimulus(n_neurons, n_steps, target_indices, amplitude=1.0,
                   at_step=0, width=1):
    """Generate a brief current pulse of a few steps."""
    stimulus, _ = step_stimulus(n_neurons, n_steps, target_indices,
                                amplitude=amplitude, start_step=at_step,
                                end_step=at_step + width)
    protocol = StimulusProtocol(
        name="pulse",
        target_indices=np.asarray(target_indices, dtype=int),
        params={"amplitude": amplitude, "at_step": at_step, "width": width},
    )
    return stimulus, protocol


def poisson_stimulus(n_neurons, n_steps, target_indices, rate=0.05,
                     weight=1.0, dt=1.0, seed=None):
    """Generate Poisson spike-train input as a current matrix.

    Parameters
    ----------
    n_neurons : int
        Total number of neurons in the network.
    n_steps : int
        Number of steps.
    target_indices : array-like
        Indices of neurons receiving Poisson input.
    rate : float
        Expected input spikes per unit simulation time.
    weight : float
        Current delivered by each input spike.
    dt : float
        Step size.
    seed : int, optional
        Random seed.

    Returns
    -------
    stimulus : np.ndarray
        Shape (n_neurons, n_steps).
    protocol : StimulusProtocol
    """
    rng = _rng(seed)
    target_indices = np.asarray(target_indices, dtype=int)
    stimulus = np.zeros((n_neurons, n_steps), dtype=np.float64)

    p_spike = rate * dt
    spikes = rng.random_sample((len(target_indices), n_steps)) < p_spike
    stimulus[target_indices] = spikes * weight

    protocol = StimulusProtocol(
        name="poisson",
        target_indices=target_indices,
        params={"rate": rate, "weight": weight, "dt": dt, "seed": seed},
    )

    return stimulus, protocol


def poisson_events(n_steps, target_indices, rate=0.05, dt=1.0, seed=None):
    """Generate a Poisson spike-injection schedule.

    Returns
    -------
    schedule : dict
        {step: [neuron indices]} for steps with at least one event.
    protocol : StimulusProtocol
    """
    rng = _rng(seed)
    target_indices = np.asarray(target_indices, dtype=int)
    fired = rng.random_sample((len(target_indices), n_steps)) < rate * dt

    schedule = {}
    for row, step in zip(*np.nonzero(fired)):
        schedule.setdefault(int(step), []).append(int(target_indices[row]))

    protocol = StimulusProtocol(
        name="poisson_events",
        target_indices=target_indices,
        params={"rate": rate, "dt": dt, "seed": seed},
    )
    return schedule, protocol


def combine_stimuli(*stimuli):
    """Sum multiple stimulus arrays of the same shape."""
    result = stimuli[0].copy()
    for s in stimuli[1:]:
        result += s
    return result
