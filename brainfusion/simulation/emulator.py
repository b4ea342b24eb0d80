"""Event-driven front end for a SpikingNetwork.

Instead of supplying a current vector, callers queue discrete spike
events. On the next ``step_event`` every queued event contributes a
fixed injection strength to its target neuron's current, the queue is
drained, and the network advances one tick.

Event times are recorded but not checked against the network clock;
late or out-of-order events are consumed like any other. Events aimed
at a neuron index outside the network are dropped.
"""

import operator

import numpy as np

from brainfusion.simulation.network import SpikingNetwork
from brainfusion.utils import get_logger

LOG = get_logger("simulation.emulator")


class EventEmulator:
    """Spike-injection wrapper that exclusively owns one network.

    Parameters
    ----------
    network : SpikingNetwork
        The network to drive.
    injection_strength : float
        Current added per queued event.
    """

    def __init__(self, network, injection_strength=1.0):
        self._net = network
        self.injection_strength = injection_strength
        self._pending = []

    @property
    def network(self):
        return self._net

    @property
    def pending_spikes(self):
        """Queued (neuron_index, time) events, in injection order."""
        return tuple(self._pending)

    @property
    def n_pending(self):
        return len(self._pending)

    def inject_spike(self, neuron_index, time):
        """Queue a spike event for the next tick.

        neuron_index must be an integer (int or numpy integer); anything
        else raises TypeError here rather than at consumption time.
        """
        self._pending.append((operator.index(neuron_index), time))

    def _drain(self):
        currents = np.zeros(self._net.n_neurons, dtype=np.float64)
        n_dropped = 0
        for neuron_index, _ in self._pending:
            if 0 <= neuron_index < self._net.n_neurons:
                currents[neuron_index] += self.injection_strength
            else:
                n_dropped += 1
        self._pending.clear()
        if n_dropped:
            LOG.debug("Dropped %d events with out-of-range neuron index",
                      n_dropped)
        return currents

    def step_event(self, dt):
        """Consume every pending event and advance the network one tick.

        Parameters
        ----------
        dt : float
            Step size. Must be positive; a rejected call leaves the queue
            intact.

        Returns
        -------
        np.ndarray
            Boolean spike vector from the network.
        """
        if not dt > 0:
            raise ValueError(f"dt must be positive, got {dt}")
        return self._net.step(self._drain(), dt)


def build_emulator(n_neurons, injection_strength=1.0, **network_kwargs):
    """Build an EventEmulator around a freshly constructed network.

    Parameters
    ----------
    n_neurons : int
        Number of neurons.
    injection_strength : float
        Current added per queued event.
    **network_kwargs
        Forwarded to SpikingNetwork (seed, rng, weights, neuron_params, stdp).

    Returns
    -------
    EventEmulator
    """
    emulator = EventEmulator(SpikingNetwork(n_neurons, **network_kwargs),
                             injection_strength=injection_strength)
    LOG.info("Built event emulator: %d neurons, injection strength %.3f",
             n_neurons, injection_strength)
    return emulator
