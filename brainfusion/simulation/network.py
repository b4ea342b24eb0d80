"""Fully connected recurrent network of LIF neurons with STDP.

Each call to ``step`` advances the network by one tick:

    1. sim_time += dt
    2. I_i = input_i + sum_j W[i, j] * s_j(previous tick)
    3. every neuron integrates I_i and reports whether it spiked
    4. STDP updates every synapse with spike history

Spikes reach their targets one tick later: the recurrent current is
computed from a separate buffer holding the previous tick's spikes, so
there is no same-tick feedback.
"""

from typing import Optional

import numpy as np
import pandas as pd

from brainfusion.simulation.neuron import LIFNeuron, LIFParams
from brainfusion.simulation.plasticity import STDPParams, apply_stdp
from brainfusion.utils import get_logger

LOG = get_logger("simulation.network")


def _resolve_rng(seed=None, rng=None):
    if rng is not None:
        return rng
    return np.random.RandomState(seed)


class SpikingNetwork:
    """A dense, recurrent spiking network.

    Parameters
    ----------
    n_neurons : int
        Number of neurons, fixed for the lifetime of the network.
    neuron_params : LIFParams or sequence of LIFParams, optional
        Shared parameters, or one set per neuron. Defaults to LIFParams().
    stdp : STDPParams, optional
        Plasticity hyperparameters. Defaults to STDPParams().
    weights : array-like, optional
        Initial (n_neurons, n_neurons) weight matrix indexed [post, pre].
        Copied. If None, weights are drawn uniformly from weight_range.
        Every entry must lie within the STDP weight bounds.
    weight_range : tuple of float
        (low, high) of the uniform weight initialisation; must lie within
        the STDP weight bounds.
    seed : int, optional
        Seed for the weight initialisation when rng is not given.
    rng : np.random.RandomState or np.random.Generator, optional
        Explicit random source; takes precedence over seed.
    """

    def __init__(self, n_neurons, neuron_params=None, stdp=None,
                 weights=None, weight_range=(-0.1, 0.1), seed=None, rng=None):
        if n_neurons < 1:
            raise ValueError(f"n_neurons must be at least 1, got {n_neurons}")

        if neuron_params is None:
            neuron_params = LIFParams()
        if isinstance(neuron_params, LIFParams):
            neuron_params = [neuron_params] * n_neurons
        elif len(neuron_params) != n_neurons:
            raise ValueError(f"Expected {n_neurons} neuron parameter sets, "
                             f"got {len(neuron_params)}")

        self.stdp = stdp if stdp is not None else STDPParams()

        if weights is not None:
            weights = np.array(weights, dtype=np.float64)
            if weights.shape != (n_neurons, n_neurons):
                raise ValueError(f"weights must have shape "
                                 f"({n_neurons}, {n_neurons}), "
                                 f"got {weights.shape}")
        else:
            low, high = weight_range
            if low < self.stdp.min_weight or high > self.stdp.max_weight:
                raise ValueError(f"weight_range ({low}, {high}) lies outside "
                                 f"the STDP bounds [{self.stdp.min_weight}, "
                                 f"{self.stdp.max_weight}]")
            weights = _resolve_rng(seed, rng).uniform(
                low, high, size=(n_neurons, n_neurons)).astype(np.float64)

        if (weights.min() < self.stdp.min_weight
                or weights.max() > self.stdp.max_weight):
            raise ValueError(f"Initial weights span [{weights.min()}, "
                             f"{weights.max()}], outside the STDP bounds "
                             f"[{self.stdp.min_weight}, {self.stdp.max_weight}]")

        self._n = n_neurons
        self._neurons = [LIFNeuron(params=p) for p in neuron_params]
        self._weights = weights
        self._prev_spikes = np.zeros(n_neurons, dtype=bool)
        self._sim_time = 0.0

    # -----------------------------------------------------------------------
    # Read-only views
    # -----------------------------------------------------------------------

    @property
    def n_neurons(self):
        return self._n

    @property
    def n_synapses(self):
        return self._n * self._n

    @property
    def sim_time(self):
        """Simulation clock; only ever increases."""
        return self._sim_time

    @property
    def weights(self):
        """Copy of the weight matrix, indexed [post, pre]."""
        return self._weights.copy()

    @property
    def neurons(self):
        return tuple(self._neurons)

    @property
    def last_spikes(self):
        """Spike vector produced by the most recent step."""
        return self._prev_spikes.copy()

    def membrane_potentials(self):
        return np.array([nrn.membrane_potential for nrn in self._neurons])

    def last_spike_times(self):
        return np.array([nrn.last_spike_time for nrn in self._neurons])

    def set_weight(self, post, pre, value):
        """Set one synapse, clamped into the plastic weight bounds."""
        if not (0 <= post < self._n and 0 <= pre < self._n):
            raise IndexError(f"Synapse ({post}, {pre}) out of range "
                             f"for {self._n} neurons")
        self._weights[post, pre] = min(max(value, self.stdp.min_weight),
                                       self.stdp.max_weight)

    # -----------------------------------------------------------------------
    # Dynamics
    # -----------------------------------------------------------------------

    def _input_currents(self, inputs):
        """External currents padded with zeros or truncated to n_neurons."""
        currents = np.zeros(self._n, dtype=np.float64)
        if inputs is None:
            return currents
        inputs = np.asarray(inputs, dtype=np.float64).ravel()
        k = min(len(inputs), self._n)
        currents[:k] = inputs[:k]
        return currents

    def step(self, inputs, dt):
        """Advance the network by one tick.

        Parameters
        ----------
        inputs : array-like
            External current per neuron. Missing entries count as zero,
            extra entries are ignored.
        dt : float
            Step size. Must be positive.

        Returns
        -------
        np.ndarray
            Boolean spike vector for this tick.
        """
        if not dt > 0:
            raise ValueError(f"dt must be positive, got {dt}")

        currents = self._input_currents(inputs)
        self._sim_time += dt

        if np.any(self._prev_spikes):
            currents += self._weights[:, self._prev_spikes].sum(axis=1)

        spikes = np.zeros(self._n, dtype=bool)
        for i, nrn in enumerate(self._neurons):
            spikes[i] = nrn.integrate(currents[i], dt, self._sim_time)

        apply_stdp(self._weights, self.last_spike_times(), self.stdp)

        self._prev_spikes = spikes
        return spikes.copy()

    # -----------------------------------------------------------------------
    # Reporting
    # -----------------------------------------------------------------------

    def neuron_table(self):
        """Per-neuron parameters and state as a DataFrame."""
        rows = []
        for i, nrn in enumerate(self._neurons):
            row = {"index": i}
            row.update(nrn.params.to_dict())
            row.update({
                "membrane_potential": nrn.membrane_potential,
                "time_since_spike": nrn.time_since_spike,
                "last_spike_time": nrn.last_spike_time,
                "spiked": nrn.spiked,
            })
            rows.append(row)
        return pd.DataFrame(rows).set_index("index")

    @property
    def is_heterogeneous(self):
        """True if neurons have different parameters."""
        first = self._neurons[0].params
        return any(nrn.params != first for nrn in self._neurons[1:])

    def summary(self):
        """Return a summary string."""
        n_active = sum(nrn.has_spiked for nrn in self._neurons)
        lines = [
            f"SpikingNetwork: {self._n:,} neurons, {self.n_synapses:,} synapses",
            f"  Heterogeneous: {self.is_heterogeneous}",
            f"  sim_time: {self._sim_time:.3f}",
            f"  neurons with spike history: {n_active}",
            f"  weight range: [{self._weights.min():.3f}, "
            f"{self._weights.max():.3f}]",
            f"  STDP: {'on' if self.stdp.enabled else 'off'}, "
            f"lr={self.stdp.learning_rate}, "
            f"bounds=[{self.stdp.min_weight}, {self.stdp.max_weight}]",
        ]
        return "\n".join(lines)


def build_network(n_neurons, seed=None, neuron_params=None,
                  stdp: Optional[STDPParams] = None, **kwargs):
    """Build a SpikingNetwork and log its construction.

    Parameters
    ----------
    n_neurons : int
        Number of neurons.
    seed : int, optional
        Seed for the weight initialisation.
    neuron_params : LIFParams or sequence, optional
        Neuron parameters.
    stdp : STDPParams, optional
        Plasticity hyperparameters.
    **kwargs
        Forwarded to SpikingNetwork (weights, weight_range, rng).

    Returns
    -------
    SpikingNetwork
    """
    net = SpikingNetwork(n_neurons, neuron_params=neuron_params, stdp=stdp,
                         seed=seed, **kwargs)
    LOG.info("Built spiking network: %d neurons, %d synapses, seed=%s",
             net.n_neurons, net.n_synapses, seed)
    return net
