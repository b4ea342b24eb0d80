"""Pair-based spike-timing-dependent plasticity.

For every ordered (post, pre) pair in which both neurons have fired at
least once, the time difference between their most recent spikes
drives a weight change:

    delta_t = t_post - t_pre
    delta_t > 0   ->  dw = a_plus  * exp(-delta_t / tau_plus)    (potentiation)
    delta_t <= 0  ->  dw = a_minus * exp( delta_t / tau_minus)   (depression)

    w <- clip(w + learning_rate * dw, min_weight, max_weight)

The rule is applied on every step to every pair with spike history,
not only to pairs that fired on that step. Old pairs therefore keep
receiving a small, exponentially attenuated update.

Reference:
    Bi GQ & Poo MM (1998). J Neurosci 18(24):10464-10472.
    Song S, Miller KD & Abbott LF (2000). Nat Neurosci 3(9):919-926.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class STDPParams:
    """Hyperparameters of the pair-based STDP rule.

    Parameters
    ----------
    a_plus : float
        Potentiation amplitude (positive).
    a_minus : float
        Depression amplitude (negative).
    tau_plus, tau_minus : float
        Decay constants of the potentiation and depression windows.
    learning_rate : float
        Scale applied to every weight change.
    min_weight, max_weight : float
        Clamp bounds for plastic weights.
    enabled : bool
        When False the network skips plasticity altogether.
    """
    a_plus: float = 0.01
    a_minus: float = -0.012
    tau_plus: float = 20.0
    tau_minus: float = 20.0
    learning_rate: float = 0.001
    min_weight: float = -1.0
    max_weight: float = 1.0
    enabled: bool = True

    def __post_init__(self):
        if not self.a_plus > 0:
            raise ValueError(f"a_plus must be positive, got {self.a_plus}")
        if not self.a_minus < 0:
            raise ValueError(f"a_minus must be negative, got {self.a_minus}")
        if not (self.tau_plus > 0 and self.tau_minus > 0):
            raise ValueError("tau_plus and tau_minus must be positive, "
                             f"got {self.tau_plus}, {self.tau_minus}")
        if self.learning_rate < 0:
            raise ValueError("learning_rate must be non-negative, "
                             f"got {self.learning_rate}")
        if self.min_weight > self.max_weight:
            raise ValueError(f"min_weight ({self.min_weight}) exceeds "
                             f"max_weight ({self.max_weight})")

    def to_dict(self):
        return {
            "a_plus": self.a_plus,
            "a_minus": self.a_minus,
            "tau_plus": self.tau_plus,
            "tau_minus": self.tau_minus,
            "learning_rate": self.learning_rate,
            "min_weight": self.min_weight,
            "max_weight": self.max_weight,
            "enabled": self.enabled,
        }


def stdp_delta(last_spike_times, params):
    """Raw STDP weight changes for every (post, pre) pair.

    Parameters
    ----------
    last_spike_times : np.ndarray
        Most recent spike time per neuron, negative for neurons that
        never fired. Shape (n,).
    params : STDPParams
        Rule hyperparameters.

    Returns
    -------
    delta_w : np.ndarray
        Shape (n, n), indexed [post, pre]. Entries outside ``valid``
        are zero.
    valid : np.ndarray
        Boolean mask of pairs where both neurons have spiked.
    """
    t = np.asarray(last_spike_times, dtype=np.float64)
    has_spiked = t >= 0
    valid = has_spiked[:, None] & has_spiked[None, :]

    delta_t = t[:, None] - t[None, :]
    # Both branches are evaluated by np.where; the unused one may overflow.
    with np.errstate(over="ignore"):
        potentiation = params.a_plus * np.exp(-delta_t / params.tau_plus)
        depression = params.a_minus * np.exp(delta_t / params.tau_minus)
    delta_w = np.where(delta_t > 0, potentiation, depression)
    delta_w[~valid] = 0.0
    return delta_w, valid


def apply_stdp(weights, last_spike_times, params):
    """Apply one STDP update to a dense weight matrix in place.

    Pairs involving a neuron that has never fired are left untouched.

    Parameters
    ----------
    weights : np.ndarray
        Shape (n, n), indexed [post, pre]. Mutated in place.
    last_spike_times : np.ndarray
        Shape (n,).
    params : STDPParams
        Rule hyperparameters.

    Returns
    -------
    int
        Number of synapses updated.
    """
    if not params.enabled:
        return 0

    delta_w, valid = stdp_delta(last_spike_times, params)
    if not np.any(valid):
        return 0

    updated = np.clip(weights + params.learning_rate * delta_w,
                      params.min_weight, params.max_weight)
    weights[valid] = updated[valid]
    return int(np.count_nonzero(valid))
