"""Leaky integrate-and-fire neuron.

A single-neuron membrane-potential state machine integrated with
forward Euler:

    dV/dt = -V / tau + I

The neuron spikes when V crosses threshold, resets, and then sits in a
refractory window during which its potential is clamped to the reset
value and no integration occurs.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class LIFParams:
    """Leaky integrate-and-fire neuron parameters.

    Parameters
    ----------
    name : str
        Preset name (e.g., "default", "fast").
    threshold : float
        Spike threshold.
    reset_potential : float
        Potential after a spike and during refraction.
    tau : float
        Membrane decay time constant. Must be positive.
    refractory_period : float
        Time after a spike during which the neuron cannot integrate.
    """
    name: str = "default"
    threshold: float = 1.0
    reset_potential: float = 0.0
    tau: float = 20.0
    refractory_period: float = 5.0

    def __post_init__(self):
        if not self.tau > 0:
            raise ValueError(f"tau must be positive, got {self.tau}")
        if self.refractory_period < 0:
            raise ValueError("refractory_period must be non-negative, "
                             f"got {self.refractory_period}")

    def to_dict(self):
        return {
            "name": self.name,
            "threshold": self.threshold,
            "reset_potential": self.reset_potential,
            "tau": self.tau,
            "refractory_period": self.refractory_period,
        }


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

NEURON_PRESETS = {
    "default": LIFParams(),
    "fast": LIFParams(name="fast", tau=5.0, refractory_period=2.0),
    "slow": LIFParams(name="slow", tau=50.0, refractory_period=10.0),
    "no_refractory": LIFParams(name="no_refractory", refractory_period=0.0),
}


def get_neuron_params(name):
    """Look up a neuron parameter preset by name."""
    if name not in NEURON_PRESETS:
        raise KeyError(f"Unknown neuron preset '{name}'. "
                       f"Available: {list(NEURON_PRESETS.keys())}")
    return NEURON_PRESETS[name]


# ---------------------------------------------------------------------------
# Neuron state
# ---------------------------------------------------------------------------

@dataclass
class LIFNeuron:
    """Mutable state of one LIF neuron.

    Attributes
    ----------
    params : LIFParams
        Fixed parameters.
    membrane_potential : float
        Current potential.
    time_since_spike : float
        Time elapsed since the last spike. A new neuron starts rested,
        i.e. already outside its refractory window.
    last_spike_time : float
        Simulation time of the most recent spike, -1.0 if it never fired.
    spiked : bool
        Whether the neuron fired on the most recent step only.
    """
    params: LIFParams = field(default_factory=LIFParams)
    membrane_potential: float = 0.0
    time_since_spike: Optional[float] = None
    last_spike_time: float = -1.0
    spiked: bool = False

    def __post_init__(self):
        if self.time_since_spike is None:
            self.time_since_spike = self.params.refractory_period

    @property
    def has_spiked(self):
        """True once the neuron has fired at least once."""
        return self.last_spike_time >= 0

    def reset_state(self):
        """Return to the freshly constructed state."""
        self.membrane_potential = 0.0
        self.time_since_spike = self.params.refractory_period
        self.last_spike_time = -1.0
        self.spiked = False

    def integrate(self, input_current, dt, current_time):
        """Advance the neuron by one time step.

        Parameters
        ----------
        input_current : float
            Total current for this step.
        dt : float
            Step size.
        current_time : float
            Simulation time stamped on a spike.

        Returns
        -------
        bool
            The new value of ``spiked``.
        """
        p = self.params
        self.time_since_spike += dt
        if self.time_since_spike < p.refractory_period:
            self.membrane_potential = p.reset_potential
            self.spiked = False
            return False

        self.membrane_potential += dt * (-self.membrane_potential / p.tau
                                         + input_current)

        if self.membrane_potential >= p.threshold:
            self.membrane_potential = p.reset_potential
            self.time_since_spike = 0.0
            self.last_spike_time = current_time
            self.spiked = True
        else:
            self.spiked = False
        return self.spiked
