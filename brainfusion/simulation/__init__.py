"""simulation — Discrete-time LIF spiking network with STDP.

Pure-numpy engine: leaky integrate-and-fire neurons, a dense recurrent
weight matrix with one-tick transmission delay, pair-based STDP, and an
event-driven emulator that turns queued spike injections into input
currents.
"""

from .neuron import (
    LIFParams,
    LIFNeuron,
    NEURON_PRESETS,
    get_neuron_params,
)
from .plasticity import (
    STDPParams,
    stdp_delta,
    apply_stdp,
)
from .network import (
    SpikingNetwork,
    build_network,
)
from .emulator import (
    EventEmulator,
    build_emulator,
)
from .engine import (
    SimulationResult,
    simulate,
    replay_events,
)
from .stimulus import (
    StimulusProtocol,
    step_stimulus,
    pulse_stimulus,
    poisson_stimulus,
    poisson_events,
    combine_stimuli,
)
from .analysis import (
    firing_rates,
    spike_raster,
    active_fraction,
    weight_evolution,
)
