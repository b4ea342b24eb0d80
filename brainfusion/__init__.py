"""brainfusion — Small biologically-inspired neural models for experimentation.

Subpackages:
    simulation   LIF spiking network with STDP and event-driven spike injection
    feedforward  Sigmoid feed-forward network (backpropagation, Hebbian learning)
    utils        Print-based logging
"""

__version__ = "0.1.0"
