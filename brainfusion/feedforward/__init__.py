"""feedforward — Sigmoid multilayer network with backprop and Hebbian learning."""

from .network import FeedForwardNetwork, sigmoid
