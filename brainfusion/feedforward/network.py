"""Feed-forward sigmoid network trained by backpropagation or Hebbian updates.

Independent of the spiking engine: no state is shared with it.

Layer l computes

    a_l = sigmoid(W_l a_{l-1} + b_l)

with W_l of shape (n_l, n_{l-1}). Two local learning schemes are
supported on top of the forward pass:

    backpropagate:  delta_L = (t - a_L) a_L (1 - a_L)
                    delta_l = (W_{l+1}^T delta_{l+1}) a_l (1 - a_l)
                    W_l += rate * delta_l a_{l-1}^T,  b_l += rate * delta_l

    train_hebbian:  W_l += rate * a_l a_{l-1}^T,      b_l += rate * a_l
"""

import numpy as np

from brainfusion.utils import get_logger

LOG = get_logger("feedforward.network")


def sigmoid(x):
    """Logistic activation 1 / (1 + exp(-x))."""
    return 1.0 / (1.0 + np.exp(-np.asarray(x, dtype=np.float64)))


class FeedForwardNetwork:
    """Fully connected sigmoid network.

    Parameters
    ----------
    layer_sizes : sequence of int
        Sizes from input to output; at least two entries.
    seed : int, optional
        Seed for weight and bias initialisation when rng is not given.
    rng : np.random.RandomState or np.random.Generator, optional
        Explicit random source.
    """

    def __init__(self, layer_sizes, seed=None, rng=None):
        layer_sizes = [int(s) for s in layer_sizes]
        if len(layer_sizes) < 2:
            raise ValueError("layer_sizes needs at least an input and an "
                             f"output size, got {layer_sizes}")
        if any(s < 1 for s in layer_sizes):
            raise ValueError(f"layer sizes must be positive, got {layer_sizes}")

        if rng is None:
            rng = np.random.RandomState(seed)

        self.layer_sizes = layer_sizes
        self.weights = []
        self.biases = []
        for n_in, n_out in zip(layer_sizes[:-1], layer_sizes[1:]):
            self.weights.append(rng.uniform(-1.0, 1.0, size=(n_out, n_in)))
            self.biases.append(rng.uniform(-1.0, 1.0, size=n_out))

        LOG.debug("Built feed-forward network %s", layer_sizes)

    @property
    def n_layers(self):
        """Number of weight layers (excludes the input layer)."""
        return len(self.weights)

    def _check_inputs(self, inputs):
        inputs = np.asarray(inputs, dtype=np.float64).ravel()
        if len(inputs) != self.layer_sizes[0]:
            raise ValueError(f"Expected {self.layer_sizes[0]} inputs, "
                             f"got {len(inputs)}")
        return inputs

    def _forward_with_cache(self, inputs):
        activations = []
        current = inputs
        for W, b in zip(self.weights, self.biases):
            current = sigmoid(W @ current + b)
            activations.append(current)
        return activations

    def forward(self, inputs):
        """Output activations for one input vector."""
        return self._forward_with_cache(self._check_inputs(inputs))[-1]

    def backpropagate(self, inputs, targets, rate):
        """One gradient step on the squared error for a single example.

        Returns
        -------
        float
            Sum of squared errors before the update.
        """
        inputs = self._check_inputs(inputs)
        targets = np.asarray(targets, dtype=np.float64).ravel()
        if len(targets) != self.layer_sizes[-1]:
            raise ValueError(f"Expected {self.layer_sizes[-1]} targets, "
                             f"got {len(targets)}")

        activations = self._forward_with_cache(inputs)
        outputs = activations[-1]
        error = targets - outputs

        deltas = [None] * self.n_layers
        deltas[-1] = error * outputs * (1.0 - outputs)
        for l in range(self.n_layers - 2, -1, -1):
            a = activations[l]
            deltas[l] = (self.weights[l + 1].T @ deltas[l + 1]) * a * (1.0 - a)

        for l in range(self.n_layers):
            prev = inputs if l == 0 else activations[l - 1]
            self.weights[l] += rate * np.outer(deltas[l], prev)
            self.biases[l] += rate * deltas[l]

        return float(np.sum(error ** 2))

    def train_hebbian(self, inputs, rate):
        """Unsupervised Hebbian update from one input vector."""
        inputs = self._check_inputs(inputs)
        activations = self._forward_with_cache(inputs)
        for l in range(self.n_layers):
            prev = inputs if l == 0 else activations[l - 1]
            self.weights[l] += rate * np.outer(activations[l], prev)
            self.biases[l] += rate * activations[l]
