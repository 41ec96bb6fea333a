from typing import NamedTuple

import torch
import torch.nn as nn

from src.checkpoint import load_parameters
from src.config import Model
from src.errors import ShapeMismatchError

"""Stacked LSTM used by Performance RNN for single-step inference.
Input is a one-hot event vector, output is a vector of logits over the
event vocabulary for the next event. The weights come from a pretrained
checkpoint and are never trained here."""


class LSTMState(NamedTuple):
    c: torch.Tensor
    h: torch.Tensor


def basic_lstm_cell(forget_bias, kernel, bias, data, c, h):
    """
    One timestep of a basic LSTM cell (TensorFlow BasicLSTMCell layout).

    The fused kernel maps [data, h] to four gate pre-activations stacked in the
    order input, new input (candidate), forget, output.

    Args:
        forget_bias: constant added to the forget gate before the sigmoid
        kernel: tensor of shape (input + hidden, 4 * hidden)
        bias: tensor of shape (4 * hidden,)
        data: input vector of shape (input,)
        c: previous cell state of shape (hidden,)
        h: previous hidden state of shape (hidden,)

    Returns:
        (new_c, new_h) both of shape (hidden,)
    """
    combined = torch.cat([data, h], dim=-1)
    weighted = combined @ kernel + bias

    i, j, f, o = torch.split(weighted, c.shape[-1], dim=-1)

    new_c = c * torch.sigmoid(f + forget_bias) + torch.sigmoid(i) * torch.tanh(j)
    new_h = torch.tanh(new_c) * torch.sigmoid(o)
    return new_c, new_h


class PerformanceRNN(nn.Module):
    """
    Stack of basic LSTM cells followed by a fully connected projection.

    All weights are buffers so the module has no trainable parameters and
    moves with .to(device).

    Args:
        params: validated ModelParameters (see src.checkpoint)
        forget_bias: constant added to every forget gate (default: 1.0)
    """
    def __init__(self, params, forget_bias=Model.FORGET_BIAS):
        super().__init__()
        self.num_layers = len(params.layers)
        self.layer_sizes = tuple(layer.hidden_size for layer in params.layers)
        self.input_size = params.layers[0].input_size
        self.vocab_size = params.projection.biases.shape[0]

        for k, layer in enumerate(params.layers):
            self.register_buffer(f"kernel_{k}", layer.kernel.clone())
            self.register_buffer(f"bias_{k}", layer.bias.clone())
        self.register_buffer("fc_weights", params.projection.weights.clone())
        self.register_buffer("fc_biases", params.projection.biases.clone())
        self.register_buffer("forget_bias", torch.tensor(float(forget_bias)))

    @classmethod
    def from_parameters(cls, params, **kwargs):
        return cls(params, **kwargs)

    @classmethod
    def from_checkpoint(cls, location, map_location="cpu", **kwargs):
        return cls(load_parameters(location, map_location=map_location), **kwargs)

    @property
    def device(self):
        return self.fc_biases.device

    def layer_weights(self, k):
        return getattr(self, f"kernel_{k}"), getattr(self, f"bias_{k}")

    def zero_state(self):
        """All-zero (c, h) pair for every layer."""
        return tuple(
            LSTMState(torch.zeros(size, device=self.device), torch.zeros(size, device=self.device))
            for size in self.layer_sizes
        )

    def _check_inputs(self, input_vector, states):
        if tuple(input_vector.shape) != (self.input_size,):
            raise ShapeMismatchError(
                f"Input vector has shape {tuple(input_vector.shape)}, expected ({self.input_size},)"
            )
        if len(states) != self.num_layers:
            raise ShapeMismatchError(f"Got state for {len(states)} layers, expected {self.num_layers}")
        for k, (state, size) in enumerate(zip(states, self.layer_sizes)):
            c, h = state
            if tuple(c.shape) != (size,) or tuple(h.shape) != (size,):
                raise ShapeMismatchError(
                    f"Layer {k} state has shapes c={tuple(c.shape)} h={tuple(h.shape)}, expected ({size},)"
                )

    def step(self, input_vector, states):
        """
        Advance every layer by one timestep.

        Args:
            input_vector: one-hot event vector of shape (input_size,)
            states: sequence of LSTMState, one per layer

        Returns:
            new_states: tuple of new LSTMState, one per layer (inputs are not modified)
            logits: tensor of shape (vocab_size,)
        """
        self._check_inputs(input_vector, states)

        x = input_vector
        new_states = []
        for k, (c, h) in enumerate(states):
            kernel, bias = self.layer_weights(k)
            c, h = basic_lstm_cell(self.forget_bias, kernel, bias, x, c, h)
            new_states.append(LSTMState(c, h))
            # hidden state of this layer is the input of the next one
            x = h

        logits = x @ self.fc_weights + self.fc_biases
        return tuple(new_states), logits

    def forward(self, input_vector, states=None):
        if states is None:
            states = self.zero_state()
        return self.step(input_vector, states)


def build_model(location, device="cpu"):
    """Load a checkpoint and return a PerformanceRNN in eval mode on the given device."""
    params = load_parameters(location)
    model = PerformanceRNN(params).to(device)
    model.eval()
    n_weights = sum(b.numel() for b in model.buffers())
    print(f"Loaded Performance RNN with {n_weights:,} weights, layer sizes {model.layer_sizes}")
    return model
