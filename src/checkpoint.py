"""
Loading pretrained Performance RNN weights.

A checkpoint is a flat mapping of variable name -> tensor using the names of
the TensorFlow training graph (see Model.LSTM_KERNEL etc). Three storage
formats are understood:

    - a .pt/.pth file saved with torch.save({name: tensor, ...})
    - a .npz archive saved with numpy.savez
    - a directory with a manifest.json in the deeplearn.js checkpoint format,
      where every variable is a raw little-endian float32 file

The raw mapping is turned into a ModelParameters record straight away so
missing or mis-shaped variables fail at load time instead of deep inside a
matrix multiply.
"""
import json
from pathlib import Path
from typing import NamedTuple, Tuple

import numpy as np
import torch

from src.config import Model, VOCAB_SIZE
from src.errors import MissingWeightError, ShapeMismatchError

MANIFEST_FILE = "manifest.json"


class LayerParameters(NamedTuple):
    """Kernel [input + hidden, 4 * hidden] and bias [4 * hidden] of one LSTM cell."""
    kernel: torch.Tensor
    bias: torch.Tensor

    @property
    def hidden_size(self):
        return self.bias.shape[0] // 4

    @property
    def input_size(self):
        return self.kernel.shape[0] - self.hidden_size


class ProjectionParameters(NamedTuple):
    """Fully connected output layer, weights [hidden, vocab] and biases [vocab]."""
    weights: torch.Tensor
    biases: torch.Tensor


class ModelParameters(NamedTuple):
    layers: Tuple[LayerParameters, ...]
    projection: ProjectionParameters

    @classmethod
    def from_variables(cls, variables, num_layers=Model.NUM_LAYERS,
                       input_size=Model.INPUT_SIZE, vocab_size=VOCAB_SIZE):
        """
        Build a validated parameter set from a name -> tensor mapping.

        Args:
            variables: mapping of checkpoint variable names to tensors/arrays
            num_layers: number of stacked LSTM cells to read
            input_size: width of the one-hot input vector
            vocab_size: number of output logits

        Raises:
            MissingWeightError: if a required variable is absent
            ShapeMismatchError: if tensor shapes do not chain together
        """
        layers = []
        expected_input = input_size
        for k in range(num_layers):
            kernel = _get_variable(variables, Model.LSTM_KERNEL.format(k), rank=2)
            bias = _get_variable(variables, Model.LSTM_BIAS.format(k), rank=1)
            layer = LayerParameters(kernel, bias)
            _check_layer(k, layer, expected_input)
            layers.append(layer)
            expected_input = layer.hidden_size

        weights = _get_variable(variables, Model.FC_WEIGHTS, rank=2)
        biases = _get_variable(variables, Model.FC_BIASES, rank=1)
        if tuple(weights.shape) != (expected_input, vocab_size):
            raise ShapeMismatchError(
                f"{Model.FC_WEIGHTS} has shape {tuple(weights.shape)}, "
                f"expected ({expected_input}, {vocab_size})"
            )
        if biases.shape[0] != vocab_size:
            raise ShapeMismatchError(
                f"{Model.FC_BIASES} has length {biases.shape[0]}, expected {vocab_size}"
            )

        return cls(tuple(layers), ProjectionParameters(weights, biases))

    def to_variables(self):
        """Flatten back into the checkpoint naming scheme."""
        variables = {}
        for k, layer in enumerate(self.layers):
            variables[Model.LSTM_KERNEL.format(k)] = layer.kernel
            variables[Model.LSTM_BIAS.format(k)] = layer.bias
        variables[Model.FC_WEIGHTS] = self.projection.weights
        variables[Model.FC_BIASES] = self.projection.biases
        return variables


def _get_variable(variables, name, rank):
    if name not in variables:
        raise MissingWeightError(f"Checkpoint is missing variable '{name}'")
    tensor = variables[name]
    if not torch.is_tensor(tensor):
        tensor = torch.from_numpy(np.asarray(tensor, dtype=np.float32))
    tensor = tensor.to(torch.float32)
    if tensor.dim() != rank:
        raise ShapeMismatchError(f"{name} should be rank {rank}, got shape {tuple(tensor.shape)}")
    return tensor


def _check_layer(k, layer, expected_input):
    bias_len = layer.bias.shape[0]
    if bias_len % 4 != 0:
        raise ShapeMismatchError(f"Layer {k} bias length {bias_len} is not divisible by 4")

    hidden = layer.hidden_size
    expected = (expected_input + hidden, 4 * hidden)
    if tuple(layer.kernel.shape) != expected:
        raise ShapeMismatchError(
            f"Layer {k} kernel has shape {tuple(layer.kernel.shape)}, expected {expected}"
        )


def load_manifest(directory):
    """Read a deeplearn.js style checkpoint directory (manifest.json + raw float32 files)."""
    directory = Path(directory)
    with open(directory / MANIFEST_FILE, "r") as f:
        manifest = json.load(f)

    variables = {}
    for name, entry in manifest.items():
        data = np.fromfile(directory / entry["filename"], dtype="<f4")
        shape = tuple(entry["shape"])
        if data.size != int(np.prod(shape)):
            raise ShapeMismatchError(
                f"{name}: file holds {data.size} values but manifest shape is {shape}"
            )
        variables[name] = torch.from_numpy(data.reshape(shape).copy())
    return variables


def load_variables(location, map_location="cpu"):
    """
    Load a raw name -> tensor mapping from a checkpoint file or directory.

    Args:
        location: path to a .pt/.pth file, a .npz archive or a manifest directory
        map_location: device passed on to torch.load

    Returns:
        dict of variable name -> torch.Tensor
    """
    location = Path(location)

    if location.is_dir():
        return load_manifest(location)

    if location.suffix == ".npz":
        with np.load(location) as archive:
            return {name: torch.from_numpy(archive[name].astype(np.float32)) for name in archive.files}

    state_dict = torch.load(location, map_location=map_location)
    if not isinstance(state_dict, dict):
        raise ValueError(f"Expected a dict of tensors in {location}, got {type(state_dict).__name__}")
    return dict(state_dict)


def load_parameters(location, map_location="cpu"):
    """Load and validate a checkpoint in one go."""
    variables = load_variables(location, map_location=map_location)
    params = ModelParameters.from_variables(variables)
    print(f"Loaded checkpoint from {location} with layer sizes "
          f"{tuple(layer.hidden_size for layer in params.layers)}")
    return params


# converts any supported checkpoint into a single weights-only .pt file
def save_variables(params, out_path):
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    state_dict = {name: tensor.detach().cpu() for name, tensor in params.to_variables().items()}
    torch.save(state_dict, out_path)
    print(f"saved weights to {out_path}")
