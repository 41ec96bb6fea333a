"""fixtures for tests"""

import sys
from pathlib import Path

import pytest
import torch

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.checkpoint import LayerParameters, ModelParameters, ProjectionParameters
from src.config import Model, VOCAB_SIZE
from models.generators.generator_lstm import PerformanceRNN

LAYER_SIZES = (8, 6, 4)


def make_parameters(layer_sizes=LAYER_SIZES, input_size=Model.INPUT_SIZE,
                    vocab_size=VOCAB_SIZE, seed=0, fill=None):
    """build a parameter set in memory, random unless fill is given"""
    gen = torch.Generator().manual_seed(seed)

    def tensor(*shape):
        if fill is not None:
            return torch.full(shape, float(fill))
        return torch.randn(*shape, generator=gen) * 0.1

    layers = []
    in_size = input_size
    for hidden in layer_sizes:
        layers.append(LayerParameters(tensor(in_size + hidden, 4 * hidden), tensor(4 * hidden)))
        in_size = hidden
    projection = ProjectionParameters(tensor(in_size, vocab_size), tensor(vocab_size))
    return ModelParameters(tuple(layers), projection)


@pytest.fixture
def params():
    """small random parameter set with the real vocabulary"""
    return make_parameters()


@pytest.fixture
def zero_params():
    """all-zero weights and biases"""
    return make_parameters(fill=0.0)


@pytest.fixture
def model(params):
    return PerformanceRNN(params).eval()


@pytest.fixture
def variables(params):
    """checkpoint-style name -> tensor dict"""
    return params.to_variables()
