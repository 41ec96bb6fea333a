"""
Seed control for reproducible generation

The sampler draws from its own torch.Generator so a run does not depend on
global RNG state. Passing --seed on the command line also seeds the global
generators, which keeps anything else that draws random numbers on the
model's device reproducible too.
"""
import random
import numpy as np
import torch


def set_seed(seed):
    """
    Seed Python, NumPy and PyTorch (CPU, CUDA and MPS) globally.

    Args:
        seed (int): seed shared by every global generator
    """
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)

    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)
    if torch.backends.mps.is_available():
        torch.mps.manual_seed(seed)

    print(f"Global random seed: {seed}")


def make_generator(seed=None):
    """
    Create the CPU torch.Generator used for the sampler's uniform draws.

    Args:
        seed (int | None): fixed seed, or None for a fresh nondeterministic seed

    Returns:
        torch.Generator
    """
    generator = torch.Generator(device="cpu")
    if seed is None:
        # without this every unseeded run would share torch's default seed
        generator.seed()
    else:
        generator.manual_seed(seed)
    return generator
