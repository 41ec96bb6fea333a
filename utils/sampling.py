import torch
import torch.nn.functional as F

from src.errors import DistributionExhaustedError


def softmax(logits, temperature=1.0):
    # probabilities over the vocabulary, sums to 1
    return F.softmax(logits / temperature, dim=-1)


def sample_from_softmax(probs, generator=None, strict=False):
    """
    Draw one index from a categorical distribution by inverting its CDF.

    A uniform value r in [0, 1) is drawn and the first index whose running
    sum of probabilities exceeds r is returned. Equal probabilities are
    resolved by index order.

    Args:
        probs: 1D tensor of non-negative probabilities summing to 1
        generator: optional torch.Generator (CPU) used for the uniform draw
        strict: raise DistributionExhaustedError when the probabilities sum to
            less than r instead of clamping to the last index

    Returns:
        int in [0, len(probs))
    """
    if probs.dim() != 1 or probs.shape[0] == 0:
        raise ValueError(f"Expected a non-empty 1D distribution, got shape {tuple(probs.shape)}")

    rand = torch.rand((), generator=generator, dtype=torch.float64)

    # accumulate in double precision on the CPU
    cdf = torch.cumsum(probs.detach().to("cpu", torch.float64), dim=0)
    index = int(torch.searchsorted(cdf, rand.reshape(1), right=True).item())

    if index >= probs.shape[0]:
        # rounding left the total just under the draw
        if strict:
            raise DistributionExhaustedError(
                f"Could not sample from softmax: total probability {cdf[-1].item():.8f} <= draw {rand.item():.8f}"
            )
        index = probs.shape[0] - 1
    return index
