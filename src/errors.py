"""Exceptions raised while loading a Performance RNN or generating with it.

None of these are retried. They point at a bad checkpoint or a programming
error, so they propagate and end the generation run.
"""


class PerformanceRNNError(Exception):
    """Base class for every error raised by this project."""


class ShapeMismatchError(PerformanceRNNError, ValueError):
    """A vector or weight tensor has the wrong dimensions for its layer."""


class MissingWeightError(PerformanceRNNError, KeyError):
    """A checkpoint is missing one of the required variables."""

    def __str__(self):
        # KeyError repr()s its argument, keep the message readable
        return str(self.args[0]) if self.args else ""


class InvalidVocabularyIndexError(PerformanceRNNError, IndexError):
    """An index outside [0, VOCAB_SIZE) was decoded."""


class InvalidEventError(PerformanceRNNError, ValueError):
    """An event cannot be encoded, its value is outside the vocabulary."""


class DistributionExhaustedError(PerformanceRNNError, RuntimeError):
    """The cumulative probability never exceeded the random draw."""
