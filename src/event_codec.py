"""
Performance event vocabulary.

The model predicts one of VOCAB_SIZE classes per step. Each class is a
performance event: a note turning on or off, a shift forward in time, or a
change of the current velocity. The vocabulary is split into contiguous
ranges, one per event type, in the order given by Vocabulary.EVENT_RANGES.
"""
from dataclasses import dataclass

import torch

from src.config import Vocabulary, Model, VOCAB_SIZE
from src.errors import InvalidVocabularyIndexError, InvalidEventError, ShapeMismatchError


@dataclass(frozen=True)
class NoteOn:
    pitch: int
    event_type = "note_on"

    def __str__(self):
        return f"{self.event_type}: {self.pitch}"


@dataclass(frozen=True)
class NoteOff:
    pitch: int
    event_type = "note_off"

    def __str__(self):
        return f"{self.event_type}: {self.pitch}"


@dataclass(frozen=True)
class TimeShift:
    seconds: float
    event_type = "time_shift"

    def __str__(self):
        return f"{self.event_type}: {self.seconds}"


@dataclass(frozen=True)
class VelocityChange:
    velocity: int
    event_type = "velocity_change"

    def __str__(self):
        return f"{self.event_type}: {self.velocity}"


def event_range_offsets():
    """
    Map each event type to its (offset, size) inside the vocabulary.

    Returns:
        dict of event type name -> (first index of the range, number of slots)
    """
    offsets = {}
    offset = 0
    for event_type, min_value, max_value in Vocabulary.EVENT_RANGES:
        size = max_value - min_value + 1
        offsets[event_type] = (offset, size)
        offset += size
    return offsets


def decode_event(index):
    """
    Decode a vocabulary index into a performance event.

    Args:
        index: integer in [0, VOCAB_SIZE)

    Returns:
        NoteOn, NoteOff, TimeShift or VelocityChange

    Raises:
        InvalidVocabularyIndexError: if the index is outside the vocabulary
    """
    index = int(index)
    if index < 0:
        raise InvalidVocabularyIndexError(f"Could not decode index: {index}")

    offset = 0
    for event_type, min_value, max_value in Vocabulary.EVENT_RANGES:
        if offset <= index <= offset + max_value - min_value:
            value = index - offset
            if event_type == "note_on":
                return NoteOn(value)
            elif event_type == "note_off":
                return NoteOff(value)
            elif event_type == "time_shift":
                return TimeShift((value + 1) / Vocabulary.STEPS_PER_SECOND)
            elif event_type == "velocity_change":
                return VelocityChange((value + 1) * Vocabulary.VELOCITY_BIN_SIZE)
            else:
                raise ValueError(f"Could not decode event type: {event_type}")
        offset += max_value - min_value + 1

    raise InvalidVocabularyIndexError(f"Could not decode index: {index}")


def encode_event(event):
    """
    Encode a performance event back into its vocabulary index.

    This is the exact inverse of decode_event.

    Raises:
        InvalidEventError: if the event's value has no slot in the vocabulary
    """
    offsets = event_range_offsets()

    if isinstance(event, (NoteOn, NoteOff)):
        value = event.pitch
        if not Vocabulary.MIN_MIDI_PITCH <= value <= Vocabulary.MAX_MIDI_PITCH:
            raise InvalidEventError(f"Pitch out of range: {event}")
        value -= Vocabulary.MIN_MIDI_PITCH
    elif isinstance(event, TimeShift):
        steps = round(event.seconds * Vocabulary.STEPS_PER_SECOND)
        if not 1 <= steps <= Vocabulary.MAX_SHIFT_STEPS:
            raise InvalidEventError(f"Time shift out of range: {event}")
        value = steps - 1
    elif isinstance(event, VelocityChange):
        bin_size = Vocabulary.VELOCITY_BIN_SIZE
        if event.velocity % bin_size != 0:
            raise InvalidEventError(f"Velocity not a multiple of {bin_size}: {event}")
        bucket = event.velocity // bin_size
        if not 1 <= bucket <= Vocabulary.VELOCITY_BINS:
            raise InvalidEventError(f"Velocity out of range: {event}")
        value = bucket - 1
    else:
        raise InvalidEventError(f"Unknown event: {event!r}")

    offset, _ = offsets[event.event_type]
    return offset + value


def one_hot(index, size=Model.INPUT_SIZE, device=None):
    """Build the input vector for a vocabulary index (1.0 at index, 0.0 elsewhere)."""
    if not 0 <= index < size:
        raise InvalidVocabularyIndexError(f"Index {index} out of range for input size {size}")
    vector = torch.zeros(size, device=device)
    vector[index] = 1.0
    return vector


def check_vocabulary(vocab_size=VOCAB_SIZE, input_size=Model.INPUT_SIZE):
    """Raise ShapeMismatchError unless the vocabulary fills the model input exactly."""
    if vocab_size != input_size:
        raise ShapeMismatchError(
            f"Vocabulary has {vocab_size} events but the model input size is {input_size}"
        )


check_vocabulary()
