"""
Tests for event_codec.py
Tests the index <-> performance event mapping of the vocabulary
"""
import pytest
import torch

from src.config import VOCAB_SIZE, Model, Vocabulary
from src.errors import InvalidEventError, InvalidVocabularyIndexError, ShapeMismatchError
from src.event_codec import (
    NoteOn,
    NoteOff,
    TimeShift,
    VelocityChange,
    check_vocabulary,
    decode_event,
    encode_event,
    event_range_offsets,
    one_hot,
)


class TestVocabulary:
    """Test suite for the vocabulary layout"""

    def test_vocab_size_matches_input_size(self):
        assert VOCAB_SIZE == 388
        assert VOCAB_SIZE == Model.INPUT_SIZE

    def test_velocity_bin_size(self):
        assert Vocabulary.VELOCITY_BIN_SIZE == 4

    def test_range_offsets(self):
        offsets = event_range_offsets()
        assert offsets == {
            "note_on": (0, 128),
            "note_off": (128, 128),
            "time_shift": (256, 100),
            "velocity_change": (356, 32),
        }


class TestDecode:
    """Test suite for decode_event"""

    @pytest.mark.parametrize("index, expected", [
        (0, NoteOn(0)),
        (60, NoteOn(60)),
        (127, NoteOn(127)),
        (128, NoteOff(0)),
        (255, NoteOff(127)),
        (256, TimeShift(0.01)),
        (355, TimeShift(1.0)),
        (356, VelocityChange(4)),
        (387, VelocityChange(128)),
    ])
    def test_boundaries(self, index, expected):
        assert decode_event(index) == expected

    def test_note_on_and_off_are_different(self):
        assert decode_event(0) != decode_event(128)

    def test_all_indices_decode(self):
        for i in range(VOCAB_SIZE):
            event = decode_event(i)
            assert event.event_type in event_range_offsets()

    def test_accepts_tensor_index(self):
        assert decode_event(torch.tensor(5)) == NoteOn(5)

    @pytest.mark.parametrize("index", [VOCAB_SIZE, VOCAB_SIZE + 1, 10_000, -1])
    def test_out_of_range(self, index):
        with pytest.raises(InvalidVocabularyIndexError):
            decode_event(index)

    def test_invalid_index_is_index_error(self):
        with pytest.raises(IndexError):
            decode_event(VOCAB_SIZE)

    def test_display_format(self):
        assert str(decode_event(60)) == "note_on: 60"
        assert str(decode_event(200)) == "note_off: 72"
        assert str(decode_event(355)) == "time_shift: 1.0"
        assert str(decode_event(356)) == "velocity_change: 4"


class TestEncode:
    """Test suite for encode_event"""

    def test_inverse_of_decode(self):
        for i in range(VOCAB_SIZE):
            assert encode_event(decode_event(i)) == i

    def test_time_shift_rounding(self):
        # 0.07 * 100 is not exactly 7 in floating point
        assert encode_event(TimeShift(0.07)) == 256 + 6

    @pytest.mark.parametrize("event", [
        NoteOn(128),
        NoteOff(-1),
        TimeShift(0.0),
        TimeShift(1.01),
        VelocityChange(0),
        VelocityChange(132),
        VelocityChange(5),
    ])
    def test_invalid_events(self, event):
        with pytest.raises(InvalidEventError):
            encode_event(event)

    def test_unknown_event(self):
        with pytest.raises(InvalidEventError):
            encode_event("note_on: 60")


class TestOneHot:

    def test_one_hot(self):
        vec = one_hot(42)
        assert vec.shape == (Model.INPUT_SIZE,)
        assert vec[42].item() == 1.0
        assert vec.sum().item() == 1.0

    def test_one_hot_out_of_range(self):
        with pytest.raises(InvalidVocabularyIndexError):
            one_hot(Model.INPUT_SIZE)


class TestCheckVocabulary:

    def test_matching_sizes(self):
        check_vocabulary(VOCAB_SIZE, Model.INPUT_SIZE)

    def test_mismatch_raises(self):
        with pytest.raises(ShapeMismatchError):
            check_vocabulary(VOCAB_SIZE, Model.INPUT_SIZE + 1)
