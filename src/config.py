import math


class Vocabulary:
    MIN_MIDI_PITCH = 0
    MAX_MIDI_PITCH = 127
    VELOCITY_BINS = 32
    MAX_SHIFT_STEPS = 100
    STEPS_PER_SECOND = 100

    # each velocity bin covers this many MIDI velocity values
    VELOCITY_BIN_SIZE = math.ceil(127 / VELOCITY_BINS)

    # order matters, index offsets are accumulated over this list
    EVENT_RANGES = [
        ("note_on", MIN_MIDI_PITCH, MAX_MIDI_PITCH),
        ("note_off", MIN_MIDI_PITCH, MAX_MIDI_PITCH),
        ("time_shift", 1, MAX_SHIFT_STEPS),
        ("velocity_change", 1, VELOCITY_BINS),
    ]


class Model:
    INPUT_SIZE = 388
    NUM_LAYERS = 3
    FORGET_BIAS = 1.0

    # variable names as exported from the TensorFlow training graph
    LSTM_KERNEL = "rnn/multi_rnn_cell/cell_{}/basic_lstm_cell/kernel"
    LSTM_BIAS = "rnn/multi_rnn_cell/cell_{}/basic_lstm_cell/bias"
    FC_WEIGHTS = "fully_connected/weights"
    FC_BIASES = "fully_connected/biases"


class Generation:
    GENERATE_STEPS = 100
    PRIMER_IDX = 355  # shift 1s


VOCAB_SIZE = sum(max_value - min_value + 1 for _, min_value, max_value in Vocabulary.EVENT_RANGES)
