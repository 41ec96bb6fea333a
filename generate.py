import argparse
import sys
from pathlib import Path

import torch
from tqdm import tqdm

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))
from models.generators.generator_lstm import build_model
from src.config import Generation
from src.errors import PerformanceRNNError
from src.event_codec import decode_event, one_hot
from utils.diagnose_generation import analyze_events, print_analysis
from utils.sampling import softmax, sample_from_softmax
from utils.seed_control import make_generator, set_seed

# pick device
DEVICE = "mps" if torch.backends.mps.is_available() else "cuda" if torch.cuda.is_available() else "cpu"


def format_event_line(index, event):
    """Display line for one generated event, e.g. '(60) note_on: 60'."""
    return f"({index}) {event}"


def generate(
    model,
    generate_steps=Generation.GENERATE_STEPS,
    primer_idx=Generation.PRIMER_IDX,
    generator=None,
    on_event=None,
    cancel_event=None,
    progress=False,
):
    """
    Autoregressively sample performance events from a Performance RNN.

    Starts from zero LSTM state and a one-hot primer event, then at every step
    runs the cell stack, samples the next event from the softmax and feeds the
    sampled index back in as the next input.

    Args:
        model: PerformanceRNN holding the pretrained weights
        generate_steps: number of events to generate
        primer_idx: vocabulary index used as the very first input
        generator: torch.Generator for the sampler, None uses the global RNG
        on_event: called as on_event(index, event) after every step
        cancel_event: object with is_set() (e.g. threading.Event), checked
            before each step, generation stops early once it is set
        progress: show a tqdm progress bar

    Returns:
        list of (index, event) tuples

    Raises:
        PerformanceRNNError: on any shape, index or sampling failure. The
            exception carries the events generated so far as .partial_events
    """
    events = []
    device = model.device

    steps = range(generate_steps)
    if progress:
        steps = tqdm(steps, desc="Generating", unit="event")

    try:
        states = model.zero_state()
        input_vector = one_hot(primer_idx, size=model.input_size, device=device)

        for _ in steps:
            if cancel_event is not None and cancel_event.is_set():
                print(f"Generation cancelled after {len(events)} events")
                break

            # per-step scope, transient tensors are freed when it exits
            with torch.no_grad():
                states, logits = model.step(input_vector, states)
                probs = softmax(logits)
                sampled = sample_from_softmax(probs, generator=generator)

            event = decode_event(sampled)
            events.append((sampled, event))
            if on_event is not None:
                on_event(sampled, event)

            # use output as the next input
            input_vector = one_hot(sampled, size=model.input_size, device=device)
    except PerformanceRNNError as e:
        e.partial_events = list(events)
        raise

    return events


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate performance events with a pretrained Performance RNN")
    parser.add_argument("--model_path", type=str, required=True,
                        help="Path to the checkpoint (.pt, .npz or a directory with manifest.json)")
    parser.add_argument("--generate_length", type=int, default=Generation.GENERATE_STEPS,
                        help="How many events to generate")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the sampler and the global RNGs (same seed and weights give the same events)")
    parser.add_argument("--device", type=str, default=DEVICE,
                        choices=["cpu", "cuda", "mps"],
                        help="Device to run the model on")
    parser.add_argument("--summary", action="store_true",
                        help="Print event statistics after generating")
    parser.add_argument("--progress", action="store_true",
                        help="Show a progress bar instead of printing each event")
    args = parser.parse_args(argv)

    if args.generate_length < 0:
        parser.error("--generate_length must be non-negative")

    try:
        model = build_model(args.model_path, device=args.device)
    except (OSError, ValueError, KeyError, RuntimeError) as e:
        # RuntimeError covers a --device whose backend is not available
        print(f"\nError: Could not load checkpoint: {e}")
        return 1

    if args.seed is not None:
        set_seed(args.seed)
    generator = make_generator(args.seed)
    on_event = None if args.progress else lambda index, event: print(format_event_line(index, event))

    try:
        events = generate(
            model,
            generate_steps=args.generate_length,
            generator=generator,
            on_event=on_event,
            progress=args.progress,
        )
    except PerformanceRNNError as e:
        print(f"\nError: Generation failed after {len(e.partial_events)} events: {e}")
        return 1

    print(f"Generated {len(events)} events")
    if args.summary:
        print_analysis(analyze_events(events))
    return 0


if __name__ == "__main__":
    sys.exit(main())
