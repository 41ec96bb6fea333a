"""
Diagnostics for a generated event sequence: event type balance and repetition.
"""
from collections import Counter

from src.config import Vocabulary
from src.event_codec import TimeShift


def longest_repeat(indices):
    """Length of the longest run of the same index appearing back to back."""
    longest = 0
    current = 0
    previous = None
    for idx in indices:
        current = current + 1 if idx == previous else 1
        previous = idx
        longest = max(longest, current)
    return longest


def analyze_events(pairs):
    """
    Summarize a generated run.

    Args:
        pairs: list of (index, event) tuples as returned by generate()

    Returns:
        dict with total count, per event type counts, unique indices,
        longest repeated run, repetition ratio and total time shifted
    """
    indices = [idx for idx, _ in pairs]
    type_counts = Counter(event.event_type for _, event in pairs)
    # report every event type, even ones that never appeared
    event_types = {name: type_counts.get(name, 0) for name, _, _ in Vocabulary.EVENT_RANGES}

    total = len(indices)
    unique = len(set(indices))
    duration = sum(event.seconds for _, event in pairs if isinstance(event, TimeShift))

    return {
        "total": total,
        "event_types": event_types,
        "unique_indices": unique,
        "longest_repeat": longest_repeat(indices),
        # fraction of steps that re-used an index seen before
        "repetition_ratio": (total - unique) / total if total else 0.0,
        "duration_seconds": round(duration, 2),
    }


def print_analysis(stats):
    print(f"\n{'='*60}")
    print("GENERATION SUMMARY")
    print(f"{'='*60}")
    print(f"Events generated: {stats['total']}")
    for name, count in stats["event_types"].items():
        print(f"  {name:<16} {count}")
    print(f"Unique indices: {stats['unique_indices']}")
    print(f"Longest repeat: {stats['longest_repeat']}")
    print(f"Repetition ratio: {stats['repetition_ratio']:.2%}")
    print(f"Total time shifted: {stats['duration_seconds']}s")

    if stats["longest_repeat"] > 10:
        print("⚠️  WARNING: long runs of the same event, the model may be stuck")
