import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))
from src.checkpoint import load_parameters, save_variables


# converts a manifest directory or .npz archive into a single weights-only .pt file
def convert_checkpoint(in_path, out_path):
    print(f"Loading checkpoint: {in_path}")
    params = load_parameters(in_path)
    save_variables(params, out_path)
    return params


def main(argv=None):
    parser = argparse.ArgumentParser(description="Convert a Performance RNN checkpoint to a .pt file")
    parser.add_argument("in_path", type=str,
                        help="Checkpoint to read (.pt, .npz or a directory with manifest.json)")
    parser.add_argument("out_path", type=str,
                        help="Where to write the .pt file")
    args = parser.parse_args(argv)

    try:
        convert_checkpoint(args.in_path, args.out_path)
    except (OSError, ValueError, KeyError) as e:
        print(f"\nError: Could not convert checkpoint: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
