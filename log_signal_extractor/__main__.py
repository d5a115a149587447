"""
CLI entry point for the Log Signal Extractor.

Usage:
    python -m log_signal_extractor extract <logfile> --patterns patterns.yaml [options]
    python -m log_signal_extractor batch <directory> --patterns patterns.yaml [options]
"""

import argparse
import glob
import os
import sys

from .constants import DEFAULT_CHUNK_SIZE
from .patterns import PatternError, load_patterns
from .pipeline import run_extraction


def _add_common_args(p: argparse.ArgumentParser):
    p.add_argument(
        "--patterns", "-p",
        required=True,
        help="YAML or JSON file with a list of {name, pattern} entries",
    )
    p.add_argument(
        "--output-dir", "-o",
        default="./signals",
        help="Output directory (default: ./signals)",
    )
    p.add_argument(
        "--chunk-size",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
        help=f"Lines processed per tick (default: {DEFAULT_CHUNK_SIZE})",
    )
    p.add_argument(
        "--csv",
        action="store_true",
        help="Also write signals.csv",
    )
    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print detailed progress",
    )


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="log_signal_extractor",
        description="Extract timestamped signal values from text logs",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser(
        "extract",
        help="Extract signals from a single log file",
    )
    extract_parser.add_argument("input", help="Path to a text log file")
    _add_common_args(extract_parser)

    batch_parser = subparsers.add_parser(
        "batch",
        help="Extract signals from every .log/.txt file in a directory",
    )
    batch_parser.add_argument("directory", help="Directory containing log files")
    _add_common_args(batch_parser)

    args = parser.parse_args(argv)

    if args.chunk_size < 1:
        print("Error: --chunk-size must be >= 1", file=sys.stderr)
        sys.exit(1)

    try:
        patterns = load_patterns(args.patterns)
    except PatternError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "extract":
        if not os.path.exists(args.input):
            print(f"Error: File not found: {args.input}", file=sys.stderr)
            sys.exit(1)

        result = run_extraction(
            args.input,
            patterns,
            output_dir=args.output_dir,
            chunk_size=args.chunk_size,
            write_csv_file=args.csv,
            verbose=args.verbose,
        )
        print(f"{os.path.basename(args.input)}: {result.status}, "
              f"{len(result.points)} data points")
        if not result.ok:
            sys.exit(1)

    elif args.command == "batch":
        if not os.path.isdir(args.directory):
            print(f"Error: Directory not found: {args.directory}", file=sys.stderr)
            sys.exit(1)

        files = (
            glob.glob(os.path.join(args.directory, "*.log"))
            + glob.glob(os.path.join(args.directory, "*.txt"))
        )
        if not files:
            print(f"No .log or .txt files found in {args.directory}")
            sys.exit(1)

        print(f"Found {len(files)} files to process")
        for i, filepath in enumerate(sorted(files), 1):
            basename = os.path.splitext(os.path.basename(filepath))[0]
            print(f"\n[{i}/{len(files)}] Processing {os.path.basename(filepath)}...")
            try:
                result = run_extraction(
                    filepath,
                    patterns,
                    output_dir=os.path.join(args.output_dir, basename),
                    chunk_size=args.chunk_size,
                    write_csv_file=args.csv,
                    verbose=args.verbose,
                )
                print(f"  {result.status}: {len(result.points)} data points")
            except OSError as e:
                print(f"  ERROR: {e}")
                continue

        print(f"\nBatch complete. Results in {args.output_dir}/")


if __name__ == "__main__":
    main()
