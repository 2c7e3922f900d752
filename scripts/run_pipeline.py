"""Helper script to run the default flood control report pipeline."""
from __future__ import annotations

import argparse

from floodctl.cli import main


def _parse_args(argv: list[str] | None = None) -> tuple[argparse.Namespace, list[str]]:
    parser = argparse.ArgumentParser(description="Run the flood control report pipeline")
    parser.add_argument(
        "--menu",
        action="store_true",
        help="Start the interactive load/generate menu instead of a single run.",
    )
    return parser.parse_known_args(argv)


if __name__ == "__main__":  # pragma: no cover
    args, remaining = _parse_args()
    forward_args: list[str] = list(remaining)
    if args.menu:
        forward_args.append("--interactive")
    raise SystemExit(main(forward_args))
