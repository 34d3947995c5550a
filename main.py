# main.py
"""CLI entry point for the card news generator."""

from __future__ import annotations

import argparse

from config import SUPPORTED_ASPECT_RATIOS
from orchestration.cli_runner import RunOptions, run


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Turn a plain-text document into a card news deck."
    )
    parser.add_argument("document", help="Path to the plain-text document")
    parser.add_argument(
        "--detail-level",
        choices=("simple", "detailed"),
        default="simple",
        help="How much text each card should carry",
    )
    parser.add_argument(
        "--aspect-ratio",
        choices=SUPPORTED_ASPECT_RATIOS,
        default=None,
        help="Card aspect ratio (defaults to DEFAULT_ASPECT_RATIO)",
    )
    parser.add_argument(
        "--concept",
        type=int,
        default=0,
        help="Index of the design concept to use",
    )
    parser.add_argument(
        "--regenerate",
        type=int,
        default=None,
        metavar="PAGE_INDEX",
        help="Regenerate this page after the run",
    )
    parser.add_argument(
        "--feedback", default=None, help="Feedback for the regenerated page"
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse command-line arguments and start generation."""
    args = build_parser().parse_args(argv)
    run(
        RunOptions(
            document=args.document,
            detail_level=args.detail_level,
            aspect_ratio=args.aspect_ratio,
            concept_index=args.concept,
            regenerate=args.regenerate,
            feedback=args.feedback,
        )
    )


if __name__ == "__main__":
    main()
