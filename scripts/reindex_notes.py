"""Normalize and index notes from a JSON file, then optionally run a query against them."""
from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Sequence

from application.use_cases.ingest_notes import ingest_notes
from infrastructure.config import ContainerConfig, build_default_container
from ui.logging_utils import setup_logging


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("notes", help="JSON file holding a list of note records (id, title, content, ...)")
    parser.add_argument(
        "--engine",
        choices=("memory", "keyword", "remote"),
        help="Vector engine to use (default: NOTESCOPE_ENGINE or memory)",
    )
    parser.add_argument("--query", help="Search query to run after indexing.")
    parser.add_argument("--min-similarity", type=float, help="Override the relevance threshold.")
    parser.add_argument("--max-results", type=int, help="Override the result cap.")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    cfg = ContainerConfig.from_env()
    if args.engine:
        cfg.engine = args.engine
    container = build_default_container(cfg)

    records = json.loads(Path(args.notes).expanduser().read_text(encoding="utf-8"))
    outcome = await ingest_notes(records, service=container.search_service)
    failed = [note_id for note_id, ok in outcome.items() if not ok]
    print(f"indexed: {len(outcome) - len(failed)}, failed: {len(failed)}")

    if args.query:
        results = await container.search_service.search(
            records,
            args.query,
            min_similarity=args.min_similarity,
            max_results=args.max_results,
        )
        for result in results:
            print(f"{result.relevance:.3f}\t{result.id}\t{result.title}\t{' '.join(result.snippet.split())}")
    return 1 if failed else 0


def main(argv: Sequence[str] | None = None) -> int:
    setup_logging()
    return asyncio.run(run(parse_args(argv)))


if __name__ == "__main__":
    raise SystemExit(main())
