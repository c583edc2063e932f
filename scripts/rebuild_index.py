#!/usr/bin/env python3
"""
Retrieval store maintenance utility.
Rebuilds the vector store from the owner profile, queries it, prints stats or clears it.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.config import PROFILE_PATH, validate_config
from src.core.errors import RetrievalStoreError
from src.ingest.profile_loader import load_profile
from src.vector import service


def cmd_build(args) -> int:
    print("Starting vector store rebuild...")

    chunks = load_profile(args.profile)
    print(f"Loaded {len(chunks)} chunks from {args.profile}")

    service.init_embedder()

    report = service.build_vector_store(chunks)
    print(f"✓ Indexed {report.indexed} records ({report.skipped} skipped) into {report.path}")

    results = service.search("profile", top_k=1, min_score=-1.0)
    print(f"✓ Verification search returned {len(results)} results")
    print("Vector store rebuild complete!")
    return 0


def cmd_query(args) -> int:
    if not service.load_from_disk():
        print("ERROR: No vector store on disk. Run 'build' first.")
        return 1

    results = service.search(
        args.text,
        top_k=args.top_k,
        min_score=args.min_score,
        field_filter=args.field,
        use_reranking=args.rerank,
    )
    if not results:
        print("No results.")
        return 0

    for rank, result in enumerate(results, 1):
        content = result.content if len(result.content) <= 150 else result.content[:150] + "..."
        print(f"{rank}. [{result.score:.3f}] ({result.field}) {result.id}: {content}")
    return 0


def cmd_stats(args) -> int:
    service.load_from_disk()
    current = service.stats()
    print(f"Records: {current['record_count']}")
    print(f"Fields: {', '.join(current['field_names']) or '-'}")
    print(f"Dimension: {current['dimension']}")
    print(f"Path: {current['path']}")
    return 0


def cmd_clear(args) -> int:
    service.clear()
    print("✓ Vector store cleared")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Retrieval store maintenance")
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Rebuild the store from the owner profile")
    build.add_argument("--profile", default=PROFILE_PATH, help="Profile JSON file")
    build.set_defaults(func=cmd_build)

    query = sub.add_parser("query", help="Search the stored records")
    query.add_argument("text", help="Query text")
    query.add_argument("--top-k", type=int, default=None)
    query.add_argument("--min-score", type=float, default=None)
    query.add_argument("--field", default=None, help="Restrict results to one field")
    query.add_argument("--rerank", action="store_true", help="Apply heuristic re-ranking")
    query.set_defaults(func=cmd_query)

    stats = sub.add_parser("stats", help="Show store statistics")
    stats.set_defaults(func=cmd_stats)

    clear = sub.add_parser("clear", help="Delete the store and its file")
    clear.set_defaults(func=cmd_clear)

    return parser


def main(argv=None) -> int:
    """Run the maintenance CLI."""
    args = build_parser().parse_args(argv)

    issues = validate_config()
    if issues:
        for issue in issues:
            print(f"ERROR: {issue}")
        return 1

    try:
        return args.func(args)
    except RetrievalStoreError as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
