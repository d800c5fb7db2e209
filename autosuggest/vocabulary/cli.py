"""Vocabulary CLI — build snapshots and query suggestions from the shell."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
from pathlib import Path

from autosuggest.config.logging_config import setup_logging
from autosuggest.config.settings import get_settings
from autosuggest.engine.errors import QueryError
from autosuggest.engine.service import SuggestionEngine
from autosuggest.vocabulary.loader import VocabularyLoader

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Autosuggest vocabulary tools.")
    sub = parser.add_subparsers(dest="command")

    build = sub.add_parser("build", help="Merge seed files into a msgpack snapshot.")
    build.add_argument("sources", nargs="+", type=Path, help="Seed files (.json/.tsv/.txt/.msgpack).")
    build.add_argument("--out", type=Path, default=None, help="Snapshot path (default: data/vocabulary/).")

    query = sub.add_parser("query", help="Print suggestions for a query.")
    query.add_argument("prefix", help="Query text.")
    query.add_argument("--source", type=Path, default=None, help="Seed file or snapshot to load.")
    query.add_argument("--limit", type=int, default=None, help="Max suggestions.")
    query.add_argument("--no-fuzzy", action="store_true", help="Disable the fuzzy fallback.")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(log_dir=settings.logs_dir, settings=settings.logging)

    if args.command == "build":
        engine = SuggestionEngine(settings)
        report = VocabularyLoader(engine).load_all(args.sources)
        out = args.out or settings.snapshots_dir / settings.vocabulary.snapshot_name
        engine.term_store.save(out)
        summary = {"terms": engine.term_store.size, "file_path": str(out), **report.to_dict()}
        print(json.dumps(summary, indent=2))
        engine.close()

    elif args.command == "query":
        if args.no_fuzzy:
            settings = dataclasses.replace(
                settings, query=dataclasses.replace(settings.query, fuzzy_enabled=False)
            )
        source = args.source or settings.seed_path
        if source is None:
            source = settings.snapshots_dir / settings.vocabulary.snapshot_name
        with SuggestionEngine(settings) as engine:
            VocabularyLoader(engine).load(source)
            try:
                suggestions = engine.suggest(args.prefix, limit=args.limit)
            except QueryError as e:
                logger.error("%s", e)
                return 2
            for s in suggestions:
                print(f"  {s.score:8.1f}  {s.text}")

    else:
        build_parser().print_help()
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
