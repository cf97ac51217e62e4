"""
glossary_engine/cli.py -- Command-line entry point.

Usage::

    glossary-batch validate data/batches/2025-10-30-batch-001.json
    glossary-batch update-manifest data/batches/2025-10-30-batch-001.json

Exit codes:
    validate          0 when there are no errors (warnings allowed),
                      1 on any error or a missing/unreadable file
    update-manifest   0 on success, 1 on a missing file or any failure

``update-manifest`` is meant to run only after ``validate`` succeeded.
"""

from __future__ import annotations

import argparse
import logging
import sys

from glossary_engine.config import TIMESTAMP_SOURCES, EngineConfig
from glossary_engine.errors import GlossaryEngineError
from glossary_engine.manifest import ManifestMerger
from glossary_engine.pipeline import BatchValidationPipeline

logger = logging.getLogger("glossary_engine")


def _setup_logging(verbose: bool) -> None:
    """Configure logging for command-line use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        # Usage errors exit 1 like every other failure.
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="glossary-batch",
        description="Validate glossary batches and merge them into the manifest.",
    )
    parser.add_argument("--root", help="project root (default: $GLOSSARY_PROJECT_ROOT or cwd)")
    parser.add_argument("--corpus", help="corpus JSON file (glossaryData.json)")
    parser.add_argument("--manifest", help="manifest JSON file (data/manifest.json)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")

    sub = parser.add_subparsers(dest="command", required=True, parser_class=_ArgumentParser)

    validate = sub.add_parser("validate", help="validate a batch file")
    validate.add_argument("batch", help="path to the batch JSON file")

    update = sub.add_parser("update-manifest", help="merge a batch into the manifest")
    update.add_argument("batch", help="path to the batch JSON file")
    update.add_argument(
        "--timestamp-source",
        choices=TIMESTAMP_SOURCES,
        help="how to stamp the manifest entry (default: merge-time)",
    )
    return parser


def cmd_validate(config: EngineConfig, batch_path: str) -> int:
    pipeline = BatchValidationPipeline(config)
    report = pipeline.validate_file(batch_path)
    print(f"Validating: {batch_path}")
    print()
    print(report.format_human())
    return 0 if report.passed else 1


def cmd_update_manifest(config: EngineConfig, batch_path: str) -> int:
    merger = ManifestMerger.from_config(config)
    result = merger.merge(batch_path)
    entry = result.entry
    action = "Updated existing" if result.replaced else "Added new"
    print(f"{action} batch {entry.id}")
    print(f"  Path: {entry.path}")
    print(f"  Terms: {entry.term_count}")
    print(f"  Categories: {', '.join(c.value for c in entry.categories)}")
    print(f"Manifest saved to {result.manifest_path}")
    print(f"Total batches: {result.total_batches}")
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        config = EngineConfig.from_env(
            project_root=args.root,
            corpus_path=args.corpus,
            manifest_path=args.manifest,
            manifest_timestamp_source=getattr(args, "timestamp_source", None),
        )
        if args.command == "validate":
            return cmd_validate(config, args.batch)
        return cmd_update_manifest(config, args.batch)
    except GlossaryEngineError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except Exception:
        logger.exception("Unexpected failure running '%s'", args.command)
        return 1


if __name__ == "__main__":
    sys.exit(main())
