#!/usr/bin/env python3
# src/cli.py
"""Command line interface for the content sanitizer.

Usage:
    # Unwrap redirector links in every eligible post of a SQLite content store
    content-sanitizer sanitize content --db content.db

    # Run every configured task
    content-sanitizer sanitize all --db content.db

    # Sanitize HTML from stdin as the save-time hook would
    content-sanitizer sanitize text --context post_save --post-type post < body.html

Filters are configured through CONTENT_SANITIZER_* environment variables,
for example CONTENT_SANITIZER_CLI_ENABLE_SAFELINK_FILTERING=0.
"""

import argparse
import os
import sys
from typing import Any, TextIO

from batch import run_batch
from config import env_from_environ, get_enabled_post_types, get_feature_flags
from models import BatchRunResult, RepositoryError
from pipeline import SanitizerContext, sanitize
from save_hook import sanitize_on_save
from sqlite_repository import SQLiteContentRepository
from utils import log_error


class ConsoleProgress:
    """Progress reporter writing a single updating line to a stream."""

    def __init__(self, label: str, stream: TextIO = sys.stderr):
        self.label = label
        self.total = 0
        self.count = 0
        self.stream = stream

    def start(self, total: int) -> None:
        self.total = total

    def tick(self) -> None:
        self.count += 1
        self.stream.write(f"\r{self.label} {self.count}/{self.total}")
        self.stream.flush()

    def finish(self) -> None:
        if self.count:
            self.stream.write("\n")
            self.stream.flush()


def sanitize_content(db_path: str, env: Any, show_progress: bool = True) -> BatchRunResult:
    """Run the batch pipeline against a SQLite content store."""
    repository = SQLiteContentRepository(db_path)
    repository.init_db()
    progress = ConsoleProgress("Updating Post Content...") if show_progress else None

    return run_batch(
        repository,
        get_feature_flags(env, SanitizerContext.CLI),
        get_enabled_post_types(env),
        progress,
    )


def _cmd_content(args: argparse.Namespace, env: Any) -> int:
    try:
        result = sanitize_content(args.db, env, show_progress=not args.no_progress)
    except RepositoryError as e:
        log_error("batch_fetch_failed", e, db_path=args.db)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130

    if result.failed_ids:
        ids = ", ".join(str(i) for i in result.failed_ids)
        print(
            f"Warning: {result.total_failed} post(s) could not be updated: {ids}",
            file=sys.stderr,
        )
    print(f"Success: {result.summary()}")
    return 0


def _cmd_all(args: argparse.Namespace, env: Any) -> int:
    status = _cmd_content(args, env)
    if status != 0:
        return status
    print("Success: Finished running all tasks.")
    return 0


def _cmd_text(args: argparse.Namespace, env: Any) -> int:
    context = SanitizerContext(args.context)
    flags = get_feature_flags(env, context)
    content = args.input.read()

    if context is SanitizerContext.POST_SAVE and args.post_type:
        result = sanitize_on_save(args.post_type, content, flags, get_enabled_post_types(env))
    else:
        result = sanitize(content, flags, context)

    sys.stdout.write(result)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="content-sanitizer",
        description="Unwrap redirector links in HTML content",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  content-sanitizer sanitize content --db content.db
  content-sanitizer sanitize all --db content.db --no-progress
  content-sanitizer sanitize text --context on_paste < pasted.html
""",
    )
    commands = parser.add_subparsers(dest="command", required=True)
    sanitize_parser = commands.add_parser("sanitize", help="Sanitization tasks")
    tasks = sanitize_parser.add_subparsers(dest="task", required=True)

    for name, handler, help_text in (
        ("content", _cmd_content, "Sanitize post content in bulk"),
        ("all", _cmd_all, "Run all sanitization tasks"),
    ):
        task = tasks.add_parser(name, help=help_text)
        task.add_argument("--db", required=True, help="Path to the SQLite content store")
        task.add_argument(
            "--no-progress",
            action="store_true",
            help="Do not print per-post progress",
        )
        task.set_defaults(handler=handler)

    text = tasks.add_parser("text", help="Sanitize HTML read from stdin")
    text.add_argument(
        "--context",
        choices=[c.value for c in SanitizerContext],
        default=SanitizerContext.CLI.value,
        help="Execution context whose filters apply (default: cli)",
    )
    text.add_argument(
        "--post-type",
        help="Record type for the post_save context; skipped unless enabled",
    )
    text.add_argument(
        "--input",
        type=argparse.FileType("r"),
        default=sys.stdin,
        help="Input file (default: stdin)",
    )
    text.set_defaults(handler=_cmd_text)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    env = env_from_environ(os.environ)
    return args.handler(args, env)


if __name__ == "__main__":
    sys.exit(main())
