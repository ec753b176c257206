#!/usr/bin/env python3
"""TS Review: static review of TypeScript and React code against a team style guide.

Encodes the guide's naming, extensibility, comment, style, structure and
React rules as automated checks that run without Node.

Usage:
    python -m tsreview [paths...] [--path ROOT] [--diff [BASE]] [--severity warning] [--fail-on error]
"""

import argparse
import logging
import os
import sys
import time
from pathlib import Path

from tsreview.analyzer import analyze
from tsreview.checks import RULES, run_rules
from tsreview.config import load_config
from tsreview.errors import LexError, SourceError, TsReviewError
from tsreview.report import (
    SEVERITY_ORDER,
    Finding,
    count_by_severity,
    format_github_annotation,
    format_json,
    format_report,
    format_summary_table,
    sort_key,
)
from tsreview.sources import changed_files, find_source_files, read_source, resolve_paths

logger = logging.getLogger("tsreview")


def review_file(path: Path, root: Path, config) -> list[Finding]:
    """Review one file. A file that cannot be read or tokenized yields SRC-01."""
    try:
        rel = path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        rel = path.as_posix()
    started = time.perf_counter()
    try:
        unit = analyze(path, read_source(path), rel)
    except (SourceError, LexError) as exc:
        logger.debug("could not parse %s: %s", rel, exc)
        return [Finding(
            rule_id="SRC-01", severity=config.level("SRC-01", "error"),
            title="File could not be parsed",
            message=f"Skipped all rules for this file: {exc}",
            file=rel, line=getattr(exc, "line", 0),
            guide_says="Every committed source file must be valid TypeScript/JavaScript.",
        )]
    findings = run_rules(unit, config)
    logger.debug("%s: %d finding(s) in %.1f ms", rel, len(findings),
                 (time.perf_counter() - started) * 1000)
    return findings


def review(root: Path, files: list[Path], config) -> list[Finding]:
    findings: list[Finding] = []
    for path in files:
        findings.extend(review_file(path, root, config))
    return [f for f in findings if f.severity != "off"]


def collect_files(root: Path, args, config) -> list[Path]:
    if args.diff:
        changed = changed_files(root, args.diff, config)
        if not args.paths:
            return changed
        # limit the diff to the requested files and directories
        wanted = {p.resolve() for p in resolve_paths(root, args.paths, config)}
        return [p for p in changed if p.resolve() in wanted]
    if args.paths:
        return resolve_paths(root, args.paths, config)
    return find_source_files(root, config)


def list_rules() -> None:
    for rule_id, (severity, title) in RULES.items():
        print(f"{rule_id:<8} {severity:<8} {title}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tsreview", description="TS Review")
    parser.add_argument("paths", nargs="*", help="Files or directories to review (default: the whole root)")
    parser.add_argument("--path", default=".", help="Project root")
    parser.add_argument("--diff", nargs="?", const="HEAD", default=None, metavar="BASE",
                        help="Only review files changed against a git base (default HEAD), limited to any given paths")
    parser.add_argument("--config", default=None, help="Path to a .tsreview.json config file")
    parser.add_argument("--severity", default="warning", choices=["error", "warning", "note"],
                        help="Minimum severity to report")
    parser.add_argument("--fail-on", default="error", choices=["error", "warning", "note"],
                        help="Fail the check at this severity level")
    parser.add_argument("--format", default="console", choices=["console", "json", "markdown"],
                        help="Output format")
    parser.add_argument("--list-rules", action="store_true", help="List all rules and exit")
    parser.add_argument("--verbose", action="store_true", help="Log diagnostics to stderr")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.list_rules:
        list_rules()
        sys.exit(0)

    root = Path(args.path).resolve()
    min_sev = SEVERITY_ORDER[args.severity]
    fail_sev = SEVERITY_ORDER[args.fail_on]

    if not root.is_dir():
        print(f"::error::Project root {root} does not exist or is not a directory.")
        sys.exit(1)

    try:
        config = load_config(root, Path(args.config) if args.config else None, known_rules=RULES)
        files = collect_files(root, args, config)
    except TsReviewError as exc:
        print(f"::error::{exc}")
        sys.exit(1)
    logger.info("reviewing %d file(s) under %s", len(files), root)

    all_findings = review(root, files, config)

    # Filter by minimum severity
    findings = [f for f in all_findings if SEVERITY_ORDER[f.severity] <= min_sev]
    findings.sort(key=sort_key)
    counts = count_by_severity(findings)
    total = sum(counts.values())

    is_ci = os.environ.get("CI") or os.environ.get("GITHUB_ACTIONS")

    if args.format == "json":
        print(format_json(findings, len(files)))
    elif args.format == "markdown":
        print(format_summary_table(findings, len(files)))
    else:
        # Output GitHub annotations (if in CI)
        if is_ci:
            for f in findings:
                print(format_github_annotation(f))

        print(f"\n{'=' * 60}")
        print(f"  TS Review: {root.name} ({len(files)} files)")
        print(f"{'=' * 60}\n")
        print(format_report(findings, len(files)))
        print()
        print(f"{'=' * 60}")
        print(f"  {counts['error']} errors, {counts['warning']} warnings, {counts['note']} notes ({total} total)")
        print(f"{'=' * 60}")

    # Set GitHub outputs
    if is_ci:
        ghout = os.environ.get("GITHUB_OUTPUT", "")
        if ghout:
            with open(ghout, "a") as out:
                out.write(f"issues={total}\n")
                out.write(f"errors={counts['error']}\n")
                out.write(f"warnings={counts['warning']}\n")
                out.write(f"notes={counts['note']}\n")
                out.write(f"files={len(files)}\n")

    # Exit code
    should_fail = any(SEVERITY_ORDER[f.severity] <= fail_sev for f in findings)
    sys.exit(1 if should_fail else 0)


if __name__ == "__main__":
    main()
