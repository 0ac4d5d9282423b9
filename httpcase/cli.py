"""CLI entry point for running request suites."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import aiohttp

from httpcase.definition_loader import SuiteDefinitionError, load_suite_definition
from httpcase.models.result import ResultKind
from httpcase.runner import GroupReport, SuiteRunner

STATUS_SYMBOLS = {
    ResultKind.SUCCESS: "✓",
    ResultKind.FAILURE: "✗",
    ResultKind.ERROR: "!",
    ResultKind.SKIP: "»",
    ResultKind.NO_TEST: "-",
}

FAILING_KINDS = {ResultKind.FAILURE, ResultKind.ERROR}


def log_results_summary(
    log: logging.Logger, group_reports: Sequence[GroupReport]
) -> None:
    """Log a formatted summary of request results per group."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for group_report in group_reports:
        log.info("Group %s: %s", group_report.group_id, group_report.result.kind)
        for request_report in group_report.requests:
            result = request_report.result
            symbol = STATUS_SYMBOLS.get(result.kind, "?")
            log.info(
                "%s %s: %s (%.2fs)",
                symbol,
                request_report.request_id,
                result.kind,
                request_report.duration,
            )
            if result.description:
                log.info("  Message: %s", result.description)
        if group_report.result.kind is ResultKind.SKIP:
            log.info("  Message: %s", group_report.result.description)


def format_output(group_reports: Sequence[GroupReport]) -> dict[str, Any]:
    """Format group reports for JSON output."""
    all_results: list[dict[str, Any]] = []
    for group_report in group_reports:
        for request_report in group_report.requests:
            all_results.append(
                {
                    "group": group_report.group_id,
                    "request": request_report.request_id,
                    "status": str(request_report.result.kind),
                    "duration": request_report.duration,
                    "message": request_report.result.description or None,
                }
            )

    return {
        "total": len(all_results),
        "passed": sum(1 for r in all_results if r["status"] == ResultKind.SUCCESS),
        "failed": sum(1 for r in all_results if r["status"] == ResultKind.FAILURE),
        "errors": sum(1 for r in all_results if r["status"] == ResultKind.ERROR),
        "untested": sum(1 for r in all_results if r["status"] == ResultKind.NO_TEST),
        "skipped": sum(
            1 for g in group_reports if g.result.kind is ResultKind.SKIP
        ),
        "results": all_results,
    }


def has_failures(group_reports: Sequence[GroupReport]) -> bool:
    """Return whether any request failed or any group was skipped."""
    return any(
        group_report.result.kind is ResultKind.SKIP
        or any(r.result.kind in FAILING_KINDS for r in group_report.requests)
        for group_report in group_reports
    )


async def run(suite_path: Path) -> int:
    """Run a suite file and return exit code."""
    log = logging.getLogger("httpcase")

    log.info("Loading suite: %s", suite_path)
    try:
        suite = await load_suite_definition(suite_path)
    except (FileNotFoundError, SuiteDefinitionError) as exc:
        log.error("Failed to load suite: %s", exc)
        return 2

    async with aiohttp.ClientSession() as session:
        runner = SuiteRunner(session=session)
        group_reports = await runner.run_suite(suite)

    log_results_summary(log, group_reports)
    print(json.dumps(format_output(group_reports), indent=2))

    return 1 if has_failures(group_reports) else 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Run HTTP request test suites")
    parser.add_argument(
        "--suite",
        type=Path,
        required=True,
        help="Path to the YAML suite file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    sys.exit(asyncio.run(run(suite_path=args.suite)))


if __name__ == "__main__":  # pragma: no cover
    main()
