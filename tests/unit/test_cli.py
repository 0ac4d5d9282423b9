"""Tests for CLI module."""

import json
import logging
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from aioresponses import aioresponses as aioresponses_cls

from httpcase.cli import format_output, has_failures, log_results_summary, run
from httpcase.models.result import Result, ResultKind
from httpcase.runner import GroupReport
from httpcase.testing.factories import RequestReportFactory

SUITE_YAML = """\
version: "1.0"
groups:
  - id: smoke
    requests:
      - id: health
        url: http://service.test/health
        expect:
          status_code: 200
"""


def group_report(
    *kinds: ResultKind, group_kind: ResultKind = ResultKind.SUCCESS
) -> GroupReport:
    description = "skipped caused by request r0" if group_kind is ResultKind.SKIP else ""
    return GroupReport(
        group_id="smoke",
        result=Result(kind=group_kind, description=description),
        requests=[
            RequestReportFactory.build(
                request_id=f"r{index}", result=Result(kind=kind), duration=1.0
            )
            for index, kind in enumerate(kinds)
        ],
    )


def test_log_results_summary(caplog: pytest.LogCaptureFixture) -> None:
    """Logs each request with its status symbol."""
    report = GroupReport(
        group_id="smoke",
        result=Result(kind=ResultKind.SUCCESS),
        requests=[
            RequestReportFactory.build(
                request_id="health",
                result=Result(kind=ResultKind.SUCCESS),
                duration=0.5,
            ),
            RequestReportFactory.build(
                request_id="version",
                result=Result(kind=ResultKind.FAILURE, description="assertion failed: x"),
                duration=1.25,
            ),
        ],
    )

    with caplog.at_level(logging.INFO):
        log_results_summary(logging.getLogger(), [report])

    assert "Test Results Summary:" in caplog.text
    assert "Group smoke: success" in caplog.text
    assert "✓ health: success (0.50s)" in caplog.text
    assert "✗ version: failure (1.25s)" in caplog.text
    assert "Message: assertion failed: x" in caplog.text


def test_log_results_summary_skip(caplog: pytest.LogCaptureFixture) -> None:
    """Logs the skip description of a group."""
    with caplog.at_level(logging.INFO):
        log_results_summary(
            logging.getLogger(),
            [group_report(ResultKind.SKIP, group_kind=ResultKind.SKIP)],
        )

    assert "» r0: skip (1.00s)" in caplog.text
    assert "Message: skipped caused by request r0" in caplog.text


def test_format_output_empty() -> None:
    """Returns empty totals when no results."""
    assert format_output([]) == {
        "total": 0,
        "passed": 0,
        "failed": 0,
        "errors": 0,
        "untested": 0,
        "skipped": 0,
        "results": [],
    }


def test_format_output_mixed_results() -> None:
    """Counts results by kind."""
    output = format_output(
        [
            group_report(
                ResultKind.SUCCESS,
                ResultKind.FAILURE,
                ResultKind.ERROR,
                ResultKind.NO_TEST,
            ),
            group_report(ResultKind.SKIP, group_kind=ResultKind.SKIP),
        ]
    )

    assert output["total"] == 5
    assert output["passed"] == 1
    assert output["failed"] == 1
    assert output["errors"] == 1
    assert output["untested"] == 1
    assert output["skipped"] == 1
    assert output["results"][0] == {
        "group": "smoke",
        "request": "r0",
        "status": "success",
        "duration": 1.0,
        "message": None,
    }


@pytest.mark.parametrize(
    ("report", "expected"),
    [
        (group_report(ResultKind.SUCCESS, ResultKind.NO_TEST), False),
        (group_report(ResultKind.SUCCESS, ResultKind.FAILURE), True),
        (group_report(ResultKind.ERROR), True),
        (group_report(ResultKind.SKIP, group_kind=ResultKind.SKIP), True),
    ],
)
def test_has_failures(report: GroupReport, expected: bool) -> None:
    """Treats failures, errors and skipped groups as failing."""
    assert has_failures([report]) is expected


async def test_run_returns_zero_on_success(
    tmp_path: Path,
    aioresponses: aioresponses_cls,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Runs the suite, prints JSON and exits zero."""
    aioresponses.get("http://service.test/health", status=200)
    path = tmp_path / "suite.yaml"
    path.write_text(SUITE_YAML)

    exit_code = await run(path)

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["total"] == 1
    assert output["passed"] == 1
    assert output["results"][0]["request"] == "health"


async def test_run_returns_one_on_failure(
    tmp_path: Path,
    aioresponses: aioresponses_cls,
) -> None:
    """Exits one when a request fails."""
    aioresponses.get("http://service.test/health", status=500)
    path = tmp_path / "suite.yaml"
    path.write_text(SUITE_YAML)

    assert await run(path) == 1


async def test_run_returns_two_for_missing_suite(tmp_path: Path) -> None:
    """Exits two when the suite cannot be loaded."""
    assert await run(tmp_path / "missing.yaml") == 2


async def test_run_uses_runner(tmp_path: Path) -> None:
    """Hands the loaded suite to the runner."""
    path = tmp_path / "suite.yaml"
    path.write_text(SUITE_YAML)

    with patch(
        "httpcase.cli.SuiteRunner.run_suite", new=AsyncMock(return_value=[])
    ) as run_suite:
        exit_code = await run(path)

    assert exit_code == 0
    run_suite.assert_awaited_once()
