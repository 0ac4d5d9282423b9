"""Runs request suites group by group and collects reports."""

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

import aiohttp

from httpcase.group import RequestGroup
from httpcase.models.definition import SuiteDefinition
from httpcase.models.result import Result
from httpcase.request import Request

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class RequestReport:
    """Result of a single executed request."""

    request_id: str
    result: Result
    duration: float


@dataclass(frozen=True, kw_only=True)
class GroupReport:
    """Result container for a group's execution."""

    group_id: str
    result: Result
    requests: Sequence[RequestReport]


@dataclass(frozen=True, kw_only=True)
class SuiteRunner:
    """Runs suite groups one after another on a shared session."""

    session: aiohttp.ClientSession = field(repr=False)

    async def run_suite(self, suite: SuiteDefinition) -> Sequence[GroupReport]:
        """Run all groups of the suite in order.

        Returns:
            One report per group, in definition order

        """
        if not suite.groups:
            log.info("Suite contains no groups")
            return []

        log.info("Running %d group(s)...", len(suite.groups))
        reports = [
            await self.run_group(definition.to_group()) for definition in suite.groups
        ]
        log.info("Suite execution completed")
        return reports

    async def run_group(self, group: RequestGroup) -> GroupReport:
        """Run a group and record every executed request."""
        request_reports: list[RequestReport] = []
        started = time.monotonic()

        def _record(request: Request, result: Result) -> None:
            nonlocal started
            now = time.monotonic()
            request_reports.append(
                RequestReport(
                    request_id=request.request_id,
                    result=result,
                    duration=now - started,
                )
            )
            started = now

        result = await group.run(session=self.session, on_result=_record)
        return GroupReport(
            group_id=group.group_id, result=result, requests=request_reports
        )
