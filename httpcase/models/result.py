"""Outcome of a single request-based test."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import StrEnum


class ResultKind(StrEnum):
    """Describes the outcome of a test.

    ``stop`` is a valid state but the engine never produces it.
    """

    SUCCESS = "success"
    FAILURE = "failure"
    STOP = "stop"
    ERROR = "error"
    SKIP = "skip"
    REPEAT = "repeat"
    NO_TEST = "no_test"


@dataclass(frozen=True, kw_only=True)
class Result:
    """Result of a request, an assertion, a hook or a test function.

    ``downstream_args`` is handed to the test function of the next attempt
    when the result kind is ``repeat``.
    """

    kind: ResultKind
    description: str = ""
    downstream_args: Mapping[str, str] = field(default_factory=dict)

    @property
    def error(self) -> str:
        """Return the description for error results, else an empty string."""
        if self.kind is ResultKind.ERROR:
            return self.description
        return ""

    @property
    def ok(self) -> bool:
        return self.kind is ResultKind.SUCCESS


def annotate_result(result: Result, prefix: str) -> Result:
    """Return a copy of ``result`` with its description prefixed."""
    return replace(result, description=f"{prefix}: {result.description}")
