"""Assertions evaluated against a completed response."""

import json
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from httpcase.models.result import Result, ResultKind
from httpcase.response import Response


class Assertion(Protocol):
    """A predicate over a response producing a result."""

    def evaluate(self, response: Response) -> Result:
        """Evaluate the assertion against ``response``."""
        ...


class AssertionKind(StrEnum):
    """Built-in assertion kinds."""

    STATUS_CODE = "status_code"
    BODY_IS_EMPTY = "body_is_empty"
    BODY_IS_JSON = "body_is_json"


@dataclass(frozen=True)
class StatusCodeAssertion:
    """Assert that the response has the expected status code."""

    expected: int

    def evaluate(self, response: Response) -> Result:
        if response.status != self.expected:
            return Result(
                kind=ResultKind.FAILURE,
                description=(
                    "received unexpected status code, "
                    f"expected {self.expected} but received {response.status}"
                ),
            )
        return Result(kind=ResultKind.SUCCESS)


@dataclass(frozen=True)
class BodyIsEmptyAssertion:
    """Assert that the response body is empty."""

    def evaluate(self, response: Response) -> Result:
        if response.body:
            return Result(
                kind=ResultKind.FAILURE,
                description=(
                    "received non empty body, "
                    f"body had length of: {len(response.body)}"
                ),
            )
        return Result(kind=ResultKind.SUCCESS)


@dataclass(frozen=True)
class BodyIsJsonAssertion:
    """Assert that the response body is a JSON document."""

    def evaluate(self, response: Response) -> Result:
        try:
            json.loads(response.body)
        except ValueError:
            body = response.body.decode("utf-8", errors="replace")
            return Result(
                kind=ResultKind.FAILURE,
                description=f"failed to unmarshal the response body: '{body}'",
            )
        return Result(kind=ResultKind.SUCCESS)


def build_assertion(kind: AssertionKind | str, value: object = None) -> Assertion:
    """Create a built-in assertion from its kind and optional value.

    Raises:
        ValueError: If the kind is unknown or its value is invalid

    """
    match AssertionKind(kind):
        case AssertionKind.STATUS_CODE:
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(
                    f"status_code assertion requires an integer, got {value!r}"
                )
            return StatusCodeAssertion(value)
        case AssertionKind.BODY_IS_EMPTY:
            return BodyIsEmptyAssertion()
        case AssertionKind.BODY_IS_JSON:
            return BodyIsJsonAssertion()


def check_assertions(assertions: Iterable[Assertion], response: Response) -> Result:
    """Evaluate assertions in order, stopping at the first non-success."""
    for assertion in assertions:
        result = assertion.evaluate(response)
        if result.kind is not ResultKind.SUCCESS:
            return result
    return Result(kind=ResultKind.SUCCESS)
