"""Models for request suites loaded from YAML files."""

from collections.abc import Mapping, Sequence
from typing import Literal

from pydantic import Field, SecretStr

from httpcase.group import RequestGroup
from httpcase.models.base import Model
from httpcase.models.result import Result, ResultKind
from httpcase.request import Request, TestFunc
from httpcase.response import Response


class BasicAuthDefinition(Model):
    """Credentials sent as a basic authorization header."""

    username: str = Field(..., description="Basic auth username")
    password: SecretStr = Field(..., description="Basic auth password")


class ExpectDefinition(Model):
    """Assertions evaluated against the response."""

    status_code: int | None = Field(default=None, description="Expected status")
    body_is_empty: bool = Field(default=False, description="Require an empty body")
    body_is_json: bool = Field(default=False, description="Require a JSON body")


class RepeatUntilDefinition(Model):
    """Retry condition evaluated by the generated test function."""

    status_code: int = Field(..., description="Status that ends the retries")


class RequestDefinition(Model):
    """Individual request test."""

    id: str | None = Field(default=None, description="Identifier for diagnostics")
    method: Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"] = (
        Field(default="GET", description="HTTP method")
    )
    url: str = Field(..., min_length=1, description="Request URL")
    headers: Mapping[str, str | list[str]] = Field(
        default_factory=dict, description="Headers, a list sends repeated values"
    )
    body: str | None = Field(default=None, description="UTF-8 request body")
    basic_auth: BasicAuthDefinition | None = Field(default=None)
    timeout: float = Field(default=100, gt=0, description="Timeout in seconds")
    iterations: int = Field(default=1, ge=1, description="Attempt budget")
    sleep: float = Field(default=0, ge=0, description="Seconds between attempts")
    expect: ExpectDefinition = Field(default_factory=ExpectDefinition)
    repeat_until: RepeatUntilDefinition | None = Field(default=None)

    def to_request(self) -> Request:
        """Build the request described by this definition."""
        request = (
            Request(self.url, self.method)
            .timeout(self.timeout)
            .iterations(self.iterations)
            .sleep(self.sleep)
        )
        if self.id is not None:
            request.id(self.id)
        for key, values in self.headers.items():
            for value in [values] if isinstance(values, str) else values:
                request.header(key, value)
        if self.basic_auth is not None:
            request.basic_auth(
                self.basic_auth.username, self.basic_auth.password.get_secret_value()
            )
        if self.body is not None:
            request.body(self.body.encode())

        if self.expect.status_code is not None:
            request.status_code(self.expect.status_code)
        if self.expect.body_is_empty:
            request.body_is_empty()
        if self.expect.body_is_json:
            request.body_is_json()

        if self.repeat_until is not None:
            request.test(repeat_until_status(self.repeat_until.status_code))
        return request


class GroupDefinition(Model):
    """Ordered batch of requests."""

    id: str = Field(..., description="Group identifier")
    requests: Sequence[RequestDefinition] = Field(default_factory=list)

    def to_group(self) -> RequestGroup:
        group = RequestGroup(self.id)
        for definition in self.requests:
            group.add_request(definition.to_request())
        return group


class SuiteDefinition(Model):
    """Complete suite loaded from a YAML file."""

    version: str = Field(..., description="Suite schema version")
    groups: Sequence[GroupDefinition] = Field(default_factory=list)


def repeat_until_status(expected: int) -> TestFunc:
    """Create a test function that repeats until ``expected`` is received."""

    def _test(response: Response, args: Mapping[str, str]) -> Result:
        if response.status != expected:
            return Result(
                kind=ResultKind.REPEAT,
                description=f"waiting for status {expected}, received {response.status}",
            )
        return Result(kind=ResultKind.SUCCESS)

    return _test
