"""Fluent builder and execution loop for a single HTTP request test."""

import asyncio
import inspect
import logging
import uuid
from collections.abc import Awaitable, Callable, Mapping
from datetime import timedelta
from typing import Self, TypeAlias

import aiohttp
from multidict import CIMultiDict, CIMultiDictProxy

from httpcase.assertions import (
    Assertion,
    AssertionKind,
    BodyIsEmptyAssertion,
    BodyIsJsonAssertion,
    StatusCodeAssertion,
    build_assertion,
    check_assertions,
)
from httpcase.models.result import Result, ResultKind, annotate_result
from httpcase.response import Response

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 100.0
DEFAULT_ITERATIONS = 1

PRE_REQUEST_FAILED = "received non successful result from pre request func"
POST_REQUEST_FAILED = "received non successful result from post request func"
ASSERTION_FAILED = "assertion failed"
ITERATIONS_EXHAUSTED = "failed after running out of iterations"

TestFunc: TypeAlias = Callable[[Response, Mapping[str, str]], Result | Awaitable[Result]]
PreRequestFunc: TypeAlias = Callable[[], Result | Awaitable[Result]]
PostRequestFunc: TypeAlias = Callable[[Result], Result | Awaitable[Result]]


class Request:
    """A single HTTP request test, configured through chained setters.

    A request owns its configuration only; the remaining iteration budget is
    tracked per ``run`` call. Running the same request concurrently from
    several tasks is not supported.
    """

    def __init__(self, url: str = "", method: str = "") -> None:
        self._id = str(uuid.uuid4())
        self._url = url
        self._method = method
        self._body: bytes | None = None
        self._headers: CIMultiDict[str] = CIMultiDict()
        self._timeout = DEFAULT_TIMEOUT
        self._iterations = DEFAULT_ITERATIONS
        self._sleep = 0.0
        self._assertions: list[Assertion] = []
        self._pre_request: PreRequestFunc | None = None
        self._test: TestFunc | None = None
        self._post_request: PostRequestFunc | None = None

    def __repr__(self) -> str:
        return (
            f"Request(id={self._id!r}, method={self._method!r}, url={self._url!r})"
        )

    @property
    def request_id(self) -> str:
        return self._id

    @property
    def url(self) -> str:
        return self._url

    @property
    def method(self) -> str:
        return self._method

    @property
    def headers(self) -> CIMultiDictProxy[str]:
        return CIMultiDictProxy(self._headers)

    @property
    def payload(self) -> bytes | None:
        return self._body

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    @property
    def iteration_budget(self) -> int:
        """Attempts a repeating test function may use per run."""
        return self._iterations

    @property
    def sleep_seconds(self) -> float:
        return self._sleep

    @property
    def assertions(self) -> tuple[Assertion, ...]:
        return tuple(self._assertions)

    @property
    def test_func(self) -> TestFunc | None:
        return self._test

    @classmethod
    def get(cls, url: str) -> Self:
        """Create a new GET request."""
        return cls(url, aiohttp.hdrs.METH_GET)

    @classmethod
    def post(cls, url: str) -> Self:
        """Create a new POST request."""
        return cls(url, aiohttp.hdrs.METH_POST)

    def id(self, request_id: str) -> Self:
        """Set the identifier used in diagnostics."""
        self._id = request_id
        return self

    def body(self, body: bytes | None) -> Self:
        """Set the request body, ``None`` sends no body."""
        self._body = body
        return self

    def header(self, key: str, value: str) -> Self:
        """Add a header value; repeated keys accumulate."""
        self._headers.add(key, value)
        return self

    def basic_auth(self, username: str, password: str) -> Self:
        """Add a basic ``Authorization`` header."""
        self._headers.add(
            aiohttp.hdrs.AUTHORIZATION, aiohttp.BasicAuth(username, password).encode()
        )
        return self

    def timeout(self, seconds: float) -> Self:
        """Set the transport timeout. A timed out request results in an error."""
        self._timeout = seconds
        return self

    def sleep(self, delay: float | timedelta) -> Self:
        """Set the delay between a repeat and the next attempt.

        Default no sleep.
        """
        if isinstance(delay, timedelta):
            delay = delay.total_seconds()
        self._sleep = delay
        return self

    def iterations(self, iterations: int) -> Self:
        """Set how many attempts a repeating test function may use.

        Values below 1 are ignored and the previous budget is kept.
        """
        if iterations >= 1:
            self._iterations = iterations
        return self

    def add_assertion(
        self, assertion: Assertion | AssertionKind | str, value: object = None
    ) -> Self:
        """Register an assertion instance or a built-in assertion kind."""
        if isinstance(assertion, str):
            assertion = build_assertion(assertion, value)
        self._assertions.append(assertion)
        return self

    def status_code(self, expected: int) -> Self:
        """Assert the response status code, a mismatch results in a failure."""
        return self.add_assertion(StatusCodeAssertion(expected))

    def body_is_empty(self) -> Self:
        """Assert that the response body is empty."""
        return self.add_assertion(BodyIsEmptyAssertion())

    def body_is_json(self) -> Self:
        """Assert that the response body is JSON."""
        return self.add_assertion(BodyIsJsonAssertion())

    def test(self, func: TestFunc) -> Self:
        """Set the test function.

        It receives the response and the downstream args of the previous
        attempt, which are empty on the first attempt.
        """
        self._test = func
        return self

    def pre_request(self, func: PreRequestFunc) -> Self:
        """Set the hook run before every attempt, called as ``func() -> Result``."""
        self._pre_request = func
        return self

    def post_request(self, func: PostRequestFunc) -> Self:
        """Set the hook run with the final result as ``func(result) -> Result``."""
        self._post_request = func
        return self

    async def run(
        self,
        args: Mapping[str, str] | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> Result:
        """Perform the request with its hooks, assertions and test function.

        Args:
            args: Downstream args handed to the test function on the first attempt
            session: Session to perform requests with, a new one is opened
                for the duration of the run when omitted

        Returns:
            The terminal result, this method does not raise for test outcomes

        """
        if not self._url:
            return Result(kind=ResultKind.ERROR, description="url is required")
        if not self._method:
            return Result(kind=ResultKind.ERROR, description="method is required")

        if session is None:
            async with aiohttp.ClientSession() as owned_session:
                return await self._run_attempts(owned_session, args or {})
        return await self._run_attempts(session, args or {})

    async def _run_attempts(
        self, session: aiohttp.ClientSession, args: Mapping[str, str]
    ) -> Result:
        remaining = self._iterations
        attempt = 0

        while True:
            attempt += 1
            log.debug(
                "Request %s: attempt %d (%d remaining)", self._id, attempt, remaining
            )
            result, tested = await self._attempt(session, args)
            if not tested:
                log.info("Request %s: %s %s", self._id, result.kind, result.description)
                return result

            if result.kind is not ResultKind.REPEAT:
                break

            remaining -= 1
            if remaining == 0:
                log.info(
                    "Request %s: out of iterations after %d attempt(s)",
                    self._id,
                    attempt,
                )
                return Result(kind=ResultKind.FAILURE, description=ITERATIONS_EXHAUSTED)

            log.info(
                "Request %s: repeat requested, retrying in %.2fs", self._id, self._sleep
            )
            await asyncio.sleep(self._sleep)
            args = result.downstream_args

        result = await self._finish(result)
        log.info("Request %s: %s %s", self._id, result.kind, result.description)
        return result

    async def _attempt(
        self, session: aiohttp.ClientSession, args: Mapping[str, str]
    ) -> tuple[Result, bool]:
        """Run one attempt up to and including the test function.

        Returns the working result and whether the test stage was reached.
        """
        if self._pre_request is not None:
            pre_result = await self._invoke("pre request func", self._pre_request)
            if pre_result.kind is not ResultKind.SUCCESS:
                return annotate_result(pre_result, PRE_REQUEST_FAILED), False

        try:
            async with session.request(
                self._method,
                self._url,
                data=self._body,
                headers=self._headers,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as client_response:
                try:
                    response = await Response.read(client_response)
                except (aiohttp.ClientError, TimeoutError) as exc:
                    return self._transport_error(
                        "received an error while reading response body", exc
                    ), False
        except (aiohttp.ClientError, TimeoutError, ValueError) as exc:
            return self._transport_error(
                "received an error while performing request", exc
            ), False

        result = Result(
            kind=ResultKind.SUCCESS if self._assertions else ResultKind.NO_TEST
        )
        if self._assertions:
            try:
                assertion_result = check_assertions(self._assertions, response)
            except Exception as exc:
                log.exception("Request %s: assertion raised", self._id)
                return Result(
                    kind=ResultKind.ERROR,
                    description=f"received an exception from assertion: {exc}",
                ), False
            if assertion_result.kind is not ResultKind.SUCCESS:
                return annotate_result(assertion_result, ASSERTION_FAILED), False

        if self._test is not None:
            result = await self._invoke("test func", self._test, response, args)

        return result, True

    async def _finish(self, result: Result) -> Result:
        if self._post_request is None:
            return result

        post_result = await self._invoke("post request func", self._post_request, result)
        if post_result.kind is not ResultKind.SUCCESS:
            return annotate_result(post_result, POST_REQUEST_FAILED)
        return result

    async def _invoke(
        self, stage: str, func: Callable[..., Result | Awaitable[Result]], *args: object
    ) -> Result:
        """Call a user function, converting exceptions and non-results into errors."""
        try:
            result = func(*args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            log.exception("Request %s: %s raised", self._id, stage)
            return Result(
                kind=ResultKind.ERROR,
                description=f"received an exception from {stage}: {exc}",
            )
        if not isinstance(result, Result):
            log.error("Request %s: %s returned %r", self._id, stage, result)
            return Result(
                kind=ResultKind.ERROR,
                description=f"received an invalid result from {stage}: {result!r}",
            )
        return result

    def _transport_error(self, prefix: str, exc: BaseException) -> Result:
        if isinstance(exc, TimeoutError):
            detail = f"request timed out after {self._timeout} seconds"
        else:
            detail = str(exc) or type(exc).__name__
        log.warning("Request %s: %s: %s", self._id, prefix, detail)
        return Result(kind=ResultKind.ERROR, description=f"{prefix}: {detail}")


def get(url: str) -> Request:
    """Create a new GET request."""
    return Request.get(url)


def post(url: str) -> Request:
    """Create a new POST request."""
    return Request.post(url)
