"""Fluent HTTP request tests with assertions, hooks and retries."""

from httpcase.assertions import (
    Assertion,
    AssertionKind,
    BodyIsEmptyAssertion,
    BodyIsJsonAssertion,
    StatusCodeAssertion,
)
from httpcase.group import RequestGroup
from httpcase.models.result import Result, ResultKind, annotate_result
from httpcase.request import Request, get, post
from httpcase.response import Response

__all__ = [
    "Assertion",
    "AssertionKind",
    "BodyIsEmptyAssertion",
    "BodyIsJsonAssertion",
    "Request",
    "RequestGroup",
    "Response",
    "Result",
    "ResultKind",
    "StatusCodeAssertion",
    "annotate_result",
    "get",
    "post",
]
