"""Sequential batches of requests that abort on a skip."""

import logging
import uuid
from collections.abc import Callable, Sequence
from typing import Self, TypeAlias

import aiohttp

from httpcase.models.result import Result, ResultKind
from httpcase.request import Request

log = logging.getLogger(__name__)

ResultObserver: TypeAlias = Callable[[Request, Result], None]


class RequestGroup:
    """An ordered batch of requests.

    Only ``skip`` results are acted on: the first one aborts the group.
    Failures and errors of members are not reflected in the group result.
    """

    def __init__(self, group_id: str | None = None) -> None:
        self._id = group_id or str(uuid.uuid4())
        self._requests: list[Request] = []

    def __repr__(self) -> str:
        return f"RequestGroup(id={self._id!r}, requests={len(self._requests)})"

    @property
    def group_id(self) -> str:
        return self._id

    @property
    def requests(self) -> Sequence[Request]:
        return tuple(self._requests)

    def id(self, group_id: str) -> Self:
        self._id = group_id
        return self

    def add_request(self, request: Request) -> Self:
        self._requests.append(request)
        return self

    async def run(
        self,
        session: aiohttp.ClientSession | None = None,
        on_result: ResultObserver | None = None,
    ) -> Result:
        """Run the requests in order on a shared session.

        Args:
            session: Session shared by all requests, opened for the run when omitted
            on_result: Called with every executed request and its result

        Returns:
            A skip result naming the skipping request, otherwise success

        """
        if session is None:
            async with aiohttp.ClientSession() as owned_session:
                return await self._run_requests(owned_session, on_result)
        return await self._run_requests(session, on_result)

    async def _run_requests(
        self, session: aiohttp.ClientSession, on_result: ResultObserver | None
    ) -> Result:
        log.info("Running group %s (%d request(s))", self._id, len(self._requests))

        for request in self._requests:
            result = await request.run(session=session)
            if on_result is not None:
                on_result(request, result)

            if result.kind is ResultKind.SKIP:
                log.info(
                    "Group %s skipped by request %s", self._id, request.request_id
                )
                return Result(
                    kind=ResultKind.SKIP,
                    description=f"skipped caused by request {request.request_id}",
                )

        return Result(kind=ResultKind.SUCCESS)
