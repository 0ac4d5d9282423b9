"""Fully read HTTP response handed to assertions and test functions."""

import json
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from multidict import CIMultiDict, CIMultiDictProxy


@dataclass(frozen=True, kw_only=True)
class Response:
    """Status, headers and the complete body of a performed request."""

    status: int
    url: str
    body: bytes = b""
    headers: CIMultiDictProxy[str] = field(
        default_factory=lambda: CIMultiDictProxy(CIMultiDict())
    )

    @classmethod
    async def read(cls, response: aiohttp.ClientResponse) -> "Response":
        """Drain the body of an aiohttp response into memory."""
        body = await response.read()
        return cls(
            status=response.status,
            url=str(response.url),
            body=body,
            headers=response.headers,
        )

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding)

    def json(self) -> Any:
        """Parse the body as JSON."""
        return json.loads(self.body)
