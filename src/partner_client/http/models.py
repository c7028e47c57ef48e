"""
Request and response models for partner pipelines.

OutgoingRequest is what callers hand to a pipeline; PartnerResponse is what
comes back. Headers use CIMultiDict so ordering and repeated keys survive.
"""

import json
from dataclasses import dataclass, field
from typing import Any, AsyncIterable, Optional, Union

from multidict import CIMultiDict
from yarl import URL

BodyData = Union[bytes, bytearray, AsyncIterable[bytes]]


@dataclass
class RequestContent:
    """
    Request body with its content metadata.

    ``data`` is either a byte buffer (replayable) or an async byte stream,
    which can only be consumed once.
    """

    data: BodyData
    content_type: Optional[str] = None
    headers: CIMultiDict = field(default_factory=CIMultiDict)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, CIMultiDict):
            self.headers = CIMultiDict(self.headers or {})

    @classmethod
    def from_json(cls, payload: Any) -> "RequestContent":
        """Build buffered JSON content from a serializable payload."""
        return cls(
            data=json.dumps(payload).encode("utf-8"),
            content_type="application/json",
        )

    @property
    def is_buffered(self) -> bool:
        return isinstance(self.data, (bytes, bytearray))

    async def read(self) -> bytes:
        """
        Read the full body.

        Buffered content can be read any number of times. Streamed content
        is drained by the first read.
        """
        if self.is_buffered:
            return bytes(self.data)

        chunks = []
        async for chunk in self.data:
            chunks.append(bytes(chunk))
        return b"".join(chunks)


@dataclass
class OutgoingRequest:
    """
    HTTP request travelling through a partner pipeline.

    The url may be absolute or relative to the transport's base URL.
    """

    method: str
    url: URL
    headers: CIMultiDict = field(default_factory=CIMultiDict)
    content: Optional[RequestContent] = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if not isinstance(self.url, URL):
            self.url = URL(self.url)
        if not isinstance(self.headers, CIMultiDict):
            self.headers = CIMultiDict(self.headers or {})

    @property
    def path(self) -> str:
        return self.url.path


@dataclass
class PartnerResponse:
    """Fully read HTTP response from a partner."""

    status: int
    headers: CIMultiDict = field(default_factory=CIMultiDict)
    body: bytes = b""
    reason: Optional[str] = None
    request: Optional[OutgoingRequest] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_auth_failure(self) -> bool:
        """True when the partner rejected the request's credential (401)."""
        return self.status == 401

    def json(self) -> Any:
        return json.loads(self.body)


__all__ = ["RequestContent", "OutgoingRequest", "PartnerResponse"]
