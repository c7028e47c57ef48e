"""Independent, fully buffered copies of outgoing requests."""

from multidict import CIMultiDict

from partner_client.http.models import OutgoingRequest, RequestContent


async def clone_request(request: OutgoingRequest) -> OutgoingRequest:
    """
    Copy a request so it can be resent without touching the original.

    Method and URL are copied verbatim and every header entry is copied
    as-is, duplicates included. A body is read fully into a new buffer and
    attached with its content type, content headers and a Content-Length
    matching the buffer.

    Content-Length, and Content-Type when the content names one, travel
    with the content only: any copies in the request headers are dropped
    from the clone so they reach the wire once.

    Streamed bodies can only be read once: clone before the original is
    sent, then send clones. Cloning a streamed request replaces the
    caller's ``request.content.data`` with the buffered bytes. Nothing else
    on the caller's request is modified.

    Args:
        request: Request to copy

    Returns:
        A new OutgoingRequest sharing no mutable state with ``request``
    """
    clone = OutgoingRequest(
        method=request.method,
        url=request.url,
        headers=CIMultiDict(request.headers),
    )

    if request.content is None:
        return clone

    buffer = await request.content.read()
    if not request.content.is_buffered:
        # Keep the original replayable now that its stream is drained
        request.content.data = buffer

    clone.headers.popall("Content-Length", None)
    if request.content.content_type:
        clone.headers.popall("Content-Type", None)

    content_headers = CIMultiDict(request.content.headers)
    content_headers.popall("Content-Length", None)
    content_headers["Content-Length"] = str(len(buffer))

    clone.content = RequestContent(
        data=bytes(buffer),
        content_type=request.content.content_type,
        headers=content_headers,
    )
    return clone


__all__ = ["clone_request"]
