# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Reads response frames from a receiver until one carries the expected reply.

Receivers push unsolicited status frames (display text, input source, network
metadata, ...) at any time, so the reply to a query may be preceded by several
unrelated frames. The matcher skips frames until one contains the expected
command family marker, bounded by a maximum read count.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..exceptions import (
    MalformedHeaderError,
    UndecodableResponseError,
    NoMatchingResponseError,
  )
from ..constants import MAX_RESPONSE_READS
from ..pkg_logging import logger
from ..protocol import (
    FrameTransport,
    HEADER_LENGTH,
    decode_header,
    decode_payload,
  )

class ResponseMatcher:
    """Skip-until-match reader for eISCP reply frames."""

    max_reads: int
    """The maximum number of frames read before giving up."""

    def __init__(self, max_reads: int=MAX_RESPONSE_READS) -> None:
        assert max_reads >= 1
        self.max_reads = max_reads

    async def read_frame(self, transport: FrameTransport) -> str:
        """Reads one complete frame and returns its payload as text.

        Raises:
            MalformedHeaderError: The stream ended within the header.
            UndecodableResponseError: The stream ended within the payload, or
                                      the payload is not valid UTF-8.
            ConnectionFailedError: The read failed.
        """
        try:
            raw_header = await transport.read_exactly(HEADER_LENGTH)
        except asyncio.IncompleteReadError as e:
            raise MalformedHeaderError(
                f"Connection closed after {len(e.partial)} of {HEADER_LENGTH} header bytes: {e.partial.hex(' ')}") from e
        payload_length = decode_header(raw_header)
        try:
            payload = await transport.read_exactly(payload_length)
        except asyncio.IncompleteReadError as e:
            raise UndecodableResponseError(
                f"Connection closed after {len(e.partial)} of {payload_length} payload bytes: {e.partial.hex(' ')}") from e
        return decode_payload(payload)

    async def read_matching(self, transport: FrameTransport, marker: str) -> str:
        """Returns the payload text of the first frame that contains marker.

        Matching is a substring test, since the payload begins with the "!1"
        envelope rather than the command family.

        Raises:
            NoMatchingResponseError: max_reads frames were read without a match.
            Any error raised by read_frame(); reading stops at the first error.
        """
        for attempt in range(1, self.max_reads + 1):
            message = await self.read_frame(transport)
            if marker in message:
                logger.debug(f"Frame {attempt} matched {marker!r}: {message!r}")
                return message
            logger.debug(f"Frame {attempt} does not match {marker!r}; discarding: {message!r}")
        raise NoMatchingResponseError(
            f"No reply containing {marker!r} in {self.max_reads} response frames")

    def __str__(self) -> str:
        return f"ResponseMatcher(max_reads={self.max_reads})"

    def __repr__(self) -> str:
        return str(self)
