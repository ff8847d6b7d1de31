# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A FrameTransport over an asyncio StreamReader/StreamWriter pair
"""

from __future__ import annotations

import asyncio
from asyncio import StreamReader, StreamWriter, Future

from ..protocol.frame_transport import FrameTransport
from ..exceptions import ConnectionFailedError
from ..internal_types import *
from ..pkg_logging import logger

class StreamFrameTransport(FrameTransport):
    """
    A FrameTransport that reads and writes a connected TCP stream
    """

    stream_reader: StreamReader
    stream_writer: StreamWriter

    description: str
    """Peer "host:port", for log messages."""

    close_result: Future[None]
    """Done once close() or abort() has run; holds the exception if shutting down failed."""

    def __init__(
            self,
            stream_reader: StreamReader,
            stream_writer: StreamWriter,
            description: Optional[str]=None,
          ) -> None:
        self.stream_reader = stream_reader
        self.stream_writer = stream_writer
        self.description = "<stream>" if description is None else description
        self.close_result = asyncio.get_running_loop().create_future()

    @property
    def is_closed(self) -> bool:
        return self.close_result.done()

    # @override
    async def write(self, data: bytes) -> None:
        logger.debug(f"{self}: Writing {len(data)} bytes: {data.hex(' ')}")
        try:
            self.stream_writer.write(data)
            await self.stream_writer.drain()
        except OSError as e:
            raise ConnectionFailedError(f"Write to receiver at {self.description} failed: {e}") from e

    # @override
    async def read_exactly(self, length: int) -> bytes:
        try:
            data = await self.stream_reader.readexactly(length)
        except OSError as e:
            raise ConnectionFailedError(f"Read from receiver at {self.description} failed: {e}") from e
        logger.debug(f"{self}: Read {len(data)} bytes: {data.hex(' ')}")
        return data

    def _shut_down(self, how: str, shut_down: Callable[[], None]) -> None:
        if self.close_result.done():
            return
        logger.debug(f"{self}: {how}")
        try:
            shut_down()
        except BaseException as e:
            self.close_result.set_exception(e)
            raise
        self.close_result.set_result(None)

    # @override
    def close(self) -> None:
        self._shut_down("Closing", self.stream_writer.close)

    # @override
    def abort(self) -> None:
        self._shut_down("Aborting", self.stream_writer.transport.abort)

    # @override
    async def wait_closed(self) -> None:
        await self.close_result
        try:
            await self.stream_writer.wait_closed()
        except OSError:
            # An aborted or reset connection reports its error here; it is already closed.
            logger.debug(f"{self}: Exception while waiting for writer to close", exc_info=True)

    def __str__(self) -> str:
        return f"StreamFrameTransport({self.description})"

    def __repr__(self) -> str:
        return str(self)
