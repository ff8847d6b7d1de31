# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Abstract base class for a FrameTransport, a single-use byte connection to a receiver
over which eISCP frames are written and read.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..internal_types import *

class FrameTransport(ABC):
    """
    Interface for one connection attempt to a receiver. Owned by exactly one session and
    never reused after that session resolves.
    """

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """True once close() or abort() has been called."""
        ...

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """
        Writes data to the connection and waits until it has been handed to the
        operating system.

        Raises:
            ConnectionFailedError: The write failed.
        """
        ...

    @abstractmethod
    async def read_exactly(self, length: int) -> bytes:
        """
        Reads exactly length bytes.

        Raises:
            asyncio.IncompleteReadError: The stream ended before length bytes arrived.
            ConnectionFailedError: The read failed.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """
        Close the transport. Does not wait for the transport to be completely closed.

        Repeated calls to this method are allowed and will have no effect.
        """
        ...

    def abort(self) -> None:
        """
        Close the transport immediately, discarding buffered data. By default the
        same as close().
        """
        self.close()

    @abstractmethod
    async def wait_closed(self) -> None:
        """
        Wait for the transport to be completely closed. Does not initiate
        closing.
        """
        ...

    async def aclose(self) -> None:
        """
        Close the transport, and wait for it to be completely closed.

        Repeated calls to this method are allowed and will have no effect.
        """
        self.close()
        await self.wait_closed()

    async def __aenter__(self) -> FrameTransport:
        """
        Enter a context that will close the FrameTransport when the context exits.
        """
        return self

    async def __aexit__(
            self,
            exc_type: Optional[Type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType],
          ) -> None:
        """
        Async context manager exit point.
        """
        await self.aclose()
