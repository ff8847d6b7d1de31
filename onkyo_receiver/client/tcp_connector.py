# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Onkyo receiver TCP/IP connector.

Opens a StreamFrameTransport over a new TCP/IP socket for each session.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..exceptions import ConnectionFailedError
from ..pkg_logging import logger
from ..protocol import FrameTransport
from ..protocol_impl import StreamFrameTransport
from .connector import OnkyoReceiverConnector

class TcpOnkyoReceiverConnector(OnkyoReceiverConnector):
    """Onkyo receiver TCP/IP transport connector.

    Each call to connect() makes exactly one connection attempt; there is no
    retry. A refused connection, an unreachable network and a failed name lookup
    are all reported as ConnectionFailedError, since the caller's remedy is the
    same for each.
    """

    # @abstractmethod
    async def connect(self, host: str, port: int) -> FrameTransport:
        logger.debug(f"Connecting to receiver at {host}:{port}")
        try:
            reader, writer = await asyncio.open_connection(host, port)
        except OSError as e:
            logger.debug(f"Connection to receiver at {host}:{port} failed: {e}")
            raise ConnectionFailedError(f"Could not connect to receiver at {host}:{port}: {e}") from e
        logger.debug(f"Connected to receiver at {host}:{port}")
        return StreamFrameTransport(reader, writer, description=f"{host}:{port}")

    def __str__(self) -> str:
        return "TcpOnkyoReceiverConnector()"

    def __repr__(self) -> str:
        return str(self)
