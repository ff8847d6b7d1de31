# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Onkyo receiver abstract transport connector interface.

Provides a low-level abstract interface for objects that can open a
single-use frame transport to a receiver. This abstraction allows sessions
to be exercised over alternate transports (e.g., in-memory test doubles).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..internal_types import *
from ..protocol import FrameTransport

class OnkyoReceiverConnector(ABC):
    """Abstract base class for Onkyo receiver transport connectors."""

    @abstractmethod
    async def connect(self, host: str, port: int) -> FrameTransport:
        """Open a new connection to the receiver at host:port.

        Must be implemented by subclasses.

        Raises:
            ConnectionFailedError: The connection could not be established.
        """
        raise NotImplementedError()
