# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Onkyo receiver eISCP client.

Provides volume and mute operations on a receiver identified by its IP address.
The client holds no connection; every operation opens, uses and closes its own.
"""

from __future__ import annotations

from ..internal_types import *
from ..pkg_logging import logger
from ..protocol import (
    Packet,
    CommandFamily,
    VOLUME_UP,
    VOLUME_DOWN,
    VOLUME_QUERY,
    MUTE_QUERY,
    format_volume_command,
    parse_volume_reply,
    format_mute_command,
    parse_mute_reply,
  )
from .client_config import OnkyoReceiverClientConfig
from .connector import OnkyoReceiverConnector
from .tcp_connector import TcpOnkyoReceiverConnector
from .response_matcher import ResponseMatcher
from .receiver_session import ReceiverSession

class OnkyoReceiverClient:
    """Onkyo receiver eISCP client.

    Operations may run concurrently; they share nothing but configuration.
    Callers that need commands to reach the receiver in order (e.g., a rapid
    series of volume steps) must await each call before issuing the next.
    """

    config: OnkyoReceiverClientConfig
    connector: OnkyoReceiverConnector

    def __init__(
            self,
            config: Optional[OnkyoReceiverClientConfig]=None,
            connector: Optional[OnkyoReceiverConnector]=None,
          ) -> None:
        """Initialize an Onkyo receiver client.

        Args:
            config: Port, timeout and response read limit. If None, a default
                    config is created.
            connector: Opens connections to the receiver. If None, TCP/IP is used.
        """
        self.config = OnkyoReceiverClientConfig(base_config=config)
        self.connector = TcpOnkyoReceiverConnector() if connector is None else connector

    def create_session(self, host: str) -> ReceiverSession:
        return ReceiverSession(
            host,
            port=self.config.default_port,
            timeout_secs=self.config.timeout_secs,
            connector=self.connector,
            matcher=ResponseMatcher(self.config.max_response_reads),
          )

    async def send_command(
            self,
            host: str,
            command: str,
            expected_marker: Optional[str]=None,
          ) -> Optional[str]:
        """Sends a raw command (e.g., "MVLUP") to the receiver at host.

        If expected_marker is None, returns None as soon as the command has
        been written. Otherwise waits for a reply containing expected_marker
        and returns its payload text, e.g. "!1MVL29\\x1a\\r\\n".
        """
        logger.debug(f"{self}: Sending {command!r} to {host}, expecting {expected_marker!r}")
        session = self.create_session(host)
        return await session.transact(Packet.from_command(command), expected_marker=expected_marker)

    async def _transact(self, host: str, command: str, family: CommandFamily) -> str:
        response = await self.send_command(host, command, expected_marker=family.marker)
        assert response is not None
        return response

    async def volume_up(self, host: str, confirm: bool=False) -> None:
        """Steps the master volume up one notch.

        By default this is fire-and-forget: it succeeds once the command has been
        written. If confirm is True, also waits for the receiver's volume reply.
        """
        if confirm:
            await self._transact(host, VOLUME_UP, CommandFamily.MASTER_VOLUME)
        else:
            await self.send_command(host, VOLUME_UP)

    async def volume_down(self, host: str, confirm: bool=False) -> None:
        """Steps the master volume down one notch. See volume_up()."""
        if confirm:
            await self._transact(host, VOLUME_DOWN, CommandFamily.MASTER_VOLUME)
        else:
            await self.send_command(host, VOLUME_DOWN)

    async def query_volume(self, host: str) -> int:
        """Returns the current master volume on the receiver's own scale.

        The value is the receiver's hex level as-is; it is not capped at 100
        and not rescaled.

        Raises:
            InvalidResponseError: The reply's level is not hexadecimal
                                  (e.g., "N/A" while the receiver is in standby).
        """
        response = await self._transact(host, VOLUME_QUERY, CommandFamily.MASTER_VOLUME)
        volume = parse_volume_reply(response)
        logger.debug(f"{self}: Volume at {host} is {volume}")
        return volume

    async def set_volume(self, host: str, level: int) -> None:
        """Sets the master volume. level is clamped to [0, 100]."""
        await self._transact(host, format_volume_command(level), CommandFamily.MASTER_VOLUME)

    async def set_mute(self, host: str, muted: bool) -> None:
        await self._transact(host, format_mute_command(muted), CommandFamily.AUDIO_MUTING)

    async def query_mute(self, host: str) -> bool:
        """Returns True if the receiver's audio is muted."""
        response = await self._transact(host, MUTE_QUERY, CommandFamily.AUDIO_MUTING)
        return parse_mute_reply(response)

    def __str__(self) -> str:
        return f"OnkyoReceiverClient(port={self.config.default_port})"

    def __repr__(self) -> str:
        return str(self)
