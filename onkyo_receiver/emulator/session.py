# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
One client connection to the emulated receiver.

Bytes arrive in arbitrary pieces. Complete eISCP frames are cut out of the
buffer and the command text of each is handed to the emulator, which answers
through write().
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..pkg_logging import logger
from ..exceptions import ReceiverProtocolError
from ..protocol import (
    HEADER_LENGTH,
    MESSAGE_PREFIX,
    END_OF_COMMAND,
    END_OF_MESSAGE,
    parse_header,
    decode_payload,
  )

if TYPE_CHECKING:
    from .emulator_impl import OnkyoReceiverEmulator

IDLE_TIMEOUT = 30.0
"""Seconds a connection may stay silent before the emulator drops it."""

def message_to_command(message: str) -> str:
    """Strips the "!1" envelope and terminators from a received message."""
    if message.startswith(MESSAGE_PREFIX):
        message = message[len(MESSAGE_PREFIX):]
    return message.rstrip(END_OF_COMMAND + END_OF_MESSAGE)

class OnkyoReceiverEmulatorSession(asyncio.Protocol):
    emulator: OnkyoReceiverEmulator
    connection_id: int
    transport: Optional[asyncio.Transport] = None
    peer: str = "<unconnected>"
    buffer: bytearray
    closed: bool = False
    idle_handle: Optional[asyncio.TimerHandle] = None

    def __init__(self, emulator: OnkyoReceiverEmulator, connection_id: int):
        self.emulator = emulator
        self.connection_id = connection_id
        self.buffer = bytearray()

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        assert isinstance(transport, asyncio.Transport)
        self.transport = transport
        self.peer = str(transport.get_extra_info('peername'))
        logger.debug(f"{self}: Accepted")
        self._arm_idle_timer()

    def data_received(self, data: bytes) -> None:
        self.buffer.extend(data)
        try:
            for command in self._take_commands():
                self.emulator.on_command_received(self, command)
        except ReceiverProtocolError as e:
            logger.debug(f"{self}: Dropping connection after bad input: {e}")
            self.close()
            return
        self._arm_idle_timer()

    def _take_commands(self) -> Iterator[str]:
        """Yields the command of each complete frame in the buffer, consuming it."""
        while not self.closed and len(self.buffer) >= HEADER_LENGTH:
            header = parse_header(self.buffer, strict=True)
            frame_end = header.header_length + header.payload_length
            if len(self.buffer) < frame_end:
                return
            payload = bytes(self.buffer[header.header_length:frame_end])
            del self.buffer[:frame_end]
            yield message_to_command(decode_payload(payload))

    def write(self, data: bytes) -> None:
        if self.closed or self.transport is None or self.transport.is_closing():
            logger.debug(f"{self}: Connection closed; dropping {len(data)} bytes")
            return
        self.transport.write(data)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._cancel_idle_timer()
        if self.transport is not None:
            self.transport.close()
        self.emulator.forget_session(self)

    def _cancel_idle_timer(self) -> None:
        if self.idle_handle is not None:
            self.idle_handle.cancel()
            self.idle_handle = None

    def _arm_idle_timer(self) -> None:
        self._cancel_idle_timer()
        if not self.closed:
            self.idle_handle = asyncio.get_running_loop().call_later(IDLE_TIMEOUT, self._on_idle)

    def _on_idle(self) -> None:
        self.idle_handle = None
        logger.debug(f"{self}: Idle for {IDLE_TIMEOUT} seconds; closing")
        self.close()

    def connection_lost(self, exc: Optional[BaseException]) -> None:
        logger.debug(f"{self}: Disconnected ({exc})")
        self.close()

    def eof_received(self) -> bool:
        logger.debug(f"{self}: Peer finished sending; closing")
        self.close()
        return False

    def __str__(self) -> str:
        return f"EmulatorSession({self.connection_id}, {self.peer})"

    def __repr__(self) -> str:
        return str(self)
