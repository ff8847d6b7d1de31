# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Onkyo receiver emulator.

Listens for eISCP connections and keeps the master volume and mute state of a
single receiver, answering MVL and AMT commands the way real hardware does.
It can also push unsolicited status frames ahead of each reply, or stay silent,
so clients can be tested against both behaviors.
"""

from __future__ import annotations

import asyncio

from ..internal_types import *
from ..pkg_logging import logger
from ..protocol import (
    CommandFamily,
    MESSAGE_PREFIX,
    END_OF_REPLY,
    build_frame,
  )
from ..constants import DEFAULT_PORT, MAX_VOLUME
from ..util import clamp

from .session import OnkyoReceiverEmulatorSession

NOT_AVAILABLE = "N/A"
"""Argument the receiver replies with when a command cannot be honored."""

class OnkyoReceiverEmulator(AsyncContextManager['OnkyoReceiverEmulator']):
    bind_addr: str
    port: int
    sessions: Dict[int, OnkyoReceiverEmulatorSession]
    server: Optional[asyncio.Server] = None
    stopped: Optional[asyncio.Future[None]] = None
    """Completed by close(); holds the exception passed to close(), if any."""

    volume: int
    max_volume: int
    muted: bool

    chatter: List[str]
    """Command texts pushed as unsolicited status frames ahead of every reply."""

    respond: bool
    """If False, commands are applied but never answered."""

    received_commands: List[str]
    """Every command received, in order."""

    _connection_count: int = 0

    def __init__(
            self,
            bind_addr: Optional[str] = None,
            port: int = DEFAULT_PORT,
            initial_volume: int = 0x29,
            initial_muted: bool = False,
            max_volume: int = MAX_VOLUME,
            chatter: Optional[Iterable[str]] = None,
            respond: bool = True,
          ):
        """Creates an emulator. Nothing listens until start() is awaited.

        Args:
            bind_addr: The local address to listen on. Default: "0.0.0.0".
            port: The TCP port to listen on. 0 picks an ephemeral port; see bound_port.
            initial_volume: The starting master volume.
            initial_muted: The starting mute state.
            max_volume: Volume steps and absolute settings are limited to this level.
            chatter: Command texts (e.g., "NLSC-P") sent as unsolicited frames before
                     each reply.
            respond: If False, never reply; clients waiting for a reply will time out.
        """
        self.bind_addr = '0.0.0.0' if bind_addr is None else bind_addr
        self.port = port
        self.sessions = {}
        self.max_volume = max_volume
        self.volume = clamp(initial_volume, 0, max_volume)
        self.muted = initial_muted
        self.chatter = [] if chatter is None else list(chatter)
        self.respond = respond
        self.received_commands = []

    @property
    def bound_port(self) -> int:
        """The port actually being listened on. Differs from port if port was 0."""
        if self.server is None or not self.server.sockets:
            return self.port
        return int(self.server.sockets[0].getsockname()[1])

    def _new_session(self) -> OnkyoReceiverEmulatorSession:
        self._connection_count += 1
        session = OnkyoReceiverEmulatorSession(self, self._connection_count)
        self.sessions[session.connection_id] = session
        return session

    def forget_session(self, session: OnkyoReceiverEmulatorSession) -> None:
        self.sessions.pop(session.connection_id, None)

    def on_command_received(self, session: OnkyoReceiverEmulatorSession, command: str) -> None:
        """Applies a command from a session and writes any replies back to it."""
        self.received_commands.append(command)
        logger.debug(f"{session}: Received {command!r}")
        for reply in self.handle_command(session, command):
            logger.debug(f"{session}: Replying {reply!r}")
            session.write(self.reply_frame(reply))

    def _handle_master_volume(self, argument: str) -> str:
        if argument == "UP":
            self.volume = min(self.volume + 1, self.max_volume)
        elif argument == "DOWN":
            self.volume = max(self.volume - 1, 0)
        elif argument != "QSTN":
            try:
                level = int(argument, 16)
            except ValueError:
                return NOT_AVAILABLE
            if not 0 <= level <= self.max_volume:
                return NOT_AVAILABLE
            self.volume = level
        return f"{self.volume:02X}"

    def _handle_audio_muting(self, argument: str) -> str:
        if argument == "01":
            self.muted = True
        elif argument == "00":
            self.muted = False
        elif argument == "TG":
            self.muted = not self.muted
        elif argument != "QSTN":
            return NOT_AVAILABLE
        return "01" if self.muted else "00"

    def handle_command(self, session: OnkyoReceiverEmulatorSession, command: str) -> List[str]:
        """Applies a single command, and returns the command texts of the replies to send."""
        family_code = command[:3]
        argument = command[3:]
        if family_code == CommandFamily.MASTER_VOLUME.marker:
            reply_argument = self._handle_master_volume(argument)
        elif family_code == CommandFamily.AUDIO_MUTING.marker:
            reply_argument = self._handle_audio_muting(argument)
        else:
            logger.debug(f"{session}: Unsupported command {command!r}")
            reply_argument = NOT_AVAILABLE
        if not self.respond:
            return []
        return self.chatter + [family_code + reply_argument]

    @staticmethod
    def reply_frame(reply: str) -> bytes:
        """Encodes a reply the way a receiver does: "!1" + reply + EOF + CR LF."""
        return build_frame((MESSAGE_PREFIX + reply + END_OF_REPLY).encode('utf-8'))

    async def start(self) -> None:
        loop = asyncio.get_running_loop()
        self.stopped = loop.create_future()
        self.server = await loop.create_server(self._new_session, host=self.bind_addr, port=self.port)
        logger.info(f"Emulator: Listening on {self.bind_addr}:{self.bound_port}")

    def close(self, exc: Optional[BaseException]=None) -> None:
        """Stops accepting connections and drops the open ones.

        If exc is given, run() raises it.
        """
        if self.stopped is not None and not self.stopped.done():
            if exc is None:
                self.stopped.set_result(None)
            else:
                logger.debug(f"Emulator: Stopping with {exc}")
                self.stopped.set_exception(exc)
        if self.server is not None:
            self.server.close()
        for session in list(self.sessions.values()):
            session.close()

    async def wait_closed(self) -> None:
        """Waits for close() to be called, then for the listener to shut down."""
        if self.stopped is not None:
            await asyncio.wait([self.stopped])
        server = self.server
        self.server = None
        if server is not None:
            server.close()
            await server.wait_closed()

    async def run(self) -> None:
        """Serves until close() is called. Raises the exception passed to close(), if any."""
        async with self:
            await self.wait_closed()
            assert self.stopped is not None
            self.stopped.result()

    async def __aenter__(self) -> OnkyoReceiverEmulator:
        await self.start()
        return self

    async def __aexit__(self,
            exc_type: Optional[type[BaseException]],
            exc: Optional[BaseException],
            tb: Optional[TracebackType]
      ) -> None:
        self.close()
        await self.wait_closed()

    def __str__(self) -> str:
        return f"OnkyoReceiverEmulator({self.bind_addr}:{self.bound_port})"

    def __repr__(self) -> str:
        return str(self)
