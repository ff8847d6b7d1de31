# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A single-use session with an Onkyo receiver: one connection, one request, and at most
one awaited reply, all bounded by a timeout.

A session can be finished by any of several independent events: the connection
attempt fails, the request write completes (or fails), the awaited reply arrives
(or cannot be read), or the timer fires. Whichever event happens first decides the
outcome; every later event is ignored. The connection is closed on that first
terminal transition and never used again.
"""

from __future__ import annotations

import asyncio
import threading
from asyncio import Future

from ..internal_types import *
from ..exceptions import (
    OnkyoReceiverError,
    ConnectionFailedError,
    ReceiverTimeoutError,
  )
from ..constants import DEFAULT_PORT, DEFAULT_TIMEOUT
from ..pkg_logging import logger
from ..util import full_class_name
from ..protocol import Packet, FrameTransport
from .connector import OnkyoReceiverConnector
from .tcp_connector import TcpOnkyoReceiverConnector
from .response_matcher import ResponseMatcher

CLOSE_WAIT_TIMEOUT = 1.0
"""Seconds to wait for a closed connection to finish closing before giving up on it."""

class SessionOutcome:
    """The exactly-once terminal outcome of a ReceiverSession.

    Holds a single lock-guarded "resolved" flag. try_resolve() checks and sets it
    atomically; only the first caller sets the result future, every later caller
    gets False and has no effect.
    """
    future: Future[Optional[str]]
    resolved_by: Optional[str] = None
    """Name of the event source that resolved the outcome, for diagnostics."""

    _lock: threading.Lock
    _resolved: bool = False

    def __init__(self, future: Future[Optional[str]]) -> None:
        self.future = future
        self._lock = threading.Lock()

    @property
    def is_resolved(self) -> bool:
        with self._lock:
            return self._resolved

    def try_resolve(
            self,
            source: str,
            result: Optional[str]=None,
            exc: Optional[BaseException]=None,
          ) -> bool:
        """Resolves the outcome with a result or an exception, unless it is already resolved.

        Returns:
            True if this call resolved the outcome; False if it was a no-op.
        """
        with self._lock:
            if self._resolved:
                return False
            self._resolved = True
            self.resolved_by = source
        if not self.future.done():
            if exc is None:
                self.future.set_result(result)
            else:
                self.future.set_exception(exc)
        return True

class ReceiverSession:
    """One connection attempt to a receiver, carrying one request.

    Sessions are single-use: transact() may be called once.
    """

    host: str
    port: int
    timeout_secs: float
    connector: OnkyoReceiverConnector
    matcher: ResponseMatcher

    transport: Optional[FrameTransport] = None
    outcome: Optional[SessionOutcome] = None
    timer: Optional[asyncio.TimerHandle] = None
    exchange_task: Optional[asyncio.Task[None]] = None

    def __init__(
            self,
            host: str,
            port: int=DEFAULT_PORT,
            timeout_secs: float=DEFAULT_TIMEOUT,
            connector: Optional[OnkyoReceiverConnector]=None,
            matcher: Optional[ResponseMatcher]=None,
          ) -> None:
        self.host = host
        self.port = port
        self.timeout_secs = timeout_secs
        self.connector = TcpOnkyoReceiverConnector() if connector is None else connector
        self.matcher = ResponseMatcher() if matcher is None else matcher

    async def transact(self, packet: Packet, expected_marker: Optional[str]=None) -> Optional[str]:
        """Connects, sends packet, and (if expected_marker is given) waits for a matching reply.

        Args:
            packet: The request frame.
            expected_marker: The command family marker the reply must contain (e.g. "MVL").
                If None, the request is fire-and-forget and the session succeeds as soon
                as the write completes.

        Returns:
            The matching reply's payload text, or None for fire-and-forget requests.

        Raises:
            ConnectionFailedError: The connection or write failed.
            ReceiverTimeoutError: Nothing finished the session within timeout_secs.
            ReceiverProtocolError: The reply stream was malformed or had no matching reply.
        """
        if self.outcome is not None:
            raise OnkyoReceiverError(f"{self}: transact() called more than once")
        loop = asyncio.get_running_loop()
        self.outcome = SessionOutcome(loop.create_future())
        self.timer = loop.call_later(self.timeout_secs, self.on_timeout)
        self.exchange_task = asyncio.create_task(self._exchange(packet, expected_marker))
        try:
            return await self.outcome.future
        finally:
            await self._teardown()

    async def _exchange(self, packet: Packet, expected_marker: Optional[str]) -> None:
        """Runs the connect/send/read sequence, reporting each terminal event to the session."""
        assert self.outcome is not None
        try:
            transport = await self.connector.connect(self.host, self.port)
        except Exception as e:
            self.on_connection_failed(e)
            return
        self.transport = transport
        if self.outcome.is_resolved:
            # Resolved (e.g., timed out) while the connection was being established
            self._close_transport(abort=True)
            return
        try:
            await transport.write(packet.raw_data)
        except Exception as e:
            self.on_send_complete(e)
            return
        if expected_marker is None:
            self.on_send_complete()
            return
        try:
            message = await self.matcher.read_matching(transport, expected_marker)
        except Exception as e:
            self.on_response_error(e)
            return
        self.on_response(message)

    def on_connection_failed(self, exc: BaseException) -> None:
        """Connection-state event: the connection was refused, failed, or the network
           is unreachable."""
        if isinstance(exc, OSError):
            wrapped = ConnectionFailedError(f"Could not connect to receiver at {self.host}:{self.port}: {exc}")
            wrapped.__cause__ = exc
            exc = wrapped
        self._resolve("connection", exc=exc)

    def on_send_complete(self, exc: Optional[BaseException]=None) -> None:
        """Send-completion event. With no exception, resolves the session successfully."""
        if exc is None:
            self._resolve("send")
        else:
            if isinstance(exc, OSError):
                wrapped = ConnectionFailedError(f"Write to receiver at {self.host}:{self.port} failed: {exc}")
                wrapped.__cause__ = exc
                exc = wrapped
            self._resolve("send", exc=exc)

    def on_response(self, message: str) -> None:
        """A matching reply arrived."""
        self._resolve("response", result=message)

    def on_response_error(self, exc: BaseException) -> None:
        """Reading the reply failed."""
        self._resolve("response", exc=exc)

    def on_timeout(self) -> None:
        """Timer event. Aborts the connection and resolves ReceiverTimeoutError."""
        self.timer = None
        if self._resolve("timeout", exc=ReceiverTimeoutError(timeout_secs=self.timeout_secs), abort=True):
            exchange_task = self.exchange_task
            if exchange_task is not None and not exchange_task.done():
                exchange_task.cancel()

    def _resolve(
            self,
            source: str,
            result: Optional[str]=None,
            exc: Optional[BaseException]=None,
            abort: bool=False,
          ) -> bool:
        assert self.outcome is not None
        if not self.outcome.try_resolve(source, result=result, exc=exc):
            logger.debug(f"{self}: Ignoring {source} event; already resolved by {self.outcome.resolved_by}")
            return False
        if exc is None:
            logger.debug(f"{self}: Resolved by {source}")
        else:
            logger.debug(f"{self}: Resolved by {source} with {full_class_name(exc)}: {exc}")
        self._close_transport(abort=abort)
        return True

    def _close_transport(self, abort: bool=False) -> None:
        transport = self.transport
        if transport is not None and not transport.is_closed:
            if abort:
                transport.abort()
            else:
                transport.close()

    async def _teardown(self) -> None:
        """Cancels the timer and any unfinished exchange, and closes the connection."""
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None
        exchange_task = self.exchange_task
        if exchange_task is not None:
            if not exchange_task.done():
                exchange_task.cancel()
            try:
                await exchange_task
            except asyncio.CancelledError:
                pass
        self._close_transport(abort=True)
        transport = self.transport
        if transport is not None:
            try:
                await asyncio.wait_for(transport.wait_closed(), CLOSE_WAIT_TIMEOUT)
            except asyncio.TimeoutError:
                logger.debug(f"{self}: Timed out waiting for connection to close")

    def __str__(self) -> str:
        return f"ReceiverSession({self.host}:{self.port})"

    def __repr__(self) -> str:
        return str(self)
