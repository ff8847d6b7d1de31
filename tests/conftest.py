# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Shared pytest fixtures and test doubles for onkyo_receiver tests."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, List, Optional

import pytest
import pytest_asyncio

from onkyo_receiver import (
    OnkyoReceiverClient,
    OnkyoReceiverClientConfig,
    OnkyoReceiverConnector,
    FrameTransport,
  )
from onkyo_receiver.protocol import build_frame
from onkyo_receiver.emulator import OnkyoReceiverEmulator

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

CONFIG_ENV_VARS = (
    "ONKYO_RECEIVER_HOST",
    "ONKYO_RECEIVER_PORT",
    "ONKYO_RECEIVER_TIMEOUT",
    "ONKYO_RECEIVER_CONFIG_FILE",
)


def reply_frame(text: str) -> bytes:
    """Build a frame the way a receiver sends it, e.g. "MVL29" -> "!1MVL29\\x1a\\r\\n"."""
    return build_frame(("!1" + text + "\x1a\r\n").encode("utf-8"))


class FakeTransport(FrameTransport):
    """In-memory FrameTransport that serves canned bytes and records writes."""

    def __init__(
        self,
        incoming: bytes = b"",
        *,
        hang_when_empty: bool = False,
        write_exc: Optional[BaseException] = None,
    ) -> None:
        self.incoming = incoming
        self.hang_when_empty = hang_when_empty
        self.write_exc = write_exc
        self.written: List[bytes] = []
        self.close_calls = 0
        self.abort_calls = 0
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def write(self, data: bytes) -> None:
        if self.write_exc is not None:
            raise self.write_exc
        self.written.append(bytes(data))

    async def read_exactly(self, length: int) -> bytes:
        if len(self.incoming) < length:
            if self.hang_when_empty:
                await asyncio.Event().wait()
            partial = self.incoming
            self.incoming = b""
            raise asyncio.IncompleteReadError(partial, length)
        data = self.incoming[:length]
        self.incoming = self.incoming[length:]
        return data

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self.close_calls += 1

    def abort(self) -> None:
        if not self._closed:
            self._closed = True
            self.abort_calls += 1

    async def wait_closed(self) -> None:
        pass


class FakeConnector(OnkyoReceiverConnector):
    """Connector that hands out a prepared FakeTransport, fails, or never completes."""

    def __init__(
        self,
        transport: Optional[FakeTransport] = None,
        *,
        exc: Optional[BaseException] = None,
        hang: bool = False,
    ) -> None:
        self.transport = FakeTransport() if transport is None else transport
        self.exc = exc
        self.hang = hang
        self.connect_calls: List[tuple] = []

    async def connect(self, host: str, port: int) -> FrameTransport:
        self.connect_calls.append((host, port))
        if self.hang:
            await asyncio.Event().wait()
        if self.exc is not None:
            raise self.exc
        return self.transport


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's environment from leaking into configuration."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest_asyncio.fixture
async def emulator() -> AsyncGenerator[OnkyoReceiverEmulator, None]:
    """A receiver emulator listening on an ephemeral loopback port."""
    async with OnkyoReceiverEmulator(bind_addr="127.0.0.1", port=0) as emu:
        yield emu


@pytest.fixture
def emulator_config(emulator: OnkyoReceiverEmulator) -> OnkyoReceiverClientConfig:
    return OnkyoReceiverClientConfig(
        default_host="127.0.0.1",
        default_port=emulator.bound_port,
        timeout_secs=2.0,
        use_config_file=False,
    )


@pytest.fixture
def client(emulator_config: OnkyoReceiverClientConfig) -> OnkyoReceiverClient:
    return OnkyoReceiverClient(config=emulator_config)


async def wait_for_commands(emulator: OnkyoReceiverEmulator, count: int, timeout: float = 2.0) -> None:
    """Wait until the emulator has received at least count commands."""
    async def _poll() -> None:
        while len(emulator.received_commands) < count:
            await asyncio.sleep(0.01)
    await asyncio.wait_for(_poll(), timeout)
