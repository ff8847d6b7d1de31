# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Unit tests for TcpOnkyoReceiverConnector and StreamFrameTransport."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from onkyo_receiver import ConnectionFailedError, TcpOnkyoReceiverConnector
from onkyo_receiver.protocol_impl import StreamFrameTransport


@pytest.fixture
def mock_stream_reader() -> MagicMock:
    """Create a mock StreamReader."""
    reader = MagicMock()
    reader.readexactly = AsyncMock(return_value=b"ISCP")
    return reader


@pytest.fixture
def mock_stream_writer() -> MagicMock:
    """Create a mock StreamWriter."""
    writer = MagicMock()
    writer.write = MagicMock()
    writer.drain = AsyncMock()
    writer.close = MagicMock()
    writer.wait_closed = AsyncMock()
    writer.transport = MagicMock()
    return writer


class TestTcpConnector:
    """Test opening connections."""

    @pytest.mark.asyncio
    async def test_connect(self, mock_stream_reader: MagicMock, mock_stream_writer: MagicMock) -> None:
        with patch("asyncio.open_connection", new_callable=AsyncMock) as mock_open:
            mock_open.return_value = (mock_stream_reader, mock_stream_writer)
            transport = await TcpOnkyoReceiverConnector().connect("192.168.1.20", 60128)

            mock_open.assert_called_once_with("192.168.1.20", 60128)
            assert isinstance(transport, StreamFrameTransport)
            assert not transport.is_closed

    @pytest.mark.asyncio
    async def test_connect_refused(self) -> None:
        with patch("asyncio.open_connection", new_callable=AsyncMock) as mock_open:
            mock_open.side_effect = ConnectionRefusedError("Connection refused")
            with pytest.raises(ConnectionFailedError):
                await TcpOnkyoReceiverConnector().connect("192.168.1.20", 60128)

    @pytest.mark.asyncio
    async def test_unreachable(self) -> None:
        with patch("asyncio.open_connection", new_callable=AsyncMock) as mock_open:
            mock_open.side_effect = OSError(101, "Network is unreachable")
            with pytest.raises(ConnectionFailedError):
                await TcpOnkyoReceiverConnector().connect("10.255.255.1", 60128)


class TestStreamFrameTransport:
    """Test the stream-backed transport."""

    @pytest.mark.asyncio
    async def test_write_drains(self, mock_stream_reader: MagicMock, mock_stream_writer: MagicMock) -> None:
        transport = StreamFrameTransport(mock_stream_reader, mock_stream_writer)
        await transport.write(b"data")
        mock_stream_writer.write.assert_called_once_with(b"data")
        mock_stream_writer.drain.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_write_error(self, mock_stream_reader: MagicMock, mock_stream_writer: MagicMock) -> None:
        mock_stream_writer.drain.side_effect = ConnectionResetError("reset")
        transport = StreamFrameTransport(mock_stream_reader, mock_stream_writer)
        with pytest.raises(ConnectionFailedError):
            await transport.write(b"data")

    @pytest.mark.asyncio
    async def test_read_exactly(self, mock_stream_reader: MagicMock, mock_stream_writer: MagicMock) -> None:
        transport = StreamFrameTransport(mock_stream_reader, mock_stream_writer)
        assert await transport.read_exactly(4) == b"ISCP"
        mock_stream_reader.readexactly.assert_awaited_once_with(4)

    @pytest.mark.asyncio
    async def test_read_eof(self, mock_stream_reader: MagicMock, mock_stream_writer: MagicMock) -> None:
        mock_stream_reader.readexactly.side_effect = asyncio.IncompleteReadError(b"IS", 16)
        transport = StreamFrameTransport(mock_stream_reader, mock_stream_writer)
        with pytest.raises(asyncio.IncompleteReadError):
            await transport.read_exactly(16)

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, mock_stream_reader: MagicMock, mock_stream_writer: MagicMock) -> None:
        transport = StreamFrameTransport(mock_stream_reader, mock_stream_writer)
        transport.close()
        transport.close()
        transport.abort()
        assert transport.is_closed
        mock_stream_writer.close.assert_called_once()
        mock_stream_writer.transport.abort.assert_not_called()
        await transport.wait_closed()

    @pytest.mark.asyncio
    async def test_abort(self, mock_stream_reader: MagicMock, mock_stream_writer: MagicMock) -> None:
        transport = StreamFrameTransport(mock_stream_reader, mock_stream_writer)
        transport.abort()
        transport.close()
        mock_stream_writer.transport.abort.assert_called_once()
        mock_stream_writer.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_context_manager(self, mock_stream_reader: MagicMock, mock_stream_writer: MagicMock) -> None:
        async with StreamFrameTransport(mock_stream_reader, mock_stream_writer) as transport:
            assert not transport.is_closed
        assert transport.is_closed
        mock_stream_writer.wait_closed.assert_awaited_once()
