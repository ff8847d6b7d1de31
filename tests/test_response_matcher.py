# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Unit tests for ResponseMatcher."""

import pytest

from onkyo_receiver import (
    MalformedHeaderError,
    UndecodableResponseError,
    NoMatchingResponseError,
    ResponseMatcher,
    MAX_RESPONSE_READS,
)
from onkyo_receiver.protocol import build_frame

from tests.conftest import FakeTransport, reply_frame

CHATTER = ["NLSC-P", "IFAHDMI", "NTM00:01:02/00:03:04", "NLT0000", "DIMQSTN"]


class TestReadFrame:
    """Test reading single frames."""

    @pytest.mark.asyncio
    async def test_read_frame(self) -> None:
        transport = FakeTransport(reply_frame("MVL29"))
        assert await ResponseMatcher().read_frame(transport) == "!1MVL29\x1a\r\n"

    @pytest.mark.asyncio
    async def test_short_header(self) -> None:
        """A stream that ends inside the header is a malformed header."""
        transport = FakeTransport(b"ISCP\x00\x00\x00\x10\x00")
        with pytest.raises(MalformedHeaderError):
            await ResponseMatcher().read_frame(transport)

    @pytest.mark.asyncio
    async def test_truncated_payload(self) -> None:
        transport = FakeTransport(reply_frame("MVL29")[:20])
        with pytest.raises(UndecodableResponseError):
            await ResponseMatcher().read_frame(transport)

    @pytest.mark.asyncio
    async def test_invalid_utf8(self) -> None:
        transport = FakeTransport(build_frame(b"!1NTM\xff\x1a\r\n"))
        with pytest.raises(UndecodableResponseError):
            await ResponseMatcher().read_frame(transport)


class TestReadMatching:
    """Test skip-until-match reading."""

    @pytest.mark.asyncio
    async def test_first_frame_matches(self) -> None:
        transport = FakeTransport(reply_frame("AMT01"))
        assert await ResponseMatcher().read_matching(transport, "AMT") == "!1AMT01\x1a\r\n"

    @pytest.mark.asyncio
    async def test_match_on_last_allowed_read(self) -> None:
        """Four unrelated frames followed by the reply still succeeds."""
        data = b"".join(reply_frame(c) for c in CHATTER[:4]) + reply_frame("MVL32")
        transport = FakeTransport(data)
        assert await ResponseMatcher().read_matching(transport, "MVL") == "!1MVL32\x1a\r\n"
        assert transport.incoming == b""

    @pytest.mark.asyncio
    async def test_no_match_within_bound(self) -> None:
        """Five unrelated frames exhaust the bound; the sixth is never read."""
        data = b"".join(reply_frame(c) for c in CHATTER) + reply_frame("MVL32")
        transport = FakeTransport(data)
        with pytest.raises(NoMatchingResponseError):
            await ResponseMatcher().read_matching(transport, "MVL")
        assert transport.incoming == reply_frame("MVL32")

    @pytest.mark.asyncio
    async def test_custom_bound(self) -> None:
        data = reply_frame("NLSC-P") + reply_frame("MVL32")
        with pytest.raises(NoMatchingResponseError):
            await ResponseMatcher(max_reads=1).read_matching(FakeTransport(data), "MVL")

    @pytest.mark.asyncio
    async def test_read_error_stops_matching(self) -> None:
        data = reply_frame("NLSC-P") + b"ISCP"
        with pytest.raises(MalformedHeaderError):
            await ResponseMatcher().read_matching(FakeTransport(data), "MVL")

    def test_default_bound(self) -> None:
        assert ResponseMatcher().max_reads == MAX_RESPONSE_READS == 5
