# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Encapsulation of a single eISCP "packet" (frame) sent over the TCP/IP socket in either
direction. A frame is a fixed 16-byte header followed by a text payload whose length is
declared in the header:

    offset 0  : 4 bytes  b"ISCP"
    offset 4  : 4 bytes  header length (16), big-endian
    offset 8  : 4 bytes  payload length, big-endian
    offset 12 : 1 byte   version (1)
    offset 13 : 3 bytes  reserved (0)
    offset 16 : N bytes  payload, e.g. "!1MVLUP\\r\\n"
"""

from __future__ import annotations

from ..internal_types import *
from ..exceptions import MalformedHeaderError, UndecodableResponseError
from .constants import (
    PACKET_MAGIC,
    HEADER_LENGTH,
    PROTOCOL_VERSION,
    HEADER_STRUCT,
    PAYLOAD_LENGTH_OFFSET,
    MESSAGE_PREFIX,
    END_OF_COMMAND,
  )

class FrameHeader(NamedTuple):
    """The decoded fields of a 16-byte eISCP frame header."""
    magic: bytes
    header_length: int
    payload_length: int
    version: int

def build_frame(payload: bytes) -> bytes:
    """Prefixes a raw payload with an eISCP header declaring its exact length."""
    return HEADER_STRUCT.pack(PACKET_MAGIC, HEADER_LENGTH, len(payload), PROTOCOL_VERSION) + payload

def encode_message(command: str) -> bytes:
    """Returns the payload bytes for a command: "!1" + command + "\\r\\n"."""
    return (MESSAGE_PREFIX + command + END_OF_COMMAND).encode('utf-8')

def encode(command: str) -> bytes:
    """Encodes a command string (e.g., "MVLUP") into a complete eISCP frame."""
    return build_frame(encode_message(command))

def parse_header(raw_header: bytes, strict: bool=False) -> FrameHeader:
    """Decodes all fields of a frame header.

    Args:
        raw_header: At least 16 bytes; only the first 16 are examined.
        strict: If True, the magic tag and header length field must have their
                fixed values.

    Raises:
        MalformedHeaderError: Fewer than 16 bytes were provided, or strict
                              validation failed.
    """
    if len(raw_header) < HEADER_LENGTH:
        raise MalformedHeaderError(
            f"eISCP header requires {HEADER_LENGTH} bytes, got {len(raw_header)}: {bytes(raw_header).hex(' ')}")
    magic, header_length, payload_length, version = HEADER_STRUCT.unpack_from(raw_header)
    if strict:
        if magic != PACKET_MAGIC:
            raise MalformedHeaderError(f"Bad eISCP magic tag {magic!r}: {bytes(raw_header[:HEADER_LENGTH]).hex(' ')}")
        if header_length != HEADER_LENGTH:
            raise MalformedHeaderError(f"Unsupported eISCP header length {header_length}")
    return FrameHeader(magic, header_length, payload_length, version)

def decode_header(raw_header: bytes) -> int:
    """Returns the payload length declared in a 16-byte frame header.

    The magic tag and header length are not checked; a reader that has just
    read exactly 16 bytes from a receiver trusts their framing.

    Raises:
        MalformedHeaderError: Fewer than 16 bytes were provided.
    """
    if len(raw_header) < HEADER_LENGTH:
        raise MalformedHeaderError(
            f"eISCP header requires {HEADER_LENGTH} bytes, got {len(raw_header)}: {bytes(raw_header).hex(' ')}")
    return int.from_bytes(raw_header[PAYLOAD_LENGTH_OFFSET:PAYLOAD_LENGTH_OFFSET + 4], 'big')

def decode_payload(payload: bytes) -> str:
    """Decodes frame payload bytes as UTF-8 text.

    Raises:
        UndecodableResponseError: The bytes are not valid UTF-8.
    """
    try:
        return bytes(payload).decode('utf-8')
    except UnicodeDecodeError as e:
        raise UndecodableResponseError(f"eISCP payload is not valid UTF-8: {bytes(payload).hex(' ')}") from e

class Packet:
    """
    A single eISCP frame, in either direction.
    """

    raw_data: bytes
    """The complete frame, header included."""

    def __init__(self, raw_data: bytes):
        """Create a Packet object from a complete raw frame."""
        self.raw_data = bytes(raw_data)

    @classmethod
    def from_command(cls, command: str) -> Packet:
        """Create a Packet that carries a command to the receiver."""
        return cls(encode(command))

    @classmethod
    def from_payload(cls, payload: bytes) -> Packet:
        """Create a Packet from raw payload bytes, adding the header."""
        return cls(build_frame(payload))

    @property
    def header(self) -> FrameHeader:
        return parse_header(self.raw_data)

    @property
    def payload_length(self) -> int:
        """The payload length declared in the header."""
        return decode_header(self.raw_data)

    @property
    def payload(self) -> bytes:
        return self.raw_data[HEADER_LENGTH:]

    @property
    def message(self) -> str:
        """The payload decoded as text, including envelope and terminators."""
        return decode_payload(self.payload)

    def __str__(self) -> str:
        return f"Packet({self.payload!r})"

    def __repr__(self) -> str:
        return str(self)
