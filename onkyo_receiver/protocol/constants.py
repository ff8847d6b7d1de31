# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Protocol-specific constants
"""

from __future__ import annotations

import struct

PACKET_MAGIC = b"ISCP"
"""The 4-byte tag that begins every eISCP frame header."""

HEADER_LENGTH = 16
"""The length of an eISCP frame header, in bytes. Also the value carried in the
   header-length field."""

PROTOCOL_VERSION = 1
"""The eISCP version byte sent in every frame header."""

HEADER_STRUCT = struct.Struct(">4sIIB3x")
"""Layout of the frame header: magic, header length, payload length, version,
   3 reserved zero bytes. All integers are big-endian."""

PAYLOAD_LENGTH_OFFSET = 8
"""Byte offset of the big-endian payload length field within the header."""

START_CHARACTER = "!"
"""First character of every ISCP message."""

UNIT_TYPE = "1"
"""Unit type character for receivers."""

MESSAGE_PREFIX = START_CHARACTER + UNIT_TYPE
"""The 2-character envelope that precedes the command text in every payload."""

END_OF_COMMAND = "\r\n"
"""Terminator appended to commands sent to the receiver."""

END_OF_MESSAGE = "\x1a"
"""End-of-file control character the receiver places at the end of its messages,
   before the CR/LF."""

END_OF_REPLY = END_OF_MESSAGE + END_OF_COMMAND
"""The full terminator of messages sent by the receiver."""
