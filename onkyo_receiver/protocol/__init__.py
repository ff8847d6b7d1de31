# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Low-level protocol definitions for Onkyo/Integra receivers.

This module defines the eISCP framing and the volume and mute command formats used
for TCP/IP control. It does not contain network implementations.
"""

from .constants import (
    PACKET_MAGIC,
    HEADER_LENGTH,
    PROTOCOL_VERSION,
    MESSAGE_PREFIX,
    END_OF_COMMAND,
    END_OF_MESSAGE,
    END_OF_REPLY,
  )

from .packet import (
    Packet,
    FrameHeader,
    build_frame,
    encode,
    encode_message,
    parse_header,
    decode_header,
    decode_payload,
  )

from .commands import (
    CommandFamily,
    VOLUME_UP,
    VOLUME_DOWN,
    VOLUME_QUERY,
    MUTE_ON,
    MUTE_OFF,
    MUTE_QUERY,
    clean_response,
    format_volume_command,
    parse_volume_reply,
    format_mute_command,
    parse_mute_reply,
  )

from .frame_transport import FrameTransport
