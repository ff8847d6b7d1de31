# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Command strings and reply parsers for the master volume (MVL) and audio
muting (AMT) command families.

A command is the text between the "!1" envelope and the terminator, e.g.
"MVLUP" or "MVL29". Replies from the receiver arrive as "!1MVL29\\x1a\\r\\n";
clean_response() reduces them to "MVL29" before they are parsed.
"""

from __future__ import annotations

import string

from aenum import Enum as AEnum
from ..internal_types import *
from ..exceptions import InvalidResponseError
from ..constants import MIN_VOLUME, MAX_VOLUME
from ..util import clamp
from .constants import MESSAGE_PREFIX, END_OF_MESSAGE

class CommandFamily(AEnum):
    MASTER_VOLUME               = "MVL"
    """Master volume. Arguments: "UP", "DOWN", "QSTN", or a hex level."""

    AUDIO_MUTING                = "AMT"
    """Audio muting. Arguments: "00" (off), "01" (on), "QSTN"."""

    @property
    def marker(self) -> str:
        """The 3-character prefix that identifies replies in this family."""
        return self.value

QUERY_ARGUMENT = "QSTN"

VOLUME_UP = CommandFamily.MASTER_VOLUME.marker + "UP"
VOLUME_DOWN = CommandFamily.MASTER_VOLUME.marker + "DOWN"
VOLUME_QUERY = CommandFamily.MASTER_VOLUME.marker + QUERY_ARGUMENT

MUTE_ON = CommandFamily.AUDIO_MUTING.marker + "01"
MUTE_OFF = CommandFamily.AUDIO_MUTING.marker + "00"
MUTE_QUERY = CommandFamily.AUDIO_MUTING.marker + QUERY_ARGUMENT

_HEX_DIGITS = frozenset(string.hexdigits)

def clean_response(response: str) -> str:
    """Reduces a reply payload to its command text.

    Strips the leading "!1" envelope, removes CR, LF and the end-of-message
    control character, and trims surrounding whitespace. Text that is already
    clean is returned unchanged.
    """
    if response.startswith(MESSAGE_PREFIX):
        response = response[len(MESSAGE_PREFIX):]
    for ch in ("\r", "\n", END_OF_MESSAGE):
        response = response.replace(ch, "")
    return response.strip()

def _argument(response: str, family: CommandFamily) -> str:
    cleaned = clean_response(response)
    if not cleaned.startswith(family.marker):
        raise InvalidResponseError(f"Expected a {family.marker} reply, got {cleaned!r}")
    return cleaned[len(family.marker):]

def format_volume_command(level: int) -> str:
    """Returns the absolute volume command for a level, e.g. 41 -> "MVL29".

    The level is clamped to [MIN_VOLUME, MAX_VOLUME] first, so the command is
    always exactly two uppercase hex digits.
    """
    level = clamp(int(level), MIN_VOLUME, MAX_VOLUME)
    return f"{CommandFamily.MASTER_VOLUME.marker}{level:02X}"

def parse_volume_reply(response: str) -> int:
    """Parses a volume reply ("!1MVL29\\x1a\\r\\n" or "MVL29") into the receiver's
       own level (0x29 -> 41). The value is not capped or rescaled.

    Raises:
        InvalidResponseError: The reply is not an MVL reply, or its argument is not
                              hexadecimal (e.g., "MVLN/A" from a receiver in standby).
    """
    argument = _argument(response, CommandFamily.MASTER_VOLUME)
    if len(argument) == 0 or not all(c in _HEX_DIGITS for c in argument):
        raise InvalidResponseError(f"Volume reply argument is not hexadecimal: {argument!r}")
    return int(argument, 16)

def format_mute_command(muted: bool) -> str:
    return MUTE_ON if muted else MUTE_OFF

def parse_mute_reply(response: str) -> bool:
    """Parses a mute reply ("AMT01" or "AMT00") into a boolean.

    Raises:
        InvalidResponseError: The reply is not an AMT reply, or its argument is
                              neither "01" nor "00".
    """
    argument = _argument(response, CommandFamily.AUDIO_MUTING)
    if argument == "01":
        return True
    if argument == "00":
        return False
    raise InvalidResponseError(f"Unrecognized mute reply argument: {argument!r}")
