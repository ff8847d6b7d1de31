# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Package onkyo_receiver provides a command-line tool and API for controlling
the volume and mute state of Onkyo/Integra receivers via the eISCP protocol.
"""

from .version import __version__

from .pkg_logging import logger

from .internal_types import Jsonable, JsonableDict

from .exceptions import (
    OnkyoReceiverError,
    ConnectionFailedError,
    ReceiverTimeoutError,
    ReceiverProtocolError,
    UndecodableResponseError,
    MalformedHeaderError,
    NoMatchingResponseError,
    InvalidResponseError,
  )

from .constants import DEFAULT_PORT, DEFAULT_TIMEOUT, MAX_RESPONSE_READS

from .client import (
    OnkyoReceiverClient,
    OnkyoReceiverClientConfig,
    OnkyoReceiverConnector,
    TcpOnkyoReceiverConnector,
    ReceiverSession,
    ResponseMatcher,
  )

from .protocol import (
    Packet,
    CommandFamily,
    FrameTransport,
    encode,
    decode_header,
    decode_payload,
    clean_response,
    format_volume_command,
    parse_volume_reply,
    format_mute_command,
    parse_mute_reply,
  )

from .util import full_class_name, clamp
