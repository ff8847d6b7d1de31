# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Constants used by onkyo_receiver"""

DEFAULT_PORT = 60128
"""The listen port number used by the receiver for eISCP control over TCP/IP."""

DEFAULT_TIMEOUT = 3.0
"""The default bound on a single receiver operation (connect, send, and any
   awaited reply), in seconds."""

MAX_RESPONSE_READS = 5
"""The maximum number of response frames read while waiting for a reply that
   matches the expected command family."""

MIN_VOLUME = 0
"""The lowest volume level accepted by set_volume()."""

MAX_VOLUME = 100
"""The highest volume level accepted by set_volume(). Larger values are clamped."""
