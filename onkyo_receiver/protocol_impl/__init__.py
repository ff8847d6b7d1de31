# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Implementations of protocol transports.
"""

from .stream_frame_transport import StreamFrameTransport
