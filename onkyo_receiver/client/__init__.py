# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Onkyo receiver eISCP client.

Provides volume and mute control of a receiver over TCP/IP.
"""

from .client_config import OnkyoReceiverClientConfig
from .connector import OnkyoReceiverConnector
from .tcp_connector import TcpOnkyoReceiverConnector
from .response_matcher import ResponseMatcher
from .receiver_session import ReceiverSession, SessionOutcome
from .client_impl import OnkyoReceiverClient
