#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package"""

from typing import Optional

class OnkyoReceiverError(Exception):
    """Base class for all error exceptions defined by this package."""
    pass

class ConnectionFailedError(OnkyoReceiverError):
    """The TCP connection to the receiver could not be established, or a write
       to it failed. The remote refused the connection, the network was
       unreachable, or the socket reported an error.

       The usual remedy is to check the receiver's IP address and power."""
    pass

class ReceiverTimeoutError(ConnectionFailedError):
    """No terminal network event occurred within the operation's timeout, and
       the connection was forcibly closed.

       Subclasses ConnectionFailedError since the remedy is the same; callers
       that need to tell the two apart can catch this class first."""
    timeout_secs: Optional[float]

    def __init__(self, msg: Optional[str]=None, timeout_secs: Optional[float]=None):
        if msg is None:
            if timeout_secs is None:
                msg = "Receiver operation timed out"
            else:
                msg = f"Receiver operation timed out after {timeout_secs} seconds"
        super().__init__(msg)
        self.timeout_secs = timeout_secs

class ReceiverProtocolError(OnkyoReceiverError):
    """The receiver's byte stream could not be interpreted as eISCP frames, or
       did not deliver the expected reply."""
    pass

class UndecodableResponseError(ReceiverProtocolError):
    """A response frame was truncated, or its payload was not valid UTF-8 text."""
    pass

class MalformedHeaderError(UndecodableResponseError):
    """Fewer than the 16 bytes of a frame header could be read."""
    pass

class NoMatchingResponseError(ReceiverProtocolError):
    """The maximum number of response frames was read without finding one
       that contains the expected command family marker."""
    pass

class InvalidResponseError(OnkyoReceiverError):
    """A matching reply arrived, but its payload could not be parsed into the
       expected value (e.g., a non-hexadecimal volume level)."""
    pass
