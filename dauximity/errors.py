"""
Error types raised while handling client events
"""


class SignalError(Exception):
    """Base class for errors raised by the signal server"""


class MalformedEvent(SignalError):
    """A client frame or payload is missing fields or has the wrong shape"""

    def __init__(self, event, reason):
        self.event = event
        self.reason = reason
        super().__init__(f"{event or '<unknown>'}: {reason}")
