"""
Error hierarchy for tcplink.

Transport failures live in :mod:`tcplink.transport.errors` and derive from
:class:`TcpLinkError` as well, so callers can catch everything the package
raises with a single ``except TcpLinkError``.
"""


class TcpLinkError(Exception):
    """Base class for all tcplink errors."""

    pass


class ConfigurationError(TcpLinkError):
    """Error raised when a client is configured with invalid values."""

    pass


class InvalidTransitionError(TcpLinkError):
    """Error raised when the supervisor is asked for a transition it does not allow."""

    def __init__(self, state, trigger):
        self.state = state
        self.trigger = trigger
        super().__init__(f"No transition from {state.name} on {trigger.name}")
