# slackchat/errors.py
class ChatServiceError(Exception):
    """Failure reported by, or on the way to, the remote chat service."""


class TransportError(ChatServiceError):
    pass


class RateLimitedError(TransportError):
    pass


class AuthError(ChatServiceError):
    pass


class ChannelNotFoundError(ChatServiceError):
    pass


class SenderLookupError(LookupError):
    """Display name could not be resolved. Never reaches the session."""


class HistoryWriteError(OSError):
    pass


class StartupError(Exception):
    pass
