"""Exceptions raised while negotiating a room connection."""
from typing import Optional


class SignalingError(Exception):
    """Base class for all signaling failures."""


class UnexpectedResponseError(SignalingError):
    """The room server answered with a status code we cannot use."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        body: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.url = url
        self.body = body


class TooManyRedirectsError(SignalingError):
    """The room URL kept redirecting without ever carrying a room query."""


class RoomFullError(SignalingError):
    """The room already has two participants."""


class MissingVariableError(SignalingError):
    """A required variable is not declared in the room page."""


class DuplicateVariableError(SignalingError):
    """A variable is declared more than once in the room page."""


class MalformedParametersError(SignalingError):
    """A scraped or fetched parameter is not the JSON we expect."""


class ChannelError(SignalingError):
    """The push channel could not be opened."""


class NotConnectedError(SignalingError):
    """Room parameters were requested before the connection succeeded."""
