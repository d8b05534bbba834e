"""Signaling client for apprtc-style room servers."""
from .config import settings
from .exceptions import (
    SignalingError,
    UnexpectedResponseError,
    TooManyRedirectsError,
    RoomFullError,
    MissingVariableError,
    DuplicateVariableError,
    MalformedParametersError,
    ChannelError,
    NotConnectedError,
)
from .models import KeyValuePair, MediaConstraints, SignalingParameters
from .services import (
    AppRTCClient,
    ChannelClient,
    HTTPClient,
    IceServersObserver,
    MessageHandler,
)

__all__ = [
    "settings",
    "SignalingError",
    "UnexpectedResponseError",
    "TooManyRedirectsError",
    "RoomFullError",
    "MissingVariableError",
    "DuplicateVariableError",
    "MalformedParametersError",
    "ChannelError",
    "NotConnectedError",
    "KeyValuePair",
    "MediaConstraints",
    "SignalingParameters",
    "AppRTCClient",
    "ChannelClient",
    "HTTPClient",
    "IceServersObserver",
    "MessageHandler",
]
