"""Services for the application."""
from .http_client import HTTPClient
from .redirect_resolver import RedirectResolver
from .room_page import RoomPage
from .room_parameters import (
    RoomParameterFetcher,
    constraints_from_json,
    ice_servers_from_pc_config,
    video_constraints_json,
)
from .channel_client import ChannelClient, MessageHandler, channel_url
from .signaling_client import AppRTCClient, IceServersObserver

__all__ = [
    "HTTPClient",
    "RedirectResolver",
    "RoomPage",
    "RoomParameterFetcher",
    "constraints_from_json",
    "ice_servers_from_pc_config",
    "video_constraints_json",
    "ChannelClient",
    "MessageHandler",
    "channel_url",
    "AppRTCClient",
    "IceServersObserver",
]
