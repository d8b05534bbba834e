"""Signaling parameter models."""
from typing import List, Optional

from aiortc import RTCIceServer
from pydantic import BaseModel, ConfigDict, Field, InstanceOf

from .constraints import MediaConstraints


class SignalingParameters(BaseModel):
    """Signaling parameters of a room, scraped from its page."""

    model_config = ConfigDict(frozen=True)

    ice_servers: List[InstanceOf[RTCIceServer]] = Field(default_factory=list)
    base_href: str
    channel_token: str
    post_message_url: str
    initiator: bool = False
    pc_constraints: Optional[MediaConstraints] = None
    video_constraints: Optional[MediaConstraints] = None

    @property
    def message_url(self) -> str:
        """Absolute URL that outgoing signaling messages are POSTed to."""
        return self.base_href.rstrip("/") + self.post_message_url
