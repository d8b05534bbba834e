"""Signaling client for room-based relay servers.

Negotiates signaling for chatting with apprtc-style "rooms": resolves the
room URL, scrapes the room's signaling parameters, opens the room's push
channel and POSTs outgoing messages back to the room server.

To use: create a client (registering a message handler and an ICE servers
observer), enter it as an async context manager and call
``connect_to_room()``. After that, call ``send_message()`` and wait for the
handler to be called with received messages::

    async with AppRTCClient(handler, observer) as client:
        await client.connect_to_room("https://apprtc.appspot.com/?r=12345678")
        await client.send_message('{"type": "offer", "sdp": "..."}')
"""
import asyncio
from typing import Any, Callable, List, Optional, Protocol, Set

from aiortc import RTCIceServer

from ..exceptions import NotConnectedError, UnexpectedResponseError
from ..models import MediaConstraints, SignalingParameters
from ..utils.callbacks import invoke
from ..utils.logger import logger
from .channel_client import ChannelClient, MessageHandler, channel_url
from .http_client import HTTPClient
from .redirect_resolver import RedirectResolver
from .room_parameters import RoomParameterFetcher

ChannelFactory = Callable[[str, MessageHandler], ChannelClient]


class IceServersObserver(Protocol):
    """Notified once the room's parameters name the ICE servers to use."""

    def on_ice_servers(self, ice_servers: List[RTCIceServer]) -> Any: ...


class AppRTCClient:
    """Client side of a room server's signaling protocol."""

    def __init__(
        self,
        handler: MessageHandler,
        ice_servers_observer: IceServersObserver,
        http: Optional[HTTPClient] = None,
        channel_factory: Optional[ChannelFactory] = None,
    ):
        """Initialize the client.

        Args:
            handler: Receiver of push channel events
            ice_servers_observer: Told about the room's ICE servers on connect
            http: HTTP client to use. Defaults to a new HTTPClient
            channel_factory: Builds the push channel. Defaults to ChannelClient
        """
        self.handler = handler
        self.ice_servers_observer = ice_servers_observer
        self.http = http or HTTPClient()
        self._channel_factory = channel_factory or ChannelClient
        self._channel: Optional[ChannelClient] = None

        # Only read/written under _lock
        self._send_queue: List[str] = []
        self._parameters: Optional[SignalingParameters] = None
        self._lock = asyncio.Lock()
        # Serialises drains; never held by send_message
        self._drain_lock = asyncio.Lock()

        self._drain_tasks: Set[asyncio.Task] = set()
        self._drain_errors: List[BaseException] = []

    async def __aenter__(self):
        """Async context manager entry."""
        await self.http.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.disconnect()
        if self._drain_tasks:
            await asyncio.gather(*self._drain_tasks, return_exceptions=True)
        await self.http.aclose()

    async def connect_to_room(self, url: str) -> SignalingParameters:
        """Connect to a room URL and start receiving its channel messages.

        Args:
            url: Room URL, e.g. https://apprtc.appspot.com/?r=12345678, or a
                room server URL that redirects to one

        Returns:
            The room's signaling parameters
        """
        room_url = await RedirectResolver(self.http).resolve(url)
        logger.info(f"Connecting to room {room_url}")

        parameters = await RoomParameterFetcher(self.http).fetch(room_url)

        self._channel = self._channel_factory(
            channel_url(parameters.base_href, parameters.channel_token),
            self.handler,
        )
        await self._channel.open()

        async with self._lock:
            self._parameters = parameters

        self._request_queue_drain()
        await invoke(self.ice_servers_observer.on_ice_servers, parameters.ice_servers)
        logger.info(
            f"Connected to room {room_url} (initiator={parameters.initiator}, "
            f"{len(parameters.ice_servers)} ICE servers)"
        )
        return parameters

    async def disconnect(self) -> None:
        """Disconnect from the push channel."""
        if self._channel is not None:
            await self._channel.close()
            self._channel = None

    async def send_message(self, msg: str) -> None:
        """Queue a message for the room and send it if already connected.

        Messages queued before the connection succeeds are sent once it does.
        """
        async with self._lock:
            self._send_queue.append(msg)
        self._request_queue_drain()

    async def flush(self) -> None:
        """Wait for all requested sends, re-raising the first failure."""
        while self._drain_tasks:
            await asyncio.gather(*self._drain_tasks, return_exceptions=True)
        if self._drain_errors:
            error = self._drain_errors[0]
            self._drain_errors.clear()
            raise error

    @property
    def pending_messages(self) -> List[str]:
        return list(self._send_queue)

    @property
    def parameters(self) -> SignalingParameters:
        if self._parameters is None:
            raise NotConnectedError("Not connected to a room yet")
        return self._parameters

    @property
    def is_initiator(self) -> bool:
        return self.parameters.initiator

    @property
    def ice_servers(self) -> List[RTCIceServer]:
        return self.parameters.ice_servers

    @property
    def pc_constraints(self) -> Optional[MediaConstraints]:
        return self.parameters.pc_constraints

    @property
    def video_constraints(self) -> Optional[MediaConstraints]:
        return self.parameters.video_constraints

    def _request_queue_drain(self) -> None:
        task = asyncio.create_task(self._maybe_drain_queue())
        self._drain_tasks.add(task)
        task.add_done_callback(self._on_drain_done)

    def _on_drain_done(self, task: asyncio.Task) -> None:
        self._drain_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Sending queued messages failed: {error}")
            self._drain_errors.append(error)

    async def _maybe_drain_queue(self) -> None:
        """Send all queued messages if connected to the room."""
        async with self._drain_lock:
            while True:
                async with self._lock:
                    if self._parameters is None or not self._send_queue:
                        return
                    url = self._parameters.message_url
                    msg = self._send_queue[0]

                response = await self.http.post_text(url, msg)
                if response.status_code != 200:
                    raise UnexpectedResponseError(
                        f"Non-200 response to POST: {response.status_code} "
                        f"for msg: {msg}",
                        status_code=response.status_code,
                        url=url,
                        body=response.text,
                    )

                # Only drains pop, and drains are serialised, so the head is msg
                async with self._lock:
                    self._send_queue.pop(0)
