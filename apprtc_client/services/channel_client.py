"""Server-push channel for receiving signaling messages."""
import asyncio
from typing import Any, Awaitable, Callable, Optional, Protocol
from urllib.parse import quote

import websockets
from websockets.exceptions import ConnectionClosedError, WebSocketException

from ..config import settings
from ..exceptions import ChannelError
from ..utils.callbacks import invoke
from ..utils.logger import logger

ConnectCallable = Callable[[str], Awaitable[Any]]


class MessageHandler(Protocol):
    """Callbacks fired by the push channel. Methods may be sync or async."""

    def on_open(self) -> Any: ...

    def on_message(self, data: str) -> Any: ...

    def on_close(self) -> Any: ...

    def on_error(self, code: int, description: str) -> Any: ...


def channel_url(base_href: str, token: str, template: Optional[str] = None) -> str:
    """Build the push channel URL for a room.

    Args:
        base_href: Room server base URL (http or https)
        token: Channel token scraped from the room page
        template: URL template with {ws_base} and {token} placeholders

    Returns:
        WebSocket URL
    """
    template = template or settings.channel_url_template
    if base_href.startswith("https://"):
        ws_base = "wss://" + base_href[len("https://"):]
    elif base_href.startswith("http://"):
        ws_base = "ws://" + base_href[len("http://"):]
    else:
        ws_base = base_href
    return template.format(ws_base=ws_base.rstrip("/"), token=quote(token, safe=""))


class ChannelClient:
    """WebSocket client delivering pushed messages to a MessageHandler."""

    def __init__(
        self,
        url: str,
        handler: MessageHandler,
        connect: Optional[ConnectCallable] = None,
        open_timeout: Optional[float] = None,
    ):
        """Initialize the channel client.

        Args:
            url: Channel WebSocket URL
            handler: Receiver of channel events
            connect: Connection factory. Defaults to websockets.connect
            open_timeout: Seconds to wait for the handshake
        """
        self.url = url
        self.handler = handler
        self._connect = connect or websockets.connect
        self.open_timeout = (
            open_timeout if open_timeout is not None else settings.channel_open_timeout
        )
        self._websocket = None
        self._reader: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._websocket is not None and not self._closed

    async def open(self) -> None:
        """Connect and start delivering messages.

        Raises:
            ChannelError: If the connection cannot be established
        """
        logger.info(f"Opening channel {self.url}")
        try:
            self._websocket = await asyncio.wait_for(
                self._connect(self.url), timeout=self.open_timeout
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            raise ChannelError(f"Could not open channel {self.url}: {e}") from e

        await invoke(self.handler.on_open)
        self._reader = asyncio.create_task(self._read_loop())
        self._reader.add_done_callback(self._log_reader_failure)

    async def close(self) -> None:
        """Stop delivering messages and close the socket."""
        if self._closed or self._websocket is None:
            return
        self._closed = True

        if self._reader and not self._reader.done():
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass

        await self._websocket.close()
        logger.info(f"Channel closed: {self.url}")
        await invoke(self.handler.on_close)

    async def _read_loop(self) -> None:
        try:
            async for message in self._websocket:
                if isinstance(message, bytes):
                    message = message.decode("utf-8")
                logger.debug(f"Channel message: {message}")
                await invoke(self.handler.on_message, message)
        except ConnectionClosedError as e:
            self._closed = True
            code = e.rcvd.code if e.rcvd else 1006
            reason = e.rcvd.reason if e.rcvd else "connection lost"
            logger.warning(f"Channel error {code}: {reason}")
            await invoke(self.handler.on_error, code, reason)
            return

        # Server closed the channel cleanly
        self._closed = True
        logger.info(f"Channel closed by server: {self.url}")
        await invoke(self.handler.on_close)

    @staticmethod
    def _log_reader_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Channel message handler failed: {error!r}")
