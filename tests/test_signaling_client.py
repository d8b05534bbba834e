"""Tests for the room signaling client."""
import asyncio
import json

import httpx
import pytest

from apprtc_client.exceptions import NotConnectedError, UnexpectedResponseError
from apprtc_client.services.http_client import HTTPClient
from apprtc_client.services.signaling_client import AppRTCClient

MESSAGE_URL = "https://apprtc.example.com/message?r=12345678&u=55555"


class FakeChannel:
    """Stands in for ChannelClient."""

    instances = []

    def __init__(self, url, handler):
        self.url = url
        self.handler = handler
        self.opened = False
        self.closed = False
        FakeChannel.instances.append(self)

    async def open(self):
        self.opened = True

    async def close(self):
        self.closed = True


class Observer:
    def __init__(self):
        self.ice_servers = None

    def on_ice_servers(self, ice_servers):
        self.ice_servers = ice_servers


class RoomServer:
    """Mock room server: redirect, room page, TURN endpoint and message sink."""

    def __init__(
        self, room_html, turn_url, turn_response, post_status=200, failing_bodies=()
    ):
        self.room_html = room_html
        self.turn_url = turn_url
        self.turn_response = turn_response
        self.post_status = post_status
        self.failing_bodies = set(failing_bodies)
        self.posted = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if request.method == "POST":
            body = request.content.decode("utf-8")
            self.posted.append((url, body))
            if body in self.failing_bodies:
                return httpx.Response(500, text="error")
            return httpx.Response(self.post_status, text="")
        if url == "https://apprtc.example.com/":
            return httpx.Response(302, headers={"Location": "/?r=12345678"})
        if url == "https://apprtc.example.com/?r=12345678":
            return httpx.Response(200, text=self.room_html)
        if url == self.turn_url:
            return httpx.Response(200, json=self.turn_response)
        return httpx.Response(404)


class SlowRoomServer(RoomServer):
    """Room server whose message sink holds each POST until released."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.post_started = asyncio.Event()
        self.release = asyncio.Event()

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            self.post_started.set()
            await self.release.wait()
        return super().__call__(request)


@pytest.fixture
def room_server(room_html, turn_url, turn_response):
    return RoomServer(room_html(), turn_url, turn_response)


@pytest.fixture
def make_client():
    FakeChannel.instances.clear()

    def factory(server):
        http = HTTPClient(transport=httpx.MockTransport(server))
        return AppRTCClient(object(), Observer(), http=http, channel_factory=FakeChannel)

    return factory


class TestAppRTCClient:
    """Tests for AppRTCClient."""

    @pytest.mark.asyncio
    async def test_connect_to_room(self, room_server, make_client):
        """Test the full connect sequence starting from a redirecting URL."""
        async with make_client(room_server) as client:
            params = await client.connect_to_room("https://apprtc.example.com/")

            assert params.base_href == "https://apprtc.example.com/"
            assert client.is_initiator
            assert len(client.ice_servers) == 2
            assert client.pc_constraints is not None
            assert client.video_constraints is not None

            channel = FakeChannel.instances[0]
            assert channel.opened
            assert channel.url == (
                "wss://apprtc.example.com/channel"
                "?token=AHRlWrqvgCpvbd9B-Gl5vZ2F1BlpwFv0xBUwRgLF"
            )
            assert client.ice_servers_observer.ice_servers == params.ice_servers

        assert channel.closed

    @pytest.mark.asyncio
    async def test_messages_queued_before_connect(self, room_server, make_client):
        """Test messages sent early are held until the room is joined."""
        async with make_client(room_server) as client:
            await client.send_message('{"type": "offer"}')
            await client.send_message('{"type": "candidate"}')
            await client.flush()

            assert room_server.posted == []
            assert client.pending_messages == [
                '{"type": "offer"}',
                '{"type": "candidate"}',
            ]

            await client.connect_to_room("https://apprtc.example.com/?r=12345678")
            await client.flush()

        assert room_server.posted == [
            (MESSAGE_URL, '{"type": "offer"}'),
            (MESSAGE_URL, '{"type": "candidate"}'),
        ]
        assert client.pending_messages == []

    @pytest.mark.asyncio
    async def test_send_after_connect(self, room_server, make_client):
        """Test messages are posted whole and in order once connected."""
        message = json.dumps({"type": "answer", "sdp": "v=0\r\nö"})

        async with make_client(room_server) as client:
            await client.connect_to_room("https://apprtc.example.com/?r=12345678")
            await client.send_message(message)
            await client.send_message("bye")
            await client.flush()

        assert [body for _, body in room_server.posted] == [message, "bye"]

    @pytest.mark.asyncio
    async def test_non_200_post_is_fatal(self, room_server, make_client):
        """Test a failed POST is raised from flush and keeps the message."""
        room_server.post_status = 500

        async with make_client(room_server) as client:
            await client.connect_to_room("https://apprtc.example.com/?r=12345678")
            await client.send_message("hello")

            with pytest.raises(UnexpectedResponseError) as exc_info:
                await client.flush()

            assert exc_info.value.status_code == 500
            assert client.pending_messages == ["hello"]

    @pytest.mark.asyncio
    async def test_failed_post_keeps_rest_of_queue(
        self, room_html, turn_url, turn_response, make_client
    ):
        """Test delivered messages leave the queue and the rest stay after a failure."""
        server = RoomServer(
            room_html(), turn_url, turn_response, failing_bodies=["b"]
        )

        async with make_client(server) as client:
            await client.connect_to_room("https://apprtc.example.com/?r=12345678")
            await client.send_message("a")
            await client.send_message("b")
            await client.send_message("c")

            with pytest.raises(UnexpectedResponseError) as exc_info:
                await client.flush()

            assert exc_info.value.status_code == 500
            assert client.pending_messages == ["b", "c"]

        bodies = [body for _, body in server.posted]
        assert bodies[0] == "a"
        assert bodies.count("a") == 1
        assert set(bodies[1:]) == {"b"}

    @pytest.mark.asyncio
    async def test_send_message_does_not_wait_for_post(
        self, room_html, turn_url, turn_response, make_client
    ):
        """Test queueing a message is not blocked by a POST in flight."""
        server = SlowRoomServer(room_html(), turn_url, turn_response)

        async with make_client(server) as client:
            await client.connect_to_room("https://apprtc.example.com/?r=12345678")
            await client.send_message("first")
            await asyncio.wait_for(server.post_started.wait(), 1)

            await asyncio.wait_for(client.send_message("second"), 0.5)
            assert client.pending_messages == ["first", "second"]

            server.release.set()
            await client.flush()

            assert client.pending_messages == []

        assert [body for _, body in server.posted] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_accessors_before_connect(self, room_server, make_client):
        """Test parameters are unavailable before connecting."""
        async with make_client(room_server) as client:
            with pytest.raises(NotConnectedError):
                client.is_initiator
            with pytest.raises(NotConnectedError):
                client.pc_constraints

    @pytest.mark.asyncio
    async def test_disconnect_is_idempotent(self, room_server, make_client):
        """Test disconnect closes the channel once and tolerates repeats."""
        async with make_client(room_server) as client:
            await client.disconnect()
            await client.connect_to_room("https://apprtc.example.com/?r=12345678")
            await client.disconnect()
            await client.disconnect()

            assert FakeChannel.instances[0].closed
