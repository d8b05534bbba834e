"""Tests for the HTTP client service."""
import httpx
import pytest

from apprtc_client.config import settings
from apprtc_client.exceptions import UnexpectedResponseError
from apprtc_client.services.http_client import HTTPClient


class TestHTTPClient:
    """Tests for HTTPClient."""

    def test_timeout_defaults_to_settings(self):
        assert HTTPClient().timeout == settings.request_timeout

    def test_zero_timeout_is_kept(self):
        """Test an explicit zero timeout is not replaced by the default."""
        assert HTTPClient(timeout=0).timeout == 0

    @pytest.mark.asyncio
    async def test_error_status_raises_unexpected_response(self):
        """Test 4xx/5xx responses carry status, URL and body."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(503, text="try later")
        )

        async with HTTPClient(transport=transport) as http:
            with pytest.raises(UnexpectedResponseError) as exc_info:
                await http.get_json("https://turn.example.com/turn")

        assert exc_info.value.status_code == 503
        assert exc_info.value.url == "https://turn.example.com/turn"
        assert exc_info.value.body == "try later"

    @pytest.mark.asyncio
    async def test_client_requires_context(self):
        """Test requests outside the async context are refused."""
        with pytest.raises(RuntimeError):
            await HTTPClient().get_text("https://apprtc.example.com/")
