"""Conversion of a room URL into the signaling parameters for that room."""
import json
from typing import Any, Dict, List, Optional

from aiortc import RTCIceServer

from ..config import settings
from ..exceptions import MalformedParametersError, RoomFullError
from ..models import KeyValuePair, MediaConstraints, SignalingParameters
from ..utils.logger import logger
from .http_client import HTTPClient
from .room_page import RoomPage

DEFAULT_VIDEO_CONSTRAINTS: Dict[str, Any] = {"mandatory": {}, "optional": []}


def _load_json(json_string: str, what: str) -> Any:
    try:
        return json.loads(json_string)
    except ValueError as e:
        raise MalformedParametersError(f"Invalid {what} JSON: {json_string}") from e


def _constraint_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _is_url_list(url: Any) -> bool:
    if isinstance(url, str):
        return True
    return (
        isinstance(url, list)
        and len(url) > 0
        and all(isinstance(item, str) for item in url)
    )


def ice_servers_from_pc_config(pc_config: str) -> List[RTCIceServer]:
    """Return the ICE servers described by a peer connection configuration.

    Args:
        pc_config: JSON such as {"iceServers": [{"url": "stun:..."}]}

    Returns:
        List of ICE servers, in declaration order
    """
    config = _load_json(pc_config, "pcConfig")
    try:
        servers = config["iceServers"]
        ice_servers = []
        for server in servers:
            url = server["url"] if "url" in server else server["urls"]
            if not _is_url_list(url):
                raise TypeError(f"ICE server urls must be strings, got {url!r}")
            credential = server.get("credential")
            ice_servers.append(RTCIceServer(urls=url, credential=credential or None))
        return ice_servers
    except (KeyError, TypeError) as e:
        raise MalformedParametersError(f"Bad pcConfig: {pc_config}") from e


def has_turn_server(ice_servers: List[RTCIceServer]) -> bool:
    """Whether any of the ICE servers is a TURN relay."""
    for server in ice_servers:
        urls = [server.urls] if isinstance(server.urls, str) else server.urls
        if any(url.startswith("turn:") for url in urls):
            return True
    return False


def constraints_from_json(json_string: Optional[str]) -> Optional[MediaConstraints]:
    """Parse a {"mandatory": {...}, "optional": [{...}, ...]} constraints object.

    Args:
        json_string: Constraints JSON, or None

    Returns:
        Parsed constraints, or None when there is nothing to parse
    """
    if json_string is None:
        return None

    data = _load_json(json_string, "constraints")
    if not isinstance(data, dict):
        raise MalformedParametersError(f"Constraints must be an object: {json_string}")

    constraints = MediaConstraints()

    mandatory = data.get("mandatory")
    if isinstance(mandatory, dict):
        for key, value in mandatory.items():
            constraints.mandatory.append(
                KeyValuePair(key=key, value=_constraint_value(value))
            )

    optional = data.get("optional")
    if isinstance(optional, list):
        for entry in optional:
            if not isinstance(entry, dict) or not entry:
                raise MalformedParametersError(
                    f"Optional constraint must be a one-key object: {entry!r}"
                )
            key, value = next(iter(entry.items()))
            constraints.optional.append(
                KeyValuePair(key=key, value=_constraint_value(value))
            )

    return constraints


def video_constraints_json(media_constraints: str) -> Optional[str]:
    """Pick the video part out of a getUserMedia() constraints object.

    "video" may be a boolean or a MediaTrackConstraints object.

    Args:
        media_constraints: JSON such as {"audio": true, "video": true}

    Returns:
        Video constraints JSON, or None when video is not requested
    """
    data = _load_json(media_constraints, "mediaConstraints")
    if not isinstance(data, dict):
        raise MalformedParametersError(
            f"mediaConstraints must be an object: {media_constraints}"
        )

    video = data.get("video", False)
    if video is False:
        return None
    if video is True:
        return json.dumps(DEFAULT_VIDEO_CONSTRAINTS)
    if isinstance(video, dict):
        return json.dumps(video)
    raise MalformedParametersError(f"Unsupported video constraints: {video!r}")


class RoomParameterFetcher:
    """Fetches a room page and fishes the signaling parameters out of it."""

    def __init__(self, http: HTTPClient):
        """Initialize the fetcher.

        Args:
            http: Open HTTP client
        """
        self.http = http

    async def fetch(self, url: str) -> SignalingParameters:
        """Fetch the room page at `url` and build its signaling parameters.

        Args:
            url: Room URL, e.g. https://apprtc.appspot.com/?r=12345678

        Returns:
            Signaling parameters for the room

        Raises:
            RoomFullError: If the room already has two participants
        """
        html = await self.http.get_text(url)
        page = RoomPage(html)

        if page.is_full:
            raise RoomFullError(f"Room is full: {url}")

        base_href = url[: url.index("?")]
        token = page.get_var_value("channelToken", strip_quotes=True)
        post_message_url = (
            "/message?r="
            + page.get_var_value("roomKey", strip_quotes=True)
            + "&u="
            + page.get_var_value("me", strip_quotes=True)
        )
        initiator = page.get_var_value("initiator") == "1"
        ice_servers = ice_servers_from_pc_config(page.get_var_value("pcConfig"))

        if not has_turn_server(ice_servers):
            turn_url = page.get_var_value("turnUrl", strip_quotes=True)
            ice_servers.append(await self.request_turn_server(turn_url))

        pc_constraints = constraints_from_json(page.get_var_value("pcConstraints"))
        logger.debug(f"pcConstraints: {pc_constraints}")

        video_constraints = constraints_from_json(
            video_constraints_json(page.get_var_value("mediaConstraints"))
        )
        logger.debug(f"videoConstraints: {video_constraints}")

        return SignalingParameters(
            ice_servers=ice_servers,
            base_href=base_href,
            channel_token=token,
            post_message_url=post_message_url,
            initiator=initiator,
            pc_constraints=pc_constraints,
            video_constraints=video_constraints,
        )

    async def request_turn_server(self, url: str) -> RTCIceServer:
        """Request a TURN server from the room server's TURN endpoint.

        Args:
            url: TURN request URL from the room page

        Returns:
            The first TURN server offered
        """
        logger.info(f"No TURN server in pcConfig, requesting one from {url}")
        try:
            response = await self.http.get_json(
                url,
                headers={
                    "user-agent": settings.turn_user_agent,
                    "origin": settings.turn_origin,
                },
            )
        except ValueError as e:
            raise MalformedParametersError(f"TURN response from {url} is not JSON") from e

        try:
            return RTCIceServer(
                urls=response["uris"][0],
                username=response["username"],
                credential=response["password"],
            )
        except (KeyError, IndexError, TypeError) as e:
            raise MalformedParametersError(f"Bad TURN response: {response!r}") from e
