"""Shared fixtures for the signaling client tests."""
import json

import pytest

ROOM_URL = "https://apprtc.example.com/?r=12345678"
TURN_URL = "https://turn.example.com/turn?username=55555&key=4080218913"

DEFAULT_VARS = {
    "errorMessages": "[]",
    "channelToken": "'AHRlWrqvgCpvbd9B-Gl5vZ2F1BlpwFv0xBUwRgLF'",
    "me": "'55555'",
    "roomKey": "'12345678'",
    "roomLink": "'https://apprtc.example.com/?r=12345678'",
    "initiator": "1",
    "pcConfig": json.dumps(
        {"iceServers": [{"url": "stun:stun.l.google.com:19302"}]}
    ),
    "pcConstraints": json.dumps({"optional": [{"DtlsSrtpKeyAgreement": True}]}),
    "offerConstraints": json.dumps({"optional": [], "mandatory": {}}),
    "mediaConstraints": json.dumps({"audio": True, "video": True}),
    "turnUrl": f"'{TURN_URL}'",
    "stereo": "false",
}


def build_room_html(**overrides) -> str:
    """Render a room page. Pass a variable as None to leave it out."""
    variables = dict(DEFAULT_VARS)
    variables.update(overrides)
    lines = [
        f"  var {name} = {value};"
        for name, value in variables.items()
        if value is not None
    ]
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<title>WebRTC Reference App</title>\n"
        '<script type="text/javascript">\n'
        + "\n".join(lines)
        + "\n</script>\n</head>\n<body>\n<div id=\"container\"></div>\n</body>\n</html>\n"
    )


FULL_ROOM_HTML = (
    "<!DOCTYPE html>\n<html>\n<body>\n<div>\n"
    "    Sorry, this room is full.\n"
    "</div>\n</body>\n</html>\n"
)


@pytest.fixture
def room_html():
    """Builder for room pages."""
    return build_room_html


@pytest.fixture
def turn_response():
    """A TURN server response from the TURN request URL."""
    return {
        "username": "1384305434:55555",
        "password": "tUrNpAsSwOrD",
        "uris": [
            "turn:203.0.113.7:3478?transport=udp",
            "turn:203.0.113.7:3478?transport=tcp",
        ],
    }


@pytest.fixture
def room_url():
    return ROOM_URL


@pytest.fixture
def turn_url():
    return TURN_URL


@pytest.fixture
def full_room_html():
    return FULL_ROOM_HTML
