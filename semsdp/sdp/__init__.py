"""Implementation of the Session Description Protocol (SDP) text layer, as tagged wire records."""

from .common import *
from .media import *
from .session import *
from .time import *


def parse(text: str) -> SDPSession:
    """Parse a session description text into an :class:`SDPSession` record tree."""
    return SDPSession.parse(text)


def write(session: SDPSession) -> str:
    """Serialize an :class:`SDPSession` record tree back into session description text."""
    return session.serialize()
