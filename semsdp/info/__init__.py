"""Semantic object model of WebRTC session descriptions."""

from .enums import *
from .media import *
from .session import *
from .stream import *
from .transport import *
