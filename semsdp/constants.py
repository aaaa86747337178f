"""Various constants used by the semsdp library, mostly serialization defaults."""

from __future__ import annotations


SUPPORTED_SDP_VERSIONS: list[str] = ["0"]

SDP_LINE_SEPARATOR: str = "\r\n"

# session header defaults
DEFAULT_ORIGIN_USERNAME: str = "-"
DEFAULT_ORIGIN_ADDRESS: str = "127.0.0.1"
DEFAULT_SESSION_NAME: str = "semantic-sdp"
DEFAULT_CONNECTION_ADDRESS: str = "0.0.0.0"  # noqa: S104
DEFAULT_MSID_SEMANTIC: str = "WMS"
DEFAULT_MSID_SEMANTIC_TOKEN: str = "*"
BUNDLE_SEMANTICS: str = "BUNDLE"

# media section defaults
DEFAULT_MEDIA_PORT: int = 9
DEFAULT_MEDIA_PROTOCOL: str = "UDP/TLS/RTP/SAVPF"
BANDWIDTH_TYPE_AS: str = "AS"

# codecs
VIDEO_CLOCK_RATE: int = 90000
RTX_CLOCK_RATE: int = 90000
OPUS_CLOCK_RATE: int = 48000
OPUS_CHANNELS: int = 2
DEFAULT_AUDIO_CLOCK_RATE: int = 8000
RTX_CODEC_NAME: str = "rtx"
FLEXFEC_CODEC_NAME: str = "flex-fec"
IGNORED_CODEC_NAMES: frozenset[str] = frozenset({"RED", "ULPFEC"})
DYNAMIC_PAYLOAD_TYPES: range = range(96, 128)
STATIC_PAYLOAD_TYPES: dict[str, int] = {
    "PCMU": 0,
    "GSM": 3,
    "G723": 4,
    "PCMA": 8,
    "G722": 9,
    "CN": 13,
    "G729": 18,
}

# RTCP feedback, as (type, subtype) pairs
VIDEO_RTCP_FEEDBACK: list[tuple[str, str | None]] = [
    ("nack", "pli"),
    ("goog-remb", None),
]
TRANSPORT_CC_FEEDBACK: tuple[str, str | None] = ("transport-cc", None)

# ICE credentials sizes, in random bytes (hex encoded doubles the length)
ICE_UFRAG_BYTES: int = 8
ICE_PWD_BYTES: int = 24
