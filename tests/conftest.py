from __future__ import annotations

import textwrap

import pytest


def make_sdp(text: str) -> str:
    """Normalize an indented multiline SDP sample to CRLF-terminated lines."""
    lines = textwrap.dedent(text).strip().splitlines()
    return "\r\n".join(line.rstrip() for line in lines) + "\r\n"


FINGERPRINT = (
    "6B:8B:F0:65:5F:78:E2:51:3B:AC:6F:F3:3F:46:1B:35:"
    "DC:B8:5F:64:1A:24:C2:43:F0:A1:58:D0:A1:2C:19:08"
)


@pytest.fixture
def unified_plan_offer() -> str:
    """A browser-like unified plan offer, with audio and video lines, RTX, RED and ULPFEC."""
    return make_sdp(f"""
        v=0
        o=- 4611731400430051336 2 IN IP4 127.0.0.1
        s=-
        t=0 0
        a=group:BUNDLE 0 1
        a=msid-semantic: WMS stream1
        m=audio 9 UDP/TLS/RTP/SAVPF 111 63 103
        c=IN IP4 0.0.0.0
        a=rtcp:9 IN IP4 0.0.0.0
        a=candidate:1 1 udp 2122260223 192.168.1.10 54400 typ host generation 0
        a=candidate:2 1 udp 1686052607 203.0.113.5 54400 typ srflx raddr 192.168.1.10 rport 54400 generation 0
        a=ice-ufrag:aB3d
        a=ice-pwd:Zx8y7w6v5u4t3s2r1q0p9o8n
        a=ice-options:trickle
        a=fingerprint:sha-256 {FINGERPRINT}
        a=setup:actpass
        a=mid:0
        a=extmap:1 urn:ietf:params:rtp-hdrext:ssrc-audio-level
        a=extmap:3 http://www.ietf.org/id/draft-holmer-rmcat-transport-wide-cc-extensions-01
        a=sendrecv
        a=msid:stream1 audio1
        a=rtcp-mux
        a=rtpmap:111 opus/48000/2
        a=rtcp-fb:111 transport-cc
        a=fmtp:111 minptime=10;useinbandfec=1
        a=rtpmap:63 red/48000/2
        a=fmtp:63 111/111
        a=rtpmap:103 ISAC/16000
        a=ssrc:1111 cname:abc
        a=ssrc:1111 msid:stream1 audio1
        m=video 9 UDP/TLS/RTP/SAVPF 96 97 98 99 100 101 102
        c=IN IP4 0.0.0.0
        a=rtcp:9 IN IP4 0.0.0.0
        a=candidate:1 1 udp 2122260223 192.168.1.10 54400 typ host generation 0
        a=ice-ufrag:aB3d
        a=ice-pwd:Zx8y7w6v5u4t3s2r1q0p9o8n
        a=ice-options:trickle
        a=fingerprint:sha-256 {FINGERPRINT}
        a=setup:actpass
        a=mid:1
        a=extmap:2 urn:ietf:params:rtp-hdrext:toffset
        a=extmap:3 http://www.ietf.org/id/draft-holmer-rmcat-transport-wide-cc-extensions-01
        a=sendonly
        a=msid:stream1 video1
        a=rtcp-mux
        a=rtcp-rsize
        a=rtpmap:96 VP8/90000
        a=rtcp-fb:96 goog-remb
        a=rtcp-fb:96 transport-cc
        a=rtcp-fb:96 ccm fir
        a=rtcp-fb:96 nack
        a=rtcp-fb:96 nack pli
        a=rtpmap:97 rtx/90000
        a=fmtp:97 apt=96
        a=rtpmap:98 VP9/90000
        a=fmtp:98 profile-id=0
        a=rtpmap:99 rtx/90000
        a=fmtp:99 apt=98
        a=rtpmap:100 red/90000
        a=rtpmap:101 rtx/90000
        a=fmtp:101 apt=100
        a=rtpmap:102 ulpfec/90000
        a=ssrc-group:FID 2222 3333
        a=ssrc:2222 cname:abc
        a=ssrc:2222 msid:stream1 video1
        a=ssrc:3333 cname:abc
        a=ssrc:3333 msid:stream1 video1
    """)


@pytest.fixture
def simulcast_offer() -> str:
    """An offer with a single video line sending three rid-based simulcast encodings."""
    return make_sdp(f"""
        v=0
        o=mozilla...THIS_IS_SDPARTA-99.0 1234567890 0 IN IP4 0.0.0.0
        s=-
        t=0 0
        a=fingerprint:sha-256 {FINGERPRINT}
        a=ice-options:trickle
        a=msid-semantic:WMS *
        a=group:BUNDLE 0
        m=video 9 UDP/TLS/RTP/SAVPF 120 124 121 125
        c=IN IP4 0.0.0.0
        a=sendonly
        a=extmap:3 urn:ietf:params:rtp-hdrext:sdes:mid
        a=extmap:10 urn:ietf:params:rtp-hdrext:sdes:rtp-stream-id
        a=fmtp:120 max-fs=12288;max-fr=60
        a=fmtp:124 apt=120
        a=fmtp:121 max-fs=12288;max-fr=60
        a=fmtp:125 apt=121
        a=ice-pwd:4d2bc4b8c0b6e0fb2d5e1c2a1f0e9d8c
        a=ice-ufrag:7e1f3a2b
        a=mid:0
        a=msid:stream2 track2
        a=rid:hi send pt=120;max-width=1280;max-height=720
        a=rid:mid send pt=120,121;max-width=640
        a=rid:lo send max-width=320
        a=rtcp-fb:120 nack
        a=rtcp-fb:120 nack pli
        a=rtcp-mux
        a=rtpmap:120 VP8/90000
        a=rtpmap:124 rtx/90000
        a=rtpmap:121 VP9/90000
        a=rtpmap:125 rtx/90000
        a=setup:actpass
        a=simulcast:send hi;mid,~lo
        a=ssrc:5555 cname:{{cname}}
    """)


@pytest.fixture
def plan_b_offer() -> str:
    """A legacy plan B offer, with session-level transport and multiple tracks per media line."""
    return make_sdp(f"""
        v=0
        o=- 1 1 IN IP4 127.0.0.1
        s=-
        t=0 0
        a=ice-lite
        a=ice-ufrag:planb
        a=ice-pwd:planbpasswordplanbpassword
        a=fingerprint:sha-256 {FINGERPRINT}
        a=setup:passive
        a=group:BUNDLE audio video
        a=msid-semantic: WMS streamA streamB
        m=audio 9 UDP/TLS/RTP/SAVPF 0 8
        c=IN IP4 0.0.0.0
        b=AS:64
        a=mid:audio
        a=sendrecv
        a=rtcp-mux
        a=rtpmap:0 PCMU/8000
        a=rtpmap:8 PCMA/8000
        a=ssrc:10 cname:c1
        a=ssrc:10 msid:streamA audioA
        a=ssrc:20 cname:c2
        a=ssrc:20 msid:streamB audioB
        m=video 9 UDP/TLS/RTP/SAVPF 96 97
        c=IN IP4 0.0.0.0
        a=mid:video
        a=recvonly
        a=rtcp-mux
        a=rtpmap:96 H264/90000
        a=fmtp:96 level-asymmetry-allowed=1;packetization-mode=1;profile-level-id=42e01f
        a=rtpmap:97 rtx/90000
        a=fmtp:97 apt=96
        a=ssrc-group:FID 30 31
        a=ssrc:30 cname:c1
        a=ssrc:30 msid:streamA videoA
        a=ssrc:31 cname:c1
        a=ssrc:31 msid:streamA videoA
    """)


@pytest.fixture
def single_audio_sdp() -> str:
    """A minimal description with a single opus audio line and a single source."""
    return make_sdp(f"""
        v=0
        o=- 0 0 IN IP4 127.0.0.1
        s=-
        t=0 0
        m=audio 9 UDP/TLS/RTP/SAVPF 111
        c=IN IP4 0.0.0.0
        a=mid:audio
        a=ice-ufrag:x1y2
        a=ice-pwd:0123456789abcdef01234567
        a=fingerprint:sha-256 {FINGERPRINT}
        a=rtpmap:111 opus/48000/2
        a=ssrc:1111 cname:x
        a=ssrc:1111 msid:stream1 track1
    """)


def media_section(*attributes: str, media: str = "video 9 UDP/TLS/RTP/SAVPF 100 101") -> str:
    """Build a single media line description with transport attributes and the given extra ones."""
    lines = [
        "v=0",
        "o=- 0 0 IN IP4 127.0.0.1",
        "s=-",
        "t=0 0",
        f"m={media}",
        "c=IN IP4 0.0.0.0",
        "a=mid:0",
        "a=ice-ufrag:ufrag",
        "a=ice-pwd:0123456789abcdef01234567",
        f"a=fingerprint:sha-256 {FINGERPRINT}",
        *(f"a={attribute}" for attribute in attributes),
    ]
    return "\r\n".join(lines) + "\r\n"


@pytest.fixture
def build_media_section():
    """Factory for single media line descriptions, see :func:`media_section`."""
    return media_section


@pytest.fixture
def dtls_fingerprint() -> str:
    """The DTLS certificate fingerprint used by all the sample descriptions."""
    return FINGERPRINT
