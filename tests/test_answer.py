from __future__ import annotations

import pytest

from semsdp import (
    CandidateInfo,
    CodecInfo,
    Direction,
    DirectionWay,
    DTLSInfo,
    ICEInfo,
    MediaCapabilities,
    SDPInfo,
    Setup,
)


TRANSPORT_CC_URI = "http://www.ietf.org/id/draft-holmer-rmcat-transport-wide-cc-extensions-01"


@pytest.fixture
def local_ice() -> ICEInfo:
    """Local ICE credentials."""
    return ICEInfo.generate()


@pytest.fixture
def local_dtls(dtls_fingerprint) -> DTLSInfo:
    """Local DTLS parameters, answering an actpass offer."""
    return DTLSInfo(setup=Setup.ACTPASS.reverse(), hash="sha-256", fingerprint=dtls_fingerprint)


@pytest.fixture
def local_candidate() -> CandidateInfo:
    """A local host candidate."""
    return CandidateInfo(
        foundation="1",
        component_id=1,
        transport="udp",
        priority=2130706431,
        address="10.0.0.2",
        port=40000,
        type="host",
    )


class TestAnswer:
    def test_capabilities_filtering(self, unified_plan_offer, local_ice, local_dtls):
        """Test that only supported codecs and extensions are answered, with offered ids."""
        offer = SDPInfo.process(unified_plan_offer)
        answer = offer.answer(
            ice=local_ice,
            dtls=local_dtls,
            capabilities={
                "audio": MediaCapabilities(codecs=["opus"], extensions=[TRANSPORT_CC_URI]),
                "video": MediaCapabilities(codecs=["vp9", "H264"], rtx=True),
            },
        )
        audio, video = answer.medias
        assert audio.id == "0"
        assert audio.direction is Direction.SENDRECV
        assert dict(audio.codecs) == {
            111: CodecInfo(
                codec="opus", payload_type=111, params={"minptime": "10", "useinbandfec": "1"}
            ),
        }
        assert dict(audio.extensions) == {3: TRANSPORT_CC_URI}

        assert video.id == "1"
        assert video.direction is Direction.RECVONLY
        assert dict(video.codecs) == {
            98: CodecInfo(codec="VP9", payload_type=98, params={"profile-id": "0"}, rtx=99),
        }
        assert not video.extensions

    def test_rtx_not_supported(self, unified_plan_offer):
        """Test that RTX is dropped from the answer when not supported."""
        offer = SDPInfo.process(unified_plan_offer)
        answer = offer.answer(capabilities={"video": MediaCapabilities(codecs=["VP8", "VP9"])})
        video = answer.get_media("video")
        assert video is not None
        assert [codec.rtx for codec in video.codecs.values()] == [None, None]

    def test_codec_capability_params(self, unified_plan_offer):
        """Test that codec capabilities answer with their own parameters."""
        offer = SDPInfo.process(unified_plan_offer)
        answer = offer.answer(
            capabilities={
                "audio": MediaCapabilities(
                    codecs=[CodecInfo(codec="opus", payload_type=0, params={"stereo": "1"})]
                ),
            },
        )
        audio = answer.get_media("audio")
        assert audio is not None
        opus = audio.get_codec("opus")
        assert opus is not None
        assert opus.payload_type == 111
        assert opus.params == {"stereo": "1"}

    def test_inactive_without_capabilities(self, unified_plan_offer):
        """Test that media lines without capabilities are answered inactive, without codecs."""
        offer = SDPInfo.process(unified_plan_offer)
        answer = offer.answer(capabilities={"audio": MediaCapabilities(codecs=["opus"])})
        video = answer.get_media("video")
        assert video is not None
        assert video.id == "1"
        assert video.direction is Direction.INACTIVE
        assert not video.codecs

        answer = offer.answer()
        assert [media.direction for media in answer.medias] == [
            Direction.INACTIVE,
            Direction.INACTIVE,
        ]

    def test_transport(self, unified_plan_offer, local_ice, local_dtls, local_candidate):
        """Test that the answer carries the local transport, and no streams."""
        offer = SDPInfo.process(unified_plan_offer)
        answer = offer.answer(ice=local_ice, dtls=local_dtls, candidates=[local_candidate])
        assert answer.ice is local_ice
        assert answer.dtls is local_dtls
        assert answer.dtls.setup is Setup.PASSIVE
        assert answer.candidates == (local_candidate,)
        assert not answer.streams
        assert offer.get_stream("stream1") is not None

    def test_offer_is_untouched(self, unified_plan_offer):
        """Test that answering does not modify the offer."""
        offer = SDPInfo.process(unified_plan_offer)
        plain_offer = offer.plain()
        answer = offer.answer(capabilities={"video": MediaCapabilities(codecs=["VP8"], rtx=True)})
        video = answer.get_media("video")
        assert video is not None
        vp8 = video.get_codec("VP8")
        assert vp8 is not None
        vp8.params["x-google-start-bitrate"] = "1000"
        assert offer.plain() == plain_offer


class TestSimulcastAnswer:
    def test_reversed_simulcast(self, simulcast_offer, local_ice, local_dtls):
        """Test that offered simulcast streams and rids are received in the answer."""
        offer = SDPInfo.process(simulcast_offer)
        answer = offer.answer(
            ice=local_ice,
            dtls=local_dtls,
            capabilities={"video": MediaCapabilities(codecs=["VP8"], simulcast=True)},
        )
        (video,) = answer.medias
        assert video.direction is Direction.RECVONLY
        assert video.simulcast is not None
        assert not video.simulcast.get_simulcast_streams(DirectionWay.SEND)
        recv_streams = video.simulcast.get_simulcast_streams(DirectionWay.RECV)
        assert [[(s.id, s.paused) for s in streams] for streams in recv_streams] == [
            [("hi", False)],
            [("mid", False), ("lo", True)],
        ]
        assert all(rid.direction is DirectionWay.RECV for rid in video.rids.values())

        text = answer.to_string()
        assert "a=rid:hi recv pt=120;max-width=1280;max-height=720\r\n" in text
        assert "a=rid:lo recv max-width=320\r\n" in text
        assert "a=simulcast:recv hi;mid,~lo\r\n" in text
        assert "a=recvonly\r\n" in text
        assert "a=setup:passive\r\n" in text

    def test_simulcast_not_supported(self, simulcast_offer):
        """Test that simulcast and rids are dropped when not supported."""
        offer = SDPInfo.process(simulcast_offer)
        answer = offer.answer(capabilities={"video": MediaCapabilities(codecs=["VP8"])})
        (video,) = answer.medias
        assert video.simulcast is None
        assert not video.rids
        assert "a=simulcast" not in answer.to_string()

    def test_offer_simulcast_is_untouched(self, simulcast_offer):
        """Test that reversing the answer simulcast does not modify the offer."""
        offer = SDPInfo.process(simulcast_offer)
        offer.answer(capabilities={"video": MediaCapabilities(codecs=["VP8"], simulcast=True)})
        (video,) = offer.medias
        assert video.simulcast is not None
        assert len(video.simulcast.get_simulcast_streams(DirectionWay.SEND)) == 2
        hi = video.get_rid("hi")
        assert hi is not None and hi.direction is DirectionWay.SEND
