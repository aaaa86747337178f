from __future__ import annotations

import json

import pytest

from semsdp import (
    CandidateInfo,
    CodecInfo,
    Direction,
    DirectionWay,
    DTLSInfo,
    ICEInfo,
    MediaInfo,
    RIDInfo,
    SDPInfo,
    Setup,
    SimulcastInfo,
    SimulcastStreamInfo,
    SourceGroupInfo,
    StreamInfo,
    TrackEncodingInfo,
    TrackInfo,
)
from semsdp.sdp import CandidateAttribute


class TestEnums:
    def test_by_value(self):
        """Test case-insensitive lookup of enum members by their SDP token."""
        assert Direction.by_value("SendOnly") is Direction.SENDONLY
        assert DirectionWay.by_value("recv") is DirectionWay.RECV
        assert Setup.by_value(" actpass ") is Setup.ACTPASS
        with pytest.raises(ValueError):
            Direction.by_value("sideways")

    def test_str(self):
        """Test that enum members stringify as their SDP token."""
        assert str(Direction.RECVONLY) == "recvonly"
        assert str(Setup.PASSIVE) == "passive"

    @pytest.mark.parametrize(
        "direction, reversed_direction",
        [
            (Direction.SENDONLY, Direction.RECVONLY),
            (Direction.RECVONLY, Direction.SENDONLY),
            (Direction.SENDRECV, Direction.SENDRECV),
            (Direction.INACTIVE, Direction.INACTIVE),
        ],
    )
    def test_direction_reverse(self, direction, reversed_direction):
        """Test reversing media directions."""
        assert direction.reverse() is reversed_direction

    def test_setup_reverse(self):
        """Test answering DTLS setup roles."""
        assert Setup.ACTIVE.reverse() is Setup.PASSIVE
        assert Setup.PASSIVE.reverse() is Setup.ACTIVE
        assert Setup.ACTPASS.reverse() is Setup.PASSIVE
        assert Setup.ACTPASS.reverse(prefer_active=True) is Setup.ACTIVE
        assert Setup.INACTIVE.reverse() is Setup.INACTIVE


class TestTransport:
    def test_generate_ice(self):
        """Test that generated ICE credentials are random and long enough."""
        ice = ICEInfo.generate()
        assert len(ice.ufrag) == 16
        assert len(ice.pwd) == 48
        assert not ice.lite
        assert ICEInfo.generate().ufrag != ice.ufrag
        assert ICEInfo.generate(lite=True).lite

    def test_candidate_attribute_conversion(self):
        """Test converting candidates from and to their wire records."""
        attribute = CandidateAttribute.parse(
            "candidate:2 1 udp 1686052607 203.0.113.5 54400 typ srflx raddr 10.0.0.1 rport 5000"
        )
        candidate = CandidateInfo.from_attribute(attribute)
        assert candidate == CandidateInfo(
            foundation="2",
            component_id=1,
            transport="udp",
            priority=1686052607,
            address="203.0.113.5",
            port=54400,
            type="srflx",
            rel_addr="10.0.0.1",
            rel_port=5000,
        )
        assert candidate.to_attribute() == attribute

    def test_candidate_extensions(self):
        """Test that candidate extension attributes, like the TCP type, are kept."""
        raw = "candidate:3 1 tcp 1518280447 10.0.0.1 9 typ host tcptype active generation 0"
        candidate = CandidateInfo.from_attribute(CandidateAttribute.parse(raw))
        assert candidate.extensions == {"tcptype": "active", "generation": "0"}
        assert str(candidate.to_attribute()) == raw
        assert candidate.plain()["extensions"] == {"tcptype": "active", "generation": "0"}
        assert json.loads(json.dumps(candidate.plain())) == candidate.plain()

    def test_dtls_plain(self):
        """Test that DTLS parameters are projected to plain values."""
        dtls = DTLSInfo(setup=Setup.ACTIVE, hash="sha-256", fingerprint="AA:BB")
        assert dtls.plain() == {"setup": "active", "hash": "sha-256", "fingerprint": "AA:BB"}


class TestCodecs:
    def test_map_from_names(self):
        """Test assigning static and dynamic payload types from codec names."""
        codecs = CodecInfo.map_from_names(["opus", "PCMU", "VP8"], rtx=True)
        assert list(codecs) == [96, 0, 98]
        assert codecs[96] == CodecInfo(codec="opus", payload_type=96, rtx=97)
        assert codecs[96].has_rtx()
        assert not codecs[0].has_rtx()
        assert codecs[0] == CodecInfo(codec="PCMU", payload_type=0)
        assert codecs[98] == CodecInfo(codec="VP8", payload_type=98, rtx=99)

    def test_map_from_names_without_rtx(self):
        """Test that dynamic payload types are consecutive without RTX."""
        codecs = CodecInfo.map_from_names(["VP8", "VP9", "H264"])
        assert [(codec.codec, codec.payload_type, codec.rtx) for codec in codecs.values()] == [
            ("VP8", 96, None),
            ("VP9", 97, None),
            ("H264", 98, None),
        ]

    def test_rtx_same_as_payload_type(self):
        """Test that a codec cannot use its own payload type for RTX."""
        with pytest.raises(ValueError):
            CodecInfo(codec="VP8", payload_type=96, rtx=96)

    def test_duplicate_payload_type(self):
        """Test that a media line refuses codecs clashing on payload types, RTX included."""
        media = MediaInfo("0", "video")
        media.add_codec(CodecInfo(codec="VP8", payload_type=96, rtx=97))
        with pytest.raises(ValueError):
            media.add_codec(CodecInfo(codec="VP9", payload_type=96))
        with pytest.raises(ValueError):
            media.add_codec(CodecInfo(codec="VP9", payload_type=97))
        with pytest.raises(ValueError):
            media.add_codec(CodecInfo(codec="VP9", payload_type=98, rtx=97))

    def test_codec_lookup(self):
        """Test finding codecs by name and payload type."""
        media = MediaInfo("0", "video")
        media.add_codec(CodecInfo(codec="VP8", payload_type=96, rtx=97))
        assert media.get_codec("vp8") is media.get_codec_for_type(96)
        assert media.has_codec("VP8")
        assert not media.has_codec("H264")
        assert media.get_codec_for_type(97) is None
        removed = media.remove_codec(96)
        assert removed.codec == "VP8"
        assert not media.codecs


class TestMediaInfo:
    def test_defaults(self):
        """Test the defaults of a new media line."""
        media = MediaInfo("audio", "audio")
        assert media.direction is Direction.SENDRECV
        assert media.bitrate == 0
        assert media.simulcast is None
        assert not media.codecs and not media.extensions and not media.rids

    def test_negative_bitrate(self):
        """Test that bitrates cannot be negative."""
        media = MediaInfo("0", "video")
        with pytest.raises(ValueError):
            media.bitrate = -1

    def test_read_only_views(self):
        """Test that collections are exposed as read-only views."""
        media = MediaInfo("0", "video")
        with pytest.raises(TypeError):
            media.codecs[96] = CodecInfo(codec="VP8", payload_type=96)  # type: ignore[index]
        with pytest.raises(TypeError):
            media.extensions[1] = "urn:example"  # type: ignore[index]
        sdp_info = SDPInfo()
        with pytest.raises(TypeError):
            sdp_info.streams["s"] = StreamInfo("s")  # type: ignore[index]
        assert isinstance(sdp_info.medias, tuple)

    def test_clone_is_independent(self):
        """Test that cloned media lines do not share state with the original."""
        media = MediaInfo("0", "video")
        media.add_codec(CodecInfo(codec="VP9", payload_type=98, params={"profile-id": "0"}))
        media.add_rid(RIDInfo(id="hi", direction=DirectionWay.SEND, formats=[98]))
        media.simulcast = SimulcastInfo()
        media.simulcast.add_simulcast_stream(DirectionWay.SEND, SimulcastStreamInfo(id="hi"))

        cloned = media.clone()
        cloned.codecs[98].params["profile-id"] = "2"
        cloned.rids["hi"].formats.append(99)
        assert cloned.simulcast is not None
        cloned.simulcast.add_simulcast_stream(DirectionWay.SEND, SimulcastStreamInfo(id="lo"))

        assert media.codecs[98].params == {"profile-id": "0"}
        assert media.rids["hi"].formats == [98]
        assert len(media.simulcast.get_simulcast_streams(DirectionWay.SEND)) == 1
        assert cloned.plain() != media.plain()


class TestSimulcastInfo:
    def test_streams(self):
        """Test adding simulcast streams, with and without alternatives."""
        simulcast = SimulcastInfo()
        simulcast.add_simulcast_stream(DirectionWay.SEND, SimulcastStreamInfo(id="hi"))
        simulcast.add_simulcast_alternative_streams(
            DirectionWay.SEND,
            [SimulcastStreamInfo(id="mid"), SimulcastStreamInfo(id="lo", paused=True)],
        )
        send_streams = simulcast.get_simulcast_streams(DirectionWay.SEND)
        assert [[stream.id for stream in streams] for streams in send_streams] == [
            ["hi"],
            ["mid", "lo"],
        ]
        assert simulcast.get_simulcast_streams(DirectionWay.RECV) == ()
        with pytest.raises(ValueError):
            simulcast.add_simulcast_alternative_streams(DirectionWay.RECV, [])

    def test_reverse(self):
        """Test swapping the send and receive streams."""
        simulcast = SimulcastInfo()
        simulcast.add_simulcast_stream(DirectionWay.SEND, SimulcastStreamInfo(id="hi"))
        simulcast.add_simulcast_stream(DirectionWay.RECV, SimulcastStreamInfo(id="r1"))
        reversed_simulcast = simulcast.reverse()
        assert reversed_simulcast.plain() == {
            "send": [[{"id": "r1", "paused": False}]],
            "recv": [[{"id": "hi", "paused": False}]],
        }


class TestStreams:
    def test_empty_source_group(self):
        """Test that source groups need at least one ssrc."""
        with pytest.raises(ValueError):
            SourceGroupInfo("FID", [])

    def test_track_ssrcs(self):
        """Test that ssrcs are kept in order and without duplicates."""
        track = TrackInfo("video", "video1")
        track.add_ssrc(2222)
        track.add_ssrc(3333)
        track.add_ssrc(2222)
        assert track.ssrcs == (2222, 3333)

    def test_source_group_with_foreign_ssrc(self):
        """Test that source groups can only reference ssrcs of the track."""
        track = TrackInfo("video", "video1")
        track.add_ssrc(2222)
        with pytest.raises(ValueError):
            track.add_source_group(SourceGroupInfo("FID", [2222, 3333]))
        track.add_ssrc(3333)
        track.add_source_group(SourceGroupInfo("FID", [2222, 3333]))
        assert track.has_source_group("fid")
        assert not track.has_source_group("SIM")

    def test_remove_ssrc_drops_groups(self):
        """Test that removing an ssrc removes the source groups referencing it."""
        track = TrackInfo("video", "video1")
        track.add_ssrc(2222)
        track.add_ssrc(3333)
        track.add_source_group(SourceGroupInfo("FID", [2222, 3333]))
        track.remove_ssrc(3333)
        assert track.ssrcs == (2222,)
        assert track.source_groups == ()

    def test_get_first_track(self):
        """Test finding the first track of a media type in a stream."""
        stream = StreamInfo("stream1")
        stream.add_track(TrackInfo("audio", "audio1"))
        stream.add_track(TrackInfo("video", "video1"))
        stream.add_track(TrackInfo("video", "video2"))
        first_video = stream.get_first_track("VIDEO")
        assert first_video is not None and first_video.id == "video1"
        assert stream.get_first_track("application") is None
        assert stream.remove_track("video1") is first_video
        second_video = stream.get_first_track("video")
        assert second_video is not None and second_video.id == "video2"

    def test_clone_is_independent(self):
        """Test that cloned streams do not share tracks nor encodings with the original."""
        stream = StreamInfo("stream1")
        track = TrackInfo("video", "video1", media_id="1")
        track.add_ssrc(2222)
        track.set_encodings([[TrackEncodingInfo(id="hi", params={"max-width": "1280"})]])
        stream.add_track(track)

        cloned = stream.clone()
        cloned_track = cloned.get_track("video1")
        assert cloned_track is not None and cloned_track is not track
        cloned_track.add_ssrc(3333)
        cloned_track.encodings[0][0].params["max-width"] = "640"

        assert track.ssrcs == (2222,)
        assert track.encodings[0][0].params == {"max-width": "1280"}
        assert cloned_track.media_id == "1"


class TestSDPInfo:
    def test_candidates_are_deduplicated(self):
        """Test that equal candidates are only added once."""
        candidate = CandidateInfo(
            foundation="1",
            component_id=1,
            transport="udp",
            priority=1,
            address="10.0.0.1",
            port=5000,
            type="host",
        )
        sdp_info = SDPInfo()
        sdp_info.add_candidates([candidate, candidate.clone()])
        assert sdp_info.candidates == (candidate,)

    def test_media_lookup(self):
        """Test finding media lines by type and by mid."""
        sdp_info = SDPInfo()
        audio = MediaInfo("a", "audio")
        video = MediaInfo("v", "video")
        sdp_info.add_media(audio)
        sdp_info.add_media(video)
        assert sdp_info.get_media("VIDEO") is video
        assert sdp_info.get_medias("audio") == [audio]
        assert sdp_info.get_medias() == [audio, video]
        assert sdp_info.get_media_by_id("a") is audio
        assert sdp_info.get_media_by_id("x") is None
        sdp_info.remove_media(audio)
        assert sdp_info.medias == (video,)

    def test_stream_lookup(self):
        """Test finding streams and tracks."""
        sdp_info = SDPInfo()
        assert sdp_info.get_first_stream() is None
        stream = StreamInfo("stream1")
        stream.add_track(TrackInfo("audio", "audio1", media_id="0"))
        sdp_info.add_stream(stream)
        assert sdp_info.get_first_stream() is stream
        assert sdp_info.get_stream("stream1") is stream
        track = sdp_info.get_track_by_media_id("0")
        assert track is not None and track.id == "audio1"
        assert sdp_info.get_track_by_media_id("1") is None
        sdp_info.remove_all_streams()
        assert not sdp_info.streams

    def test_plain_is_json_serializable(self, unified_plan_offer):
        """Test that the plain representation can be dumped as JSON."""
        sdp_info = SDPInfo.process(unified_plan_offer)
        plain = json.loads(json.dumps(sdp_info.plain()))
        assert plain["version"] == 2
        assert plain["dtls"]["setup"] == "actpass"
        assert [media["id"] for media in plain["medias"]] == ["0", "1"]

    def test_clone_is_independent(self, unified_plan_offer):
        """Test that cloned descriptions do not share state with the original."""
        sdp_info = SDPInfo.process(unified_plan_offer)
        cloned = sdp_info.clone()
        assert cloned.plain() == sdp_info.plain()

        cloned.medias[0].direction = Direction.INACTIVE
        cloned_stream = cloned.get_stream("stream1")
        assert cloned_stream is not None
        cloned_stream.remove_all_tracks()
        assert sdp_info.medias[0].direction is Direction.SENDRECV
        stream = sdp_info.get_stream("stream1")
        assert stream is not None and len(stream.tracks) == 2
