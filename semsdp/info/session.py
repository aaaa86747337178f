"""The semantic session description root, with parsing, serialization and answering."""

from __future__ import annotations

import logging
import time
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from semsdp import sdp
from semsdp.constants import (
    BANDWIDTH_TYPE_AS,
    BUNDLE_SEMANTICS,
    DEFAULT_AUDIO_CLOCK_RATE,
    DEFAULT_CONNECTION_ADDRESS,
    DEFAULT_MEDIA_PORT,
    DEFAULT_MEDIA_PROTOCOL,
    DEFAULT_MSID_SEMANTIC,
    DEFAULT_MSID_SEMANTIC_TOKEN,
    DEFAULT_ORIGIN_ADDRESS,
    DEFAULT_ORIGIN_USERNAME,
    DEFAULT_SESSION_NAME,
    FLEXFEC_CODEC_NAME,
    IGNORED_CODEC_NAMES,
    OPUS_CHANNELS,
    OPUS_CLOCK_RATE,
    RTX_CLOCK_RATE,
    RTX_CODEC_NAME,
    TRANSPORT_CC_FEEDBACK,
    VIDEO_CLOCK_RATE,
    VIDEO_RTCP_FEEDBACK,
)
from semsdp.exceptions import SDPMediaError, SDPMissingAttributeError, SDPReferenceError
from semsdp.helpers import PlainConvertible, to_plain

from .enums import Direction, DirectionWay, Setup
from .media import (
    CodecInfo,
    MediaCapabilities,
    MediaInfo,
    RIDInfo,
    SimulcastInfo,
    SimulcastStreamInfo,
)
from .stream import SourceGroupInfo, SourceInfo, StreamInfo, TrackEncodingInfo, TrackInfo
from .transport import CandidateInfo, DTLSInfo, ICEInfo


__all__ = [
    "SDPInfo",
]


_logger = logging.getLogger(__name__)


class SDPInfo(PlainConvertible):
    """
    Semantic representation of a WebRTC session description.

    Holds the media lines, the announced media streams and the (bundled)
    transport information, and converts them from and to SDP text.

    :param version: the session version, as advertised in the origin field.
    """

    def __init__(self, version: int = 1) -> None:
        self._version: int = version
        self._medias: list[MediaInfo] = []
        self._streams: dict[str, StreamInfo] = {}
        self._candidates: list[CandidateInfo] = []
        self._ice: ICEInfo | None = None
        self._dtls: DTLSInfo | None = None

    @property
    def version(self) -> int:
        """The session version."""
        return self._version

    @version.setter
    def version(self, version: int) -> None:
        self._version = version

    @property
    def ice(self) -> ICEInfo | None:
        """The ICE credentials of the bundled transport."""
        return self._ice

    @ice.setter
    def ice(self, ice: ICEInfo | None) -> None:
        self._ice = ice

    @property
    def dtls(self) -> DTLSInfo | None:
        """The DTLS parameters of the bundled transport."""
        return self._dtls

    @dtls.setter
    def dtls(self, dtls: DTLSInfo | None) -> None:
        self._dtls = dtls

    @property
    def medias(self) -> tuple[MediaInfo, ...]:
        """The media lines, in declaration order."""
        return tuple(self._medias)

    def add_media(self, media: MediaInfo) -> None:
        """Append a media line."""
        self._medias.append(media)

    def remove_media(self, media: MediaInfo) -> None:
        """Remove a media line."""
        self._medias.remove(media)

    def get_media(self, media_type: str) -> MediaInfo | None:
        """Get the first media line of the given type (case-insensitive), if any."""
        for media in self._medias:
            if media.type.lower() == media_type.lower():
                return media
        return None

    def get_medias(self, media_type: str | None = None) -> list[MediaInfo]:
        """Get all the media lines, optionally only the ones of the given type."""
        if media_type is None:
            return list(self._medias)
        return [media for media in self._medias if media.type.lower() == media_type.lower()]

    def get_media_by_id(self, media_id: str) -> MediaInfo | None:
        """Get the media line with the given mid, if any."""
        for media in self._medias:
            if media.id == media_id:
                return media
        return None

    @property
    def streams(self) -> Mapping[str, StreamInfo]:
        """The announced media streams, keyed by stream id, in insertion order."""
        return MappingProxyType(self._streams)

    def add_stream(self, stream: StreamInfo) -> None:
        """Add a media stream, replacing any previous one with the same id."""
        self._streams[stream.id] = stream

    def remove_stream(self, stream: StreamInfo) -> None:
        """Remove a media stream."""
        self._streams.pop(stream.id, None)

    def remove_all_streams(self) -> None:
        """Remove all the media streams."""
        self._streams.clear()

    def get_stream(self, stream_id: str) -> StreamInfo | None:
        """Get the media stream with the given id, if any."""
        return self._streams.get(stream_id)

    def get_first_stream(self) -> StreamInfo | None:
        """Get the first announced media stream, if any."""
        return next(iter(self._streams.values()), None)

    def get_track_by_media_id(self, media_id: str) -> TrackInfo | None:
        """Get the track bound to the media line with the given mid, if any."""
        for stream in self._streams.values():
            for track in stream.tracks.values():
                if track.media_id == media_id:
                    return track
        return None

    @property
    def candidates(self) -> tuple[CandidateInfo, ...]:
        """The ICE candidates of the bundled transport, in order."""
        return tuple(self._candidates)

    def add_candidate(self, candidate: CandidateInfo) -> None:
        """Add an ICE candidate. Candidates equal to an already added one are ignored."""
        if candidate in self._candidates:
            _logger.debug(f"Ignoring duplicate candidate {candidate}")
            return
        self._candidates.append(candidate)

    def add_candidates(self, candidates: Iterable[CandidateInfo]) -> None:
        """Add multiple ICE candidates."""
        for candidate in candidates:
            self.add_candidate(candidate)

    def answer(
        self,
        ice: ICEInfo | None = None,
        dtls: DTLSInfo | None = None,
        candidates: Iterable[CandidateInfo] = (),
        capabilities: Mapping[str, MediaCapabilities] | None = None,
    ) -> SDPInfo:
        """
        Create an answer to this (offered) session description.

        :param ice: the local ICE credentials.
        :param dtls: the local DTLS parameters.
        :param candidates: the local ICE candidates.
        :param capabilities: the local capabilities, keyed by media type.
            Media lines of types without capabilities are answered as inactive.
        :return: the answer session description, without media streams.
        """
        answer = SDPInfo()
        answer.ice = ice
        answer.dtls = dtls
        answer.add_candidates(candidates)
        for media in self._medias:
            supported = capabilities.get(media.type) if capabilities is not None else None
            answer.add_media(media.answer(supported))
        return answer

    @classmethod
    def process(cls, text: str) -> SDPInfo:
        """
        Parse a session description text into its semantic representation.

        :param text: the session description text.
        :return: the populated session description.
        :raises SDPParseError: if the text cannot be parsed, or lacks required attributes.
        """
        session = sdp.parse(text)

        sess_version = session.origin.sess_version
        sdp_info = cls(version=int(sess_version) if sess_version.isdigit() else 1)

        for media_index, sdp_media in enumerate(session.media):
            try:
                sdp_info._process_media(session, sdp_media)
            except SDPMediaError as e:
                if e.media_index is None:
                    e.media_index = media_index
                raise
            except ValueError as e:
                raise SDPMediaError(str(e), media_index=media_index) from e

        return sdp_info

    def _process_media(self, session: sdp.SDPSession, sdp_media: sdp.SDPMedia) -> None:
        media_type = sdp_media.type
        mid = sdp_media.mid
        if mid is None:
            mid = str(len(self._medias))
            _logger.debug(f"Media line without mid, using {mid!r}")

        media = MediaInfo(mid, media_type)
        direction = sdp_media.direction or session.direction
        if direction is not None:
            media.direction = Direction.by_value(direction)

        dtls = self._extract_dtls(session, sdp_media)
        ice = self._extract_ice(session, sdp_media)

        for bandwidth in sdp_media.bandwidth:
            if bandwidth.bwtype.upper() == BANDWIDTH_TYPE_AS:
                media.bitrate = bandwidth.bandwidth

        for candidate in sdp_media.get_attributes(sdp.CandidateAttribute):
            self.add_candidate(CandidateInfo.from_attribute(candidate))

        self._extract_codecs(sdp_media, media)

        for extmap in sdp_media.get_attributes(sdp.ExtMapAttribute):
            media.add_extension(extmap.id, extmap.uri)

        for rid in sdp_media.get_attributes(sdp.RIDAttribute):
            params = sdp.parse_params(rid.params or "")
            formats = params.pop("pt", "")
            media.add_rid(
                RIDInfo(
                    id=rid.id,
                    direction=DirectionWay.by_value(rid.direction),
                    formats=[int(fmt) for fmt in formats.split(",") if fmt.strip()],
                    params=params,
                )
            )

        encodings: list[list[TrackEncodingInfo]] = []
        simulcast_attribute = sdp_media.get_attribute(sdp.SimulcastAttribute)
        if simulcast_attribute is not None:
            media.simulcast = self._extract_simulcast(simulcast_attribute)
            encodings = self._get_send_encodings(media, media.simulcast)

        sources = self._correlate_sources(sdp_media, media, encodings)

        self._apply_ssrc_groups(sdp_media, sources)

        self.add_media(media)
        # single bundled transport, the last media line wins
        self._ice = ice
        self._dtls = dtls

    @staticmethod
    def _extract_dtls(session: sdp.SDPSession, sdp_media: sdp.SDPMedia) -> DTLSInfo:
        fingerprint = sdp_media.get_attribute(sdp.FingerprintMediaAttribute) or (
            session.get_attribute(sdp.FingerprintSessionAttribute)
        )
        if fingerprint is None:
            raise SDPMissingAttributeError(
                "Missing DTLS fingerprint attribute", attribute="fingerprint"
            )
        setup_attribute = sdp_media.get_attribute(sdp.SetupMediaAttribute) or (
            session.get_attribute(sdp.SetupSessionAttribute)
        )
        setup = (
            Setup.by_value(setup_attribute.value)
            if setup_attribute is not None
            else Setup.ACTPASS
        )
        return DTLSInfo(setup=setup, hash=fingerprint.hash, fingerprint=fingerprint.fingerprint)

    @staticmethod
    def _extract_ice(session: sdp.SDPSession, sdp_media: sdp.SDPMedia) -> ICEInfo:
        ufrag = sdp_media.get_attribute(sdp.ICEUfragMediaAttribute) or (
            session.get_attribute(sdp.ICEUfragSessionAttribute)
        )
        if ufrag is None:
            raise SDPMissingAttributeError(
                "Missing ICE username fragment attribute", attribute="ice-ufrag"
            )
        pwd = sdp_media.get_attribute(sdp.ICEPwdMediaAttribute) or (
            session.get_attribute(sdp.ICEPwdSessionAttribute)
        )
        if pwd is None:
            raise SDPMissingAttributeError("Missing ICE password attribute", attribute="ice-pwd")
        lite = session.get_attribute(sdp.ICELiteFlag) is not None
        return ICEInfo(ufrag=ufrag.value, pwd=pwd.value, lite=lite)

    @staticmethod
    def _extract_codecs(sdp_media: sdp.SDPMedia, media: MediaInfo) -> None:
        fmtps: dict[int, sdp.FMTPAttribute] = {
            fmtp.format: fmtp for fmtp in sdp_media.get_attributes(sdp.FMTPAttribute)
        }
        # associated payload type -> rtx payload type
        pending_rtx: dict[int, int] = {}
        for rtpmap in sdp_media.get_attributes(sdp.RTPMapAttribute):
            codec_name = rtpmap.encoding_name
            fmtp = fmtps.get(rtpmap.payload_type)
            params = fmtp.params if fmtp is not None else {}
            if codec_name.upper() in IGNORED_CODEC_NAMES:
                _logger.debug(f"Skipping {codec_name} codec with payload type {rtpmap.payload_type}")
                continue
            if codec_name.lower() == RTX_CODEC_NAME:
                apt = params.get("apt", "")
                if not apt.isdigit():
                    _logger.debug(f"Skipping RTX payload type {rtpmap.payload_type} without apt")
                    continue
                pending_rtx[int(apt)] = rtpmap.payload_type
                continue
            media.add_codec(
                CodecInfo(codec=codec_name, payload_type=rtpmap.payload_type, params=params)
            )

        for apt, rtx in pending_rtx.items():
            codec = media.get_codec_for_type(apt)
            if codec is None:
                _logger.debug(f"Dropping RTX payload type {rtx}, no codec with payload type {apt}")
                continue
            codec.rtx = rtx

    @staticmethod
    def _extract_simulcast(attribute: sdp.SimulcastAttribute) -> SimulcastInfo:
        simulcast = SimulcastInfo()
        for raw_direction, raw_list in (
            (attribute.dir1, attribute.list1),
            (attribute.dir2, attribute.list2),
        ):
            if raw_direction is None or raw_list is None:
                continue
            direction = DirectionWay.by_value(raw_direction)
            for alternatives in sdp.parse_simulcast_stream_list(raw_list):
                simulcast.add_simulcast_alternative_streams(
                    direction,
                    [SimulcastStreamInfo(id=stream.scid, paused=stream.paused) for stream in alternatives],
                )
        return simulcast

    @staticmethod
    def _get_send_encodings(
        media: MediaInfo, simulcast: SimulcastInfo
    ) -> list[list[TrackEncodingInfo]]:
        encodings: list[list[TrackEncodingInfo]] = []
        for streams in simulcast.get_simulcast_streams(DirectionWay.SEND):
            alternatives: list[TrackEncodingInfo] = []
            for stream in streams:
                rid = media.get_rid(stream.id)
                if rid is None:
                    continue
                encoding = TrackEncodingInfo(id=stream.id, paused=stream.paused, params=dict(rid.params))
                for payload_type in rid.formats:
                    codec = media.get_codec_for_type(payload_type)
                    if codec is not None:
                        encoding.add_codec(codec)
                alternatives.append(encoding)
            if alternatives:
                encodings.append(alternatives)
        return encodings

    def _get_or_create_track(
        self,
        stream_id: str,
        track_id: str,
        media: MediaInfo,
        encodings: list[list[TrackEncodingInfo]],
    ) -> TrackInfo:
        stream = self._streams.get(stream_id)
        if stream is None:
            stream = StreamInfo(stream_id)
            self.add_stream(stream)
        track = stream.get_track(track_id)
        if track is None:
            track = TrackInfo(media.type, track_id)
            track.set_encodings(encodings)
            stream.add_track(track)
        return track

    def _correlate_sources(
        self,
        sdp_media: sdp.SDPMedia,
        media: MediaInfo,
        encodings: list[list[TrackEncodingInfo]],
    ) -> dict[int, SourceInfo]:
        sources: dict[int, SourceInfo] = {}
        for ssrc_attribute in sdp_media.get_attributes(sdp.SSRCAttribute):
            ssrc = ssrc_attribute.ssrc
            source = sources.setdefault(ssrc, SourceInfo(ssrc))
            key = ssrc_attribute.attribute.lower()
            if key == "cname":
                source.cname = ssrc_attribute.value
            elif key == "msid":
                stream_id, _, track_id = (ssrc_attribute.value or "").strip().partition(" ")
                if not stream_id or not track_id:
                    raise SDPMediaError(f"Invalid msid for ssrc {ssrc}: {ssrc_attribute.value!r}")
                source.stream_id = stream_id
                source.track_id = track_id.strip()
                track = self._get_or_create_track(stream_id, source.track_id, media, encodings)
                track.add_ssrc(ssrc)

        msid = sdp_media.get_attribute(sdp.MSIDAttribute)
        if msid is not None:
            track_id = msid.track_id if msid.track_id is not None else media.id
            track = self._get_or_create_track(msid.stream_id, track_id, media, encodings)
            if track.media_id is None:
                track.media_id = media.id
            for ssrc, source in sources.items():
                if source.stream_id is None:
                    source.stream_id = msid.stream_id
                    source.track_id = track_id
                    track.add_ssrc(ssrc)

        return sources

    def _apply_ssrc_groups(self, sdp_media: sdp.SDPMedia, sources: Mapping[int, SourceInfo]) -> None:
        for group_attribute in sdp_media.get_attributes(sdp.SSRCGroupAttribute):
            group = SourceGroupInfo(group_attribute.semantics, list(group_attribute.ssrcs))
            owner: TrackInfo | None = None
            for ssrc in group.ssrcs:
                source = sources.get(ssrc)
                track: TrackInfo | None = None
                if source is not None and source.stream_id is not None:
                    stream = self._streams[source.stream_id]
                    track = stream.get_track(source.track_id or "")
                if track is None:
                    raise SDPReferenceError(
                        f"ssrc-group {group.semantics} references ssrc {ssrc} without a track",
                        ssrc=ssrc,
                    )
                if owner is not None and track is not owner:
                    raise SDPReferenceError(
                        f"ssrc-group {group.semantics} spans multiple tracks", ssrc=ssrc
                    )
                owner = track
            assert owner is not None
            owner.add_source_group(group)

    def to_session(self) -> sdp.SDPSession:
        """Build the SDP wire records tree for this session description."""
        session = sdp.SDPSession(
            version=sdp.SDPSessionVersion(value="0"),
            origin=sdp.SDPSessionOrigin(
                username=DEFAULT_ORIGIN_USERNAME,
                sess_id=str(int(time.time() * 1000)),
                sess_version=str(self._version),
                nettype="IN",
                addrtype="IP4",
                unicast_address=DEFAULT_ORIGIN_ADDRESS,
            ),
            name=sdp.SDPSessionName(value=DEFAULT_SESSION_NAME),
            connection=sdp.SDPSessionConnection(
                nettype="IN", addrtype="IP4", address=DEFAULT_CONNECTION_ADDRESS
            ),
            time=[sdp.SDPTime(time=sdp.SDPTimeTime(start_time=0, stop_time=0))],
        )
        if self._ice is not None and self._ice.lite:
            session.add_attribute(sdp.ICELiteFlag())
        session.add_attribute(
            sdp.MSIDSemanticAttribute(
                semantic=DEFAULT_MSID_SEMANTIC, token=DEFAULT_MSID_SEMANTIC_TOKEN
            )
        )

        for media in self._medias:
            session.media.append(self._build_media(media))

        self._attach_tracks(session.media)

        session.add_attribute(
            sdp.GroupAttribute(
                semantics=BUNDLE_SEMANTICS, mids=[media.id for media in self._medias]
            )
        )
        return session

    def _build_media(self, media: MediaInfo) -> sdp.SDPMedia:
        formats: list[str] = []
        for codec in media.codecs.values():
            formats.append(str(codec.payload_type))
            if codec.rtx is not None:
                formats.append(str(codec.rtx))

        sdp_media = sdp.SDPMedia(
            media=sdp.SDPMediaMedia(
                media=media.type,
                port=DEFAULT_MEDIA_PORT,
                protocol=DEFAULT_MEDIA_PROTOCOL,
                formats=formats,
            )
        )
        if media.bitrate > 0:
            sdp_media.bandwidth.append(
                sdp.SDPMediaBandwidth(bwtype=BANDWIDTH_TYPE_AS, bandwidth=media.bitrate)
            )

        sdp_media.add_attribute(sdp.get_media_flow_attribute(media.direction.value))
        sdp_media.add_attribute(sdp.RTCPMuxFlag())
        sdp_media.add_attribute(sdp.RTCPReducedSizeFlag())
        sdp_media.add_attribute(sdp.MidAttribute(value=media.id))

        for candidate in self._candidates:
            sdp_media.add_attribute(candidate.to_attribute())
        if self._ice is not None:
            sdp_media.add_attribute(sdp.ICEUfragMediaAttribute(value=self._ice.ufrag))
            sdp_media.add_attribute(sdp.ICEPwdMediaAttribute(value=self._ice.pwd))
        if self._dtls is not None:
            sdp_media.add_attribute(
                sdp.FingerprintMediaAttribute(
                    hash=self._dtls.hash, fingerprint=self._dtls.fingerprint
                )
            )
            sdp_media.add_attribute(sdp.SetupMediaAttribute(value=self._dtls.setup.value))

        is_video = media.type.lower() == "video"
        for codec in media.codecs.values():
            for attribute in self._build_codec_attributes(codec, is_video):
                sdp_media.add_attribute(attribute)

        for ext_id, uri in media.extensions.items():
            sdp_media.add_attribute(sdp.ExtMapAttribute(id=ext_id, uri=uri))

        for rid in media.rids.values():
            params: dict[str, str] = {}
            if rid.formats:
                params["pt"] = ",".join(map(str, rid.formats))
            params.update(rid.params)
            sdp_media.add_attribute(
                sdp.RIDAttribute(
                    id=rid.id,
                    direction=rid.direction.value,
                    params=sdp.serialize_params(params) or None,
                )
            )

        if media.simulcast is not None:
            simulcast_lists: list[tuple[str, str]] = []
            for direction in (DirectionWay.SEND, DirectionWay.RECV):
                streams = media.simulcast.get_simulcast_streams(direction)
                if not streams:
                    continue
                stream_list = sdp.serialize_simulcast_stream_list([
                    [sdp.SimulcastStreamId(scid=stream.id, paused=stream.paused) for stream in alternatives]
                    for alternatives in streams
                ])
                simulcast_lists.append((direction.value, stream_list))
            if simulcast_lists:
                (dir1, list1), *rest = simulcast_lists
                dir2, list2 = rest[0] if rest else (None, None)
                sdp_media.add_attribute(
                    sdp.SimulcastAttribute(dir1=dir1, list1=list1, dir2=dir2, list2=list2)
                )

        return sdp_media

    @staticmethod
    def _build_codec_attributes(codec: CodecInfo, is_video: bool) -> list[sdp.SDPMediaAttribute]:
        attributes: list[sdp.SDPMediaAttribute] = []
        feedback: list[tuple[str, str | None]] = []
        if is_video:
            attributes.append(
                sdp.RTPMapAttribute(
                    payload_type=codec.payload_type,
                    encoding_name=codec.codec,
                    clock_rate=VIDEO_CLOCK_RATE,
                )
            )
            if codec.codec.lower() != FLEXFEC_CODEC_NAME:
                feedback.extend(VIDEO_RTCP_FEEDBACK)
        elif codec.codec.lower() == "opus":
            attributes.append(
                sdp.RTPMapAttribute(
                    payload_type=codec.payload_type,
                    encoding_name=codec.codec,
                    clock_rate=OPUS_CLOCK_RATE,
                    encoding_parameters=str(OPUS_CHANNELS),
                )
            )
        else:
            attributes.append(
                sdp.RTPMapAttribute(
                    payload_type=codec.payload_type,
                    encoding_name=codec.codec,
                    clock_rate=DEFAULT_AUDIO_CLOCK_RATE,
                )
            )
        feedback.append(TRANSPORT_CC_FEEDBACK)
        attributes.extend(
            sdp.RTCPFeedbackAttribute(payload_type=codec.payload_type, type=fb_type, subtype=fb_subtype)
            for fb_type, fb_subtype in feedback
        )
        if codec.params:
            attributes.append(
                sdp.FMTPAttribute(
                    format=codec.payload_type,
                    format_specific_parameters=sdp.serialize_params(codec.params),
                )
            )
        if codec.rtx is not None:
            attributes.append(
                sdp.RTPMapAttribute(
                    payload_type=codec.rtx, encoding_name=RTX_CODEC_NAME, clock_rate=RTX_CLOCK_RATE
                )
            )
            attributes.append(
                sdp.FMTPAttribute(
                    format=codec.rtx, format_specific_parameters=f"apt={codec.payload_type}"
                )
            )
        return attributes

    def _attach_tracks(self, sdp_medias: list[sdp.SDPMedia]) -> None:
        for stream in self._streams.values():
            for track in stream.tracks.values():
                if track.media_id is not None:
                    # unified plan, bound to a single media line
                    matching = [m for m in sdp_medias if m.mid == track.media_id][:1]
                else:
                    # plan B, every media line of the same type
                    matching = [
                        m for m in sdp_medias if m.type.lower() == track.media_type.lower()
                    ]
                if not matching:
                    _logger.warning(
                        f"Track {track.id} of stream {stream.id} matches no media line, skipping"
                    )
                    continue
                for index, sdp_media in enumerate(matching):
                    # source groups are announced once, on the first matching line
                    self._attach_track(sdp_media, stream, track, with_groups=index == 0)

    @staticmethod
    def _attach_track(
        sdp_media: sdp.SDPMedia, stream: StreamInfo, track: TrackInfo, with_groups: bool = True
    ) -> None:
        if with_groups:
            for group in track.source_groups:
                sdp_media.add_attribute(
                    sdp.SSRCGroupAttribute(semantics=group.semantics, ssrcs=list(group.ssrcs))
                )
        is_plan_b = track.media_id is None
        for ssrc in track.ssrcs:
            sdp_media.add_attribute(sdp.SSRCAttribute(ssrc=ssrc, attribute="cname", value=stream.id))
            if is_plan_b:
                sdp_media.add_attribute(
                    sdp.SSRCAttribute(ssrc=ssrc, attribute="msid", value=f"{stream.id} {track.id}")
                )
        if not is_plan_b:
            sdp_media.add_attribute(sdp.MSIDAttribute(stream_id=stream.id, track_id=track.id))

    def to_string(self) -> str:
        """Serialize the session description to SDP text."""
        return sdp.write(self.to_session())

    def __str__(self) -> str:
        return self.to_string()

    def plain(self) -> dict[str, Any]:  # noqa: D102
        return dict(
            version=self._version,
            medias=[media.plain() for media in self._medias],
            streams=[stream.plain() for stream in self._streams.values()],
            candidates=[candidate.plain() for candidate in self._candidates],
            ice=to_plain(self._ice),
            dtls=to_plain(self._dtls),
        )

    def clone(self) -> SDPInfo:
        """Return an independent deep copy of this session description."""
        cloned = SDPInfo(self._version)
        for media in self._medias:
            cloned.add_media(media.clone())
        for stream in self._streams.values():
            cloned.add_stream(stream.clone())
        for candidate in self._candidates:
            cloned.add_candidate(candidate.clone())
        cloned.ice = self._ice.clone() if self._ice is not None else None
        cloned.dtls = self._dtls.clone() if self._dtls is not None else None
        return cloned

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(version={self._version!r}, "
            f"medias={self._medias!r}, streams={list(self._streams)!r})"
        )
