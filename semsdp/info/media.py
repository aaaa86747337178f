"""Semantic media line entities: codecs, rids, simulcast and the media line itself."""

from __future__ import annotations

import dataclasses
import logging
from types import MappingProxyType
from typing import Any, Collection, Iterable, Mapping, Sequence

from typing_extensions import Self

from semsdp.constants import (
    DYNAMIC_PAYLOAD_TYPES,
    IGNORED_CODEC_NAMES,
    RTX_CODEC_NAME,
    STATIC_PAYLOAD_TYPES,
)
from semsdp.helpers import PlainConvertible, slots_dataclass, to_plain

from .enums import Direction, DirectionWay


__all__ = [
    "CodecInfo",
    "RIDInfo",
    "SimulcastStreamInfo",
    "SimulcastInfo",
    "MediaCapabilities",
    "MediaInfo",
]


_logger = logging.getLogger(__name__)


@slots_dataclass
class CodecInfo(PlainConvertible):
    """
    A codec negotiated on a media line.

    :param codec: the codec (encoding) name, e.g. ``opus`` or ``VP8``.
    :param payload_type: the RTP payload type.
    :param params: the format specific parameters, from the ``fmtp`` line.
    :param rtx: the payload type of the associated RTX retransmission stream, if any.
    """

    codec: str
    payload_type: int
    params: dict[str, str] = dataclasses.field(default_factory=dict)
    rtx: int | None = None

    def __post_init__(self) -> None:
        if self.rtx is not None and self.rtx == self.payload_type:
            raise ValueError(
                f"RTX payload type {self.rtx} must differ from the codec payload type"
            )

    def has_rtx(self) -> bool:
        """Whether the codec has an associated RTX payload type."""
        return self.rtx is not None

    @classmethod
    def map_from_names(cls, names: Iterable[str], rtx: bool = False) -> dict[int, CodecInfo]:
        """
        Build a payload type to codec mapping from a list of codec names.

        Well-known codecs get their static payload type, all the others are
        assigned consecutive dynamic payload types.

        :param names: the codec names.
        :param rtx: whether to also assign an RTX payload type to the dynamic codecs.
        :return: the codecs, keyed by payload type.
        """
        dynamic_payload_types = iter(DYNAMIC_PAYLOAD_TYPES)

        def next_dynamic() -> int:
            try:
                return next(dynamic_payload_types)
            except StopIteration:
                raise ValueError("Ran out of dynamic payload types") from None

        codecs: dict[int, CodecInfo] = {}
        for name in names:
            static_payload_type = STATIC_PAYLOAD_TYPES.get(name.upper())
            if static_payload_type is not None:
                codec = cls(codec=name, payload_type=static_payload_type)
            else:
                codec = cls(codec=name, payload_type=next_dynamic())
                if rtx and name.upper() not in IGNORED_CODEC_NAMES:
                    codec.rtx = next_dynamic()
            codecs[codec.payload_type] = codec
        return codecs

    def plain(self) -> dict[str, Any]:  # noqa: D102
        return dict(
            codec=self.codec,
            payload_type=self.payload_type,
            params=dict(self.params),
            rtx=self.rtx,
        )

    def clone(self) -> Self:
        """Return an independent copy of this object."""
        return dataclasses.replace(self, params=dict(self.params))


@slots_dataclass
class RIDInfo(PlainConvertible):
    """
    A restriction identifier (rid) declared on a media line, see :rfc:`8851`.

    :param id: the rid identifier.
    :param direction: whether the rid applies to sent or received streams.
    :param formats: the payload types the rid is restricted to, if any.
    :param params: the other restrictions, e.g. ``max-width``.
    """

    id: str
    direction: DirectionWay
    formats: list[int] = dataclasses.field(default_factory=list)
    params: dict[str, str] = dataclasses.field(default_factory=dict)

    def plain(self) -> dict[str, Any]:  # noqa: D102
        return dict(
            id=self.id,
            direction=to_plain(self.direction),
            formats=list(self.formats),
            params=dict(self.params),
        )

    def clone(self) -> Self:
        """Return an independent copy of this object."""
        return dataclasses.replace(self, formats=list(self.formats), params=dict(self.params))


@slots_dataclass
class SimulcastStreamInfo(PlainConvertible):
    """A simulcast stream reference (by rid), possibly paused."""

    id: str
    paused: bool = False

    def plain(self) -> dict[str, Any]:  # noqa: D102
        return dict(id=self.id, paused=self.paused)

    def clone(self) -> Self:
        """Return an independent copy of this object."""
        return dataclasses.replace(self)


class SimulcastInfo(PlainConvertible):
    """
    Simulcast streams of a media line, for both send and receive directions.

    For each direction, streams are kept as an ordered list of alternative
    lists, where the outer order is the preference order, and the streams
    within an alternative list are equivalent choices.
    """

    def __init__(self) -> None:
        self._streams: dict[DirectionWay, list[list[SimulcastStreamInfo]]] = {
            DirectionWay.SEND: [],
            DirectionWay.RECV: [],
        }

    def add_simulcast_alternative_streams(
        self, direction: DirectionWay, alternatives: Sequence[SimulcastStreamInfo]
    ) -> None:
        """Append a list of alternative streams for the given direction."""
        if not alternatives:
            raise ValueError("Simulcast alternative streams cannot be empty")
        self._streams[direction].append(list(alternatives))

    def add_simulcast_stream(self, direction: DirectionWay, stream: SimulcastStreamInfo) -> None:
        """Append a stream without alternatives for the given direction."""
        self.add_simulcast_alternative_streams(direction, [stream])

    def get_simulcast_streams(
        self, direction: DirectionWay
    ) -> tuple[tuple[SimulcastStreamInfo, ...], ...]:
        """Get the alternative streams lists for the given direction."""
        return tuple(tuple(alternatives) for alternatives in self._streams[direction])

    def reverse(self) -> SimulcastInfo:
        """Return a copy with the send and receive streams swapped, e.g. for answering."""
        reversed_info = SimulcastInfo()
        for direction, streams in self._streams.items():
            for alternatives in streams:
                reversed_info.add_simulcast_alternative_streams(
                    direction.reverse(), [stream.clone() for stream in alternatives]
                )
        return reversed_info

    def plain(self) -> dict[str, Any]:  # noqa: D102
        return {
            direction.value: to_plain(streams) for direction, streams in self._streams.items()
        }

    def clone(self) -> SimulcastInfo:
        """Return an independent copy of this object."""
        cloned = SimulcastInfo()
        for direction, streams in self._streams.items():
            for alternatives in streams:
                cloned.add_simulcast_alternative_streams(
                    direction, [stream.clone() for stream in alternatives]
                )
        return cloned

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.plain()!r})"


@slots_dataclass(frozen=True)
class MediaCapabilities:
    """
    Local capabilities for a media type, used to answer an offered media line.

    :param codecs: the supported codecs. Plain names accept the offered codec
        parameters as they are, while :class:`CodecInfo` objects answer with their own parameters.
    :param rtx: whether RTX retransmission streams are supported.
    :param extensions: the supported RTP header extensions URIs.
    :param simulcast: whether receiving simulcast is supported.
    """

    codecs: Collection[str | CodecInfo] = ()
    rtx: bool = False
    extensions: Collection[str] = ()
    simulcast: bool = False

    def get_codec(self, name: str) -> str | CodecInfo | None:
        """Find the supported codec with the given name (case-insensitive), if any."""
        for codec in self.codecs:
            codec_name = codec.codec if isinstance(codec, CodecInfo) else codec
            if codec_name.lower() == name.lower():
                return codec
        return None


class MediaInfo(PlainConvertible):
    """
    A media line of a session description.

    :param id: the media identification tag (mid).
    :param type: the media type, e.g. ``audio`` or ``video``.
    """

    def __init__(self, id: str, type: str) -> None:  # noqa: A002
        self._id: str = id
        self._type: str = type
        self._direction: Direction = Direction.SENDRECV
        self._codecs: dict[int, CodecInfo] = {}
        self._extensions: dict[int, str] = {}
        self._rids: dict[str, RIDInfo] = {}
        self._simulcast: SimulcastInfo | None = None
        self._bitrate: int = 0

    @property
    def id(self) -> str:
        """The media identification tag (mid)."""
        return self._id

    @property
    def type(self) -> str:
        """The media type, e.g. ``audio`` or ``video``."""
        return self._type

    @property
    def direction(self) -> Direction:
        """The media flow direction."""
        return self._direction

    @direction.setter
    def direction(self, direction: Direction) -> None:
        self._direction = direction

    @property
    def bitrate(self) -> int:
        """The maximum bitrate in kbps (``b=AS``), or 0 if unlimited."""
        return self._bitrate

    @bitrate.setter
    def bitrate(self, bitrate: int) -> None:
        if bitrate < 0:
            raise ValueError(f"Bitrate must be non-negative, got {bitrate}")
        self._bitrate = bitrate

    @property
    def simulcast(self) -> SimulcastInfo | None:
        """The simulcast streams, if any."""
        return self._simulcast

    @simulcast.setter
    def simulcast(self, simulcast: SimulcastInfo | None) -> None:
        self._simulcast = simulcast

    @property
    def codecs(self) -> Mapping[int, CodecInfo]:
        """The codecs of the media line, keyed by payload type, in declaration order."""
        return MappingProxyType(self._codecs)

    def add_codec(self, codec: CodecInfo) -> None:
        """Add a codec to the media line. Its payload types must not be in use already."""
        for payload_type in (codec.payload_type, codec.rtx):
            if payload_type is not None and self._get_payload_type_owner(payload_type):
                raise ValueError(f"Payload type {payload_type} already in use")
        self._codecs[codec.payload_type] = codec

    def remove_codec(self, payload_type: int) -> CodecInfo:
        """Remove and return the codec with the given payload type."""
        return self._codecs.pop(payload_type)

    def _get_payload_type_owner(self, payload_type: int) -> CodecInfo | None:
        for codec in self._codecs.values():
            if payload_type in (codec.payload_type, codec.rtx):
                return codec
        return None

    def get_codec(self, name: str) -> CodecInfo | None:
        """Get the first codec with the given name (case-insensitive), if any."""
        for codec in self._codecs.values():
            if codec.codec.lower() == name.lower():
                return codec
        return None

    def get_codec_for_type(self, payload_type: int) -> CodecInfo | None:
        """Get the codec with the given (primary) payload type, if any."""
        return self._codecs.get(payload_type)

    def has_codec(self, name: str) -> bool:
        """Whether the media line has a codec with the given name (case-insensitive)."""
        return self.get_codec(name) is not None

    @property
    def extensions(self) -> Mapping[int, str]:
        """The RTP header extensions URIs, keyed by extension id, in declaration order."""
        return MappingProxyType(self._extensions)

    def add_extension(self, ext_id: int, uri: str) -> None:
        """Add an RTP header extension to the media line."""
        self._extensions[ext_id] = uri

    @property
    def rids(self) -> Mapping[str, RIDInfo]:
        """The rids declared on the media line, keyed by id."""
        return MappingProxyType(self._rids)

    def add_rid(self, rid: RIDInfo) -> None:
        """Add a rid to the media line."""
        self._rids[rid.id] = rid

    def get_rid(self, rid_id: str) -> RIDInfo | None:
        """Get the rid with the given id, if any."""
        return self._rids.get(rid_id)

    def answer(self, capabilities: MediaCapabilities | None) -> MediaInfo:
        """
        Build the answer for this (offered) media line, given the local capabilities.

        Without capabilities the answer is an inactive media line with no codecs.
        Otherwise the direction is reversed, and only the supported codecs and
        header extensions are kept, with the offered payload types and ids.
        When simulcast is supported, the offered simulcast streams and rids are reversed.
        """
        answer = MediaInfo(self._id, self._type)
        if capabilities is None:
            answer.direction = Direction.INACTIVE
            return answer

        answer.direction = self._direction.reverse()

        for codec in self._codecs.values():
            supported = capabilities.get_codec(codec.codec)
            if supported is None:
                _logger.debug(f"Codec {codec.codec} not supported, not answering it")
                continue
            params = supported.params if isinstance(supported, CodecInfo) else codec.params
            answer.add_codec(
                CodecInfo(
                    codec=codec.codec,
                    payload_type=codec.payload_type,
                    params=dict(params),
                    rtx=codec.rtx if capabilities.rtx else None,
                )
            )

        for ext_id, uri in self._extensions.items():
            if uri in capabilities.extensions:
                answer.add_extension(ext_id, uri)

        if capabilities.simulcast and self._simulcast is not None:
            answer.simulcast = self._simulcast.reverse()
            for rid in self._rids.values():
                answer.add_rid(dataclasses.replace(rid.clone(), direction=rid.direction.reverse()))

        return answer

    def plain(self) -> dict[str, Any]:  # noqa: D102
        return dict(
            id=self._id,
            type=self._type,
            direction=to_plain(self._direction),
            codecs=[codec.plain() for codec in self._codecs.values()],
            extensions=dict(self._extensions),
            rids=[rid.plain() for rid in self._rids.values()],
            simulcast=to_plain(self._simulcast),
            bitrate=self._bitrate,
        )

    def clone(self) -> MediaInfo:
        """Return an independent deep copy of this media line."""
        cloned = MediaInfo(self._id, self._type)
        cloned.direction = self._direction
        cloned.bitrate = self._bitrate
        for codec in self._codecs.values():
            cloned.add_codec(codec.clone())
        for ext_id, uri in self._extensions.items():
            cloned.add_extension(ext_id, uri)
        for rid in self._rids.values():
            cloned.add_rid(rid.clone())
        if self._simulcast is not None:
            cloned.simulcast = self._simulcast.clone()
        return cloned

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id!r}, type={self._type!r})"
