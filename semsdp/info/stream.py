"""Semantic stream entities: media streams, tracks, their sources and encodings."""

from __future__ import annotations

import dataclasses
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Sequence

from typing_extensions import Self

from semsdp.helpers import PlainConvertible, slots_dataclass

from .media import CodecInfo


__all__ = [
    "SourceInfo",
    "SourceGroupInfo",
    "TrackEncodingInfo",
    "TrackInfo",
    "StreamInfo",
]


@slots_dataclass
class SourceInfo(PlainConvertible):
    """
    The attributes collected for a single synchronization source (ssrc).

    Used to correlate the ``a=ssrc`` lines of a media section, which can
    carry the attributes of the same source spread over multiple lines.
    """

    ssrc: int
    cname: str | None = None
    stream_id: str | None = None
    track_id: str | None = None

    def plain(self) -> dict[str, Any]:  # noqa: D102
        return dict(
            ssrc=self.ssrc,
            cname=self.cname,
            stream_id=self.stream_id,
            track_id=self.track_id,
        )

    def clone(self) -> Self:
        """Return an independent copy of this object."""
        return dataclasses.replace(self)


@slots_dataclass
class SourceGroupInfo(PlainConvertible):
    """
    A named group of ssrcs, e.g. ``FID`` for RTX or ``SIM`` for simulcast, see :rfc:`5576#section-4.2`.

    :param semantics: the group semantics.
    :param ssrcs: the grouped ssrcs, in order.
    """

    semantics: str
    ssrcs: list[int]

    def __post_init__(self) -> None:
        if not self.ssrcs:
            raise ValueError(f"Source group {self.semantics} must have at least one ssrc")

    def plain(self) -> dict[str, Any]:  # noqa: D102
        return dict(semantics=self.semantics, ssrcs=list(self.ssrcs))

    def clone(self) -> Self:
        """Return an independent copy of this object."""
        return dataclasses.replace(self, ssrcs=list(self.ssrcs))


@slots_dataclass
class TrackEncodingInfo(PlainConvertible):
    """
    A single (simulcast) encoding of a track.

    :param id: the rid of the encoding.
    :param paused: whether the encoding is paused.
    :param codecs: the codecs the encoding is restricted to, keyed by payload type.
    :param params: the rid restrictions of the encoding, e.g. ``max-width``.
    """

    id: str
    paused: bool = False
    codecs: dict[int, CodecInfo] = dataclasses.field(default_factory=dict)
    params: dict[str, str] = dataclasses.field(default_factory=dict)

    def add_codec(self, codec: CodecInfo) -> None:
        """Restrict the encoding to the given codec too."""
        self.codecs[codec.payload_type] = codec

    def plain(self) -> dict[str, Any]:  # noqa: D102
        return dict(
            id=self.id,
            paused=self.paused,
            codecs=[codec.plain() for codec in self.codecs.values()],
            params=dict(self.params),
        )

    def clone(self) -> Self:
        """Return an independent copy of this object."""
        return dataclasses.replace(
            self,
            codecs={pt: codec.clone() for pt, codec in self.codecs.items()},
            params=dict(self.params),
        )


class TrackInfo(PlainConvertible):
    """
    A media track of a stream.

    :param media_type: the media type of the track, e.g. ``audio`` or ``video``.
    :param id: the track id.
    :param media_id: the mid of the media line carrying the track (unified plan only).
    """

    def __init__(self, media_type: str, id: str, media_id: str | None = None) -> None:  # noqa: A002
        self._media_type: str = media_type
        self._id: str = id
        self._media_id: str | None = media_id
        self._ssrcs: list[int] = []
        self._source_groups: list[SourceGroupInfo] = []
        self._encodings: list[list[TrackEncodingInfo]] = []

    @property
    def media_type(self) -> str:
        """The media type of the track."""
        return self._media_type

    @property
    def id(self) -> str:
        """The track id."""
        return self._id

    @property
    def media_id(self) -> str | None:
        """The mid of the media line carrying this track, if bound to one (unified plan)."""
        return self._media_id

    @media_id.setter
    def media_id(self, media_id: str | None) -> None:
        self._media_id = media_id

    @property
    def ssrcs(self) -> tuple[int, ...]:
        """The ssrcs of the track, in order."""
        return tuple(self._ssrcs)

    def add_ssrc(self, ssrc: int) -> None:
        """Add an ssrc to the track. Adding an ssrc already in the track has no effect."""
        if ssrc not in self._ssrcs:
            self._ssrcs.append(ssrc)

    def remove_ssrc(self, ssrc: int) -> None:
        """Remove an ssrc from the track, together with the source groups referencing it."""
        self._ssrcs.remove(ssrc)
        self._source_groups = [
            group for group in self._source_groups if ssrc not in group.ssrcs
        ]

    @property
    def source_groups(self) -> tuple[SourceGroupInfo, ...]:
        """The source groups of the track, in order."""
        return tuple(self._source_groups)

    def add_source_group(self, group: SourceGroupInfo) -> None:
        """Add a source group to the track. All the grouped ssrcs must belong to the track."""
        missing = [ssrc for ssrc in group.ssrcs if ssrc not in self._ssrcs]
        if missing:
            raise ValueError(
                f"Source group {group.semantics} references ssrcs {missing} "
                f"not belonging to track {self._id}"
            )
        self._source_groups.append(group)

    def get_source_group(self, semantics: str) -> SourceGroupInfo | None:
        """Get the first source group with the given semantics (case-insensitive), if any."""
        for group in self._source_groups:
            if group.semantics.lower() == semantics.lower():
                return group
        return None

    def has_source_group(self, semantics: str) -> bool:
        """Whether the track has a source group with the given semantics."""
        return self.get_source_group(semantics) is not None

    @property
    def encodings(self) -> tuple[tuple[TrackEncodingInfo, ...], ...]:
        """The simulcast encodings of the track, as ordered lists of alternatives."""
        return tuple(tuple(alternatives) for alternatives in self._encodings)

    def set_encodings(self, encodings: Iterable[Sequence[TrackEncodingInfo]]) -> None:
        """Replace the simulcast encodings of the track with copies of the given ones."""
        self._encodings = [
            [encoding.clone() for encoding in alternatives] for alternatives in encodings
        ]

    def plain(self) -> dict[str, Any]:  # noqa: D102
        return dict(
            media_type=self._media_type,
            id=self._id,
            media_id=self._media_id,
            ssrcs=list(self._ssrcs),
            source_groups=[group.plain() for group in self._source_groups],
            encodings=[
                [encoding.plain() for encoding in alternatives]
                for alternatives in self._encodings
            ],
        )

    def clone(self) -> TrackInfo:
        """Return an independent deep copy of this track."""
        cloned = TrackInfo(self._media_type, self._id, self._media_id)
        for ssrc in self._ssrcs:
            cloned.add_ssrc(ssrc)
        for group in self._source_groups:
            cloned.add_source_group(group.clone())
        cloned.set_encodings(self._encodings)
        return cloned

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(media_type={self._media_type!r}, id={self._id!r}, "
            f"media_id={self._media_id!r}, ssrcs={self._ssrcs!r})"
        )


class StreamInfo(PlainConvertible):
    """
    A media stream, a named collection of tracks.

    :param id: the stream id.
    """

    def __init__(self, id: str) -> None:  # noqa: A002
        self._id: str = id
        self._tracks: dict[str, TrackInfo] = {}

    @property
    def id(self) -> str:
        """The stream id."""
        return self._id

    @property
    def tracks(self) -> Mapping[str, TrackInfo]:
        """The tracks of the stream, keyed by track id, in insertion order."""
        return MappingProxyType(self._tracks)

    def add_track(self, track: TrackInfo) -> None:
        """Add a track to the stream, replacing any previous one with the same id."""
        self._tracks[track.id] = track

    def remove_track(self, track_id: str) -> TrackInfo | None:
        """Remove and return the track with the given id, if any."""
        return self._tracks.pop(track_id, None)

    def remove_all_tracks(self) -> None:
        """Remove all the tracks from the stream."""
        self._tracks.clear()

    def get_track(self, track_id: str) -> TrackInfo | None:
        """Get the track with the given id, if any."""
        return self._tracks.get(track_id)

    def get_first_track(self, media_type: str) -> TrackInfo | None:
        """Get the first track of the given media type (case-insensitive), if any."""
        for track in self._tracks.values():
            if track.media_type.lower() == media_type.lower():
                return track
        return None

    def plain(self) -> dict[str, Any]:  # noqa: D102
        return dict(id=self._id, tracks=[track.plain() for track in self._tracks.values()])

    def clone(self) -> StreamInfo:
        """Return an independent deep copy of this stream."""
        cloned = StreamInfo(self._id)
        for track in self._tracks.values():
            cloned.add_track(track.clone())
        return cloned

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id!r}, tracks={list(self._tracks)!r})"
