"""SDP media section and related fields and attributes definitions and implementations."""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field as dataclass_field
from typing import Mapping, Sequence

from frozendict import frozendict
from typing_extensions import Self, override

from semsdp.exceptions import SDPParseError
from semsdp.helpers import StrValueMixin, slots_dataclass

from .common import (
    FingerprintAttribute,
    FlagAttribute,
    ICEPwdAttribute,
    ICEUfragAttribute,
    InactiveFlag,
    MediaFlowAttribute,
    RecvOnlyFlag,
    SDPAttribute,
    SDPAttributeField,
    SDPBandwidthField,
    SDPConnectionField,
    SDPField,
    SDPInformationField,
    SDPSection,
    SendOnlyFlag,
    SendRecvFlag,
    SetupAttribute,
    UnknownAttribute,
    ValueAttribute,
)


__all__ = [
    "SDPMediaFields",
    "SDPMediaMedia",
    "SDPMediaTitle",
    "SDPMediaConnection",
    "SDPMediaBandwidth",
    "SDPMediaAttribute",
    "UnknownMediaAttribute",
    "RecvOnlyMediaFlag",
    "SendRecvMediaFlag",
    "SendOnlyMediaFlag",
    "InactiveMediaFlag",
    "MidAttribute",
    "MSIDAttribute",
    "RTPMapAttribute",
    "FMTPAttribute",
    "RTCPFeedbackAttribute",
    "RTCPMuxFlag",
    "RTCPReducedSizeFlag",
    "ExtMapAttribute",
    "RIDAttribute",
    "SimulcastStreamId",
    "SimulcastAttribute",
    "SSRCAttribute",
    "SSRCGroupAttribute",
    "CandidateAttribute",
    "EndOfCandidatesFlag",
    "FingerprintMediaAttribute",
    "SetupMediaAttribute",
    "ICEUfragMediaAttribute",
    "ICEPwdMediaAttribute",
    "SDPMediaAttributeField",
    "parse_params",
    "serialize_params",
    "parse_simulcast_stream_list",
    "serialize_simulcast_stream_list",
    "get_media_flow_attribute",
    "get_media_flow_type",
    "SDPMedia",
]


def parse_params(raw_value: str) -> dict[str, str]:
    """
    Parse a ``key=value;key=value`` parameters string, like the ones in ``fmtp`` or ``rid``.

    Keys and values are stripped of surrounding whitespace.
    Parameters without a ``=`` are kept with an empty value.
    """
    params: dict[str, str] = {}
    for param in raw_value.split(";"):
        key, _, value = param.partition("=")
        key = key.strip()
        if not key:
            continue
        params[key] = value.strip()
    return params


def serialize_params(params: Mapping[str, object]) -> str:
    """
    Serialize parameters into a ``key=value;key=value`` string.

    Empty values are written as bare keys.
    """
    return ";".join(
        key if value is None or value == "" else f"{key}={value}"
        for key, value in params.items()
    )


@slots_dataclass(frozen=True)
class SimulcastStreamId:
    """A single simulcast stream (rid) reference, possibly paused."""

    scid: str
    paused: bool = False

    def __str__(self) -> str:
        return f"~{self.scid}" if self.paused else self.scid


def parse_simulcast_stream_list(raw_value: str) -> list[list[SimulcastStreamId]]:
    """
    Parse a simulcast stream list, as defined in :rfc:`8853#section-5.1`.

    Streams are ``;``-separated, each one is a ``,``-separated list of alternative
    stream ids, optionally prefixed by ``~`` when paused.

    Grammar::
        sc-str-list = sc-alt-list *( ";" sc-alt-list )
        sc-alt-list = sc-id *( "," sc-id )
        sc-id = [sc-id-paused] rid-id
    """
    streams: list[list[SimulcastStreamId]] = []
    raw_value = raw_value.strip()
    # early drafts prefixed the list with "rid="
    if raw_value.startswith("rid="):
        raw_value = raw_value[len("rid=") :]
    for raw_alternatives in raw_value.split(";"):
        alternatives: list[SimulcastStreamId] = []
        for raw_id in raw_alternatives.split(","):
            scid = raw_id.strip()
            if not scid:
                continue
            paused = scid.startswith("~")
            alternatives.append(SimulcastStreamId(scid=scid.lstrip("~"), paused=paused))
        if alternatives:
            streams.append(alternatives)
    return streams


def serialize_simulcast_stream_list(
    streams: Sequence[Sequence[SimulcastStreamId]],
) -> str:
    """Serialize a simulcast stream list, the inverse of :func:`parse_simulcast_stream_list`."""
    return ";".join(
        ",".join(str(alternative) for alternative in alternatives)
        for alternatives in streams
    )


@dataclass
class SDPMediaFields(SDPField, ABC, registry=True, registry_attr="_type"):
    """Base class for SDP media description fields."""


@slots_dataclass
class SDPMediaMedia(SDPMediaFields):
    """
    SDP media field, defined in :rfc:`8866#section-5.14`.

    Grammar::
        m=<media> <port> <proto> <fmt> ...
        m=<media> <port>/<number of ports> <proto> <fmt> ...
    """

    _type = "m"
    _description = "media name and transport address"

    media: str
    port: int
    protocol: str
    formats: list[str] = dataclass_field(default_factory=list)
    number_of_ports: int | None = None

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        media, ports_spec, protocol, *formats = raw_value.split()
        port_str, _, number_of_ports_str = ports_spec.partition("/")
        return cls(
            media=media,
            port=int(port_str),
            protocol=protocol,
            formats=formats,
            number_of_ports=int(number_of_ports_str) if number_of_ports_str else None,
        )

    def serialize(self) -> str:  # noqa: D102
        ports_spec = str(self.port)
        if self.number_of_ports is not None:
            ports_spec += f"/{self.number_of_ports}"
        return " ".join((self.media, ports_spec, self.protocol, *self.formats))


@slots_dataclass
class SDPMediaTitle(SDPInformationField, SDPMediaFields):
    """
    SDP media title field, defined in :rfc:`8866#section-5.4`.

    Grammar::
        i=<media title>
    """

    _description = "media title"


@slots_dataclass
class SDPMediaConnection(SDPConnectionField, SDPMediaFields):
    """
    SDP media connection field, defined in :rfc:`8866#section-5.7`.

    Grammar::
        c=<nettype> <addrtype> <connection-address>
    """

    _description = "connection information -- optional if included at session-level"


@slots_dataclass
class SDPMediaBandwidth(SDPBandwidthField, SDPMediaFields):
    """
    SDP media bandwidth field, defined in :rfc:`8866#section-5.8`.

    Grammar::
        b=<bwtype>:<bandwidth>
    """

    _description = "zero or more bandwidth information lines"


@dataclass
class SDPMediaAttribute(SDPAttribute, ABC, registry=True, registry_attr="_name"):
    """Base class for SDP media attributes."""


@slots_dataclass
class UnknownMediaAttribute(UnknownAttribute, SDPMediaAttribute):
    """Catch-all class for unsupported SDP media attributes."""


@slots_dataclass
class RecvOnlyMediaFlag(RecvOnlyFlag, SDPMediaAttribute):
    """SDP media attribute for recvonly media flow, defined in :rfc:`8866#section-6.7.1`."""


@slots_dataclass
class SendRecvMediaFlag(SendRecvFlag, SDPMediaAttribute):
    """SDP media attribute for sendrecv media flow, defined in :rfc:`8866#section-6.7.2`."""


@slots_dataclass
class SendOnlyMediaFlag(SendOnlyFlag, SDPMediaAttribute):
    """SDP media attribute for sendonly media flow, defined in :rfc:`8866#section-6.7.3`."""


@slots_dataclass
class InactiveMediaFlag(InactiveFlag, SDPMediaAttribute):
    """SDP media attribute for inactive media flow, defined in :rfc:`8866#section-6.7.4`."""


@slots_dataclass
class MidAttribute(StrValueMixin, ValueAttribute, SDPMediaAttribute):
    """
    SDP media identification attribute, defined in :rfc:`5888#section-4`.

    Grammar::
        mid:<identification-tag>
    """

    _name = "mid"


@slots_dataclass
class MSIDAttribute(SDPMediaAttribute):
    """
    SDP media stream identification attribute, defined in :rfc:`8830#section-2`.

    Grammar::
        msid:<stream id> [<track id>]
    """

    _name = "msid"
    _is_flag = False

    stream_id: str
    track_id: str | None = None

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        if raw_value is None:
            raise SDPParseError("msid attribute requires a value")
        stream_id, *rest = raw_value.split()
        return cls(stream_id=stream_id, track_id=rest[0] if rest else None)

    def serialize(self) -> str:  # noqa: D102
        if self.track_id is None:
            return self.stream_id
        return f"{self.stream_id} {self.track_id}"


@slots_dataclass
class RTPMapAttribute(SDPMediaAttribute):
    """
    SDP media attribute for RTP map, defined in :rfc:`8866#section-6.6`.

    Grammar::
        rtpmap:<payload type> <encoding name>/<clock rate>[/<encoding parameters>]
    """

    _name = "rtpmap"
    _is_flag = False

    payload_type: int
    encoding_name: str
    clock_rate: int
    encoding_parameters: str | None = None

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        if raw_value is None:
            raise SDPParseError("rtpmap attribute requires a value")
        payload_type, encoding = raw_value.strip().split(" ", maxsplit=1)
        encoding_name, clock_rate, *more = encoding.strip().split("/", maxsplit=2)
        return cls(
            payload_type=int(payload_type),
            encoding_name=encoding_name,
            clock_rate=int(clock_rate),
            encoding_parameters=more[0] if more else None,
        )

    def serialize(self) -> str:  # noqa: D102
        data = f"{self.payload_type} {self.encoding_name}/{self.clock_rate}"
        if self.encoding_parameters is not None:
            data += f"/{self.encoding_parameters}"
        return data


@slots_dataclass
class FMTPAttribute(SDPMediaAttribute):
    """
    SDP media attribute for RTP format parameters, defined in :rfc:`8866#section-6.15`.

    Grammar::
        fmtp:<format> <format specific parameters>
    """

    _name = "fmtp"
    _is_flag = False

    format: int
    format_specific_parameters: str

    @property
    def params(self) -> dict[str, str]:
        """The format specific parameters, parsed as ``key=value`` pairs."""
        return parse_params(self.format_specific_parameters)

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        if raw_value is None:
            raise SDPParseError("fmtp attribute requires a value")
        format_, _, format_specific_parameters = raw_value.strip().partition(" ")
        return cls(
            format=int(format_),
            format_specific_parameters=format_specific_parameters.strip(),
        )

    def serialize(self) -> str:  # noqa: D102
        return f"{self.format} {self.format_specific_parameters}"


@slots_dataclass
class RTCPFeedbackAttribute(SDPMediaAttribute):
    """
    SDP media attribute for RTCP feedback capabilities, defined in :rfc:`4585#section-4.2`.

    Grammar::
        rtcp-fb:<payload type | *> <type> [<subtype>]
    """

    _name = "rtcp-fb"
    _is_flag = False

    payload_type: int | str
    type: str
    subtype: str | None = None

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        if raw_value is None:
            raise SDPParseError("rtcp-fb attribute requires a value")
        payload_type, feedback_type, *rest = raw_value.split(maxsplit=2)
        return cls(
            payload_type=int(payload_type) if payload_type.isdigit() else payload_type,
            type=feedback_type,
            subtype=rest[0] if rest else None,
        )

    def serialize(self) -> str:  # noqa: D102
        data = f"{self.payload_type} {self.type}"
        if self.subtype is not None:
            data += f" {self.subtype}"
        return data


@slots_dataclass
class RTCPMuxFlag(FlagAttribute, SDPMediaAttribute):
    """SDP media attribute for RTP/RTCP multiplexing, defined in :rfc:`5761#section-5.1.1`."""

    _name = "rtcp-mux"


@slots_dataclass
class RTCPReducedSizeFlag(FlagAttribute, SDPMediaAttribute):
    """SDP media attribute for reduced-size RTCP, defined in :rfc:`5506#section-5`."""

    _name = "rtcp-rsize"


@slots_dataclass
class ExtMapAttribute(SDPMediaAttribute):
    """
    SDP media attribute for RTP header extensions, defined in :rfc:`8285#section-8`.

    Grammar::
        extmap:<value>["/"<direction>] <URI> <extensionattributes>
    """

    _name = "extmap"
    _is_flag = False

    id: int
    uri: str
    direction: str | None = None
    extension_attributes: str | None = None

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        if raw_value is None:
            raise SDPParseError("extmap attribute requires a value")
        raw_id, uri, *rest = raw_value.split(maxsplit=2)
        ext_id, _, direction = raw_id.partition("/")
        return cls(
            id=int(ext_id),
            uri=uri,
            direction=direction or None,
            extension_attributes=rest[0] if rest else None,
        )

    def serialize(self) -> str:  # noqa: D102
        data = str(self.id)
        if self.direction is not None:
            data += f"/{self.direction}"
        data += f" {self.uri}"
        if self.extension_attributes is not None:
            data += f" {self.extension_attributes}"
        return data


@slots_dataclass
class RIDAttribute(SDPMediaAttribute):
    """
    SDP media attribute for RTP stream identifiers, defined in :rfc:`8851#section-4`.

    Grammar::
        rid:<rid-id> <direction> [<rid-pt-param-list> | <rid-param-list>]
    """

    _name = "rid"
    _is_flag = False

    id: str
    direction: str
    params: str | None = None

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        if raw_value is None:
            raise SDPParseError("rid attribute requires a value")
        rid_id, direction, *rest = raw_value.split(maxsplit=2)
        return cls(id=rid_id, direction=direction, params=rest[0] if rest else None)

    def serialize(self) -> str:  # noqa: D102
        data = f"{self.id} {self.direction}"
        if self.params:
            data += f" {self.params}"
        return data


@slots_dataclass
class SimulcastAttribute(SDPMediaAttribute):
    """
    SDP media attribute for simulcast streams, defined in :rfc:`8853#section-5.1`.

    The stream lists are kept in their raw form, to be parsed with
    :func:`parse_simulcast_stream_list`.

    Grammar::
        simulcast:<send|recv> <sc-str-list> [<send|recv> <sc-str-list>]
    """

    _name = "simulcast"
    _is_flag = False

    dir1: str
    list1: str
    dir2: str | None = None
    list2: str | None = None

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        if raw_value is None:
            raise SDPParseError("simulcast attribute requires a value")
        tokens = raw_value.split()
        if len(tokens) not in (2, 4):
            raise SDPParseError(f"Invalid simulcast attribute value: {raw_value!r}")
        dir1, list1, *rest = tokens
        dir2, list2 = rest if rest else (None, None)
        return cls(dir1=dir1, list1=list1, dir2=dir2, list2=list2)

    def serialize(self) -> str:  # noqa: D102
        data = f"{self.dir1} {self.list1}"
        if self.dir2 is not None and self.list2 is not None:
            data += f" {self.dir2} {self.list2}"
        return data


@slots_dataclass
class SSRCAttribute(SDPMediaAttribute):
    """
    SDP media attribute for synchronization source attributes, defined in :rfc:`5576#section-4.1`.

    Grammar::
        ssrc:<ssrc-id> <attribute>[:<value>]
    """

    _name = "ssrc"
    _is_flag = False

    ssrc: int
    attribute: str
    value: str | None = None

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        if raw_value is None:
            raise SDPParseError("ssrc attribute requires a value")
        ssrc, _, source_attribute = raw_value.strip().partition(" ")
        if not source_attribute:
            raise SDPParseError(f"ssrc attribute without source attribute: {raw_value!r}")
        attribute, sep, value = source_attribute.strip().partition(":")
        return cls(ssrc=int(ssrc), attribute=attribute, value=value if sep else None)

    def serialize(self) -> str:  # noqa: D102
        if self.value is None:
            return f"{self.ssrc} {self.attribute}"
        return f"{self.ssrc} {self.attribute}:{self.value}"


@slots_dataclass
class SSRCGroupAttribute(SDPMediaAttribute):
    """
    SDP media attribute for grouping synchronization sources, defined in :rfc:`5576#section-4.2`.

    Grammar::
        ssrc-group:<semantics> <ssrc-id> ...
    """

    _name = "ssrc-group"
    _is_flag = False

    semantics: str
    ssrcs: list[int] = dataclass_field(default_factory=list)

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        if raw_value is None:
            raise SDPParseError("ssrc-group attribute requires a value")
        semantics, *ssrcs = raw_value.split()
        return cls(semantics=semantics, ssrcs=[int(ssrc) for ssrc in ssrcs])

    def serialize(self) -> str:  # noqa: D102
        return " ".join((self.semantics, *map(str, self.ssrcs)))


@slots_dataclass
class CandidateAttribute(SDPMediaAttribute):
    """
    SDP media attribute for ICE candidates, defined in :rfc:`8839#section-5.1`.

    Grammar::
        candidate:<foundation> <component-id> <transport> <priority>
                  <connection-address> <port> typ <cand-type>
                  [raddr <connection-address>] [rport <port>]
                  *(<extension-att-name> <extension-att-value>)
    """

    _name = "candidate"
    _is_flag = False

    foundation: str
    component: int
    transport: str
    priority: int
    address: str
    port: int
    type: str
    rel_addr: str | None = None
    rel_port: int | None = None
    extensions: Mapping[str, str] = dataclass_field(default_factory=frozendict)

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        if raw_value is None:
            raise SDPParseError("candidate attribute requires a value")
        bits = raw_value.split()
        if len(bits) < 8 or bits[6] != "typ":
            raise SDPParseError(f"Invalid candidate attribute value: {raw_value!r}")
        foundation, component, transport, priority, address, port, _, cand_type = bits[:8]
        rel_addr: str | None = None
        rel_port: int | None = None
        extensions: dict[str, str] = {}
        for key, value in zip(bits[8::2], bits[9::2]):
            if key == "raddr":
                rel_addr = value
            elif key == "rport":
                rel_port = int(value)
            else:
                extensions[key] = value
        return cls(
            foundation=foundation,
            component=int(component),
            transport=transport,
            priority=int(priority),
            address=address,
            port=int(port),
            type=cand_type,
            rel_addr=rel_addr,
            rel_port=rel_port,
            extensions=frozendict(extensions),
        )

    def serialize(self) -> str:  # noqa: D102
        parts = [
            self.foundation,
            str(self.component),
            self.transport,
            str(self.priority),
            self.address,
            str(self.port),
            "typ",
            self.type,
        ]
        if self.rel_addr is not None:
            parts += ["raddr", self.rel_addr]
        if self.rel_port is not None:
            parts += ["rport", str(self.rel_port)]
        for key, value in self.extensions.items():
            parts += [key, value]
        return " ".join(parts)


@slots_dataclass
class EndOfCandidatesFlag(FlagAttribute, SDPMediaAttribute):
    """SDP media attribute signaling the end of ICE candidates, defined in :rfc:`8840#section-8.2`."""

    _name = "end-of-candidates"


@slots_dataclass
class FingerprintMediaAttribute(FingerprintAttribute, SDPMediaAttribute):
    """Media-level DTLS fingerprint attribute."""


@slots_dataclass
class SetupMediaAttribute(SetupAttribute, SDPMediaAttribute):
    """Media-level DTLS setup role attribute."""


@slots_dataclass
class ICEUfragMediaAttribute(ICEUfragAttribute, SDPMediaAttribute):
    """Media-level ICE username fragment attribute."""


@slots_dataclass
class ICEPwdMediaAttribute(ICEPwdAttribute, SDPMediaAttribute):
    """Media-level ICE password attribute."""


@slots_dataclass
class SDPMediaAttributeField(SDPAttributeField, SDPMediaFields):
    """
    SDP media attribute field, defined in :rfc:`8866#section-5.13`.

    Grammar::
        a=<attribute>
        a=<attribute>:<value>
    """

    _attribute_cls = SDPMediaAttribute

    _description = "zero or more media attribute lines"


def get_media_flow_attribute(direction: str) -> SDPMediaAttribute:
    """Return a new SDP media flow attribute for the given direction name."""
    flow_cls = SDPMediaAttribute.__registry_get_class_for__(direction.lower())
    if not issubclass(flow_cls, MediaFlowAttribute):
        raise ValueError(f"Not a media flow direction: {direction}")
    return flow_cls()


def get_media_flow_type(attributes: Sequence[SDPAttributeField]) -> str | None:
    """Return the media flow direction name from the given attribute fields, if any."""
    media_flow_type: str | None = None
    for attribute_field in attributes:
        if isinstance(attribute_field.attribute, MediaFlowAttribute):
            if media_flow_type is not None:
                raise SDPParseError("Multiple media flow attributes in section")
            media_flow_type = attribute_field.attribute.name
    return media_flow_type


@slots_dataclass
class SDPMedia(SDPSection):
    """SDP section for media description fields, defined in :rfc:`8866#section-5.14`."""

    _fields_base = SDPMediaFields
    _start_field = SDPMediaMedia
    _attribute_field_cls = SDPMediaAttributeField

    media: SDPMediaMedia
    title: SDPMediaTitle | None = None
    connection: SDPMediaConnection | None = None
    bandwidth: list[SDPMediaBandwidth] = dataclass_field(default_factory=list)
    attributes: list[SDPMediaAttributeField] = dataclass_field(default_factory=list)

    @property
    def type(self) -> str:
        """The media type, e.g. ``audio`` or ``video``."""
        return self.media.media

    @property
    def mid(self) -> str | None:
        """The media identification tag, if any."""
        mid = self.get_attribute(MidAttribute)
        return mid.value if mid is not None else None

    @property
    def direction(self) -> str | None:
        """Media flow direction name, extracted from the media attributes."""
        return get_media_flow_type(self.attributes)
