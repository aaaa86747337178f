"""SDP session section and fields definitions and implementations."""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field as dataclass_field
from typing import Any, MutableMapping

from typing_extensions import Self, override

from semsdp.constants import SUPPORTED_SDP_VERSIONS
from semsdp.exceptions import SDPParseError, SDPUnsupportedVersion
from semsdp.helpers import StrValueMixin, slots_dataclass

from .common import (
    FingerprintAttribute,
    FlagAttribute,
    ICEPwdAttribute,
    ICEUfragAttribute,
    InactiveFlag,
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
)
from .media import SDPMedia, get_media_flow_type
from .time import SDPTime


__all__ = [
    "SDPSessionFields",
    "SDPSessionVersion",
    "SDPSessionOrigin",
    "SDPSessionName",
    "SDPSessionInformation",
    "SDPSessionURI",
    "SDPSessionEmail",
    "SDPSessionPhone",
    "SDPSessionConnection",
    "SDPSessionBandwidth",
    "SDPSessionAttribute",
    "UnknownSessionAttribute",
    "RecvOnlySessionFlag",
    "SendRecvSessionFlag",
    "SendOnlySessionFlag",
    "InactiveSessionFlag",
    "GroupAttribute",
    "MSIDSemanticAttribute",
    "ICELiteFlag",
    "FingerprintSessionAttribute",
    "SetupSessionAttribute",
    "ICEUfragSessionAttribute",
    "ICEPwdSessionAttribute",
    "SDPSessionAttributeField",
    "SDPSession",
]


@dataclass
class SDPSessionFields(SDPField, ABC, registry=True, registry_attr="_type"):
    """Base class for SDP session description fields."""


@slots_dataclass
class SDPSessionVersion(StrValueMixin, SDPSessionFields):
    """
    SDP version field, defined in :rfc:`8866#section-5.1`.

    Grammar::
        v=0
    """

    _type = "v"
    _description = "protocol version"

    def __post_init__(self) -> None:
        if self.value not in SUPPORTED_SDP_VERSIONS:
            raise SDPUnsupportedVersion(f"Unsupported SDP version {self.value}")


@slots_dataclass
class SDPSessionOrigin(SDPSessionFields):
    """
    SDP origin field, defined in :rfc:`8866#section-5.2`.

    Grammar::
        o=<username> <sess-id> <sess-version> <nettype> <addrtype> <unicast-address>
    """

    _type = "o"
    _description = "originator and session identifier"

    username: str
    sess_id: str
    sess_version: str
    nettype: str
    addrtype: str
    unicast_address: str

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        (
            username,
            sess_id,
            sess_version,
            nettype,
            addrtype,
            unicast_address,
        ) = raw_value.split()
        return cls(
            username=username,
            sess_id=sess_id,
            sess_version=sess_version,
            nettype=nettype,
            addrtype=addrtype,
            unicast_address=unicast_address,
        )

    def serialize(self) -> str:  # noqa: D102
        return " ".join((
            self.username,
            self.sess_id,
            self.sess_version,
            self.nettype,
            self.addrtype,
            self.unicast_address,
        ))


@slots_dataclass
class SDPSessionName(StrValueMixin, SDPSessionFields):
    """
    SDP session name field, defined in :rfc:`8866#section-5.3`.

    Grammar::
        s=<session name>
    """

    _type = "s"
    _description = "session name"


@slots_dataclass
class SDPSessionInformation(SDPInformationField, SDPSessionFields):
    """SDP session information field, defined in :rfc:`8866#section-5.4`."""

    _description = "session information"


@slots_dataclass
class SDPSessionURI(StrValueMixin, SDPSessionFields):
    """SDP session URI field, defined in :rfc:`8866#section-5.5`."""

    _type = "u"
    _description = "URI of description"


@slots_dataclass
class SDPSessionEmail(StrValueMixin, SDPSessionFields):
    """SDP session email field, defined in :rfc:`8866#section-5.6`."""

    _type = "e"
    _description = "email address"


@slots_dataclass
class SDPSessionPhone(StrValueMixin, SDPSessionFields):
    """SDP session phone field, defined in :rfc:`8866#section-5.6`."""

    _type = "p"
    _description = "phone number"


@slots_dataclass
class SDPSessionConnection(SDPConnectionField, SDPSessionFields):
    """
    SDP session connection field, defined in :rfc:`8866#section-5.7`.

    Grammar::
        c=<nettype> <addrtype> <connection-address>
    """

    _description = "connection information -- not required if included in all media"


@slots_dataclass
class SDPSessionBandwidth(SDPBandwidthField, SDPSessionFields):
    """
    SDP session bandwidth field, defined in :rfc:`8866#section-5.8`.

    Grammar::
        b=<bwtype>:<bandwidth>
    """

    _description = "zero or more bandwidth information lines"


@dataclass
class SDPSessionAttribute(SDPAttribute, ABC, registry=True, registry_attr="_name"):
    """Base class for SDP session attributes."""


@slots_dataclass
class UnknownSessionAttribute(UnknownAttribute, SDPSessionAttribute):
    """Catch-all class for unsupported SDP session attributes."""


@slots_dataclass
class RecvOnlySessionFlag(RecvOnlyFlag, SDPSessionAttribute):
    """SDP session attribute for recvonly media flow, defined in :rfc:`8866#section-6.7.1`."""


@slots_dataclass
class SendRecvSessionFlag(SendRecvFlag, SDPSessionAttribute):
    """SDP session attribute for sendrecv media flow, defined in :rfc:`8866#section-6.7.2`."""


@slots_dataclass
class SendOnlySessionFlag(SendOnlyFlag, SDPSessionAttribute):
    """SDP session attribute for sendonly media flow, defined in :rfc:`8866#section-6.7.3`."""


@slots_dataclass
class InactiveSessionFlag(InactiveFlag, SDPSessionAttribute):
    """SDP session attribute for inactive media flow, defined in :rfc:`8866#section-6.7.4`."""


@slots_dataclass
class GroupAttribute(SDPSessionAttribute):
    """
    SDP session attribute for grouping media lines, defined in :rfc:`5888#section-5`.

    Grammar::
        group:<semantics> *(<identification-tag>)
    """

    _name = "group"
    _is_flag = False

    semantics: str
    mids: list[str] = dataclass_field(default_factory=list)

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        if raw_value is None:
            raise SDPParseError("group attribute requires a value")
        semantics, *mids = raw_value.split()
        return cls(semantics=semantics, mids=mids)

    def serialize(self) -> str:  # noqa: D102
        return " ".join((self.semantics, *self.mids))


@slots_dataclass
class MSIDSemanticAttribute(SDPSessionAttribute):
    """
    SDP session attribute for the media stream identification semantic.

    Grammar::
        msid-semantic: <semantic> [<token> ...]
    """

    _name = "msid-semantic"
    _is_flag = False

    semantic: str
    token: str | None = None

    @classmethod
    def from_raw_value(cls, name: str, raw_value: str | None) -> Self:  # noqa: D102
        if raw_value is None:
            raise SDPParseError("msid-semantic attribute requires a value")
        semantic, _, token = raw_value.strip().partition(" ")
        return cls(semantic=semantic, token=token.strip() or None)

    def serialize(self) -> str:  # noqa: D102
        if self.token is None:
            return f" {self.semantic}"
        return f" {self.semantic} {self.token}"


@slots_dataclass
class ICELiteFlag(FlagAttribute, SDPSessionAttribute):
    """SDP session attribute for ICE lite implementations, defined in :rfc:`8839#section-5.3`."""

    _name = "ice-lite"


@slots_dataclass
class FingerprintSessionAttribute(FingerprintAttribute, SDPSessionAttribute):
    """Session-level DTLS fingerprint attribute."""


@slots_dataclass
class SetupSessionAttribute(SetupAttribute, SDPSessionAttribute):
    """Session-level DTLS setup role attribute."""


@slots_dataclass
class ICEUfragSessionAttribute(ICEUfragAttribute, SDPSessionAttribute):
    """Session-level ICE username fragment attribute."""


@slots_dataclass
class ICEPwdSessionAttribute(ICEPwdAttribute, SDPSessionAttribute):
    """Session-level ICE password attribute."""


@slots_dataclass
class SDPSessionAttributeField(SDPAttributeField, SDPSessionFields):
    """
    SDP session attribute field, defined in :rfc:`8866#section-5.13`.

    Grammar::
        a=<attribute>
        a=<attribute>:<value>
    """

    _attribute_cls = SDPSessionAttribute

    _description = "zero or more session attribute lines"


@slots_dataclass
class SDPSession(SDPSection):
    """SDP section for session description fields, defined in :rfc:`8866#section-5`."""

    _fields_base = SDPSessionFields
    _start_field = SDPSessionVersion
    _attribute_field_cls = SDPSessionAttributeField

    version: SDPSessionVersion
    origin: SDPSessionOrigin
    name: SDPSessionName
    information: SDPSessionInformation | None = None
    uri: SDPSessionURI | None = None
    email: SDPSessionEmail | None = None
    phone: SDPSessionPhone | None = None
    connection: SDPSessionConnection | None = None
    bandwidth: list[SDPSessionBandwidth] = dataclass_field(default_factory=list)
    time: list[SDPTime] = dataclass_field(default_factory=list)
    attributes: list[SDPSessionAttributeField] = dataclass_field(default_factory=list)
    media: list[SDPMedia] = dataclass_field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.time:
            raise SDPParseError("SDP session must have at least one time field")

    @property
    def direction(self) -> str | None:
        """The session-level media flow direction name, if any."""
        return get_media_flow_type(self.attributes)

    @classmethod
    def _line_preprocess(cls, line: str, fields: MutableMapping[str, Any]) -> str:
        if fields.get("media"):
            raise SDPParseError(f"Session field {line} found after media field")
        return line
