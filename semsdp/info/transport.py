"""Transport value records: ICE credentials, DTLS parameters and ICE candidates."""

from __future__ import annotations

import dataclasses
import secrets
from typing import Any, Mapping

from frozendict import frozendict
from typing_extensions import Self

from semsdp.constants import ICE_PWD_BYTES, ICE_UFRAG_BYTES
from semsdp.helpers import PlainConvertible, slots_dataclass, to_plain
from semsdp.sdp import CandidateAttribute

from .enums import Setup


__all__ = [
    "ICEInfo",
    "DTLSInfo",
    "CandidateInfo",
]


@slots_dataclass
class ICEInfo(PlainConvertible):
    """
    ICE credentials of the (bundled) transport.

    :param ufrag: the ICE username fragment.
    :param pwd: the ICE password.
    :param lite: whether the endpoint is an ICE lite implementation.
    """

    ufrag: str
    pwd: str
    lite: bool = False

    @classmethod
    def generate(cls, lite: bool = False) -> Self:
        """Generate new random ICE credentials."""
        return cls(
            ufrag=secrets.token_hex(ICE_UFRAG_BYTES),
            pwd=secrets.token_hex(ICE_PWD_BYTES),
            lite=lite,
        )

    def plain(self) -> dict[str, Any]:  # noqa: D102
        return dict(ufrag=self.ufrag, pwd=self.pwd, lite=self.lite)

    def clone(self) -> Self:
        """Return an independent copy of this object."""
        return dataclasses.replace(self)


@slots_dataclass
class DTLSInfo(PlainConvertible):
    """
    DTLS parameters of the (bundled) transport.

    :param setup: the DTLS connection setup role.
    :param hash: the hash function name used for the certificate fingerprint.
    :param fingerprint: the certificate fingerprint.
    """

    setup: Setup
    hash: str
    fingerprint: str

    def plain(self) -> dict[str, Any]:  # noqa: D102
        return dict(setup=to_plain(self.setup), hash=self.hash, fingerprint=self.fingerprint)

    def clone(self) -> Self:
        """Return an independent copy of this object."""
        return dataclasses.replace(self)


@slots_dataclass
class CandidateInfo(PlainConvertible):
    """An ICE candidate of the (bundled) transport."""

    foundation: str
    component_id: int
    transport: str
    priority: int
    address: str
    port: int
    type: str
    rel_addr: str | None = None
    rel_port: int | None = None
    extensions: Mapping[str, str] = dataclasses.field(default_factory=frozendict)

    @classmethod
    def from_attribute(cls, attribute: CandidateAttribute) -> Self:
        """Create a candidate from its ``a=candidate`` wire record."""
        return cls(
            foundation=attribute.foundation,
            component_id=attribute.component,
            transport=attribute.transport,
            priority=attribute.priority,
            address=attribute.address,
            port=attribute.port,
            type=attribute.type,
            rel_addr=attribute.rel_addr,
            rel_port=attribute.rel_port,
            extensions=frozendict(attribute.extensions),
        )

    def to_attribute(self) -> CandidateAttribute:
        """Build the ``a=candidate`` wire record for this candidate."""
        return CandidateAttribute(
            foundation=self.foundation,
            component=self.component_id,
            transport=self.transport,
            priority=self.priority,
            address=self.address,
            port=self.port,
            type=self.type,
            rel_addr=self.rel_addr,
            rel_port=self.rel_port,
            extensions=frozendict(self.extensions),
        )

    def plain(self) -> dict[str, Any]:  # noqa: D102
        plain = {field.name: getattr(self, field.name) for field in dataclasses.fields(self)}
        plain["extensions"] = dict(self.extensions)
        return plain

    def clone(self) -> Self:
        """Return an independent copy of this object."""
        return dataclasses.replace(self)
