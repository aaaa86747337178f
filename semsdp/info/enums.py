"""Enumerations for media directions and DTLS setup roles."""

from __future__ import annotations

import enum

from typing_extensions import Self


__all__ = [
    "Direction",
    "DirectionWay",
    "Setup",
]


class _ByValueEnum(enum.Enum):
    """Mixin for string enums that can be looked up by their SDP token, case-insensitively."""

    @classmethod
    def by_value(cls, value: str) -> Self:
        """Get the enum member for the given SDP token (case-insensitive)."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown {cls.__name__} value: {value!r}") from None

    def __str__(self) -> str:
        return str(self.value)


class Direction(_ByValueEnum):
    """The media flow direction of a media line."""

    SENDRECV = "sendrecv"
    SENDONLY = "sendonly"
    RECVONLY = "recvonly"
    INACTIVE = "inactive"

    def reverse(self) -> Direction:
        """The direction as seen from the remote party."""
        if self is Direction.SENDONLY:
            return Direction.RECVONLY
        if self is Direction.RECVONLY:
            return Direction.SENDONLY
        return self


class DirectionWay(_ByValueEnum):
    """A single way of a media flow, used by simulcast and rid attributes."""

    SEND = "send"
    RECV = "recv"

    def reverse(self) -> DirectionWay:
        """The opposite way."""
        return DirectionWay.RECV if self is DirectionWay.SEND else DirectionWay.SEND


class Setup(_ByValueEnum):
    """The DTLS connection setup role, as defined in :rfc:`4145#section-4`."""

    ACTIVE = "active"
    PASSIVE = "passive"
    ACTPASS = "actpass"
    INACTIVE = "inactive"

    def reverse(self, prefer_active: bool = False) -> Setup:
        """
        The setup role to answer with.

        :param prefer_active: whether to take the active role when the offer is ``actpass``.
        """
        if self is Setup.ACTIVE:
            return Setup.PASSIVE
        if self is Setup.PASSIVE:
            return Setup.ACTIVE
        if self is Setup.ACTPASS:
            return Setup.ACTIVE if prefer_active else Setup.PASSIVE
        return Setup.INACTIVE
