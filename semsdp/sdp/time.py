"""SDP time section and fields definitions and implementations."""

from __future__ import annotations

import re
from abc import ABC
from dataclasses import dataclass, field as dataclass_field

from typing_extensions import Self, override

from semsdp.exceptions import SDPParseError
from semsdp.helpers import slots_dataclass

from .common import SDPField, SDPSection


__all__ = [
    "SDPTimeFields",
    "SDPTimeTime",
    "SDPTimeRepeat",
    "SDPTime",
]


_TIME_UNITS: dict[str, int] = {"d": 86400, "h": 3600, "m": 60, "s": 1}
_TIME_RE = re.compile(rf"(-?\d+)([{''.join(_TIME_UNITS)}]?)")


def _parse_typed_time(time_str: str) -> int:
    """Parse a time value, optionally expressed in days, hours, minutes or seconds."""
    match = _TIME_RE.fullmatch(time_str)
    if not match:
        raise SDPParseError(f'Invalid time string "{time_str}"')
    time, unit = match.groups()
    return int(time) * _TIME_UNITS.get(unit, 1)


@dataclass
class SDPTimeFields(SDPField, ABC, registry=True, registry_attr="_type"):
    """Base class for SDP time description fields."""


@slots_dataclass
class SDPTimeTime(SDPTimeFields):
    """
    SDP time field, defined in :rfc:`8866#section-5.9`.

    Grammar::
        t=<start-time> <stop-time>
    """

    _type = "t"
    _description = "time the session is active"

    start_time: int = 0
    stop_time: int = 0

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        start_time, stop_time = raw_value.split()
        return cls(start_time=int(start_time), stop_time=int(stop_time))

    def serialize(self) -> str:  # noqa: D102
        return f"{self.start_time} {self.stop_time}"


@slots_dataclass
class SDPTimeRepeat(SDPTimeFields):
    """
    SDP time repeat field, defined in :rfc:`8866#section-5.10`.

    Grammar::
        r=<repeat interval> <active duration> <offsets from start-time>
    """

    _type = "r"
    _description = "zero or more repeat times"

    interval: int
    duration: int
    offsets: list[int] = dataclass_field(default_factory=list)

    @classmethod
    @override
    def from_raw_value(cls, field_type: str, raw_value: str) -> Self:
        interval, duration, *offsets = raw_value.split()
        return cls(
            interval=_parse_typed_time(interval),
            duration=_parse_typed_time(duration),
            offsets=[_parse_typed_time(offset) for offset in offsets],
        )

    def serialize(self) -> str:  # noqa: D102
        return " ".join(map(str, (self.interval, self.duration, *self.offsets)))


@slots_dataclass
class SDPTime(SDPSection):
    """SDP section for time description fields, defined in :rfc:`8866#section-5.9`."""

    _fields_base = SDPTimeFields
    _start_field = SDPTimeTime

    time: SDPTimeTime
    repeat: list[SDPTimeRepeat] = dataclass_field(default_factory=list)
