"""Exception classes for the semsdp library."""

from __future__ import annotations

from typing import Any


class SemSDPException(Exception):
    """Base class for all custom library exceptions."""


class ParseError(SemSDPException, ValueError):
    """Raised when a session description cannot be parsed."""


class SDPException(SemSDPException):
    """Base class for all exceptions raised by the SDP modules."""


class SDPUnsupportedVersion(SDPException, NotImplementedError):
    """The SDP version is not supported by this library."""


class SDPParseError(SDPException, ParseError):
    """Exception related to SDP data parsing."""


class SDPUnknownFieldError(SDPParseError):
    """Exception raised when an unknown SDP field is encountered."""


class SDPMediaError(SDPParseError):
    """Base class for errors tied to a specific media section of a description."""

    def __init__(self, *args: Any, **kwargs: Any):
        """Initialize the error, with the index of the offending media section."""
        self.media_index: int | None = kwargs.pop("media_index", None)
        super().__init__(*args, **kwargs)

    def __str__(self) -> str:
        message = super().__str__()
        if self.media_index is None:
            return message
        return f"{message} (media section #{self.media_index})"


class SDPMissingAttributeError(SDPMediaError):
    """Raised when a required attribute is missing from a media section."""

    def __init__(self, *args: Any, **kwargs: Any):
        """Initialize the error, with the name of the missing attribute."""
        self.attribute: str | None = kwargs.pop("attribute", None)
        super().__init__(*args, **kwargs)


class SDPReferenceError(SDPMediaError):
    """Raised when an attribute references ssrcs that cannot be resolved to a track."""

    def __init__(self, *args: Any, **kwargs: Any):
        """Initialize the error, with the unresolved ssrc."""
        self.ssrc: int | None = kwargs.pop("ssrc", None)
        super().__init__(*args, **kwargs)
