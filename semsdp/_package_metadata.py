"""Package metadata lookup, from the installed distribution or the local pyproject.toml."""

from __future__ import annotations

import importlib.metadata as importlib_metadata
import warnings
from email.message import Message
from pathlib import Path
from typing import Any, Mapping, Sequence

import toml


DISTRIBUTION_NAME: str = "semsdp"

_metadata: Message | Mapping[str, Any] | None = None


def _load_metadata() -> Message | Mapping[str, Any] | None:
    try:
        return importlib_metadata.metadata(DISTRIBUTION_NAME)  # type: ignore[return-value]
    except importlib_metadata.PackageNotFoundError:
        pass
    package_dir = Path(__file__).resolve().parent
    for candidate in (package_dir.parent / "pyproject.toml", package_dir / "pyproject.toml"):
        if candidate.exists():
            return toml.load(candidate)
    warnings.warn(
        "Didn't find distinfo nor pyproject.toml for package metadata", stacklevel=2
    )
    return None


def get_metadata(distinfo_key: str, toml_path: Sequence[str | int]) -> Any:
    """
    Get a metadata value for the package.

    :param distinfo_key: the key to look up in the installed distribution metadata.
    :param toml_path: the path of keys / indices to follow in pyproject.toml instead.
    :return: the metadata value, or None if not available.
    """
    global _metadata
    if _metadata is None:
        _metadata = _load_metadata()
    if _metadata is None:
        return None
    if isinstance(_metadata, Message):
        return _metadata.get(distinfo_key)
    value: Any = _metadata
    try:
        for key in toml_path:
            value = value[key]
    except (KeyError, IndexError, TypeError):
        return None
    return value
