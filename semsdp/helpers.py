"""Helpers, utilities, and other miscellaneous functions and classes."""

from __future__ import annotations

import enum
import functools
import sys
import types
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass as _dtcls
from inspect import isabstract
from typing import (
    Any,
    Callable,
    Generic,
    MutableMapping,
    Protocol,
    TypeVar,
    Union,
    cast,
    get_args,
    get_origin,
    runtime_checkable,
)

from typing_extensions import Self, TypeAlias, dataclass_transform


_dT = TypeVar("_dT")


@functools.wraps(_dtcls)
@dataclass_transform()
def slots_dataclass(*args: Any, **kwargs: Any) -> Callable[[_dT], _dT]:
    """Wrapper for dataclass decorator that adds slots if supported (py3.10+)."""
    if sys.version_info < (3, 10):
        kwargs.pop("slots", None)
    else:
        kwargs.setdefault("slots", True)
    return cast(Callable[[_dT], _dT], _dtcls(*args, **kwargs))


def try_unpack_optional_type(typ_: Any) -> Any:
    """
    Unpack a type annotation that is Optional, or Union with None and a single other type.

    :param typ_: The type annotation
    :return: The original type wrapped in Optional, or the input argument if it's not Optional.
    """
    args = get_args(typ_)
    origin = get_origin(typ_)
    if (origin is Union or origin is getattr(types, "UnionType", Union)) and (
        args is not None and len(args) == 2 and type(None) in args
    ):
        return next(a for a in args if a is not type(None))
    return typ_


class _DefaultType:
    """Comparable and hashable sentinel for DEFAULT values."""

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _DefaultType)

    def __hash__(self) -> int:
        return hash(self.__class__)

    def __repr__(self) -> str:
        return "DEFAULT"


DEFAULT = _DefaultType()
DefaultType: TypeAlias = _DefaultType


_ID = TypeVar("_ID")
_RT = TypeVar("_RT", bound="Registry")


class Registry(ABC, Generic[_ID, _RT]):
    """
    Abstract base class for registries of subclasses of a given class.

    Subclasses of this class can be initialized as registries, which can be then used
    to register subclasses of the given class through a specific class attribute.
    In the class declaration, some additional keyword arguments must be specified
    to properly initialize the registry:

    :param registry: whether the class is a registry or not.
    :param registry_attr: the name of the class attribute to use as the registry key.

    Subclasses of "registry" classes are automatically registered in the registry
    using the value of the defined registry attribute as registry key, and can be
    retrieved through :meth:`__registry_get_class_for__`.

    Abstract subclasses are not registered, only concrete ones are.
    """

    __registry__: MutableMapping[_ID, type[_RT]]
    __registry_attr_name__: str
    __registry_root__: type[Registry]

    @classmethod
    def is_abstract(cls) -> bool:
        """
        Check if the class is actually defined as abstract
        (i.e. has ABC in its bases, or abstract methods).
        """
        return isabstract(cls) or ABC in cls.__bases__

    def __init_subclass__(
        cls,
        *,
        registry: bool = False,
        registry_attr: str | None = None,
        **kwargs: Any,
    ):
        super().__init_subclass__(**kwargs)

        # Create a new registry
        if registry:
            if not registry_attr:
                raise AttributeError(
                    f"No attr_name specified for registry class {cls.__name__}"
                )
            cls.__registry__ = {}
            cls.__registry_attr_name__ = registry_attr
            cls.__registry_root__ = cls
            return

        # Check registry subclass
        registry_id: Any
        try:
            registry_id = getattr(cls, cls.__registry_attr_name__)
        except AttributeError:
            registry_id = None
        if registry_id is None:
            if cls.is_abstract():
                return
            raise ValueError(
                f"Cannot register {cls.__name__} in {cls.__registry_root__.__name__}, "
                f"no {cls.__registry_attr_name__} defined in the class body"
            )

        conflict_cls: type[_RT] | None = cls.__registry__.get(registry_id)
        if conflict_cls is not None:
            cls_fullname = (cls.__module__, cls.__qualname__)
            conflict_fullname = (conflict_cls.__module__, conflict_cls.__qualname__)
            if cls_fullname != conflict_fullname:  # not reinit (e.g. slots dataclasses)
                raise NameError(
                    f"More than one {cls.__registry_root__.__name__} subclass with "
                    f'the same {cls.__registry_attr_name__} "{registry_id}" defined: '
                    f"{conflict_cls.__name__} and {cls.__name__}"
                )
        cls.__registry__[registry_id] = cls  # type: ignore[assignment]

    @classmethod
    def get_registry(cls) -> types.MappingProxyType[_ID, type[_RT]]:
        """Get a read-only view of the registry mapping."""
        return types.MappingProxyType(cls.__registry__)

    @classmethod
    def __registry_get_class_for__(cls, registry_id: _ID) -> type[_RT]:
        registered_cls: type[_RT] | None = cls.__registry__.get(registry_id)
        if registered_cls is None:
            raise KeyError(
                f"No registered {cls.__registry_root__.__name__} subclass found "
                f'for {cls.__registry_attr_name__} == "{registry_id}"'
            )
        return registered_cls


@runtime_checkable
class Parseable(Protocol):
    """Generic protocol for parseable objects from str."""

    @classmethod
    def parse(cls, raw_value: str) -> Self:
        """Parse a string value into an instance of this class."""


@runtime_checkable
class Serializable(Protocol):
    """Generic protocol for objects serializable to str."""

    def serialize(self) -> str:
        """Serialize the object to a string."""


@runtime_checkable
class ParseableSerializable(Parseable, Serializable, Protocol):
    """Generic protocol for objects that are both parseable and serializable to str."""


@runtime_checkable
class FieldsParser(Protocol):
    """Generic protocol for objects that can parse a string values into separate fields."""

    @classmethod
    def parse_raw_value(cls, raw_value: str) -> dict[str, Any]:
        """Parse a string value into a mapping of fields values."""


@runtime_checkable
class FieldsParserSerializer(FieldsParser, Serializable, Protocol):
    """
    Generic protocol for objects that can parse a string values into separate fields
    and serialize them back into a string.
    """


@slots_dataclass
class StrValueMixin(FieldsParserSerializer):
    """Mixin for dataclasses that have a single string field and can be parsed/serialized."""

    value: str

    @classmethod
    def parse_raw_value(cls, raw_value: str) -> dict[str, Any]:  # noqa: D102
        return dict(value=raw_value.strip())

    def serialize(self) -> str:  # noqa: D102
        return self.value


@slots_dataclass
class OptionalStrValueMixin(FieldsParserSerializer):
    """Mixin like :class:`StrValueMixin`, but that also accepts empty values (`None`)."""

    value: str | None

    @classmethod
    def parse_raw_value(cls, raw_value: str) -> dict[str, Any]:  # noqa: D102
        return dict(value=raw_value)

    def serialize(self) -> str:  # noqa: D102
        return self.value or ""


class PlainConvertible(ABC):
    """
    Base class for objects that can be projected to a tree of plain values
    (dicts, lists, strings, numbers, booleans and None), e.g. for JSON serialization.
    """

    @abstractmethod
    def plain(self) -> dict[str, Any]:
        """Return a plain representation of the object."""


def to_plain(value: Any) -> Any:
    """Recursively convert a value into plain data structures."""
    if isinstance(value, PlainConvertible):
        return value.plain()
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Mapping):
        return {
            (key if isinstance(key, (str, int)) else str(key)): to_plain(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    return value
