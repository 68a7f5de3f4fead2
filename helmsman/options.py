r"""
Helmsman option specifications.

Overview
- OptionType: ANY (free text), NUMERIC (int or finite float), BOOLEAN (presence switch).
- OptionSpec: immutable description of one option attached to an action.
- option(...): factory used by the builders (keeps call sites short).

Metadata (sanitized on construction)
- name: str matching ^[A-Za-z0-9_-]+$; spelled "--name" on the command line.
- short: Unset | single alphanumeric character; spelled "-x".
- type: OptionType (or its lowercase value: "any", "numeric", "boolean").
- default: Unset | value consistent with the type. Unset resolves to the zero
  value of the type (None, 0, False).
- required: bool. Required options cannot declare a default, and BOOLEAN options
  cannot be required (they always have one).
- description: free text for help listings.

Boolean negation
- Every BOOLEAN option accepts an implicit "--no-<name>" form that sets it to
  False. The negated form is never declared as an option of its own.

Quick example:
    >>> from helmsman.options import option
    >>> option("count", short="c", type="numeric", default=10)
    option-spec(name='count', short='c', type=<OptionType.NUMERIC: 'numeric'>, default=10, required=False)
"""
import builtins
import math
from enum import StrEnum

from .faults import ValidationError
from .internals import DescriptorType, check_name, check_text
from .utils import Unset, coalesce


class OptionType(StrEnum):
    ANY = "any"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"

    @property
    def zero(self):
        """
        value given to an option of this type that received nothing and has no default.
        """
        return {
            OptionType.ANY: None,
            OptionType.NUMERIC: 0,
            OptionType.BOOLEAN: False,
        }[self]


def _sanitize_type(cls, metadata, /):
    """
    Internal: normalize 'type' into an OptionType member.
    """
    try:
        metadata["type"] = OptionType(metadata["type"])
    except ValueError:
        raise ValidationError(
            f"{cls.__typename__} 'type' must be one of {', '.join(map(repr, map(str, OptionType)))}"
        ) from None


def _sanitize_default(cls, metadata, /):
    """
    Internal: check that the default agrees with the type and the required flag.

    Rules
    - NUMERIC defaults are int/float (bool excluded) and finite.
    - BOOLEAN defaults are bool.
    - ANY defaults are free (None included).
    - required options cannot declare a default; BOOLEAN options cannot be required.
    """
    default = metadata["default"]
    match metadata["type"]:
        case OptionType.NUMERIC if default is not Unset:
            if isinstance(default, bool) or not isinstance(default, int | float) or not math.isfinite(default):
                raise ValidationError(f"{cls.__typename__} {metadata['name']!r} numeric default must be a finite number")
        case OptionType.BOOLEAN:
            if metadata["required"]:
                raise ValidationError(f"{cls.__typename__} {metadata['name']!r} boolean option cannot be required")
            if default is not Unset and not isinstance(default, bool):
                raise ValidationError(f"{cls.__typename__} {metadata['name']!r} boolean default must be a bool")

    if metadata["required"] and default is not Unset:
        raise ValidationError(f"{cls.__typename__} {metadata['name']!r} required option cannot have a default")


class OptionSpec(metaclass=DescriptorType):
    """
    Immutable description of one option of an action.

    OptionSpec carries no parsing behavior; the coercion layer reads it to
    classify and convert tokens, and the help renderer reads it for listings.

    Properties
    - name, short, type, default, required, description (read-only).
    - zero: the zero value of the type.
    - flags: command-line spellings, long first (("--count", "-c")).
    """

    __introspectable__ = (
        "name",
        "short",
        "type",
        "default",
        "required",
        "description",
    )

    __displayable__ = (
        "name",
        "short",
        "type",
        "default",
        "required",
    )

    def __new__(
            cls,
            name,
            /,
            short=Unset,
            type=OptionType.ANY,
            default=Unset,
            required=False,
            description=Unset,
    ):
        """
        Construct an OptionSpec.

        Raises
        - ValidationError for an invalid name/short, unknown type, or a default
          inconsistent with the type/required flag.
        """
        metadata = {
            "name": check_name(cls, name),
            "short": short,
            "type": type,
            "default": default,
            "required": bool(required),
            "description": check_text(cls, description),
        }
        if short is not Unset:
            if not isinstance(short, str) or len(short := short.strip()) != 1 or not short.isalnum():
                raise ValidationError(f"{cls.__typename__} {metadata['name']!r} 'short' must be a single alphanumeric character")
            metadata["short"] = short
        _sanitize_type(cls, metadata)
        _sanitize_default(cls, metadata)

        self = super().__new__(cls)
        self._zero = metadata["type"].zero
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._default = coalesce(metadata["default"], self._zero)
        self._short = coalesce(metadata["short"])
        return self

    @property
    def zero(self):
        return self._zero

    @property
    def flags(self):
        if self._short:
            return "--" + self._name, "-" + self._short
        return "--" + self._name,


def option(name, /, *args, **kwargs):
    """
    Shorthand for OptionSpec(...), mirroring the other builder factories.

    Example
    - option("opt")
    - option("bar", type="boolean")
    - option("baz", type=OptionType.NUMERIC, default=10)
    """
    if isinstance(name, OptionSpec):
        if args or kwargs:
            raise builtins.TypeError("option() cannot override an existing option spec")
        return name
    return OptionSpec(name, *args, **kwargs)


__all__ = (
    "OptionType",
    "OptionSpec",
    "option",
)
