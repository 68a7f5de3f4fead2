"""
internal plumbing shared by the option and action layers.

- DescriptorType: metaclass giving specs and nodes a human-friendly __typename__,
  read-only mirrored properties, and stable __repr__/__rich_repr__.
- NAME_PATTERN / check_name(): the naming rule for actions and options.
"""
import functools
import operator
import re

from .faults import ValidationError
from .utils import Unset, coalesce, mirror, rename

NAME_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


class DescriptorType(type):
    """
    Metaclass for option specs and action nodes.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used as the subject of construction messages ("option-spec 'name' ...").
    - Expose every name in __introspectable__ as a read-only property backed by
      "_{name}" (see mirror()).
    - Provide __repr__/__rich_repr__ listing __displayable__ (or, when Unset,
      __introspectable__) fields.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def check_name(cls, name, /, *, field="name"):
    """
    validate an action/option name and return it trimmed.

    raises
    - ValidationError when the value is not a non-empty string matching
      ^[A-Za-z0-9_-]+$.
    """
    if not isinstance(name, str):
        raise ValidationError(f"{cls.__typename__} {field!r} must be a string")
    if not NAME_PATTERN.fullmatch(name := name.strip()):
        raise ValidationError(f"{cls.__typename__} {field!r} must match ^[A-Za-z0-9_-]+$ (got {name!r})")
    return name


def check_text(cls, text, /, *, field="description"):
    """
    validate an optional free-text field; Unset and None become "".
    """
    if text is None or text is Unset:
        return ""
    if not isinstance(text, str):
        raise ValidationError(f"{cls.__typename__} {field!r} must be a string")
    return text.strip()
