"""
Option classification, conversion and validation.

coerce(node, tokens) turns the tokens left over by the resolver into typed
option values and positional arguments for one action.

Token classes
- "--name"          long option; consumes the next token unless BOOLEAN
- "--name=value"    inline long option (non-BOOLEAN only)
- "--no-name"       negated BOOLEAN option (implicit, never declared)
- "-x"              short option, resolved through OptionSpec.short
- "--"              end of options; everything after it is positional
- anything else     positional ("-" included)

The result is built in fresh containers and only returned when every check
passed, so a failure never leaves partially applied values behind.
"""
import math
from collections import deque

from .faults import IllegalArgumentError, MissingRequiredOptionError, OptionTypeError, UnknownOptionError
from .options import OptionType


def convert(spec, raw, /):
    """
    Convert the raw token `raw` according to spec.type.

    - ANY: returned unchanged.
    - NUMERIC: int when the token is integral, else a finite float.
    - BOOLEAN: never reaches here with a value (presence sets True).

    Raises
    - OptionTypeError when a NUMERIC token is not a finite number.
    """
    if spec.type is not OptionType.NUMERIC:
        return raw
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        value = float(raw)
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        raise OptionTypeError(
            'invalid value "%s" for numeric option "--%s"' % (raw, spec.name),
            token=raw,
            option=spec.name,
        )
    return value


def coerce(node, tokens, /):
    """
    Classify and convert `tokens` for the options of `node`.

    Returns
    - tuple[dict, frozenset, tuple]: (options, given, arguments)
      • options: every option of the node mapped to its value (explicit,
        default, or the zero value of its type), in declaration order.
      • given: names of the options explicitly supplied (negations included).
      • arguments: positional tokens in encounter order.

    Raises
    - UnknownOptionError: an option token names no option of the node.
    - IllegalArgumentError: missing/duplicated values, a value for a BOOLEAN
      option, or positionals under a node with arguments disabled.
    - OptionTypeError: a NUMERIC option received a non-numeric token.
    - MissingRequiredOptionError: a required option received nothing.
    """
    specs = node.options
    shorts = {spec.short: spec for spec in specs.values() if spec.short}
    values = {}
    arguments = []
    tokens = deque(tokens)
    positional = False

    def store(spec, value, token):
        if spec.name in values:
            raise IllegalArgumentError(
                'multiple values are not allowed for option "--%s"' % spec.name,
                token=token,
                option=spec.name,
            )
        values[spec.name] = value

    def take(spec, token):
        try:
            return convert(spec, tokens.popleft())
        except IndexError:
            raise IllegalArgumentError(
                'a value must be defined for option "--%s"' % spec.name,
                token=token,
                option=spec.name,
            ) from None

    while tokens:
        token = tokens.popleft()

        if positional or token == "-" or not token.startswith("-"):
            if not node.arguments:
                raise IllegalArgumentError('invalid command argument "%s"' % token, token=token, path=node.path)
            arguments.append(token)
        elif token == "--":
            positional = True
        elif token.startswith("--"):
            name, assigned, inline = token[2:].partition("=")
            spec = specs.get(name)
            if spec is None and not assigned and name.startswith("no-"):
                negated = specs.get(name[3:])
                if negated is not None and negated.type is OptionType.BOOLEAN:
                    store(negated, False, token)
                    continue
            if spec is None:
                raise UnknownOptionError('unknown option "%s"' % token, token=token, path=node.path)
            if spec.type is OptionType.BOOLEAN:
                if assigned:
                    raise IllegalArgumentError(
                        'boolean option "--%s" does not take a value' % spec.name,
                        token=token,
                        option=spec.name,
                    )
                store(spec, True, token)
            elif assigned:
                store(spec, convert(spec, inline), token)
            else:
                store(spec, take(spec, token), token)
        else:
            spec = shorts.get(token[1:]) if len(token) == 2 else None
            if spec is None:
                raise UnknownOptionError('unknown option "%s"' % token, token=token, path=node.path)
            if spec.type is OptionType.BOOLEAN:
                store(spec, True, token)
            else:
                store(spec, take(spec, token), token)

    for name, spec in specs.items():
        if name not in values and spec.required:
            raise MissingRequiredOptionError('option "--%s" is required' % name, option=name, path=node.path)

    options = {name: values.get(name, spec.default) for name, spec in specs.items()}
    return options, frozenset(values), tuple(arguments)


__all__ = (
    "convert",
    "coerce",
)
