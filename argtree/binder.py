"""
argtree positional binding.

bind() assigns the positional zone to the declared arguments:
required arguments first (one token each, an empty token counting as missing), then
optional ones while tokens remain, then the list argument (every remaining token).
Leftovers without a list argument are an error unless the system allows extra arguments.
"""
from typing import NamedTuple

from .faults import *
from .schemas import Array, validate
from .utils import *


class Positionals(NamedTuple):
    args: list
    opt_args: list
    list_args: list
    pending: list


def _invalid(argument, token, index, error):
    return InvalidArgumentValueError(
        f"Invalid value {token!r} for argument {argument.name!r} at {ordinal(index)} position: {error}.",
        code=FaultCode.INVALID_ARGUMENT_VALUE,
        title="invalid argument",
        hint=f"{argument.name!r} expects {argument.schema.name if argument.schema else 'a string'}",
        input=token,
        index=index,
    )


def _convert(argument, token, index):
    if argument.schema is None:
        return token
    if not (outcome := validate(argument.schema, token)).valid:
        raise _invalid(argument, token, index, outcome.error)
    return outcome.value


def _bind_list(argument, tokens, offset):
    if argument.schema is not None:
        schema = Array(argument.schema, min_length=argument.min_length, max_length=argument.max_length)
        if (outcome := validate(schema, tokens)).valid:
            return outcome.value
        error = outcome.error
    elif argument.min_length is not None and len(tokens) < argument.min_length:
        error = f"minimum {argument.min_length} items expected"
    elif argument.max_length is not None and len(tokens) > argument.max_length:
        error = f"maximum {argument.max_length} items expected"
    else:
        return list(tokens)

    raise InvalidArgumentValueError(
        f"Invalid values for list argument {argument.name!r}: {error}.",
        code=FaultCode.INVALID_ARGUMENT_VALUE,
        title="invalid argument",
        hint=f"{argument.name!r} takes the remaining positional values",
        input=" ".join(tokens),
        index=offset + 1,
    )


def bind(tokens, arguments, optional_arguments, list_argument, system, /, offset=0):
    """
    Bind positional tokens; return Positionals(args, opt_args, list_args, pending).

    pending lists (position, argument) pairs for missing required arguments whose
    schema asks for the value interactively; their slot in args holds Unset.
    """
    tokens = list(tokens)
    position = 0
    args, opt_args, pending, missing = [], [], [], []

    for argument in arguments:
        # An empty token fills the slot but counts as a missing value.
        if position < len(tokens) and (token := tokens[position]):
            args.append(_convert(argument, token, offset + position + 1))
            position += 1
            continue
        if position < len(tokens):
            position += 1
        if argument.asks:
            pending.append((len(args), argument))
            args.append(Unset)
        else:
            missing.append(argument.name)

    if missing:
        raise MissingArgumentsError(
            f"Missing required argument{'s' if len(missing) > 1 else ''}: {', '.join(missing)}.",
            code=FaultCode.MISSING_ARGUMENTS,
            title="missing arguments",
            hint=f"provide {' '.join(f'<{name}>' for name in missing)}",
            input="",
            index=offset + position + 1,
        )

    for argument in optional_arguments:
        if position >= len(tokens):
            break
        opt_args.append(_convert(argument, tokens[position], offset + position + 1))
        position += 1

    rest = tokens[position:]

    if list_argument is not None:
        return Positionals(args, opt_args, _bind_list(list_argument, rest, offset + position), pending)

    if rest and not system.allow_extra_arguments:
        raise UnexpectedArgumentsError(
            f"Unexpected argument{'s' if len(rest) > 1 else ''} {', '.join(map(repr, rest))} "
            f"starting at {ordinal(offset + position + 1)} position.",
            code=FaultCode.UNEXPECTED_ARGUMENTS,
            title="unexpected arguments",
            hint="remove them, or quote values that contain spaces",
            input=rest[0],
            index=offset + position + 1,
        )

    return Positionals(args, opt_args, [], pending)


__all__ = (
    "Positionals",
    "bind",
)
