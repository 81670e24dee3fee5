"""
argtree token classification.

- classify(): turn one raw token into a Record (flag, alias or plain value).
- split_trailing(): cut the token stream at the trailing-arguments separator.
- divide(): separate the positional zone (before the first flag) from the option zone.
- verify_name(): naming rules shared by flags, aliases and commands.

Positions in records are 1-based and relative to the original argument vector, so
faults can point at the offending token ("at third position").
"""
import re
from enum import StrEnum
from typing import NamedTuple

from .faults import EqualAssignmentError, FaultCode
from .utils import ordinal

_FLAG = re.compile(r"--[^-]")
_ALIAS = re.compile(r"-[^-]")
_ASSIGNMENT = re.compile(r"(?P<key>[^=]+)=(?P<value>.+)", re.DOTALL)


class TokenKind(StrEnum):
    FLAG = "flag"
    ALIAS = "alias"
    VALUE = "value"


class Record(NamedTuple):
    raw: str
    key: str | None
    value: str | None
    kind: TokenKind
    negated: bool = False
    index: int = 0


def verify_name(kind, name, ending=None, /):
    """
    Validate a flag, alias or command name; raise ValueError on the first violation.

    Rules
    - non-empty, no whitespace, does not start with '-', contains no '='.
    - does not end with the boolean negation suffix (when one is configured).
    """
    if not isinstance(name, str):
        raise TypeError(f"{kind} name must be a string")
    if not name:
        raise ValueError(f"{kind} name cannot be empty")
    if any(char.isspace() for char in name):
        raise ValueError(f"{kind} {name!r} cannot contain spaces")
    if name.startswith("-"):
        raise ValueError(f"{kind} {name!r} should not start with '-'")
    if "=" in name:
        raise ValueError(f"{kind} {name!r} should not contain '='")
    if ending and name.endswith(ending):
        raise ValueError(f"{kind} {name!r} should not end with {ending!r}")
    return name


def classify(token, system, /, index=0):
    """
    Classify a single raw token.

    '--name' is a flag, '-n' an alias, anything else a value. Flag and alias keys
    may embed a value ('--name=value') and may carry the negation suffix ('--debug\\').
    """
    if _FLAG.match(token):
        kind, key = TokenKind.FLAG, token[2:]
    elif _ALIAS.match(token):
        kind, key = TokenKind.ALIAS, token[1:]
    else:
        return Record(token, None, token, TokenKind.VALUE, False, index)

    if assignment := _ASSIGNMENT.fullmatch(key):
        if not system.allow_equal_assign:
            raise EqualAssignmentError(
                f"Equal-sign assignment {token!r} at {ordinal(index)} position is not allowed.",
                code=FaultCode.EQUAL_ASSIGNMENT,
                title="equal assignment",
                hint=f"pass the value as its own token: '{token.partition('=')[0]} {assignment['value']}'",
                input=token,
                index=index,
            )
        return Record(token, assignment["key"], assignment["value"], kind, False, index)

    ending = system.boolean_not_syntax_ending
    if ending and key.endswith(ending) and len(key) > len(ending):
        return Record(token, key[:-len(ending)], None, kind, True, index)

    return Record(token, key, None, kind, False, index)


def split_trailing(tokens, separator, /):
    """
    Return (main, trailing) split at the first separator; the separator is dropped.
    """
    tokens = list(tokens)
    try:
        position = tokens.index(separator)
    except ValueError:
        return tokens, []
    return tokens[:position], tokens[position + 1:]


def divide(tokens, system, /, offset=0):
    """
    Split tokens into (positionals, records).

    Everything before the first flag or alias is positional (raw strings); from the
    first flag on, every token is classified, values included.
    """
    positionals, records = [], []
    for position, token in enumerate(tokens, offset + 1):
        if not records:
            record = classify(token, system, position)
            if record.kind is TokenKind.VALUE:
                positionals.append(token)
            else:
                records.append(record)
        else:
            records.append(classify(token, system, position))
    return positionals, records


__all__ = (
    "TokenKind",
    "Record",
    "verify_name",
    "classify",
    "split_trailing",
    "divide",
)
