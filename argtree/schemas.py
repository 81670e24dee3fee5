r"""
argtree schema primitives.

Overview
- SchemaKind: closed set of value kinds (string, number, boolean, array, tuple).
- Schema: immutable, introspectable validator node (String, Number, Boolean, Array, Tuple).
- validate(schema, raw): the one place where kinds are dispatched, by exhaustive match.
- Outcome: (value, error, valid) triple returned by every validation.

Configuration (read-only schema.config mapping)
- Shared
  • aliases: tuple[str, ...] short names ('v' for '-v'), deduplicated and sorted by length.
  • description: str | None
  • required: bool
  • default: Unset | value (used as-is when the flag is absent, never re-validated).
  • ask: Unset | str (interactive question asked when the value is missing).
- String: regex, min_length, max_length, to_case ("lower" | "upper"), enum (frozenset).
- Number: min, max, enum (frozenset), to_integer (floor, applied last).
- Array: schema (inner primitive), min_length, max_length.
- Tuple: schemas (ordered inner primitives).

Builders
- Every builder method returns a NEW schema (see __replace__); the receiver is left
  untouched, so a schema can be shared between commands without aliasing surprises.
- Inner schemas of arrays/tuples are stripped of required/default/aliases/ask.

Quick example:
    >>> from argtree.builders import string, number, array
    >>> level = string().to_case("upper").enum("A", "B")
    >>> level.parse("a")
    Outcome(value='A', error=None, valid=True)
    >>> array(number()).min_length(1).parse(["1", "2.5"])
    Outcome(value=[1, 2.5], error=None, valid=True)
"""
import math
import re
import warnings
from collections.abc import Iterable, Sequence
from enum import StrEnum
from typing import NamedTuple

from .faults import AskOverridesDefaultWarning
from .tokens import verify_name
from .utils import *


class SchemaKind(StrEnum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    TUPLE = "tuple"


PRIMITIVES = frozenset({SchemaKind.STRING, SchemaKind.NUMBER, SchemaKind.BOOLEAN})
CONTAINERS = frozenset({SchemaKind.ARRAY, SchemaKind.TUPLE})

# Keys that only make sense on a top-level (flag/argument) schema.
_OUTER_KEYS = ("required", "default", "aliases", "ask")

# Literal number syntax; digits are ASCII only and '_' separators are not accepted.
_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_RADIX = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_INFINITY = re.compile(r"[+-]?Infinity")


class Outcome(NamedTuple):
    value: object
    error: str | None
    valid: bool


def _ok(value):
    return Outcome(value, None, True)


def _err(message):
    return Outcome(None, message, False)


def _sanitize_common(cls, config, /):
    """
    Internal: normalize the shared configuration keys in place.
    """
    aliases = []
    for alias in config.get("aliases", ()):
        verify_name("alias", alias)
        if alias not in aliases:
            aliases.append(alias)
    config["aliases"] = tuple(sorted(aliases, key=len))

    if not isinstance(description := config.get("description"), str | None):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    elif isinstance(description, str) and not (description := description.strip()):
        raise ValueError(f"{cls.__typename__} 'description' cannot be empty")
    config["description"] = description

    if not isinstance(required := config.get("required", False), bool):
        raise TypeError(f"{cls.__typename__} 'required' must be a boolean")
    config["required"] = required

    config.setdefault("default", Unset)

    if not isinstance(ask := config.get("ask", Unset), str | Unset):
        raise TypeError(f"{cls.__typename__} 'ask' must be a string")
    elif isinstance(ask, str) and not (ask := ask.strip()):
        raise ValueError(f"{cls.__typename__} 'ask' cannot be empty")
    config["ask"] = ask


def _sanitize_length(cls, config, /):
    for name in ("min_length", "max_length"):
        if not isinstance(length := config.get(name), int | None) or isinstance(length, bool):
            raise TypeError(f"{cls.__typename__} {name!r} must be an integer")
        elif length is not None and length < 0:
            raise ValueError(f"{cls.__typename__} {name!r} cannot be negative")
        config[name] = length

    if None not in (config["min_length"], config["max_length"]) and config["min_length"] > config["max_length"]:
        raise ValueError(f"{cls.__typename__} 'min_length' cannot be greater than 'max_length'")


def _sanitize_inner(cls, schema, /):
    """
    Internal: check an inner schema is a primitive and strip its outer-only keys.
    """
    if not isinstance(schema, Schema):
        raise TypeError(f"{cls.__typename__} inner schema must be a schema")
    if schema.kind not in PRIMITIVES:
        raise TypeError(f"{cls.__typename__} inner schema must be a string, number or boolean")
    return replace(schema, required=False, default=Unset, aliases=(), ask=Unset)


class Schema(metaclass=ReflectiveType):
    """
    Base of every schema. Not instantiated directly: use the concrete kinds.

    Each subclass declares its kind with the class keyword `kind=` and lists the
    config keys it accepts in __fields__.
    """
    __introspectable__ = ("kind", "config")
    __fields__ = ()

    def __init_subclass__(cls, /, kind=Unset, **options):
        super().__init_subclass__(**options)
        if not isinstance(kind, SchemaKind):
            raise TypeError(f"type {cls.__name__!r} must declare a schema kind")
        cls.__kind__ = kind

    def __new__(cls, /, **config):
        if cls is Schema:
            raise TypeError("type 'Schema' cannot be instantiated directly")

        unknown = config.keys() - {*_OUTER_KEYS, "description", *cls.__fields__}
        if unknown:
            raise TypeError(f"{cls.__typename__} got unexpected config keys: {', '.join(sorted(unknown))}")

        _sanitize_common(cls, config)
        cls.__sanitize__(config)

        if config["ask"] is not Unset and config["default"] is not Unset:
            warnings.warn(
                f"{cls.__typename__} has both 'ask' and 'default'; the question is still asked "
                "and the default only pre-fills the answer",
                AskOverridesDefaultWarning,
                stacklevel=3,
            )

        self = super().__new__(cls)
        self._kind = cls.__kind__
        self._config = config
        return self

    @classmethod
    def __sanitize__(cls, config, /):
        """
        Kind-specific normalization hook (mutates config in place).
        """

    @property
    def name(self):
        return str(self._kind)

    @property
    def islist(self):
        return self._kind in CONTAINERS

    def __replace__(self, **overrides):
        return type(self)(**{**self._config, **overrides})

    def parse(self, value, /):
        """
        Validate a raw string (or a list of raw strings for arrays/tuples).
        """
        return validate(self, value)

    # ── Shared builders ─────────────────────────────────────────────────────

    def default(self, value, /):
        return replace(self, default=value)

    def aliases(self, *aliases):
        return replace(self, aliases=aliases)

    def required(self, required=True, /):
        return replace(self, required=required)

    def description(self, description, /):
        return replace(self, description=description)

    def ask(self, question="Enter a value:", /):
        return replace(self, ask=question)


class String(Schema, kind=SchemaKind.STRING):
    __fields__ = ("regex", "min_length", "max_length", "to_case", "enum")

    @classmethod
    def __sanitize__(cls, config, /):
        if isinstance(regex := config.get("regex"), str):
            regex = re.compile(regex)
        if not isinstance(regex, re.Pattern | None):
            raise TypeError(f"{cls.__typename__} 'regex' must be a pattern or a string")
        config["regex"] = regex

        _sanitize_length(cls, config)

        if (to_case := config.get("to_case")) not in ("lower", "upper", None):
            raise ValueError(f"{cls.__typename__} 'to_case' must be 'lower' or 'upper'")
        config["to_case"] = to_case

        enum = config.get("enum", ())
        if isinstance(enum, str) or not isinstance(enum, Iterable):
            raise TypeError(f"{cls.__typename__} 'enum' must be an iterable of strings")
        enum = frozenset(enum)
        if not all(isinstance(item, str) for item in enum):
            raise TypeError(f"{cls.__typename__} 'enum' must be an iterable of strings")
        config["enum"] = enum

    def regex(self, regex, /):
        return replace(self, regex=regex)

    def min_length(self, length, /):
        return replace(self, min_length=length)

    def max_length(self, length, /):
        return replace(self, max_length=length)

    def to_case(self, case, /):
        return replace(self, to_case=case)

    def enum(self, *values):
        return replace(self, enum=values)


class Number(Schema, kind=SchemaKind.NUMBER):
    __fields__ = ("min", "max", "enum", "to_integer")

    @classmethod
    def __sanitize__(cls, config, /):
        for name in ("min", "max"):
            if not isinstance(bound := config.get(name), int | float | None) or isinstance(bound, bool):
                raise TypeError(f"{cls.__typename__} {name!r} must be a number")
            config[name] = bound

        if None not in (config["min"], config["max"]) and config["min"] > config["max"]:
            raise ValueError(f"{cls.__typename__} 'min' cannot be greater than 'max'")

        enum = config.get("enum", ())
        if not isinstance(enum, Iterable) or isinstance(enum, str):
            raise TypeError(f"{cls.__typename__} 'enum' must be an iterable of numbers")
        enum = frozenset(enum)
        if any(isinstance(item, bool) or not isinstance(item, int | float) for item in enum):
            raise TypeError(f"{cls.__typename__} 'enum' must be an iterable of numbers")
        config["enum"] = enum

        if not isinstance(to_integer := config.get("to_integer", False), bool):
            raise TypeError(f"{cls.__typename__} 'to_integer' must be a boolean")
        config["to_integer"] = to_integer

    def min(self, bound, /):
        return replace(self, min=bound)

    def max(self, bound, /):
        return replace(self, max=bound)

    def enum(self, *values):
        return replace(self, enum=values)

    def to_integer(self, to_integer=True, /):
        return replace(self, to_integer=to_integer)


class Boolean(Schema, kind=SchemaKind.BOOLEAN):
    pass


class Array(Schema, kind=SchemaKind.ARRAY):
    __fields__ = ("schema", "min_length", "max_length")

    def __new__(cls, schema=Unset, /, **config):
        if schema is not Unset:
            config["schema"] = schema
        return super().__new__(cls, **config)

    @classmethod
    def __sanitize__(cls, config, /):
        if "schema" not in config:
            raise TypeError(f"{cls.__typename__} requires an inner schema")
        config["schema"] = _sanitize_inner(cls, config["schema"])
        _sanitize_length(cls, config)

    @property
    def name(self):
        return f"array[{self._config['schema'].name}]"

    def min_length(self, length, /):
        return replace(self, min_length=length)

    def max_length(self, length, /):
        return replace(self, max_length=length)


class Tuple(Schema, kind=SchemaKind.TUPLE):
    __fields__ = ("schemas",)

    def __new__(cls, *schemas, **config):
        if schemas:
            config["schemas"] = schemas
        return super().__new__(cls, **config)

    @classmethod
    def __sanitize__(cls, config, /):
        schemas = config.get("schemas", ())
        if not isinstance(schemas, Sequence) or not schemas:
            raise TypeError(f"{cls.__typename__} requires at least one inner schema")
        config["schemas"] = tuple(_sanitize_inner(cls, schema) for schema in schemas)

    @property
    def name(self):
        return f"tuple[{', '.join(schema.name for schema in self._config['schemas'])}]"


def _validate_string(config, value):
    value = value.strip()

    if config["regex"] is not None and not config["regex"].search(value):
        return _err(f"{value!r} doesn't match pattern {config['regex'].pattern!r}")

    if config["min_length"] is not None and len(value) < config["min_length"]:
        return _err(f"minimum {config['min_length']} characters expected")

    if config["max_length"] is not None and len(value) > config["max_length"]:
        return _err(f"maximum {config['max_length']} characters expected")

    match config["to_case"]:
        case "lower":
            value = value.lower()
        case "upper":
            value = value.upper()

    if config["enum"] and value not in config["enum"]:
        return _err(f"{value!r} is not one of {', '.join(map(repr, sorted(config['enum'])))}")

    return _ok(value)


def _coerce_number(text):
    """
    Parse decimal, exponent, radix-prefixed ('0x', '0o', '0b') or 'Infinity' literals.
    """
    if _RADIX.fullmatch(text):
        return int(text, 0)
    if _INFINITY.fullmatch(text):
        return float(text)
    if not _DECIMAL.fullmatch(text):
        return None
    try:
        return int(text)
    except ValueError:
        return float(text)


def _validate_number(config, value):
    if not (text := value.strip()):
        return _err("number can not be empty string")

    if (number := _coerce_number(text)) is None:
        return _err(f"{value!r} is not a valid number")

    if config["min"] is not None and number < config["min"]:
        return _err(f"minimum {config['min']} expected")

    if config["max"] is not None and number > config["max"]:
        return _err(f"maximum {config['max']} expected")

    if config["enum"] and number not in config["enum"]:
        return _err(f"{number!r} is not one of {', '.join(map(repr, sorted(config['enum'])))}")

    if config["to_integer"] and not isinstance(number, int):
        if math.isinf(number):
            return _err(f"{value!r} cannot be converted to an integer")
        number = math.floor(number)

    return _ok(number)


def _validate_boolean(config, value):
    match value.strip().lower():
        case "true" | "yes":
            return _ok(True)
        case "false" | "no":
            return _ok(False)
    return _err(f"{value.strip()!r} is not a valid boolean")


def _validate_array(config, value):
    inner = config["schema"]

    if isinstance(value, str) or not isinstance(value, Sequence):
        return _err(f"expected an array of {inner.name}")

    if config["min_length"] is not None and len(value) < config["min_length"]:
        return _err(f"minimum {config['min_length']} items expected")

    if config["max_length"] is not None and len(value) > config["max_length"]:
        return _err(f"maximum {config['max_length']} items expected")

    values = []
    for item in value:
        if not (outcome := validate(inner, item)).valid:
            return outcome
        values.append(outcome.value)
    return _ok(values)


def _validate_tuple(config, value):
    schemas = config["schemas"]

    if isinstance(value, str) or not isinstance(value, Sequence):
        return _err("expected a tuple")

    if len(value) != len(schemas):
        return _err(f"expected {len(schemas)} items")

    values = []
    for schema, item in zip(schemas, value):
        if not (outcome := validate(schema, item)).valid:
            return outcome
        values.append(outcome.value)
    return _ok(values)


def validate(schema, value, /):
    """
    Validate a raw value against a schema, dispatching on its kind.

    Primitives expect a single raw string; arrays and tuples expect a sequence of raw
    strings. A primitive given a non-string is reported as an error, not raised.
    """
    if not isinstance(schema, Schema):
        raise TypeError("validate() first argument must be a schema")

    match schema.kind:
        case SchemaKind.STRING | SchemaKind.NUMBER | SchemaKind.BOOLEAN if not isinstance(value, str):
            return _err(f"expected a single {schema.name} value")
        case SchemaKind.STRING:
            return _validate_string(schema.config, value)
        case SchemaKind.NUMBER:
            return _validate_number(schema.config, value)
        case SchemaKind.BOOLEAN:
            return _validate_boolean(schema.config, value)
        case SchemaKind.ARRAY:
            return _validate_array(schema.config, value)
        case SchemaKind.TUPLE:
            return _validate_tuple(schema.config, value)

    raise RuntimeError("unreachable")


__all__ = (
    "SchemaKind",
    "Outcome",
    "Schema",
    "String",
    "Number",
    "Boolean",
    "Array",
    "Tuple",
    "validate",
)
