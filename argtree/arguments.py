r"""
argtree positional argument declarations.

Overview
- Argument: one positional value, required or optional depending on where the command
  lists it (arguments= vs optional_arguments=).
- ListArgument: the variadic tail; consumes every remaining positional token.

Metadata (sanitized on construction)
- name: str, non-empty, no whitespace, must not start with '-'.
- schema: None | primitive schema (string, number, boolean). None passes raw strings.
  An argument schema may carry .ask() so that a missing required value is prompted for.
- description: Unset | str (help text), non-empty when provided.
- ListArgument only: min_length/max_length (non-negative integers, min <= max).

Quick example:
    >>> from argtree.arguments import Argument, ListArgument
    >>> from argtree.builders import number
    >>> Argument("count", number().min(1))
    >>> ListArgument("files", min_length=1)
"""
from .schemas import Schema, SchemaKind
from .utils import *


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate name, schema and description in place.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif any(char.isspace() for char in name) or name.startswith("-"):
        raise ValueError(f"{cls.__typename__} name {name!r} must be a single word not starting with '-'")
    metadata["name"] = name

    if not isinstance(schema := metadata["schema"], Schema | None):
        raise TypeError(f"{cls.__typename__} 'schema' must be a schema")
    elif schema is not None and schema.kind not in (SchemaKind.STRING, SchemaKind.NUMBER, SchemaKind.BOOLEAN):
        raise TypeError(f"{cls.__typename__} 'schema' must be a string, number or boolean schema")

    if not isinstance(description := metadata["description"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'description' must be a string")
    elif isinstance(description, str) and not (description := description.strip()):
        raise ValueError(f"{cls.__typename__} 'description' cannot be empty")
    metadata["description"] = coalesce(description)


class Argument(metaclass=ReflectiveType):
    __introspectable__ = ("name", "schema", "description")

    def __new__(cls, name, schema=None, /, *, description=Unset):
        _sanitize_metadata(cls, metadata := {
            "name": name,
            "schema": schema,
            "description": description,
        })

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def asks(self):
        """
        True when a missing value should be prompted for instead of failing.
        """
        return self._schema is not None and self._schema.config["ask"] is not Unset


class ListArgument(metaclass=ReflectiveType):
    __introspectable__ = ("name", "schema", "min_length", "max_length", "description")

    def __new__(cls, name, schema=None, /, *, min_length=None, max_length=None, description=Unset):
        _sanitize_metadata(cls, metadata := {
            "name": name,
            "schema": schema,
            "min_length": min_length,
            "max_length": max_length,
            "description": description,
        })

        for field in ("min_length", "max_length"):
            if not isinstance(length := metadata[field], int | None) or isinstance(length, bool):
                raise TypeError(f"{cls.__typename__} {field!r} must be an integer")
            elif length is not None and length < 0:
                raise ValueError(f"{cls.__typename__} {field!r} cannot be negative")

        if None not in (min_length, max_length) and min_length > max_length:
            raise ValueError(f"{cls.__typename__} 'min_length' cannot be greater than 'max_length'")

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self


__all__ = (
    "Argument",
    "ListArgument",
)
