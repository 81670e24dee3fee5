"""
argtree builder surface.

Short constructors for schemas, meant to be chained:

    >>> from argtree.builders import string, number, boolean, array, tuple
    >>> string().min_length(3).aliases("n").required()
    >>> array(number().min(0)).max_length(4)
    >>> tuple(string(), number())
"""
from .schemas import String, Number, Boolean, Array, Tuple


def string():
    return String()


def number():
    return Number()


def boolean():
    return Boolean()


def array(schema, /):
    """
    List of values validated by a primitive inner schema.
    """
    return Array(schema)


def tuple(*schemas):
    """
    Fixed-length sequence validated position by position.
    """
    return Tuple(*schemas)


__all__ = (
    "string",
    "number",
    "boolean",
    "array",
    "tuple",
)
