"""This module contains utility functions to help format errors raised by
``collects`` internals.
"""
from typing import Iterable


def shorten_list(seq: Iterable, max_length: int = 5) -> str:
    """Converts an iterable into an abridged string for use in error messages.
    """
    seq = list(seq)
    if len(seq) <= max_length:
        return str(seq)
    shortened = ", ".join(repr(i) for i in seq[:max_length])
    return f"[{shortened}, ...] ({len(seq)})"


def type_name(typ) -> str:
    """Get a readable name for a type or type-like object."""
    if isinstance(typ, type):
        if typ.__module__ == "builtins":
            return typ.__qualname__
        return f"{typ.__module__}.{typ.__qualname__}"
    return repr(typ)
