"""This module contains the registry that third parties use to add new
container kinds to :func:`collect_as`.

A new kind is registered under a *tag*: a class that the extension owns.
Descriptors that are the tag itself, or a parametrization of it, are routed to
the registered builder, which is called as ``builder(descriptor, sequence)``.

Two rules keep independently developed extensions from claiming the same
descriptors:

    1.  The tag must be owned by the extension.  It cannot come from the
        standard library, numpy, pandas or ``collects`` itself, and it must be
        defined in the same top-level package as its builder.
    2.  Every builder accepts exactly two inputs, the descriptor and the
        sequence, with no other required arguments.

Both rules are checked when the builder is registered.

Examples
--------
.. code:: python

    class Bag(list):
        pass

    @register_kind(Bag)
    def collect_bag(descriptor, sequence):
        return Bag(sequence)

    >>> collect_as(Bag, range(3))
    [0, 1, 2]
"""
from __future__ import annotations
import inspect
from types import MappingProxyType
from typing import Callable, Mapping
import warnings


# modules whose types are shared by everyone and can't be claimed as tags
PROTECTED_MODULES = frozenset({
    "abc",
    "builtins",
    "collections",
    "collects",
    "numbers",
    "numpy",
    "pandas",
    "types",
    "typing",
})


_REGISTRY: dict[type, Callable] = {}


######################
####    PUBLIC    ####
######################


def register_kind(tag: type, builder: Callable | None = None) -> Callable:
    """Register a builder for a new container kind.

    Parameters
    ----------
    tag : type
        A class owned by the extension.  Descriptors whose origin is this
        class are dispatched to ``builder``.
    builder : Callable, optional
        A function accepting ``(descriptor, sequence)`` and returning the
        collected container.  If this is omitted, ``register_kind()`` returns
        a decorator.

    Returns
    -------
    Callable
        The builder, or a decorator that registers one.

    Raises
    ------
    TypeError
        If ``tag`` is not a class owned by the extension, or if ``builder``
        does not accept exactly two positional arguments.

    Notes
    -----
    Registering a tag a second time replaces its builder and emits a
    ``UserWarning``.
    """
    def decorator(func: Callable) -> Callable:
        """Register the decorated function."""
        _check_tag(tag, func)
        _check_builder(func)
        if tag in _REGISTRY:
            warn_msg = (
                f"replacing builder for container kind {tag.__qualname__}: "
                f"{_REGISTRY[tag].__qualname__} -> {func.__qualname__}"
            )
            warnings.warn(warn_msg, UserWarning, stacklevel=3)
        _REGISTRY[tag] = func
        return func

    if builder is None:
        return decorator
    return decorator(builder)


def unregister_kind(tag: type) -> None:
    """Remove a registered container kind.

    Raises
    ------
    KeyError
        If ``tag`` is not registered.
    """
    try:
        del _REGISTRY[tag]
    except KeyError:
        raise KeyError(f"container kind is not registered: {tag}") from None


def registered_kinds() -> Mapping[type, Callable]:
    """A read-only mapping from registered tags to their builders."""
    return MappingProxyType(_REGISTRY)


#######################
####    PRIVATE    ####
#######################


def _package(module: str) -> str:
    """Get the top-level package of a dotted module name."""
    return module.partition(".")[0]


def _check_tag(tag: type, builder: Callable) -> None:
    """Ensure that a tag is a class owned by the extension."""
    if not isinstance(tag, type):
        raise TypeError(f"container kind tag must be a class, not {repr(tag)}")

    owner = _package(tag.__module__)
    if owner in PROTECTED_MODULES:
        raise TypeError(
            f"cannot register {tag.__qualname__} from '{tag.__module__}' as a "
            f"container kind: tags must be owned by the extension"
        )

    source = _package(getattr(builder, "__module__", None) or "")
    if source != owner:
        raise TypeError(
            f"builder '{source}' does not own container kind "
            f"{tag.__qualname__} (defined in '{tag.__module__}')"
        )


def _check_builder(builder: Callable) -> None:
    """Ensure that a builder can be called as ``builder(descriptor, sequence)``
    and requires nothing else.
    """
    if not callable(builder):
        raise TypeError(f"builder must be callable: {repr(builder)}")

    params = inspect.signature(builder).parameters.values()
    positional = [
        p for p in params
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    required = [p for p in positional if p.default is p.empty]
    variadic = [p for p in params if p.kind is p.VAR_POSITIONAL]
    required_keywords = [
        p for p in params
        if p.kind is p.KEYWORD_ONLY and p.default is p.empty
    ]
    if (
        not len(required) <= 2 <= len(positional) or
        variadic or
        required_keywords
    ):
        raise TypeError(
            f"builder {builder.__qualname__}() must accept exactly two "
            f"arguments (descriptor, sequence), not "
            f"{inspect.signature(builder)}"
        )
