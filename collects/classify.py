"""This module classifies output type descriptors into the container kind,
element type and dimension count that they request.

Classification is a pure function of the descriptor.  Spelling variants that
are definitionally equal are collapsed into one canonical form here, so that
nothing downstream has to special-case them:

    *   ``set``, ``set[Any]`` and ``Set[Any]`` all classify as ``Set``.
    *   ``set[T]`` classifies as ``Set[T]``.
    *   ``numpy.ndarray`` and ``Array[Any]`` classify as ``Array``.
    *   ``Vector`` and ``Matrix`` are ``Array[Any, 1]`` and ``Array[Any, 2]``.
    *   ``tuple`` and ``typing.Tuple`` classify as ``Tuple``.
    *   ``typing.NoReturn`` is the same bottom type as ``typing.Never``.
"""
from __future__ import annotations
import enum
from functools import lru_cache
import typing
from typing import Any, NamedTuple

import numpy as np

from collects.containers import Array, Buffer, Descriptor, Set
from collects.eltypes import Never, is_eltype, normalize
from collects.errors import EmptyTypeTarget, UnrecognizedDescriptor
from collects.extension import registered_kinds
from collects.util.error import shorten_list
from collects.util.type_hints import descriptor_like


# maximum number of classified descriptors to remember
CLASSIFY_CACHE_SIZE = 256


class Kind(enum.Enum):
    """The coarse container family requested by a descriptor."""

    SET = "set"
    ARRAY = "array"
    BUFFER = "buffer"
    TUPLE = "tuple"
    EXTENSION = "extension"


class Classified(NamedTuple):
    """The canonical form of an output type descriptor.

    Attributes
    ----------
    kind : Kind
        The requested container family.
    origin : type
        The container class (or extension tag) that results must be instances
        of.
    eltype : type | None
        The requested element type, or ``None`` if it is unspecified.
    ndims : int | None
        The requested dimension count, or ``None`` if it is unspecified.
    """

    kind: Kind
    origin: type
    eltype: type | None = None
    ndims: int | None = None


######################
####    PUBLIC    ####
######################


def classify(descriptor: descriptor_like) -> Classified:
    """Classify an output type descriptor.

    Parameters
    ----------
    descriptor : type | Descriptor | GenericAlias
        The requested output type.

    Returns
    -------
    Classified
        The canonical form of the descriptor.

    Raises
    ------
    EmptyTypeTarget
        If the descriptor is the bottom type itself.
    UnrecognizedDescriptor
        If the descriptor does not name one of the supported container kinds,
        or has malformed parameters.

    Examples
    --------
    .. doctest::

        >>> classify(set[int]).eltype
        <class 'int'>
        >>> classify(Matrix).ndims
        2
    """
    try:
        hash(descriptor)
    except TypeError:
        raise UnrecognizedDescriptor(
            f"not a type of a collection: {repr(descriptor)}"
        ) from None

    # extensions are checked first, since they can be registered at any time
    origin = _origin(descriptor)
    if isinstance(origin, type) and origin in registered_kinds():
        return Classified(Kind.EXTENSION, origin)

    return _classify(descriptor)


def isa(value: Any, descriptor: descriptor_like) -> bool:
    """Check whether a value is an instance of an output type descriptor.

    Containers must be instances of the descriptor's container class and, where
    the descriptor specifies them, match its element type and dimension count
    exactly.
    """
    target = classify(descriptor)
    if not isinstance(value, target.origin):
        return False
    eltype = getattr(value, "eltype", None)
    if target.eltype is not None and eltype != target.eltype:
        return False
    if target.ndims is not None and value.ndim != target.ndims:
        return False
    return True


def is_exact(value: Any, target: Classified) -> bool:
    """Check whether a value already has the exact runtime type requested by a
    classified descriptor, so that collecting it would be a plain copy.
    """
    if target.kind is Kind.EXTENSION or type(value) is not target.origin:
        return False
    if target.eltype is not None and value.eltype != target.eltype:
        return False
    if target.ndims is not None and value.ndim != target.ndims:
        return False
    return True


#######################
####    PRIVATE    ####
#######################


@lru_cache(maxsize=CLASSIFY_CACHE_SIZE)
def _classify(descriptor: descriptor_like) -> Classified:
    """Classify a descriptor that is not an extension kind."""
    if normalize(descriptor) is Never:
        raise EmptyTypeTarget(
            f"{repr(descriptor)} is not a type of a collection"
        )

    # tuples never take parameters
    if descriptor is tuple or descriptor is typing.Tuple:
        return Classified(Kind.TUPLE, tuple)

    # numpy arrays are only accepted unparametrized
    if descriptor is np.ndarray:
        return Classified(Kind.ARRAY, Array)

    origin = _origin(descriptor)
    params = _params(descriptor)

    if origin is Set or origin is set:
        if len(params) > 1:
            _unrecognized(descriptor, "sets take at most one parameter")
        return Classified(Kind.SET, Set, *map(_eltype, params))

    if origin is Array:
        if len(params) > 2:
            _unrecognized(descriptor, "arrays take at most two parameters")
        if len(params) == 2:
            return Classified(
                Kind.ARRAY,
                Array,
                _eltype(params[0]),
                _ndims(params[1])
            )
        return Classified(Kind.ARRAY, Array, *map(_eltype, params))

    if origin is Buffer:
        if len(params) > 1:
            _unrecognized(descriptor, "buffers take at most one parameter")
        eltype = _eltype(params[0]) if params else None
        return Classified(Kind.BUFFER, Buffer, eltype, 1)

    raise UnrecognizedDescriptor(
        f"not a type of a collection: {repr(descriptor)}"
    )


def _origin(descriptor: descriptor_like) -> Any:
    """Get the unparametrized form of a descriptor."""
    if isinstance(descriptor, Descriptor):
        return descriptor.origin
    origin = typing.get_origin(descriptor)
    if origin is None:
        return descriptor
    return origin


def _params(descriptor: descriptor_like) -> tuple:
    """Get the parameters of a descriptor."""
    if isinstance(descriptor, Descriptor):
        return descriptor.params
    return typing.get_args(descriptor)


def _eltype(param: Any) -> type | None:
    """Interpret a descriptor parameter as an element type."""
    if param is Any:
        return None
    if not is_eltype(param):
        raise UnrecognizedDescriptor(
            f"element type must be a class or Never, not {repr(param)}"
        )
    return normalize(param)


def _ndims(param: Any) -> int | None:
    """Interpret a descriptor parameter as a dimension count."""
    if param is Any:
        return None
    if not isinstance(param, int) or isinstance(param, bool) or param < 0:
        raise UnrecognizedDescriptor(
            f"dimension count must be a non-negative integer, not "
            f"{repr(param)}"
        )
    return param


def _unrecognized(descriptor: descriptor_like, reason: str) -> None:
    params = shorten_list(_params(descriptor))
    raise UnrecognizedDescriptor(
        f"{reason}: {_origin(descriptor).__name__} received {params}"
    )
