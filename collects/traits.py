"""This module describes the capabilities of input sequences that
:func:`collect_as` can discover before consuming them.

Every input is an arbitrary iterable.  Three optional capabilities can be
declared on top of plain iteration:

    *   a declared element type (:func:`eltype`), which may be imprecise.
    *   a declared size or shape (:func:`iterator_size`, :func:`length`,
        :func:`shape`).
    *   a declared finiteness class (:class:`IsInfinite` sizes).

Each capability is a :func:`functools.singledispatch` function, so third
parties can describe their own sequences by registering implementations for
them.  Objects that are not registered can still declare an element type by
defining an ``__eltype__`` attribute.
"""
from __future__ import annotations
from functools import reduce, singledispatch
import itertools
import math
from typing import Any, Iterable, Iterator

import numpy as np
import pandas as pd

from collects.eltypes import Never, eltype_of_dtype, normalize, typejoin
from collects.util.type_hints import HasEltype, shape_like


##########################
####    SIZE TYPES    ####
##########################


class IteratorSize:
    """Base class for the size declarations returned by
    :func:`iterator_size`.
    """

    def __eq__(self, other: Any) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class HasShape(IteratorSize):
    """The sequence declares an N-dimensional shape, and its length is the
    product of its extents.
    """

    def __init__(self, ndims: int):
        self.ndims = ndims

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, HasShape) and self.ndims == other.ndims

    def __hash__(self) -> int:
        return hash((HasShape, self.ndims))

    def __repr__(self) -> str:
        return f"HasShape({self.ndims})"


class HasLength(IteratorSize):
    """The sequence declares a length, but no shape."""


class SizeUnknown(IteratorSize):
    """The sequence is finite, but its length is not known in advance."""


class IsInfinite(IteratorSize):
    """The sequence never terminates."""


######################
####    PUBLIC    ####
######################


@singledispatch
def eltype(seq: Iterable) -> type:
    """Get the element type declared by a sequence.

    Parameters
    ----------
    seq : Iterable
        An arbitrary iterable.

    Returns
    -------
    type
        The declared element type.  This can be imprecise (a supertype of the
        runtime types of the elements), and defaults to ``object`` for
        sequences that declare nothing.

    Notes
    -----
    The declared type is never verified against the actual elements here.
    """
    if isinstance(seq, HasEltype):
        return normalize(seq.__eltype__)
    return object


@eltype.register(range)
def _eltype_range(seq: range) -> type:
    return int


@eltype.register(str)
def _eltype_str(seq: str) -> type:
    return str


@eltype.register(bytes)
@eltype.register(bytearray)
def _eltype_bytes(seq: bytes) -> type:
    return int


@eltype.register(tuple)
def _eltype_tuple(seq: tuple) -> type:
    # tuples are immutable, so the join of their items is fixed
    return reduce(typejoin, (type(x) for x in seq), Never)


@eltype.register(np.ndarray)
def _eltype_ndarray(seq: np.ndarray) -> type:
    return eltype_of_dtype(seq.dtype)


@eltype.register(pd.Series)
@eltype.register(pd.Index)
@eltype.register(pd.api.extensions.ExtensionArray)
def _eltype_pandas(seq) -> type:
    # extension dtypes can hold missing values that their scalar type can't
    if isinstance(seq.dtype, np.dtype):
        return eltype_of_dtype(seq.dtype)
    return object


@singledispatch
def iterator_size(seq: Iterable) -> IteratorSize:
    """Get the size declared by a sequence.

    Parameters
    ----------
    seq : Iterable
        An arbitrary iterable.

    Returns
    -------
    IteratorSize
        :class:`HasLength` if the sequence implements ``len()``, otherwise
        :class:`SizeUnknown`.  Registered implementations can return
        :class:`HasShape` or :class:`IsInfinite` instead.
    """
    if hasattr(seq, "__len__"):
        return HasLength()
    return SizeUnknown()


@iterator_size.register(np.ndarray)
def _iterator_size_ndarray(seq: np.ndarray) -> IteratorSize:
    return HasShape(seq.ndim)


@iterator_size.register(itertools.count)
@iterator_size.register(itertools.cycle)
def _iterator_size_infinite(seq: Iterator) -> IteratorSize:
    return IsInfinite()


@iterator_size.register(itertools.repeat)
def _iterator_size_repeat(seq: itertools.repeat) -> IteratorSize:
    # repeat(x) without a count refuses to report a length hint
    try:
        seq.__length_hint__()
    except TypeError:
        return IsInfinite()
    return SizeUnknown()


def has_length(seq: Iterable) -> bool:
    """Check whether a sequence declares its length."""
    return isinstance(iterator_size(seq), (HasLength, HasShape))


def is_infinite(seq: Iterable) -> bool:
    """Check whether a sequence declares itself to be infinite."""
    return isinstance(iterator_size(seq), IsInfinite)


def ndims(seq: Iterable) -> int:
    """Get the dimension count declared by a sequence.

    A sequence that declares a shape contributes its dimension count.
    Anything else is treated as one-dimensional.
    """
    size = iterator_size(seq)
    if isinstance(size, HasShape):
        return size.ndims
    return 1


@singledispatch
def length(seq: Iterable) -> int:
    """Get the number of elements in a sequence that declares its length."""
    return len(seq)


@length.register(np.ndarray)
def _length_ndarray(seq: np.ndarray) -> int:
    return seq.size


@singledispatch
def shape(seq: Iterable) -> shape_like:
    """Get the extents of a sequence that declares its length or shape."""
    return (length(seq),)


@shape.register(np.ndarray)
def _shape_ndarray(seq: np.ndarray) -> shape_like:
    return seq.shape


@singledispatch
def iterate(seq: Iterable) -> Iterator:
    """Get an iterator over every element of a sequence, in its natural
    order.
    """
    return iter(seq)


@iterate.register(np.ndarray)
def _iterate_ndarray(seq: np.ndarray) -> Iterator:
    # row-major over every element, including 0-dimensional arrays
    return iter(seq.flat)


def size_of_shape(extents: shape_like) -> int:
    """Get the number of elements described by a shape."""
    return math.prod(extents)
