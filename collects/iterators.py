"""This module provides lazy sequence adapters that keep track of the
capabilities of the sequences they wrap.

Plain ``map()`` and ``filter()`` objects declare nothing about their source,
which means that :func:`collect_as` has to treat them as one-dimensional
sequences of unknown length.  The adapters in this module forward whatever
their source declares instead:

    *   :func:`imap` preserves the size and shape of its source, and can
        declare an element type for its results.
    *   :func:`ifilter` preserves the element type of its source, but not its
        size.

This module also defines :class:`Peeled`, the explicit remaining-sequence
value that builders thread between each other after looking ahead at the
first element of a sequence.
"""
from __future__ import annotations
from typing import Any, Callable, Iterable, Iterator

from collects import traits
from collects.eltypes import normalize
from collects.util.type_hints import shape_like


######################
####    PUBLIC    ####
######################


def imap(
    func: Callable[[Any], Any],
    source: Iterable,
    eltype: type | None = None
) -> Map:
    """Lazily apply a function to every element of a sequence.

    Parameters
    ----------
    func : Callable
        A function of one argument.
    source : Iterable
        The sequence to map over.  Its size and shape are forwarded.
    eltype : type, optional
        The declared element type of the results.  If this is omitted, the
        result declares ``object``.

    Returns
    -------
    Map
        A single-pass iterable over the results.

    Examples
    --------
    .. doctest::

        >>> collect_as(Matrix, imap(float, np.arange(4).reshape(2, 2)))
        Array([[0., 1.],
               [2., 3.]])
    """
    return Map(func, source, eltype)


def ifilter(pred: Callable[[Any], bool], source: Iterable) -> Filter:
    """Lazily select the elements of a sequence that satisfy a predicate.

    Parameters
    ----------
    pred : Callable
        A function of one argument that returns a truthy value for the
        elements to keep.
    source : Iterable
        The sequence to filter.  Its element type is forwarded.

    Returns
    -------
    Filter
        A single-pass iterable over the selected elements.
    """
    return Filter(pred, source)


def peel(seq: Iterable) -> Peeled | None:
    """Take the first element of a sequence.

    Parameters
    ----------
    seq : Iterable
        The sequence to look into.  It must not be reused after this call.

    Returns
    -------
    Peeled | None
        ``None`` if the sequence is empty.  Otherwise, a :class:`Peeled`
        object holding the first element and an iterator over the rest.
    """
    it = traits.iterate(seq)
    for first in it:
        return Peeled(first, it, seq)
    return None


########################
####    ADAPTERS    ####
########################


class Map:
    """A lazy, shape-preserving map over a source sequence.

    See :func:`imap` for details.
    """

    def __init__(
        self,
        func: Callable[[Any], Any],
        source: Iterable,
        eltype: type | None = None
    ):
        if not callable(func):
            raise TypeError(f"func must be callable: {repr(func)}")
        self.func = func
        self.source = source
        self.eltype = None if eltype is None else normalize(eltype)

    def __iter__(self) -> Iterator:
        return map(self.func, traits.iterate(self.source))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({repr(self.func)}, {repr(self.source)})"


class Filter:
    """A lazy filter over a source sequence.

    See :func:`ifilter` for details.
    """

    def __init__(self, pred: Callable[[Any], bool], source: Iterable):
        if not callable(pred):
            raise TypeError(f"pred must be callable: {repr(pred)}")
        self.pred = pred
        self.source = source

    def __iter__(self) -> Iterator:
        return filter(self.pred, traits.iterate(self.source))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({repr(self.pred)}, {repr(self.source)})"


class Peeled:
    """The first element of a sequence, together with the iterator that
    yields the rest of it.

    Parameters
    ----------
    first : Any
        The first element.
    rest : Iterator
        The remaining elements.
    source : Iterable
        The original sequence.  It is kept only to answer capability queries
        and is never iterated again.
    """

    def __init__(self, first: Any, rest: Iterator, source: Iterable):
        self.first = first
        self.rest = rest
        self.source = source

    def __iter__(self) -> Iterator:
        yield self.first
        yield from self.rest

    def __repr__(self) -> str:
        return f"{type(self).__name__}({repr(self.first)}, ...)"


############################
####    CAPABILITIES    ####
############################


@traits.eltype.register(Map)
def _eltype_map(seq: Map) -> type:
    return object if seq.eltype is None else seq.eltype


@traits.iterator_size.register(Map)
def _iterator_size_map(seq: Map) -> traits.IteratorSize:
    return traits.iterator_size(seq.source)


@traits.length.register(Map)
def _length_map(seq: Map) -> int:
    return traits.length(seq.source)


@traits.shape.register(Map)
def _shape_map(seq: Map) -> shape_like:
    return traits.shape(seq.source)


@traits.eltype.register(Filter)
def _eltype_filter(seq: Filter) -> type:
    return traits.eltype(seq.source)


@traits.iterator_size.register(Filter)
def _iterator_size_filter(seq: Filter) -> traits.IteratorSize:
    if traits.is_infinite(seq.source):
        return traits.IsInfinite()
    return traits.SizeUnknown()
