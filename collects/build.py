"""This module contains the builders that consume an input sequence and produce
each kind of container.

When the element type is known up front, builders convert every element into
it, preallocating exact storage when the sequence declares its length.  When
it isn't, builders start from the runtime type of the first element and widen
as they go: every element that doesn't fit the working element type causes
the contents to be copied into new storage typed to the join of the two
(see :func:`push_widen`).  Widening happens at most once per level of the type
lattice that is crossed, not once per element.
"""
from __future__ import annotations
from functools import singledispatch
from typing import Any, Iterable

from collects import traits
from collects.containers import Array, Buffer, Set, TypedArray
from collects.eltypes import convert_element, is_bottom, isa, typejoin
from collects.errors import ArityError, DimensionMismatch
from collects.iterators import Peeled
from collects.util.error import shorten_list


# starting capacity of accumulators for sequences of unknown length
INITIAL_CAPACITY = 8


########################
####    WIDENING    ####
########################


class Accumulator:
    """A growable, flat array that holds elements of one element type.

    Parameters
    ----------
    eltype : type
        The element type.  Elements are stored without conversion, so callers
        must only :meth:`push` values that are instances of it.
    capacity : int, default INITIAL_CAPACITY
        The number of elements to preallocate storage for.  The capacity
        doubles whenever it is exhausted.
    """

    def __init__(self, eltype: type, capacity: int = INITIAL_CAPACITY):
        self.eltype = eltype
        self.data = Array((0 if is_bottom(eltype) else capacity,), eltype)
        self.count = 0

    def push(self, value: Any) -> None:
        """Append a value that is already an instance of the element type."""
        if self.count == len(self.data):
            self._reserve(max(2 * len(self.data), 1))
        self.data[self.count] = value
        self.count += 1

    def finish(self) -> Array:
        """Get the accumulated elements as a flat :class:`Array`."""
        if self.count == len(self.data):
            return self.data
        return self.data[:self.count].copy()

    def _reserve(self, capacity: int) -> None:
        """Move the accumulated elements into storage of the given size."""
        data = Array((capacity,), self.eltype)
        _copy_prefix(data, self.data, self.count)
        self.data = data

    def __len__(self) -> int:
        return self.count


@singledispatch
def push_widen(container: Any, value: Any) -> Any:
    """Add a value to a container, widening its element type if necessary.

    Parameters
    ----------
    container : Set | Accumulator
        The container to add to.
    value : Any
        The value to add.

    Returns
    -------
    Set | Accumulator
        ``container`` itself if ``value`` is an instance of its element type.
        Otherwise, a new container of the same kind whose element type is the
        join of the old element type and ``type(value)``, holding every
        previous element followed by ``value``.
    """
    raise TypeError(
        f"cannot widen a container of type {type(container).__qualname__}"
    )


@push_widen.register(Set)
def _push_widen_set(container: Set, value: Any) -> Set:
    if isa(value, container.eltype):
        container.add(value)
        return container

    result = Set(eltype=typejoin(container.eltype, type(value)))
    set.update(result, container)  # already instances of the join
    result.add(value)
    return result


@push_widen.register(Accumulator)
def _push_widen_accumulator(container: Accumulator, value: Any) -> Accumulator:
    if isa(value, container.eltype):
        container.push(value)
        return container

    result = Accumulator(
        typejoin(container.eltype, type(value)),
        max(len(container.data), container.count + 1)
    )
    _copy_prefix(result.data, container.data, container.count)
    result.count = container.count
    result.push(value)
    return result


def extend_widen(container: Any, values: Iterable) -> Any:
    """Add every value from an iterable with :func:`push_widen`, returning the
    (possibly new) container.
    """
    for value in values:
        container = push_widen(container, value)
    return container


####################
####    SETS    ####
####################


def set_with_known_eltype(eltype: type, items: Iterable) -> Set:
    """Collect elements into a :class:`Set` of a fixed element type."""
    return Set(items, eltype=eltype)


def set_with_unknown_eltype(peeled: Peeled) -> Set:
    """Collect a non-empty sequence into a :class:`Set`, unifying the element
    type from the elements themselves.
    """
    result = Set((peeled.first,), eltype=type(peeled.first))
    return extend_widen(result, peeled.rest)


######################
####    ARRAYS    ####
######################


def array_with_known_eltype(
    eltype: type,
    ndims: int,
    sequence: Iterable,
    items: Iterable,
    cls: type = Array
) -> TypedArray:
    """Collect elements into an array of a fixed element type.

    Parameters
    ----------
    eltype : type
        The element type.  Every element is converted into it.
    ndims : int
        The dimension count of the result.
    sequence : Iterable
        The input sequence.  Only its declared size and shape are inspected.
    items : Iterable
        The elements that have not been consumed yet.
    cls : type, default Array
        The array class to fill when the sequence declares its length.

    Returns
    -------
    TypedArray
        The collected array.

    Raises
    ------
    ElementConversionError
        If an element cannot be converted into ``eltype``.
    ArityError
        If ``ndims`` is 0 and the sequence does not yield exactly one element.
    DimensionMismatch
        If the number of elements does not match the declared shape.
    """
    if ndims == 0:
        return _scalar(eltype, convert_element(eltype, _only(items)))

    if is_bottom(eltype):
        for value in items:
            convert_element(eltype, value)  # always raises
        return _reshape(cls((0,), eltype), ndims, sequence)

    if traits.has_length(sequence):
        flat = _fill(cls, eltype, traits.length(sequence), items)
    else:
        acc = Accumulator(eltype)
        for value in items:
            acc.push(convert_element(eltype, value))
        flat = acc.finish()

    return _reshape(flat, ndims, sequence)


def array_with_unknown_eltype(
    ndims: int,
    sequence: Iterable,
    peeled: Peeled
) -> Array:
    """Collect a non-empty sequence into an :class:`Array`, unifying the
    element type from the elements themselves.

    Parameters
    ----------
    ndims : int
        The dimension count of the result.
    sequence : Iterable
        The input sequence.  Only its declared size and shape are inspected.
    peeled : Peeled
        The first element of the sequence and an iterator over the rest.

    Returns
    -------
    Array
        The collected array.  Its element type is the join of the runtime
        types of every element.

    Raises
    ------
    ArityError
        If ``ndims`` is 0 and the sequence yields more than one element.
    DimensionMismatch
        If the number of elements does not match the declared length or
        shape of the sequence.
    """
    if ndims == 0:
        value = _only(peeled)
        return _scalar(type(value), value)

    length = None
    if traits.has_length(sequence):
        length = traits.length(sequence)

    acc = Accumulator(type(peeled.first), length or INITIAL_CAPACITY)
    acc.push(peeled.first)
    acc = extend_widen(acc, peeled.rest)
    if length is not None and len(acc) != length:
        raise _length_mismatch(len(acc), length)
    return _reshape(acc.finish(), ndims, sequence)


def buffer_with_known_eltype(
    eltype: type,
    sequence: Iterable,
    items: Iterable
) -> Buffer:
    """Collect elements into a :class:`Buffer` of a fixed element type."""
    result = array_with_known_eltype(eltype, 1, sequence, items, cls=Buffer)
    return result.view(Buffer)


def buffer_with_unknown_eltype(sequence: Iterable, peeled: Peeled) -> Buffer:
    """Collect a non-empty sequence into a :class:`Buffer`, unifying the
    element type from the elements themselves.
    """
    return array_with_unknown_eltype(1, sequence, peeled).view(Buffer)


######################
####    TUPLES    ####
######################


def tuple_from(sequence: Iterable) -> tuple:
    """Collect a sequence into a tuple, keeping the type of every position.

    Tuples are immutable, so an exact ``tuple`` is returned as-is.
    """
    if type(sequence) is tuple:
        return sequence
    return tuple(traits.iterate(sequence))


#######################
####    PRIVATE    ####
#######################


def _copy_prefix(dest: TypedArray, source: TypedArray, count: int) -> None:
    """Copy the first ``count`` elements of ``source`` into ``dest``."""
    if dest.dtype == source.dtype:
        dest[:count] = source[:count]
    else:
        # item by item, so that numpy scalars are not unboxed into Python
        for i in range(count):
            dest[i] = source[i]


def _fill(
    cls: type,
    eltype: type,
    length: int,
    items: Iterable
) -> TypedArray:
    """Fill a preallocated flat array, converting every element."""
    result = cls((length,), eltype)
    count = 0
    for value in items:
        if count == length:
            raise DimensionMismatch(
                f"sequence yielded more than its declared length of {length} "
                f"elements"
            )
        result[count] = convert_element(eltype, value)
        count += 1

    if count != length:
        raise _length_mismatch(count, length)
    return result


def _length_mismatch(count: int, length: int) -> DimensionMismatch:
    return DimensionMismatch(
        f"sequence yielded {count} elements, but declared a length of {length}"
    )


def _only(items: Iterable) -> Any:
    """Get the only element of an iterable."""
    it = iter(items)
    for value in it:
        extra = [x for _, x in zip(range(5), it)]
        if extra:
            raise ArityError(
                f"a 0-dimensional output requires exactly one element, got "
                f"{shorten_list([value] + extra)} and possibly more"
            )
        return value
    raise ArityError(
        "a 0-dimensional output requires exactly one element, got none"
    )


def _scalar(eltype: type, value: Any) -> Array:
    """Wrap a single value in a 0-dimensional :class:`Array`."""
    result = Array((1,), eltype)
    result[0] = value
    return result.reshape(())


def _reshape(flat: TypedArray, ndims: int, sequence: Iterable) -> TypedArray:
    """Reshape a flat array into the declared shape of the input sequence."""
    if ndims == 1:
        return flat

    extents = tuple(traits.shape(sequence))
    if len(extents) != ndims or traits.size_of_shape(extents) != flat.size:
        raise DimensionMismatch(
            f"can't arrange {flat.size} elements into {ndims} dimensions of "
            f"shape {extents}"
        )
    return flat.reshape(extents)
