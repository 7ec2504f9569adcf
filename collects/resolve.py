"""This module resolves the element type and dimension count of the output
of :func:`collect_as` from a classified descriptor and its input sequence.
"""
from __future__ import annotations
from typing import Any, Iterable

from collects import traits
from collects.classify import Classified
from collects.eltypes import is_eltype, is_precise, normalize
from collects.errors import DimensionMismatch
from collects.iterators import peel
from collects.util.type_hints import empty_sequence_policy


class Deferred:
    """Marker returned by :func:`resolve_element_type` when the element type
    has to be unified by the builder as it consumes the sequence.
    """

    def __repr__(self) -> str:
        return "DEFER"


DEFER = Deferred()


######################
####    PUBLIC    ####
######################


def resolve_element_type(
    target: Classified,
    sequence: Iterable,
    policy: empty_sequence_policy
) -> tuple[type | Deferred, Iterable]:
    """Determine the element type to build with.

    Parameters
    ----------
    target : Classified
        The classified output type descriptor.  This must not be a tuple kind.
    sequence : Iterable
        The input sequence.  It must not be reused after this call.
    policy : Callable
        The empty-sequence policy, which is called with ``sequence`` if it
        turns out to be empty and no element type can be determined otherwise.

    Returns
    -------
    eltype : type | Deferred
        The element type, or :data:`DEFER` if the sequence is non-empty and
        its element type has to be unified from the elements themselves.
    remaining : Iterable
        The elements that have not been consumed yet.  If the result was
        deferred, this is a :class:`Peeled <collects.iterators.Peeled>`
        object holding the first element.

    Raises
    ------
    EmptySequenceElementTypeUndetermined
        If the sequence is empty and the default policy is used.
    Exception
        Whatever a custom policy raises.

    Notes
    -----
    Element types are resolved in the following order:

        1.  The element type pinned by the descriptor.
        2.  The element type declared by the sequence, if it is precise.  This
            is trusted without looking at any elements.
        3.  If the sequence is empty, the result of the policy.
        4.  Otherwise, :data:`DEFER`.
    """
    if target.eltype is not None:
        return target.eltype, traits.iterate(sequence)

    declared = traits.eltype(sequence)
    if is_precise(declared):
        return declared, traits.iterate(sequence)

    peeled = peel(sequence)
    if peeled is None:
        result = normalize(policy(sequence))
        if not is_eltype(result):
            raise TypeError(
                f"empty sequence policy {_name(policy)} must return a type, "
                f"not {repr(result)}"
            )
        return result, iter(())

    return DEFER, peeled


def resolve_shape(target: Classified, sequence: Iterable) -> int:
    """Determine the dimension count to build with.

    Parameters
    ----------
    target : Classified
        The classified output type descriptor.
    sequence : Iterable
        The input sequence.  Only its declared shape is inspected.

    Returns
    -------
    int
        The requested dimension count if the descriptor pins one, otherwise
        the dimension count declared by the sequence.

    Raises
    ------
    DimensionMismatch
        If the requested and declared dimension counts differ.  A requested
        dimension count of 1 is accepted for any sequence, including
        0-dimensional ones, which are collected as a single element.
    """
    inferred = traits.ndims(sequence)
    if target.ndims is None:
        return inferred
    return check_ndims_consistency(target.ndims, inferred)


def check_ndims_consistency(requested: int, inferred: int) -> int:
    """Check a requested dimension count against an inferred one."""
    if requested == 1 or requested == inferred:
        return requested
    raise DimensionMismatch(
        f"dimension count mismatch: can't collect {inferred} dimensions into "
        f"{requested} dimensions"
    )


#######################
####    PRIVATE    ####
#######################


def _name(obj: Any) -> str:
    return getattr(obj, "__qualname__", repr(obj))
