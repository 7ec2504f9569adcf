"""This module contains the standard empty-sequence policies.

An empty-sequence policy decides the element type of the output when the input
sequence turns out to be empty and neither the output type descriptor nor the
sequence itself pins one precisely.  It is called with the (already
exhausted) sequence, and either returns an element type or raises.

Policies
--------
fail_policy
    Always raise :class:`EmptySequenceElementTypeUndetermined`.  This is the
    default.

best_effort_inference_policy
    Recover the element type from annotations on the code that produces the
    sequence.  Its results depend on the interpreter and must not be relied
    upon for deterministic output.
"""
from __future__ import annotations
from functools import singledispatch
import typing
from typing import Iterable
import warnings

from collects import traits
from collects.eltypes import is_precise, normalize
from collects.errors import EmptySequenceElementTypeUndetermined
from collects.iterators import Filter, Map


######################
####    PUBLIC    ####
######################


def fail_policy(seq: Iterable) -> typing.NoReturn:
    """Raise an :class:`EmptySequenceElementTypeUndetermined` error.

    Parameters
    ----------
    seq : Iterable
        The empty sequence.

    Raises
    ------
    EmptySequenceElementTypeUndetermined
        Always.
    """
    raise EmptySequenceElementTypeUndetermined(
        f"couldn't figure out an appropriate element type for collection of "
        f"type {type(seq).__qualname__}"
    )


def best_effort_inference_policy(seq: Iterable) -> type:
    """Try to infer the element type of an empty sequence from the code that
    produces it.

    Parameters
    ----------
    seq : Iterable
        The empty sequence.

    Returns
    -------
    type
        The inferred element type, if it is precise (concrete or ``Never``).

    Raises
    ------
    EmptySequenceElementTypeUndetermined
        If no precise element type could be inferred.

    Notes
    -----
    The element type of an :func:`imap` is read from the return annotation of
    its function (or the function itself, if it is a class), resolved with
    :func:`typing.get_type_hints`.  Filters forward to their source.
    Everything else falls back to its declared element type.

    .. warning::

        Annotations are not enforced at runtime, and the way they are stored
        and resolved differs between interpreter versions (for example under
        ``from __future__ import annotations``).  The result of this policy is
        therefore an implementation detail of the running environment.  Use it
        only as an optimization, never where deterministic output is required.
    """
    result = normalize(infer_eltype(seq))
    if is_precise(result):
        return result
    return fail_policy(seq)


@singledispatch
def infer_eltype(seq: Iterable) -> type:
    """Infer the element type of a sequence without consuming it.

    Register implementations for custom sequences to extend
    :func:`best_effort_inference_policy`.
    """
    return traits.eltype(seq)


#######################
####    PRIVATE    ####
#######################


@infer_eltype.register(Map)
def _infer_eltype_map(seq: Map) -> type:
    if seq.eltype is not None and is_precise(seq.eltype):
        return seq.eltype

    func = seq.func
    if isinstance(func, type):  # calling a class returns an instance of it
        return func

    if not hasattr(func, "__annotations__"):
        return object

    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError) as err:
        warn_msg = (
            f"could not resolve annotations of {repr(func)} while inferring "
            f"an element type: {err}"
        )
        warnings.warn(warn_msg, UserWarning, stacklevel=2)
        return object

    return hints.get("return", object)


@infer_eltype.register(Filter)
def _infer_eltype_filter(seq: Filter) -> type:
    return infer_eltype(seq.source)
