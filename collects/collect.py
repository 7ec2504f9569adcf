"""This module contains the :func:`collect_as` entry point, which consumes a
sequence into a container of a requested type.

Every call goes through the same stages:

    1.  Reject infinite sequences before consuming anything.
    2.  Classify the output type descriptor into a container kind, element
        type and dimension count (see :mod:`collects.classify`).
    3.  Return a copy if the input already has the exact requested type.
    4.  Dispatch on the classified descriptor to a builder, which resolves
        whatever the descriptor leaves open from the sequence itself.
"""
from __future__ import annotations
from typing import Any, Callable, Iterable

from collects import build, traits
from collects.classify import Classified, Kind, classify, is_exact
from collects.errors import InfiniteSequenceToFiniteTarget
from collects.extension import registered_kinds
from collects.policies import fail_policy
from collects.resolve import DEFER, resolve_element_type, resolve_shape
from collects.util.type_hints import descriptor_like, empty_sequence_policy


# sentinel for the curried form of collect_as()
_MISSING = object()


######################
####    PUBLIC    ####
######################


class Collect:
    """A reusable collector with a fixed configuration.

    Parameters
    ----------
    empty_sequence_policy : Callable, default fail_policy
        Called with the input sequence when it is empty and no element type
        can be determined otherwise.  It must return an element type or raise.

    Examples
    --------
    .. doctest::

        >>> collect = Collect(empty_sequence_policy=lambda seq: int)
        >>> collect(Set, [])
        Set[int]({})
        >>> collect(Set, [1, 2])
        Set[int]({1, 2})
    """

    def __init__(
        self,
        *,
        empty_sequence_policy: empty_sequence_policy = fail_policy
    ):
        if not callable(empty_sequence_policy):
            raise TypeError(
                f"empty_sequence_policy must be callable, not "
                f"{repr(empty_sequence_policy)}"
            )
        self._empty_sequence_policy = empty_sequence_policy

    @property
    def empty_sequence_policy(self) -> empty_sequence_policy:
        """The policy that decides the element type of empty outputs."""
        return self._empty_sequence_policy

    def __call__(self, descriptor: descriptor_like, sequence: Iterable) -> Any:
        """Collect a sequence into a container of the requested type.

        See :func:`collect_as` for details.
        """
        if traits.is_infinite(sequence):
            raise InfiniteSequenceToFiniteTarget(
                "can't collect infinitely many elements into a finite "
                "collection"
            )

        target = classify(descriptor)
        if is_exact(sequence, target):
            return _copy(sequence)

        handler = DISPATCH_TABLE[
            target.kind,
            target.eltype is not None,
            target.ndims is not None
        ]
        policy = self.empty_sequence_policy
        return handler(target, descriptor, sequence, policy)

    def __repr__(self) -> str:
        policy = getattr(
            self.empty_sequence_policy,
            "__qualname__",
            repr(self.empty_sequence_policy)
        )
        return f"{type(self).__name__}(empty_sequence_policy={policy})"


def collect_as(
    descriptor: descriptor_like,
    sequence: Iterable = _MISSING,
    empty_sequence_policy: empty_sequence_policy = fail_policy
) -> Any:
    """Collect the elements of a sequence into a container of the requested
    type.

    Parameters
    ----------
    descriptor : type | Descriptor | GenericAlias
        The requested output type.  This can be any of the following:

            *   ``Set``, ``set``, ``Set[T]`` or ``set[T]``.
            *   ``Array``, ``numpy.ndarray``, ``Array[T]``, ``Array[T, N]``,
                ``Array[Any, N]``, ``Vector`` or ``Matrix``.
            *   ``Buffer`` or ``Buffer[T]``.
            *   ``Tuple``, ``tuple`` or ``typing.Tuple``.
            *   A tag registered with :func:`register_kind`, or a
                parametrization of one.

    sequence : Iterable, optional
        The sequence to consume.  It is iterated at most once.  If this is
        omitted, a function that accepts the sequence is returned instead.
    empty_sequence_policy : Callable, default fail_policy
        Called with the input sequence when it is empty and no element type
        can be determined otherwise.  It must return an element type or raise.

    Returns
    -------
    Any
        An instance of the requested output type holding every element of the
        sequence, in order.  Element types and dimension counts left open by
        the descriptor are resolved from the sequence.

    Raises
    ------
    InfiniteSequenceToFiniteTarget
        If the sequence declares itself to be infinite.
    UnrecognizedDescriptor
        If the descriptor names no supported container kind.
    EmptyTypeTarget
        If the descriptor is the bottom type itself.
    EmptySequenceElementTypeUndetermined
        If the sequence is empty and the default policy is used.
    DimensionMismatch
        If a requested dimension count disagrees with the shape of the
        sequence, or the sequence yields a different number of elements
        than it declares.
    ArityError
        If a 0-dimensional output is requested and the sequence does not
        yield exactly one element.
    ElementConversionError
        If an element cannot be converted into a requested element type.

    Notes
    -----
    The element type of the output is resolved in the following order:

        1.  The element type pinned by the descriptor.
        2.  The element type declared by the sequence, if it is concrete (or
            :data:`Never <collects.eltypes.Never>` for a sequence that is
            known to be empty).  This is trusted without inspecting any
            elements.
        3.  If the sequence is empty, the result of the policy.
        4.  Otherwise, the join of the runtime types of every element.

    Collecting a value that is already an instance of the exact requested type
    returns a copy, so that the input and output never share mutable state.
    Tuples are immutable and are returned as-is.

    Examples
    --------
    .. doctest::

        >>> collect_as(Set, [1, 2, 1])
        Set[int]({1, 2})
        >>> collect_as(Array, [1, 2.5]).eltype
        <class 'numbers.Real'>
        >>> collect_as(Array[float], range(3))
        Array([0., 1., 2.])
        >>> collect_as(Tuple, iter([1, "a"]))
        (1, 'a')
        >>> to_set = collect_as(Set)
        >>> sorted(to_set("abca"))
        ['a', 'b', 'c']
    """
    if sequence is _MISSING:
        def collect_with_fixed_output_type(
            sequence: Iterable,
            empty_sequence_policy: empty_sequence_policy = fail_policy
        ) -> Any:
            """Collect a sequence into the fixed output type."""
            return collect_as(descriptor, sequence, empty_sequence_policy)

        return collect_with_fixed_output_type

    collect = Collect(empty_sequence_policy=empty_sequence_policy)
    return collect(descriptor, sequence)


#######################
####    PRIVATE    ####
#######################


def _copy(value: Any) -> Any:
    """Copy a container that already has the requested type."""
    if isinstance(value, tuple):
        return value
    return value.copy()


def _collect_set(
    target: Classified,
    descriptor: descriptor_like,
    sequence: Iterable,
    policy: Callable
) -> Any:
    eltype, remaining = resolve_element_type(target, sequence, policy)
    if eltype is DEFER:
        return build.set_with_unknown_eltype(remaining)
    return build.set_with_known_eltype(eltype, remaining)


def _collect_set_with_eltype(
    target: Classified,
    descriptor: descriptor_like,
    sequence: Iterable,
    policy: Callable
) -> Any:
    return build.set_with_known_eltype(target.eltype, traits.iterate(sequence))


def _collect_array(
    target: Classified,
    descriptor: descriptor_like,
    sequence: Iterable,
    policy: Callable
) -> Any:
    ndims = resolve_shape(target, sequence)
    eltype, remaining = resolve_element_type(target, sequence, policy)
    if eltype is DEFER:
        return build.array_with_unknown_eltype(ndims, sequence, remaining)
    return build.array_with_known_eltype(eltype, ndims, sequence, remaining)


def _collect_array_with_eltype(
    target: Classified,
    descriptor: descriptor_like,
    sequence: Iterable,
    policy: Callable
) -> Any:
    ndims = resolve_shape(target, sequence)
    return build.array_with_known_eltype(
        target.eltype,
        ndims,
        sequence,
        traits.iterate(sequence)
    )


def _collect_buffer(
    target: Classified,
    descriptor: descriptor_like,
    sequence: Iterable,
    policy: Callable
) -> Any:
    resolve_shape(target, sequence)
    eltype, remaining = resolve_element_type(target, sequence, policy)
    if eltype is DEFER:
        return build.buffer_with_unknown_eltype(sequence, remaining)
    return build.buffer_with_known_eltype(eltype, sequence, remaining)


def _collect_buffer_with_eltype(
    target: Classified,
    descriptor: descriptor_like,
    sequence: Iterable,
    policy: Callable
) -> Any:
    resolve_shape(target, sequence)
    return build.buffer_with_known_eltype(
        target.eltype,
        sequence,
        traits.iterate(sequence)
    )


def _collect_tuple(
    target: Classified,
    descriptor: descriptor_like,
    sequence: Iterable,
    policy: Callable
) -> Any:
    return build.tuple_from(sequence)


def _collect_extension(
    target: Classified,
    descriptor: descriptor_like,
    sequence: Iterable,
    policy: Callable
) -> Any:
    builder = registered_kinds()[target.origin]
    result = builder(descriptor, sequence)
    if isinstance(descriptor, type) and not isinstance(result, descriptor):
        raise TypeError(
            f"builder {builder.__qualname__}() for container kind "
            f"{target.origin.__qualname__} returned an object of type "
            f"{type(result).__qualname__}"
        )
    return result


# (kind, has element type, has dimension count) -> handler
DISPATCH_TABLE = {
    (Kind.SET, False, False): _collect_set,
    (Kind.SET, True, False): _collect_set_with_eltype,
    (Kind.ARRAY, False, False): _collect_array,
    (Kind.ARRAY, False, True): _collect_array,
    (Kind.ARRAY, True, False): _collect_array_with_eltype,
    (Kind.ARRAY, True, True): _collect_array_with_eltype,
    (Kind.BUFFER, False, True): _collect_buffer,
    (Kind.BUFFER, True, True): _collect_buffer_with_eltype,
    (Kind.TUPLE, False, False): _collect_tuple,
    (Kind.EXTENSION, False, False): _collect_extension,
}
