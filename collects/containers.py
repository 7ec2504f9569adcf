"""This module defines the containers that :func:`collect_as` can produce.

Each container records the element type of its contents in an ``eltype``
attribute, and can be parametrized to obtain an output type descriptor:

    *   :class:`Set` is a ``set`` of elements of one type.  ``Set[int]``
        pins the element type.
    *   :class:`Array` is an N-dimensional numpy array.  ``Array[float]``
        pins the element type, ``Array[float, 2]`` also pins the dimension
        count, and ``Array[Any, 2]`` pins only the latter.
    *   :class:`Buffer` is a flat, fixed-length numpy array.  ``Buffer[int]``
        pins the element type.
    *   :data:`Tuple` is the builtin ``tuple``, which keeps the type of every
        position separately and so never pins an element type.

Parametrized descriptors support ``isinstance()``, which checks the
container class as well as its element type and dimension count.
"""
from __future__ import annotations
from typing import AbstractSet, Any, Iterable

import numpy as np

from collects import traits
from collects.eltypes import (
    convert_element, eltype_of_dtype, is_bottom, normalize, storage_dtype
)
from collects.util.error import type_name
from collects.util.type_hints import shape_like


######################
####    PUBLIC    ####
######################


class Descriptor:
    """A container class together with the parameters it was subscripted
    with.

    Descriptors are flyweights: subscripting a container twice with the same
    parameters returns the same object.  The parameters are only validated
    when the descriptor is classified.

    Parameters
    ----------
    origin : type
        The container class that was subscripted.
    params : tuple
        The subscript parameters, in order.
    """

    _flyweights: dict[tuple, Descriptor] = {}

    def __init__(self, origin: type, params: tuple):
        self.origin = origin
        self.params = params

    @classmethod
    def flyweight(cls, origin: type, params: tuple) -> Descriptor:
        """Get the unique descriptor for the given origin and parameters."""
        key = (origin, params, tuple(map(type, params)))
        try:
            return cls._flyweights[key]
        except TypeError:  # unhashable parameters
            return cls(origin, params)
        except KeyError:
            result = cls(origin, params)
            cls._flyweights[key] = result
            return result

    def __call__(self, *args, **kwargs):
        """Construct an instance of the origin with this descriptor's element
        type.
        """
        from collects.classify import classify

        target = classify(self)
        if target.eltype is not None:
            kwargs.setdefault("eltype", target.eltype)
        return self.origin(*args, **kwargs)

    def __instancecheck__(self, instance: Any) -> bool:
        from collects.classify import isa

        return isa(instance, self)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Descriptor):
            return NotImplemented
        return (
            self.origin is other.origin and
            self.params == other.params and
            tuple(map(type, self.params)) == tuple(map(type, other.params))
        )

    def __hash__(self) -> int:
        return hash((self.origin, self.params))

    def __repr__(self) -> str:
        params = ", ".join(
            p if isinstance(p, str) else
            "Any" if p is Any else
            type_name(p) if isinstance(p, type) else
            repr(p)
            for p in self.params
        )
        return f"{self.origin.__name__}[{params}]"


class Set(set):
    """A ``set`` whose elements all have the same element type.

    Parameters
    ----------
    iterable : Iterable, optional
        The initial elements.
    eltype : type, default object
        The element type.  Every element that is added is converted into it
        with :func:`convert_element() <collects.eltypes.convert_element>`.

    Examples
    --------
    .. doctest::

        >>> Set([1, 2], eltype=float)
        Set[float]({1.0, 2.0})
        >>> Set[int]([1, 2]).eltype
        <class 'int'>
    """

    def __init__(self, iterable: Iterable = (), eltype: type = object):
        super().__init__()
        self.eltype = normalize(eltype)
        for value in iterable:
            self.add(value)

    def __class_getitem__(cls, params: Any) -> Descriptor:
        if not isinstance(params, tuple):
            params = (params,)
        return Descriptor.flyweight(cls, params)

    def add(self, value: Any) -> None:
        super().add(convert_element(self.eltype, value))

    def update(self, *others: Iterable) -> None:
        for other in others:
            for value in other:
                self.add(value)

    def symmetric_difference_update(self, other: Iterable) -> None:
        super().symmetric_difference_update(
            {convert_element(self.eltype, value) for value in other}
        )

    def __ior__(self, other: Any) -> Set:
        if not isinstance(other, AbstractSet):
            return NotImplemented
        self.update(other)
        return self

    def __ixor__(self, other: Any) -> Set:
        if not isinstance(other, AbstractSet):
            return NotImplemented
        self.symmetric_difference_update(other)
        return self

    def copy(self) -> Set:
        result = type(self)(eltype=self.eltype)
        set.update(result, self)
        return result

    def __repr__(self) -> str:
        contents = ", ".join(repr(value) for value in self)
        return f"Set[{type_name(self.eltype)}]({{{contents}}})"


class TypedArray(np.ndarray):
    """Base class for numpy arrays that record an element type.

    The numpy dtype is derived from the element type with
    :func:`storage_dtype() <collects.eltypes.storage_dtype>`.  Views and
    copies inherit the element type of their parent as long as their dtype is
    unchanged, otherwise they fall back to the element type declared by their
    dtype.  The results of ufuncs always fall back to their dtype, since they
    hold newly computed values.
    """

    eltype: type

    def __new__(cls, shape: shape_like = (0,), eltype: type = object):
        eltype = normalize(eltype)
        if is_bottom(eltype) and traits.size_of_shape(shape):
            raise ValueError(
                f"{cls.__name__} with element type {eltype} must be empty, "
                f"not shape {shape}"
            )
        obj = np.empty(shape, dtype=storage_dtype(eltype)).view(cls)
        obj.eltype = eltype
        return obj

    def __array_finalize__(self, obj: Any) -> None:
        if obj is None:
            return
        parent = getattr(obj, "eltype", None)
        if parent is not None and obj.dtype == self.dtype:
            self.eltype = parent
        else:
            self.eltype = eltype_of_dtype(self.dtype)

    def __array_wrap__(
        self,
        array: np.ndarray,
        context: Any = None,
        return_scalar: bool = False
    ) -> Any:
        result = super().__array_wrap__(array, context, return_scalar)

        # ufunc results hold new values, which need not match the eltype
        if context is not None and isinstance(result, TypedArray):
            result.eltype = eltype_of_dtype(result.dtype)
        return result

    def __class_getitem__(cls, params: Any) -> Descriptor:
        if not isinstance(params, tuple):
            params = (params,)
        return Descriptor.flyweight(cls, params)


class Array(TypedArray):
    """An N-dimensional numpy array with a recorded element type.

    Parameters
    ----------
    shape : tuple[int, ...], default (0,)
        The extents of the array.
    eltype : type, default object
        The element type.  Unless it is stored natively by numpy, elements are
        held in an ``object`` buffer.

    Examples
    --------
    .. doctest::

        >>> Array((2, 2), eltype=np.int64).eltype
        <class 'numpy.int64'>
        >>> isinstance(Array((2, 2), eltype=int), Array[int, 2])
        True
    """


class Buffer(TypedArray):
    """A flat, fixed-length numpy array with a recorded element type.

    Parameters
    ----------
    shape : tuple[int], default (0,)
        The length of the buffer, as a 1-tuple.
    eltype : type, default object
        The element type.
    """

    def __new__(cls, shape: shape_like = (0,), eltype: type = object):
        if len(shape) != 1:
            raise ValueError(f"Buffer must be one-dimensional, not {shape}")
        return super().__new__(cls, shape, eltype)


Vector = Array[Any, 1]


Matrix = Array[Any, 2]


Tuple = tuple


############################
####    CAPABILITIES    ####
############################


@traits.eltype.register(Set)
def _eltype_set(seq: Set) -> type:
    return seq.eltype


@traits.eltype.register(TypedArray)
def _eltype_typed_array(seq: TypedArray) -> type:
    return seq.eltype
