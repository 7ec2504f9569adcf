"""This module describes the lattice of element types that ``collects``
containers are typed with.

Element types are ordinary Python classes.  The lattice is bounded below by
:data:`Never`, the uninhabited type that types a container which is known to
be empty, and above by ``object``, the dynamic box that can hold any value.
Between them, the ordering is given by ``issubclass()``, including virtual
subclasses registered with the :mod:`numbers` tower (which numpy uses to
place its own scalar types).

Functions
---------
normalize
    Collapse the different spellings of the bottom type into :data:`Never`,
    and ``typing.Any`` into ``object``.

is_concrete
    Check whether a type can be instantiated as the exact runtime type of a
    value.

is_precise
    Check whether a type is concrete or :data:`Never`.

typejoin
    Get the most specific type that two types can both be treated as.

convert_element
    Convert a value into an element type, refusing lossy conversions.

storage_dtype
    Get the numpy dtype used to store elements of a given type.
"""
from __future__ import annotations
import inspect
import numbers
import typing
from typing import Any

import numpy as np

from collects.errors import ElementConversionError
from collects.util.error import type_name


Never = typing.Never


# numpy's abstract scalar hierarchy.  None of these can be instantiated.
NUMPY_ABSTRACT = frozenset({
    np.generic,
    np.number,
    np.integer,
    np.signedinteger,
    np.unsignedinteger,
    np.inexact,
    np.floating,
    np.complexfloating,
    np.flexible,
    np.character,
})


# ordered from most to least specific
NUMERIC_TOWER = (
    numbers.Integral,
    numbers.Rational,
    numbers.Real,
    numbers.Complex,
    numbers.Number,
)


######################
####    PUBLIC    ####
######################


def normalize(typ: Any) -> Any:
    """Collapse definitionally equal spellings of a type into one canonical
    form.

    Parameters
    ----------
    typ : Any
        A type or type-like object.

    Returns
    -------
    Any
        :data:`Never` if ``typ`` spells the bottom type (``typing.Never`` or
        ``typing.NoReturn``), ``object`` if it is ``typing.Any``, otherwise
        ``typ`` itself.
    """
    if typ is typing.Never or typ is typing.NoReturn:
        return Never
    if typ is typing.Any:
        return object
    return typ


def is_bottom(typ: Any) -> bool:
    """Check whether a type is the uninhabited bottom type."""
    return normalize(typ) is Never


def is_eltype(typ: Any) -> bool:
    """Check whether an object can be used as an element type."""
    return is_bottom(typ) or (
        isinstance(typ, type) and typing.get_origin(typ) is None
    )


def is_concrete(typ: Any) -> bool:
    """Check whether a type is concrete, i.e. it can be the exact runtime type
    of a value.

    Parameters
    ----------
    typ : Any
        A type or type-like object.

    Returns
    -------
    bool
        ``False`` for ``object``, abstract base classes (including the
        :mod:`numbers` tower and numpy's abstract scalar types), generic
        aliases and special forms.  ``True`` for every other class.

    Examples
    --------
    .. doctest::

        >>> is_concrete(int)
        True
        >>> is_concrete(numbers.Real)
        False
        >>> is_concrete(np.floating)
        False
        >>> is_concrete(object)
        False
    """
    typ = normalize(typ)
    return (
        is_eltype(typ) and
        not is_bottom(typ) and
        typ is not object and
        typ not in NUMERIC_TOWER and
        typ not in NUMPY_ABSTRACT and
        not inspect.isabstract(typ)
    )


def is_precise(typ: Any) -> bool:
    """Check whether a type is precise, i.e. either concrete or the bottom
    type.

    A precise declared element type is trusted without inspecting any
    elements: a concrete type pins the output element type directly, and the
    bottom type pins it for a sequence that is known to be empty.
    """
    return is_bottom(typ) or is_concrete(typ)


def isa(value: Any, typ: Any) -> bool:
    """Check whether ``value`` can be held by a container of element type
    ``typ`` without conversion.
    """
    typ = normalize(typ)
    if typ is Never:
        return False
    return isinstance(value, typ)


def typejoin(a: Any, b: Any) -> type:
    """Get the most specific type that values of both ``a`` and ``b`` can be
    treated as.

    Parameters
    ----------
    a, b : type
        The element types to join.  Either can be :data:`Never`, which is the
        identity element of the join.

    Returns
    -------
    type
        One of the inputs if it subclasses the other.  Otherwise, the most
        specific nominal base class they share, then the most specific level
        of the :mod:`numbers` tower they both belong to, and finally
        ``object``.

    Notes
    -----
    Only nominal base classes other than ``object`` are considered before the
    numeric tower.  This means that two numpy scalar types join to their
    shared numpy base (``np.int64`` and ``np.float64`` join to ``np.number``),
    while a Python scalar and a numpy scalar meet in the numeric tower
    (``int`` and ``np.int64`` join to ``numbers.Integral``).

    Examples
    --------
    .. doctest::

        >>> typejoin(int, int)
        <class 'int'>
        >>> typejoin(bool, int)
        <class 'int'>
        >>> typejoin(int, float)
        <class 'numbers.Real'>
        >>> typejoin(int, str)
        <class 'object'>
    """
    a = normalize(a)
    b = normalize(b)
    if a is Never:
        return b
    if b is Never:
        return a
    if issubclass(a, b):
        return b
    if issubclass(b, a):
        return a

    for base in a.__mro__[1:]:
        if base is not object and issubclass(b, base):
            return base

    for level in NUMERIC_TOWER:
        if issubclass(a, level) and issubclass(b, level):
            return level

    return object


def convert_element(typ: Any, value: Any) -> Any:
    """Convert a value into an element type.

    Parameters
    ----------
    typ : type
        The target element type.
    value : Any
        The value to convert.

    Returns
    -------
    Any
        ``value`` itself if it is already an instance of ``typ``, otherwise
        ``typ(value)``.

    Raises
    ------
    ElementConversionError
        If ``typ`` is :data:`Never`, if ``typ`` is abstract and ``value`` is
        not an instance of it, if the constructor rejects ``value``, or if the
        conversion is lossy (the converted value does not compare equal to the
        original, as in ``int(1.5)``).
    """
    if isa(value, typ):
        return value
    if not is_concrete(typ):
        raise ElementConversionError(
            f"cannot convert {repr(value)} of type "
            f"{type_name(type(value))} to element type {type_name(typ)}"
        )

    try:
        result = typ(value)
    except (TypeError, ValueError, ArithmeticError) as err:
        raise ElementConversionError(
            f"cannot convert {repr(value)} of type "
            f"{type_name(type(value))} to element type {type_name(typ)}"
        ) from err

    if not _same_value(result, value):
        raise ElementConversionError(
            f"inexact conversion of {repr(value)} to element type "
            f"{type_name(typ)}: got {repr(result)}"
        )
    return result


def storage_dtype(typ: Any) -> np.dtype:
    """Get the numpy dtype used to store elements of the given type.

    Concrete numpy numeric and boolean scalar types are stored natively, and
    so are Python ``float`` and ``complex``, whose numpy counterparts subclass
    them.  Everything else is boxed in an ``object`` array so that elements
    keep their exact identity and precision (including Python ``int``).
    """
    if isinstance(typ, type) and is_concrete(typ):
        if issubclass(typ, (np.number, np.bool_)):
            return np.dtype(typ)
        if typ is float:
            return np.dtype(np.float64)
        if typ is complex:
            return np.dtype(np.complex128)
    return np.dtype(object)


def eltype_of_dtype(dtype: np.dtype) -> type:
    """Get the element type declared by a numpy dtype.

    ``object`` arrays declare ``object``, which is imprecise.  Every other
    dtype declares its scalar type.
    """
    if dtype == np.dtype(object):
        return object
    return dtype.type


#######################
####    PRIVATE    ####
#######################


def _same_value(result: Any, original: Any) -> bool:
    """Check that a conversion did not lose information."""
    try:
        if bool(result == original):
            return True
        # NaN never compares equal to itself
        return bool(result != result) and bool(original != original)
    except (TypeError, ValueError):
        return False
