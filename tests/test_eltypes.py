from __future__ import annotations
import abc
import numbers
import typing

import numpy as np
import pytest

from tests.scheme import Case, Parameters, Raises, parametrize, signature

from collects.eltypes import (
    Never, convert_element, eltype_of_dtype, is_concrete, is_precise,
    normalize, storage_dtype, typejoin
)
from collects.errors import ElementConversionError


class Animal:
    pass


class Dog(Animal):
    pass


class Cat(Animal):
    pass


REX = Dog()


class Shape(abc.ABC):

    @abc.abstractmethod
    def area(self) -> float:
        pass


####################
####    DATA    ####
####################


def join_data():
    case = lambda a, b, expected: Case({"a": a, "b": b}, None, expected)

    return Parameters(
        # bottom is the identity element
        case(Never, int, int),
        case(int, Never, int),
        case(Never, Never, Never),
        case(typing.NoReturn, str, str),
        case(object, Never, object),

        # reflexive
        case(int, int, int),
        case(str, str, str),
        case(np.float32, np.float32, np.float32),

        # subclasses
        case(bool, int, int),
        case(int, bool, int),
        case(np.float64, float, float),
        case(float, np.float64, float),
        case(np.complex128, complex, complex),
        case(Dog, Animal, Animal),
        case(int, object, object),

        # shared nominal base
        case(Dog, Cat, Animal),
        case(np.int64, np.float64, np.number),
        case(np.int8, np.int64, np.signedinteger),
        case(np.int8, np.uint8, np.integer),
        case(np.float32, np.float64, np.floating),
        case(np.float32, np.complex64, np.inexact),
        case(np.bool_, np.int64, np.generic),

        # numeric tower
        case(int, float, numbers.Real),
        case(float, int, numbers.Real),
        case(bool, float, numbers.Real),
        case(int, complex, numbers.Complex),
        case(float, complex, numbers.Complex),
        case(int, np.int64, numbers.Integral),
        case(np.float32, float, numbers.Real),
        case(int, numbers.Real, numbers.Real),

        # dynamic box
        case(int, str, object),
        case(str, bytes, object),
        case(list, tuple, object),
        case(Dog, int, object),
        case(str, np.float64, object),
    )


def conversion_data():
    case = lambda typ, value, expected: Case(
        {"typ": typ}, value, expected
    )

    return Parameters(
        # already an instance
        case(int, 1, 1),
        case(numbers.Real, 1.5, 1.5),
        case(object, "a", "a"),
        case(Animal, REX, REX),

        # exact conversions
        case(float, 1, 1.0),
        case(int, 2.0, 2),
        case(complex, 1, 1 + 0j),
        case(np.float64, 1, np.float64(1.0)),
        case(np.int32, 7, np.int32(7)),
    )


def invalid_conversion_data():
    case = lambda typ, value, msg: Case(
        {"typ": typ}, value, Raises(ElementConversionError, msg)
    )

    return Parameters(
        case(int, 1.5, "inexact conversion"),
        case(str, 1, "inexact conversion"),
        case(int, "a", "cannot convert"),
        case(Never, 1, "cannot convert"),
        case(numbers.Real, "a", "cannot convert"),
        case(Shape, 1, "cannot convert"),
        case(np.int8, 300, None),
    )


#####################
####    VALID    ####
#####################


@parametrize(join_data())
def test_typejoin_finds_least_common_supertype(
    kwargs, test_input, test_output
):
    result = typejoin(**kwargs)
    assert result is test_output, (
        f"typejoin({signature(kwargs)}) failed:\n"
        f"expected: {test_output}\n"
        f"received: {result}"
    )


@parametrize(join_data())
def test_typejoin_is_commutative(kwargs, test_input, test_output):
    a, b = kwargs["a"], kwargs["b"]
    assert typejoin(a, b) is typejoin(b, a)


@pytest.mark.parametrize("types, expected", [
    ((int, bool, float), numbers.Real),
    ((bool, bool, bool), bool),
    ((Dog, Cat, Animal), Animal),
    ((np.int8, np.int16, np.float32), np.number),
    ((int, float, str), object),
])
def test_typejoin_is_associative(types, expected):
    a, b, c = types
    assert typejoin(typejoin(a, b), c) is expected
    assert typejoin(a, typejoin(b, c)) is expected


@pytest.mark.parametrize("typ, expected", [
    (int, True),
    (str, True),
    (bool, True),
    (np.float64, True),
    (np.float32, True),
    (Dog, True),
    (Never, True),
    (typing.NoReturn, True),
    (object, False),
    (numbers.Real, False),
    (numbers.Number, False),
    (np.floating, False),
    (np.generic, False),
    (Shape, False),
    (list[int], False),
    (typing.Any, False),
])
def test_is_precise(typ, expected):
    assert is_precise(typ) is expected


def test_bottom_is_precise_but_not_concrete():
    assert is_precise(Never)
    assert not is_concrete(Never)


def test_normalize_collapses_bottom_spellings():
    assert normalize(typing.NoReturn) is Never
    assert normalize(typing.Never) is Never
    assert normalize(int) is int


def test_normalize_treats_any_as_the_dynamic_box():
    assert normalize(typing.Any) is object
    assert typejoin(typing.Any, int) is object


@parametrize(conversion_data())
def test_convert_element_accepts_exact_conversions(
    kwargs, test_input, test_output
):
    result = convert_element(kwargs["typ"], test_input)
    assert result == test_output
    assert type(result) is type(test_output), (
        f"convert_element({signature(kwargs)}) returned {type(result)}, "
        f"expected {type(test_output)}"
    )


@pytest.mark.parametrize("typ, expected", [
    (float, np.dtype(np.float64)),
    (complex, np.dtype(np.complex128)),
    (np.float32, np.dtype(np.float32)),
    (np.int16, np.dtype(np.int16)),
    (np.bool_, np.dtype(np.bool_)),
    (int, np.dtype(object)),
    (bool, np.dtype(object)),
    (str, np.dtype(object)),
    (numbers.Real, np.dtype(object)),
    (np.floating, np.dtype(object)),
    (Never, np.dtype(object)),
])
def test_storage_dtype(typ, expected):
    assert storage_dtype(typ) == expected


def test_eltype_of_dtype():
    assert eltype_of_dtype(np.dtype(np.int32)) is np.int32
    assert eltype_of_dtype(np.dtype(object)) is object


#######################
####    INVALID    ####
#######################


@parametrize(invalid_conversion_data())
def test_convert_element_rejects_lossy_or_invalid_conversions(
    kwargs, test_input, test_output
):
    with test_output:
        convert_element(kwargs["typ"], test_input)
