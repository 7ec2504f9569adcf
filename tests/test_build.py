from __future__ import annotations
import numbers

import numpy as np
import pytest

from collects import Set, extend_widen, push_widen
from collects.build import INITIAL_CAPACITY, Accumulator
from collects.eltypes import Never


####################
####    SETS    ####
####################


def test_push_widen_keeps_set_when_element_fits():
    container = Set([1], eltype=int)
    result = push_widen(container, 2)
    assert result is container
    assert result == {1, 2}


def test_push_widen_returns_wider_set():
    container = Set([1], eltype=int)
    result = push_widen(container, 2.5)
    assert result is not container
    assert result.eltype is numbers.Real
    assert result == {1, 2.5}
    assert container == {1}
    assert container.eltype is int


def test_extend_widen_from_empty_set():
    result = extend_widen(Set(eltype=Never), [1, 2.0, "a"])
    assert result.eltype is object
    assert result == {1, 2.0, "a"}


############################
####    ACCUMULATORS    ####
############################


def test_accumulator_grows_past_its_capacity():
    acc = Accumulator(int, capacity=1)
    for x in range(10):
        acc.push(x)
    assert len(acc) == 10
    result = acc.finish()
    assert result.eltype is int
    assert list(result) == list(range(10))


def test_accumulator_finish_trims_unused_capacity():
    acc = Accumulator(float)
    acc.push(1.5)
    result = acc.finish()
    assert len(acc.data) == INITIAL_CAPACITY
    assert result.shape == (1,)
    assert result.dtype == np.float64


def test_push_widen_keeps_accumulator_when_element_fits():
    acc = Accumulator(int, capacity=2)
    assert push_widen(acc, 1) is acc
    assert push_widen(acc, True) is acc
    assert list(acc.finish()) == [1, True]


def test_push_widen_copies_into_wider_accumulator():
    acc = Accumulator(np.float32, capacity=2)
    acc.push(np.float32(1.5))
    result = push_widen(acc, np.float64(2.5))
    assert result is not acc
    assert result.eltype is np.floating
    assert result.data.dtype == np.dtype(object)
    assert [type(x) for x in result.finish()] == [np.float32, np.float64]


def test_push_widen_from_bottom_accumulator():
    acc = Accumulator(Never)
    result = push_widen(acc, "a")
    assert result.eltype is str
    assert list(result.finish()) == ["a"]


def test_push_widen_widens_once_per_level():
    acc = Accumulator(bool, capacity=4)
    seen = set()
    for value in [True, 1, 2, 3.5, 4.5, "x"]:
        acc = push_widen(acc, value)
        seen.add(acc.eltype)
    assert seen == {bool, int, numbers.Real, object}
    assert list(acc.finish()) == [True, 1, 2, 3.5, 4.5, "x"]


def test_push_widen_rejects_other_containers():
    with pytest.raises(TypeError):
        push_widen([], 1)
