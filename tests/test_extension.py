from __future__ import annotations
import itertools
from typing import Generic, TypeVar

import numpy as np
import pytest

from collects import (
    Array, Set, collect_as, register_kind, registered_kinds, unregister_kind
)
from collects.classify import Kind, classify
from collects.errors import (
    InfiniteSequenceToFiniteTarget, UnrecognizedDescriptor
)


T = TypeVar("T")


class Bag(list):
    """A list that remembers nothing about its element type."""


class Box(Generic[T]):
    """A container parametrized by its element type."""

    def __init__(self, eltype, values):
        self.eltype = eltype
        self.values = values


def collect_bag(descriptor, sequence):
    return Bag(sequence)


def collect_box(descriptor, sequence):
    (eltype,) = descriptor.__args__
    return Box(eltype, [eltype(x) for x in sequence])


@pytest.fixture(autouse=True)
def clean_registry():
    yield
    for tag in (Bag, Box):
        if tag in registered_kinds():
            unregister_kind(tag)


########################
####    REGISTER    ####
########################


def test_registered_kind_is_dispatched_to_its_builder():
    register_kind(Bag, collect_bag)
    assert classify(Bag).kind is Kind.EXTENSION

    result = collect_as(Bag, range(3))
    assert type(result) is Bag
    assert result == [0, 1, 2]


def test_register_kind_as_decorator():

    @register_kind(Bag)
    def build(descriptor, sequence):
        return Bag(reversed(list(sequence)))

    assert registered_kinds()[Bag] is build
    assert collect_as(Bag, [1, 2]) == [2, 1]


def test_parametrized_extension_descriptors():
    register_kind(Box, collect_box)
    assert classify(Box[float]).kind is Kind.EXTENSION

    result = collect_as(Box[float], [1, 2])
    assert type(result) is Box
    assert result.eltype is float
    assert result.values == [1.0, 2.0]


def test_builder_may_take_optional_arguments():

    def build(descriptor, sequence, reverse=False, *, strict=True):
        return Bag(sequence)

    register_kind(Bag, build)
    assert collect_as(Bag, "ab") == ["a", "b"]


def test_reregistering_a_kind_warns():
    register_kind(Bag, collect_bag)

    def replacement(descriptor, sequence):
        return Bag()

    with pytest.warns(UserWarning, match="replacing builder"):
        register_kind(Bag, replacement)
    assert collect_as(Bag, [1]) == []


def test_extension_builders_must_return_instances_of_their_kind():
    register_kind(Bag, lambda descriptor, sequence: list(sequence))
    with pytest.raises(TypeError, match="returned an object of type list"):
        collect_as(Bag, [1])


def test_extension_kinds_still_reject_infinite_sequences():
    register_kind(Bag, collect_bag)
    with pytest.raises(InfiniteSequenceToFiniteTarget):
        collect_as(Bag, itertools.count())


##########################
####    UNREGISTER    ####
##########################


def test_unregister_kind():
    register_kind(Bag, collect_bag)
    unregister_kind(Bag)
    assert Bag not in registered_kinds()
    with pytest.raises(UnrecognizedDescriptor):
        collect_as(Bag, [1])


def test_unregister_missing_kind():
    with pytest.raises(KeyError):
        unregister_kind(Bag)


def test_registered_kinds_is_read_only():
    with pytest.raises(TypeError):
        registered_kinds()[Bag] = collect_bag


#########################
####    OWNERSHIP    ####
#########################


@pytest.mark.parametrize(
    "tag", [list, set, tuple, dict, np.ndarray, Set, Array]
)
def test_cannot_claim_shared_types(tag):
    with pytest.raises(TypeError, match="must be owned by the extension"):
        register_kind(tag, collect_bag)


def test_tags_must_be_classes():
    with pytest.raises(TypeError, match="must be a class"):
        register_kind("Bag", collect_bag)


def test_builder_must_come_from_the_package_that_owns_the_tag():

    def foreign(descriptor, sequence):
        return Bag(sequence)

    foreign.__module__ = "someone_else.builders"
    with pytest.raises(TypeError, match="does not own"):
        register_kind(Bag, foreign)
    assert Bag not in registered_kinds()


@pytest.mark.parametrize("builder", [
    lambda: Bag(),
    lambda descriptor: Bag(),
    lambda descriptor, sequence, extra: Bag(),
    lambda *args: Bag(),
    lambda descriptor, sequence, *rest: Bag(),
    lambda descriptor, sequence, *, strict: Bag(),
])
def test_builders_must_accept_exactly_descriptor_and_sequence(builder):
    with pytest.raises(TypeError, match="exactly two"):
        register_kind(Bag, builder)
    assert Bag not in registered_kinds()


def test_builder_must_be_callable():
    with pytest.raises(TypeError):
        register_kind(Bag, 3)
