from __future__ import annotations
import warnings

import numpy as np
import pytest

from collects import (
    Array, Collect, Set, best_effort_inference_policy, collect_as,
    fail_policy, ifilter, imap
)
from collects.errors import EmptySequenceElementTypeUndetermined
from collects.policies import infer_eltype


def halve(x: int) -> np.float32:
    return np.float32(x / 2)


def untyped(x):
    return x


def dynamic(x) -> object:
    return x


def unresolvable(x):
    return x


unresolvable.__annotations__ = {"return": "NoSuchType"}


###########################
####    FAIL POLICY    ####
###########################


def test_fail_policy_always_raises():
    with pytest.raises(
        EmptySequenceElementTypeUndetermined,
        match="couldn't figure out an appropriate element type for "
              "collection of type list"
    ):
        fail_policy([])


def test_fail_policy_is_a_value_error():
    with pytest.raises(ValueError):
        fail_policy(iter(()))


##################################
####    BEST EFFORT POLICY    ####
##################################


def test_best_effort_reads_return_annotation():
    seq = imap(halve, [], eltype=np.floating)
    assert best_effort_inference_policy(seq) is np.float32


def test_best_effort_treats_classes_as_their_own_return_type():
    assert best_effort_inference_policy(imap(int, [])) is int
    assert best_effort_inference_policy(imap(np.float64, [])) is np.float64


def test_best_effort_prefers_precise_declared_element_type():
    seq = imap(untyped, [], eltype=str)
    assert best_effort_inference_policy(seq) is str


def test_best_effort_looks_through_filters():
    seq = ifilter(bool, imap(halve, []))
    assert best_effort_inference_policy(seq) is np.float32


@pytest.mark.parametrize("seq", [
    [],
    iter(()),
    imap(untyped, []),
    imap(dynamic, []),
    imap(lambda x: x, []),
    ifilter(bool, []),
])
def test_best_effort_fails_without_precise_annotation(seq):
    with pytest.raises(EmptySequenceElementTypeUndetermined):
        best_effort_inference_policy(seq)


def test_best_effort_warns_on_unresolvable_annotations():
    seq = imap(unresolvable, [])
    with pytest.warns(UserWarning, match="could not resolve annotations"):
        with pytest.raises(EmptySequenceElementTypeUndetermined):
            best_effort_inference_policy(seq)


def test_best_effort_falls_back_to_declared_element_type():
    assert best_effort_inference_policy(range(0)) is int
    assert best_effort_inference_policy(np.array([], dtype=np.int8)) is np.int8


def test_infer_eltype_is_extensible():

    class Empty:

        def __iter__(self):
            return iter(())

    infer_eltype.register(Empty, lambda seq: bytes)
    assert best_effort_inference_policy(Empty()) is bytes


##########################
####    COLLECTING    ####
##########################


def test_empty_imprecise_sequence_fails_with_default_policy():
    with pytest.raises(EmptySequenceElementTypeUndetermined):
        collect_as(Array, imap(halve, [], eltype=np.floating))


def test_empty_imprecise_sequence_with_best_effort_policy():
    result = collect_as(
        Array,
        imap(halve, [], eltype=np.floating),
        empty_sequence_policy=best_effort_inference_policy
    )
    assert type(result) is Array
    assert result.shape == (0,)
    assert result.eltype is np.float32
    assert result.dtype == np.float32


def test_best_effort_policy_does_not_affect_non_empty_sequences():
    collect = Collect(empty_sequence_policy=best_effort_inference_policy)
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        result = collect(Set, imap(halve, [2, 4]))
    assert result.eltype is np.float32
    assert result == {1.0, 2.0}
