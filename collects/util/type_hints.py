"""This module provides PEP 484-style type hints for ``collects`` constructs.
"""
from types import GenericAlias
from typing import (
    Any, Callable, Iterable, Protocol, Tuple, Union, runtime_checkable
)


#########################
####    ITERABLES    ####
#########################


shape_like = Tuple[int, ...]


###########################
####    DESCRIPTORS    ####
###########################


# NOTE: ``Descriptor`` objects from collects.containers are also accepted.
descriptor_like = Union[type, GenericAlias, Any]


empty_sequence_policy = Callable[[Iterable], type]


#########################
####    PROTOCOLS    ####
#########################


@runtime_checkable
class HasEltype(Protocol):
    """An iterable that declares the type of the elements it produces."""

    __eltype__: type

    def __iter__(self): ...
