"""Collect arbitrary sequences into containers of a requested type.

Subpackages
-----------
util
    Utilities for ``collects``-related functionality.

Modules
-------
build
    Builders that consume a sequence into each kind of container, including
    the widening accumulators that unify element types on the fly.

classify
    Canonicalization of output type descriptors.

collect
    The :func:`collect_as` entry point and its dispatch table.

containers
    The ``Set``, ``Array`` and ``Buffer`` containers and their descriptors.

eltypes
    The lattice of element types and conversions between them.

errors
    Exceptions raised by ``collects``.

extension
    Registration of third-party container kinds.

iterators
    Capability-preserving ``map()`` and ``filter()`` adapters.

policies
    Standard empty-sequence policies.

resolve
    Resolution of the output element type and dimension count.

traits
    Capability queries (element type, size and shape) for input sequences.
"""
# pylint: disable=undefined-variable, redefined-builtin
from . import traits
from .build import extend_widen, push_widen
from .collect import Collect, collect_as
from .containers import Array, Buffer, Matrix, Set, Tuple, Vector
from .eltypes import Never, convert_element, is_precise, typejoin
from .errors import (
    ArityError, CollectError, DimensionMismatch, ElementConversionError,
    EmptySequenceElementTypeUndetermined, EmptyTypeTarget,
    InfiniteSequenceToFiniteTarget, UnrecognizedDescriptor
)
from .extension import register_kind, registered_kinds, unregister_kind
from .iterators import ifilter, imap
from .policies import best_effort_inference_policy, fail_policy
