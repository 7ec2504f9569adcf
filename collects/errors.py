"""This module defines the exceptions raised by :func:`collect_as`.

Every exception derives from both :class:`CollectError` and the builtin
exception that best describes it, so callers that catch ``TypeError`` or
``ValueError`` keep working.  None of them are transient: they describe a
programming or input error that must be fixed at the call site.
"""


class CollectError(Exception):
    """Base class for all errors raised by ``collects``."""


class UnrecognizedDescriptor(CollectError, TypeError):
    """The output type descriptor is not one of the supported container kinds,
    or is malformed.
    """


class EmptyTypeTarget(CollectError, TypeError):
    """The output type descriptor names the uninhabited type itself."""


class InfiniteSequenceToFiniteTarget(CollectError, ValueError):
    """The input sequence declares itself to be infinite.

    This is always raised before any element is consumed.
    """


class EmptySequenceElementTypeUndetermined(CollectError, ValueError):
    """The input sequence is empty and no element type could be determined
    for the output.
    """


class DimensionMismatch(CollectError, ValueError):
    """The requested dimension count or extents disagree with the shape of the
    input sequence, or the sequence yields a different number of elements than
    it declares.
    """


class ArityError(CollectError, ValueError):
    """A scalar-shaped (0-dimensional) output was requested, but the input
    sequence did not yield exactly one element.
    """


class ElementConversionError(CollectError, TypeError):
    """An element could not be converted into a fixed output element type."""
