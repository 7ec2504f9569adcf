"""This package contains utilities related to ``collects`` functionality,
including type hints and error formatting.

Modules
-------
error
    Helpers for formatting error messages raised by ``collects`` internals.

type_hints
    PEP 484-style type hints for ``collects`` constructs.
"""
