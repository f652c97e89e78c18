""" Various utilities to operate on SPIR-V modules.
"""

from .verify import verify_module, Verifier
from .writer import Writer, print_module
from .builder import Builder

__all__ = [
    "Builder",
    "print_module",
    "Verifier",
    "verify_module",
    "Writer",
]
