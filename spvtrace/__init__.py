""" Basic block trace instrumentation for SPIR-V modules, implemented in
pure Python.

Example usage:

>>> from spvtrace import ir, spirv
>>> module = ir.Module()
>>> spirv.version_tuple(module.version)
(1, 0)

"""

# Define version here. Used in docs, and setup script:
__version_info__ = (0, 1, 0)
__version__ = '.'.join(map(str, __version_info__))
