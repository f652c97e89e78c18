""" Analyses over a module: def-use, types, constants, decorations,
features and the call graph.
"""

from .defuse import DefUseManager
from .typemgr import TypeManager
from .constants import ConstantManager
from .decorations import DecorationManager
from .features import FeatureManager
from .callgraph import CallGraph, process_call_tree, entry_point_function_ids


__all__ = [
    'CallGraph',
    'ConstantManager',
    'DecorationManager',
    'DefUseManager',
    'entry_point_function_ids',
    'FeatureManager',
    'process_call_tree',
    'TypeManager',
]
