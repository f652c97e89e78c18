""" The context in which a module is processed.

The context owns the id allocator and the analyses of one module. The
analyses are built on first use and kept up to date by the helper methods
that add instructions to the module.
"""

import logging
from . import ir
from .common import IdOverflow
from .spirv import Op, OperandKind, MAX_ID_BOUND
from .analysis import DefUseManager, TypeManager, ConstantManager
from .analysis import DecorationManager, FeatureManager
from .analysis import process_call_tree, entry_point_function_ids


class IdAllocator:
    """ Hands out fresh result ids for a module.

    Ids are taken from the id bound of the module, so every id is larger
    than all ids that were in use before.
    """
    def __init__(self, module):
        self.module = module

    def next_id(self):
        """ Return a previously unused id """
        result_id = self.module.id_bound
        if result_id >= MAX_ID_BOUND:
            raise IdOverflow(
                'Id bound {} exhausted'.format(MAX_ID_BOUND))
        self.module.id_bound = result_id + 1
        return result_id


class IRContext:
    """ Wraps a module together with its analyses """
    logger = logging.getLogger('context')

    def __init__(self, module):
        assert isinstance(module, ir.Module)
        self.module = module
        self.id_allocator = IdAllocator(module)
        self._def_use = None
        self._decoration_mgr = None
        self._type_mgr = None
        self._constant_mgr = None
        self._feature_mgr = None

    def take_next_id(self):
        return self.id_allocator.next_id()

    @property
    def def_use(self):
        if self._def_use is None:
            self._def_use = DefUseManager(self.module)
        return self._def_use

    @property
    def decoration_mgr(self):
        if self._decoration_mgr is None:
            self._decoration_mgr = DecorationManager(self)
        return self._decoration_mgr

    @property
    def type_mgr(self):
        if self._type_mgr is None:
            self._type_mgr = TypeManager(self)
        return self._type_mgr

    @property
    def constant_mgr(self):
        if self._constant_mgr is None:
            self._constant_mgr = ConstantManager(self)
        return self._constant_mgr

    @property
    def feature_mgr(self):
        if self._feature_mgr is None:
            self._feature_mgr = FeatureManager(self.module)
        return self._feature_mgr

    def invalidate_analyses(self):
        """ Drop all analyses, they are rebuilt when needed """
        self._def_use = None
        self._decoration_mgr = None
        self._type_mgr = None
        self._constant_mgr = None
        self._feature_mgr = None

    # Module modifications:
    def analyze_def_use(self, instruction):
        if self._def_use is not None:
            self._def_use.analyze_inst_def_use(instruction)

    def analyze_uses(self, instruction):
        """ Refresh the uses of an instruction whose operands changed """
        if self._def_use is not None:
            self._def_use.analyze_inst_use(instruction)

    def add_capability(self, capability):
        instruction = ir.Instruction(
            Op.OpCapability,
            operands=[ir.Operand(OperandKind.CAPABILITY, int(capability))])
        self.module.capabilities.append(instruction)
        if self._feature_mgr is not None:
            self._feature_mgr.add_capability(capability)
        self.logger.debug('Added capability %s', instruction)

    def add_extension(self, name):
        instruction = ir.Instruction(
            Op.OpExtension, operands=[ir.string(name)])
        self.module.extensions.append(instruction)
        if self._feature_mgr is not None:
            self._feature_mgr.add_extension(name)
        self.logger.debug('Added extension %s', name)

    def add_type_or_global(self, instruction):
        """ Append a type, constant or global variable declaration """
        self.module.types_values.append(instruction)
        self.analyze_def_use(instruction)

    add_global_value = add_type_or_global

    def add_debug2_inst(self, instruction):
        """ Append a debug name instruction """
        self.module.debugs2.append(instruction)
        self.analyze_def_use(instruction)

    def add_annotation_inst(self, instruction):
        """ Append a decoration instruction """
        self.module.annotations.append(instruction)
        self.analyze_def_use(instruction)
        if self._decoration_mgr is not None:
            self._decoration_mgr.analyze_inst(instruction)

    # Call tree processing:
    def process_entry_point_call_tree(self, process_function):
        """ Apply process_function to all functions reachable from the
        entry points. Returns True if any function was modified. """
        roots = entry_point_function_ids(self.module)
        return self.process_call_tree_from_roots(process_function, roots)

    def process_call_tree_from_roots(self, process_function, roots):
        return process_call_tree(self.module, process_function, roots)
