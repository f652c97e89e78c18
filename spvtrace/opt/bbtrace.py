""" Instrument basic blocks with execution counters.

Every basic block that can be reached from an entry point gets its own
counter slot in a storage buffer. On entry of the block, after the
function variables, the counter is incremented. Reading the buffer back
after execution gives the number of times each block was executed.

The buffer is declared like this (32-bit counters):

.. code::

    OpName %BasicBlockTraceBuffer "BasicBlockTraceBuffer"
    OpMemberName %BasicBlockTraceBuffer 0 "counters"
    OpName %basic_block_trace_buffer "basic_block_trace_buffer"
    OpDecorate %_runtimearr_uint ArrayStride 4
    OpDecorate %BasicBlockTraceBuffer Block
    OpMemberDecorate %BasicBlockTraceBuffer 0 Offset 0
    OpDecorate %basic_block_trace_buffer DescriptorSet 5
    OpDecorate %basic_block_trace_buffer Binding 1
    %_runtimearr_uint = OpTypeRuntimeArray %uint
    %BasicBlockTraceBuffer = OpTypeStruct %_runtimearr_uint
    %_ptr = OpTypePointer StorageBuffer %BasicBlockTraceBuffer
    %basic_block_trace_buffer = OpVariable %_ptr StorageBuffer

Which corresponds to this GLSL declaration:

.. code::

    layout(std430, set = 5, binding = 1) buffer BasicBlockTraceBuffer {
        uint counters[];
    } basic_block_trace_buffer;

With 64-bit counters the element type is a 64-bit unsigned integer, the
array stride is 8 and the Int64 and Int64Atomics capabilities are
required.

The increment of block 233 is either atomic:

.. code::

    %15 = OpAccessChain %_ptr_StorageBuffer_uint %buffer %uint_0 %uint_233
    %16 = OpAtomicIAdd %uint %15 %uint_1 %uint_0 %uint_1

or a plain load, add and store. The latter races when many invocations
execute the same block, and may then count too low.
"""

import logging
from types import MappingProxyType
from .. import ir
from ..common import InvariantError
from ..context import IRContext
from ..spirv import Op, OperandKind, StorageClass, Decoration, Capability
from ..spirv import Scope, MemorySemantics, SPV_VERSION_1_4
from ..analysis import types
from .transform import ModulePass, Status


TRACE_BUFFER_DESCRIPTOR_SET = 5
TRACE_BUFFER_BINDING = 1

TRACE_BUFFER_TYPE_NAME = 'BasicBlockTraceBuffer'
TRACE_BUFFER_MEMBER_NAME = 'counters'
TRACE_BUFFER_NAME = 'basic_block_trace_buffer'

STORAGE_BUFFER_EXTENSION = 'SPV_KHR_storage_buffer_storage_class'


class TraceBufferProvisioner:
    """ Declares the storage buffer that holds the block counters.

    The declarations are made on the first request only, later requests
    return the same ids.
    """
    logger = logging.getLogger('bbtrace')

    def __init__(self, context, wide_counters=False):
        self.context = context
        self.wide_counters = wide_counters
        self.trace_buffer_id = 0
        self.counter_pointer_type_id = 0
        self.anomalies = []

    @property
    def counter_width(self):
        return 64 if self.wide_counters else 32

    @property
    def counter_stride(self):
        """ Size in bytes of a single counter """
        return self.counter_width // 8

    @property
    def counter_type_id(self):
        """ Id of the unsigned integer type of the counters """
        return self.context.type_mgr.get_uint_type_id(self.counter_width)

    def get_trace_buffer_id(self):
        """ Get the id of the trace buffer variable, declaring it, its
        types and the required features when called the first time. """
        if self.trace_buffer_id:
            return self.trace_buffer_id

        context = self.context
        module = context.module
        type_mgr = context.type_mgr

        counter_type = types.Integer(self.counter_width, False)
        counters_type = types.RuntimeArray(counter_type).with_decoration(
            Decoration.ArrayStride, self.counter_stride)
        buffer_type = types.Struct([counters_type]) \
            .with_decoration(Decoration.Block) \
            .with_member_decoration(0, Decoration.Offset, 0)
        buffer_type_id = type_mgr.get_type_instruction(buffer_type)

        # The struct decorations are uses, so this only holds when the def-use
        # index missed the new declarations.
        if context.def_use.num_uses(buffer_type_id) == 0:
            message = 'Trace buffer type %{} has no uses'.format(
                buffer_type_id)
            self.logger.warning(message)
            self.anomalies.append(message)

        pointer_type_id = type_mgr.get_pointer_type_id(
            buffer_type_id, StorageClass.StorageBuffer)
        buffer_id = context.take_next_id()
        variable = ir.Instruction(
            Op.OpVariable, pointer_type_id, buffer_id,
            [ir.Operand(
                OperandKind.STORAGE_CLASS, int(StorageClass.StorageBuffer))])
        context.add_global_value(variable)

        self.add_debug_names(buffer_type_id, buffer_id)

        decoration_mgr = context.decoration_mgr
        decoration_mgr.add_decoration(
            buffer_id, Decoration.DescriptorSet, TRACE_BUFFER_DESCRIPTOR_SET)
        decoration_mgr.add_decoration(
            buffer_id, Decoration.Binding, TRACE_BUFFER_BINDING)

        self.add_storage_buffer_extension()
        if self.wide_counters:
            self.add_int64_capabilities()

        # Before version 1.4, the interface of an entry point only lists
        # Input and Output variables. Starting with version 1.4, it lists
        # all global variables referenced by the call tree.
        if module.version >= SPV_VERSION_1_4:
            for entry_point in module.entry_points:
                entry_point.add_operand(ir.id_operand(buffer_id))
                context.analyze_uses(entry_point)

        self.logger.debug(
            'Declared trace buffer %%%d with %d-bit counters',
            buffer_id, self.counter_width)
        self.trace_buffer_id = buffer_id
        return buffer_id

    def get_counter_pointer_type_id(self):
        """ Id of the type of a pointer to a single counter """
        if not self.counter_pointer_type_id:
            self.counter_pointer_type_id = \
                self.context.type_mgr.get_pointer_type_id(
                    self.counter_type_id, StorageClass.StorageBuffer)
        return self.counter_pointer_type_id

    def add_debug_names(self, buffer_type_id, buffer_id):
        context = self.context
        if not self._has_name(buffer_type_id):
            context.add_debug2_inst(ir.Instruction(
                Op.OpName, operands=[
                    ir.id_operand(buffer_type_id),
                    ir.string(TRACE_BUFFER_TYPE_NAME)]))
            context.add_debug2_inst(ir.Instruction(
                Op.OpMemberName, operands=[
                    ir.id_operand(buffer_type_id),
                    ir.literal(0),
                    ir.string(TRACE_BUFFER_MEMBER_NAME)]))
        context.add_debug2_inst(ir.Instruction(
            Op.OpName, operands=[
                ir.id_operand(buffer_id), ir.string(TRACE_BUFFER_NAME)]))

    def _has_name(self, target):
        return any(
            i.opcode == Op.OpName and i.operand_value(0) == target
            for i in self.context.module.debugs2)

    def add_storage_buffer_extension(self):
        feature_mgr = self.context.feature_mgr
        if not feature_mgr.has_extension(STORAGE_BUFFER_EXTENSION):
            self.context.add_extension(STORAGE_BUFFER_EXTENSION)

    def add_int64_capabilities(self):
        feature_mgr = self.context.feature_mgr
        for capability in (Capability.Int64, Capability.Int64Atomics):
            if not feature_mgr.has_capability(capability):
                self.context.add_capability(capability)


def label_basic_blocks(context):
    """ Number all blocks in the entry point call tree.

    Returns a dictionary from the label id of each block to its trace
    index. The trace indices are handed out in the order the blocks are
    visited, starting at 0.
    """
    label_map = {}
    trace_index = 0

    def label_function(function):
        nonlocal trace_index
        for block in function:
            label = block.label
            if not label.has_result_id:
                raise InvariantError(
                    'Block in {} has a label without id'.format(function))
            if label.result_id in label_map:
                raise InvariantError(
                    'Label %{} is used twice'.format(label.result_id))
            label_map[label.result_id] = trace_index
            trace_index += 1
        return False

    context.process_entry_point_call_tree(label_function)
    return label_map


class BasicBlockTracePass(ModulePass):
    """ Insert a counter increment at the start of every basic block.

    Args:
        wide_counters: use 64-bit counters instead of 32-bit counters.
        atomic: increment with an atomic add. Otherwise the counter is
            loaded, incremented and stored, which is not safe when
            several invocations run the same block at once.
    """
    name = 'inst-basic-block-trace'

    def __init__(self, wide_counters=False, atomic=True):
        super().__init__()
        self.wide_counters = wide_counters
        self.atomic = atomic
        self.block_count_callback = None
        self.correspondence_callback = None
        self.prepare()

    def prepare(self):
        self.context = None
        self.provisioner = None
        self._label_map = {}
        self.instrumented_blocks = 0

    def register_block_count_callback(self, callback):
        """ Register a function that receives the number of blocks """
        self.block_count_callback = callback

    def register_correspondence_callback(self, callback):
        """ Register a function that receives the mapping from block label
        id to trace index """
        self.correspondence_callback = callback

    @property
    def label_map(self):
        """ Read only view on the label id to trace index mapping """
        return MappingProxyType(self._label_map)

    def run(self, ir_module):
        """ Main entry point for the pass """
        self.prepare()
        self.context = IRContext(ir_module)
        self.provisioner = TraceBufferProvisioner(
            self.context, wide_counters=self.wide_counters)

        self._label_map = label_basic_blocks(self.context)
        block_count = len(self._label_map)
        self.logger.debug('Labeled %d basic blocks', block_count)

        if self.block_count_callback:
            self.block_count_callback(block_count)

        if self.correspondence_callback:
            self.correspondence_callback(self.label_map)

        modified = self.context.process_entry_point_call_tree(
            self.instrument_function)

        self.logger.info(
            'Instrumented %d of %d basic blocks',
            self.instrumented_blocks, block_count)
        self.context.invalidate_analyses()
        if modified:
            return Status.SUCCESS_WITH_CHANGE
        else:
            return Status.SUCCESS_WITHOUT_CHANGE

    def instrument_function(self, function):
        """ Instrument all blocks of a function.

        The increment goes after the function variables of the entry block
        and after the OpPhi instructions that start a block.

        Returns True if any block was changed.
        """
        changed = False
        for block in function:
            position = block.first_insertion_position()
            if position == len(block):
                self.logger.debug('Nothing to instrument in %s', block)
                continue

            trace_index = self._label_map.get(block.id)
            if trace_index is None:
                raise InvariantError(
                    'Block %{} has no trace index'.format(block.id))

            block.insert_before(position, self.make_increment(trace_index))
            self.instrumented_blocks += 1
            changed = True
        return changed

    def make_increment(self, trace_index):
        """ Create the instructions that increment counter trace_index """
        context = self.context
        constant_mgr = context.constant_mgr
        provisioner = self.provisioner

        buffer_id = provisioner.get_trace_buffer_id()
        pointer_type_id = provisioner.get_counter_pointer_type_id()
        counter_type_id = provisioner.counter_type_id
        member_id = constant_mgr.get_uint_const_id(0)
        index_id = constant_mgr.get_uint_const_id(trace_index)
        one_id = constant_mgr.get_uint_const_id(
            1, width=provisioner.counter_width)

        pointer_id = context.take_next_id()
        instructions = [ir.Instruction(
            Op.OpAccessChain, pointer_type_id, pointer_id,
            [ir.id_operand(buffer_id),
             ir.id_operand(member_id),
             ir.id_operand(index_id)])]

        if self.atomic:
            scope_id = constant_mgr.get_uint_const_id(int(Scope.Device))
            semantics_id = constant_mgr.get_uint_const_id(
                int(MemorySemantics.Relaxed))
            result_id = context.take_next_id()
            instructions.append(ir.Instruction(
                Op.OpAtomicIAdd, counter_type_id, result_id,
                [ir.id_operand(pointer_id),
                 ir.Operand(OperandKind.SCOPE_ID, scope_id),
                 ir.Operand(OperandKind.MEMORY_SEMANTICS_ID, semantics_id),
                 ir.id_operand(one_id)]))
        else:
            value_id = context.take_next_id()
            sum_id = context.take_next_id()
            instructions.append(ir.Instruction(
                Op.OpLoad, counter_type_id, value_id,
                [ir.id_operand(pointer_id)]))
            instructions.append(ir.Instruction(
                Op.OpIAdd, counter_type_id, sum_id,
                [ir.id_operand(value_id), ir.id_operand(one_id)]))
            instructions.append(ir.Instruction(
                Op.OpStore,
                operands=[ir.id_operand(pointer_id), ir.id_operand(sum_id)]))

        for instruction in instructions:
            context.analyze_def_use(instruction)
        return instructions
