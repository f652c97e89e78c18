""" Constructing SPIR-V modules.

"""

from .. import ir
from ..context import IdAllocator
from ..spirv import Op, OperandKind, StorageClass
from ..spirv import AddressingModel, MemoryModel, FunctionControl


class Builder:
    """ Helper class for SPIR-V generators.

    This class can assist in the construction of a module. Result ids are
    allocated from the id bound of the module. Types, constants and
    global variables go into the module, other instructions are appended
    to the current block.
    """

    def __init__(self):
        self.ids = None
        self.prepare()

    def prepare(self):
        self.module = None
        self.function = None
        self.block = None

    # Helpers:
    def set_module(self, module):
        self.module = module
        self.ids = IdAllocator(module)

    def new_id(self):
        return self.ids.next_id()

    def set_function(self, function):
        self.function = function
        self.block = function.entry if function else None

    def set_block(self, block):
        self.block = block

    # Module level instructions:
    def capability(self, capability):
        self.module.capabilities.append(ir.Instruction(
            Op.OpCapability,
            operands=[ir.Operand(OperandKind.CAPABILITY, int(capability))]))

    def extension(self, name):
        self.module.extensions.append(ir.Instruction(
            Op.OpExtension, operands=[ir.string(name)]))

    def memory_model(self, addressing=AddressingModel.Logical,
                     memory=MemoryModel.GLSL450):
        self.module.memory_model = ir.Instruction(
            Op.OpMemoryModel, operands=[
                ir.Operand(OperandKind.ADDRESSING_MODEL, int(addressing)),
                ir.Operand(OperandKind.MEMORY_MODEL, int(memory))])

    def entry_point(self, model, function, name, interface=()):
        """ Declare function as entry point with the given interface """
        operands = [
            ir.Operand(OperandKind.EXECUTION_MODEL, int(model)),
            ir.id_operand(function.id),
            ir.string(name)]
        operands.extend(ir.id_operand(i) for i in interface)
        instruction = ir.Instruction(Op.OpEntryPoint, operands=operands)
        self.module.entry_points.append(instruction)
        return instruction

    def execution_mode(self, function, mode, *values):
        operands = [
            ir.id_operand(function.id),
            ir.Operand(OperandKind.EXECUTION_MODE, int(mode))]
        operands.extend(ir.literal(v) for v in values)
        self.module.execution_modes.append(
            ir.Instruction(Op.OpExecutionMode, operands=operands))

    def name(self, target, name):
        self.module.debugs2.append(ir.Instruction(
            Op.OpName, operands=[ir.id_operand(target), ir.string(name)]))

    def member_name(self, target, member, name):
        self.module.debugs2.append(ir.Instruction(
            Op.OpMemberName, operands=[
                ir.id_operand(target), ir.literal(member), ir.string(name)]))

    def decorate(self, target, decoration, *values):
        operands = [
            ir.id_operand(target),
            ir.Operand(OperandKind.DECORATION, int(decoration))]
        operands.extend(ir.literal(v) for v in values)
        self.module.annotations.append(
            ir.Instruction(Op.OpDecorate, operands=operands))

    def member_decorate(self, target, member, decoration, *values):
        operands = [
            ir.id_operand(target),
            ir.literal(member),
            ir.Operand(OperandKind.DECORATION, int(decoration))]
        operands.extend(ir.literal(v) for v in values)
        self.module.annotations.append(
            ir.Instruction(Op.OpMemberDecorate, operands=operands))

    # Types, constants and globals:
    def declare(self, opcode, operands=(), type_id=0):
        """ Add a declaration to the module and return its id """
        result_id = self.new_id()
        self.module.types_values.append(
            ir.Instruction(opcode, type_id, result_id, operands))
        return result_id

    def type_void(self):
        return self.declare(Op.OpTypeVoid)

    def type_bool(self):
        return self.declare(Op.OpTypeBool)

    def type_int(self, width, signed):
        return self.declare(
            Op.OpTypeInt, [ir.literal(width), ir.literal(int(signed))])

    def type_float(self, width):
        return self.declare(Op.OpTypeFloat, [ir.literal(width)])

    def type_vector(self, component, count):
        return self.declare(
            Op.OpTypeVector, [ir.id_operand(component), ir.literal(count)])

    def type_array(self, element, length):
        return self.declare(
            Op.OpTypeArray, [ir.id_operand(element), ir.id_operand(length)])

    def type_runtime_array(self, element):
        return self.declare(Op.OpTypeRuntimeArray, [ir.id_operand(element)])

    def type_struct(self, *members):
        return self.declare(
            Op.OpTypeStruct, [ir.id_operand(m) for m in members])

    def type_pointer(self, storage_class, pointee):
        return self.declare(Op.OpTypePointer, [
            ir.Operand(OperandKind.STORAGE_CLASS, int(storage_class)),
            ir.id_operand(pointee)])

    def type_function(self, return_type, *params):
        operands = [ir.id_operand(return_type)]
        operands.extend(ir.id_operand(p) for p in params)
        return self.declare(Op.OpTypeFunction, operands)

    def constant(self, type_id, value):
        return self.declare(
            Op.OpConstant,
            [ir.Operand(OperandKind.LITERAL_NUMBER, value)], type_id)

    def constant_true(self, type_id):
        return self.declare(Op.OpConstantTrue, type_id=type_id)

    def variable(self, pointer_type, storage_class):
        """ Declare a global variable """
        return self.declare(
            Op.OpVariable,
            [ir.Operand(OperandKind.STORAGE_CLASS, int(storage_class))],
            pointer_type)

    # Functions and blocks:
    def new_function(self, return_type, function_type,
                     control=FunctionControl.NONE):
        """ Create a new function and make it the current one """
        assert self.module is not None
        definition = ir.Instruction(
            Op.OpFunction, return_type, self.new_id(), [
                ir.Operand(OperandKind.FUNCTION_CONTROL, int(control)),
                ir.id_operand(function_type)])
        function = ir.Function(definition)
        self.module.add_function(function)
        self.set_function(function)
        return function

    def new_parameter(self, type_id):
        parameter = ir.Instruction(
            Op.OpFunctionParameter, type_id, self.new_id())
        self.function.add_parameter(parameter)
        return parameter.result_id

    def new_block(self):
        """ Create a new block and add it to the current function """
        assert self.function is not None
        label = ir.Instruction(Op.OpLabel, result_id=self.new_id())
        block = ir.BasicBlock(label)
        self.function.add_block(block)
        return block

    def emit(self, instruction):
        """ Append an instruction to the current block """
        assert isinstance(instruction, ir.Instruction), str(instruction)
        assert self.block is not None
        self.block.add_instruction(instruction)
        return instruction

    def emit_value(self, opcode, type_id, *operand_ids):
        """ Emit an instruction with a result taking id operands.

        Returns the result id.
        """
        instruction = ir.Instruction(
            opcode, type_id, self.new_id(),
            [ir.id_operand(i) for i in operand_ids])
        return self.emit(instruction).result_id

    # Instruction helpers:
    def emit_variable(self, pointer_type):
        """ Emit a function local variable """
        instruction = ir.Instruction(
            Op.OpVariable, pointer_type, self.new_id(), [
                ir.Operand(
                    OperandKind.STORAGE_CLASS, int(StorageClass.Function))])
        return self.emit(instruction).result_id

    def emit_load(self, type_id, pointer):
        return self.emit_value(Op.OpLoad, type_id, pointer)

    def emit_store(self, pointer, value):
        self.emit(ir.Instruction(
            Op.OpStore,
            operands=[ir.id_operand(pointer), ir.id_operand(value)]))

    def emit_add(self, type_id, a, b):
        return self.emit_value(Op.OpIAdd, type_id, a, b)

    def emit_call(self, return_type, function, *arguments):
        return self.emit_value(
            Op.OpFunctionCall, return_type, function.id, *arguments)

    def emit_selection_merge(self, merge_block):
        self.emit(ir.Instruction(Op.OpSelectionMerge, operands=[
            ir.id_operand(merge_block.id),
            ir.Operand(OperandKind.SELECTION_CONTROL, 0)]))

    def emit_branch(self, block):
        self.emit(ir.Instruction(
            Op.OpBranch, operands=[ir.id_operand(block.id)]))

    def emit_branch_conditional(self, condition, true_block, false_block):
        self.emit(ir.Instruction(Op.OpBranchConditional, operands=[
            ir.id_operand(condition),
            ir.id_operand(true_block.id),
            ir.id_operand(false_block.id)]))

    def emit_return(self):
        self.emit(ir.Instruction(Op.OpReturn))

    def emit_return_value(self, value):
        self.emit(ir.Instruction(
            Op.OpReturnValue, operands=[ir.id_operand(value)]))
