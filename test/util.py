""" Helpers to construct shader modules for the tests """

from spvtrace import ir
from spvtrace.irutils import Builder
from spvtrace.spirv import Op, Capability, StorageClass, ExecutionModel
from spvtrace.spirv import ExecutionMode, SPV_VERSION_1_0


class Shader:
    """ A module together with the ids and objects tests refer to """
    def __init__(self, module, builder):
        self.module = module
        self.builder = builder
        self.functions = []
        self.blocks = []
        self.uint = 0
        self.void = 0


def start_shader(version=SPV_VERSION_1_0):
    """ Create a module with the common header and basic types """
    builder = Builder()
    module = ir.Module(version=version)
    builder.set_module(module)
    builder.capability(Capability.Shader)
    builder.memory_model()
    shader = Shader(module, builder)
    shader.void = builder.type_void()
    shader.void_fn = builder.type_function(shader.void)
    shader.uint = builder.type_int(32, False)
    shader.ptr_function_uint = builder.type_pointer(
        StorageClass.Function, shader.uint)
    shader.one = builder.constant(shader.uint, 1)
    return shader


def fragment_shader(version=SPV_VERSION_1_0):
    """ A fragment shader with a single function of three blocks.

    The first block starts with two variables.
    """
    shader = start_shader(version)
    builder = shader.builder
    main = builder.new_function(shader.void, shader.void_fn)
    entry = builder.new_block()
    second = builder.new_block()
    third = builder.new_block()

    builder.set_block(entry)
    a = builder.emit_variable(shader.ptr_function_uint)
    b = builder.emit_variable(shader.ptr_function_uint)
    builder.emit_store(a, shader.one)
    builder.emit_branch(second)

    builder.set_block(second)
    value = builder.emit_load(shader.uint, a)
    total = builder.emit_add(shader.uint, value, shader.one)
    builder.emit_store(b, total)
    builder.emit_branch(third)

    builder.set_block(third)
    builder.emit_return()

    builder.entry_point(ExecutionModel.Fragment, main, 'main')
    builder.execution_mode(main, ExecutionMode.OriginUpperLeft)
    shader.functions = [main]
    shader.blocks = [entry, second, third]
    return shader


def call_tree_shader(block_counts, calls, entry_points,
                     variables=None, version=SPV_VERSION_1_0):
    """ Create a shader with several functions calling each other.

    Args:
        block_counts: the number of blocks of each function.
        calls: for each function the indices of the functions it calls.
        entry_points: indices of the functions that are entry points.
        variables: for each function the number of variables in the entry
            block.
    """
    shader = start_shader(version)
    builder = shader.builder
    if variables is None:
        variables = [0] * len(block_counts)

    functions = [
        builder.new_function(shader.void, shader.void_fn)
        for _ in block_counts]

    for index, function in enumerate(functions):
        builder.set_function(function)
        blocks = [builder.new_block() for _ in range(block_counts[index])]
        builder.set_block(blocks[0])
        for _ in range(variables[index]):
            builder.emit_variable(shader.ptr_function_uint)
        for callee in calls[index]:
            builder.emit_call(shader.void, functions[callee])
        for block, next_block in zip(blocks, blocks[1:]):
            builder.set_block(block)
            builder.emit_branch(next_block)
        builder.set_block(blocks[-1])
        builder.emit_return()
        shader.blocks.append(blocks)

    for number, index in enumerate(entry_points):
        builder.entry_point(
            ExecutionModel.GLCompute, functions[index], 'main{}'.format(number))
    shader.functions = functions
    return shader


def selection_shader(version=SPV_VERSION_1_0):
    """ A compute shader calling a function with an if-then-else.

    The called function takes a bool parameter and returns the value of a
    private variable.
    """
    shader = start_shader(version)
    builder = shader.builder
    bool_type = builder.type_bool()
    select_fn = builder.type_function(shader.uint, bool_type)
    true = builder.constant_true(bool_type)
    ptr_private_uint = builder.type_pointer(StorageClass.Private, shader.uint)
    counter = builder.variable(ptr_private_uint, StorageClass.Private)

    select = builder.new_function(shader.uint, select_fn)
    condition = builder.new_parameter(bool_type)
    entry = builder.new_block()
    then = builder.new_block()
    otherwise = builder.new_block()
    merge = builder.new_block()
    builder.set_block(entry)
    builder.emit_selection_merge(merge)
    builder.emit_branch_conditional(condition, then, otherwise)
    builder.set_block(then)
    builder.emit_branch(merge)
    builder.set_block(otherwise)
    builder.emit_store(counter, shader.one)
    builder.emit_branch(merge)
    builder.set_block(merge)
    value = builder.emit_load(shader.uint, counter)
    builder.emit_return_value(value)

    main = builder.new_function(shader.void, shader.void_fn)
    main_entry = builder.new_block()
    builder.set_block(main_entry)
    builder.emit_call(shader.uint, select, true)
    builder.emit_return()

    builder.entry_point(ExecutionModel.GLCompute, main, 'main')
    builder.execution_mode(main, ExecutionMode.LocalSize, 1, 1, 1)
    shader.functions = [select, main]
    shader.blocks = [[entry, then, otherwise, merge], [main_entry]]
    return shader


def find_instructions(module, opcode):
    """ Get all instructions with the given opcode """
    return [i for i in module.all_instructions() if i.opcode == opcode]


def get_decorations(module, target):
    """ Get (decoration, values..) tuples of the OpDecorate's on target """
    return [
        tuple(o.value for o in i.operands[1:])
        for i in module.annotations
        if i.opcode == Op.OpDecorate and i.operand_value(0) == target]
