""" Intermediate representation of SPIR-V modules.

Ir-code is organized into modules.
A module contains a number of sections in a fixed order (capabilities,
extensions, entry points, debug information, annotations, types and global
values) followed by the functions. Functions consist of basic blocks.
Each basic block starts with a label and is a linear sequence of
instructions that ends with a terminator.

Every value, type and block is identified by a result id, which is a
positive integer unique within the module.
"""

from .spirv import Op, OperandKind, ENUM_KINDS, TERMINATORS
from .spirv import is_id_kind, SPV_VERSION_1_0


class Operand:
    """ A single operand of an instruction.

    The value is an integer for ids, literals and enumerants, or a
    string for literal strings.
    """
    __slots__ = ('kind', 'value')

    def __init__(self, kind, value):
        assert isinstance(kind, OperandKind)
        self.kind = kind
        self.value = value

    @property
    def is_id(self):
        return is_id_kind(self.kind)

    def __eq__(self, other):
        if isinstance(other, Operand):
            return (self.kind, self.value) == (other.kind, other.value)
        return NotImplemented

    def __hash__(self):
        return hash((self.kind, self.value))

    def __str__(self):
        if self.is_id:
            return '%{}'.format(self.value)
        elif self.kind is OperandKind.LITERAL_STRING:
            return '"{}"'.format(self.value)
        elif self.kind in ENUM_KINDS:
            try:
                return ENUM_KINDS[self.kind](self.value).name
            except ValueError:
                return str(self.value)
        else:
            return str(self.value)

    def __repr__(self):
        return 'Operand({}, {!r})'.format(self.kind.name, self.value)


def id_operand(value):
    """ Create an operand referring to the given result id """
    return Operand(OperandKind.ID, value)


def literal(value):
    """ Create a literal integer operand """
    return Operand(OperandKind.LITERAL_INTEGER, value)


def string(value):
    """ Create a literal string operand """
    return Operand(OperandKind.LITERAL_STRING, value)


def opcode_name(opcode):
    """ Get the name of an opcode, also for opcodes not in the table """
    if isinstance(opcode, Op):
        return opcode.name
    return 'Op{}'.format(opcode)


class Instruction:
    """ A single SPIR-V instruction.

    The type id and result id are kept apart from the other operands,
    a value of 0 means the instruction has no type or no result.
    """
    def __init__(self, opcode, type_id=0, result_id=0, operands=()):
        try:
            self.opcode = Op(opcode)
        except ValueError:
            # Opcodes without an entry in the table are kept as numbers:
            self.opcode = int(opcode)
        self.type_id = type_id
        self.result_id = result_id
        self.operands = list(operands)
        assert all(isinstance(o, Operand) for o in self.operands)
        self.block = None

    @property
    def has_type_id(self):
        return self.type_id != 0

    @property
    def has_result_id(self):
        return self.result_id != 0

    @property
    def is_terminator(self):
        """ Check if this instruction is a block terminating instruction """
        return self.opcode in TERMINATORS

    def add_operand(self, operand):
        """ Append an operand to this instruction """
        assert isinstance(operand, Operand)
        self.operands.append(operand)

    def operand_value(self, index):
        """ Get the value of the operand at the given index """
        return self.operands[index].value

    def used_ids(self):
        """ Iterate over all ids used by this instruction, including the
        type id. """
        if self.has_type_id:
            yield self.type_id
        for operand in self.operands:
            if operand.is_id:
                yield operand.value

    def __str__(self):
        parts = [opcode_name(self.opcode)]
        if self.has_type_id:
            parts.append('%{}'.format(self.type_id))
        parts.extend(str(o) for o in self.operands)
        txt = ' '.join(parts)
        if self.has_result_id:
            txt = '%{} = {}'.format(self.result_id, txt)
        return txt

    def __repr__(self):
        return '<Instruction {}>'.format(self)


class BasicBlock:
    """ Uninterrupted sequence of instructions, started by a label.

    The label instruction is not part of the instruction list.
    """
    def __init__(self, label):
        assert label.opcode == Op.OpLabel
        self.label = label
        self.function = None
        self.instructions = []

    @property
    def id(self):
        """ The result id of the label of this block """
        return self.label.result_id

    def __str__(self):
        return '%{}:'.format(self.id)

    def __repr__(self):
        return '<BasicBlock %{}>'.format(self.id)

    def __iter__(self):
        for instruction in self.instructions:
            yield instruction

    def __len__(self):
        return len(self.instructions)

    def __getitem__(self, key):
        return self.instructions.__getitem__(key)

    def dump(self):
        print('  ', self)
        for instruction in self:
            print('    ', instruction)

    def add_instruction(self, instruction):
        """ Add an instruction to the end of this block """
        assert isinstance(instruction, Instruction)
        instruction.block = self
        self.instructions.append(instruction)

    def insert_before(self, position, instructions):
        """ Insert a sequence of instructions before the instruction at the
        given position, keeping their order. """
        instructions = list(instructions)
        for instruction in instructions:
            assert isinstance(instruction, Instruction)
            instruction.block = self
        self.instructions[position:position] = instructions

    def remove_instruction(self, instruction):
        """ Remove instruction from block """
        instruction.block = None
        self.instructions.remove(instruction)
        return instruction

    def first_non_variable_position(self):
        """ Position of the first instruction that is not an OpVariable.

        Function variables must be the first instructions of the entry
        block, so this is the earliest point where code may go.
        """
        position = 0
        while position < len(self.instructions) and \
                self.instructions[position].opcode == Op.OpVariable:
            position += 1
        return position

    def first_insertion_position(self):
        """ Position where new code may be inserted at the block start.

        This is after the function variables and after the OpPhi
        instructions, which must both lead the block.
        """
        position = self.first_non_variable_position()
        while position < len(self.instructions) and \
                self.instructions[position].opcode == Op.OpPhi:
            position += 1
        return position

    @property
    def is_empty(self):
        """ Determines whether the block is empty or not """
        return len(self) == 0

    @property
    def last_instruction(self):
        """ Gets the last instruction from the block """
        if not self.is_empty:
            return self.instructions[-1]

    @property
    def is_closed(self):
        """ Determine whether this block is properly terminated """
        return not self.is_empty and self.last_instruction.is_terminator

    @property
    def is_entry(self):
        """ Check if this block is the entry block of a function """
        return self.function.entry is self


class Function:
    """ A function definition: the OpFunction instruction, its parameters,
    its blocks and the closing OpFunctionEnd. """
    def __init__(self, def_inst):
        assert def_inst.opcode == Op.OpFunction
        self.def_inst = def_inst
        self.parameters = []
        self.blocks = []
        self.end_inst = Instruction(Op.OpFunctionEnd)
        self.module = None

    @property
    def id(self):
        return self.def_inst.result_id

    @property
    def entry(self):
        """ The first block of the function """
        if self.blocks:
            return self.blocks[0]

    def __str__(self):
        return 'function %{}'.format(self.id)

    def __repr__(self):
        return '<Function %{}>'.format(self.id)

    def __iter__(self):
        """ Iterate over all blocks in this function """
        for block in self.blocks:
            yield block

    def dump(self):
        """ Print this function """
        print(self)
        for block in self:
            block.dump()

    def add_parameter(self, parameter):
        """ Add a parameter instruction to this function """
        assert parameter.opcode == Op.OpFunctionParameter
        self.parameters.append(parameter)

    def add_block(self, block):
        """ Add a block to this function """
        assert isinstance(block, BasicBlock)
        block.function = self
        self.blocks.append(block)
        return block

    def get_instructions(self):
        for block in self:
            for instruction in block:
                yield instruction

    def all_instructions(self):
        """ Iterate over every instruction of the function in layout order,
        including function definition, parameters, labels and end. """
        yield self.def_inst
        yield from self.parameters
        for block in self:
            yield block.label
            yield from block
        yield self.end_inst

    def get_callees(self):
        """ Ids of the called functions, in order of appearance """
        for instruction in self.get_instructions():
            if instruction.opcode == Op.OpFunctionCall:
                yield instruction.operand_value(0)

    def num_instructions(self):
        """ Count the number of instructions contained in this function """
        return sum(len(block) for block in self.blocks)


class Module:
    """ Container of a SPIR-V program.

    The sections are lists of instructions and appear in the order that
    the SPIR-V logical layout demands.
    """
    def __init__(self, version=SPV_VERSION_1_0, id_bound=1, generator=0):
        self.version = version
        self.id_bound = id_bound
        self.generator = generator
        self.capabilities = []
        self.extensions = []
        self.ext_inst_imports = []
        self.memory_model = None
        self.entry_points = []
        self.execution_modes = []
        self.debugs1 = []
        self.debugs2 = []
        self.debugs3 = []
        self.annotations = []
        self.types_values = []
        self.functions = []

    def __str__(self):
        return 'module'

    def display(self):
        """ Display this module """
        from .irutils import print_module
        print_module(self, verify=False)

    def add_function(self, function):
        """ Add a function to this module """
        assert isinstance(function, Function)
        self.functions.append(function)
        function.module = self

    def get_function(self, function_id):
        """ Get a function with the given result id """
        for function in self.functions:
            if function.id == function_id:
                return function
        raise KeyError(function_id)

    def global_instructions(self):
        """ Iterate over all instructions outside of functions """
        yield from self.capabilities
        yield from self.extensions
        yield from self.ext_inst_imports
        if self.memory_model is not None:
            yield self.memory_model
        yield from self.entry_points
        yield from self.execution_modes
        yield from self.debugs1
        yield from self.debugs2
        yield from self.debugs3
        yield from self.annotations
        yield from self.types_values

    def all_instructions(self):
        """ Iterate over all instructions in logical layout order """
        yield from self.global_instructions()
        for function in self.functions:
            yield from function.all_instructions()

    def stats(self):
        """ Returns a string with statistic information such as block count """
        num_functions = len(self.functions)
        num_blocks = sum(len(f.blocks) for f in self.functions)
        num_instructions = sum(f.num_instructions() for f in self.functions)
        return "functions: {}, blocks: {}, instructions: {}" \
            .format(num_functions,
                    num_blocks,
                    num_instructions)
