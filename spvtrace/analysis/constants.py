""" Constant manager.

Scalar constants are keyed by their type descriptor and value, so that a
constant is declared only once.
"""

import logging
from .. import ir
from ..common import InvariantError
from ..spirv import Op, OperandKind
from . import types


class ConstantManager:
    """ Find or create scalar constant declarations of a module """
    logger = logging.getLogger('constmgr')

    def __init__(self, context):
        self.context = context
        self.constants = {}
        type_mgr = context.type_mgr
        for instruction in context.module.types_values:
            if instruction.opcode != Op.OpConstant:
                continue
            ty = type_mgr.get_type(instruction.type_id)
            if ty is None or len(instruction.operands) != 1:
                continue
            key = (ty, instruction.operand_value(0))
            self.constants.setdefault(key, instruction.result_id)

    def get_constant_id(self, ty, value):
        """ Get the id of the constant value of type ty, declaring it if
        it does not exist yet. """
        if isinstance(ty, types.Integer):
            if not ty.signed and not 0 <= value < (1 << ty.width):
                raise ValueError(
                    '{} does not fit in {}'.format(value, ty))
        key = (ty, value)
        if key in self.constants:
            return self.constants[key]

        type_id = self.context.type_mgr.get_type_instruction(ty)
        result_id = self.context.take_next_id()
        if not result_id:
            raise InvariantError('Could not create constant {}'.format(value))
        instruction = ir.Instruction(
            Op.OpConstant, type_id, result_id,
            [ir.Operand(OperandKind.LITERAL_NUMBER, value)])
        self.context.add_type_or_global(instruction)
        self.constants[key] = result_id
        self.logger.debug('Declared constant %s', instruction)
        return result_id

    def get_uint_const_id(self, value, width=32):
        """ Get the id of an unsigned integer constant """
        return self.get_constant_id(types.Integer(width, False), value)
