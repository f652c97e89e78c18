""" Decoration bookkeeping.

Decorations are annotation instructions (OpDecorate and OpMemberDecorate)
that attach layout or binding information to an id.
"""

import logging
from .. import ir
from ..spirv import Op, OperandKind


DECORATION_OPCODES = (Op.OpDecorate, Op.OpMemberDecorate)


class DecorationManager:
    """ Lookup and add decorations on ids of a module """
    logger = logging.getLogger('decorations')

    def __init__(self, context):
        self.context = context
        self.decorations = {}
        for instruction in context.module.annotations:
            self.analyze_inst(instruction)

    def analyze_inst(self, instruction):
        """ Register an annotation instruction """
        if instruction.opcode in DECORATION_OPCODES:
            target = instruction.operand_value(0)
            self.decorations.setdefault(target, []).append(instruction)

    def get_decorations(self, target):
        """ Get all decoration instructions that apply to target """
        return list(self.decorations.get(target, ()))

    def _find(self, target, opcode, values):
        for instruction in self.decorations.get(target, ()):
            if instruction.opcode != opcode:
                continue
            present = tuple(o.value for o in instruction.operands[1:])
            if present == values:
                return instruction

    def has_decoration(self, target, decoration, *values):
        """ Test if target is decorated with decoration.

        When values are given, they must match as well.
        """
        for instruction in self.decorations.get(target, ()):
            if instruction.opcode != Op.OpDecorate:
                continue
            if instruction.operand_value(1) != decoration:
                continue
            present = tuple(o.value for o in instruction.operands[2:])
            if not values or present == values:
                return True
        return False

    def add_decoration(self, target, decoration, *values):
        """ Decorate target, unless the exact decoration is present """
        key = (int(decoration),) + tuple(values)
        existing = self._find(target, Op.OpDecorate, key)
        if existing:
            return existing
        operands = [
            ir.id_operand(target),
            ir.Operand(OperandKind.DECORATION, int(decoration))]
        operands.extend(ir.literal(v) for v in values)
        instruction = ir.Instruction(Op.OpDecorate, operands=operands)
        self.logger.debug('Adding %s', instruction)
        self.context.add_annotation_inst(instruction)
        return instruction

    def add_member_decoration(self, target, member, decoration, *values):
        """ Decorate a member of the structure target, unless present """
        key = (member, int(decoration)) + tuple(values)
        existing = self._find(target, Op.OpMemberDecorate, key)
        if existing:
            return existing
        operands = [
            ir.id_operand(target),
            ir.literal(member),
            ir.Operand(OperandKind.DECORATION, int(decoration))]
        operands.extend(ir.literal(v) for v in values)
        instruction = ir.Instruction(Op.OpMemberDecorate, operands=operands)
        self.logger.debug('Adding %s', instruction)
        self.context.add_annotation_inst(instruction)
        return instruction

    def type_decorations(self, target):
        """ Get the decorations of target in the form used by type keys.

        Returns a tuple with the decorations of the id itself and the
        decorations of its members.
        """
        decorations = []
        member_decorations = []
        for instruction in self.decorations.get(target, ()):
            values = tuple(o.value for o in instruction.operands[1:])
            if instruction.opcode == Op.OpDecorate:
                decorations.append(values)
            else:
                member_decorations.append(values)
        return decorations, member_decorations
