""" Verify a module for structural consistency.

This is a very useful module since it allows to isolate
bugs in passes that modify modules. It is no replacement for a full
SPIR-V validator, only the layout rules that passes must keep intact are
checked.
"""

import logging
from ..common import IrFormError
from ..spirv import Op
from .. import ir


def verify_module(module: ir.Module):
    """ Check if the module is properly constructed

    Args:
        module: The module to verify.
    """
    Verifier().verify(module)


class Verifier:
    """ Checks a module for correctness """

    logger = logging.getLogger("verifier")

    def __init__(self):
        self.defined = set()

    def verify(self, module):
        """ Verifies a module for some sanity """
        self.logger.debug("Verifying %s", module)
        assert isinstance(module, ir.Module)
        self.defined = set()
        for instruction in module.all_instructions():
            self.verify_definition(instruction, module)

        for instruction in module.all_instructions():
            self.verify_uses(instruction)

        function_ids = {f.id for f in module.functions}
        for entry_point in module.entry_points:
            if entry_point.operand_value(1) not in function_ids:
                raise IrFormError(
                    "Entry point {} refers to a missing function".format(
                        entry_point))

        for function in module.functions:
            self.verify_function(function)

    def verify_definition(self, instruction, module):
        """ Check that a result id is valid and unique """
        if not instruction.has_result_id:
            return
        result_id = instruction.result_id
        if result_id in self.defined:
            raise IrFormError("Id %{} defined twice".format(result_id))
        if not 0 < result_id < module.id_bound:
            raise IrFormError(
                "Id %{} is outside of the id bound {}".format(
                    result_id, module.id_bound))
        self.defined.add(result_id)

    def verify_uses(self, instruction):
        """ Check that all used ids are defined somewhere """
        for used_id in instruction.used_ids():
            if used_id not in self.defined:
                raise IrFormError(
                    "{} uses undefined id %{}".format(instruction, used_id))

    def verify_function(self, function):
        """ Verify all blocks in the function """
        if not function.blocks:
            raise IrFormError("{} has no blocks".format(function))
        for block in function:
            assert block.function is function
            self.verify_block_termination(block)
            self.verify_block(block)

    def verify_block_termination(self, block):
        """ Verify that the block is terminated correctly """
        if block.is_empty:
            raise IrFormError("Block is empty: {}".format(block))
        if not block.last_instruction.is_terminator:
            raise IrFormError(
                "The last instruction of {} is not a terminator "
                "instruction".format(block))
        if any(i.is_terminator for i in block.instructions[:-1]):
            raise IrFormError(
                "Terminator in the middle of {}".format(block))

    def verify_block(self, block):
        """ Verify that function variables only appear at the start of the
        entry block """
        variables_allowed = block.is_entry
        for instruction in block:
            assert instruction.block is block
            if instruction.opcode == Op.OpLabel:
                raise IrFormError("Label inside of {}".format(block))
            if instruction.opcode == Op.OpVariable:
                if not variables_allowed:
                    raise IrFormError(
                        "Misplaced variable {} in {}".format(
                            instruction, block))
            else:
                variables_allowed = False
