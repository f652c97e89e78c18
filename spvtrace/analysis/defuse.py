""" Definition-use information of a module.

For each result id the defining instruction is kept, and for each id the
list of (instruction, operand index) pairs that use it. The type id of an
instruction counts as a use with operand index -1.
"""

import logging
from collections import defaultdict


class DefUseManager:
    """ Keeps track of the definitions and uses of ids in a module """
    logger = logging.getLogger('defuse')

    def __init__(self, module=None):
        self.defs = {}
        self.uses = defaultdict(list)
        # Remember which ids each instruction uses, to refresh them later:
        self.inst_uses = {}
        if module is not None:
            self.analyze_module(module)

    def analyze_module(self, module):
        for instruction in module.all_instructions():
            self.analyze_inst_def(instruction)
        for instruction in module.all_instructions():
            self.analyze_inst_use(instruction)
        self.logger.debug(
            'Analyzed %d definitions, %d used ids',
            len(self.defs), len(self.uses))

    def analyze_inst_def(self, instruction):
        """ Register the result id defined by the instruction """
        if instruction.has_result_id:
            self.defs[instruction.result_id] = instruction

    def analyze_inst_use(self, instruction):
        """ Register the uses of an instruction, replacing older records """
        self.clear_uses(instruction)
        used = []
        if instruction.has_type_id:
            used.append((instruction.type_id, -1))
        for index, operand in enumerate(instruction.operands):
            if operand.is_id:
                used.append((operand.value, index))
        for value, index in used:
            self.uses[value].append((instruction, index))
        self.inst_uses[instruction] = [value for value, _ in used]

    def analyze_inst_def_use(self, instruction):
        self.analyze_inst_def(instruction)
        self.analyze_inst_use(instruction)

    def clear_uses(self, instruction):
        """ Forget the uses recorded for the given instruction """
        for value in self.inst_uses.pop(instruction, ()):
            self.uses[value] = [
                u for u in self.uses[value] if u[0] is not instruction]

    def clear_inst(self, instruction):
        """ Forget the given instruction completely """
        self.clear_uses(instruction)
        if instruction.has_result_id and \
                self.defs.get(instruction.result_id) is instruction:
            del self.defs[instruction.result_id]

    def get_def(self, value):
        """ Get the instruction defining the given id, or None """
        return self.defs.get(value)

    def get_users(self, value):
        """ Get the instructions that use the given id """
        users = []
        for user, _ in self.uses.get(value, ()):
            if user not in users:
                users.append(user)
        return users

    def num_uses(self, value):
        """ Count how often the given id is used """
        return len(self.uses.get(value, ()))

    def num_users(self, value):
        return len(self.get_users(value))
