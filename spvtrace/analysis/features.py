""" Capabilities and extensions enabled in a module.
"""

from ..spirv import Op, PROMOTED_EXTENSIONS


class FeatureManager:
    """ Answers which capabilities and extensions a module has """
    def __init__(self, module):
        self.module = module
        self.capabilities = set()
        self.extensions = set()
        for instruction in module.capabilities:
            if instruction.opcode == Op.OpCapability:
                self.capabilities.add(instruction.operand_value(0))
        for instruction in module.extensions:
            if instruction.opcode == Op.OpExtension:
                self.extensions.add(instruction.operand_value(0))

    def has_capability(self, capability):
        return capability in self.capabilities

    def has_extension(self, name):
        """ Test if the extension is available.

        An extension that was made part of the core specification is
        available when the module version includes it.
        """
        if name in self.extensions:
            return True
        version = PROMOTED_EXTENSIONS.get(name)
        return version is not None and self.module.version >= version

    def add_capability(self, capability):
        self.capabilities.add(capability)

    def add_extension(self, name):
        self.extensions.add(name)
