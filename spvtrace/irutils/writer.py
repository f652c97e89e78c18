""" Writing SPIR-V modules into a textual format.

The format resembles the output of a SPIR-V disassembler: a header with
version and id bound, followed by one instruction per line.
"""

from .verify import verify_module
from .. import ir
from ..spirv import version_tuple


IR_FORMAT_INDENT = 2


def print_module(module, file=None, verify=True):
    """ Print a module as text.

    Args:
        module (:class:`ir.Module`): The module to turn into textual format.
        file: An optional file like object to write to. Defaults to stdout.
        verify (bool): A boolean indicating whether or not the module should
                       be verified before writing.
    """
    Writer(file=file).write(module, verify=verify)


class Writer:
    """ Write a module to file """

    def __init__(self, file=None, extra_indent=""):
        self.extra_indent = extra_indent
        self.file = file

    def _print(self, level, txt):
        indent = self.extra_indent + " " * (level * IR_FORMAT_INDENT)
        print(indent + txt, file=self.file)

    def write(self, module: ir.Module, verify=True):
        """ Write the module to file """
        assert isinstance(module, ir.Module)
        if verify:
            verify_module(module)
        self._print(0, "; SPIR-V")
        major, minor = version_tuple(module.version)
        self._print(0, "; Version: {}.{}".format(major, minor))
        self._print(0, "; Bound: {}".format(module.id_bound))

        for instruction in module.global_instructions():
            self._print(0, str(instruction))

        for function in module.functions:
            self._print(0, "")
            self.write_function(function)

    def write_function(self, function):
        self._print(0, str(function.def_inst))
        for parameter in function.parameters:
            self._print(0, str(parameter))
        for block in function.blocks:
            self._print(0, str(block.label))
            for instruction in block:
                self._print(1, str(instruction))
        self._print(0, str(function.end_inst))
