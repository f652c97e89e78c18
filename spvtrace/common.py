"""
   Error classes and logging helpers shared by all spvtrace modules.
"""


logformat = '%(asctime)s | %(levelname)8s | %(name)10.10s | %(message)s'


class SpirvError(Exception):
    """ Base class of all errors raised while handling a SPIR-V module """
    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg

    def __repr__(self):
        return '"{}"'.format(self.msg)

    def __str__(self):
        return self.msg


class IrFormError(SpirvError):
    """ The module violates the structural rules of SPIR-V """
    pass


class InvariantError(SpirvError):
    """ An internal invariant does not hold, processing cannot continue """
    pass


class IdOverflow(SpirvError):
    """ No more result ids can be allocated in the module """
    pass
