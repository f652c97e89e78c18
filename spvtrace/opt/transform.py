""" Base classes of passes that transform a module """

import logging
import abc
import enum
from .. import ir


class Status(enum.Enum):
    """ Outcome of running a pass """
    SUCCESS_WITHOUT_CHANGE = 0
    SUCCESS_WITH_CHANGE = 1


class ModulePass(metaclass=abc.ABCMeta):
    """ Base class of all passes.

    Subclass this class to implement your own pass.
    """
    name = None

    def __init__(self):
        self.logger = logging.getLogger(str(self.__class__.__name__))

    def __repr__(self):
        return self.__class__.__name__

    def prepare(self):
        pass

    @abc.abstractmethod
    def run(self, ir_module: ir.Module) -> Status:  # pragma: no cover
        """ Run this pass over a module """
        raise NotImplementedError()
