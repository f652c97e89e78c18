""" A callgraph is a graph of functions which call eachother.

The call tree of a module consists of all functions reachable from its
entry points.
"""

import logging
from collections import deque
from ..common import IrFormError


logger = logging.getLogger('callgraph')


class CallGraph:
    """ Functions of a module with the functions they call.

    Callees are kept in order of their first call, so that walking the
    graph always gives the same order.
    """
    def __init__(self, module):
        self.module = module
        self.functions = {}
        self.callees = {}
        for function in module.functions:
            self.functions[function.id] = function
            callees = []
            for callee in function.get_callees():
                if callee not in callees:
                    callees.append(callee)
            self.callees[function.id] = callees

    def __len__(self):
        return len(self.functions)

    def get_function(self, function_id):
        if function_id not in self.functions:
            raise IrFormError(
                'No function with id %{} in module'.format(function_id))
        return self.functions[function_id]

    def successors(self, function_id):
        """ Get the ids of the functions called by the given function """
        return self.callees[function_id]

    def walk(self, roots):
        """ Visit the functions reachable from roots breadth first.

        Each function is yielded exactly once.
        """
        worklist = deque(roots)
        done = set()
        while worklist:
            function_id = worklist.popleft()
            if function_id in done:
                continue
            done.add(function_id)
            function = self.get_function(function_id)
            yield function
            worklist.extend(self.successors(function_id))


def entry_point_function_ids(module):
    """ Get the function ids of the entry points in declaration order """
    return [ep.operand_value(1) for ep in module.entry_points]


def process_call_tree(module, process_function, roots):
    """ Apply process_function to every function reachable from roots.

    Returns True when any invocation of process_function reported a
    modification.
    """
    call_graph = CallGraph(module)
    modified = False
    for function in call_graph.walk(roots):
        logger.debug('Processing %s', function)
        if process_function(function):
            modified = True
    return modified
