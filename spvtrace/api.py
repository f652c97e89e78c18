""" This module contains a set of handy functions to invoke the passes of
spvtrace without constructing them by hand.
"""

import logging
from .irutils import verify_module
from .opt import BasicBlockTracePass


def trace_basic_blocks(
        module, wide_counters=False, atomic=True,
        block_count_callback=None, correspondence_callback=None,
        verify=True):
    """ Instrument every basic block of a module with a counter.

    This is an in-place operation!

    Args:
        module (spvtrace.ir.Module): The module to instrument.
        wide_counters: Use 64-bit counters instead of 32-bit counters.
        atomic: Increment the counters with atomic instructions.
        block_count_callback: Called with the number of blocks.
        correspondence_callback: Called with the mapping from block label
            id to counter index.
        verify: Verify the module before and after instrumentation.

    Returns:
        The status reported by the pass.
    """
    logger = logging.getLogger('api')
    logger.info('Tracing basic blocks of %s', module.stats())

    trace_pass = BasicBlockTracePass(
        wide_counters=wide_counters, atomic=atomic)
    if block_count_callback:
        trace_pass.register_block_count_callback(block_count_callback)
    if correspondence_callback:
        trace_pass.register_correspondence_callback(correspondence_callback)

    if verify:
        verify_module(module)
    status = trace_pass.run(module)
    if verify:
        verify_module(module)
    return status
