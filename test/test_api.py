import unittest

from spvtrace.api import trace_basic_blocks
from spvtrace.common import IrFormError
from spvtrace.opt import Status
from spvtrace.spirv import Op
from util import fragment_shader, call_tree_shader, find_instructions


class ApiTestCase(unittest.TestCase):
    def test_trace_basic_blocks(self):
        shader = fragment_shader()
        counts = []
        maps = []
        status = trace_basic_blocks(
            shader.module,
            block_count_callback=counts.append,
            correspondence_callback=lambda m: maps.append(dict(m)))
        self.assertEqual(Status.SUCCESS_WITH_CHANGE, status)
        self.assertEqual([3], counts)
        self.assertEqual(
            {b.id: i for i, b in enumerate(shader.blocks)}, maps[0])
        self.assertEqual(
            3, len(find_instructions(shader.module, Op.OpAtomicIAdd)))

    def test_non_atomic(self):
        shader = fragment_shader()
        trace_basic_blocks(shader.module, atomic=False, wide_counters=True)
        self.assertEqual(
            [], find_instructions(shader.module, Op.OpAtomicIAdd))

    def test_logging(self):
        shader = fragment_shader()
        with self.assertLogs('api', 'INFO'):
            trace_basic_blocks(shader.module)

    def test_invalid_module_is_rejected(self):
        """ A broken module is not instrumented """
        shader = call_tree_shader([2], [[]], [0])
        first = shader.blocks[0][0]
        first.remove_instruction(first.last_instruction)
        with self.assertRaises(IrFormError):
            trace_basic_blocks(shader.module)
        self.assertEqual(
            [], find_instructions(shader.module, Op.OpAccessChain))

    def test_no_entry_points(self):
        shader = call_tree_shader([1], [[]], [], variables=[1])
        status = trace_basic_blocks(shader.module, verify=False)
        self.assertEqual(Status.SUCCESS_WITHOUT_CHANGE, status)


if __name__ == '__main__':
    unittest.main()
