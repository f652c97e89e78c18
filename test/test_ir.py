import unittest
import io
from spvtrace import ir
from spvtrace import irutils
from spvtrace.common import IrFormError
from spvtrace.spirv import Op, OperandKind, StorageClass, Decoration
from spvtrace.spirv import make_version, version_tuple, SPV_VERSION_1_3
from util import fragment_shader, start_shader


class IrCodeTestCase(unittest.TestCase):
    def test_operand_str(self):
        self.assertEqual('%3', str(ir.id_operand(3)))
        self.assertEqual('"main"', str(ir.string('main')))
        self.assertEqual('42', str(ir.literal(42)))
        self.assertEqual(
            'StorageBuffer',
            str(ir.Operand(
                OperandKind.STORAGE_CLASS, StorageClass.StorageBuffer)))

    def test_instruction_str(self):
        instruction = ir.Instruction(
            Op.OpLoad, 3, 7, [ir.id_operand(5)])
        self.assertEqual('%7 = OpLoad %3 %5', str(instruction))
        store = ir.Instruction(
            Op.OpStore, operands=[ir.id_operand(5), ir.id_operand(7)])
        self.assertEqual('OpStore %5 %7', str(store))

    def test_unknown_opcode(self):
        """ Opcodes missing from the table stay numbers """
        for opcode in (133, 224, 50, 87):
            instruction = ir.Instruction(opcode)
            self.assertEqual(opcode, instruction.opcode)
            self.assertFalse(instruction.is_terminator)
            self.assertEqual('Op{}'.format(opcode), str(instruction))
        barrier = ir.Instruction(
            224, operands=[ir.id_operand(2), ir.id_operand(2)])
        self.assertEqual('Op224 %2 %2', str(barrier))

    def test_used_ids(self):
        instruction = ir.Instruction(
            Op.OpIAdd, 3, 9, [ir.id_operand(7), ir.id_operand(8)])
        self.assertEqual([3, 7, 8], list(instruction.used_ids()))
        decorate = ir.Instruction(Op.OpDecorate, operands=[
            ir.id_operand(4),
            ir.Operand(OperandKind.DECORATION, int(Decoration.Binding)),
            ir.literal(1)])
        self.assertEqual([4], list(decorate.used_ids()))

    def test_versions(self):
        self.assertEqual((1, 3), version_tuple(SPV_VERSION_1_3))
        self.assertEqual(0x00010300, make_version(1, 3))


class BlockTestCase(unittest.TestCase):
    def setUp(self):
        self.shader = fragment_shader()
        self.entry, self.second, self.third = self.shader.blocks

    def test_first_non_variable_position(self):
        self.assertEqual(2, self.entry.first_non_variable_position())
        self.assertEqual(0, self.second.first_non_variable_position())

    def test_insert_before(self):
        nops = [ir.Instruction(Op.OpNop), ir.Instruction(Op.OpNop)]
        self.entry.insert_before(2, nops)
        self.assertEqual(
            [Op.OpVariable, Op.OpVariable, Op.OpNop, Op.OpNop, Op.OpStore,
             Op.OpBranch],
            [i.opcode for i in self.entry])
        self.assertTrue(all(n.block is self.entry for n in nops))

    def test_properties(self):
        self.assertTrue(self.entry.is_entry)
        self.assertFalse(self.second.is_entry)
        self.assertTrue(self.third.is_closed)
        self.assertEqual(Op.OpReturn, self.third.last_instruction.opcode)

    def test_callees(self):
        function, = self.shader.functions
        self.assertEqual([], list(function.get_callees()))
        self.assertEqual(9, function.num_instructions())

    def test_stats(self):
        self.assertEqual(
            'functions: 1, blocks: 3, instructions: 9',
            self.shader.module.stats())


class IrBuilderTestCase(unittest.TestCase):
    def setUp(self):
        self.b = irutils.Builder()
        self.m = ir.Module()
        self.b.set_module(self.m)

    def test_ids_follow_bound(self):
        void = self.b.type_void()
        uint = self.b.type_int(32, False)
        self.assertEqual([1, 2], [void, uint])
        self.assertEqual(3, self.m.id_bound)

    def test_function(self):
        void = self.b.type_void()
        void_fn = self.b.type_function(void)
        f = self.b.new_function(void, void_fn)
        block = self.b.new_block()
        self.b.set_block(block)
        self.b.emit_return()
        self.assertIs(f, self.m.get_function(f.id))
        self.assertIs(block, f.entry)
        irutils.verify_module(self.m)

    def test_unknown_function(self):
        with self.assertRaises(KeyError):
            self.m.get_function(100)


class IrWriterTestCase(unittest.TestCase):
    def test_write(self):
        shader = fragment_shader()
        f = io.StringIO()
        irutils.print_module(shader.module, file=f)
        lines = f.getvalue().splitlines()
        self.assertEqual('; SPIR-V', lines[0])
        self.assertEqual('; Version: 1.0', lines[1])
        self.assertEqual(
            "; Bound: {}".format(shader.module.id_bound), lines[2])
        self.assertIn('OpCapability Shader', lines)
        self.assertIn('OpMemoryModel Logical GLSL450', lines)
        main, = shader.functions
        self.assertIn(
            'OpEntryPoint Fragment %{} "main"'.format(main.id), lines)
        self.assertIn('  OpReturn', lines)
        self.assertEqual('OpFunctionEnd', lines[-1])


class VerifierTestCase(unittest.TestCase):
    def setUp(self):
        self.shader = fragment_shader()
        self.module = self.shader.module

    def test_valid(self):
        irutils.verify_module(self.module)

    def test_empty_block(self):
        self.shader.builder.new_block()
        with self.assertRaises(IrFormError):
            irutils.verify_module(self.module)

    def test_missing_terminator(self):
        third = self.shader.blocks[2]
        third.remove_instruction(third.last_instruction)
        third.add_instruction(ir.Instruction(Op.OpNop))
        with self.assertRaises(IrFormError):
            irutils.verify_module(self.module)

    def test_misplaced_variable(self):
        second = self.shader.blocks[1]
        second.insert_before(1, [ir.Instruction(
            Op.OpVariable, self.shader.ptr_function_uint,
            self.shader.builder.new_id(),
            [ir.Operand(
                OperandKind.STORAGE_CLASS, int(StorageClass.Function))])])
        with self.assertRaises(IrFormError):
            irutils.verify_module(self.module)

    def test_undefined_id(self):
        second = self.shader.blocks[1]
        second.insert_before(0, [ir.Instruction(
            Op.OpLoad, self.shader.uint, self.shader.builder.new_id(),
            [ir.id_operand(self.module.id_bound + 10)])])
        with self.assertRaises(IrFormError):
            irutils.verify_module(self.module)

    def test_id_outside_bound(self):
        self.module.id_bound = 3
        with self.assertRaises(IrFormError):
            irutils.verify_module(self.module)

    def test_missing_entry_point_function(self):
        shader = start_shader()
        module = shader.module
        main = shader.builder.new_function(shader.void, shader.void_fn)
        shader.builder.set_block(shader.builder.new_block())
        shader.builder.emit_return()
        shader.builder.entry_point(0, main, 'main')
        module.functions.remove(main)
        with self.assertRaises(IrFormError):
            irutils.verify_module(module)


if __name__ == '__main__':
    unittest.main()
