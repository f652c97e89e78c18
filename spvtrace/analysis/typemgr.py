""" Type manager.

Maps type ids to structural type descriptors and back. New types are only
declared when no structurally identical declaration exists yet.
"""

import logging
from .. import ir
from ..common import InvariantError
from ..spirv import Op, OperandKind, Decoration
from . import types


class TypeManager:
    """ Find or create type declarations of a module """
    logger = logging.getLogger('typemgr')

    def __init__(self, context):
        self.context = context
        self.id_to_type = {}
        self.type_to_id = {}
        for instruction in context.module.types_values:
            if instruction.opcode in self._builders:
                ty = self._analyze_type(instruction)
                self.register_type(instruction.result_id, ty)

    def register_type(self, type_id, ty):
        """ Record that type_id declares ty.

        When a module declares the same type twice, the first declaration
        is the one that is handed out.
        """
        self.id_to_type[type_id] = ty
        self.type_to_id.setdefault(ty, type_id)

    def get_type(self, type_id):
        """ Get the type descriptor of an id, or None """
        return self.id_to_type.get(type_id)

    def get_id(self, ty):
        """ Get the id of an existing declaration of ty, or 0 """
        return self.type_to_id.get(ty, 0)

    def _sub_type(self, type_id):
        return self.id_to_type.get(type_id)

    def _analyze_type(self, instruction):
        builder = self._builders[instruction.opcode]
        ty = builder(self, instruction)
        if ty is None:
            # Refers to an unknown type, so it can only be equal to itself:
            ty = types.Opaque(instruction.opcode, instruction.result_id)
        decorations, member_decorations = \
            self.context.decoration_mgr.type_decorations(
                instruction.result_id)
        ty.decorations = tuple(sorted(decorations))
        if isinstance(ty, types.Struct):
            ty.member_decorations = tuple(sorted(member_decorations))
        return ty

    def _build_void(self, instruction):
        return types.Void()

    def _build_bool(self, instruction):
        return types.Bool()

    def _build_int(self, instruction):
        return types.Integer(
            instruction.operand_value(0), bool(instruction.operand_value(1)))

    def _build_float(self, instruction):
        return types.Float(instruction.operand_value(0))

    def _build_vector(self, instruction):
        component = self._sub_type(instruction.operand_value(0))
        if component is not None:
            return types.Vector(component, instruction.operand_value(1))

    def _build_matrix(self, instruction):
        column = self._sub_type(instruction.operand_value(0))
        if column is not None:
            return types.Matrix(column, instruction.operand_value(1))

    def _build_array(self, instruction):
        element = self._sub_type(instruction.operand_value(0))
        if element is not None:
            return types.Array(element, instruction.operand_value(1))

    def _build_runtime_array(self, instruction):
        element = self._sub_type(instruction.operand_value(0))
        if element is not None:
            return types.RuntimeArray(element)

    def _build_struct(self, instruction):
        members = [self._sub_type(o.value) for o in instruction.operands]
        if all(m is not None for m in members):
            return types.Struct(members)

    def _build_pointer(self, instruction):
        pointee = self._sub_type(instruction.operand_value(1))
        if pointee is not None:
            return types.Pointer(pointee, instruction.operand_value(0))

    def _build_function(self, instruction):
        signature = [self._sub_type(o.value) for o in instruction.operands]
        if all(t is not None for t in signature):
            return types.FunctionType(signature[0], signature[1:])

    def _build_opaque(self, instruction):
        return types.Opaque(instruction.opcode, instruction.result_id)

    _builders = {
        Op.OpTypeVoid: _build_void,
        Op.OpTypeBool: _build_bool,
        Op.OpTypeInt: _build_int,
        Op.OpTypeFloat: _build_float,
        Op.OpTypeVector: _build_vector,
        Op.OpTypeMatrix: _build_matrix,
        Op.OpTypeArray: _build_array,
        Op.OpTypeRuntimeArray: _build_runtime_array,
        Op.OpTypeStruct: _build_struct,
        Op.OpTypePointer: _build_pointer,
        Op.OpTypeFunction: _build_function,
        Op.OpTypeImage: _build_opaque,
        Op.OpTypeSampler: _build_opaque,
        Op.OpTypeSampledImage: _build_opaque,
        Op.OpTypeOpaque: _build_opaque,
    }

    def get_type_instruction(self, ty):
        """ Get the id of the declaration of ty, declaring it if needed.

        Component types are declared first, and the decorations of the
        type are attached to a new declaration.
        """
        type_id = self.get_id(ty)
        if type_id:
            return type_id

        instruction = self._create_type_instruction(ty)
        type_id = instruction.result_id
        if not type_id:
            raise InvariantError('Could not create type {}'.format(ty))
        self.context.add_type_or_global(instruction)

        decoration_mgr = self.context.decoration_mgr
        for decoration in ty.decorations:
            decoration_mgr.add_decoration(type_id, *decoration)
        if isinstance(ty, types.Struct):
            for decoration in ty.member_decorations:
                decoration_mgr.add_member_decoration(type_id, *decoration)

        self.register_type(type_id, ty)
        self.logger.debug('Declared type %s as %%%d', ty, type_id)
        return type_id

    def _create_type_instruction(self, ty):
        if isinstance(ty, types.Void):
            opcode, operands = Op.OpTypeVoid, []
        elif isinstance(ty, types.Bool):
            opcode, operands = Op.OpTypeBool, []
        elif isinstance(ty, types.Integer):
            opcode = Op.OpTypeInt
            operands = [ir.literal(ty.width), ir.literal(int(ty.signed))]
        elif isinstance(ty, types.Float):
            opcode, operands = Op.OpTypeFloat, [ir.literal(ty.width)]
        elif isinstance(ty, types.Vector):
            opcode = Op.OpTypeVector
            operands = [
                ir.id_operand(self.get_type_instruction(ty.component)),
                ir.literal(ty.count)]
        elif isinstance(ty, types.Matrix):
            opcode = Op.OpTypeMatrix
            operands = [
                ir.id_operand(self.get_type_instruction(ty.column)),
                ir.literal(ty.count)]
        elif isinstance(ty, types.Array):
            opcode = Op.OpTypeArray
            operands = [
                ir.id_operand(self.get_type_instruction(ty.element)),
                ir.id_operand(ty.length_id)]
        elif isinstance(ty, types.RuntimeArray):
            opcode = Op.OpTypeRuntimeArray
            operands = [
                ir.id_operand(self.get_type_instruction(ty.element))]
        elif isinstance(ty, types.Struct):
            opcode = Op.OpTypeStruct
            operands = [
                ir.id_operand(self.get_type_instruction(m))
                for m in ty.members]
        elif isinstance(ty, types.Pointer):
            opcode = Op.OpTypePointer
            operands = [
                ir.Operand(OperandKind.STORAGE_CLASS, int(ty.storage_class)),
                ir.id_operand(self.get_type_instruction(ty.pointee))]
        elif isinstance(ty, types.FunctionType):
            opcode = Op.OpTypeFunction
            operands = [ir.id_operand(self.get_type_instruction(ty.return_type))]
            operands.extend(
                ir.id_operand(self.get_type_instruction(p))
                for p in ty.params)
        else:
            raise InvariantError('Cannot declare type {}'.format(ty))
        # Take the id after the component types got theirs:
        type_id = self.context.take_next_id()
        return ir.Instruction(opcode, result_id=type_id, operands=operands)

    # Convenience helpers:
    def get_uint_type_id(self, width=32):
        """ Get the id of the unsigned integer type of the given width """
        return self.get_type_instruction(types.Integer(width, False))

    def get_pointer_type_id(self, pointee_id, storage_class):
        """ Get the id of a pointer to the type pointee_id """
        pointee = self.get_type(pointee_id)
        if pointee is None:
            raise InvariantError(
                'Id %{} does not declare a type'.format(pointee_id))
        pointer_id = self.get_type_instruction(
            types.Pointer(pointee, storage_class))
        if not pointer_id:
            raise InvariantError('Could not create desired pointer type')
        return pointer_id

    find_pointer_to_type = get_pointer_type_id

    def get_runtime_array_type_id(self, element_id, stride):
        """ Get the id of a runtime array with the given array stride """
        element = self.get_type(element_id)
        if element is None:
            raise InvariantError(
                'Id %{} does not declare a type'.format(element_id))
        ty = types.RuntimeArray(element).with_decoration(
            Decoration.ArrayStride, stride)
        return self.get_type_instruction(ty)

    def get_struct_type_id(self, member_ids, decorations=(),
                           member_decorations=()):
        """ Get the id of a structure with the given members """
        members = [self.get_type(m) for m in member_ids]
        if any(m is None for m in members):
            raise InvariantError(
                'Not all members are types: {}'.format(member_ids))
        ty = types.Struct(members, decorations, member_decorations)
        return self.get_type_instruction(ty)
