""" Structural descriptions of SPIR-V types.

Each type class describes a type by its content instead of by its id. Two
descriptors compare equal when they describe the same type, including the
decorations attached to them. This allows types to be used as dictionary
keys when looking for an existing declaration.

.. doctest::

    >>> from spvtrace.analysis.types import Integer, RuntimeArray
    >>> from spvtrace.spirv import Decoration
    >>> a = RuntimeArray(Integer(32, False)).with_decoration(
    ...     Decoration.ArrayStride, 4)
    >>> b = RuntimeArray(Integer(32, False)).with_decoration(
    ...     Decoration.ArrayStride, 4)
    >>> a == b
    True

"""

import copy
from ..spirv import Decoration, StorageClass


def _decoration_name(decoration):
    try:
        return Decoration(decoration[0]).name
    except ValueError:
        return str(decoration[0])


class Type:
    """ Base class of all type descriptors """
    def __init__(self, decorations=()):
        self.decorations = tuple(sorted(tuple(d) for d in decorations))

    def _content(self):  # pragma: no cover
        raise NotImplementedError()

    def _key(self):
        return (self.__class__.__name__,) + self._content() + \
            (self.decorations,)

    def __eq__(self, other):
        if isinstance(other, Type):
            return self._key() == other._key()
        return NotImplemented

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return 'ty {}'.format(self)

    def _decorations_str(self):
        if not self.decorations:
            return ''
        parts = []
        for decoration in self.decorations:
            values = ' '.join(map(str, decoration[1:]))
            parts.append(
                '{} {}'.format(_decoration_name(decoration), values).strip())
        return ' [{}]'.format(', '.join(parts))

    def with_decoration(self, decoration, *values):
        """ Return a copy of this type with an additional decoration """
        ty = copy.copy(self)
        decorations = set(self.decorations)
        decorations.add((int(decoration),) + tuple(values))
        ty.decorations = tuple(sorted(decorations))
        return ty

    def has_decoration(self, decoration):
        return any(d[0] == decoration for d in self.decorations)


class Void(Type):
    def _content(self):
        return ()

    def __str__(self):
        return 'void'


class Bool(Type):
    def _content(self):
        return ()

    def __str__(self):
        return 'bool'


class Integer(Type):
    """ Integer scalar type with a bit width and signedness """
    def __init__(self, width, signed, decorations=()):
        super().__init__(decorations)
        self.width = width
        self.signed = signed

    def _content(self):
        return (self.width, bool(self.signed))

    @property
    def byte_size(self):
        return self.width // 8

    def __str__(self):
        prefix = 'int' if self.signed else 'uint'
        return '{}{}{}'.format(prefix, self.width, self._decorations_str())


class Float(Type):
    def __init__(self, width, decorations=()):
        super().__init__(decorations)
        self.width = width

    def _content(self):
        return (self.width,)

    def __str__(self):
        return 'float{}'.format(self.width)


class Vector(Type):
    def __init__(self, component, count, decorations=()):
        super().__init__(decorations)
        self.component = component
        self.count = count

    def _content(self):
        return (self.component, self.count)

    def __str__(self):
        return '<{}, {}>'.format(self.component, self.count)


class Matrix(Type):
    def __init__(self, column, count, decorations=()):
        super().__init__(decorations)
        self.column = column
        self.count = count

    def _content(self):
        return (self.column, self.count)

    def __str__(self):
        return '<{}, {}>'.format(self.column, self.count)


class Array(Type):
    """ Array with a length given by the id of a constant """
    def __init__(self, element, length_id, decorations=()):
        super().__init__(decorations)
        self.element = element
        self.length_id = length_id

    def _content(self):
        return (self.element, self.length_id)

    def __str__(self):
        return '[{}, id({})]{}'.format(
            self.element, self.length_id, self._decorations_str())


class RuntimeArray(Type):
    """ Array of unknown size, only valid as last member of a buffer """
    def __init__(self, element, decorations=()):
        super().__init__(decorations)
        self.element = element

    def _content(self):
        return (self.element,)

    def __str__(self):
        return '[{}]{}'.format(self.element, self._decorations_str())


class Struct(Type):
    """ Structure type with member types and per member decorations """
    def __init__(self, members, decorations=(), member_decorations=()):
        super().__init__(decorations)
        self.members = tuple(members)
        self.member_decorations = tuple(
            sorted(tuple(d) for d in member_decorations))

    def _content(self):
        return (self.members, self.member_decorations)

    def with_member_decoration(self, member, decoration, *values):
        """ Return a copy with an additional decoration on a member """
        ty = copy.copy(self)
        decorations = set(self.member_decorations)
        decorations.add((member, int(decoration)) + tuple(values))
        ty.member_decorations = tuple(sorted(decorations))
        return ty

    def __str__(self):
        members = ', '.join(map(str, self.members))
        return '{{{}}}{}'.format(members, self._decorations_str())


class Pointer(Type):
    """ Pointer to a type in a certain storage class """
    def __init__(self, pointee, storage_class, decorations=()):
        super().__init__(decorations)
        self.pointee = pointee
        self.storage_class = storage_class

    def _content(self):
        return (self.pointee, int(self.storage_class))

    def __str__(self):
        try:
            storage = StorageClass(self.storage_class).name
        except ValueError:
            storage = str(self.storage_class)
        return '{} {}*'.format(self.pointee, storage)


class FunctionType(Type):
    def __init__(self, return_type, params, decorations=()):
        super().__init__(decorations)
        self.return_type = return_type
        self.params = tuple(params)

    def _content(self):
        return (self.return_type, self.params)

    def __str__(self):
        return '{} ({})'.format(
            self.return_type, ', '.join(map(str, self.params)))


class Opaque(Type):
    """ A type that is not modeled structurally.

    Such types are only equal to themselves, so they are keyed on the id
    of their declaration.
    """
    def __init__(self, opcode, result_id, decorations=()):
        super().__init__(decorations)
        self.opcode = opcode
        self.result_id = result_id

    def _content(self):
        return (int(self.opcode), self.result_id)

    def __str__(self):
        return 'opaque(%{})'.format(self.result_id)
