""" Tables with SPIR-V opcodes and enumerants.

Only the part of the SPIR-V grammar that is needed to model shader modules
and to instrument them is listed here. The numeric values are those of the
SPIR-V unified headers.
"""

import enum


#: The largest id a module may use, as required by the Vulkan environment.
MAX_ID_BOUND = 0x3FFFFF


def make_version(major, minor):
    """ Create a SPIR-V version word from major and minor numbers """
    return (major << 16) | (minor << 8)


def version_tuple(word):
    """ Split a version word into a (major, minor) tuple """
    return ((word >> 16) & 0xFF, (word >> 8) & 0xFF)


SPV_VERSION_1_0 = make_version(1, 0)
SPV_VERSION_1_1 = make_version(1, 1)
SPV_VERSION_1_2 = make_version(1, 2)
SPV_VERSION_1_3 = make_version(1, 3)
SPV_VERSION_1_4 = make_version(1, 4)
SPV_VERSION_1_5 = make_version(1, 5)
SPV_VERSION_1_6 = make_version(1, 6)


class Op(enum.IntEnum):
    OpNop = 0
    OpUndef = 1
    OpSourceContinued = 2
    OpSource = 3
    OpSourceExtension = 4
    OpName = 5
    OpMemberName = 6
    OpString = 7
    OpLine = 8
    OpExtension = 10
    OpExtInstImport = 11
    OpExtInst = 12
    OpMemoryModel = 14
    OpEntryPoint = 15
    OpExecutionMode = 16
    OpCapability = 17
    OpTypeVoid = 19
    OpTypeBool = 20
    OpTypeInt = 21
    OpTypeFloat = 22
    OpTypeVector = 23
    OpTypeMatrix = 24
    OpTypeImage = 25
    OpTypeSampler = 26
    OpTypeSampledImage = 27
    OpTypeArray = 28
    OpTypeRuntimeArray = 29
    OpTypeStruct = 30
    OpTypeOpaque = 31
    OpTypePointer = 32
    OpTypeFunction = 33
    OpConstantTrue = 41
    OpConstantFalse = 42
    OpConstant = 43
    OpConstantComposite = 44
    OpConstantNull = 46
    OpFunction = 54
    OpFunctionParameter = 55
    OpFunctionEnd = 56
    OpFunctionCall = 57
    OpVariable = 59
    OpLoad = 61
    OpStore = 62
    OpAccessChain = 65
    OpDecorate = 71
    OpMemberDecorate = 72
    OpCompositeConstruct = 80
    OpCompositeExtract = 81
    OpCopyObject = 83
    OpIAdd = 128
    OpFAdd = 129
    OpISub = 130
    OpIMul = 132
    OpSelect = 169
    OpIEqual = 170
    OpULessThan = 176
    OpSLessThan = 177
    OpAtomicIAdd = 234
    OpPhi = 245
    OpLoopMerge = 246
    OpSelectionMerge = 247
    OpLabel = 248
    OpBranch = 249
    OpBranchConditional = 250
    OpSwitch = 251
    OpKill = 252
    OpReturn = 253
    OpReturnValue = 254
    OpUnreachable = 255
    OpNoLine = 317
    OpModuleProcessed = 330


class StorageClass(enum.IntEnum):
    UniformConstant = 0
    Input = 1
    Uniform = 2
    Output = 3
    Workgroup = 4
    CrossWorkgroup = 5
    Private = 6
    Function = 7
    Generic = 8
    PushConstant = 9
    AtomicCounter = 10
    Image = 11
    StorageBuffer = 12


class Decoration(enum.IntEnum):
    RelaxedPrecision = 0
    SpecId = 1
    Block = 2
    BufferBlock = 3
    RowMajor = 4
    ColMajor = 5
    ArrayStride = 6
    MatrixStride = 7
    BuiltIn = 11
    NonWritable = 24
    NonReadable = 25
    Location = 30
    Binding = 33
    DescriptorSet = 34
    Offset = 35


class Capability(enum.IntEnum):
    Matrix = 0
    Shader = 1
    Geometry = 2
    Tessellation = 3
    Addresses = 4
    Linkage = 5
    Kernel = 6
    Float16 = 9
    Float64 = 10
    Int64 = 11
    Int64Atomics = 12
    Int16 = 22
    Int8 = 39


class ExecutionModel(enum.IntEnum):
    Vertex = 0
    TessellationControl = 1
    TessellationEvaluation = 2
    Geometry = 3
    Fragment = 4
    GLCompute = 5
    Kernel = 6


class ExecutionMode(enum.IntEnum):
    OriginUpperLeft = 7
    OriginLowerLeft = 8
    LocalSize = 17


class AddressingModel(enum.IntEnum):
    Logical = 0
    Physical32 = 1
    Physical64 = 2


class MemoryModel(enum.IntEnum):
    Simple = 0
    GLSL450 = 1
    OpenCL = 2
    Vulkan = 3


class FunctionControl(enum.IntEnum):
    NONE = 0
    Inline = 1
    DontInline = 2
    Pure = 4
    Const = 8


class SelectionControl(enum.IntEnum):
    NONE = 0
    Flatten = 1
    DontFlatten = 2


class LoopControl(enum.IntEnum):
    NONE = 0
    Unroll = 1
    DontUnroll = 2


class Scope(enum.IntEnum):
    CrossDevice = 0
    Device = 1
    Workgroup = 2
    Subgroup = 3
    Invocation = 4


class MemorySemantics(enum.IntEnum):
    Relaxed = 0
    Acquire = 0x2
    Release = 0x4
    AcquireRelease = 0x8
    UniformMemory = 0x40


class OperandKind(enum.Enum):
    ID = 1
    SCOPE_ID = 2
    MEMORY_SEMANTICS_ID = 3
    LITERAL_INTEGER = 10
    LITERAL_NUMBER = 11
    LITERAL_STRING = 12
    STORAGE_CLASS = 20
    DECORATION = 21
    CAPABILITY = 22
    EXECUTION_MODEL = 23
    EXECUTION_MODE = 24
    ADDRESSING_MODEL = 25
    MEMORY_MODEL = 26
    FUNCTION_CONTROL = 27
    SELECTION_CONTROL = 28
    LOOP_CONTROL = 29


ID_KINDS = frozenset(
    [OperandKind.ID, OperandKind.SCOPE_ID, OperandKind.MEMORY_SEMANTICS_ID])

#: Operand kinds that hold an enumerant, mapped to the enum class.
ENUM_KINDS = {
    OperandKind.STORAGE_CLASS: StorageClass,
    OperandKind.DECORATION: Decoration,
    OperandKind.CAPABILITY: Capability,
    OperandKind.EXECUTION_MODEL: ExecutionModel,
    OperandKind.EXECUTION_MODE: ExecutionMode,
    OperandKind.ADDRESSING_MODEL: AddressingModel,
    OperandKind.MEMORY_MODEL: MemoryModel,
    OperandKind.FUNCTION_CONTROL: FunctionControl,
    OperandKind.SELECTION_CONTROL: SelectionControl,
    OperandKind.LOOP_CONTROL: LoopControl,
}


def is_id_kind(kind):
    """ Test if an operand of the given kind references a result id """
    return kind in ID_KINDS


#: Instructions that end a basic block.
TERMINATORS = frozenset([
    Op.OpBranch, Op.OpBranchConditional, Op.OpSwitch, Op.OpKill,
    Op.OpReturn, Op.OpReturnValue, Op.OpUnreachable,
])

#: Extensions that became part of the core specification, and the version
#: in which that happened.
PROMOTED_EXTENSIONS = {
    'SPV_KHR_storage_buffer_storage_class': SPV_VERSION_1_3,
    'SPV_KHR_variable_pointers': SPV_VERSION_1_3,
    'SPV_KHR_16bit_storage': SPV_VERSION_1_3,
}
