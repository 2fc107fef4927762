"""
Enumerations from MS-NRBF and ObjectStateFormatter.

Numeric values are fixed by the external formats and must not change.
"""

from enum import IntEnum


class RecordTypeEnum(IntEnum):
    """Leading tag byte of every record (MS-NRBF 2.1.2.1)."""
    SerializedStreamHeader = 0
    ClassWithId = 1
    SystemClassWithMembers = 2
    ClassWithMembers = 3
    SystemClassWithMembersAndTypes = 4
    ClassWithMembersAndTypes = 5
    BinaryObjectString = 6
    BinaryArray = 7
    MemberPrimitiveTyped = 8
    MemberReference = 9
    ObjectNull = 10
    MessageEnd = 11
    BinaryLibrary = 12
    ObjectNullMultiple256 = 13
    ObjectNullMultiple = 14
    ArraySinglePrimitive = 15
    ArraySingleObject = 16
    ArraySingleString = 17
    MethodCall = 21
    MethodReturn = 22


class BinaryTypeEnum(IntEnum):
    """Member type tags used by MemberTypeInfo (MS-NRBF 2.1.2.2)."""
    Primitive = 0
    String = 1
    Object = 2
    SystemClass = 3
    Class = 4
    ObjectArray = 5
    StringArray = 6
    PrimitiveArray = 7


class PrimitiveTypeEnum(IntEnum):
    """Primitive value types (MS-NRBF 2.1.2.3). 4 is unused by the format."""
    Boolean = 1
    Byte = 2
    Char = 3
    Decimal = 5
    Double = 6
    Int16 = 7
    Int32 = 8
    Int64 = 9
    SByte = 10
    Single = 11
    TimeSpan = 12
    DateTime = 13
    UInt16 = 14
    UInt32 = 15
    UInt64 = 16
    Null = 17
    String = 18


class ObjectStateToken(IntEnum):
    """Type tokens written by System.Web.UI.ObjectStateFormatter."""
    Int16 = 1
    Int32 = 2
    Byte = 3
    Char = 4
    String = 5
    DateTime = 6
    Double = 7
    Single = 8
    Color = 9
    KnownColor = 10
    IntEnum = 11
    EmptyColor = 12
    Pair = 15
    Triplet = 16
    Array = 20
    StringArray = 21
    ArrayList = 22
    Hashtable = 23
    HybridDictionary = 24
    Type = 25
    Unit = 27
    EmptyUnit = 28
    EventValidationStore = 29
    IndexedStringAdd = 30
    IndexedString = 31
    StringFormatted = 40
    TypeRefAdd = 41
    TypeRefAddLocal = 42
    TypeRef = 43
    SparseArray = 60
    BinarySerialized = 50
    Null = 100
    EmptyString = 101
    ZeroInt32 = 102
    True_ = 103
    False_ = 104


# BinaryTypeEnum values whose MemberTypeInfo entry carries additional info
TYPES_WITH_ADDITIONAL_INFO = frozenset({
    BinaryTypeEnum.Primitive,
    BinaryTypeEnum.SystemClass,
    BinaryTypeEnum.Class,
    BinaryTypeEnum.PrimitiveArray,
})
