"""
MS-NRBF Record Model

Write-only model of the .NET remoting binary format:

- types: field structures (ClassInfo, ClassTypeInfo, MemberTypeInfo) and primitive encoding
- records: record variants and their tag-dispatched encoders
- stream: SerializedStream, assemble() and reference validation

Usage:
    from dotnet_deserialization.records import (
        SerializedStream, SerializationHeaderRecord, BinaryObjectString, MessageEnd,
    )

    stream = SerializedStream.from_values([
        SerializationHeaderRecord(root_id=1),
        BinaryObjectString(obj_id=1, string="hello"),
        MessageEnd(),
    ])
    blob = stream.to_bytes(strict=True)
"""

from .types import (
    ClassInfo,
    ClassTypeInfo,
    MemberTypeInfo,
    encode_primitive,
)

from .records import (
    Record,
    SerializationHeaderRecord,
    BinaryLibrary,
    ClassWithMembersAndTypes,
    SystemClassWithMembersAndTypes,
    ClassWithId,
    BinaryObjectString,
    MemberPrimitiveTyped,
    MemberReference,
    ObjectNull,
    ObjectNullMultiple256,
    MessageEnd,
    ArraySinglePrimitive,
    ArraySingleString,
    encode_record,
    write_record,
)

from .stream import (
    SerializedStream,
    assemble,
    validate_references,
    build_parent_index,
    child_records,
)

__all__ = [
    # Field structures
    'ClassInfo',
    'ClassTypeInfo',
    'MemberTypeInfo',
    'encode_primitive',
    # Records
    'Record',
    'SerializationHeaderRecord',
    'BinaryLibrary',
    'ClassWithMembersAndTypes',
    'SystemClassWithMembersAndTypes',
    'ClassWithId',
    'BinaryObjectString',
    'MemberPrimitiveTyped',
    'MemberReference',
    'ObjectNull',
    'ObjectNullMultiple256',
    'MessageEnd',
    'ArraySinglePrimitive',
    'ArraySingleString',
    'encode_record',
    'write_record',
    # Stream
    'SerializedStream',
    'assemble',
    'validate_references',
    'build_parent_index',
    'child_records',
]
