"""
MS-NRBF record variants.

Each record is an immutable dataclass carrying a RECORD_TYPE tag. Encoding is
dispatched by that tag to one encoder function per variant:

    [u8 record type][variant fields...]

Fixed-width integers are little-endian int32. Strings are
LengthPrefixedStrings. Nested member values are encoded recursively, with
their own tag byte.
"""

import io
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, Tuple

import numpy as np

from ..constants import HEADER_ID_NONE, STREAM_MAJOR_VERSION, STREAM_MINOR_VERSION
from ..enums import BinaryTypeEnum, PrimitiveTypeEnum, RecordTypeEnum
from ..errors import MalformedRecordConstruction
from ..utils import (
    check_int32,
    check_string,
    check_uint8,
    write_int32,
    write_uint8,
    write_length_prefixed_string,
)
from .types import ClassInfo, MemberTypeInfo, encode_primitive, to_primitive_type


# numpy dtypes for packing ArraySinglePrimitive bodies
ARRAY_DTYPES = {
    PrimitiveTypeEnum.Boolean: np.dtype('?'),
    PrimitiveTypeEnum.Byte: np.dtype('u1'),
    PrimitiveTypeEnum.SByte: np.dtype('i1'),
    PrimitiveTypeEnum.Int16: np.dtype('<i2'),
    PrimitiveTypeEnum.Int32: np.dtype('<i4'),
    PrimitiveTypeEnum.Int64: np.dtype('<i8'),
    PrimitiveTypeEnum.UInt16: np.dtype('<u2'),
    PrimitiveTypeEnum.UInt32: np.dtype('<u4'),
    PrimitiveTypeEnum.UInt64: np.dtype('<u8'),
    PrimitiveTypeEnum.Single: np.dtype('<f4'),
    PrimitiveTypeEnum.Double: np.dtype('<f8'),
    PrimitiveTypeEnum.TimeSpan: np.dtype('<i8'),
    PrimitiveTypeEnum.DateTime: np.dtype('<i8'),
}


class Record:
    """Base class for all record variants."""
    RECORD_TYPE: ClassVar[RecordTypeEnum]

    def to_bytes(self) -> bytes:
        return encode_record(self)


# ----------------------------------------------------------------------------
# Record variants
# ----------------------------------------------------------------------------

@dataclass(frozen=True)
class SerializationHeaderRecord(Record):
    """First record of every stream. header_id -1 means no extra headers."""
    RECORD_TYPE: ClassVar[RecordTypeEnum] = RecordTypeEnum.SerializedStreamHeader

    root_id: int = None
    header_id: int = HEADER_ID_NONE
    major_version: int = STREAM_MAJOR_VERSION
    minor_version: int = STREAM_MINOR_VERSION

    def __post_init__(self):
        check_int32('root_id', self.root_id)
        check_int32('header_id', self.header_id)
        check_int32('major_version', self.major_version)
        check_int32('minor_version', self.minor_version)


@dataclass(frozen=True)
class BinaryLibrary(Record):
    """Binds a library id to an assembly name for later class records."""
    RECORD_TYPE: ClassVar[RecordTypeEnum] = RecordTypeEnum.BinaryLibrary

    library_id: int = None
    library_name: str = None

    def __post_init__(self):
        check_int32('library_id', self.library_id)
        check_string('library_name', self.library_name)


@dataclass(frozen=True)
class ClassWithMembersAndTypes(Record):
    """
    Class record with full metadata, defined in a user library.

    member_values must line up with class_info.member_names and
    member_type_info.binary_type_enums: Primitive members take plain Python
    values, all other members take records.
    """
    RECORD_TYPE: ClassVar[RecordTypeEnum] = RecordTypeEnum.ClassWithMembersAndTypes

    class_info: ClassInfo = None
    member_type_info: MemberTypeInfo = None
    library_id: int = None
    member_values: Tuple[Any, ...] = None

    def __post_init__(self):
        check_int32('library_id', self.library_id)
        values = _check_members(self.class_info, self.member_type_info, self.member_values)
        object.__setattr__(self, 'member_values', values)

    @property
    def obj_id(self) -> int:
        return self.class_info.obj_id

    @classmethod
    def from_member_values(cls, class_info: ClassInfo, member_type_info: MemberTypeInfo,
                           library_id: int, member_values) -> 'ClassWithMembersAndTypes':
        return cls(class_info=class_info, member_type_info=member_type_info,
                   library_id=library_id, member_values=tuple(member_values))


@dataclass(frozen=True)
class SystemClassWithMembersAndTypes(Record):
    """Class record with full metadata for a type in mscorlib (no library id)."""
    RECORD_TYPE: ClassVar[RecordTypeEnum] = RecordTypeEnum.SystemClassWithMembersAndTypes

    class_info: ClassInfo = None
    member_type_info: MemberTypeInfo = None
    member_values: Tuple[Any, ...] = None

    def __post_init__(self):
        values = _check_members(self.class_info, self.member_type_info, self.member_values)
        object.__setattr__(self, 'member_values', values)

    @property
    def obj_id(self) -> int:
        return self.class_info.obj_id


@dataclass(frozen=True)
class ClassWithId(Record):
    """
    Class record that reuses the metadata of an earlier class record.

    The metadata lives in another record, so member values are limited to
    records; primitive members cannot be typed here.
    """
    RECORD_TYPE: ClassVar[RecordTypeEnum] = RecordTypeEnum.ClassWithId

    obj_id: int = None
    metadata_id: int = None
    member_values: Tuple[Record, ...] = None

    def __post_init__(self):
        check_int32('obj_id', self.obj_id)
        check_int32('metadata_id', self.metadata_id)
        values = _as_record_tuple('member_values', self.member_values)
        object.__setattr__(self, 'member_values', values)


@dataclass(frozen=True)
class BinaryObjectString(Record):
    """A string object with its own object id."""
    RECORD_TYPE: ClassVar[RecordTypeEnum] = RecordTypeEnum.BinaryObjectString

    obj_id: int = None
    string: str = None

    def __post_init__(self):
        check_int32('obj_id', self.obj_id)
        check_string('string', self.string)


@dataclass(frozen=True)
class MemberPrimitiveTyped(Record):
    """A primitive value tagged with its own PrimitiveTypeEnum."""
    RECORD_TYPE: ClassVar[RecordTypeEnum] = RecordTypeEnum.MemberPrimitiveTyped

    primitive_type: PrimitiveTypeEnum = None
    value: Any = None

    def __post_init__(self):
        if self.primitive_type is None:
            raise MalformedRecordConstruction("Missing required field 'primitive_type'")
        primitive_type = to_primitive_type(self.primitive_type)
        if primitive_type in (PrimitiveTypeEnum.Null, PrimitiveTypeEnum.String):
            raise MalformedRecordConstruction(f"MemberPrimitiveTyped cannot hold {primitive_type.name}")
        encode_primitive(primitive_type, self.value)
        object.__setattr__(self, 'primitive_type', primitive_type)


@dataclass(frozen=True)
class MemberReference(Record):
    """Reference to an object defined elsewhere in the stream."""
    RECORD_TYPE: ClassVar[RecordTypeEnum] = RecordTypeEnum.MemberReference

    id_ref: int = None

    def __post_init__(self):
        check_int32('id_ref', self.id_ref)


@dataclass(frozen=True)
class ObjectNull(Record):
    RECORD_TYPE: ClassVar[RecordTypeEnum] = RecordTypeEnum.ObjectNull


@dataclass(frozen=True)
class ObjectNullMultiple256(Record):
    """Run of 1-255 null entries inside an array."""
    RECORD_TYPE: ClassVar[RecordTypeEnum] = RecordTypeEnum.ObjectNullMultiple256

    null_count: int = None

    def __post_init__(self):
        check_uint8('null_count', self.null_count, minimum=1)


@dataclass(frozen=True)
class MessageEnd(Record):
    """Terminates the object graph."""
    RECORD_TYPE: ClassVar[RecordTypeEnum] = RecordTypeEnum.MessageEnd


@dataclass(frozen=True)
class ArraySinglePrimitive(Record):
    """Single-dimension array of primitives with a zero lower bound."""
    RECORD_TYPE: ClassVar[RecordTypeEnum] = RecordTypeEnum.ArraySinglePrimitive

    obj_id: int = None
    primitive_type: PrimitiveTypeEnum = None
    values: Tuple[Any, ...] = None

    def __post_init__(self):
        check_int32('obj_id', self.obj_id)
        if self.primitive_type is None:
            raise MalformedRecordConstruction("Missing required field 'primitive_type'")
        primitive_type = to_primitive_type(self.primitive_type)
        if primitive_type in (PrimitiveTypeEnum.Null, PrimitiveTypeEnum.String):
            raise MalformedRecordConstruction(f"ArraySinglePrimitive cannot hold {primitive_type.name}")
        if self.values is None:
            raise MalformedRecordConstruction("Missing required field 'values'")
        values = tuple(self.values)
        # Encode once up front so bad values fail at construction
        _pack_primitive_array(primitive_type, values)
        object.__setattr__(self, 'primitive_type', primitive_type)
        object.__setattr__(self, 'values', values)


@dataclass(frozen=True)
class ArraySingleString(Record):
    """
    Single-dimension string array. Values are BinaryObjectString,
    MemberReference, ObjectNull or ObjectNullMultiple256 records.
    """
    RECORD_TYPE: ClassVar[RecordTypeEnum] = RecordTypeEnum.ArraySingleString

    obj_id: int = None
    values: Tuple[Record, ...] = None

    def __post_init__(self):
        check_int32('obj_id', self.obj_id)
        values = _as_record_tuple('values', self.values)
        for i, value in enumerate(values):
            if not isinstance(value, STRING_ARRAY_ELEMENTS):
                raise MalformedRecordConstruction(
                    f"values[{i}]: {type(value).__name__} is not allowed in a string array"
                )
        object.__setattr__(self, 'values', values)

    @property
    def length(self) -> int:
        """Element count, with null runs expanded."""
        return sum(v.null_count if isinstance(v, ObjectNullMultiple256) else 1 for v in self.values)


STRING_ARRAY_ELEMENTS = (BinaryObjectString, MemberReference, ObjectNull, ObjectNullMultiple256)

# Records that only make sense at the top level of a stream
TOP_LEVEL_ONLY = (SerializationHeaderRecord, MessageEnd)

CLASS_RECORDS = (ClassWithMembersAndTypes, SystemClassWithMembersAndTypes, ClassWithId)


# ----------------------------------------------------------------------------
# Construction helpers
# ----------------------------------------------------------------------------

def _as_record_tuple(name: str, values) -> Tuple[Record, ...]:
    if values is None:
        raise MalformedRecordConstruction(f"Missing required field '{name}'")
    values = tuple(values)
    for i, value in enumerate(values):
        if not isinstance(value, Record):
            raise MalformedRecordConstruction(f"{name}[{i}] must be a record, got {type(value).__name__}")
        if isinstance(value, TOP_LEVEL_ONLY):
            raise MalformedRecordConstruction(f"{name}[{i}]: {type(value).__name__} cannot be nested")
    return values


def _check_members(class_info: ClassInfo, member_type_info: MemberTypeInfo, member_values) -> Tuple[Any, ...]:
    """
    Validate that names, types and values line up one-to-one.

    Returns:
        member_values as a tuple
    """
    if class_info is None:
        raise MalformedRecordConstruction("Missing required field 'class_info'")
    if member_type_info is None:
        raise MalformedRecordConstruction("Missing required field 'member_type_info'")
    if member_values is None:
        raise MalformedRecordConstruction("Missing required field 'member_values'")
    if not isinstance(class_info, ClassInfo):
        raise MalformedRecordConstruction(f"class_info must be a ClassInfo, got {type(class_info).__name__}")
    if not isinstance(member_type_info, MemberTypeInfo):
        raise MalformedRecordConstruction(
            f"member_type_info must be a MemberTypeInfo, got {type(member_type_info).__name__}"
        )

    values = tuple(member_values)
    name_count = class_info.member_count
    if len(member_type_info) != name_count:
        raise MalformedRecordConstruction(
            f"{class_info.name}: {name_count} member names but {len(member_type_info)} member types"
        )
    if len(values) != name_count:
        raise MalformedRecordConstruction(
            f"{class_info.name}: {name_count} member names but {len(values)} member values"
        )

    for member_name, binary_type, info, value in zip(class_info.member_names,
                                                     member_type_info.binary_type_enums,
                                                     member_type_info.additional_infos,
                                                     values):
        if binary_type == BinaryTypeEnum.Primitive:
            if isinstance(value, Record):
                raise MalformedRecordConstruction(
                    f"{class_info.name}.{member_name}: primitive member given a {type(value).__name__} record"
                )
            encode_primitive(info, value)
        else:
            if not isinstance(value, Record):
                raise MalformedRecordConstruction(
                    f"{class_info.name}.{member_name}: {binary_type.name} member needs a record, got {value!r}"
                )
            if isinstance(value, TOP_LEVEL_ONLY):
                raise MalformedRecordConstruction(
                    f"{class_info.name}.{member_name}: {type(value).__name__} cannot be a member value"
                )

    return values


def _pack_primitive_array(primitive_type: PrimitiveTypeEnum, values: Tuple[Any, ...]) -> bytes:
    """Pack array values: fixed-width types through numpy, the rest one by one."""
    dtype = ARRAY_DTYPES.get(primitive_type)
    if dtype is None:
        return b''.join(encode_primitive(primitive_type, value) for value in values)

    if primitive_type == PrimitiveTypeEnum.Boolean:
        if not all(isinstance(value, bool) for value in values):
            raise MalformedRecordConstruction("Boolean array values must all be bool")
    elif dtype.kind in 'iu':
        info = np.iinfo(dtype)
        for value in values:
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise MalformedRecordConstruction(f"{primitive_type.name} array value must be an int, got {value!r}")
            if not info.min <= value <= info.max:
                raise MalformedRecordConstruction(f"Value {value} does not fit {primitive_type.name}")
    elif dtype.kind == 'f':
        for value in values:
            if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
                raise MalformedRecordConstruction(f"{primitive_type.name} array value must be a number, got {value!r}")

    try:
        if dtype.kind != 'f':
            return np.asarray(values, dtype=dtype).tobytes()
        source = np.asarray(values, dtype=np.float64)
        with np.errstate(over='ignore'):
            packed = source.astype(dtype)
    except (TypeError, ValueError, OverflowError) as e:
        raise MalformedRecordConstruction(f"Cannot pack {primitive_type.name} array: {e}") from None

    # Finite inputs must stay finite after narrowing
    overflowed = np.isfinite(source) & ~np.isfinite(packed)
    if overflowed.any():
        value = values[int(np.argmax(overflowed))]
        raise MalformedRecordConstruction(f"Value {value!r} does not fit {primitive_type.name}")
    return packed.tobytes()


# ----------------------------------------------------------------------------
# Encoders, one per variant
# ----------------------------------------------------------------------------

_ENCODERS: Dict[RecordTypeEnum, Callable[[Any, io.BytesIO], None]] = {}


def _encoder(record_type: RecordTypeEnum):
    def deco(func):
        _ENCODERS[record_type] = func
        return func
    return deco


def write_record(buffer: io.BytesIO, record: Record):
    """
    Write a record, tag byte first, to a buffer.

    Raises:
        TypeError: If the object is not a known record variant
    """
    record_type = getattr(record, 'RECORD_TYPE', None)
    encoder = _ENCODERS.get(record_type)
    if encoder is None:
        raise TypeError(f"No encoder for {type(record).__name__}")
    write_uint8(buffer, record_type)
    encoder(record, buffer)


def encode_record(record: Record) -> bytes:
    """Encode a single record to bytes."""
    buffer = io.BytesIO()
    write_record(buffer, record)
    return buffer.getvalue()


def _write_member_values(buffer: io.BytesIO, member_type_info: MemberTypeInfo, values: Tuple[Any, ...]):
    for binary_type, info, value in zip(member_type_info.binary_type_enums,
                                        member_type_info.additional_infos,
                                        values):
        if binary_type == BinaryTypeEnum.Primitive:
            buffer.write(encode_primitive(info, value))
        else:
            write_record(buffer, value)


@_encoder(RecordTypeEnum.SerializedStreamHeader)
def _encode_header(record: SerializationHeaderRecord, buffer: io.BytesIO):
    write_int32(buffer, record.root_id)
    write_int32(buffer, record.header_id)
    write_int32(buffer, record.major_version)
    write_int32(buffer, record.minor_version)


@_encoder(RecordTypeEnum.BinaryLibrary)
def _encode_library(record: BinaryLibrary, buffer: io.BytesIO):
    write_int32(buffer, record.library_id)
    write_length_prefixed_string(buffer, record.library_name)


@_encoder(RecordTypeEnum.ClassWithMembersAndTypes)
def _encode_class_with_members_and_types(record: ClassWithMembersAndTypes, buffer: io.BytesIO):
    record.class_info.write(buffer)
    record.member_type_info.write(buffer)
    write_int32(buffer, record.library_id)
    _write_member_values(buffer, record.member_type_info, record.member_values)


@_encoder(RecordTypeEnum.SystemClassWithMembersAndTypes)
def _encode_system_class_with_members_and_types(record: SystemClassWithMembersAndTypes, buffer: io.BytesIO):
    record.class_info.write(buffer)
    record.member_type_info.write(buffer)
    _write_member_values(buffer, record.member_type_info, record.member_values)


@_encoder(RecordTypeEnum.ClassWithId)
def _encode_class_with_id(record: ClassWithId, buffer: io.BytesIO):
    write_int32(buffer, record.obj_id)
    write_int32(buffer, record.metadata_id)
    for value in record.member_values:
        write_record(buffer, value)


@_encoder(RecordTypeEnum.BinaryObjectString)
def _encode_object_string(record: BinaryObjectString, buffer: io.BytesIO):
    write_int32(buffer, record.obj_id)
    write_length_prefixed_string(buffer, record.string)


@_encoder(RecordTypeEnum.MemberPrimitiveTyped)
def _encode_member_primitive_typed(record: MemberPrimitiveTyped, buffer: io.BytesIO):
    write_uint8(buffer, record.primitive_type)
    buffer.write(encode_primitive(record.primitive_type, record.value))


@_encoder(RecordTypeEnum.MemberReference)
def _encode_member_reference(record: MemberReference, buffer: io.BytesIO):
    write_int32(buffer, record.id_ref)


@_encoder(RecordTypeEnum.ObjectNull)
@_encoder(RecordTypeEnum.MessageEnd)
def _encode_empty(record: Record, buffer: io.BytesIO):
    pass


@_encoder(RecordTypeEnum.ObjectNullMultiple256)
def _encode_null_multiple_256(record: ObjectNullMultiple256, buffer: io.BytesIO):
    write_uint8(buffer, record.null_count)


@_encoder(RecordTypeEnum.ArraySinglePrimitive)
def _encode_array_single_primitive(record: ArraySinglePrimitive, buffer: io.BytesIO):
    write_int32(buffer, record.obj_id)
    write_int32(buffer, len(record.values))
    write_uint8(buffer, record.primitive_type)
    buffer.write(_pack_primitive_array(record.primitive_type, record.values))


@_encoder(RecordTypeEnum.ArraySingleString)
def _encode_array_single_string(record: ArraySingleString, buffer: io.BytesIO):
    write_int32(buffer, record.obj_id)
    write_int32(buffer, record.length)
    for value in record.values:
        write_record(buffer, value)
