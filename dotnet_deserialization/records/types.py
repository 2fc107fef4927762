"""
Field structures shared by MS-NRBF records.

These are not records themselves (no leading tag byte). They make up the
metadata portion of class records:
- ClassInfo: object id, type name, ordered member names
- ClassTypeInfo: type name plus library id for Class members
- MemberTypeInfo: per-member BinaryTypeEnum plus additional type info

Primitive values are also encoded here, since both class members and
MemberPrimitiveTyped records need them.
"""

import io
import struct
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Tuple

from ..enums import BinaryTypeEnum, PrimitiveTypeEnum, TYPES_WITH_ADDITIONAL_INFO
from ..errors import MalformedRecordConstruction
from ..utils import check_int32, check_string, write_int32, write_uint8, write_length_prefixed_string


# struct formats for fixed-width primitives (all little-endian)
PRIMITIVE_FORMATS = {
    PrimitiveTypeEnum.Boolean: '<?',
    PrimitiveTypeEnum.Byte: '<B',
    PrimitiveTypeEnum.SByte: '<b',
    PrimitiveTypeEnum.Int16: '<h',
    PrimitiveTypeEnum.Int32: '<i',
    PrimitiveTypeEnum.Int64: '<q',
    PrimitiveTypeEnum.UInt16: '<H',
    PrimitiveTypeEnum.UInt32: '<I',
    PrimitiveTypeEnum.UInt64: '<Q',
    PrimitiveTypeEnum.Single: '<f',
    PrimitiveTypeEnum.Double: '<d',
    PrimitiveTypeEnum.TimeSpan: '<q',  # ticks
    PrimitiveTypeEnum.DateTime: '<q',  # ticks with Kind in the top 2 bits
}


def to_primitive_type(value: Any) -> PrimitiveTypeEnum:
    """Coerce a value to PrimitiveTypeEnum, failing with a construction error."""
    try:
        return PrimitiveTypeEnum(value)
    except ValueError:
        raise MalformedRecordConstruction(f"Unknown primitive type: {value!r}") from None


def encode_primitive(primitive_type: PrimitiveTypeEnum, value: Any) -> bytes:
    """
    Encode an untagged primitive value.

    Args:
        primitive_type: The value's PrimitiveTypeEnum
        value: Python value (int, float, bool, str or Decimal as appropriate)

    Returns:
        Encoded bytes

    Raises:
        MalformedRecordConstruction: If the value does not fit the type
    """
    primitive_type = to_primitive_type(primitive_type)

    if primitive_type == PrimitiveTypeEnum.Null:
        if value is not None:
            raise MalformedRecordConstruction(f"Null primitive must have value None, got {value!r}")
        return b''

    if value is None:
        raise MalformedRecordConstruction(f"Missing value for {primitive_type.name} primitive")

    buffer = io.BytesIO()

    if primitive_type == PrimitiveTypeEnum.String:
        write_length_prefixed_string(buffer, check_string('value', value))
    elif primitive_type == PrimitiveTypeEnum.Decimal:
        if not isinstance(value, (Decimal, int, str)) or isinstance(value, bool):
            raise MalformedRecordConstruction(f"Decimal primitive needs Decimal, int or str, got {value!r}")
        try:
            number = Decimal(value)
        except InvalidOperation:
            raise MalformedRecordConstruction(f"Invalid Decimal value: {value!r}") from None
        if not number.is_finite():
            raise MalformedRecordConstruction(f"Decimal primitive must be finite, got {value!r}")
        # Fixed-point text, never exponent notation
        write_length_prefixed_string(buffer, format(number, 'f'))
    elif primitive_type == PrimitiveTypeEnum.Char:
        # One UTF-16 code unit: no surrogates, nothing outside the BMP
        if not isinstance(value, str) or len(value) != 1 or value > '\uffff' or '\ud800' <= value <= '\udfff':
            raise MalformedRecordConstruction(f"Char primitive needs a single BMP character, got {value!r}")
        buffer.write(value.encode('utf-8'))
    else:
        fmt = PRIMITIVE_FORMATS[primitive_type]
        if primitive_type == PrimitiveTypeEnum.Boolean and not isinstance(value, bool):
            raise MalformedRecordConstruction(f"Boolean primitive needs a bool, got {value!r}")
        try:
            buffer.write(struct.pack(fmt, value))
        except (struct.error, OverflowError, TypeError) as e:
            raise MalformedRecordConstruction(
                f"Value {value!r} does not fit {primitive_type.name}: {e}"
            ) from None

    return buffer.getvalue()


def _as_tuple(name: str, values) -> Tuple:
    if values is None:
        raise MalformedRecordConstruction(f"Missing required field '{name}'")
    if isinstance(values, (str, bytes)):
        raise MalformedRecordConstruction(f"Field '{name}' must be a sequence, not {type(values).__name__}")
    return tuple(values)


@dataclass(frozen=True)
class ClassInfo:
    """Object id, type name and ordered member names of a class record."""
    obj_id: int = None
    name: str = None
    member_names: Tuple[str, ...] = None

    def __post_init__(self):
        check_int32('obj_id', self.obj_id)
        check_string('name', self.name)
        names = _as_tuple('member_names', self.member_names)
        for i, member_name in enumerate(names):
            check_string(f'member_names[{i}]', member_name)
        object.__setattr__(self, 'member_names', names)

    @property
    def member_count(self) -> int:
        return len(self.member_names)

    def write(self, buffer: io.BytesIO):
        write_int32(buffer, self.obj_id)
        write_length_prefixed_string(buffer, self.name)
        write_int32(buffer, self.member_count)
        for member_name in self.member_names:
            write_length_prefixed_string(buffer, member_name)


@dataclass(frozen=True)
class ClassTypeInfo:
    """Additional info for a Class member: type name and its library id."""
    type_name: str = None
    library_id: int = None

    def __post_init__(self):
        check_string('type_name', self.type_name)
        check_int32('library_id', self.library_id)

    def write(self, buffer: io.BytesIO):
        write_length_prefixed_string(buffer, self.type_name)
        write_int32(buffer, self.library_id)


@dataclass(frozen=True)
class MemberTypeInfo:
    """
    Per-member type tags, parallel to ClassInfo.member_names.

    additional_infos holds one entry per member: a PrimitiveTypeEnum for
    Primitive/PrimitiveArray, a class name for SystemClass, a ClassTypeInfo
    for Class and None for everything else. It may be omitted entirely when
    no member needs additional info.
    """
    binary_type_enums: Tuple[BinaryTypeEnum, ...] = None
    additional_infos: Optional[Tuple[Any, ...]] = None

    def __post_init__(self):
        raw_types = _as_tuple('binary_type_enums', self.binary_type_enums)
        types = []
        for value in raw_types:
            try:
                types.append(BinaryTypeEnum(value))
            except ValueError:
                raise MalformedRecordConstruction(f"Unknown binary type: {value!r}") from None
        types = tuple(types)

        if self.additional_infos is None:
            missing = [t.name for t in types if t in TYPES_WITH_ADDITIONAL_INFO]
            if missing:
                raise MalformedRecordConstruction(
                    f"Missing additional type info for member types: {', '.join(missing)}"
                )
            infos = (None,) * len(types)
        else:
            infos = _as_tuple('additional_infos', self.additional_infos)
            if len(infos) != len(types):
                raise MalformedRecordConstruction(
                    f"additional_infos has {len(infos)} entries, expected {len(types)}"
                )
            infos = tuple(self._check_info(i, t, info) for i, (t, info) in enumerate(zip(types, infos)))

        object.__setattr__(self, 'binary_type_enums', types)
        object.__setattr__(self, 'additional_infos', infos)

    @staticmethod
    def _check_info(index: int, binary_type: BinaryTypeEnum, info: Any) -> Any:
        if binary_type in (BinaryTypeEnum.Primitive, BinaryTypeEnum.PrimitiveArray):
            if info is None:
                raise MalformedRecordConstruction(f"Member {index}: {binary_type.name} needs a primitive type")
            return to_primitive_type(info)
        if binary_type == BinaryTypeEnum.SystemClass:
            return check_string(f'additional_infos[{index}]', info)
        if binary_type == BinaryTypeEnum.Class:
            if not isinstance(info, ClassTypeInfo):
                raise MalformedRecordConstruction(f"Member {index}: Class needs a ClassTypeInfo, got {info!r}")
            return info
        if info is not None:
            raise MalformedRecordConstruction(
                f"Member {index}: {binary_type.name} takes no additional info, got {info!r}"
            )
        return None

    def __len__(self) -> int:
        return len(self.binary_type_enums)

    def write(self, buffer: io.BytesIO):
        for binary_type in self.binary_type_enums:
            write_uint8(buffer, binary_type)
        for binary_type, info in zip(self.binary_type_enums, self.additional_infos):
            if binary_type in (BinaryTypeEnum.Primitive, BinaryTypeEnum.PrimitiveArray):
                write_uint8(buffer, info)
            elif binary_type == BinaryTypeEnum.SystemClass:
                write_length_prefixed_string(buffer, info)
            elif binary_type == BinaryTypeEnum.Class:
                info.write(buffer)
