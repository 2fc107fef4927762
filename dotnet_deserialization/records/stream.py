"""
Serialized stream assembly.

A stream is an ordered record sequence:
- SerializationHeaderRecord first
- libraries, classes and objects
- MessageEnd last

Assembly concatenates the encoded records. Id consistency is the builder's
job; strict mode checks it for builders that want the guarantee. This
generator never emits forward references, even though the format allows
them.
"""

import io
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Set, Tuple

from ..errors import MalformedStream
from ..utils import ParentIndex, logDebug
from .records import (
    Record,
    SerializationHeaderRecord,
    BinaryLibrary,
    ClassWithMembersAndTypes,
    SystemClassWithMembersAndTypes,
    ClassWithId,
    BinaryObjectString,
    MemberReference,
    MessageEnd,
    ArraySinglePrimitive,
    ArraySingleString,
    CLASS_RECORDS,
    write_record,
)
from .types import ClassTypeInfo

# Records that introduce an object id
OBJECT_RECORDS = (
    ClassWithMembersAndTypes,
    SystemClassWithMembersAndTypes,
    ClassWithId,
    BinaryObjectString,
    ArraySinglePrimitive,
    ArraySingleString,
)

# Records whose class metadata can be reused by ClassWithId
METADATA_RECORDS = (ClassWithMembersAndTypes, SystemClassWithMembersAndTypes)


def child_records(record: Record) -> Tuple[Record, ...]:
    """Return the records nested directly inside a record, in encoding order."""
    if isinstance(record, CLASS_RECORDS):
        return tuple(v for v in record.member_values if isinstance(v, Record))
    if isinstance(record, ArraySingleString):
        return record.values
    return ()


def build_parent_index(records: Iterable[Record]) -> ParentIndex:
    """
    Flatten records into a ParentIndex in encoding (pre-)order.

    Top-level records are roots; nested member values point at their
    enclosing record.
    """
    index = ParentIndex()

    def visit(record: Record, parent: Optional[int]):
        position = index.add(record, parent)
        for child in child_records(record):
            visit(child, position)

    for record in records:
        visit(record, None)

    return index


def _context(index: ParentIndex, position: int) -> str:
    parent = index.parent_of(position)
    if parent is None:
        return f"record {position}"
    owner = index.get_ancestor(parent, CLASS_RECORDS, required=False)
    if isinstance(owner, METADATA_RECORDS):
        return f"record {position} (member of {owner.class_info.name})"
    if owner is not None:
        return f"record {position} (member of object {owner.obj_id})"
    return f"record {position}"


def validate_references(records: Iterable[Record]):
    """
    Check id bookkeeping across a record sequence.

    - the stream opens with its only SerializationHeaderRecord
    - object ids and library ids are unique
    - library ids are defined before a class record or a Class member
      type uses them
    - MemberReference and ClassWithId only point backwards
    - the header's root id is defined somewhere in the stream

    Raises:
        MalformedStream: On the first inconsistency found
    """
    index = build_parent_index(records)

    object_ids: Set[int] = set()
    library_ids: Set[int] = set()
    metadata_ids: Set[int] = set()
    root_id: Optional[int] = None

    if len(index) == 0 or not isinstance(index.node(0), SerializationHeaderRecord):
        raise MalformedStream("Stream must start with a SerializationHeaderRecord")

    for position, record in enumerate(index):
        where = _context(index, position)

        if isinstance(record, SerializationHeaderRecord):
            if position != 0:
                raise MalformedStream(f"{where}: only one SerializationHeaderRecord is allowed")
            root_id = record.root_id

        elif isinstance(record, BinaryLibrary):
            if record.library_id in library_ids:
                raise MalformedStream(f"{where}: duplicate library id {record.library_id}")
            library_ids.add(record.library_id)

        elif isinstance(record, MemberReference):
            if record.id_ref not in object_ids:
                raise MalformedStream(f"{where}: reference to undefined object id {record.id_ref}")

        if isinstance(record, ClassWithMembersAndTypes) and record.library_id not in library_ids:
            raise MalformedStream(f"{where}: library id {record.library_id} used before definition")

        if isinstance(record, METADATA_RECORDS):
            for member_name, info in zip(record.class_info.member_names,
                                         record.member_type_info.additional_infos):
                if isinstance(info, ClassTypeInfo) and info.library_id not in library_ids:
                    raise MalformedStream(
                        f"{where}: library id {info.library_id} of member {member_name} used before definition"
                    )

        if isinstance(record, ClassWithId) and record.metadata_id not in metadata_ids:
            raise MalformedStream(f"{where}: class metadata id {record.metadata_id} used before definition")

        if isinstance(record, OBJECT_RECORDS):
            if record.obj_id in object_ids:
                raise MalformedStream(f"{where}: duplicate object id {record.obj_id}")
            object_ids.add(record.obj_id)
            if isinstance(record, METADATA_RECORDS):
                metadata_ids.add(record.obj_id)

    if root_id is not None and root_id not in object_ids:
        raise MalformedStream(f"Root object id {root_id} is never defined")


def assemble(records: Iterable[Record], strict: bool = False) -> bytes:
    """
    Concatenate encoded records into one serialized blob.

    Args:
        records: Ordered records, ending with MessageEnd
        strict: Also run validate_references()

    Returns:
        Serialized stream bytes

    Raises:
        MalformedStream: Empty sequence, missing terminator or (strict) bad ids
    """
    records = tuple(records)
    if not records:
        raise MalformedStream("Cannot assemble an empty stream")
    for i, record in enumerate(records):
        if not isinstance(record, Record):
            raise MalformedStream(f"Item {i} is not a record: {type(record).__name__}")
    if not isinstance(records[-1], MessageEnd):
        raise MalformedStream(f"Stream must end with MessageEnd, not {type(records[-1]).__name__}")

    if strict:
        validate_references(records)

    buffer = io.BytesIO()
    for record in records:
        start = buffer.tell()
        write_record(buffer, record)
        logDebug(f"  {type(record).__name__}: {buffer.tell() - start} bytes")

    return buffer.getvalue()


@dataclass(frozen=True)
class SerializedStream:
    """An ordered, immutable record sequence."""
    records: Tuple[Record, ...] = ()

    def __post_init__(self):
        records = tuple(self.records)
        for i, record in enumerate(records):
            if not isinstance(record, Record):
                raise MalformedStream(f"Item {i} is not a record: {type(record).__name__}")
        object.__setattr__(self, 'records', records)

    @classmethod
    def from_values(cls, records: Iterable[Record]) -> 'SerializedStream':
        return cls(records=tuple(records))

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def parent_index(self) -> ParentIndex:
        return build_parent_index(self.records)

    def validate_references(self):
        validate_references(self.records)

    def to_bytes(self, strict: bool = False) -> bytes:
        return assemble(self.records, strict=strict)
