import io

import pytest

from dotnet_deserialization import encode_7bit_int
from dotnet_deserialization.errors import MalformedRecordConstruction
from dotnet_deserialization.utils import (
    write_length_prefix,
    write_length_prefixed_string,
    check_int32,
    check_uint8,
    check_string,
)

from nrbf_reader import decode_7bit_int


@pytest.mark.parametrize("value, expected", [
    (0, b''),
    (1, b'\x01'),
    (127, b'\x7f'),
    (128, b'\x80\x01'),
    (300, b'\xac\x02'),
    (16384, b'\x80\x80\x01'),
    (0x7FFFFFFF, b'\xff\xff\xff\xff\x07'),
])
def test_encode_7bit_int(value, expected):
    assert encode_7bit_int(value) == expected


def test_encode_7bit_int_decodes_back():
    for value in [0, 1, 63, 64, 127, 128, 255, 256, 16383, 16384, 2 ** 21, 2 ** 28 + 5, 2 ** 35]:
        encoded = encode_7bit_int(value)
        assert decode_7bit_int(encoded) == value
        # Continuation bit set on every byte except the last
        assert all(b & 0x80 for b in encoded[:-1])
        if encoded:
            assert not encoded[-1] & 0x80


def test_encode_7bit_int_rejects_negative():
    with pytest.raises(MalformedRecordConstruction):
        encode_7bit_int(-1)


def test_length_prefix_writes_zero_byte():
    buffer = io.BytesIO()
    write_length_prefix(buffer, 0)
    assert buffer.getvalue() == b'\x00'


@pytest.mark.parametrize("value, expected", [
    ("", b'\x00'),
    ("abc", b'\x03abc'),
    ("é", b'\x02\xc3\xa9'),
])
def test_length_prefixed_string(value, expected):
    buffer = io.BytesIO()
    write_length_prefixed_string(buffer, value)
    assert buffer.getvalue() == expected


def test_length_prefixed_string_long():
    buffer = io.BytesIO()
    write_length_prefixed_string(buffer, "x" * 200)
    data = buffer.getvalue()
    assert data[:2] == b'\xc8\x01'
    assert len(data) == 202


def test_check_int32():
    assert check_int32('id', -1) == -1
    assert check_int32('id', 0x7FFFFFFF) == 0x7FFFFFFF
    with pytest.raises(MalformedRecordConstruction, match="Missing required field 'id'"):
        check_int32('id', None)
    with pytest.raises(MalformedRecordConstruction):
        check_int32('id', 0x80000000)
    with pytest.raises(MalformedRecordConstruction):
        check_int32('id', "1")
    with pytest.raises(MalformedRecordConstruction):
        check_int32('id', True)


def test_check_uint8_and_string():
    assert check_uint8('b', 255) == 255
    with pytest.raises(MalformedRecordConstruction):
        check_uint8('b', 256)
    with pytest.raises(MalformedRecordConstruction):
        check_uint8('b', 0, minimum=1)
    assert check_string('s', "") == ""
    with pytest.raises(MalformedRecordConstruction):
        check_string('s', b"bytes")
