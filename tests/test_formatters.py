import pytest

from dotnet_deserialization import UnsupportedFormatter, MalformedRecordConstruction
from dotnet_deserialization.enums import ObjectStateToken
from dotnet_deserialization.formatters import (
    ObjectStateFormatter,
    available_formatters,
    format_los,
    get_formatter,
)


class TestObjectStateFormatter:
    def test_defaults(self):
        header = ObjectStateFormatter(token=ObjectStateToken.BinarySerialized)
        assert header.marker_format == 0xFF
        assert header.marker_version == 1
        assert header.to_bytes() == b'\xff\x01\x32'

    def test_type_reference_tokens(self):
        assert ObjectStateToken.TypeRefAdd == 41
        assert ObjectStateToken.TypeRefAddLocal == 42
        assert ObjectStateToken.TypeRef == 43

    def test_token_required(self):
        with pytest.raises(MalformedRecordConstruction, match="token"):
            ObjectStateFormatter()

    def test_byte_range(self):
        with pytest.raises(MalformedRecordConstruction):
            ObjectStateFormatter(token=256)
        with pytest.raises(MalformedRecordConstruction):
            ObjectStateFormatter(token=50, marker_version=-1)

    def test_custom_markers(self):
        assert ObjectStateFormatter(token=5, marker_format=0xFE, marker_version=2).to_bytes() == b'\xfe\x02\x05'


class TestLosFormatter:
    def test_wraps_body(self):
        assert format_los(b'abc') == b'\xff\x01\x32\x03abc'

    def test_multi_byte_length(self):
        body = b'\x00' * 300
        payload = format_los(body)
        assert payload[:5] == b'\xff\x01\x32\xac\x02'
        assert payload[5:] == body

    def test_empty_body_keeps_length_byte(self):
        assert format_los(b'') == b'\xff\x01\x32\x00'


class TestRegistry:
    def test_los_formatter_registered(self):
        assert available_formatters() == ["LosFormatter"]
        assert get_formatter("LosFormatter") is format_los

    def test_unknown_selector(self):
        with pytest.raises(UnsupportedFormatter) as excinfo:
            get_formatter("bogus")
        assert excinfo.value.selector == "bogus"
