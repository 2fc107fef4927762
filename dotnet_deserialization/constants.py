"""
Constants used across the payload generator.

Collects the selector defaults and the literal values the target .NET
runtime checks byte for byte.
"""

# Default selectors for generate()
DEFAULT_GADGET_CHAIN = "TextFormattingRunProperties"
DEFAULT_FORMATTER = "LosFormatter"

# SerializationHeaderRecord defaults (MS-NRBF 2.6.1)
HEADER_ID_NONE = -1
STREAM_MAJOR_VERSION = 1
STREAM_MINOR_VERSION = 0

# ObjectStateFormatter envelope markers (ObjectStateFormatter.cs)
OSF_MARKER_FORMAT = 0xFF
OSF_MARKER_VERSION = 1

# Assembly identity hosting TextFormattingRunProperties
POWERSHELL_EDITOR_ASSEMBLY = (
    "Microsoft.PowerShell.Editor, Version=3.0.0.0, Culture=neutral, "
    "PublicKeyToken=31bf3856ad364e35"
)
TEXT_FORMATTING_RUN_PROPERTIES_TYPE = "Microsoft.VisualStudio.Text.Formatting.TextFormattingRunProperties"
