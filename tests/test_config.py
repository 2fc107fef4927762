import pytest

from dotnet_deserialization import (
    GeneratorConfig,
    UnsupportedFormatter,
    UnsupportedGadgetChain,
    generate,
    load_generator_config,
)


def write_ini(tmp_path, text):
    path = tmp_path / "generator.ini"
    path.write_text(text, encoding='utf-8')
    return path


def test_defaults():
    config = GeneratorConfig()
    assert config.gadget_chain == "TextFormattingRunProperties"
    assert config.formatter == "LosFormatter"


def test_load_selectors(tmp_path):
    path = write_ini(tmp_path, """
[generator]
gadget_chain = TextFormattingRunProperties
formatter = LosFormatter
""")
    config = load_generator_config(path)
    assert config == GeneratorConfig("TextFormattingRunProperties", "LosFormatter")


@pytest.mark.parametrize("value", ["none", "None", ""])
def test_no_formatter(tmp_path, value):
    path = write_ini(tmp_path, f"[generator]\nformatter = {value}\n")
    config = load_generator_config(path)
    assert config.formatter is None
    assert config.generate("calc.exe") == generate("calc.exe", formatter=None)


def test_inline_comment(tmp_path):
    path = write_ini(tmp_path, "[generator]\nformatter = none ; bare stream\n")
    assert load_generator_config(path).formatter is None


def test_missing_section_uses_defaults(tmp_path):
    path = write_ini(tmp_path, "[other]\nkey = value\n")
    assert load_generator_config(path) == GeneratorConfig()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_generator_config(tmp_path / "missing.ini")


def test_unknown_gadget_chain(tmp_path):
    path = write_ini(tmp_path, "[generator]\ngadget_chain = bogus\n")
    with pytest.raises(UnsupportedGadgetChain):
        load_generator_config(path)


def test_unknown_formatter():
    with pytest.raises(UnsupportedFormatter):
        GeneratorConfig(formatter="bogus")


def test_generate_uses_selectors():
    assert GeneratorConfig().generate("calc.exe") == generate("calc.exe")
