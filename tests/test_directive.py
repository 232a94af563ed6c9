import pytest

from codeblock_runner_backend.app.directive import DirectiveConfig, extract, parse_config
from codeblock_runner_backend.app.errors import MalformedDirective, NoDirective


class TestExtract:
    def test_splits_directive_and_source(self):
        block = extract('<compile>{"language":"cpp"}</compile>\nint main(){}')
        assert block.raw_config == '{"language":"cpp"}'
        assert block.source == "int main(){}"

    def test_multiline_directive(self):
        block = extract('<compile>{\n  "language": "rust",\n  "mode": "asm"\n}</compile>\nfn main() {}\n')
        assert '"mode": "asm"' in block.raw_config
        assert block.source == "fn main() {}\n"

    def test_only_one_line_break_is_dropped(self):
        block = extract('<compile>{}</compile>\n\nint x;')
        assert block.source == "\nint x;"

    def test_crlf_line_break_is_dropped(self):
        assert extract('<compile>{}</compile>\r\nint x;').source == "int x;"

    def test_only_first_directive_is_honoured(self):
        text = '<compile>{"language":"c"}</compile>\n// <compile>{"language":"rust"}</compile>\n'
        block = extract(text)
        assert block.raw_config == '{"language":"c"}'
        assert block.source == '// <compile>{"language":"rust"}</compile>\n'

    def test_no_directive(self):
        with pytest.raises(NoDirective):
            extract("int main() { return 0; }")

    def test_unclosed_directive(self):
        with pytest.raises(NoDirective):
            extract('<compile>{"language":"c"}\nint main(){}')


class TestParseConfig:
    def test_all_fields(self):
        config = parse_config(
            '{"language": "c", "compiler": "cg122", "mode": "asm", "commandLine": "-O2",'
            ' "args": ["a", "b"], "stdin": ["1"], "tools": [{"id": "clangtidytrunk"}],'
            ' "libraries": [{"id": "fmt", "version": "trunk"}]}'
        )
        assert config == DirectiveConfig(
            language="c",
            compiler="cg122",
            mode="asm",
            commandLine="-O2",
            args=["a", "b"],
            stdin=["1"],
            tools=[{"id": "clangtidytrunk"}],
            libraries=[{"id": "fmt", "version": "trunk"}],
        )

    def test_missing_fields_stay_unset(self):
        config = parse_config("{}")
        assert config.language is None
        assert config.args is None

    def test_unknown_fields_are_ignored(self):
        assert parse_config('{"language": "c", "theme": "dark"}').language == "c"

    @pytest.mark.parametrize("raw", ['{"language": "c",}', "not json", ""])
    def test_invalid_json(self, raw):
        with pytest.raises(MalformedDirective):
            parse_config(raw)

    def test_non_object_json(self):
        with pytest.raises(MalformedDirective):
            parse_config('["c"]')

    def test_wrong_field_type(self):
        with pytest.raises(MalformedDirective) as excinfo:
            parse_config('{"language": "c", "args": "-v"}')
        assert "args" in excinfo.value.notice
