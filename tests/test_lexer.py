"""Tests for the TypeScript/JavaScript/JSX tokenizer."""

import pytest

from tsreview.errors import LexError
from tsreview.lexer import tokenize


def kinds(tokens):
    return [t.kind for t in tokens]


def values(tokens):
    return [t.value for t in tokens]


# ============================================================================
# Code tokens
# ============================================================================


class TestCodeTokens:

    def test_names_numbers_strings(self):
        tokens = tokenize("const answer = 42; let s = 'hi';")
        assert values(tokens) == ["const", "answer", "=", "42", ";", "let", "s", "=", "'hi'", ";"]
        assert kinds(tokens)[:5] == ["name", "name", "punct", "number", "punct"]
        assert tokens[8].kind == "string"

    def test_longest_punctuator_wins(self):
        tokens = tokenize("a === b !== c ?? d?.e => f >>>= 1")
        assert "===" in values(tokens)
        assert "!==" in values(tokens)
        assert "??" in values(tokens)
        assert "?." in values(tokens)
        assert "=>" in values(tokens)
        assert ">>>=" in values(tokens)

    def test_numeric_forms(self):
        tokens = tokenize("0xFF 1_000 3.14 .5 1e-3 10n")
        assert kinds(tokens) == ["number"] * 6
        assert values(tokens) == ["0xFF", "1_000", "3.14", ".5", "1e-3", "10n"]

    def test_optional_chain_before_digit_is_conditional(self):
        tokens = tokenize("a?.5:1")
        assert values(tokens) == ["a", "?", ".5", ":", "1"]

    def test_private_names(self):
        tokens = tokenize("this.#count = 1;")
        assert "#count" in values(tokens)

    def test_line_numbers(self):
        tokens = tokenize("a\nb\n\nc")
        assert [t.line for t in tokens] == [1, 2, 4]

    def test_shebang_skipped(self):
        tokens = tokenize("#!/usr/bin/env node\nconst a = 1;")
        assert tokens[0].value == "const"
        assert tokens[0].line == 2


# ============================================================================
# Comments
# ============================================================================


class TestComments:

    def test_line_and_block_comments(self):
        tokens = tokenize("// one\n/* two\nthree */ x")
        assert kinds(tokens) == ["comment", "comment", "name"]
        assert tokens[1].line == 2
        assert tokens[1].end_line == 3
        assert tokens[2].line == 3

    def test_unterminated_block_comment(self):
        with pytest.raises(LexError, match="unterminated block comment"):
            tokenize("/* never closed")


# ============================================================================
# Regex vs division
# ============================================================================


class TestRegex:

    def test_regex_after_assignment(self):
        tokens = tokenize("const r = /ab+c/gi;")
        assert tokens[3].kind == "regex"
        assert tokens[3].value == "/ab+c/gi"

    def test_division_after_operand(self):
        tokens = tokenize("const half = total / 2 / count;")
        assert "regex" not in kinds(tokens)
        assert values(tokens).count("/") == 2

    def test_regex_after_return_keyword(self):
        tokens = tokenize("return /x/.test(s)")
        assert tokens[1].kind == "regex"

    def test_slash_inside_character_class(self):
        tokens = tokenize("const r = /[/]+/;")
        assert tokens[3].value == "/[/]+/"

    def test_division_after_closing_paren(self):
        tokens = tokenize("(a + b) / 2")
        assert "regex" not in kinds(tokens)


# ============================================================================
# Strings and templates
# ============================================================================


class TestStringsAndTemplates:

    def test_escaped_quote(self):
        tokens = tokenize(r"const s = 'it\'s';")
        assert tokens[3].value == r"'it\'s'"

    def test_unterminated_string(self):
        with pytest.raises(LexError) as exc:
            tokenize('const s = "oops;\nconst t = 1;')
        assert exc.value.line == 1
        assert str(exc.value) == "line 1: unterminated string literal"

    def test_template_is_one_token(self):
        tokens = tokenize("const s = `a ${b + `c ${d}`} e`;")
        assert kinds(tokens) == ["name", "name", "punct", "template", "punct"]

    def test_template_with_braces_in_expression(self):
        tokens = tokenize("const s = `${fn({ a: 1 })}`;\nnext")
        assert tokens[3].kind == "template"
        assert tokens[-1].value == "next"
        assert tokens[-1].line == 2

    def test_multiline_template_line_tracking(self):
        tokens = tokenize("const s = `one\ntwo`;\nx")
        assert tokens[-1].line == 3

    def test_unterminated_template(self):
        with pytest.raises(LexError, match="unterminated template literal"):
            tokenize("const s = `open")


# ============================================================================
# JSX
# ============================================================================


class TestJsx:

    def test_element_with_attributes(self):
        tokens = tokenize('const el = <div className="box" id={name}>hi</div>;', jsx=True)
        assert [(t.kind, t.value) for t in tokens[3:]] == [
            ("jsx_tag", "div"),
            ("jsx_attr", "className"),
            ("jsx_punct", "="),
            ("string", '"box"'),
            ("jsx_attr", "id"),
            ("jsx_punct", "="),
            ("punct", "{"),
            ("name", "name"),
            ("punct", "}"),
            ("jsx_punct", ">"),
            ("jsx_text", "hi"),
            ("jsx_close", "div"),
            ("punct", ";"),
        ]

    def test_self_closing_and_fragment(self):
        tokens = tokenize("const el = <><Icon /></>;", jsx=True)
        assert ("jsx_punct", "<>") in [(t.kind, t.value) for t in tokens]
        assert ("jsx_punct", "/>") in [(t.kind, t.value) for t in tokens]
        assert ("jsx_close", "") in [(t.kind, t.value) for t in tokens]

    def test_nested_expression_with_arrow_and_element(self):
        source = "const list = <ul>{items.map((item) => <li key={item.id}>{item.name}</li>)}</ul>;"
        tokens = tokenize(source, jsx=True)
        assert "=>" in values(tokens)
        assert [t.value for t in tokens if t.kind == "jsx_tag"] == ["ul", "li"]

    def test_less_than_stays_comparison(self):
        tokens = tokenize("if (a < b) { c = a > b; }", jsx=True)
        assert not any(t.kind.startswith("jsx") for t in tokens)

    def test_generic_arrow_is_not_jsx(self):
        tokens = tokenize("const id = <T,>(value: T) => value;", jsx=True)
        assert not any(t.kind.startswith("jsx") for t in tokens)

    def test_generic_call_signature_in_props_is_not_jsx(self):
        tokens = tokenize("interface ListProps {\n  renderItem: <T>(item: T) => string;\n}", jsx=True)
        assert not any(t.kind.startswith("jsx") for t in tokens)
        assert values(tokens)[5:8] == ["<", "T", ">"]

    def test_generic_function_type_alias_is_not_jsx(self):
        tokens = tokenize("export type Mapper = <T>(value: T) => T;", jsx=True)
        assert not any(t.kind.startswith("jsx") for t in tokens)

    def test_element_with_parenthesized_text_is_jsx(self):
        tokens = tokenize("const el = <Trans>(optional)</Trans>;", jsx=True)
        assert ("jsx_tag", "Trans") in [(t.kind, t.value) for t in tokens]

    def test_jsx_not_lexed_without_flag(self):
        tokens = tokenize("const x = <T>value;")
        assert not any(t.kind.startswith("jsx") for t in tokens)

    def test_mismatched_closing_tag(self):
        with pytest.raises(LexError, match="expected </div>"):
            tokenize("const el = <div></span>;", jsx=True)

    def test_unterminated_element(self):
        with pytest.raises(LexError, match="unterminated JSX element"):
            tokenize("const el = <div>text", jsx=True)

    def test_comment_inside_tag(self):
        tokens = tokenize("const el = <div\n  // note\n  id=\"a\" />;", jsx=True)
        assert "comment" in kinds(tokens)
        assert [t.value for t in tokens if t.kind == "jsx_attr"] == ["id"]


# ============================================================================
# Errors
# ============================================================================


class TestLexErrors:

    def test_unexpected_character(self):
        with pytest.raises(LexError, match="unexpected character"):
            tokenize("const a = 1;\nconst b = 1 \\ 2;")

    def test_lex_error_carries_line(self):
        with pytest.raises(LexError) as exc:
            tokenize("a\nb\n'c")
        assert exc.value.line == 3

    def test_stray_angle_bracket_in_jsx_text(self):
        with pytest.raises(LexError, match="after '<' in JSX"):
            tokenize("const p = <p>a < 5</p>;", jsx=True)

    def test_non_ascii_digit(self):
        with pytest.raises(LexError, match="unexpected character"):
            tokenize("const a = \u00b2;")
