"""
Tests for the text sanitizers.

Every label and identifier in generated diagrams goes through these
functions, so a regression here corrupts every diagram at once.

Tests cover:
    - Node id minting (character replacement, leading digits, empty input)
    - Label escaping (backslash, quotes, newlines)
    - Outline escaping (brackets)
    - Code reference formatting
    - De-duplication
    - Markdown code spans
"""

import pytest
from logicmap.backends.lines import LineBuilder
from logicmap.backends.sanitize import (
    dedupe,
    escape_label,
    escape_outline_text,
    format_code_ref,
    inline_code,
    make_node_id,
)
from logicmap.model import CodeRef


class TestMakeNodeId:
    """Test node id minting."""

    def test_plain_id_kept(self):
        assert make_node_id("mod_", "order") == "mod_order"

    def test_unsafe_characters_replaced(self):
        """Every character outside [A-Za-z0-9_] becomes an underscore."""
        assert make_node_id("mod_", "order-center.v2") == "mod_order_center_v2"
        assert make_node_id("ext_", "订单") == "ext___"

    def test_leading_digit_prefixed(self):
        assert make_node_id("mod_", "2fa") == "mod__2fa"

    def test_empty_raw_falls_back_to_x(self):
        """The id is never just the bare prefix."""
        assert make_node_id("mod_", "") == "mod_x"

    def test_deterministic(self):
        assert make_node_id("mod_", "a b") == make_node_id("mod_", "a b")

    def test_distinct_ordinary_ids_do_not_collide(self):
        ids = ["order", "payment", "order_item", "Order"]
        minted = {make_node_id("mod_", raw) for raw in ids}
        assert len(minted) == len(ids)

    def test_punctuation_variants_collide(self):
        """Known limitation: no disambiguation between differently spelled ids."""
        assert make_node_id("mod_", "a-b") == make_node_id("mod_", "a.b") == "mod_a_b"

    def test_prefixes_keep_namespaces_apart(self):
        assert make_node_id("mod_", "pay") != make_node_id("ext_", "pay")


class TestEscapeLabel:
    """Test Mermaid label escaping."""

    def test_quotes_become_single_quotes(self):
        assert escape_label('say "hi"') == "say 'hi'"

    def test_backslash_doubled(self):
        assert escape_label("a\\b") == "a\\\\b"

    def test_newlines_become_line_breaks(self):
        assert escape_label("a\nb") == "a<br/>b"
        assert escape_label("a\r\nb") == "a<br/>b"

    def test_result_has_no_raw_hazards(self):
        out = escape_label('x "y"\nz')
        assert '"' not in out
        assert "\n" not in out

    def test_non_string_input(self):
        assert escape_label(42) == "42"


class TestEscapeOutlineText:
    """Test mind-map escaping."""

    def test_brackets_become_full_width(self):
        assert escape_outline_text("f(x) [y]") == "f（x） 【y】"

    def test_label_escaping_applied_first(self):
        assert escape_outline_text('"a"\n(b)') == "'a'<br/>（b）"

    def test_no_reserved_characters_left(self):
        out = escape_outline_text('a "b" \\ c\n(d) [e]')
        for ch in '"()[]\n':
            assert ch not in out


class TestFormatCodeRef:
    """Test code reference formatting."""

    def test_absent_reference(self):
        assert format_code_ref(None) == ""

    def test_file_only(self):
        assert format_code_ref(CodeRef(file="src/a.py")) == "src/a.py"

    def test_all_parts(self):
        assert format_code_ref(CodeRef(file="src/a.py", function="run", line=12)) == "src/a.py:run:12"

    def test_line_without_function(self):
        assert format_code_ref(CodeRef(file="src/a.py", line=0)) == "src/a.py:0"

    def test_missing_file(self):
        assert format_code_ref(CodeRef(file="", function="run")) == ""


class TestDedupe:
    def test_first_seen_order_kept(self):
        assert dedupe(["b", "a", "b", "", "a", "c"]) == ["b", "a", "c"]

    def test_falsy_entries_dropped(self):
        assert dedupe([None, "", "x"]) == ["x"]

    def test_accepts_generators(self):
        assert dedupe(s.upper() for s in ["a", "a", "b"]) == ["A", "B"]


class TestInlineCode:
    def test_plain_text(self):
        assert inline_code("src/a.py") == "`src/a.py`"

    def test_text_with_backtick(self):
        assert inline_code("a`b") == "`` a`b ``"

    def test_fence_longer_than_backtick_run(self):
        assert inline_code("a``b") == "``` a``b ```"
        assert inline_code("`x` and ```y```") == "```` `x` and ```y``` ````"

    def test_line_breaks_become_spaces(self):
        assert inline_code("a.py\n# x") == "`a.py # x`"
        assert inline_code("a\r\nb\rc") == "`a b c`"


class TestLineBuilder:
    """Test the line accumulator shared by the backends."""

    def test_header_and_indent(self):
        out = LineBuilder("flowchart LR")
        out.add("A --> B", 1)
        assert out.render() == "flowchart LR\n  A --> B"

    def test_heading_depth_clamped(self):
        out = LineBuilder()
        out.heading("deep", 9).heading("shallow", 0)
        assert out.render() == "###### deep\n# shallow"

    def test_bullets(self):
        out = LineBuilder()
        out.bullet("a").bullet("b", 2)
        assert out.render(trailing_newline=True) == "- a\n    - b\n"
        assert len(out) == 2

    @pytest.mark.parametrize("level", [-3, 0])
    def test_negative_levels_not_indented(self, level):
        assert LineBuilder().add("x", level).render() == "x"
