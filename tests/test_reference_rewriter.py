"""
Reference Rewriter Tests

Run with: pytest tests/test_reference_rewriter.py -v
"""

from emmm_core.mapping import (
    NameMap,
    ReferenceRewriter,
    base_name,
    find_asset_identifiers,
    rewrite_for_pack,
    rewrite_for_unpack,
)


class TestBaseName:
    """Tests for base name extraction."""

    def test_posix_path(self):
        assert base_name("/tmp/a.png") == "a.png"

    def test_windows_path(self):
        assert base_name("C:\\Users\\me\\b.jpg") == "b.jpg"

    def test_trailing_separator(self):
        assert base_name("/tmp/dir/") == "dir"

    def test_root_and_empty_have_no_name(self):
        assert base_name("/") is None
        assert base_name("") is None
        assert base_name("/tmp/..") is None


class TestNameMap:
    """Tests for identifier deduplication."""

    def test_first_claim_keeps_name(self):
        names = NameMap()
        assert names.claim("x.png", "/a/x.png") == "x.png"

    def test_collisions_use_increasing_counter(self):
        names = NameMap()
        assert names.claim("x.png", "/a/x.png") == "x.png"
        assert names.claim("x.png", "/b/x.png") == "0_x.png"
        assert names.claim("x.png", "/c/x.png") == "1_x.png"

    def test_counter_skips_taken_identifiers(self):
        names = NameMap()
        names.claim("x.png", "/a/x.png")
        names.claim("0_x.png", "/c/0_x.png")
        assert names.claim("x.png", "/b/x.png") == "1_x.png"

    def test_preserves_insertion_order(self):
        names = NameMap()
        names.claim("b", "/1/b")
        names.claim("a", "/2/a")
        assert list(names) == ["b", "a"]


class TestPackDirection:
    """Tests for file: -> asset: rewriting."""

    def test_single_reference(self):
        result = rewrite_for_pack("see file:/tmp/a.png;")
        assert result.text == "see asset:a.png;"
        assert result.name_map.to_dict() == {"a.png": "/tmp/a.png"}
        assert result.diagnostics == []

    def test_shared_base_names_are_disambiguated(self):
        result = rewrite_for_pack("file:/a/x.png; file:/b/x.png;")
        assert result.text == "asset:x.png; asset:0_x.png;"
        assert result.name_map.to_dict() == {"x.png": "/a/x.png", "0_x.png": "/b/x.png"}

    def test_same_path_twice_gets_two_identifiers(self):
        result = rewrite_for_pack("file:/a/x.png; file:/a/x.png;")
        assert result.text == "asset:x.png; asset:0_x.png;"

    def test_all_terminators_are_preserved(self):
        text = "[img file:/a/1.png]\nfile:/b/2.png\nfile:/c/3.png;"
        result = rewrite_for_pack(text)
        assert result.text == "[img asset:1.png]\nasset:2.png\nasset:3.png;"

    def test_token_without_terminator_is_left_alone(self):
        result = rewrite_for_pack("trailing file:/tmp/a.png")
        assert result.text == "trailing file:/tmp/a.png"
        assert len(result.name_map) == 0

    def test_root_path_is_left_unchanged_with_diagnostic(self):
        result = rewrite_for_pack("bad file:/; good file:/tmp/a.png;")
        assert result.text == "bad file:/; good asset:a.png;"
        assert len(result.diagnostics) == 1
        assert "/" in result.diagnostics[0]

    def test_paths_with_spaces(self):
        result = rewrite_for_pack("file:/my docs/pic one.png;")
        assert result.text == "asset:pic one.png;"
        assert result.name_map.resolve("pic one.png") == "/my docs/pic one.png"

    def test_text_without_tokens(self):
        result = rewrite_for_pack("plain text; nothing here]\n")
        assert result.text == "plain text; nothing here]\n"
        assert len(result.name_map) == 0


class TestUnpackDirection:
    """Tests for asset: -> file: rewriting."""

    def test_resolved_token(self):
        names = NameMap({"a.png": "/out/a.png"})
        result = rewrite_for_unpack("see asset:a.png;", names)
        assert result.text == "see file:/out/a.png;"
        assert result.diagnostics == []

    def test_unresolved_token_is_unchanged(self):
        result = rewrite_for_unpack("see asset:missing.png;", NameMap())
        assert result.text == "see asset:missing.png;"
        assert result.diagnostics == ["failed to resolve asset: missing.png"]

    def test_unresolved_token_rewrite_is_idempotent(self):
        names = NameMap({"a.png": "/out/a.png"})
        text = "asset:a.png; asset:gone.png]"
        once = rewrite_for_unpack(text, names).text
        twice = rewrite_for_unpack(once, names).text
        assert once == "file:/out/a.png; asset:gone.png]"
        assert twice == once

    def test_pack_then_unpack_restores_paths(self):
        packed = rewrite_for_pack("file:/a/x.png; file:/b/x.png;")
        restored = rewrite_for_unpack(packed.text, packed.name_map)
        assert restored.text == "file:/a/x.png; file:/b/x.png;"

    def test_rewriter_collects_diagnostics_across_tokens(self):
        rewriter = ReferenceRewriter(NameMap())
        rewriter.to_files("asset:a; asset:b;")
        assert len(rewriter.diagnostics) == 2


class TestFindAssetIdentifiers:
    """Tests for asset token scanning."""

    def test_returns_identifiers_in_order(self):
        text = "asset:b.png; x asset:a.png]\nasset:0_b.png\n"
        assert find_asset_identifiers(text) == ["b.png", "a.png", "0_b.png"]
