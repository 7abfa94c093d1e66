"""Tests for front matter parsing."""

from navsync.resolver import parse_frontmatter


class TestParseFrontmatter:
    """Tests for parse_frontmatter()."""

    def test_parses_leading_block(self) -> None:
        """Test that a leading YAML block is returned as a dict."""
        content = "---\ntitle: Guide\nroot: true\npriority: 2\n---\n# Guide\n"

        assert parse_frontmatter(content) == {"title": "Guide", "root": True, "priority": 2}

    def test_no_frontmatter(self) -> None:
        """Test documents without front matter yield an empty dict."""
        assert parse_frontmatter("# Just a heading\n") == {}
        assert parse_frontmatter("") == {}

    def test_block_not_at_start_is_ignored(self) -> None:
        """Test that a --- block after content is not front matter."""
        assert parse_frontmatter("intro\n---\ntitle: x\n---\n") == {}

    def test_invalid_yaml_yields_empty(self) -> None:
        """Test that malformed YAML never raises."""
        assert parse_frontmatter("---\ntitle: [unclosed\n---\n") == {}

    def test_non_mapping_yields_empty(self) -> None:
        """Test that a YAML list is rejected."""
        assert parse_frontmatter("---\n- a\n- b\n---\n") == {}

    def test_crlf_and_bom(self) -> None:
        """Test Windows line endings and a byte order mark."""
        content = "\ufeff---\r\ntitle: Windows\r\n---\r\nbody"

        assert parse_frontmatter(content) == {"title": "Windows"}

    def test_frontmatter_at_end_of_file(self) -> None:
        """Test a document that is only front matter."""
        assert parse_frontmatter("---\nhidden: true\n---") == {"hidden": True}
