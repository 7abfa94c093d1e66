"""Tests for the StructuralGenerator."""

from pathlib import Path

import pytest

from navsync.resolver import ConfigResolver
from navsync.structure import ExclusionList, GroupExtractor, StructuralGenerator
from navsync.types import NavigationItem


async def generate(project, view: str = "en", *, exclusions: ExclusionList | None = None,
                   dev_mode: bool = False) -> list[NavigationItem]:
    resolver = ConfigResolver(project.docs)
    generator = StructuralGenerator(resolver, exclusions=exclusions)
    view_path = project.docs / view
    config = await resolver.get_effective_config(view_path / "index.md", "en", dev_mode)
    return await generator.generate_view(view_path, config, "en", dev_mode=dev_mode)


def by_text(items: list[NavigationItem]) -> dict[str, NavigationItem]:
    return {item.text: item for item in items}


class TestRootSplitting:
    """Tests for flattened root views and root stubs."""

    @pytest.mark.asyncio
    async def test_root_view_is_flattened(self, project) -> None:
        """Test en/guide root view yields one item containing concepts/a."""
        project.write("en/guide/index.md", root=True)
        project.write("en/guide/concepts/index.md")
        project.write("en/guide/concepts/a.md")

        items = await generate(project, "en/guide")

        assert len(items) == 1
        guide = items[0]
        assert guide.text == "guide"
        assert guide.is_root is True
        assert guide.link == "/en/guide/"
        concepts = by_text(guide.items)["concepts"]
        assert concepts.items is not None
        assert [i.text for i in concepts.items] == ["a"]
        assert concepts.items[0].link == "/en/guide/concepts/a.html"

    @pytest.mark.asyncio
    async def test_nested_root_becomes_stub(self, guide_project) -> None:
        """Test a root directory inside another view is a link-only stub."""
        items = await generate(guide_project, "en")

        guide = by_text(items)["Guide"]
        assert guide.is_root is True
        assert guide.items == []
        assert guide.link == "/en/guide/"

    @pytest.mark.asyncio
    async def test_non_root_view_lists_children(self, project) -> None:
        """Test a language root without root flag returns its entries."""
        project.write("en/intro.md", title="Intro")
        project.write("en/ref/index.md", title="Reference")

        items = await generate(project, "en")

        assert {i.text for i in items} == {"Intro", "Reference"}


class TestDepthLimiting:
    """Tests for maxDepth handling."""

    @pytest.mark.asyncio
    async def test_directory_at_max_depth_is_link_only(self, project) -> None:
        """Test with maxDepth=1 a direct child is expanded, its subdirectory is a leaf."""
        project.write("en/index.md", maxDepth=1)
        project.write("en/one/index.md")
        project.write("en/one/page.md")
        project.write("en/one/two/index.md")
        project.write("en/one/two/deep.md")

        items = await generate(project, "en")

        one = by_text(items)["one"]
        assert one.items is not None
        assert "page" in by_text(one.items)
        two = by_text(one.items)["two"]
        assert two.items is None
        assert two.link == "/en/one/two/"

    @pytest.mark.asyncio
    async def test_depth_limited_without_index_is_omitted(self, project) -> None:
        """Test a depth-limited directory without index.md disappears."""
        project.write("en/index.md", maxDepth=1)
        project.write("en/outer/noindex/page.md")
        project.write("en/outer/withindex/index.md")

        items = await generate(project, "en")

        outer = by_text(items)["outer"]
        assert [i.text for i in outer.items] == ["withindex"]
        assert outer.items[0].items is None

    @pytest.mark.asyncio
    async def test_max_depth_zero_lists_links_only(self, project) -> None:
        """Test maxDepth=0 turns every direct child directory into a link."""
        project.write("en/index.md", maxDepth=0)
        project.write("en/one/index.md")
        project.write("en/one/page.md")

        items = await generate(project, "en")

        assert items[0].text == "one"
        assert items[0].items is None


class TestPruning:
    """Tests for empty directory pruning."""

    @pytest.mark.asyncio
    async def test_empty_directory_pruned(self, project) -> None:
        """Test a directory without documents or index is dropped."""
        (project.docs / "en" / "empty" / "nested").mkdir(parents=True)
        project.write("en/assets/logo.txt", "not markdown")

        assert await generate(project, "en") == []

    @pytest.mark.asyncio
    async def test_index_only_directory_kept(self, project) -> None:
        """Test a directory with only index.md keeps a link."""
        project.write("en/about/index.md", title="About")

        items = await generate(project, "en")

        assert items[0].text == "About"
        assert items[0].items == []


class TestFiles:
    """Tests for file items."""

    @pytest.mark.asyncio
    async def test_index_never_an_item(self, project) -> None:
        """Test index.md describes its directory only."""
        project.write("en/index.md", title="Home")
        project.write("en/page.md")

        items = await generate(project, "en")

        assert [i.path_key for i in items] == ["page.md"]

    @pytest.mark.asyncio
    async def test_file_metadata(self, project) -> None:
        """Test title, hidden and priority front matter."""
        project.write("en/a.md", title="Alpha", priority=5)
        project.write("en/b.md", hidden=True)

        items = await generate(project, "en")

        assert len(items) == 1
        assert items[0].text == "Alpha"
        assert items[0].priority == 5

    @pytest.mark.asyncio
    async def test_item_order_fallback(self, project) -> None:
        """Test itemOrder positions files without their own priority."""
        project.write("en/index.md", itemOrder=["zeta", "alpha"])
        project.write("en/alpha.md")
        project.write("en/zeta.md")

        items = await generate(project, "en")

        assert [i.text for i in items] == ["zeta", "alpha"]

    @pytest.mark.asyncio
    async def test_drafts_only_in_dev_mode(self, project) -> None:
        """Test draft documents are hidden unless dev mode is on."""
        project.write("en/wip.md", draft=True)

        assert await generate(project, "en") == []
        assert [i.text for i in await generate(project, "en", dev_mode=True)] == ["wip"]


class TestDirectories:
    """Tests for directory items."""

    @pytest.mark.asyncio
    async def test_hidden_directory_skipped(self, project) -> None:
        """Test hidden directories and everything below them are skipped."""
        project.write("en/secret/index.md", hidden=True)
        project.write("en/secret/page.md")

        assert await generate(project, "en") == []

    @pytest.mark.asyncio
    async def test_dot_directories_skipped(self, project) -> None:
        """Test dot-directories are never walked."""
        project.write("en/.vitepress/page.md")

        assert await generate(project, "en") == []

    @pytest.mark.asyncio
    async def test_directory_settings(self, project) -> None:
        """Test title and collapse come from the directory's own config."""
        project.write("en/api/index.md", title="API", collapsed=True)
        project.write("en/api/endpoints.md")

        items = await generate(project, "en")

        assert items[0].text == "API"
        assert items[0].collapsed is True
        assert items[0].is_directory is True
        assert items[0].path_key == "api"

    @pytest.mark.asyncio
    async def test_label_not_inherited_from_parent_title(self, project) -> None:
        """Test a directory without its own title is labelled by its name."""
        project.write("en/index.md", title="Home")
        project.write("en/tools/page.md")
        project.write("en/tools/cli/index.md")

        items = await generate(project, "en")

        tools = by_text(items)["tools"]
        assert tools.link is None
        assert "cli" in by_text(tools.items)


class TestGroups:
    """Tests for group extraction."""

    @pytest.mark.asyncio
    async def test_group_lifted_to_top_level(self, project) -> None:
        """Test grouped content appears once, at the top, under its title."""
        project.write(
            "en/guide/index.md",
            root=True,
            groups=[{"title": "Advanced Topics", "path": "basics/advanced"}],
        )
        project.write("en/guide/basics/index.md")
        project.write("en/guide/basics/start.md")
        project.write("en/guide/basics/advanced/index.md")
        project.write("en/guide/basics/advanced/tuning.md")

        items = await generate(project, "en/guide")

        top = by_text(items[0].items)
        assert "Advanced Topics" in top
        group = top["Advanced Topics"]
        assert group.collapsed is True
        assert group.link == "/en/guide/basics/advanced/"
        assert [i.text for i in group.items] == ["tuning"]
        basics = top["basics"]
        assert [i.text for i in basics.items] == ["start"]

    @pytest.mark.asyncio
    async def test_group_without_source_path_appended(
        self, project, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a group item with no backing directory is appended and removes nothing."""
        project.write("en/index.md", groups=[{"title": "Loose", "path": "basics"}])
        project.write("en/basics/start.md")
        loose = NavigationItem(text="Loose", is_directory=True, items=[])

        async def build_group(self, group, view_path, lang, dev_mode):
            return loose

        monkeypatch.setattr(GroupExtractor, "build_group", build_group)

        items = await generate(project, "en")

        assert [i.text for i in items] == ["basics", "Loose"]
        assert items[-1] is loose

    @pytest.mark.asyncio
    async def test_missing_group_path_skipped(self, project) -> None:
        """Test a group pointing nowhere is ignored."""
        project.write("en/index.md", groups=[{"title": "Ghost", "path": "nope"}])
        project.write("en/page.md")

        items = await generate(project, "en")

        assert [i.text for i in items] == ["page"]


class TestExternalLinks:
    """Tests for external link injection."""

    @pytest.mark.asyncio
    async def test_valid_links_injected(self, project) -> None:
        """Test only http(s), titled, visible links are injected."""
        project.write(
            "en/index.md",
            externalLinks=[
                {"text": "GitHub", "link": "https://github.com/example", "priority": -1},
                {"text": "Hidden", "link": "https://example.com", "hidden": True},
                {"text": "Mail", "link": "mailto:team@example.com"},
                {"text": "", "link": "https://example.com"},
            ],
        )
        project.write("en/page.md")

        items = await generate(project, "en")

        assert [i.text for i in items] == ["GitHub", "page"]
        assert items[0].path_key == "external:GitHub"
        assert items[0].link == "https://github.com/example"


class TestExclusion:
    """Tests for external documentation roots."""

    @pytest.mark.asyncio
    async def test_excluded_root_skipped(self, project) -> None:
        """Test nothing at or below an excluded root is generated."""
        project.write("en/handbook/index.md")
        project.write("en/handbook/deep/page.md")
        project.write("en/page.md")
        exclusions = ExclusionList().extend([project.docs / "en" / "handbook"])

        items = await generate(project, "en", exclusions=exclusions)

        assert [i.text for i in items] == ["page"]

    def test_exclusion_matches_descendants(self, tmp_path: Path) -> None:
        """Test prefix matching works on path components."""
        exclusions = ExclusionList((tmp_path / "ext",))

        assert exclusions.is_excluded(tmp_path / "ext")
        assert exclusions.is_excluded(tmp_path / "ext" / "a")
        assert not exclusions.is_excluded(tmp_path / "extra")
