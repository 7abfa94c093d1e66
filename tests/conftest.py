"""Pytest fixtures for navsync tests."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest
import yaml

from navsync.context import NavContext
from navsync.settings import NavSettings
from navsync.types import OverrideKind


def page(body: str = "", **frontmatter: Any) -> str:
    """Markdown document with optional front matter."""
    if not frontmatter:
        return body or "# Page\n"
    header = yaml.safe_dump(frontmatter, sort_keys=False, allow_unicode=True)
    return f"---\n{header}---\n{body or '# Page'}\n"


@dataclass
class DocsProject:
    """A throwaway documentation project on disk."""

    root: Path

    @property
    def docs(self) -> Path:
        return self.root / "docs"

    @property
    def sidebar(self) -> Path:
        return self.root / ".navsync" / "sidebar"

    def write(self, rel: str, content: str | None = None, **frontmatter: Any) -> Path:
        """Write a document under docs/; front matter keywords become YAML."""
        path = self.docs / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content if content is not None else page(**frontmatter), encoding="utf-8")
        return path

    def settings(self, **overrides: Any) -> NavSettings:
        values: dict[str, Any] = {
            "docs_dir": self.docs,
            "sidebar_dir": self.sidebar,
            "cache_dir": self.root / ".navsync" / "cache",
            "languages": ("en",),
        }
        values.update(overrides)
        return NavSettings(**values)

    def context(self, **overrides: Any) -> NavContext:
        return NavContext.initialize(self.settings(**overrides))

    def override_path(self, kind: OverrideKind, signature: str = "_root", lang: str = "en") -> Path:
        base = self.sidebar / lang
        return (base if signature == "_root" else base / signature) / kind.filename

    def metadata_path(self, kind: OverrideKind, signature: str = "_root", lang: str = "en") -> Path:
        base = self.sidebar / ".metadata" / lang
        return (base if signature == "_root" else base / signature) / kind.filename

    def sidecar_snapshot(self) -> dict[str, bytes]:
        """Every sidecar file's bytes, keyed by relative path."""
        if not self.sidebar.exists():
            return {}
        return {
            p.relative_to(self.sidebar).as_posix(): p.read_bytes()
            for p in sorted(self.sidebar.rglob("*.json"))
        }


@pytest.fixture
def project(tmp_path: Path) -> DocsProject:
    """Empty project with a docs/en language root."""
    proj = DocsProject(root=tmp_path.resolve())
    (proj.docs / "en").mkdir(parents=True)
    return proj


@pytest.fixture
def guide_project(project: DocsProject) -> DocsProject:
    """en/guide is its own root view holding a concepts section."""
    project.write("en/index.md", title="Home")
    project.write("en/guide/index.md", root=True, title="Guide")
    project.write("en/guide/concepts/index.md", title="Concepts")
    project.write("en/guide/concepts/a.md", title="A")
    project.write("en/guide/setup.md", title="Setup")
    return project
