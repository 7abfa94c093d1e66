"""Tests for the Sorter."""

from navsync.sorter import effective_priority, parse_order_value, sort_items
from navsync.types import MAX_ORDER, NavigationItem


def names(items: list[NavigationItem]) -> list[str]:
    return [item.text for item in items]


class TestSortItems:
    """Tests for sort_items()."""

    def test_explicit_order_then_alphabetical(self) -> None:
        """Test {A:2, B:1} with unordered C, D sorts as B, A, C, D."""
        items = [NavigationItem(text=t, path_key=t) for t in ["D", "C", "A", "B"]]

        result = sort_items(items, {"A": 2, "B": 1})

        assert names(result) == ["B", "A", "C", "D"]

    def test_generated_priority_used_without_order(self) -> None:
        """Test generated priority sits between explicit and sentinel."""
        items = [
            NavigationItem(text="late", path_key="late.md"),
            NavigationItem(text="prio", path_key="prio.md", priority=3),
            NavigationItem(text="first", path_key="first.md"),
        ]

        result = sort_items(items, {"first": 0})

        assert names(result) == ["first", "prio", "late"]

    def test_numeric_string_order(self) -> None:
        """Test order values stored as strings still count."""
        items = [NavigationItem(text="x", path_key="x"), NavigationItem(text="y", path_key="y")]

        assert names(sort_items(items, {"y": "1", "x": "2"})) == ["y", "x"]

    def test_directory_scope_key_lookup(self) -> None:
        """Test directories are found by their trailing-slash key."""
        items = [
            NavigationItem(text="B", path_key="b", is_directory=True, items=[]),
            NavigationItem(text="A", path_key="a", is_directory=True, items=[]),
        ]

        assert names(sort_items(items, {"b/": 0, "a/": 1})) == ["B", "A"]

    def test_group_found_by_full_path_key(self) -> None:
        """Test a lifted group does not pick up a sibling directory's order entry."""
        items = [
            NavigationItem(text="advanced", path_key="advanced", is_directory=True, items=[]),
            NavigationItem(text="Group", path_key="basics/advanced", is_directory=True, items=[]),
        ]

        result = sort_items(items, {"advanced/": 5, "basics/advanced/": 1})

        assert names(result) == ["Group", "advanced"]

    def test_recurses_with_child_orders(self) -> None:
        """Test child scopes use the map returned by order_for."""
        child_a = NavigationItem(text="a", path_key="a.md")
        child_b = NavigationItem(text="b", path_key="b.md")
        parent = NavigationItem(text="dir", path_key="dir", is_directory=True, items=[child_a, child_b])

        sort_items([parent], order_for=lambda item: {"b.md": 0} if item is parent else None)

        assert names(parent.items) == ["b", "a"]

    def test_idempotent(self) -> None:
        """Test sorting a sorted list changes nothing."""
        items = [NavigationItem(text=t, path_key=t) for t in ["b", "a", "c"]]
        order = {"c": 1}

        once = sort_items(items, order)
        twice = sort_items(once, order)

        assert names(once) == names(twice) == ["c", "a", "b"]

    def test_case_insensitive_tie_break(self) -> None:
        """Test alphabetical tie-break ignores case."""
        items = [NavigationItem(text=t, path_key=t) for t in ["beta", "Alpha", "alpha2"]]

        assert names(sort_items(items)) == ["Alpha", "alpha2", "beta"]


class TestPriorities:
    """Tests for priority helpers."""

    def test_parse_order_value(self) -> None:
        """Test accepted and rejected order values."""
        assert parse_order_value(4) == 4
        assert parse_order_value("-2") == -2
        assert parse_order_value(1.0) == 1
        assert parse_order_value(True) is None
        assert parse_order_value("soon") is None
        assert parse_order_value(None) is None

    def test_directory_takes_min_child_priority(self) -> None:
        """Test a directory without priority inherits its earliest child."""
        directory = NavigationItem(
            text="d",
            is_directory=True,
            items=[NavigationItem(text="x", priority=7), NavigationItem(text="y", priority=2)],
        )

        assert effective_priority(directory) == 2

    def test_sentinel_without_any_priority(self) -> None:
        """Test items without any priority sort last."""
        assert effective_priority(NavigationItem(text="z")) == MAX_ORDER
