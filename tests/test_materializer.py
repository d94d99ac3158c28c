from catalog.models import Catalog
from conftest import catalog_data, edge, practice
from practice_tree import (
    build_tree,
    collect_transitive_categories,
    count_practices,
    flatten_tree,
    group_by_level,
)


def _ids(node: dict) -> list:
    return [c["id"] for c in node["dependencies"]]


def test_missing_root_returns_none(diamond_catalog: Catalog) -> None:
    assert build_tree(diamond_catalog, "nope") is None


def test_diamond_shared_dependency_emitted_once(diamond_catalog: Catalog) -> None:
    tree = build_tree(diamond_catalog, "root")
    assert tree["id"] == "root"
    assert _ids(tree) == ["a", "b"]
    a, b = tree["dependencies"]
    assert _ids(a) == ["d"]
    assert _ids(b) == []
    assert count_practices(tree) == 4


def test_nodes_carry_counts_and_maturity(diamond_catalog: Catalog) -> None:
    tree = build_tree(diamond_catalog, "root")
    assert tree["maturityLevel"] == 3
    assert tree["requirementCount"] == 1
    assert tree["benefitCount"] == 1
    b = tree["dependencies"][1]
    assert b["maturityLevel"] is None
    assert "quickStartGuide" not in b


def test_deepest_occurrence_wins() -> None:
    data = catalog_data(
        [
            practice("root", "core", "root"),
            practice("branch1"),
            practice("branch2"),
            practice("intermediate"),
            practice("shared"),
        ],
        [
            edge("root", "branch1"),
            edge("root", "branch2"),
            edge("branch1", "shared"),
            edge("branch2", "intermediate"),
            edge("intermediate", "shared"),
        ],
    )
    tree = build_tree(Catalog.from_dict(data), "root")
    branch1, branch2 = tree["dependencies"]
    assert _ids(branch1) == []
    assert _ids(branch2["dependencies"][0]) == ["shared"]
    levels = {n["id"]: n["level"] for n in flatten_tree(tree)}
    assert levels == {"root": 0, "branch1": 1, "branch2": 1, "intermediate": 2, "shared": 3}


def test_cycle_is_cut_with_terminal_leaf() -> None:
    data = catalog_data(
        [practice("root", "core", "root"), practice("a"), practice("b")],
        [edge("root", "a"), edge("a", "b"), edge("b", "a")],
    )
    tree = build_tree(Catalog.from_dict(data), "root")
    a = tree["dependencies"][0]
    b = a["dependencies"][0]
    assert b["id"] == "b"
    assert [c["id"] for c in b["dependencies"]] == ["a"]
    assert b["dependencies"][0]["dependencies"] == []


def test_flatten_ignores_cycle_guard_leaves() -> None:
    data = catalog_data(
        [practice("root", "core", "root"), practice("a"), practice("b")],
        [edge("root", "a"), edge("a", "b"), edge("b", "a")],
    )
    flat = flatten_tree(build_tree(Catalog.from_dict(data), "root"))
    assert {n["id"]: n["level"] for n in flat} == {"root": 0, "a": 1, "b": 2}
    assert list(group_by_level(flat)) == [0, 1, 2]


def test_flatten_none_and_single() -> None:
    assert flatten_tree(None) == []
    assert flatten_tree({"id": "root", "name": "Root"}) == [{"id": "root", "name": "Root", "level": 0}]


def test_flatten_is_breadth_first_and_deduplicates_equal_depths() -> None:
    shared = {"id": "shared", "dependencies": []}
    tree = {
        "id": "root",
        "dependencies": [
            {"id": "a", "dependencies": [shared]},
            {"id": "b", "dependencies": [shared]},
        ],
    }
    flat = flatten_tree(tree)
    assert [(n["id"], n["level"]) for n in flat] == [("root", 0), ("a", 1), ("b", 1), ("shared", 2)]


def test_flatten_raw_tree_deepest_wins() -> None:
    shared = {"id": "shared", "dependencies": []}
    tree = {
        "id": "root",
        "dependencies": [
            {"id": "branch1", "dependencies": [shared]},
            {"id": "branch2", "dependencies": [{"id": "intermediate", "dependencies": [shared]}]},
        ],
    }
    flat = flatten_tree(tree)
    assert [n["id"] for n in flat] == ["root", "branch1", "branch2", "intermediate", "shared"]
    assert flat[-1]["level"] == 3


def test_group_by_level(diamond_catalog: Catalog) -> None:
    levels = group_by_level(flatten_tree(build_tree(diamond_catalog, "root")))
    assert {k: [n["id"] for n in v] for k, v in levels.items()} == {0: ["root"], 1: ["a", "b"], 2: ["d"]}


def test_collect_transitive_categories(diamond_catalog: Catalog) -> None:
    tree = build_tree(diamond_catalog, "root")
    assert collect_transitive_categories(tree) == ["automation", "behavior", "behavior-enabled-automation"]
    assert collect_transitive_categories(tree["dependencies"][1]) == []
    assert collect_transitive_categories(None) == []
