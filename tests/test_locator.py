#!/usr/bin/env python3
"""
Tests for structural locators.

Tests verify:
1. compute_path() produces 1-based same-tag indices from the root
2. resolve() returns the exact node for every node in a tree
3. Paths keep resolving on deep copies
4. Misses return None / raise LocatorResolutionFailure
"""

import copy
from xml.etree import ElementTree as ET

import pytest

from langxml.errors import LocatorResolutionFailure
from langxml.locator import (
    compute_path,
    format_path,
    locate,
    parent_map,
    parse_path,
    resolve,
    sibling_positions,
)

from conftest import LANGUAGE_XML


@pytest.fixture
def root():
    return ET.fromstring(LANGUAGE_XML)


def test_compute_path_uses_same_tag_index(root):
    """Second RecordThing's Description is addressed by same-tag position."""
    wrench = root.find("Things").findall("RecordThing")[1]
    node = wrench.find("Description")

    assert compute_path(root, node) == (
        ("Language", 1),
        ("Things", 1),
        ("RecordThing", 2),
        ("Description", 1),
    )


def test_compute_path_of_root(root):
    assert compute_path(root, root) == (("Language", 1),)


def test_every_node_resolves_to_itself(root):
    for node in root.iter():
        assert resolve(root, compute_path(root, node)) is node


def test_paths_resolve_on_deep_copy(root):
    clone = copy.deepcopy(root)
    for node in root.iter():
        found = resolve(clone, compute_path(root, node))
        assert found is not None
        assert found is not node
        assert found.tag == node.tag
        assert found.text == node.text


def test_resolve_missing_step_returns_none(root):
    path = (("Language", 1), ("Things", 1), ("RecordThing", 9), ("Value", 1))
    assert resolve(root, path) is None


def test_resolve_empty_path_returns_none(root):
    assert resolve(root, ()) is None


def test_resolve_from_wrapper_root():
    """A tree whose root is not the first step falls back to a descendant."""
    wrapper = ET.fromstring("<Bundle><Language><Code>EN</Code></Language></Bundle>")
    node = resolve(wrapper, (("Language", 1), ("Code", 1)))
    assert node is not None and node.text == "EN"


def test_locate_raises_on_miss(root):
    path = (("Language", 1), ("Gases", 1))
    with pytest.raises(LocatorResolutionFailure) as exc_info:
        locate(root, path)
    assert exc_info.value.path == path
    assert "Gases:nth(1)" in str(exc_info.value)


def test_compute_path_rejects_foreign_node(root):
    with pytest.raises(ValueError):
        compute_path(root, ET.Element("Value"))


def test_format_and_parse_path():
    path = (("Language", 1), ("Things", 1), ("RecordThing", 3), ("Value", 1))
    text = format_path(path)

    assert text == "Language > Things:nth(1) > RecordThing:nth(3) > Value:nth(1)"
    assert parse_path(text) == path


def test_parse_path_rejects_missing_index():
    with pytest.raises(ValueError):
        parse_path("Language > Things")


def test_sibling_positions_count_per_tag():
    parent = ET.fromstring(
        "<Things><A/><B/><A/><!-- note --><A/></Things>",
        parser=ET.XMLParser(target=ET.TreeBuilder(insert_comments=True)),
    )
    positions = sibling_positions(parent)
    assert [positions[c] for c in parent] == [1, 1, 2, 1, 3]


def test_shared_caches_give_same_paths(root):
    """Bulk computation with shared caches matches one-off computation."""
    parents = parent_map(root)
    positions = {}
    children = {}
    for node in root.iter():
        path = compute_path(root, node, parents, positions)
        assert path == compute_path(root, node)
        assert resolve(root, path, children) is node
    assert root in positions and root in children


def test_comment_siblings_do_not_shift_indices():
    tree = ET.fromstring(
        "<Keys><Record><Key>A</Key></Record><!-- c --><Record><Key>B</Key></Record></Keys>",
        parser=ET.XMLParser(target=ET.TreeBuilder(insert_comments=True)),
    )
    second = tree.findall("Record")[1]
    assert compute_path(tree, second) == (("Keys", 1), ("Record", 2))
