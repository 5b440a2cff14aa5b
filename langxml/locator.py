#!/usr/bin/env python3
"""
Structural addresses into an ElementTree document.

A locator is a tuple of ``(tag, index)`` pairs from the root down to a node,
where ``index`` is the 1-based position among siblings sharing that tag:

    (('Language', 1), ('Things', 1), ('RecordThing', 3), ('Value', 1))

Locators are plain values. They hold no reference to any tree, so a path
computed on one tree resolves on every deep copy of it, as long as no
same-tag siblings are inserted or removed in between.
"""

from collections import Counter
from typing import Optional
from xml.etree import ElementTree as ET

from .errors import LocatorResolutionFailure

Path = tuple[tuple[str, int], ...]

_SEPARATOR = " > "


def parent_map(root: ET.Element) -> dict[ET.Element, ET.Element]:
    """Build a child -> parent map (ElementTree nodes have no parent link)."""
    return {child: parent for parent in root.iter() for child in parent}


def sibling_positions(parent: ET.Element) -> dict[ET.Element, int]:
    """Map each child of ``parent`` to its 1-based index among same-tag siblings."""
    counts: Counter = Counter()
    positions = {}
    for child in parent:
        counts[child.tag] += 1
        positions[child] = counts[child.tag]
    return positions


def compute_path(
    root: ET.Element,
    node: ET.Element,
    parents: Optional[dict[ET.Element, ET.Element]] = None,
    positions: Optional[dict] = None,
) -> Path:
    """
    Compute the locator of ``node`` inside the tree rooted at ``root``.

    Args:
        root: Tree root
        node: Element somewhere under (or equal to) ``root``
        parents: Optional precomputed parent map, for bulk use
        positions: Optional cache of sibling_positions() per parent, filled
            as parents are visited; share one dict across calls on one tree

    Returns:
        Tuple of (tag, 1-based same-tag index) pairs
    """
    if parents is None:
        parents = parent_map(root)
    if positions is None:
        positions = {}

    steps = []
    current = node
    while current is not root:
        parent = parents.get(current)
        if parent is None:
            raise ValueError(f"Element <{node.tag}> is not part of this tree")
        if parent not in positions:
            positions[parent] = sibling_positions(parent)
        steps.append((current.tag, positions[parent][current]))
        current = parent
    steps.append((root.tag, 1))
    return tuple(reversed(steps))


def resolve(tree: ET.Element, path: Path, children: Optional[dict] = None) -> Optional[ET.Element]:
    """
    Walk ``path`` through ``tree`` and return the addressed element.

    If the tree root does not carry the first tag, the first descendant with
    that tag is used as the starting point.

    Args:
        tree: Tree to search
        path: Locator
        children: Optional cache of children grouped by tag, per parent.
            Drop an entry whenever that parent's children change.

    Returns:
        The element, or None when any step is missing
    """
    if not path:
        return None

    root_tag = path[0][0]
    current = tree if tree.tag == root_tag else tree.find(f".//{root_tag}")
    if current is None:
        return None

    for tag, index in path[1:]:
        same_tag = _children_with_tag(current, tag, children)
        if index < 1 or index > len(same_tag):
            return None
        current = same_tag[index - 1]
    return current


def _children_with_tag(parent: ET.Element, tag: str, cache: Optional[dict]) -> list[ET.Element]:
    if cache is None:
        return [c for c in parent if c.tag == tag]
    groups = cache.get(parent)
    if groups is None:
        groups = {}
        for child in parent:
            groups.setdefault(child.tag, []).append(child)
        cache[parent] = groups
    return groups.get(tag, [])


def locate(tree: ET.Element, path: Path, children: Optional[dict] = None) -> ET.Element:
    """Like resolve(), but raise LocatorResolutionFailure on a miss."""
    node = resolve(tree, path, children)
    if node is None:
        raise LocatorResolutionFailure(
            path, f"Locator did not resolve: {format_path(path)}"
        )
    return node


def format_path(path: Path) -> str:
    """Render a locator as ``Language > Things:nth(1) > Value:nth(1)``."""
    if not path:
        return ""
    parts = [path[0][0]]
    parts.extend(f"{tag}:nth({index})" for tag, index in path[1:])
    return _SEPARATOR.join(parts)


def parse_path(text: str) -> Path:
    """Inverse of format_path()."""
    steps = []
    for i, token in enumerate(p.strip() for p in text.split(">")):
        if not token:
            raise ValueError(f"Empty step in locator: {text!r}")
        if ":nth(" in token:
            tag, _, rest = token.partition(":nth(")
            steps.append((tag, int(rest.rstrip(")"))))
        elif i == 0:
            steps.append((token, 1))
        else:
            raise ValueError(f"Missing index in locator step: {token!r}")
    return tuple(steps)
