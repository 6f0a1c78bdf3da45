from __future__ import annotations

"""Navigation artifacts derived from the precomputed hierarchy table."""

from typing import Any, Iterable, Sequence

from vocabDocs.render.document import TYPE, slug_for
from vocabDocs.vocab.hierarchy import HierarchyIndex

NavNode = dict[str, Any]


def navigation_tree(
    index: HierarchyIndex,
    *,
    include: Iterable[str] | None = None,
) -> list[NavNode]:
    """Nested ``{name, slug, children}`` nodes starting at the hierarchy roots.

    Types with several parents appear under each of them. ``include`` limits
    the tree to published types.
    """

    allowed = set(include) if include is not None else None

    def visible(name: str) -> bool:
        return allowed is None or name in allowed

    def build(name: str, path: frozenset[str]) -> NavNode:
        node: NavNode = {"name": name, "slug": slug_for(name, TYPE), "children": []}
        for child in index.direct_children(name):
            if child in path or not visible(child):
                continue
            node["children"].append(build(child, path | {child}))
        return node

    return [build(root, frozenset({root})) for root in index.roots() if visible(root)]


def expand_for(tree: Sequence[NavNode], breadcrumb: Sequence[str]) -> list[NavNode]:
    """Copy of ``tree`` with ``expanded`` set along the root-to-page path."""

    def walk(nodes: Sequence[NavNode], depth: int, on_path: bool) -> list[NavNode]:
        out = []
        for node in nodes:
            expanded = (
                on_path and depth < len(breadcrumb) and node["name"] == breadcrumb[depth]
            )
            out.append(
                {
                    "name": node["name"],
                    "slug": node["slug"],
                    "expanded": expanded,
                    "children": walk(node["children"], depth + 1, expanded),
                }
            )
        return out

    return walk(tree, 0, True)


def branch_menus(index: HierarchyIndex, *, include: Iterable[str] | None = None) -> dict[str, dict]:
    """Per-branch ``meta.json`` payloads keyed by their path under ``things/``.

    The root menu lists the root type and its direct children before a
    separator followed by every other published type; each type with
    children gets its own menu listing itself and its children.
    """

    names = sorted(include) if include is not None else index.vocab.type_names()
    published = set(names)
    menus: dict[str, dict] = {}
    root = index.root
    root_children = [c for c in index.direct_children(root) if c in published]
    top = {root, *root_children}
    pages = ["index", "---"]
    if root in published:
        pages.append(root)
    pages += root_children
    pages.append("---")
    pages += [name for name in names if name not in top]
    menus["meta.json"] = {"title": "Types", "pages": pages}

    for name in names:
        children = [c for c in index.direct_children(name) if c in published]
        if not children:
            continue
        menus[f"{name}/meta.json"] = {"title": name, "pages": [name, "---", *children]}
    return menus


__all__ = ["navigation_tree", "expand_for", "branch_menus"]
