"""Cell hierarchy: instance fan-out counts, depth, tree model and export.

Counting semantics:
  - "instances" of a cell = number of instance records (in any cell) that
    reference it. A regular array counts once, the same way the layout
    browser of the host shows it.
  - "direct children" = number of distinct cells instantiated by a cell.
  - depth: a leaf cell has depth 1, a cell with children 1 + max(child).
"""

from . import common


class CellNode:
    """One entry of the hierarchy tree (a cell as seen under its parent)."""

    def __init__(self, name, cell_index, instances, child_count):
        self.name = name
        self.cell_index = cell_index
        self.instances = instances        # instance records referencing this cell
        self.child_count = child_count    # distinct child cells
        self.children = []

    def __repr__(self):
        return "CellNode(%r, instances=%d, children=%d)" % (self.name, self.instances, self.child_count)


def instance_counts(layout):
    """Map cell index -> number of instance records referencing that cell."""
    counts = {}
    for parent in layout.each_cell():
        for inst in parent.each_inst():
            ci = int(inst.cell_index)
            counts[ci] = counts.get(ci, 0) + 1
    return counts


def direct_children(cell):
    """Ordered map child cell index -> instance records inside ``cell``."""
    children = {}
    for inst in cell.each_inst():
        ci = int(inst.cell_index)
        children[ci] = children.get(ci, 0) + 1
    return children


def hierarchy_depth(cell):
    layout = cell.layout()
    memo = {}

    def depth_from(ci, stack):
        if ci in memo:
            return memo[ci]
        if ci in stack:
            # recursive hierarchy (invalid, but don't loop forever)
            return 0
        stack.add(ci)
        m = 0
        for child in layout.cell(ci).each_child_cell():
            m = max(m, depth_from(int(child), stack))
        stack.remove(ci)
        memo[ci] = m + 1
        return m + 1

    return depth_from(int(cell.cell_index()), set())


def build_tree(layout, top_cell, counts=None):
    """Build the CellNode tree below ``top_cell``.

    Cells that are placed under several parents show up once per parent.
    """
    if counts is None:
        counts = instance_counts(layout)

    def node_for(cell, stack):
        ci = int(cell.cell_index())
        children = direct_children(cell)
        node = CellNode(cell.name, ci, counts.get(ci, 0), len(children))
        if ci in stack:
            return node
        stack.add(ci)
        for child_index in children:
            node.children.append(node_for(layout.cell(child_index), stack))
        stack.remove(ci)
        return node

    return node_for(top_cell, set())


def apply_filter(item, text):
    """Hide tree items that neither match ``text`` nor have a matching descendant.

    ``item`` is a QTreeWidgetItem (or anything with text/childCount/child/
    setHidden/setExpanded). Matching is a case-insensitive substring test on
    column 0. Returns True when the item stays visible.
    """
    text = text.lower()
    visible = not text or text in item.text(0).lower()

    child_visible = False
    for i in range(item.childCount()):
        if apply_filter(item.child(i), text):
            child_visible = True

    visible = visible or child_visible
    item.setHidden(not visible)
    if visible and text:
        item.setExpanded(True)
    return visible


def export_lines(roots):
    lines = ["Cell Hierarchy Export", "=" * 50, ""]

    def walk(node, indent):
        lines.append("%s%s (instances: %d, children: %d)" % ("  " * indent, node.name, node.instances, node.child_count))
        for child in node.children:
            walk(child, indent + 1)

    for root in roots:
        walk(root, 0)
    return lines


def export_hierarchy(path, roots):
    common.write_lines(path, export_lines(roots))
    common.log("hierarchy exported to", path)
