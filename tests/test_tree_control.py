"""Tests for the legacy tree controls."""

import pytest

from dazzletreeview import NodeDef, TreeConfig
from dazzletreeview.aio import FlatTreeControl, NestedTreeControl, NestedTreeNode, TreeView
from dazzletreeview.testing import FlatNode, NestedNode, RecordingRenderer, rendered_tree


def flat_rows():
    return [
        FlatNode('a', 0, True),
        FlatNode('a1', 1, True),
        FlatNode('a1x', 2),
        FlatNode('a2', 1),
        FlatNode('b', 0),
    ]


def flat_control(rows=None):
    control = FlatTreeControl(lambda node: node.level, lambda node: node.expandable)
    control.data_nodes = rows or []
    return control


def nested_roots():
    leaf = NestedNode('leaf')
    mid = NestedNode('mid', [leaf])
    return [NestedNode('root', [mid]), NestedNode('other')]


class TestFlatTreeControl:

    def test_get_descendants(self):
        rows = flat_rows()
        control = flat_control(rows)

        assert control.get_descendants(rows[0]) == rows[1:4]
        assert control.get_descendants(rows[1]) == [rows[2]]
        assert control.get_descendants(rows[4]) == []
        assert control.get_descendants(FlatNode('missing')) == []

    def test_expansion_operations(self):
        rows = flat_rows()
        control = flat_control(rows)

        control.expand(rows[0])
        assert control.is_expanded(rows[0])
        control.toggle(rows[0])
        assert not control.is_expanded(rows[0])

        control.expand_descendants(rows[0])
        assert all(control.is_expanded(row) for row in rows[:4])
        control.collapse_descendants(rows[1])
        assert control.is_expanded(rows[0])
        assert not control.is_expanded(rows[1])

    def test_expand_and_collapse_all(self):
        rows = flat_rows()
        control = flat_control(rows)

        control.expand_all()
        assert control.expansion_model.expanded == rows
        control.collapse_all()
        assert control.expansion_model.is_empty()

    def test_is_expandable_uses_callback(self):
        rows = flat_rows()
        control = flat_control(rows)
        assert control.is_expandable(rows[0])
        assert not control.is_expandable(rows[3])

    def test_track_by(self):
        rows = flat_rows()
        control = FlatTreeControl(lambda node: node.level, lambda node: node.expandable,
                                  track_by=lambda node: node.name)
        control.expand(rows[0])
        assert control.expansion_model.expanded == ['a']

        control.data_nodes = rows
        # Lookup goes through the expansion key, not object identity
        assert control.get_descendants(FlatNode('a', 0, False)) == rows[1:4]


class TestNestedTreeControl:

    def test_get_descendants_pre_order(self):
        roots = nested_roots()
        control = NestedTreeControl(lambda node: node.children)

        assert [node.name for node in control.get_descendants(roots[0])] == ['mid', 'leaf']
        assert control.is_expandable(roots[0])
        assert not control.is_expandable(roots[1])

    def test_is_expandable_override(self):
        control = NestedTreeControl(lambda node: node.children, is_expandable=lambda node: True)
        assert control.is_expandable(NestedNode('leaf'))

    def test_requires_list_children(self):
        control = NestedTreeControl(lambda node: iter(node.children))
        with pytest.raises(TypeError, match="return a list"):
            control.get_descendants(nested_roots()[0])

    def test_expand_all_covers_descendants(self):
        roots = nested_roots()
        control = NestedTreeControl(lambda node: node.children)
        control.data_nodes = roots

        control.expand_all()

        assert [node.name for node in control.expansion_model.expanded] == ['root', 'mid', 'leaf', 'other']


class TestTreeWithControl:
    """A tree configured with a control uses its structure and expansion."""

    @pytest.mark.asyncio
    async def test_flat_control_drives_tree(self):
        rows = flat_rows()
        control = FlatTreeControl(lambda node: node.level, lambda node: node.expandable)
        tree = TreeView(TreeConfig(tree_control=control), RecordingRenderer(), data_source=rows).start()
        tree.mark_painted()
        await tree.flush()

        assert control.data_nodes == rows
        assert tree.expansion_model is control.expansion_model
        assert tree.render_nodes == [rows[0], rows[4]]

        control.expand(rows[0])
        await tree.flush()
        assert tree.render_nodes == [rows[0], rows[1], rows[3], rows[4]]

        tree.expand_all()
        await tree.flush()
        assert tree.render_nodes == rows

    @pytest.mark.asyncio
    async def test_tree_operations_delegate_to_control(self):
        rows = flat_rows()
        control = FlatTreeControl(lambda node: node.level, lambda node: node.expandable)
        tree = TreeView(TreeConfig(tree_control=control), RecordingRenderer(), data_source=rows).start()
        tree.mark_painted()
        await tree.flush()

        tree.expand_descendants(rows[0])
        assert control.is_expanded(rows[1])

        # Expandability comes from the control callback
        assert tree.get_node(rows[0]).is_expandable
        assert not tree.get_node(rows[4]).is_expandable

        tree.collapse_all()
        assert control.expansion_model.is_empty()
        await tree.flush()

    @pytest.mark.asyncio
    async def test_nested_control_drives_tree(self):
        roots = nested_roots()
        control = NestedTreeControl(lambda node: node.children, track_by=lambda node: node.name)
        tree = TreeView(TreeConfig(tree_control=control), RecordingRenderer(),
                        node_defs=[NodeDef('n', node_factory=NestedTreeNode)], data_source=roots).start()
        tree.mark_painted()
        await tree.flush()

        assert tree.expansion_key(roots[0]) == 'root'
        control.expand_descendants(roots[0])
        await tree.flush()

        assert [(node.name, depth) for node, depth in rendered_tree(tree)] == [
            ('root', 0), ('mid', 1), ('leaf', 2), ('other', 0),
        ]

    def test_control_counts_as_node_source(self):
        control = FlatTreeControl(lambda node: node.level, lambda node: False)
        config = TreeConfig(tree_control=control, level_accessor=lambda node: 0)
        assert config.node_source_count() == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
