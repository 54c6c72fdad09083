"""Tests for node definitions, configuration and node source resolution."""

import pytest

from dazzletreeview import (
    AmbiguousDefaultTemplateError,
    ConfigurationError,
    CyclePolicy,
    MissingNodeTemplateError,
    NodeDef,
    NodeType,
    TreeConfig,
)
from dazzletreeview._common import (
    FlatSource,
    NestedSource,
    NodeDefRegistry,
    NodeTypeResolver,
    default_expansion_key,
    resolve_node_source,
)
from dazzletreeview.aio import FlatTreeControl, NestedTreeControl


class TestNodeDefRegistry:

    def test_single_definition_always_wins(self):
        only = NodeDef('only', when=lambda data, index: False)
        registry = NodeDefRegistry([only])
        assert registry.get_node_def('anything', 0) is only

    def test_first_matching_predicate(self):
        folder = NodeDef('folder', when=lambda data, index: data.endswith('/'))
        first = NodeDef('first', when=lambda data, index: index == 0)
        default = NodeDef('file')
        registry = NodeDefRegistry([folder, first, default])

        assert registry.get_node_def('docs/', 0) is folder
        assert registry.get_node_def('a.txt', 0) is first
        assert registry.get_node_def('a.txt', 3) is default

    def test_missing_definition(self):
        registry = NodeDefRegistry([
            NodeDef('a', when=lambda data, index: False),
            NodeDef('b', when=lambda data, index: False),
        ])
        with pytest.raises(MissingNodeTemplateError, match="Could not find a matching node definition"):
            registry.get_node_def('x', 0)

    def test_no_definitions(self):
        with pytest.raises(MissingNodeTemplateError):
            NodeDefRegistry().get_node_def('x', 0)

    def test_two_defaults_are_ambiguous(self):
        with pytest.raises(AmbiguousDefaultTemplateError, match="only be one default"):
            NodeDefRegistry([NodeDef('a'), NodeDef('b')])


class TestTreeConfig:

    def test_convenience_constructors(self):
        flat = TreeConfig.flat(lambda node: 0, max_depth=3)
        nested = TreeConfig.nested(lambda node: [])

        assert flat.level_accessor is not None
        assert flat.max_depth == 3
        assert nested.children_accessor is not None
        assert flat.node_source_count() == 1

    def test_validate(self):
        assert TreeConfig.flat(lambda node: 0).validate() == []

        problems = TreeConfig(
            level_accessor=lambda node: 0,
            max_depth=-1,
            cycle_policy='skip',
            track_by='not callable',
        ).validate()
        assert "max_depth cannot be negative" in problems
        assert "cycle_policy must be a CyclePolicy" in problems
        assert "track_by must be callable" in problems

    def test_defaults(self):
        config = TreeConfig()
        assert config.cycle_policy is CyclePolicy.RAISE
        assert config.defer_until_painted is True
        assert config.node_source_count() == 0


class TestNodeSourceResolution:

    def test_level_accessor_gives_flat_source(self):
        source = resolve_node_source(TreeConfig.flat(lambda node: 1))
        assert isinstance(source, FlatSource)
        assert source.is_flat and not source.is_nested
        assert source.node_type is NodeType.FLAT

    def test_children_accessor_gives_nested_source(self):
        source = resolve_node_source(TreeConfig.nested(lambda node: []))
        assert isinstance(source, NestedSource)
        assert source.is_nested

    def test_tree_controls_contribute_their_accessor(self):
        flat_control = FlatTreeControl(lambda node: 0, lambda node: False)
        nested_control = NestedTreeControl(lambda node: [])

        assert isinstance(resolve_node_source(TreeConfig(tree_control=flat_control)), FlatSource)
        assert isinstance(resolve_node_source(TreeConfig(tree_control=nested_control)), NestedSource)

    def test_no_source(self):
        with pytest.raises(ConfigurationError, match="Could not find a tree control"):
            resolve_node_source(TreeConfig())

    def test_several_sources(self):
        config = TreeConfig(level_accessor=lambda node: 0, children_accessor=lambda node: [])
        with pytest.raises(ConfigurationError, match="More than one"):
            resolve_node_source(config)


class TestNodeTypeResolver:

    def test_first_value_is_frozen(self):
        resolver = NodeTypeResolver()
        seen = []
        resolver.changes.subscribe(seen.append)

        assert not resolver.is_resolved
        assert resolver.set_if_unset(NodeType.NESTED) is True
        assert resolver.set_if_unset(NodeType.FLAT) is False
        assert resolver.value is NodeType.NESTED
        assert seen == [None, NodeType.NESTED]


class TestDefaultExpansionKey:

    def test_hashable_nodes_are_their_own_key(self):
        assert default_expansion_key('a') == 'a'
        assert default_expansion_key((1, 2)) == (1, 2)

    def test_unhashable_nodes_use_identity(self):
        node = {'name': 'a'}
        assert default_expansion_key(node) == id(node)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
