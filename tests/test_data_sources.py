"""Tests for data source handling."""

import asyncio

import pytest

from dazzletreeview import InvalidDataSourceError, TreeConfig
from dazzletreeview._common import EventStream
from dazzletreeview.aio import ArrayDataSource, DataSource, DataSourceAdapter, TreeView
from dazzletreeview.testing import FlatNode, RecordingRenderer


def flat_config():
    return TreeConfig.flat(lambda node: node.level)


async def painted_tree(data_source):
    tree = TreeView(flat_config(), RecordingRenderer(), data_source=data_source).start()
    tree.mark_painted()
    await tree.flush()
    return tree


class TrackingSource(DataSource):
    """DataSource recording connect/disconnect calls."""

    def __init__(self, nodes):
        self.nodes = nodes
        self.events = []

    def connect(self, viewer):
        self.events.append(('connect', viewer))
        return list(self.nodes)

    def disconnect(self, viewer):
        self.events.append(('disconnect', viewer))


class TestDataSourceAdapter:

    def test_sequence_delivers_immediately(self):
        received = []
        adapter = DataSourceAdapter(received.append, lambda exc: None)
        adapter.switch(('a', 'b'))
        assert received == [['a', 'b']]

    def test_none_clears(self):
        received = []
        adapter = DataSourceAdapter(received.append, lambda exc: None)
        adapter.switch(['a'])
        adapter.switch(None)
        assert received == [['a'], []]

    def test_replaced_stream_is_ignored(self):
        received = []
        adapter = DataSourceAdapter(received.append, lambda exc: None)
        first, second = EventStream(), EventStream()

        adapter.switch(first)
        adapter.switch(second)
        first.emit(['stale'])
        second.emit(['fresh'])

        assert received == [['fresh']]
        assert first.observer_count == 0

    @pytest.mark.parametrize("value", [42, "nodes", object()])
    def test_unsupported_shapes(self, value):
        adapter = DataSourceAdapter(lambda nodes: None, lambda exc: None)
        with pytest.raises(InvalidDataSourceError, match="A valid data source must be provided"):
            adapter.switch(value)


class TestTreeDataSources:

    @pytest.mark.asyncio
    async def test_swap_disconnects_previous_source(self):
        first = TrackingSource([FlatNode('a')])
        second = TrackingSource([FlatNode('b')])
        tree = await painted_tree(first)

        tree.data_source = second
        await tree.flush()

        assert first.events == [('connect', tree), ('disconnect', tree)]
        assert second.events == [('connect', tree)]
        assert tree.render_nodes == [FlatNode('b')]

    @pytest.mark.asyncio
    async def test_array_data_source_updates(self):
        source = ArrayDataSource([FlatNode('a')])
        tree = await painted_tree(source)
        assert source.connected == 1

        source.data = [FlatNode('a'), FlatNode('b')]
        await tree.flush()
        assert tree.render_nodes == [FlatNode('a'), FlatNode('b')]

        tree.close()
        assert source.connected == 0

    @pytest.mark.asyncio
    async def test_none_clears_the_view(self):
        tree = await painted_tree([FlatNode('a'), FlatNode('b')])

        tree.data_source = None
        await tree.flush()

        assert tree.render_nodes == []
        assert len(tree.container) == 0

    @pytest.mark.asyncio
    async def test_push_stream(self):
        stream = EventStream()
        tree = await painted_tree(stream)
        assert tree.render_nodes == []

        stream.emit([FlatNode('x')])
        await tree.flush()
        assert tree.render_nodes == [FlatNode('x')]

    @pytest.mark.asyncio
    async def test_async_iterable(self):
        async def emissions():
            yield [FlatNode('first')]
            await asyncio.sleep(0)
            yield [FlatNode('second')]

        tree = await painted_tree(emissions())
        for _ in range(5):
            await asyncio.sleep(0)
        await tree.flush()

        assert tree.render_nodes == [FlatNode('second')]

    @pytest.mark.asyncio
    async def test_stream_error_surfaces_on_flush(self):
        stream = EventStream()
        tree = await painted_tree(stream)

        stream.error(ConnectionError("feed lost"))
        with pytest.raises(ConnectionError, match="feed lost"):
            await tree.flush()

    def test_invalid_source_rejected_at_construction(self):
        with pytest.raises(InvalidDataSourceError):
            TreeView(flat_config(), RecordingRenderer(), data_source=42)

    @pytest.mark.asyncio
    async def test_invalid_source_rejected_on_swap(self):
        tree = await painted_tree([FlatNode('a')])
        with pytest.raises(InvalidDataSourceError):
            tree.data_source = 3.5
        assert tree.render_nodes == [FlatNode('a')]

    @pytest.mark.asyncio
    async def test_async_context_manager(self):
        source = ArrayDataSource([FlatNode('a')])
        renderer = RecordingRenderer()
        async with TreeView(flat_config(), renderer, data_source=source) as tree:
            tree.mark_painted()
            await tree.flush()
            assert tree.render_nodes == [FlatNode('a')]

        assert source.connected == 0
        assert len(tree.container) == 0
        assert renderer.count('remove') >= 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
