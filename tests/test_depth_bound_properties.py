"""
Property-based tests for the depth bound.

**Property 1: Depth bound**
A traversal with max_depth 0 performs no fetch and emits no event, and no
resource is ever fetched further than max_depth - 1 links from the root.
"""

import pytest
from hypothesis import given, strategies as st

from link_crawler.concurrent import ClaimPolicy, ResultCollector, Traverser
from link_crawler.crawlers.fixture import FixtureFetcher
from link_crawler.utils.errors import ValidationError

from graph_strategies import resource_graphs


def shortest_distances(graph, root):
    distances = {root: 0}
    frontier = [root]
    while frontier:
        next_frontier = []
        for node in frontier:
            if node not in graph:
                continue
            for link in graph[node][1]:
                if link not in distances:
                    distances[link] = distances[node] + 1
                    next_frontier.append(link)
        frontier = next_frontier
    return distances


class TestDepthBound:
    """Test depth-exhaustion policy."""

    @given(graph=resource_graphs(), policy=st.sampled_from(list(ClaimPolicy)))
    def test_zero_depth_fetches_nothing(self, graph, policy):
        fetcher = FixtureFetcher(graph)
        collector = ResultCollector()
        traverser = Traverser(fetcher, observer=collector, claim_policy=policy, wait_timeout=10)

        traverser.traverse("n0", 0)

        assert fetcher.call_count() == 0
        assert collector.events == []
        assert traverser.last_run.tracker.registered_count == 1
        assert traverser.last_run.tracker.deregistered_count == 1

    @given(
        graph=resource_graphs(),
        max_depth=st.integers(min_value=1, max_value=5),
        policy=st.sampled_from(list(ClaimPolicy))
    )
    def test_fetches_stay_within_depth(self, graph, max_depth, policy):
        fetcher = FixtureFetcher(graph)
        collector = ResultCollector()

        Traverser(fetcher, observer=collector, claim_policy=policy, wait_timeout=10).traverse("n0", max_depth)

        distances = shortest_distances(graph, "n0")
        for event in collector.events:
            assert distances[event.resource_id] < max_depth
            assert 1 <= event.depth <= max_depth

    def test_depth_one_fetches_only_root(self, abc_graph):
        fetcher = FixtureFetcher(abc_graph)
        collector = ResultCollector()

        Traverser(fetcher, observer=collector).traverse("A", 1)

        assert collector.found_ids == ["A"]
        assert fetcher.call_count() == 1

    def test_negative_depth_is_rejected(self, abc_graph):
        traverser = Traverser(FixtureFetcher(abc_graph))

        with pytest.raises(ValidationError):
            traverser.traverse("A", -1)
