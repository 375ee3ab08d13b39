"""
Property-based tests for deduplication.

**Property 2: Dedup**
On any graph, cycles included, each identifier is fetched successfully at
most once per run, however many paths reach it concurrently.
"""

from collections import Counter

from hypothesis import given, strategies as st

from link_crawler.concurrent import ClaimPolicy, ResultCollector, Traverser
from link_crawler.crawlers.fixture import FixtureFetcher
from link_crawler.utils.errors import AlreadyVisitedError

from graph_strategies import SlowFetcher, resource_graphs


class TestDedup:
    """Test that no resource is visited twice."""

    @given(graph=resource_graphs(), max_depth=st.integers(min_value=1, max_value=6))
    def test_claim_on_fetch_emits_each_resource_once(self, graph, max_depth):
        fetcher = FixtureFetcher(graph)
        collector = ResultCollector()

        Traverser(fetcher, observer=collector, wait_timeout=10).traverse("n0", max_depth)

        counts = Counter(collector.found_ids)
        assert all(count == 1 for count in counts.values())
        # Every repeated request was answered with AlreadyVisitedError
        for resource_id in graph:
            calls = fetcher.call_count(resource_id)
            if calls > 1:
                rejected = [
                    e for e in collector.events
                    if e.resource_id == resource_id and isinstance(e.error, AlreadyVisitedError)
                ]
                assert len(rejected) == calls - 1

    @given(graph=resource_graphs(), max_depth=st.integers(min_value=1, max_value=6))
    def test_claim_on_spawn_never_calls_fetcher_twice(self, graph, max_depth):
        fetcher = FixtureFetcher(graph)
        collector = ResultCollector()

        Traverser(
            fetcher,
            observer=collector,
            claim_policy=ClaimPolicy.ON_SPAWN,
            wait_timeout=10
        ).traverse("n0", max_depth)

        for resource_id in list(graph) + ["missing-1", "missing-2"]:
            assert fetcher.call_count(resource_id) <= 1
        assert not collector.errors_of_type(AlreadyVisitedError)

    def test_many_parents_racing_for_one_child(self):
        # Twenty pages all link to the same target and are fetched concurrently
        parents = [f"p{i}" for i in range(20)]
        graph = {"root": ("root", parents), "target": ("target", [])}
        graph.update({p: (p, ["target"]) for p in parents})

        for policy in ClaimPolicy:
            fetcher = SlowFetcher(graph, delay=0.005)
            collector = ResultCollector()

            Traverser(fetcher, observer=collector, claim_policy=policy, wait_timeout=10).traverse("root", 3)

            assert collector.found_ids.count("target") == 1
            assert set(collector.found_ids) == {"root", "target", *parents}
            if policy is ClaimPolicy.ON_SPAWN:
                assert fetcher.call_count("target") == 1

    def test_self_loop_is_fetched_once(self):
        fetcher = FixtureFetcher({"loop": ("loop", ["loop", "loop"])})
        collector = ResultCollector()

        Traverser(fetcher, observer=collector, wait_timeout=10).traverse("loop", 5)

        assert collector.found_ids == ["loop"]
        assert collector.errors_of_type(AlreadyVisitedError) == {"loop"}
