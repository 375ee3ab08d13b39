"""
Tests for the HTTP fetcher and the fetcher registry.
"""

from unittest.mock import Mock

import pytest
import requests

from link_crawler.concurrent import ResultCollector, Traverser
from link_crawler.concurrent.thread_safe import VisitedGuard
from link_crawler.crawlers import FetcherRegistry, FixtureFetcher, HTTPFetcher, default_registry, extract_links
from link_crawler.utils.errors import AlreadyVisitedError, ConfigurationError, NotFoundError, TransportError


PAGE = """
<html><body>
  <a href="/docs/">Docs</a>
  <a class="nav" href='https://example.org/blog'>Blog</a>
  <a href="#top">Top</a>
  <a href="mailto:team@example.com">Mail</a>
  <A HREF="guide.html">Guide</A>
</body></html>
"""


def make_response(status_code=200, text="", url="https://example.com/start/"):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.url = url
    return response


class TestExtractLinks:
    """Test anchor extraction."""

    def test_document_order_and_resolution(self):
        links = extract_links(PAGE, "https://example.com/start/")

        assert links == [
            "https://example.com/docs/",
            "https://example.org/blog",
            "https://example.com/start/guide.html",
        ]

    def test_page_without_links(self):
        assert extract_links("<p>nothing here</p>", "https://example.com/") == []


class TestHTTPFetcher:
    """Test status and error mapping on a mocked session."""

    def test_successful_fetch(self):
        session = Mock()
        session.get.return_value = make_response(text=PAGE)
        fetcher = HTTPFetcher(session=session, timeout=3.0)

        result = fetcher.fetch("https://example.com/start/")

        assert result.body == PAGE
        assert len(result.links) == 3
        session.get.assert_called_once_with("https://example.com/start/", timeout=3.0)

    def test_not_found_status(self):
        session = Mock()
        session.get.return_value = make_response(status_code=404)
        fetcher = HTTPFetcher(session=session)

        with pytest.raises(NotFoundError) as exc_info:
            fetcher.fetch("https://example.com/missing")
        assert exc_info.value.details["status_code"] == 404

    def test_server_error_status(self):
        session = Mock()
        session.get.return_value = make_response(status_code=503)
        fetcher = HTTPFetcher(session=session)

        with pytest.raises(TransportError) as exc_info:
            fetcher.fetch("https://example.com/busy")
        assert exc_info.value.resource_id == "https://example.com/busy"

    def test_connection_error(self):
        session = Mock()
        session.get.side_effect = requests.exceptions.ConnectionError("refused")
        fetcher = HTTPFetcher(session=session)

        with pytest.raises(TransportError) as exc_info:
            fetcher.fetch("https://example.com/")
        assert exc_info.value.details["error_type"] == "ConnectionError"

    def test_claimed_resource_is_rejected_without_network(self):
        session = Mock()
        session.get.return_value = make_response(text="<p>hi</p>")
        fetcher = HTTPFetcher(session=session)
        guard = VisitedGuard()

        fetcher.fetch("https://example.com/", guard)
        with pytest.raises(AlreadyVisitedError):
            fetcher.fetch("https://example.com/", guard)
        assert session.get.call_count == 1

    def test_traversal_over_http(self):
        pages = {
            "https://example.com/": '<a href="/a">a</a><a href="/b">b</a>',
            "https://example.com/a": '<a href="/">home</a>',
            "https://example.com/b": "",
        }

        def fake_get(url, timeout):
            if url in pages:
                return make_response(text=pages[url], url=url)
            return make_response(status_code=404, url=url)

        session = Mock()
        session.get.side_effect = fake_get
        collector = ResultCollector()

        with HTTPFetcher(session=session) as fetcher:
            Traverser(fetcher, observer=collector, wait_timeout=10).traverse("https://example.com/", 3)

        assert set(collector.found_ids) == set(pages)
        session.close.assert_called_once()


class TestFetcherRegistry:
    """Test fetcher lookup by name."""

    def test_default_registry(self):
        assert default_registry.list_fetchers() == ["fixture", "http"]
        assert isinstance(default_registry.create("fixture"), FixtureFetcher)

        fetcher = default_registry.create("http", timeout=2.0)
        try:
            assert isinstance(fetcher, HTTPFetcher)
            assert fetcher.timeout == 2.0
        finally:
            fetcher.close()

    def test_unknown_fetcher(self):
        registry = FetcherRegistry()

        with pytest.raises(ConfigurationError) as exc_info:
            registry.create("ftp")
        assert exc_info.value.details["available_fetchers"] == []
